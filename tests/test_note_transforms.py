"""
gridbeat - Note Transform Tests

Covers rotation, permutation remap (including the diagonal long-note
collapse), row/column remap and play-mode application.
"""

from __future__ import annotations

import random

import pytest

from gameplay_models import CELL_COUNT, GridCoordinate, Note, PlayMode
from note_transforms import apply_play_mode, remap_note, remap_note_axes, rotate_coordinate, rotate_note


def _long_note(start: GridCoordinate, end: GridCoordinate) -> Note:
    return Note(measure_index=2, start=start, start_time=1.5, end=end, finish_time=2.5)


class TestRotation:
    @pytest.mark.parametrize(
        "degrees, expected",
        [(0, GridCoordinate(0, 0)), (90, GridCoordinate(3, 0)), (180, GridCoordinate(3, 3)), (270, GridCoordinate(0, 3)), (360, GridCoordinate(0, 0))],
    )
    def test_corner_rotation(self, degrees, expected):
        note = Note(measure_index=0, start=GridCoordinate(0, 0), start_time=0.0)
        assert rotate_note(note, degrees).start == expected

    def test_rotation_formula_for_every_cell(self):
        for index in range(CELL_COUNT):
            cell = GridCoordinate.from_index(index)
            assert rotate_coordinate(cell, 90) == GridCoordinate(3 - cell.column, cell.row)
            assert rotate_coordinate(cell, 180) == GridCoordinate(3 - cell.row, 3 - cell.column)
            assert rotate_coordinate(cell, 270) == GridCoordinate(cell.column, 3 - cell.row)

    def test_four_quarter_turns_are_identity(self):
        note = _long_note(GridCoordinate(1, 2), GridCoordinate(1, 0))
        rotated = note
        for _ in range(4):
            rotated = rotate_note(rotated, 90)
        assert rotated == note

    def test_long_note_end_rotates_and_timing_is_kept(self):
        note = _long_note(GridCoordinate(1, 2), GridCoordinate(1, 0))
        rotated = rotate_note(note, 90)
        assert rotated.start == GridCoordinate(1, 1)
        assert rotated.end == GridCoordinate(3, 1)
        assert (rotated.start_time, rotated.finish_time, rotated.measure_index) == (1.5, 2.5, 2)
        assert note.start == GridCoordinate(1, 2)


class TestRemap:
    def test_identity_permutation(self):
        note = _long_note(GridCoordinate(0, 0), GridCoordinate(0, 3))
        assert remap_note(note, list(range(CELL_COUNT))) == note

    def test_plain_note_moves_to_table_cell(self):
        table = list(reversed(range(CELL_COUNT)))
        note = Note(measure_index=0, start=GridCoordinate(0, 1), start_time=0.0)
        assert remap_note(note, table).start == GridCoordinate(3, 2)

    @pytest.mark.parametrize(
        "collapse, expected_end",
        [("row", GridCoordinate(1, 2)), ("column", GridCoordinate(2, 1))],
    )
    def test_diagonal_long_note_is_collapsed(self, collapse, expected_end):
        table = list(range(CELL_COUNT))
        table[4], table[5] = 5, 4
        table[6], table[10] = 10, 6
        note = _long_note(GridCoordinate(1, 0), GridCoordinate(1, 2))
        remapped = remap_note(note, table, collapse=collapse)
        assert remapped.start == GridCoordinate(1, 1)
        assert remapped.end == expected_end

    def test_seeded_rng_is_reproducible(self):
        table = list(range(CELL_COUNT))
        table[4], table[5] = 5, 4
        table[6], table[10] = 10, 6
        note = _long_note(GridCoordinate(1, 0), GridCoordinate(1, 2))
        first = remap_note(note, table, rng=random.Random(7))
        second = remap_note(note, table, rng=random.Random(7))
        assert first == second
        assert first.start.row == first.end.row or first.start.column == first.end.column

    def test_invalid_permutation_raises(self):
        note = Note(measure_index=0, start=GridCoordinate(0, 0), start_time=0.0)
        with pytest.raises(ValueError):
            remap_note(note, [0] * CELL_COUNT)
        with pytest.raises(ValueError):
            remap_note(note, list(range(CELL_COUNT)), collapse="diagonal")

    def test_axes_remap(self):
        note = _long_note(GridCoordinate(0, 1), GridCoordinate(0, 3))
        remapped = remap_note_axes(note, rows=[3, 2, 1, 0], columns=[1, 0, 3, 2])
        assert remapped.start == GridCoordinate(3, 0)
        assert remapped.end == GridCoordinate(3, 2)

    def test_axes_remap_rejects_short_tables(self):
        note = Note(measure_index=0, start=GridCoordinate(0, 0), start_time=0.0)
        with pytest.raises(ValueError):
            remap_note_axes(note, rows=[0, 1, 2], columns=[0, 1, 2, 3])


class TestPlayMode:
    def test_normal_mode_keeps_notes(self):
        notes = [Note(measure_index=0, start=GridCoordinate(0, 0), start_time=0.0)]
        assert apply_play_mode(notes, PlayMode.NORMAL) == notes

    def test_rotation_modes(self):
        notes = [Note(measure_index=0, start=GridCoordinate(0, 0), start_time=0.0)]
        assert apply_play_mode(notes, PlayMode.DEGREE_180)[0].start == GridCoordinate(3, 3)

    @pytest.mark.parametrize("mode", [PlayMode.RANDOM, PlayMode.FULL_RANDOM, PlayMode.HALF_RANDOM])
    def test_random_modes_are_not_implemented(self, mode):
        with pytest.raises(NotImplementedError):
            apply_play_mode([], mode)
