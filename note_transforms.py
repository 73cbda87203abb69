# -*- coding: utf-8 -*-
########################
# note_transforms.py
########################
# Purpose:
# - Grid transforms over Note values: rotation, permutation remap and row/column remap.
# - Applies a PlayMode to a whole note list before a play session.
#
# Design notes:
# - Pure value transforms. Input notes are never modified; timing fields are carried over unchanged.
# - A permutation remap can turn a long note into a diagonal shape. The end cell is then collapsed onto the
#   start row or start column. The choice comes from a caller-supplied random.Random or an explicit collapse.
#
########################
# Interfaces:
# Public functions:
# - rotate_coordinate(coordinate: GridCoordinate, degrees: int) -> GridCoordinate
# - rotate_note(note: Note, degrees: int) -> Note
# - remap_note(note: Note, permutation: Sequence[int], *, rng: Optional[random.Random] = None,
#              collapse: Optional[str] = None) -> Note
# - remap_note_axes(note: Note, rows: Sequence[int], columns: Sequence[int]) -> Note
# - apply_play_mode(notes: Iterable[Note], mode: PlayMode) -> list[Note]
#
########################

from __future__ import annotations

import dataclasses
import random
from typing import Iterable, List, Optional, Sequence

from gameplay_models import CELL_COUNT, GRID_SIZE, GridCoordinate, Note, PlayMode

_LAST = GRID_SIZE - 1

_MODE_DEGREES = {
    PlayMode.NORMAL: 0,
    PlayMode.DEGREE_90: 90,
    PlayMode.DEGREE_180: 180,
    PlayMode.DEGREE_270: 270,
}


def rotate_coordinate(coordinate: GridCoordinate, degrees: int) -> GridCoordinate:
    quarter_turns = int(degrees) % 360 // 90
    row = coordinate.row
    column = coordinate.column
    if quarter_turns == 1:
        return GridCoordinate(row=_LAST - column, column=row)
    if quarter_turns == 2:
        return GridCoordinate(row=_LAST - row, column=_LAST - column)
    if quarter_turns == 3:
        return GridCoordinate(row=column, column=_LAST - row)
    return coordinate


def rotate_note(note: Note, degrees: int) -> Note:
    end = rotate_coordinate(note.end, degrees) if note.end is not None else None
    return dataclasses.replace(note, start=rotate_coordinate(note.start, degrees), end=end)


def _validate_permutation(table: Sequence[int], size: int, label: str) -> List[int]:
    values = [int(item) for item in table]
    if len(values) != size or sorted(values) != list(range(size)):
        raise ValueError(f"{label} must be a permutation of 0..{size - 1}, got: {list(table)!r}")
    return values


def remap_note(
    note: Note,
    permutation: Sequence[int],
    *,
    rng: Optional[random.Random] = None,
    collapse: Optional[str] = None,
) -> Note:
    """Move a note through a 16-entry cell permutation (new_index = permutation[old_index]).

    collapse may be "row" or "column" to make the diagonal long-note fix deterministic.
    Otherwise rng.randrange(2) picks: 0 collapses the end row, 1 the end column.
    """
    table = _validate_permutation(permutation, CELL_COUNT, "permutation")
    if collapse not in (None, "row", "column"):
        raise ValueError(f"collapse must be 'row', 'column' or None, got: {collapse!r}")

    start = GridCoordinate.from_index(table[note.start.index])
    if note.end is None:
        return dataclasses.replace(note, start=start)

    end = GridCoordinate.from_index(table[note.end.index])
    if start.row != end.row and start.column != end.column:
        if collapse is None:
            chooser = rng if rng is not None else random.Random()
            collapse = "row" if chooser.randrange(2) == 0 else "column"
        if collapse == "row":
            end = GridCoordinate(row=start.row, column=end.column)
        else:
            end = GridCoordinate(row=end.row, column=start.column)
    return dataclasses.replace(note, start=start, end=end)


def remap_note_axes(note: Note, rows: Sequence[int], columns: Sequence[int]) -> Note:
    # Row and column are permuted independently, so a long note stays straight.
    row_table = _validate_permutation(rows, GRID_SIZE, "rows")
    column_table = _validate_permutation(columns, GRID_SIZE, "columns")
    start = GridCoordinate(row=row_table[note.start.row], column=column_table[note.start.column])
    end = None
    if note.end is not None:
        end = GridCoordinate(row=row_table[note.end.row], column=column_table[note.end.column])
    return dataclasses.replace(note, start=start, end=end)


def apply_play_mode(notes: Iterable[Note], mode: PlayMode) -> List[Note]:
    if mode not in _MODE_DEGREES:
        raise NotImplementedError(f"Play mode {mode.value!r} is not implemented")
    degrees = _MODE_DEGREES[mode]
    if degrees == 0:
        return list(notes)
    return [rotate_note(note, degrees) for note in notes]


def _run_unit_tests() -> None:
    note = Note(measure_index=0, start=GridCoordinate(0, 0), start_time=0.5)
    assert rotate_note(note, 90).start == GridCoordinate(3, 0)
    assert rotate_note(note, 360) == note
    assert rotate_note(note, 180).start == GridCoordinate(3, 3)
    assert rotate_note(note, 270).start == GridCoordinate(0, 3)

    long_note = Note(measure_index=0, start=GridCoordinate(1, 0), start_time=0.5, end=GridCoordinate(1, 2), finish_time=1.0)
    # Swapping cells 4 and 5 and cells 6 and 10 makes the long note diagonal.
    table = list(range(CELL_COUNT))
    table[4], table[5] = 5, 4
    table[6], table[10] = 10, 6
    remapped = remap_note(long_note, table, collapse="row")
    assert remapped.start == GridCoordinate(1, 1)
    assert remapped.end == GridCoordinate(1, 2)
    assert remapped.finish_time == 1.0


if __name__ == "__main__":
    _run_unit_tests()
    print("note_transforms.py: ok")
