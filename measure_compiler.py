# -*- coding: utf-8 -*-
########################
# measure_compiler.py
########################
# Purpose:
# - Convert one measure block (glyph rows + timing-code rows) into absolute-time Note values.
# - Resolve long-note direction glyphs against the timing map.
#
# Key Logic:
# - Timing map: each timing-code character maps to the running offset before it advances.
#   Per-character duration is 60 / (bpm * max(4, len(row))). The offset carries across rows and is returned
#   as the next measure's start offset.
# - Glyph rows form 4x4 grids, 4 rows each. Per grid, direction glyphs resolve first (row-major), then every
#   unclaimed cell whose glyph has a timing emits a plain note.
# - A direction glyph scans away from itself for the first cell with a timed, unclaimed glyph. That cell is the
#   long note's start; the direction glyph's own cell is the long note's end. The finish time arrives later,
#   from the next plain note on the start cell (see chart.Chart.add_note).
#
########################
# Interfaces:
# Public dataclasses:
# - UnresolvedDirection(measure_index: int, row: int, column: int, glyph: str)
# - MeasureResult(notes: tuple[Note, ...], next_start_offset: float, unresolved: tuple[UnresolvedDirection, ...])
#
# Public functions:
# - build_timing_map(timing_rows: Sequence[str], *, bpm: float, start_offset: float) -> tuple[dict[str, float], float]
# - compile_measure(block: MeasureBlock, *, bpm: float, start_offset: float, source_name: str = "<chart>") -> MeasureResult
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from loguru import logger

from chart_text import FormatError, MeasureBlock
from gameplay_models import GRID_SIZE, GridCoordinate, Note

# glyph -> (row step, column step) of the search for the long note's start cell
DIRECTION_STEPS: Dict[str, Tuple[int, int]] = {
    "^": (-1, 0),
    "∧": (-1, 0),
    "∨": (1, 0),
    "Ｖ": (1, 0),
    ">": (0, 1),
    "＞": (0, 1),
    "<": (0, -1),
    "＜": (0, -1),
}


@dataclass(frozen=True)
class UnresolvedDirection:
    measure_index: int
    row: int
    column: int
    glyph: str


@dataclass(frozen=True)
class MeasureResult:
    notes: Tuple[Note, ...]
    next_start_offset: float
    unresolved: Tuple[UnresolvedDirection, ...]


def build_timing_map(timing_rows: Sequence[str], *, bpm: float, start_offset: float) -> Tuple[Dict[str, float], float]:
    bpm_value = float(bpm)
    if bpm_value <= 0.0:
        raise ValueError(f"bpm must be positive, got {bpm!r}")

    timing_map: Dict[str, float] = {}
    offset = float(start_offset)
    for timing_row in timing_rows:
        # Rows shorter than 4 still step in quarter beats.
        step_seconds = 60.0 / (bpm_value * max(4, len(timing_row)))
        for timing_char in timing_row:
            timing_map[timing_char] = offset
            offset += step_seconds
    return timing_map, offset


def _split_grids(grid_rows: Sequence[str], block: MeasureBlock, source_name: str) -> List[Tuple[str, ...]]:
    if len(grid_rows) % GRID_SIZE != 0:
        raise FormatError(
            f"Measure {block.index} has {len(grid_rows)} glyph rows; expected a multiple of {GRID_SIZE}",
            source_name=source_name,
            line_number=block.line_number,
        )
    return [tuple(grid_rows[index:index + GRID_SIZE]) for index in range(0, len(grid_rows), GRID_SIZE)]


def _find_long_note_start(
    grid: Tuple[str, ...],
    row: int,
    column: int,
    step: Tuple[int, int],
    timing_map: Dict[str, float],
    claimed: Set[int],
) -> Optional[Tuple[int, int, float]]:
    row_step, column_step = step
    search_row = row + row_step
    search_column = column + column_step
    while 0 <= search_row < GRID_SIZE and 0 <= search_column < GRID_SIZE:
        cell_index = search_row * GRID_SIZE + search_column
        glyph = grid[search_row][search_column]
        if cell_index not in claimed and glyph in timing_map:
            return search_row, search_column, timing_map[glyph]
        search_row += row_step
        search_column += column_step
    return None


class _CellBuckets:
    """Per-cell note lists kept in start-time order. Equal times keep insertion order."""

    def __init__(self) -> None:
        self._buckets: Dict[int, List[Note]] = {}

    def add(self, note: Note) -> None:
        bucket = self._buckets.setdefault(note.start.index, [])
        for position, existing in enumerate(bucket):
            if existing.start_time > note.start_time:
                bucket.insert(position, note)
                return
        bucket.append(note)

    def flatten(self) -> Tuple[Note, ...]:
        return tuple(note for bucket in self._buckets.values() for note in bucket)


def compile_measure(
    block: MeasureBlock,
    *,
    bpm: float,
    start_offset: float,
    source_name: str = "<chart>",
) -> MeasureResult:
    timing_map, next_start_offset = build_timing_map(block.timing_rows, bpm=bpm, start_offset=start_offset)
    buckets = _CellBuckets()
    unresolved: List[UnresolvedDirection] = []

    for grid in _split_grids(block.grid_rows, block, source_name):
        claimed: Set[int] = set()

        for row in range(GRID_SIZE):
            for column in range(GRID_SIZE):
                glyph = grid[row][column]
                step = DIRECTION_STEPS.get(glyph)
                if step is None:
                    continue
                found = _find_long_note_start(grid, row, column, step, timing_map, claimed)
                if found is None:
                    logger.warning(
                        "{}: direction glyph {!r} at measure {} row {} column {} has no timed glyph to link; skipped",
                        source_name,
                        glyph,
                        block.index,
                        row,
                        column,
                    )
                    unresolved.append(UnresolvedDirection(measure_index=block.index, row=row, column=column, glyph=glyph))
                    continue
                start_row, start_column, start_time = found
                claimed.add(start_row * GRID_SIZE + start_column)
                buckets.add(
                    Note(
                        measure_index=block.index,
                        start=GridCoordinate(row=start_row, column=start_column),
                        start_time=start_time,
                        end=GridCoordinate(row=row, column=column),
                    )
                )

        for row in range(GRID_SIZE):
            for column in range(GRID_SIZE):
                glyph = grid[row][column]
                if row * GRID_SIZE + column in claimed or glyph not in timing_map:
                    continue
                buckets.add(
                    Note(
                        measure_index=block.index,
                        start=GridCoordinate(row=row, column=column),
                        start_time=timing_map[glyph],
                    )
                )

    notes = buckets.flatten()
    logger.debug(
        "{}: measure {} compiled at {} BPM, {} notes, offset {:.6f} -> {:.6f}",
        source_name,
        block.index,
        bpm,
        len(notes),
        float(start_offset),
        next_start_offset,
    )
    return MeasureResult(notes=notes, next_start_offset=next_start_offset, unresolved=tuple(unresolved))


def _run_unit_tests() -> None:
    timing_map, next_offset = build_timing_map(["①②③④"], bpm=120.0, start_offset=1.0)
    assert [timing_map[char] for char in "①②③④"] == [1.0, 1.125, 1.25, 1.375]
    assert next_offset == 1.5

    block = MeasureBlock(
        index=0,
        grid_rows=("①口口口", "^口口口", "口口口口", "口口口口"),
        timing_rows=("①－－－",),
        line_number=1,
    )
    result = compile_measure(block, bpm=120.0, start_offset=0.0)
    assert len(result.notes) == 1
    long_note = result.notes[0]
    assert long_note.is_long
    assert long_note.start == GridCoordinate(0, 0)
    assert long_note.end == GridCoordinate(1, 0)
    assert long_note.start_time == 0.0


if __name__ == "__main__":
    _run_unit_tests()
    print("measure_compiler.py: ok")
