# -*- coding: utf-8 -*-
########################
# chart.py
########################
# Purpose:
# - Aggregate compiled measures into one Chart: per-cell note buckets, BPM list, clap timings, note count.
# - Drive the full compile: chart_text entries -> measure_compiler -> Chart.add_note.
#
# Design notes:
# - A Chart is built once by compile_chart and then treated as read-only.
# - A cell carries at most one open long note. The next later note on that cell closes it (sets finish_time).
#   A plain closer is not stored as a note of its own; a long closer is stored and becomes the open one.
# - note_list() order is deterministic: buckets in first-seen order, stable sort by start_time.
#
########################
# Interfaces:
# Public classes:
# - class Chart
#   - __init__(*, difficulty: Difficulty, level: float = 1.0, source_name: str = "<chart>")
#   - add_note(note: Note) -> None
#   - add_bpm(bpm: float) -> None
#   - current_bpm() -> Optional[float]
#   - note_list() -> list[Note]
#   - clap_timings() -> list[float]
#   - bpm_range() -> tuple[float, float]
#   - bpm_string() -> str
#   - properties: note_count, is_long, bpm_list, unresolved_directions
#
# Public functions:
# - compile_chart(lines: Sequence[str], *, difficulty: Difficulty | str = Difficulty.EXTREME,
#                 source_name: str = "<chart>") -> Chart
#   - Raises chart_text.ChartParseError subclasses (FormatError, MissingBpmError). No partial chart.
#
########################

from __future__ import annotations

import dataclasses
from typing import Dict, List, Optional, Sequence, Set, Tuple

from loguru import logger

from chart_text import BpmDirective, MissingBpmError, parse_chart_text
from gameplay_models import Difficulty, Note, normalize_difficulty
from measure_compiler import UnresolvedDirection, compile_measure


class Chart:
    def __init__(self, *, difficulty: Difficulty, level: float = 1.0, source_name: str = "<chart>") -> None:
        self.difficulty = difficulty
        self.level = float(level)
        self.source_name = str(source_name)
        self._bpm_list: List[float] = []
        self._clap_timings: Set[float] = set()
        self._grid_notes: Dict[int, List[Note]] = {}
        self._note_count = 0
        self._is_long = False
        self._unresolved: List[UnresolvedDirection] = []
        self._sorted_notes: Optional[List[Note]] = None

    @property
    def note_count(self) -> int:
        return self._note_count

    @property
    def is_long(self) -> bool:
        return self._is_long

    @property
    def bpm_list(self) -> List[float]:
        return list(self._bpm_list)

    @property
    def unresolved_directions(self) -> List[UnresolvedDirection]:
        return list(self._unresolved)

    def add_bpm(self, bpm: float) -> None:
        self._bpm_list.append(float(bpm))

    def current_bpm(self) -> Optional[float]:
        return self._bpm_list[-1] if self._bpm_list else None

    def add_unresolved(self, items: Sequence[UnresolvedDirection]) -> None:
        self._unresolved.extend(items)

    def add_note(self, note: Note) -> None:
        if note.is_long:
            self._is_long = True
        self._clap_timings.add(float(note.start_time))
        self._sorted_notes = None

        bucket = self._grid_notes.get(note.start.index)
        if bucket is None:
            self._grid_notes[note.start.index] = [note]
            self._note_count += 1
            return

        last_note = bucket[-1]
        if last_note.is_long and last_note.finish_time is None and note.start_time > last_note.start_time:
            bucket[-1] = dataclasses.replace(last_note, finish_time=float(note.start_time))
            if not note.is_long:
                return

        bucket.append(note)
        self._note_count += 1

    def note_list(self) -> List[Note]:
        if self._sorted_notes is None:
            flattened = [note for bucket in self._grid_notes.values() for note in bucket]
            self._sorted_notes = sorted(flattened, key=lambda note: note.start_time)
        return list(self._sorted_notes)

    def clap_timings(self) -> List[float]:
        return sorted(self._clap_timings)

    def bpm_range(self) -> Tuple[float, float]:
        if not self._bpm_list:
            raise ValueError(f"{self.source_name}: chart has no BPM directives")
        return min(self._bpm_list), max(self._bpm_list)

    def bpm_string(self) -> str:
        minimum, maximum = self.bpm_range()
        if abs(maximum - minimum) < 0.01:
            return f"{minimum:g}"
        return f"{minimum:g}-{maximum:g}"


def compile_chart(
    lines: Sequence[str],
    *,
    difficulty: object = Difficulty.EXTREME,
    source_name: str = "<chart>",
) -> Chart:
    source = parse_chart_text(lines, source_name=source_name)
    chart = Chart(difficulty=normalize_difficulty(difficulty), level=source.level, source_name=source_name)

    start_offset = 0.0
    for entry in source.entries:
        if isinstance(entry, BpmDirective):
            chart.add_bpm(entry.value)
            continue

        bpm = chart.current_bpm()
        if bpm is None:
            raise MissingBpmError(
                f"Measure {entry.index} appears before any BPM directive",
                source_name=source_name,
                line_number=entry.line_number,
            )
        result = compile_measure(entry, bpm=bpm, start_offset=start_offset, source_name=source_name)
        for note in result.notes:
            chart.add_note(note)
        chart.add_unresolved(result.unresolved)
        start_offset = result.next_start_offset

    logger.info(
        "{}: compiled {} chart, level {:g}, BPM {}, {} notes",
        source_name,
        chart.difficulty.value,
        chart.level,
        chart.bpm_string() if chart.bpm_list else "-",
        chart.note_count,
    )
    return chart


def _run_unit_tests() -> None:
    lines = [
        "lev 9",
        "bpm120",
        "①口口口|①②③④",
        "^口口口",
        "口口②口",
        "口口口口",
        "③口口口",
        "口口口口",
        "口口口口",
        "口口口④",
    ]
    chart = compile_chart(lines, difficulty="basic", source_name="unit")
    notes = chart.note_list()
    assert chart.note_count == len(notes) == 3
    long_note = notes[0]
    assert long_note.is_long
    assert long_note.start_time == 0.0
    assert long_note.finish_time == 0.25
    assert [note.start_time for note in notes] == sorted(note.start_time for note in notes)
    assert chart.bpm_string() == "120"

    try:
        compile_chart(["①口口口|①", "口口口口", "口口口口", "口口口口"])
    except MissingBpmError:
        pass
    else:
        raise AssertionError("Expected MissingBpmError")


if __name__ == "__main__":
    _run_unit_tests()
    print("chart.py: ok")
