# -*- coding: utf-8 -*-
########################
# music_bar.py
########################
# Purpose:
# - Bucket a chart's notes into the song-progress bar shown on the song select screen.
# - The bar has a fixed number of buckets spread evenly over the song length.
#
# Design notes:
# - Runs after compilation and needs the song length and calibration offset from the I/O layer.
# - Returns new Note values with music_bar_index / music_bar_long_index set. Inputs are untouched.
# - Bucket indexes are clamped into range; notes before the lead-in land in bucket 0.
#
########################
# Interfaces:
# Public dataclasses:
# - MusicBarResult(notes: tuple[Note, ...], counts: tuple[int, ...])
#
# Public functions:
# - bar_index_for_time(time_seconds: float, *, divide_seconds: float, offset_seconds: float, bar_count: int) -> int
# - assign_music_bars(notes, *, song_length_seconds, start_offset_seconds=0.0, bar_count=120,
#                     lead_in_seconds=DEFAULT_LEAD_IN_SECONDS) -> MusicBarResult
#
########################

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
import math
from typing import Iterable, List, Tuple

from gameplay_models import GridCoordinate, Note
from scoring import DEFAULT_BAR_COUNT

# Marker travel time before a note reaches its judgement frame (29 frames at 60 fps).
DEFAULT_LEAD_IN_SECONDS = 29.0 / 60.0


@dataclass(frozen=True)
class MusicBarResult:
    notes: Tuple[Note, ...]
    counts: Tuple[int, ...]


def bar_index_for_time(time_seconds: float, *, divide_seconds: float, offset_seconds: float, bar_count: int) -> int:
    index = int(math.floor((float(time_seconds) - float(offset_seconds)) / float(divide_seconds)))
    return max(0, min(int(bar_count) - 1, index))


def assign_music_bars(
    notes: Iterable[Note],
    *,
    song_length_seconds: float,
    start_offset_seconds: float = 0.0,
    bar_count: int = DEFAULT_BAR_COUNT,
    lead_in_seconds: float = DEFAULT_LEAD_IN_SECONDS,
) -> MusicBarResult:
    if float(song_length_seconds) <= 0.0:
        raise ValueError(f"song_length_seconds must be positive, got {song_length_seconds!r}")
    if int(bar_count) <= 0:
        raise ValueError(f"bar_count must be positive, got {bar_count!r}")

    divide_seconds = float(song_length_seconds) / int(bar_count)
    offset_seconds = float(lead_in_seconds) - float(start_offset_seconds)
    counts: List[int] = [0] * int(bar_count)
    assigned: List[Note] = []

    for note in notes:
        start_index = bar_index_for_time(
            note.start_time, divide_seconds=divide_seconds, offset_seconds=offset_seconds, bar_count=bar_count
        )
        counts[start_index] += 1
        long_index = -1
        if note.finish_time is not None:
            long_index = bar_index_for_time(
                note.finish_time, divide_seconds=divide_seconds, offset_seconds=offset_seconds, bar_count=bar_count
            )
            counts[long_index] += 1
        assigned.append(dataclasses.replace(note, music_bar_index=start_index, music_bar_long_index=long_index))

    return MusicBarResult(notes=tuple(assigned), counts=tuple(counts))


def _run_unit_tests() -> None:
    plain = Note(measure_index=0, start=GridCoordinate(0, 0), start_time=10.0)
    held = Note(measure_index=0, start=GridCoordinate(1, 1), start_time=20.0, end=GridCoordinate(1, 2), finish_time=40.0)
    result = assign_music_bars([plain, held], song_length_seconds=120.0, lead_in_seconds=0.0)
    assert [note.music_bar_index for note in result.notes] == [10, 20]
    assert result.notes[1].music_bar_long_index == 40
    assert sum(result.counts) == 3
    assert plain.music_bar_index == -1

    assert bar_index_for_time(-1.0, divide_seconds=1.0, offset_seconds=0.0, bar_count=120) == 0
    assert bar_index_for_time(999.0, divide_seconds=1.0, offset_seconds=0.0, bar_count=120) == 119


if __name__ == "__main__":
    _run_unit_tests()
    print("music_bar.py: ok")
