# -*- coding: utf-8 -*-
########################
# gameplay_models.py
########################
# Purpose:
# - Core value types shared by the chart compiler, note transforms and scoring.
# - Defines grid addressing (GridCoordinate), the Note event and the small enums used across modules.
#
# Design notes:
# - Keep these models stable. Prefer extending with new optional fields rather than breaking changes.
# - All dataclasses are frozen. "Mutation" is dataclasses.replace producing a new value.
# - No I/O here. Plain values only.
#
########################
# Interfaces:
# Public constants:
# - GRID_SIZE = 4
# - CELL_COUNT = 16
#
# Public enums:
# - class Difficulty(enum.Enum): BASIC | ADVANCED | EXTREME
# - class JudgementRank(enum.IntEnum): PERFECT=0 | GREAT=1 | GOOD=2 | MISS=3
# - class PlayMode(enum.Enum): NORMAL | DEGREE_90 | DEGREE_180 | DEGREE_270 | RANDOM | FULL_RANDOM | HALF_RANDOM
#
# Public dataclasses:
# - GridCoordinate(row: int, column: int)
#   - index -> int
#   - from_index(index: int) -> GridCoordinate
# - Note(measure_index: int, start: GridCoordinate, start_time: float,
#        end: Optional[GridCoordinate] = None, finish_time: Optional[float] = None,
#        music_bar_index: int = -1, music_bar_long_index: int = -1)
#   - is_long -> bool
#   - row -> int, column -> int
#
# Inputs/Outputs:
# - Produced by measure_compiler and chart, consumed by note_transforms, music_bar and callers.
#
########################

from __future__ import annotations

from dataclasses import dataclass
import enum
from typing import Optional


GRID_SIZE = 4
CELL_COUNT = GRID_SIZE * GRID_SIZE


class Difficulty(enum.Enum):
    BASIC = "basic"
    ADVANCED = "advanced"
    EXTREME = "extreme"


class JudgementRank(enum.IntEnum):
    PERFECT = 0
    GREAT = 1
    GOOD = 2
    MISS = 3


class PlayMode(enum.Enum):
    NORMAL = "normal"
    DEGREE_90 = "degree90"
    DEGREE_180 = "degree180"
    DEGREE_270 = "degree270"
    RANDOM = "random"
    FULL_RANDOM = "full_random"
    HALF_RANDOM = "half_random"


def normalize_difficulty(difficulty: object) -> Difficulty:
    if isinstance(difficulty, Difficulty):
        return difficulty
    difficulty_text = str(difficulty or "").strip().lower()
    for item in Difficulty:
        if item.value == difficulty_text:
            return item
    raise ValueError(
        f"Unsupported difficulty: {difficulty!r}. Allowed: {[item.value for item in Difficulty]}"
    )


def normalize_play_mode(mode: object) -> PlayMode:
    if isinstance(mode, PlayMode):
        return mode
    mode_text = str(mode or "").strip().lower()
    for item in PlayMode:
        if item.value == mode_text:
            return item
    raise ValueError(f"Unsupported play mode: {mode!r}. Allowed: {[item.value for item in PlayMode]}")


@dataclass(frozen=True)
class GridCoordinate:
    row: int
    column: int

    def __post_init__(self) -> None:
        if not (0 <= int(self.row) < GRID_SIZE) or not (0 <= int(self.column) < GRID_SIZE):
            raise ValueError(f"Grid coordinate out of range: ({self.row}, {self.column})")

    @property
    def index(self) -> int:
        return int(self.row) * GRID_SIZE + int(self.column)

    @classmethod
    def from_index(cls, index: int) -> "GridCoordinate":
        value = int(index)
        if not (0 <= value < CELL_COUNT):
            raise ValueError(f"Grid index out of range: {index!r}")
        return cls(row=value // GRID_SIZE, column=value % GRID_SIZE)


@dataclass(frozen=True)
class Note:
    measure_index: int
    start: GridCoordinate
    start_time: float
    end: Optional[GridCoordinate] = None
    finish_time: Optional[float] = None
    # Assigned by music_bar.assign_music_bars, not part of timing identity.
    music_bar_index: int = -1
    music_bar_long_index: int = -1

    @property
    def is_long(self) -> bool:
        return self.end is not None

    @property
    def row(self) -> int:
        return self.start.row

    @property
    def column(self) -> int:
        return self.start.column

    def timing_key(self) -> tuple:
        end_index = self.end.index if self.end is not None else -1
        return (self.start_time, self.start.index, end_index, self.finish_time)


def _run_unit_tests() -> None:
    coordinate = GridCoordinate(row=2, column=3)
    assert coordinate.index == 11
    assert GridCoordinate.from_index(11) == coordinate

    try:
        GridCoordinate(row=4, column=0)
    except ValueError:
        pass
    else:
        raise AssertionError("Expected ValueError for out of range row")

    plain = Note(measure_index=0, start=coordinate, start_time=1.0)
    assert not plain.is_long
    long_note = Note(measure_index=0, start=coordinate, start_time=1.0, end=GridCoordinate(0, 3))
    assert long_note.is_long and long_note.finish_time is None

    assert normalize_difficulty("Extreme") is Difficulty.EXTREME
    assert normalize_play_mode("degree90") is PlayMode.DEGREE_90


if __name__ == "__main__":
    _run_unit_tests()
    print("gameplay_models.py: ok")
