# -*- coding: utf-8 -*-
########################
# scoring.py
########################
# Purpose:
# - Judgement to score model for one play session.
# - Tracks early/late tallies per rank, combo, the shutter meter and a per-bar judgement histogram.
#
# Design notes:
# - Pure gameplay logic. Timing comparison happens upstream; this module only consumes ranks.
# - Score is recomputed from the tallies on every read, never accumulated.
# - A scorer needs a non-empty chart. note_count <= 0 is rejected at construction.
#
########################
# Interfaces:
# Public constants:
# - SHUTTER_MAX = 1024
# - DEFAULT_BAR_COUNT = 120
#
# Public exceptions:
# - class EmptyChartError(ValueError)
#
# Public dataclasses:
# - ScoreSnapshot(score, shutter_score, total_score, combo, max_combo, shutter_point, early, late, bar_scores)
#
# Public classes:
# - class JudgementScorer
#   - __init__(note_count: int, *, bar_count: int = DEFAULT_BAR_COUNT)
#   - reset() -> None
#   - record_judgement(rank: JudgementRank | int, is_early: bool = False, bar_index: Optional[int] = None) -> None
#   - score() -> int
#   - shutter_score() -> int
#   - total_score() -> int
#   - rank_totals() -> dict[JudgementRank, int]
#   - snapshot() -> ScoreSnapshot
#
# Inputs:
# - Judgement ranks from the gameplay loop, with an early/late flag and an optional bar index.
#
# Outputs:
# - Score, shutter score, combo and the bar histogram for UI and result storage.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from gameplay_models import JudgementRank

SHUTTER_MAX = 1024
DEFAULT_BAR_COUNT = 120
SCORE_SCALE = 90_000
SHUTTER_SCORE_SCALE = 100_000

# Weight of each rank in score(), indexed by JudgementRank.
RANK_WEIGHTS = (10, 7, 4, 1)


class EmptyChartError(ValueError):
    """Raised when a scorer is created for a chart with no notes."""


@dataclass(frozen=True)
class ScoreSnapshot:
    score: int
    shutter_score: int
    total_score: int
    combo: int
    max_combo: int
    shutter_point: int
    early: Tuple[int, ...]
    late: Tuple[int, ...]
    bar_scores: Tuple[int, ...]


class JudgementScorer:
    def __init__(self, note_count: int, *, bar_count: int = DEFAULT_BAR_COUNT) -> None:
        if int(note_count) <= 0:
            raise EmptyChartError(f"Cannot score a chart with {note_count} notes")
        if int(bar_count) <= 0:
            raise ValueError(f"bar_count must be positive, got {bar_count!r}")
        self._note_count = int(note_count)
        self._bar_count = int(bar_count)
        self.reset()

    def reset(self) -> None:
        self.combo = 0
        self.max_combo = 0
        self.shutter_point = 0
        self.early: List[int] = [0] * len(JudgementRank)
        self.late: List[int] = [0] * len(JudgementRank)
        self.bar_scores: List[int] = [0] * self._bar_count

    @property
    def note_count(self) -> int:
        return self._note_count

    def _shutter_delta(self, rank: JudgementRank) -> int:
        divisor = min(SHUTTER_MAX, self._note_count)
        if rank in (JudgementRank.PERFECT, JudgementRank.GREAT):
            return 2048 // divisor
        if rank == JudgementRank.GOOD:
            return 1024 // divisor
        return -(8192 // divisor)

    def record_judgement(
        self,
        rank: JudgementRank,
        is_early: bool = False,
        bar_index: Optional[int] = None,
    ) -> None:
        rank = JudgementRank(int(rank))
        if is_early:
            self.early[rank] += 1
        else:
            self.late[rank] += 1

        if bar_index is not None and 0 <= int(bar_index) < self._bar_count:
            self.bar_scores[int(bar_index)] += 2 if rank == JudgementRank.PERFECT else 1

        if rank == JudgementRank.MISS:
            self.combo = 0
        else:
            self.combo += 1
            if self.combo > self.max_combo:
                self.max_combo = self.combo

        self.shutter_point = max(0, min(SHUTTER_MAX, self.shutter_point + self._shutter_delta(rank)))

    def score(self) -> int:
        weighted = sum(
            weight * (self.early[rank] + self.late[rank])
            for rank, weight in zip(JudgementRank, RANK_WEIGHTS)
        )
        return SCORE_SCALE * weighted // self._note_count

    def shutter_score(self) -> int:
        return self.shutter_point * SHUTTER_SCORE_SCALE // SHUTTER_MAX

    def total_score(self) -> int:
        return self.score() + self.shutter_score()

    def rank_totals(self) -> Dict[JudgementRank, int]:
        return {rank: self.early[rank] + self.late[rank] for rank in JudgementRank}

    def snapshot(self) -> ScoreSnapshot:
        return ScoreSnapshot(
            score=self.score(),
            shutter_score=self.shutter_score(),
            total_score=self.total_score(),
            combo=self.combo,
            max_combo=self.max_combo,
            shutter_point=self.shutter_point,
            early=tuple(self.early),
            late=tuple(self.late),
            bar_scores=tuple(self.bar_scores),
        )


def _run_unit_tests() -> None:
    scorer = JudgementScorer(100)
    for _ in range(100):
        scorer.record_judgement(JudgementRank.PERFECT)
    assert scorer.score() == 900_000
    assert scorer.shutter_point == SHUTTER_MAX
    assert scorer.shutter_score() == 100_000
    assert scorer.combo == 100

    scorer.record_judgement(JudgementRank.MISS, is_early=True)
    assert scorer.combo == 0
    assert scorer.max_combo == 100
    assert scorer.shutter_point == SHUTTER_MAX - 81

    try:
        JudgementScorer(0)
    except EmptyChartError:
        pass
    else:
        raise AssertionError("Expected EmptyChartError")


if __name__ == "__main__":
    _run_unit_tests()
    print("scoring.py: ok")
