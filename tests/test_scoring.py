"""
gridbeat - Scoring Tests

Covers tallies, combo, the shutter meter deltas and clamping, the score
formulas and the per-bar histogram.
"""

from __future__ import annotations

import pytest

from gameplay_models import JudgementRank
from scoring import SHUTTER_MAX, EmptyChartError, JudgementScorer


class TestScore:
    def test_all_perfect_hundred_notes(self):
        scorer = JudgementScorer(100)
        for index in range(100):
            scorer.record_judgement(JudgementRank.PERFECT, is_early=index % 2 == 0)
        assert scorer.score() == 900_000
        assert scorer.shutter_point == SHUTTER_MAX
        assert scorer.total_score() == 1_000_000

    def test_weighted_score_uses_integer_division(self):
        scorer = JudgementScorer(3)
        scorer.record_judgement(JudgementRank.GREAT)
        scorer.record_judgement(JudgementRank.GOOD, is_early=True)
        scorer.record_judgement(JudgementRank.MISS)
        assert scorer.score() == 90_000 * (7 + 4 + 1) // 3

    def test_score_is_recomputed_from_tallies(self):
        scorer = JudgementScorer(7)
        scorer.record_judgement(JudgementRank.GREAT)
        assert scorer.score() == 90_000 * 7 // 7
        scorer.reset()
        assert scorer.score() == 0

    def test_early_and_late_are_tallied_separately(self):
        scorer = JudgementScorer(10)
        scorer.record_judgement(JudgementRank.GOOD, is_early=True)
        scorer.record_judgement(JudgementRank.GOOD)
        scorer.record_judgement(JudgementRank.GOOD)
        assert scorer.early == [0, 0, 1, 0]
        assert scorer.late == [0, 0, 2, 0]
        assert scorer.rank_totals()[JudgementRank.GOOD] == 3

    def test_int_ranks_are_accepted(self):
        scorer = JudgementScorer(10)
        scorer.record_judgement(1)
        assert scorer.late[JudgementRank.GREAT] == 1

    def test_zero_notes_is_rejected(self):
        with pytest.raises(EmptyChartError):
            JudgementScorer(0)
        assert issubclass(EmptyChartError, ValueError)


class TestComboAndShutter:
    def test_combo_resets_on_miss(self):
        scorer = JudgementScorer(50)
        for rank in (JudgementRank.PERFECT, JudgementRank.GREAT, JudgementRank.GOOD):
            scorer.record_judgement(rank)
        assert scorer.combo == 3
        scorer.record_judgement(JudgementRank.MISS)
        assert scorer.combo == 0
        scorer.record_judgement(JudgementRank.PERFECT)
        assert scorer.combo == 1
        assert scorer.max_combo == 3

    def test_shutter_deltas_for_small_chart(self):
        scorer = JudgementScorer(100)
        scorer.record_judgement(JudgementRank.PERFECT)
        assert scorer.shutter_point == 20
        scorer.record_judgement(JudgementRank.GREAT)
        assert scorer.shutter_point == 40
        scorer.record_judgement(JudgementRank.GOOD)
        assert scorer.shutter_point == 50
        scorer.record_judgement(JudgementRank.MISS)
        assert scorer.shutter_point == 0

    def test_shutter_divisor_caps_at_1024_notes(self):
        scorer = JudgementScorer(5000)
        scorer.record_judgement(JudgementRank.PERFECT)
        scorer.record_judgement(JudgementRank.GOOD)
        assert scorer.shutter_point == 3
        scorer.record_judgement(JudgementRank.MISS)
        assert scorer.shutter_point == 0

    def test_shutter_score(self):
        scorer = JudgementScorer(4)
        scorer.record_judgement(JudgementRank.GOOD)
        assert scorer.shutter_point == 256
        assert scorer.shutter_score() == 256 * 100_000 // 1024


class TestBarScores:
    def test_bar_histogram_weights(self):
        scorer = JudgementScorer(10)
        scorer.record_judgement(JudgementRank.PERFECT, bar_index=3)
        scorer.record_judgement(JudgementRank.MISS, bar_index=3)
        scorer.record_judgement(JudgementRank.GOOD, bar_index=119)
        assert scorer.bar_scores[3] == 3
        assert scorer.bar_scores[119] == 1

    @pytest.mark.parametrize("bar_index", [None, -1, 120, 500])
    def test_out_of_range_bar_is_ignored(self, bar_index):
        scorer = JudgementScorer(10)
        scorer.record_judgement(JudgementRank.PERFECT, bar_index=bar_index)
        assert sum(scorer.bar_scores) == 0
        assert scorer.combo == 1

    def test_snapshot_is_a_frozen_copy(self):
        scorer = JudgementScorer(10, bar_count=4)
        scorer.record_judgement(JudgementRank.PERFECT, bar_index=0)
        snapshot = scorer.snapshot()
        scorer.record_judgement(JudgementRank.PERFECT, bar_index=0)
        assert snapshot.bar_scores == (2, 0, 0, 0)
        assert snapshot.combo == 1
        assert snapshot.total_score == snapshot.score + snapshot.shutter_score
