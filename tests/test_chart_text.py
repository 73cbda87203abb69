"""
gridbeat - Chart Text Parser Tests

Covers comment stripping, the glyph/BPM/level line grammars, measure block
splitting and the fatal FormatError path.
"""

from __future__ import annotations

import pytest

from chart_text import (
    DEFAULT_LEVEL,
    BpmDirective,
    ChartParseError,
    FormatError,
    MeasureBlock,
    is_bpm_text,
    is_level_text,
    is_note_text,
    parse_chart_text,
    parse_number_in_text,
    scan_level,
    strip_comment,
)
from tests.conftest import SAMPLE_CHART_MALFORMED, SAMPLE_CHART_VALID, chart_lines


class TestLineGrammar:
    def test_strip_comment_removes_trailing_comment_and_spaces(self):
        assert strip_comment("  口 ① 口 口 | ①②③④ |  // intro") == "口①口口|①②③④|"

    def test_strip_comment_keeps_leading_double_slash(self):
        assert strip_comment("// whole line") == "//wholeline"

    def test_strip_comment_removes_tabs_and_ideographic_space(self):
        assert strip_comment("口\t口　口口") == "口口口口"

    @pytest.mark.parametrize(
        "line",
        ["口口口口", "①②③④", "┼｜┃━", "ＡＢＣＤ", "^∧∨Ｖ", "><＞＜", "口①口口|①②③④", "口①口口|①②③④|", "⑳□―口|⑳"],
    )
    def test_note_text_accepts_glyph_rows(self, line):
        assert is_note_text(line)

    @pytest.mark.parametrize("line", ["口口口", "口口口口口", "abcd", "1234", "口口口口|", "bpm120", ""])
    def test_note_text_rejects_other_lines(self, line):
        assert not is_note_text(line)

    def test_bpm_and_level_prefixes_are_case_insensitive(self):
        assert is_bpm_text("BPM150")
        assert is_bpm_text("t=90")
        assert is_bpm_text("T=90")
        assert not is_bpm_text("tempo90")
        assert is_level_text("LEVEL10")
        assert is_level_text("lev3")

    def test_number_scan_finds_first_signed_decimal(self):
        assert parse_number_in_text("bpm132.5") == 132.5
        assert parse_number_in_text("t=-4") == -4.0
        assert parse_number_in_text("level10x2") == 10.0
        assert parse_number_in_text("bpm") is None


class TestLevelScan:
    def test_first_level_line_wins(self):
        assert scan_level(["lev4", "lev9"]) == 4.0

    def test_level_line_without_number_is_skipped(self):
        assert scan_level(["level", "lev7"]) == 7.0

    def test_missing_level_defaults(self):
        assert scan_level(["bpm120"]) == DEFAULT_LEVEL == 1.0

    def test_commented_level_value(self):
        assert scan_level(["lev 5.5 // hard"]) == 5.5


class TestMeasureBlocks:
    def test_sample_chart_entries(self):
        source = parse_chart_text(chart_lines(SAMPLE_CHART_VALID), source_name="sample")
        assert source.level == 5.5
        assert isinstance(source.entries[0], BpmDirective)
        assert source.bpm_values() == [120.0]
        measures = source.measures()
        assert [measure.index for measure in measures] == [0, 1]
        assert measures[0].grid_rows == ("①口口口", "口②口口", "口口③口", "口口口④")
        assert measures[0].timing_rows == ("①②③④",)

    def test_blank_lines_do_not_end_a_block(self):
        source = parse_chart_text(["bpm120", "①口口口|①②", "", "口口口口", "口口口口", "", "口口口②"])
        measures = source.measures()
        assert len(measures) == 1
        assert len(measures[0].grid_rows) == 4

    def test_prose_line_ends_block_and_is_reexamined(self):
        source = parse_chart_text(["bpm120", "①口口口|①", "口口口口", "口口口口", "口口口口", "--", "②口口口|②", "口口口口", "口口口口", "口口口口"])
        assert len(source.measures()) == 2

    def test_bpm_line_ends_the_block_without_a_measure_number(self):
        source = parse_chart_text(
            [
                "bpm150",
                "①口口口|①②③④",
                "口②口口",
                "口口③口",
                "口口口④",
                "",
                "bpm180",
                "①口口口|①②③④",
                "口②口口",
                "口口③口",
                "口口口④",
            ]
        )
        assert [type(entry) for entry in source.entries] == [BpmDirective, MeasureBlock, BpmDirective, MeasureBlock]
        assert source.bpm_values() == [150.0, 180.0]
        assert [len(block.grid_rows) for block in source.measures()] == [4, 4]
        assert [block.line_number for block in source.measures()] == [2, 8]

    def test_bpm_line_without_number_is_ignored(self):
        source = parse_chart_text(["bpm", "bpm140"])
        assert source.bpm_values() == [140.0]

    def test_timing_code_between_bars(self):
        source = parse_chart_text(["bpm120", "口口口口|①－②－|", "口口口口", "口口口口", "口口口口"])
        assert source.measures()[0].timing_rows == ("①－②－",)

    def test_measure_line_numbers_are_one_based(self):
        source = parse_chart_text(["lev1", "bpm120", "", "①口口口|①", "口口口口", "口口口口", "口口口口"])
        assert source.measures()[0].line_number == 4


class TestParseErrors:
    def test_three_glyph_row_raises_format_error(self):
        with pytest.raises(FormatError) as excinfo:
            parse_chart_text(chart_lines(SAMPLE_CHART_MALFORMED), source_name="advanced.txt")
        assert excinfo.value.source_name == "advanced.txt"
        assert excinfo.value.line_number == 3
        assert "advanced.txt:3" in str(excinfo.value)

    @pytest.mark.parametrize("line", ["――――――", "＞memo", "ＡＢＣ part two", "━━"])
    def test_separator_and_memo_lines_are_prose(self, line):
        source = parse_chart_text(["bpm120", line, "①口口口|①", "口口口口", "口口口口", "口口口口"])
        assert len(source.measures()) == 1

    @pytest.mark.parametrize("line", ["口口口口口", "①②|①②", "口□"])
    def test_wrong_width_glyph_rows_raise(self, line):
        with pytest.raises(FormatError):
            parse_chart_text(["bpm120", line])

    def test_format_error_is_a_chart_parse_error(self):
        assert issubclass(FormatError, ChartParseError)

    def test_non_positive_bpm_is_rejected(self):
        with pytest.raises(FormatError):
            parse_chart_text(["bpm-120"])
