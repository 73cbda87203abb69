# -*- coding: utf-8 -*-
########################
# chart_text.py
########################
# Purpose:
# - Tokenize grid chart source text into directives and measure blocks.
# - Owns the line grammars: note glyph rows, BPM directives and the level directive.
#
# Design notes:
# - Pure parsing. No file access; callers pass the lines in.
# - Parsing must never silently accept a broken glyph row. Unknown prose lines outside measures are ignored.
# - A BPM directive ends the current measure block. It takes effect from the next block on.
#
########################
# Interfaces:
# Public exceptions:
# - class ChartParseError(Exception)   # source_name, line_number
# - class FormatError(ChartParseError)
# - class MissingBpmError(ChartParseError)
#
# Public dataclasses:
# - BpmDirective(value: float, line_number: int)
# - MeasureBlock(index: int, grid_rows: tuple[str, ...], timing_rows: tuple[str, ...], line_number: int)
# - ChartSource(level: float, entries: tuple[BpmDirective | MeasureBlock, ...])
#
# Public functions:
# - strip_comment(text: str) -> str
# - is_note_text(text: str) -> bool
# - is_bpm_text(text: str) -> bool
# - is_level_text(text: str) -> bool
# - parse_number_in_text(text: str) -> Optional[float]
# - scan_level(lines: Sequence[str]) -> float
# - parse_chart_text(lines: Sequence[str], *, source_name: str = "<chart>") -> ChartSource
#
# Inputs:
# - Raw chart lines (one difficulty file).
#
# Outputs:
# - ChartSource consumed by chart.compile_chart.
#
########################

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import List, Optional, Sequence, Tuple, Union

DEFAULT_LEVEL = 1.0

GLYPH_CLASS = "口□①-⑳┼｜┃━―∨∧^>＞＜<ＶＡ-Ｚ"
BLANK_GLYPHS = frozenset("口□")

_NOTE_PATTERN = re.compile(rf"^([{GLYPH_CLASS}]{{4}}|([{GLYPH_CLASS}]{{4}}\|.+(\|)?))$")
_GLYPH_PATTERN = re.compile(rf"[{GLYPH_CLASS}]")
_NUMBER_PATTERN = re.compile(r"-?\d+(\.\d+)?")
_WHITESPACE_PATTERN = re.compile(r"\s+")


class ChartParseError(Exception):
    """Base error for chart text that cannot be compiled. The whole chart is rejected."""

    def __init__(self, message: str, *, source_name: str = "<chart>", line_number: Optional[int] = None) -> None:
        self.source_name = str(source_name)
        self.line_number = line_number
        location = self.source_name if line_number is None else f"{self.source_name}:{line_number}"
        super().__init__(f"{location}: {message}")


class FormatError(ChartParseError):
    """Raised when a line or measure does not follow the glyph grammar."""


class MissingBpmError(ChartParseError):
    """Raised when a measure is reached before any BPM directive."""


@dataclass(frozen=True)
class BpmDirective:
    value: float
    line_number: int


@dataclass(frozen=True)
class MeasureBlock:
    index: int
    grid_rows: Tuple[str, ...]
    timing_rows: Tuple[str, ...]
    line_number: int


ChartEntry = Union[BpmDirective, MeasureBlock]


@dataclass(frozen=True)
class ChartSource:
    level: float
    entries: Tuple[ChartEntry, ...]

    def measures(self) -> List[MeasureBlock]:
        return [entry for entry in self.entries if isinstance(entry, MeasureBlock)]

    def bpm_values(self) -> List[float]:
        return [entry.value for entry in self.entries if isinstance(entry, BpmDirective)]


def strip_comment(text: str) -> str:
    # A "//" in column 0 is not a trailing comment; that line just fails every grammar.
    line_text = str(text)
    comment_index = line_text.find("//")
    if comment_index > 0:
        line_text = line_text[:comment_index]
    return _WHITESPACE_PATTERN.sub("", line_text)


def is_note_text(text: str) -> bool:
    return _NOTE_PATTERN.match(text) is not None


def is_bpm_text(text: str) -> bool:
    lower = text.lower()
    return lower.startswith("bpm") or lower.startswith("t=")


def is_level_text(text: str) -> bool:
    return text.lower().startswith("lev")


def parse_number_in_text(text: str) -> Optional[float]:
    match = _NUMBER_PATTERN.search(text)
    if match is None:
        return None
    return float(match.group(0))


def _looks_like_glyph_row(text: str) -> bool:
    # Only rows built from grid glyphs with a wrong width are errors. Separator rules such as "――――――"
    # and memo lines such as "＞memo" are prose.
    grid_part = text.split("|", 1)[0]
    if not grid_part or len(grid_part) == 4:
        return False
    if not all(_GLYPH_PATTERN.match(glyph) for glyph in grid_part):
        return False
    return any(glyph in BLANK_GLYPHS or "①" <= glyph <= "⑳" for glyph in grid_part)


def scan_level(lines: Sequence[str]) -> float:
    """Return the value of the first level line that carries a number, or DEFAULT_LEVEL."""
    for raw_line in lines:
        line_text = strip_comment(raw_line)
        if not is_level_text(line_text):
            continue
        value = parse_number_in_text(line_text)
        if value is not None:
            return value
    return DEFAULT_LEVEL


def _split_note_line(line_text: str) -> Tuple[str, Optional[str]]:
    grid_part = line_text[:4]
    timing_split = line_text[4:].split("|")
    if len(timing_split) <= 1:
        return grid_part, None
    return grid_part, timing_split[1]


def _bpm_directive(line_text: str, line_number: int, source_name: str) -> Optional[BpmDirective]:
    value = parse_number_in_text(line_text)
    if value is None:
        return None
    if value <= 0.0:
        raise FormatError(f"BPM must be positive, got {value!r}", source_name=source_name, line_number=line_number)
    return BpmDirective(value=value, line_number=line_number)


def parse_chart_text(lines: Sequence[str], *, source_name: str = "<chart>") -> ChartSource:
    all_lines = [str(line) for line in lines]
    level = scan_level(all_lines)

    entries: List[ChartEntry] = []
    measure_index = 0
    line_index = 0
    line_total = len(all_lines)

    while line_index < line_total:
        line_text = strip_comment(all_lines[line_index])
        line_number = line_index + 1

        if not line_text:
            line_index += 1
            continue

        if is_bpm_text(line_text):
            directive = _bpm_directive(line_text, line_number, source_name)
            if directive is not None:
                entries.append(directive)
            line_index += 1
            continue

        if not is_note_text(line_text):
            if _looks_like_glyph_row(line_text):
                raise FormatError(
                    f"Malformed glyph row {line_text!r}: expected 4 glyphs with an optional |timing| suffix",
                    source_name=source_name,
                    line_number=line_number,
                )
            line_index += 1
            continue

        grid_rows: List[str] = []
        timing_rows: List[str] = []
        block_line_number = line_number
        while line_index < line_total:
            inner_text = strip_comment(all_lines[line_index])
            if not inner_text:
                line_index += 1
                continue
            if not is_note_text(inner_text):
                # BPM directives and prose end the block; the outer scan handles them.
                break
            grid_part, timing_part = _split_note_line(inner_text)
            grid_rows.append(grid_part)
            if timing_part is not None:
                timing_rows.append(timing_part)
            line_index += 1

        entries.append(
            MeasureBlock(
                index=measure_index,
                grid_rows=tuple(grid_rows),
                timing_rows=tuple(timing_rows),
                line_number=block_line_number,
            )
        )
        measure_index += 1

    return ChartSource(level=float(level), entries=tuple(entries))


def _run_unit_tests() -> None:
    assert strip_comment("口①口口 | ①－－－ // first beat") == "口①口口|①－－－"
    assert is_note_text("口①口口")
    assert is_note_text("口①口口|①②③④|")
    assert not is_note_text("口①口")
    assert is_bpm_text("BPM150") and is_bpm_text("t=120")
    assert parse_number_in_text("bpm 132.5") == 132.5

    source = parse_chart_text(
        [
            "Level 7",
            "bpm150",
            "①口口口|①②③④",
            "口②口口",
            "口口③口",
            "口口口④",
            "",
            "bpm180",
        ]
    )
    assert source.level == 7.0
    assert source.bpm_values() == [150.0, 180.0]
    measures = source.measures()
    assert len(measures) == 1
    assert measures[0].timing_rows == ("①②③④",)

    try:
        parse_chart_text(["bpm120", "口口口"])
    except FormatError:
        pass
    else:
        raise AssertionError("Expected FormatError for a 3-glyph row")


if __name__ == "__main__":
    _run_unit_tests()
    print("chart_text.py: ok")
