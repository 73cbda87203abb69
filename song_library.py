# -*- coding: utf-8 -*-
########################
# song_library.py
########################
# Purpose:
# - Load the charts of one song directory, one text file per difficulty.
# - A missing or broken chart means "difficulty not offered", never a crash.
# - Keep the latest result per difficulty.
#
########################
# Key Logic:
# - File naming contract: {difficulty}.txt inside the song directory, difficulty in lower case
#   (basic.txt, advanced.txt, extreme.txt).
# - load_chart_file is strict: ChartLoadError for unreadable or uncompilable files, None for absent files.
# - load_song is tolerant: ChartLoadError is logged and that difficulty is left out.
#
########################
# Interfaces:
# Public exceptions:
# - class ChartLoadError(Exception)
#
# Public dataclasses:
# - SongResult(total_score: int, bar_scores: tuple[int, ...])
#
# Public classes:
# - class Song
#   - is_valid -> bool, is_long -> bool
#   - can_play(difficulty) -> bool
#   - chart_for(difficulty) -> Optional[Chart]
#   - record_result(difficulty, *, total_score: int, bar_scores: Sequence[int], autoplay: bool = False) -> None
#   - result_for(difficulty) -> SongResult
#
# Public functions:
# - chart_path(song_dir: pathlib.Path, difficulty) -> pathlib.Path
# - load_chart_file(path: pathlib.Path, difficulty) -> Optional[Chart]
# - load_song(song_dir: pathlib.Path, *, title: Optional[str] = None) -> Song
#
########################

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from chart import Chart, compile_chart
from chart_text import ChartParseError
from gameplay_models import Difficulty, normalize_difficulty
from scoring import DEFAULT_BAR_COUNT


class ChartLoadError(Exception):
    """Raised when a chart file exists but cannot be read or compiled."""


@dataclass(frozen=True)
class SongResult:
    total_score: int
    bar_scores: Tuple[int, ...]


def chart_path(song_dir: Path, difficulty: object) -> Path:
    return Path(song_dir) / f"{normalize_difficulty(difficulty).value}.txt"


def _read_chart_lines(file_path: Path) -> List[str]:
    try:
        return file_path.read_text(encoding="utf-8-sig").splitlines()
    except UnicodeDecodeError as exc:
        raise ChartLoadError(f"Chart is not valid UTF-8: {file_path}") from exc
    except OSError as exc:
        raise ChartLoadError(f"Failed to read chart: {file_path}") from exc


def load_chart_file(path: Path, difficulty: object) -> Optional[Chart]:
    file_path = Path(path)
    if not file_path.is_file():
        return None

    lines = _read_chart_lines(file_path)
    try:
        return compile_chart(lines, difficulty=normalize_difficulty(difficulty), source_name=str(file_path))
    except ChartParseError as exc:
        raise ChartLoadError(f"Failed to compile chart {file_path}: {exc}") from exc


class Song:
    def __init__(self, *, title: str, path: Path, charts: Optional[Dict[Difficulty, Chart]] = None) -> None:
        self.title = str(title)
        self.path = Path(path)
        self._charts: Dict[Difficulty, Chart] = dict(charts or {})
        self._results: Dict[Difficulty, SongResult] = {}

    @property
    def is_valid(self) -> bool:
        return len(self._charts) > 0

    @property
    def is_long(self) -> bool:
        return any(chart.is_long for chart in self._charts.values())

    def difficulties(self) -> List[Difficulty]:
        return [difficulty for difficulty in Difficulty if difficulty in self._charts]

    def can_play(self, difficulty: object) -> bool:
        return normalize_difficulty(difficulty) in self._charts

    def chart_for(self, difficulty: object) -> Optional[Chart]:
        return self._charts.get(normalize_difficulty(difficulty))

    def record_result(
        self,
        difficulty: object,
        *,
        total_score: int,
        bar_scores: Sequence[int],
        autoplay: bool = False,
    ) -> None:
        if autoplay:
            return
        padded = list(bar_scores)[:DEFAULT_BAR_COUNT]
        padded.extend([0] * (DEFAULT_BAR_COUNT - len(padded)))
        self._results[normalize_difficulty(difficulty)] = SongResult(total_score=int(total_score), bar_scores=tuple(padded))

    def result_for(self, difficulty: object) -> SongResult:
        return self._results.get(
            normalize_difficulty(difficulty),
            SongResult(total_score=0, bar_scores=tuple([0] * DEFAULT_BAR_COUNT)),
        )


def load_song(song_dir: Path, *, title: Optional[str] = None) -> Song:
    directory_path = Path(song_dir)
    charts: Dict[Difficulty, Chart] = {}
    for difficulty in Difficulty:
        try:
            chart = load_chart_file(chart_path(directory_path, difficulty), difficulty)
        except ChartLoadError as exc:
            logger.warning("Skipping {} chart of {}: {}", difficulty.value, directory_path.name, exc)
            continue
        if chart is not None:
            charts[difficulty] = chart

    song = Song(title=title or directory_path.name, path=directory_path, charts=charts)
    if not song.is_valid:
        logger.info("No playable charts in {}", directory_path)
    return song
