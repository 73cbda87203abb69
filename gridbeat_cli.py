"""
gridbeat_cli.py

Command line entrypoint for the chart compiler and scoring engine.

Commands
- compile PATH   Compile one chart file and print a JSON summary with the ordered notes.
- score PATH     Compile a chart, replay a judgement list against its notes, print the result.
- song TITLE     Load one song folder (all difficulties) with its sync offset and print a summary.
- demo           Compile the built-in demo chart for a difficulty.

Exit codes
- 0 on success
- 2 when the chart cannot be loaded or the arguments do not fit the chart
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

import demo_chart
import paths
from chart import Chart, compile_chart
from chart_text import ChartParseError
from config import AppConfig, get_config
from gameplay_models import JudgementRank, Note, normalize_difficulty, normalize_play_mode
from logging_setup import configure_logging
from music_bar import assign_music_bars
from note_transforms import apply_play_mode
from offset_store import OffsetStore
from scoring import JudgementScorer
from song_library import ChartLoadError, load_chart_file, load_song

_RANK_TOKENS = {
    "p": JudgementRank.PERFECT,
    "perfect": JudgementRank.PERFECT,
    "g": JudgementRank.GREAT,
    "great": JudgementRank.GREAT,
    "d": JudgementRank.GOOD,
    "good": JudgementRank.GOOD,
    "m": JudgementRank.MISS,
    "miss": JudgementRank.MISS,
}


def parse_judgement_tokens(text: str) -> List[tuple]:
    """Parse "p,g,d,m" style input. A leading "-" marks an early hit: "-p" is an early perfect."""
    judgements: List[tuple] = []
    for raw_token in str(text or "").split(","):
        token = raw_token.strip().lower()
        if not token:
            continue
        is_early = token.startswith("-")
        rank = _RANK_TOKENS.get(token.lstrip("-"))
        if rank is None:
            raise ValueError(f"Unknown judgement token: {raw_token.strip()!r}")
        judgements.append((rank, is_early))
    return judgements


def _note_payload(note: Note) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "measure": note.measure_index,
        "row": note.start.row,
        "column": note.start.column,
        "start_time": round(note.start_time, 6),
    }
    if note.is_long:
        payload["end_row"] = note.end.row
        payload["end_column"] = note.end.column
        payload["finish_time"] = round(note.finish_time, 6) if note.finish_time is not None else None
    if note.music_bar_index >= 0:
        payload["bar"] = note.music_bar_index
    return payload


def _chart_summary(chart: Chart, notes: Sequence[Note], *, include_notes: bool) -> Dict[str, Any]:
    summary: Dict[str, Any] = {
        "ok": True,
        "source": chart.source_name,
        "difficulty": chart.difficulty.value,
        "level": chart.level,
        "bpm": chart.bpm_string() if chart.bpm_list else None,
        "note_count": chart.note_count,
        "is_long": chart.is_long,
        "unresolved_directions": len(chart.unresolved_directions),
    }
    if include_notes:
        summary["notes"] = [_note_payload(note) for note in notes]
    return summary


def _load_chart(path_text: str, difficulty: str) -> Chart:
    chart = load_chart_file(Path(path_text), difficulty)
    if chart is None:
        raise ChartLoadError(f"Chart file not found: {path_text}")
    return chart


def _play_notes(chart: Chart, mode: str, song_length: Optional[float], app_config: AppConfig) -> List[Note]:
    notes = apply_play_mode(chart.note_list(), normalize_play_mode(mode))
    if song_length is None:
        return notes
    result = assign_music_bars(
        notes,
        song_length_seconds=song_length,
        bar_count=app_config.scoring.bar_count,
        lead_in_seconds=app_config.scoring.lead_in_seconds,
    )
    return list(result.notes)


def _print_json(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _run_compile(args: argparse.Namespace, app_config: AppConfig) -> int:
    chart = _load_chart(args.path, args.difficulty)
    notes = _play_notes(chart, args.mode, args.song_length, app_config)
    _print_json(_chart_summary(chart, notes, include_notes=not args.summary_only))
    return 0


def _run_demo(args: argparse.Namespace, app_config: AppConfig) -> int:
    difficulty = normalize_difficulty(args.difficulty)
    lines = demo_chart.build_demo_chart_lines(difficulty=difficulty)
    chart = compile_chart(lines, difficulty=difficulty, source_name=f"<demo:{difficulty.value}>")
    notes = _play_notes(chart, args.mode, None, app_config)
    _print_json(_chart_summary(chart, notes, include_notes=True))
    return 0


def _run_score(args: argparse.Namespace, app_config: AppConfig) -> int:
    chart = _load_chart(args.path, args.difficulty)
    notes = _play_notes(chart, "normal", args.song_length, app_config)
    judgements = parse_judgement_tokens(args.judgements)
    if len(judgements) > len(notes):
        raise ValueError(f"{len(judgements)} judgements given for a chart with {len(notes)} notes")

    scorer = JudgementScorer(chart.note_count, bar_count=app_config.scoring.bar_count)
    for note, (rank, is_early) in zip(notes, judgements):
        bar_index = note.music_bar_index if note.music_bar_index >= 0 else None
        scorer.record_judgement(rank, is_early=is_early, bar_index=bar_index)

    snapshot = scorer.snapshot()
    _print_json(
        {
            "ok": True,
            "note_count": chart.note_count,
            "judged": len(judgements),
            "score": snapshot.score,
            "shutter_score": snapshot.shutter_score,
            "total_score": snapshot.total_score,
            "max_combo": snapshot.max_combo,
            "shutter_point": snapshot.shutter_point,
            "ranks": {rank.name.lower(): total for rank, total in scorer.rank_totals().items()},
        }
    )
    return 0


def _read_sync_lines(songs_dir: Path) -> List[str]:
    sync_path = paths.sync_file_path(songs_dir)
    if not sync_path.is_file():
        return []
    try:
        return sync_path.read_text(encoding="utf-8-sig").splitlines()
    except (OSError, UnicodeDecodeError) as exception:
        raise ChartLoadError(f"Failed to read sync list: {sync_path}") from exception


def _run_song(args: argparse.Namespace, app_config: AppConfig) -> int:
    songs_dir = Path(args.songs_dir) if args.songs_dir else app_config.library.songs_dir
    song_dir = songs_dir / args.title
    if not song_dir.is_dir():
        raise ChartLoadError(f"Song folder not found: {song_dir}")

    song = load_song(song_dir)
    if not song.is_valid:
        raise ChartLoadError(f"No playable charts in {song_dir}")
    offsets = OffsetStore.from_sync_lines(_read_sync_lines(songs_dir))
    start_offset = offsets.get(song.title)

    charts: List[Dict[str, Any]] = []
    for difficulty in song.difficulties():
        chart = song.chart_for(difficulty)
        entry = _chart_summary(chart, (), include_notes=False)
        del entry["ok"]
        if args.song_length is not None:
            bars = assign_music_bars(
                chart.note_list(),
                song_length_seconds=args.song_length,
                start_offset_seconds=start_offset,
                bar_count=app_config.scoring.bar_count,
                lead_in_seconds=app_config.scoring.lead_in_seconds,
            )
            entry["music_bar"] = list(bars.counts)
        charts.append(entry)

    _print_json(
        {
            "ok": True,
            "title": song.title,
            "path": str(song.path),
            "offset": start_offset,
            "is_long": song.is_long,
            "charts": charts,
        }
    )
    return 0


def build_argument_parser(app_config: AppConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gridbeat", description="Grid rhythm chart compiler and scorer")
    parser.add_argument("--log-level", default=app_config.logging.level, help="loguru level for stderr output.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    compile_parser = subparsers.add_parser("compile", help="Compile a chart file and print its notes.")
    compile_parser.add_argument("path")
    compile_parser.add_argument("--difficulty", default=app_config.play.difficulty)
    compile_parser.add_argument("--mode", default=app_config.play.mode, help="normal, degree90, degree180, degree270")
    compile_parser.add_argument("--song-length", type=float, default=None, help="Song length in seconds; adds bar indexes.")
    compile_parser.add_argument("--summary-only", action="store_true", help="Omit the note list.")
    compile_parser.set_defaults(handler=_run_compile)

    score_parser = subparsers.add_parser("score", help="Replay judgements against a chart.")
    score_parser.add_argument("path")
    score_parser.add_argument("--difficulty", default=app_config.play.difficulty)
    score_parser.add_argument("--judgements", required=True, help='Comma separated p/g/d/m, "-" prefix for early.')
    score_parser.add_argument("--song-length", type=float, default=None, help="Song length in seconds; fills the bar histogram.")
    score_parser.set_defaults(handler=_run_score)

    song_parser = subparsers.add_parser("song", help="Load one song folder from the library and summarize its charts.")
    song_parser.add_argument("title", help="Song folder name under the songs directory.")
    song_parser.add_argument("--songs-dir", default=None, help="Overrides library.songs_dir from the config.")
    song_parser.add_argument("--song-length", type=float, default=None, help="Song length in seconds; adds each chart's music bar.")
    song_parser.set_defaults(handler=_run_song)

    demo_parser = subparsers.add_parser("demo", help="Compile the built-in demo chart.")
    demo_parser.add_argument("--difficulty", default=app_config.play.difficulty)
    demo_parser.add_argument("--mode", default=app_config.play.mode)
    demo_parser.set_defaults(handler=_run_demo)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        app_config, _config_path = get_config()
    except (OSError, ValueError) as exception:
        _print_json({"ok": False, "error": str(exception)})
        return 2

    args = build_argument_parser(app_config).parse_args(argv)
    configure_logging(args.log_level)

    try:
        return int(args.handler(args, app_config))
    except (ChartLoadError, ChartParseError, NotImplementedError, ValueError) as exception:
        logger.error("{}", exception)
        _print_json({"ok": False, "error": str(exception)})
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
