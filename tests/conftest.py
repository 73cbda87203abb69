"""
gridbeat - Pytest Configuration & Shared Fixtures

Provides reusable fixtures for:
- Sample chart text (valid, long notes, BPM changes, malformed)
- Song folders on disk with one chart file per difficulty
- A loguru sink that captures warnings for assertions
"""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest
from loguru import logger

# ---------------------------------------------------------------------------
# Sample chart content
# ---------------------------------------------------------------------------

SAMPLE_CHART_VALID = """\
Sample Song
lev 5.5 // level line
bpm120

1
①口口口|①②③④|
口②口口
口口③口
口口口④

2
④口口口|①②③④|
口③口口
口口②口
口口口①
"""

SAMPLE_CHART_LONG = """\
lev3
t=120
1
①口口口|①②③④|
^口口口
口口口口
口口口②
③口口口
口口口口
口口口口
口口口④
"""

SAMPLE_CHART_BPM_CHANGE = """\
bpm150
1
①口口口|①②③④|
口②口口
口口③口
口口口④
2
bpm180
①口口口|①②③④|
口②口口
口口③口
口口口④
"""

SAMPLE_CHART_MALFORMED = """\
bpm120
1
①口口|①②③④|
口②口口
口口③口
口口口④
"""


def chart_lines(text: str) -> List[str]:
    return text.splitlines()


@pytest.fixture
def song_folder(tmp_path: Path) -> Path:
    """Song folder with a valid basic chart, a broken advanced chart and no extreme chart."""
    folder = tmp_path / "Sample Song"
    folder.mkdir()
    (folder / "basic.txt").write_text(SAMPLE_CHART_VALID, encoding="utf-8")
    (folder / "advanced.txt").write_text(SAMPLE_CHART_MALFORMED, encoding="utf-8")
    return folder


@pytest.fixture
def captured_warnings():
    messages: List[str] = []
    sink_id = logger.add(lambda message: messages.append(str(message)), level="WARNING", format="{message}")
    yield messages
    logger.remove(sink_id)
