# -*- coding: utf-8 -*-
########################
# offset_store.py
########################
# Purpose:
# - Per-song calibration offsets (title -> seconds), injected into whatever runs playback.
# - Line codec for the "title:offset" sync list format.
#
# Design notes:
# - No disk I/O. Callers read and write the sync list and pass lines in and out.
# - Offsets may be negative. An unknown title reads as 0.0 and is remembered.
#
########################
# Interfaces:
# Public classes:
# - class OffsetStore
#   - get(title: str) -> float
#   - set(title: str, offset_seconds: float) -> None
#   - adjust(title: str, delta_seconds: float) -> float
#   - items() -> dict[str, float]
#
# Public functions:
# - parse_sync_lines(lines: Iterable[str]) -> dict[str, float]
# - merge_sync_lines(lines: Sequence[str], title: str, offset_seconds: float) -> Optional[list[str]]
#
########################

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence


def _format_offset(offset_seconds: float) -> str:
    return repr(float(offset_seconds))


def parse_sync_lines(lines: Iterable[str]) -> Dict[str, float]:
    offsets: Dict[str, float] = {}
    for raw_line in lines:
        parts = str(raw_line).strip().split(":")
        if len(parts) < 2:
            continue
        try:
            offsets[parts[0].strip()] = float(parts[1].strip())
        except ValueError:
            continue
    return offsets


def merge_sync_lines(lines: Sequence[str], title: str, offset_seconds: float) -> Optional[List[str]]:
    """Return the sync lines with title's entry set to offset_seconds.

    The last entry for the title (case-insensitive) is replaced. Returns None when that entry already
    holds the value, so the caller can skip writing.
    """
    updated = [str(line) for line in lines]
    new_line = f"{title}:{_format_offset(offset_seconds)}"
    prefix = f"{title}:".lower()
    for index in range(len(updated) - 1, -1, -1):
        if updated[index].lower().startswith(prefix):
            if updated[index] == new_line:
                return None
            updated[index] = new_line
            return updated
    updated.append(new_line)
    return updated


class OffsetStore:
    def __init__(self, offsets: Optional[Dict[str, float]] = None) -> None:
        self._offsets: Dict[str, float] = {str(key): float(value) for key, value in (offsets or {}).items()}

    @classmethod
    def from_sync_lines(cls, lines: Iterable[str]) -> "OffsetStore":
        return cls(parse_sync_lines(lines))

    def get(self, title: str) -> float:
        return self._offsets.setdefault(str(title), 0.0)

    def set(self, title: str, offset_seconds: float) -> None:
        self._offsets[str(title)] = float(offset_seconds)

    def adjust(self, title: str, delta_seconds: float) -> float:
        value = self.get(title) + float(delta_seconds)
        self.set(title, value)
        return value

    def items(self) -> Dict[str, float]:
        return dict(self._offsets)
