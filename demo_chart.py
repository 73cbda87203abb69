# demo_chart.py
from __future__ import annotations

from typing import List, Sequence

from gameplay_models import CELL_COUNT, GRID_SIZE, Difficulty, normalize_difficulty

BLANK = "口"
NUMBERED = "①②③④⑤⑥⑦⑧"


def _grid_rows(cells: Sequence[tuple]) -> List[str]:
    """Render (cell_index, glyph) placements into 4 glyph rows."""
    grid = [BLANK] * CELL_COUNT
    for cell_index, glyph in cells:
        grid[cell_index] = glyph
    return ["".join(grid[row * GRID_SIZE:(row + 1) * GRID_SIZE]) for row in range(GRID_SIZE)]


def _measure_lines(cells: Sequence[tuple], timing: str) -> List[str]:
    rows = _grid_rows(cells)
    rows[0] = f"{rows[0]}|{timing}|"
    return rows


def _long_note_measure_lines() -> List[str]:
    # Hold from the top-left cell, released on the third beat.
    first_grid = _grid_rows([(0, "①"), (4, "^"), (15, "②")])
    second_grid = _grid_rows([(0, "③"), (12, "④")])
    first_grid[0] = f"{first_grid[0]}|①②③④|"
    return first_grid + second_grid


def build_demo_chart_lines(*, difficulty: object = Difficulty.BASIC) -> List[str]:
    normalized_difficulty = normalize_difficulty(difficulty)

    if normalized_difficulty is Difficulty.EXTREME:
        bpm_values = (180.0, 180.0, 200.0, 200.0)
        level = 9
    elif normalized_difficulty is Difficulty.ADVANCED:
        bpm_values = (150.0, 150.0, 150.0)
        level = 6
    else:
        bpm_values = (120.0, 120.0)
        level = 2

    # Deterministic cell pattern that covers the whole grid.
    cell_pattern = [
        0, 5, 10, 15,
        3, 6, 9, 12,
        1, 7, 14, 8,
        2, 4, 13, 11,
    ]

    lines: List[str] = [f"lev{level}", f"// demo chart ({normalized_difficulty.value})"]
    current_bpm = None
    for measure_index, bpm in enumerate(bpm_values):
        # Measure number lines are prose; a BPM line below one applies from this measure on.
        lines.append(str(measure_index + 1))
        if bpm != current_bpm:
            lines.append(f"bpm{bpm:g}")
            current_bpm = bpm
        base = (measure_index * 4) % len(cell_pattern)
        cells = [(cell_pattern[base + beat], NUMBERED[beat]) for beat in range(4)]
        lines.extend(_measure_lines(cells, "①②③④"))
        lines.append("")

    if normalized_difficulty is not Difficulty.BASIC:
        lines.append(str(len(bpm_values) + 1))
        lines.extend(_long_note_measure_lines())

    return lines
