"""Detail grid: splits the image into GRID x GRID cells and scores each one.

Cells tile the image exactly: every column is W // GRID wide except the last,
which absorbs the remainder (same for rows). The remainder is never spread
over the other cells.

The scorer itself is a collaborator: any callable
``cell_score(image, (x, y, w, h)) -> float`` in [0, 1]. See
src/detail_grid/edges.py for the default edge-density scorer.
"""

import math
from dataclasses import dataclass

from src.pipeline.errors import ScoringFailure


@dataclass(frozen=True)
class Cell:
    """One scored grid cell. ``index`` is row-major."""

    index: int
    x: int
    y: int
    width: int
    height: int
    score: float

    @property
    def center(self):
        return (self.x + self.width // 2, self.y + self.height // 2)

    @property
    def rect(self):
        return (self.x, self.y, self.width, self.height)


def cell_layout(width, height, grid):
    """Compute cell rectangles for a grid, row-major.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        grid: Grid side length (cells per row and per column).

    Returns:
        List of (index, x, y, w, h) tuples, GRID² entries.
    """
    cell_w = width // grid
    cell_h = height // grid

    layout = []
    for gy in range(grid):
        yoff = gy * cell_h
        cur_h = height - yoff if gy == grid - 1 else cell_h
        for gx in range(grid):
            xoff = gx * cell_w
            cur_w = width - xoff if gx == grid - 1 else cell_w
            layout.append((gy * grid + gx, xoff, yoff, cur_w, cur_h))
    return layout


def _checked_score(value, index):
    try:
        score = float(value)
    except (TypeError, ValueError) as e:
        raise ScoringFailure(f"Cell {index}: score {value!r} is not a number") from e
    if not math.isfinite(score):
        raise ScoringFailure(f"Cell {index}: non-finite score {score}")
    if score < 0.0 or score > 1.0:
        raise ScoringFailure(f"Cell {index}: score {score} outside [0, 1]")
    return score


def score_grid(image, width, height, grid, cell_score):
    """Score every cell of the grid.

    Fails fast: the first collaborator error or bad score aborts the whole
    pass, so callers never see a partial grid.

    Args:
        image: Opaque image handle passed straight to ``cell_score``.
        width: Image width in pixels.
        height: Image height in pixels.
        grid: Grid side length.
        cell_score: Callable (image, (x, y, w, h)) -> float in [0, 1].

    Returns:
        Tuple of Cell, row-major, length GRID².

    Raises:
        ScoringFailure: collaborator raised, or returned a non-finite or
            out-of-range score.
    """
    cells = []
    for index, x, y, w, h in cell_layout(width, height, grid):
        try:
            raw = cell_score(image, (x, y, w, h))
        except ScoringFailure:
            raise
        except Exception as e:
            raise ScoringFailure(f"Cell {index} at {x},{y} ({w}x{h}): {e}") from e
        cells.append(Cell(index=index, x=x, y=y, width=w, height=h,
                          score=_checked_score(raw, index)))
    return tuple(cells)
