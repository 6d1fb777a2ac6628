"""Tests for the detail grid.

Tests cover:
- cell_layout: exact tiling, remainder absorbed by last row/column
- score_grid: one score per cell, fail-fast on bad scores
- edges: edge map + mean intensity scorer
"""

import math

import numpy as np
import pytest
from PIL import Image

from src.detail_grid.grid import Cell, cell_layout, score_grid
from src.detail_grid.edges import build_edge_map, mean_intensity, edge_scorer
from src.path_planner.waypoints import select_top_cells
from src.pipeline.errors import ScoringFailure


# ---------------------------------------------------------------------------
# cell_layout
# ---------------------------------------------------------------------------

class TestCellLayout:
    """Grid geometry covers the image exactly once."""

    def test_uniform_cells(self):
        """1000x800 with a 10x10 grid gives 100x80 cells everywhere."""
        layout = cell_layout(1000, 800, 10)
        assert len(layout) == 100
        assert all(w == 100 and h == 80 for _, _, _, w, h in layout)

    def test_row_major_indices(self):
        layout = cell_layout(300, 200, 3)
        assert [entry[0] for entry in layout] == list(range(9))
        # index 4 is the middle cell: row 1, column 1
        _, x, y, _, _ = layout[4]
        assert (x, y) == (100, 66)

    def test_last_column_absorbs_remainder(self):
        layout = cell_layout(103, 50, 4)
        widths = [w for _, _, y, w, _ in layout if y == 0]
        assert widths == [25, 25, 25, 28]

    def test_last_row_absorbs_remainder(self):
        layout = cell_layout(50, 103, 4)
        heights = [h for _, x, _, _, h in layout if x == 0]
        assert heights == [25, 25, 25, 28]

    @pytest.mark.parametrize("width,height,grid", [
        (1000, 800, 10), (1001, 799, 10), (7, 5, 3), (640, 480, 1), (37, 91, 6),
    ])
    def test_rows_and_columns_sum_to_image(self, width, height, grid):
        layout = cell_layout(width, height, grid)
        for row in range(grid):
            row_cells = layout[row * grid:(row + 1) * grid]
            assert sum(w for _, _, _, w, _ in row_cells) == width
        for col in range(grid):
            col_cells = layout[col::grid]
            assert sum(h for _, _, _, _, h in col_cells) == height

    @pytest.mark.parametrize("width,height,grid", [(1001, 799, 10), (37, 91, 6)])
    def test_no_overlap_no_gap(self, width, height, grid):
        """Every pixel belongs to exactly one cell."""
        coverage = [[0] * width for _ in range(height)]
        for _, x, y, w, h in cell_layout(width, height, grid):
            for yy in range(y, y + h):
                for xx in range(x, x + w):
                    coverage[yy][xx] += 1
        assert all(v == 1 for row in coverage for v in row)


# ---------------------------------------------------------------------------
# Cell
# ---------------------------------------------------------------------------

class TestCell:

    def test_center_uses_integer_halves(self):
        cell = Cell(index=0, x=10, y=20, width=25, height=15, score=0.5)
        assert cell.center == (22, 27)

    def test_rect(self):
        cell = Cell(index=3, x=1, y=2, width=3, height=4, score=0.0)
        assert cell.rect == (1, 2, 3, 4)

    def test_cells_are_immutable(self):
        cell = Cell(index=0, x=0, y=0, width=1, height=1, score=0.1)
        with pytest.raises(Exception):
            cell.score = 0.9


# ---------------------------------------------------------------------------
# score_grid
# ---------------------------------------------------------------------------

class TestScoreGrid:
    """Scoring calls the collaborator once per cell and fails fast."""

    def test_one_call_per_cell(self, make_table_scorer):
        scorer = make_table_scorer([i / 10 for i in range(9)])
        cells = score_grid("img", 90, 60, 3, scorer)
        assert len(cells) == 9
        assert len(scorer.calls) == 9
        assert scorer.calls[0] == (0, 0, 30, 20)
        assert [c.score for c in cells] == pytest.approx([i / 10 for i in range(9)])

    def test_returns_immutable_tuple(self, make_table_scorer):
        cells = score_grid("img", 10, 10, 1, make_table_scorer([0.3]))
        assert isinstance(cells, tuple)
        assert cells[0].rect == (0, 0, 10, 10)

    def test_image_handle_passed_through(self):
        seen = []

        def scorer(image, rect):
            seen.append(image)
            return 0.5

        score_grid("edge-map", 20, 20, 2, scorer)
        assert seen == ["edge-map"] * 4

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), -0.1, 1.5])
    def test_bad_score_aborts(self, bad):
        scores = [0.1, 0.2, bad, 0.4]
        with pytest.raises(ScoringFailure):
            score_grid("img", 20, 20, 2, lambda img, rect, s=iter(scores): next(s))

    def test_non_numeric_score_aborts(self):
        with pytest.raises(ScoringFailure):
            score_grid("img", 20, 20, 1, lambda img, rect: "high")

    def test_collaborator_error_wrapped(self):
        def scorer(image, rect):
            raise IOError("identify crashed")

        with pytest.raises(ScoringFailure, match="identify crashed") as exc:
            score_grid("img", 20, 20, 2, scorer)
        assert isinstance(exc.value.__cause__, IOError)

    def test_stops_at_first_failure(self):
        calls = []

        def scorer(image, rect):
            calls.append(rect)
            if len(calls) == 2:
                raise RuntimeError("boom")
            return 0.5

        with pytest.raises(ScoringFailure):
            score_grid("img", 30, 30, 3, scorer)
        assert len(calls) == 2


# ---------------------------------------------------------------------------
# edges
# ---------------------------------------------------------------------------

class TestEdgeScoring:
    """Default detail collaborator: edge map + mean intensity."""

    def test_edge_map_is_grayscale_same_size(self, busy_corner_image):
        edges = build_edge_map(busy_corner_image)
        assert edges.mode == "L"
        assert edges.size == busy_corner_image.size

    def test_flat_image_scores_zero_in_every_cell(self):
        edge_map, score = edge_scorer(Image.new("RGB", (40, 40), (90, 90, 90)))
        cells = score_grid(edge_map, 40, 40, 4, score)
        assert [c.score for c in cells] == [0.0] * 16

    def test_flat_border_has_no_edges(self):
        edges = np.asarray(build_edge_map(Image.new("L", (30, 20), 230)))
        assert edges.max() == 0

    def test_faint_interior_patch_outranks_flat_border_cells(self):
        """A low-contrast patch in cell 5 beats the outer ring of a flat image."""
        arr = np.full((160, 200), 230, dtype=np.int16)
        rng = np.random.default_rng(3)
        arr[40:80, 50:100] += rng.integers(-12, 13, size=(40, 50), dtype=np.int16)
        image = Image.fromarray(arr.astype(np.uint8)).convert("RGB")

        edge_map, score = edge_scorer(image)
        cells = score_grid(edge_map, 200, 160, 4, score)
        assert select_top_cells(cells, 1)[0].index == 5

    def test_scores_within_unit_range(self, busy_corner_image):
        edges = build_edge_map(busy_corner_image)
        for _, x, y, w, h in cell_layout(200, 160, 4):
            s = mean_intensity(edges, (x, y, w, h))
            assert 0.0 <= s <= 1.0

    def test_empty_region_is_nan(self):
        edges = Image.new("L", (10, 10), 0)
        assert math.isnan(mean_intensity(edges, (0, 0, 0, 10)))

    def test_busy_cell_scores_highest(self, busy_corner_image):
        edge_map, score = edge_scorer(busy_corner_image)
        cells = score_grid(edge_map, 200, 160, 4, score)
        best = max(cells, key=lambda c: c.score)
        assert best.index == 0
