"""Waypoint selection: picks the most detailed cells and orders the tour.

The tour is always: image center (no zoom) -> top-K cell centers in
descending score order (medium zoom) -> back to the image center (no zoom).

Tie-break: equal scores are ordered by cell index ascending, so the tour is
the same on every run regardless of how the cells were produced.

TOP_K larger than the number of cells is clamped to all cells. That is a
policy, not an error: clamp_notice() describes it so the planner can report it.
"""

from dataclasses import dataclass

from src.pipeline.errors import InvalidConfiguration

# Zoom at the start and end of the tour (full frame)
ENDPOINT_ZOOM = 1.0


@dataclass(frozen=True)
class Waypoint:
    """A stop on the tour: pixel position + zoom factor (>= 1.0)."""

    x: int
    y: int
    zoom: float


def image_center(width, height):
    """Center pixel of the image, (W // 2, H // 2)."""
    return (width // 2, height // 2)


def rank_cells(cells):
    """Order cells by score descending, then index ascending."""
    return sorted(cells, key=lambda c: (-c.score, c.index))


def select_top_cells(cells, k):
    """Pick the K highest-scoring cells.

    Args:
        cells: Sequence of scored Cells.
        k: Number of cells to pick. Clamped to len(cells) when larger.

    Returns:
        List of Cells, best first.

    Raises:
        InvalidConfiguration: k is negative.
    """
    if k < 0:
        raise InvalidConfiguration(f"top_k must be >= 0, got {k}")
    return rank_cells(cells)[:min(k, len(cells))]


def clamp_notice(cells, k):
    """Warning text when k exceeds the number of cells, else None."""
    if k > len(cells):
        return f"top_k={k} exceeds the {len(cells)} grid cells: visiting all cells"
    return None


def build_waypoints(cells, width, height, top_k, zoom_medium):
    """Build the ordered waypoint list for a scored grid.

    Args:
        cells: Sequence of scored Cells.
        width: Image width.
        height: Image height.
        top_k: How many detail cells to visit.
        zoom_medium: Zoom factor applied at every interior waypoint.

    Returns:
        List of Waypoint, length min(top_k, len(cells)) + 2. With top_k=0 the
        result is [center, center], a static full-frame path.
    """
    cx, cy = image_center(width, height)
    start = Waypoint(x=cx, y=cy, zoom=ENDPOINT_ZOOM)

    waypoints = [start]
    for cell in select_top_cells(cells, top_k):
        x, y = cell.center
        waypoints.append(Waypoint(x=x, y=y, zoom=float(zoom_medium)))
    waypoints.append(Waypoint(x=cx, y=cy, zoom=ENDPOINT_ZOOM))
    return waypoints
