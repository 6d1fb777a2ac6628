"""Viewport resolver: turns a camera state into a pixel crop rectangle.

The viewport is the part of the source image the camera sees before it is
scaled back up to full resolution. Its size is floor(W / zoom) x
floor(H / zoom), at least 1x1, and it is always clamped to lie fully inside
the image.
"""

import math
from dataclasses import dataclass

from src.pipeline.errors import InvalidConfiguration


@dataclass(frozen=True)
class Viewport:
    """Integer crop rectangle: top-left (x0, y0), size width x height."""

    x0: int
    y0: int
    width: int
    height: int

    @property
    def box(self):
        """PIL crop box (left, upper, right, lower)."""
        return (self.x0, self.y0, self.x0 + self.width, self.y0 + self.height)


def viewport_size(width, height, zoom):
    """(vw, vh) for a zoom level, floored and at least 1 pixel."""
    if not math.isfinite(zoom) or zoom < 1.0:
        raise InvalidConfiguration(f"zoom must be a finite value >= 1.0, got {zoom}")
    vw = max(1, math.floor(width / zoom))
    vh = max(1, math.floor(height / zoom))
    return vw, vh


def _clamp_origin(origin, size, limit):
    # Low bound first, then high bound
    if origin < 0:
        origin = 0
    if origin + size > limit:
        origin = limit - size
    return origin


def resolve_viewport(state, width, height):
    """Resolve one camera state to a clamped viewport.

    Args:
        state: CameraState (x, y, zoom). Zoom must be >= 1.0 so the viewport
            never exceeds the image.
        width: Image width.
        height: Image height.

    Returns:
        Viewport fully inside [0, W) x [0, H) with positive area.
    """
    vw, vh = viewport_size(width, height, state.zoom)
    x0 = int(state.x) - vw // 2
    y0 = int(state.y) - vh // 2
    return Viewport(
        x0=_clamp_origin(x0, vw, width),
        y0=_clamp_origin(y0, vh, height),
        width=vw,
        height=vh,
    )


def resolve_viewports(states, width, height):
    """Resolve a sequence of camera states, preserving frame order."""
    return [resolve_viewport(s, width, height) for s in states]
