"""Camera path: linear pan and zoom between consecutive waypoints.

Every segment (pair of consecutive waypoints) is sampled at a fixed number of
frames. Position and zoom move linearly; there is no easing, acceleration or
overshoot. Positions snap to whole pixels, zoom stays fractional.

States are produced lazily, one per frame, so long tours never hold the whole
path in memory.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CameraState:
    """Camera state for one frame: center pixel + zoom level."""

    x: int
    y: int
    zoom: float


def _lerp(a, b, t):
    # Two-sided form: exact at t=0 and t=1
    return a * (1.0 - t) + b * t


def interpolate(start, end, t):
    """Linear interpolation between two camera states.

    Args:
        start: State (or Waypoint) at t=0.
        end: State (or Waypoint) at t=1.
        t: Progress in [0.0, 1.0].

    Returns:
        CameraState with x/y rounded to the nearest pixel and unrounded zoom.
    """
    t = max(0.0, min(1.0, t))
    return CameraState(
        x=round(_lerp(start.x, end.x, t)),
        y=round(_lerp(start.y, end.y, t)),
        zoom=_lerp(start.zoom, end.zoom, t),
    )


def segment_progress(frame, frames):
    """t for frame ``frame`` of a segment with ``frames`` samples.

    t = frame / (frames - 1); a single-frame segment always samples t=0.
    """
    if frames <= 1:
        return 0.0
    return frame / (frames - 1)


def segment_states(start, end, frames):
    """Yield the camera states for one segment.

    Args:
        start: Waypoint the segment leaves from.
        end: Waypoint the segment arrives at.
        frames: Samples per segment (>= 1).

    Yields:
        CameraState, ``frames`` of them. The first equals ``start``; with
        frames >= 2 the last equals ``end``.
    """
    for f in range(frames):
        yield interpolate(start, end, segment_progress(f, frames))


def iter_camera_states(waypoints, frames_per_segment):
    """Yield every camera state of the tour, segment after segment.

    Args:
        waypoints: Ordered waypoints (at least 2).
        frames_per_segment: Samples per segment (>= 1).

    Yields:
        CameraState, (len(waypoints) - 1) * frames_per_segment in total.
    """
    for a, b in zip(waypoints, waypoints[1:]):
        yield from segment_states(a, b, frames_per_segment)


def total_frame_count(num_waypoints, frames_per_segment):
    """Number of frames a tour produces: (N - 1) * F."""
    return max(0, num_waypoints - 1) * frames_per_segment
