"""Flyover orchestrator: image in, drone-style MP4 out.

Pipeline:
1. Validate config (before touching the image)
2. Load the image and build the detail map
3. Score the GRID x GRID cells
4. Select waypoints: center -> top-K detail cells -> center
5. Interpolate camera states and resolve clamped viewports
6. Render frames (crop + resize back to full size) and stream them to FFmpeg

Steps 3-5 are pure and produce a FlyoverPlan. Every collaborator (scorer,
renderer, encoder) can be swapped by the caller. Any failure aborts the run.
"""

from dataclasses import dataclass

from src.detail_grid.edges import edge_scorer
from src.detail_grid.grid import score_grid
from src.path_planner import waypoints as waypoint_selector
from src.path_planner.interpolator import iter_camera_states, total_frame_count
from src.path_planner.viewport import resolve_viewports
from src.pipeline.config import load_config, validate_config
from src.pipeline.errors import InvalidConfiguration
from src.pipeline.image_source import image_info, load_image
from src.video_assembler.encoder import encode_frames, find_ffmpeg
from src.video_assembler.frame_renderer import render_frame, render_frames

DEFAULT_OUTPUT = "drone_output.mp4"


@dataclass(frozen=True)
class FlyoverPlan:
    """Everything decided before the first frame is rendered."""

    width: int
    height: int
    cells: tuple
    waypoints: tuple
    viewports: tuple
    warnings: tuple = ()

    @property
    def frame_count(self):
        return len(self.viewports)


def check_grid_fits(config, width, height):
    """Every cell needs at least one pixel in each direction."""
    if config.grid > min(width, height):
        raise InvalidConfiguration(
            f"grid={config.grid} is larger than the image ({width}x{height}); "
            f"cells would be empty"
        )


def plan_flyover(image, width, height, config, cell_score):
    """Score the grid and compute the full viewport sequence.

    Args:
        image: Image handle passed to ``cell_score`` (e.g. the edge map).
        width: Source width.
        height: Source height.
        config: FlyoverConfig.
        cell_score: Callable (image, (x, y, w, h)) -> float in [0, 1].

    Returns:
        FlyoverPlan.
    """
    validate_config(config)
    check_grid_fits(config, width, height)

    cells = score_grid(image, width, height, config.grid, cell_score)
    print(f"[Planner] Scored {len(cells)} cells ({config.grid}x{config.grid})")

    warnings = []
    notice = waypoint_selector.clamp_notice(cells, config.top_k)
    if notice:
        print(f"[WARNING] {notice}")
        warnings.append(notice)

    waypoints = waypoint_selector.build_waypoints(
        cells, width, height, config.top_k, config.zoom_medium
    )
    print(f"[Planner] Waypoints: {len(waypoints)} (start + top{len(waypoints) - 2} + return)")
    for i, wp in enumerate(waypoints):
        print(f"[Planner]   WP{i} -> x={wp.x} y={wp.y} zoom={wp.zoom}")

    frame_total = total_frame_count(len(waypoints), config.frames_per_segment)
    print(f"[Planner] Frames: {frame_total} ({len(waypoints) - 1} segments x {config.frames_per_segment})")

    states = iter_camera_states(waypoints, config.frames_per_segment)
    viewports = resolve_viewports(states, width, height)

    return FlyoverPlan(
        width=width,
        height=height,
        cells=cells,
        waypoints=tuple(waypoints),
        viewports=tuple(viewports),
        warnings=tuple(warnings),
    )


def plan_to_dict(plan):
    """JSON-serializable view of a plan."""
    return {
        "width": plan.width,
        "height": plan.height,
        "frame_count": plan.frame_count,
        "cells": [
            {
                "index": c.index, "x": c.x, "y": c.y,
                "width": c.width, "height": c.height, "score": c.score,
            }
            for c in plan.cells
        ],
        "waypoints": [{"x": w.x, "y": w.y, "zoom": w.zoom} for w in plan.waypoints],
        "viewports": [[v.x0, v.y0, v.width, v.height] for v in plan.viewports],
        "warnings": list(plan.warnings),
    }


def run_flyover(image_path, output_path=DEFAULT_OUTPUT, config=None, cell_score=None,
                render=render_frame, encode=None, plan_only=False):
    """Produce a flyover video from a still image.

    Args:
        image_path: Source image.
        output_path: Destination MP4.
        config: FlyoverConfig. Defaults to config/flyover.yaml.
        cell_score: Optional scoring collaborator, called with the decoded
            source image. Defaults to edge-density scoring on the edge map.
        render: Crop/resize collaborator.
        encode: Encoder collaborator, (frames, path, w, h, fps) -> path.
            Defaults to FFmpeg.
        plan_only: Stop after planning; nothing is rendered or encoded.

    Returns:
        (plan, output_path). output_path is None when plan_only.

    Raises:
        FlyoverError: any stage failed. No partial output is left behind.
    """
    if config is None:
        config = load_config()
    validate_config(config)

    if encode is None and not plan_only:
        ffmpeg_bin = find_ffmpeg(config.ffmpeg_bin)

        def encode(frames, path, w, h, fps):
            return encode_frames(frames, path, w, h, fps, ffmpeg_bin=ffmpeg_bin)

    print(f"[Orchestrator] Starting analysis on: {image_path}")
    image = load_image(image_path)
    width, height = image_info(image)
    print(f"[Orchestrator] Image size: {width}x{height}")

    if cell_score is None:
        score_source, cell_score = edge_scorer(image)
        print("[Orchestrator] Edge map generated.")
    else:
        score_source = image

    plan = plan_flyover(score_source, width, height, config, cell_score)
    print(f"[Orchestrator] Planned frames: {plan.frame_count}")

    if plan_only:
        return plan, None

    frames = render_frames(
        image, plan.viewports, width, height, render=render, workers=config.workers
    )
    result = encode(frames, output_path, width, height, config.fps)

    print(f"[Orchestrator] Done! Output: {result}")
    return plan, result
