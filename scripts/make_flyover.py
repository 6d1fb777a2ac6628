"""Turn a still image into a drone-style flyover video.

Finds the most detailed regions of the image, glides from the center to each
of them with a medium zoom, and returns to the center.

Usage:
    python scripts/make_flyover.py input.jpg [output.mp4]
    python scripts/make_flyover.py input.jpg --top-k 3 --zoom 1.6
    python scripts/make_flyover.py input.jpg --plan-only --plan-json plan.json
"""

import argparse
import json
import os
import sys

# Add project root to path so we can import src modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.pipeline.config import load_config
from src.pipeline.errors import FlyoverError
from src.pipeline.orchestrator import DEFAULT_OUTPUT, plan_to_dict, run_flyover


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Drone-style flyover video from a still image.")
    parser.add_argument("image", help="input image")
    parser.add_argument("output", nargs="?", default=DEFAULT_OUTPUT, help="output MP4")
    parser.add_argument("--config", help="YAML config file (default: config/flyover.yaml)")
    parser.add_argument("--grid", type=int, help="grid side length")
    parser.add_argument("--top-k", type=int, dest="top_k", help="detail cells to visit")
    parser.add_argument("--frames-per-segment", type=int, dest="frames_per_segment",
                        help="frames between consecutive waypoints")
    parser.add_argument("--fps", type=int, help="output frame rate")
    parser.add_argument("--zoom", type=float, dest="zoom_medium", help="zoom at detail waypoints")
    parser.add_argument("--workers", type=int, help="render threads")
    parser.add_argument("--ffmpeg", dest="ffmpeg_bin", help="ffmpeg binary")
    parser.add_argument("--plan-json", help="write the planned path to this JSON file")
    parser.add_argument("--plan-only", action="store_true", help="plan the path, skip rendering")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    overrides = {
        "grid": args.grid,
        "top_k": args.top_k,
        "frames_per_segment": args.frames_per_segment,
        "fps": args.fps,
        "zoom_medium": args.zoom_medium,
        "workers": args.workers,
        "ffmpeg_bin": args.ffmpeg_bin,
    }

    try:
        config = load_config(path=args.config, overrides=overrides)
        plan, _ = run_flyover(args.image, args.output, config=config, plan_only=args.plan_only)
    except FlyoverError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.plan_json:
        with open(args.plan_json, "w") as f:
            json.dump(plan_to_dict(plan), f, indent=2)
        print(f"Plan written to {args.plan_json}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
