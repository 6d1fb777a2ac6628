"""Video encoder: streams rendered frames into FFmpeg.

Frames are piped as raw RGB to FFmpeg stdin (no intermediate image files on
disk) and encoded with libx264 / yuv420p for wide player compatibility. Odd
frame sizes are padded to even, which yuv420p requires.

If anything goes wrong mid-stream (a frame fails to render, FFmpeg dies) the
FFmpeg process is killed and the partial output file is deleted: the run
produces a complete video or nothing.
"""

import os
import shutil
import subprocess

from PIL import Image

from src.pipeline.errors import EncodingFailure

DEFAULT_FFMPEG_BIN = "ffmpeg"


def find_ffmpeg(ffmpeg_bin=DEFAULT_FFMPEG_BIN):
    """Resolve the FFmpeg binary.

    Args:
        ffmpeg_bin: Binary name or path.

    Returns:
        Absolute path to the binary.

    Raises:
        EncodingFailure: FFmpeg is not installed / not on PATH.
    """
    path = shutil.which(ffmpeg_bin)
    if path is None:
        raise EncodingFailure(f"ffmpeg not found ({ffmpeg_bin}). Install it: apt install ffmpeg")
    return path


def build_ffmpeg_command(output_path, width, height, fps, ffmpeg_bin=DEFAULT_FFMPEG_BIN):
    """FFmpeg argv that reads raw RGB frames from stdin and writes an MP4."""
    return [
        ffmpeg_bin, "-y",
        "-loglevel", "error",
        "-f", "rawvideo",
        "-vcodec", "rawvideo",
        "-s", f"{width}x{height}",
        "-pix_fmt", "rgb24",
        "-r", str(fps),
        "-i", "pipe:0",
        "-c:v", "libx264",
        "-vf", "pad=ceil(iw/2)*2:ceil(ih/2)*2,format=yuv420p",
        "-pix_fmt", "yuv420p",
        output_path,
    ]


def _discard_output(proc, output_path):
    if proc.poll() is None:
        proc.kill()
        proc.wait()
    if os.path.exists(output_path):
        os.remove(output_path)


def encode_frames(frames, output_path, width, height, fps, ffmpeg_bin=DEFAULT_FFMPEG_BIN):
    """Encode an ordered frame sequence to an MP4 file.

    Args:
        frames: Iterable of PIL Images, consumed strictly in order.
        output_path: Destination .mp4 path.
        width: Frame width.
        height: Frame height.
        fps: Output frame rate.
        ffmpeg_bin: FFmpeg binary name or path.

    Returns:
        Path to the written video.

    Raises:
        EncodingFailure: FFmpeg failed. Errors raised by ``frames`` itself
            (e.g. RenderFailure) propagate unchanged after cleanup.
    """
    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    cmd = build_ffmpeg_command(output_path, width, height, fps, ffmpeg_bin=ffmpeg_bin)
    print(f"[Encoder] Encoding {output_path} at {fps} fps...")

    try:
        ffmpeg_proc = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        raise EncodingFailure(f"Could not start ffmpeg: {e}") from e

    frames_written = 0
    try:
        for frame in frames:
            if frame.mode != "RGB":
                frame = frame.convert("RGB")
            if frame.size != (width, height):
                frame = frame.resize((width, height), Image.LANCZOS)
            ffmpeg_proc.stdin.write(frame.tobytes())
            frames_written += 1
        ffmpeg_proc.stdin.close()
    except BrokenPipeError as e:
        stderr = ffmpeg_proc.stderr.read() if ffmpeg_proc.stderr else b""
        _discard_output(ffmpeg_proc, output_path)
        raise EncodingFailure(f"ffmpeg closed its input: {stderr.decode(errors='replace')[:200]}") from e
    except BaseException:
        _discard_output(ffmpeg_proc, output_path)
        raise

    ffmpeg_proc.wait()
    stderr = ffmpeg_proc.stderr.read()

    if ffmpeg_proc.returncode != 0:
        text = stderr.decode(errors="replace")
        print(f"[Encoder] FFmpeg encoding error: {text[:500]}")
        _discard_output(ffmpeg_proc, output_path)
        raise EncodingFailure(f"FFmpeg frame encoding failed: {text[:200]}")

    if frames_written == 0:
        _discard_output(ffmpeg_proc, output_path)
        raise EncodingFailure("No frames to encode")

    print(f"[Encoder]   Frames streamed: {frames_written}")
    return output_path
