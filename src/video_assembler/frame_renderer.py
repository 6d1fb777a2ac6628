"""Frame renderer: crops each viewport and scales it back to full size.

Each frame depends only on its viewport and the (read-only) source image, so
frames can be rendered on a thread pool. Output order always matches the
viewport order. Frames are rendered in small batches and yielded as PIL Images
so the encoder can stream them without holding the whole video in memory.

Any failure aborts the render: frames are never skipped or replaced.
"""

from concurrent.futures import ThreadPoolExecutor

from PIL import Image

from src.pipeline.errors import RenderFailure

# Print progress every N frames
PROGRESS_EVERY = 50

# Frames in flight per worker when rendering in parallel
BATCH_PER_WORKER = 4


def render_frame(image, viewport, out_width, out_height):
    """Crop one viewport from the source and resize it to the output size.

    Args:
        image: Source PIL Image.
        viewport: Viewport to crop.
        out_width: Output frame width (source width).
        out_height: Output frame height (source height).

    Returns:
        PIL Image (RGB, out_width x out_height).
    """
    frame = image.crop(viewport.box)
    if frame.size != (out_width, out_height):
        frame = frame.resize((out_width, out_height), Image.LANCZOS)
    if frame.mode != "RGB":
        frame = frame.convert("RGB")
    return frame


def _render_one(render, image, index, viewport, out_width, out_height):
    try:
        frame = render(image, viewport, out_width, out_height)
    except RenderFailure:
        raise
    except Exception as e:
        raise RenderFailure(f"Frame {index} ({viewport}): {e}") from e
    if frame is None:
        raise RenderFailure(f"Frame {index} ({viewport}): renderer returned None")
    return frame


def _batches(items, size):
    batch = []
    for item in items:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch


def render_frames(image, viewports, out_width, out_height, render=render_frame, workers=1):
    """Render every viewport, in order.

    Args:
        image: Source image handle, passed to ``render`` untouched.
        viewports: Iterable of Viewport in frame order.
        out_width: Output frame width.
        out_height: Output frame height.
        render: Crop/resize collaborator, (image, viewport, w, h) -> frame.
        workers: Render threads. 1 renders inline.

    Yields:
        Rendered frames in viewport order.

    Raises:
        RenderFailure: the collaborator failed on any frame.
    """
    rendered = 0
    if workers <= 1:
        for i, vp in enumerate(viewports):
            yield _render_one(render, image, i, vp, out_width, out_height)
            rendered += 1
            if rendered % PROGRESS_EVERY == 0:
                print(f"[Renderer]   generated frames: {rendered}")
        return

    with ThreadPoolExecutor(max_workers=workers) as pool:
        for batch in _batches(enumerate(viewports), workers * BATCH_PER_WORKER):
            futures = [
                pool.submit(_render_one, render, image, i, vp, out_width, out_height)
                for i, vp in batch
            ]
            for fut in futures:
                yield fut.result()
                rendered += 1
                if rendered % PROGRESS_EVERY == 0:
                    print(f"[Renderer]   generated frames: {rendered}")
