"""Source image loading: decode once, report dimensions."""

import os

from PIL import Image, UnidentifiedImageError

from src.pipeline.errors import InvalidImage


def load_image(path):
    """Open and fully decode the source image as RGB.

    Args:
        path: Path to a still image (JPEG, PNG, ...).

    Returns:
        PIL Image in mode "RGB".

    Raises:
        InvalidImage: file missing, undecodable, or zero area.
    """
    if not os.path.isfile(path):
        raise InvalidImage(f"Input file not found: {path}")
    try:
        with Image.open(path) as img:
            img.load()
            image = img.convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImage(f"Could not read image {path}: {e}") from e

    image_info(image)
    return image


def image_info(image):
    """(W, H) of a decoded image.

    Raises:
        InvalidImage: the image has zero area.
    """
    width, height = image.size
    if width <= 0 or height <= 0:
        raise InvalidImage(f"Image has zero area: {width}x{height}")
    return width, height
