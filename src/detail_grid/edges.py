"""Edge-density scoring: the default detail collaborator.

The edge map is grayscale + a light blur + PIL's FIND_EDGES kernel, computed
once per image. PIL leaves the outer pixel ring of a 3x3 filter unfiltered, so
the image is edge-padded by one pixel before filtering and cropped back after:
flat borders score 0 like any other flat area.

A cell's detail score is the mean edge intensity inside the cell, normalized
to [0, 1].
"""

import numpy as np
from PIL import Image, ImageFilter

# Blur before edge detection so sensor noise doesn't count as detail
EDGE_BLUR_RADIUS = 1.0


def build_edge_map(image, blur_radius=EDGE_BLUR_RADIUS):
    """Build a grayscale edge map for an image.

    Args:
        image: PIL Image (any mode).
        blur_radius: Gaussian blur applied before edge detection. 0 disables.

    Returns:
        PIL Image in mode "L", same size as the input.
    """
    gray = image.convert("L")
    if blur_radius > 0:
        gray = gray.filter(ImageFilter.GaussianBlur(blur_radius))
    width, height = gray.size
    padded = Image.fromarray(np.pad(np.asarray(gray), 1, mode="edge"))
    edges = padded.filter(ImageFilter.FIND_EDGES)
    return edges.crop((1, 1, width + 1, height + 1))


def mean_intensity(edge_map, rect):
    """Mean intensity of a region of an "L" image, in [0, 1].

    Args:
        edge_map: PIL Image in mode "L".
        rect: (x, y, w, h) region.

    Returns:
        Float mean / 255. NaN for an empty region, which the grid scorer
        rejects.
    """
    x, y, w, h = rect
    region = np.asarray(edge_map.crop((x, y, x + w, y + h)), dtype=np.float32)
    if region.size == 0:
        return float("nan")
    return float(region.mean()) / 255.0


def edge_scorer(image):
    """Return (edge_map, cell_score) for use with score_grid."""
    return build_edge_map(image), mean_intensity
