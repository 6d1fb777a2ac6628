"""Shared test fixtures for the flyover test suite."""

import os
import shutil
import tempfile

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def tmp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    d = tempfile.mkdtemp()
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def busy_corner_image():
    """200x160 flat gray image with a noisy patch in the top-left corner.

    The patch covers grid cell 0 of a 4x4 grid (50x40 cells), so edge scoring
    should rank that cell first.
    """
    arr = np.full((160, 200, 3), 128, dtype=np.uint8)
    rng = np.random.default_rng(7)
    arr[0:40, 0:50] = rng.integers(0, 256, size=(40, 50, 3), dtype=np.uint8)
    return Image.fromarray(arr, "RGB")


@pytest.fixture
def busy_corner_path(tmp_dir, busy_corner_image):
    """busy_corner_image saved as PNG."""
    path = os.path.join(tmp_dir, "busy.png")
    busy_corner_image.save(path)
    return path


@pytest.fixture
def gradient_image():
    """120x80 RGB image whose red channel encodes x and green encodes y."""
    xs = np.tile(np.arange(120, dtype=np.uint8), (80, 1))
    ys = np.tile(np.arange(80, dtype=np.uint8)[:, None], (1, 120))
    arr = np.stack([xs, ys, np.zeros_like(xs)], axis=2)
    return Image.fromarray(arr, "RGB")


def table_scorer(scores):
    """Fake cell_score that returns scores[i] for the i-th call, row-major."""
    calls = []

    def score(image, rect):
        calls.append(rect)
        return scores[len(calls) - 1]

    score.calls = calls
    return score


@pytest.fixture
def make_table_scorer():
    return table_scorer
