"""Test configuration for bevelfield: synthetic logo buffers."""

import numpy as np
import pytest

INK = (30, 60, 90, 255)


def rgba_from_mask(mask: np.ndarray, background: str = "transparent") -> np.ndarray:
    """Paint mask pixels with INK on a transparent or opaque-white background."""
    height, width = mask.shape
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    if background == "white":
        pixels[...] = 255
    pixels[mask] = INK
    return pixels


def disk_mask(size: int, radius: float, center=None) -> np.ndarray:
    cy, cx = center if center is not None else (size // 2, size // 2)
    y, x = np.ogrid[0:size, 0:size]
    return (x - cx) ** 2 + (y - cy) ** 2 <= radius ** 2


@pytest.fixture
def make_rgba():
    return rgba_from_mask


@pytest.fixture
def make_disk_mask():
    return disk_mask


@pytest.fixture
def disk_pixels():
    """64x64 buffer with an ink disk of radius 28 on a transparent background."""
    return rgba_from_mask(disk_mask(64, 28))


@pytest.fixture
def square_mask():
    mask = np.zeros((40, 40), dtype=bool)
    mask[5:35, 5:35] = True
    return mask


@pytest.fixture
def holed_square_mask(square_mask):
    """Filled square with its center pixel carved out."""
    mask = square_mask.copy()
    mask[20, 20] = False
    return mask


@pytest.fixture
def antialiased_disk_pixels():
    """96x96 disk whose edge pixels carry fractional alpha."""
    size = 96
    y, x = np.mgrid[0:size, 0:size]
    dist = np.sqrt((x - 47.5) ** 2 + (y - 47.5) ** 2)
    alpha = np.clip(40.0 - dist + 0.5, 0.0, 1.0)
    pixels = np.zeros((size, size, 4), dtype=np.uint8)
    pixels[..., :3] = INK[:3]
    pixels[..., 3] = np.round(alpha * 255).astype(np.uint8)
    return pixels
