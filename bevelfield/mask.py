"""
Shape and boundary masks from RGBA pixel buffers.

A pixel is outside the shape iff it is opaque pure white (255, 255, 255, 255)
or fully transparent. Everything else, including anti-aliased edge pixels,
is inside. Boundary pixels are inside pixels with an outside or off-grid
neighbor; they are held at zero potential by the solver.
"""

import numba
import numpy as np
from bevelfield.errors import InvalidInputError

# Axis-aligned offsets first so the common case exits early
_OFFSETS_4 = np.array([(0, 1), (0, -1), (-1, 0), (1, 0)], dtype=np.int64)
_OFFSETS_8 = np.array(
    [(0, 1), (0, -1), (-1, 0), (1, 0), (-1, -1), (-1, 1), (1, -1), (1, 1)],
    dtype=np.int64,
)


def validate_pixels(pixels) -> np.ndarray:
    """Check that `pixels` is a non-empty (H, W, 4) uint8 buffer and return it as an array."""
    if pixels is None:
        raise InvalidInputError("Pixel buffer is None")
    arr = np.asarray(pixels)
    if arr.ndim != 3 or arr.shape[2] != 4:
        raise InvalidInputError(f"Expected an (H, W, 4) RGBA buffer, got shape {arr.shape}")
    height, width = arr.shape[:2]
    if height == 0 or width == 0:
        raise InvalidInputError(f"Pixel buffer has zero size ({width}x{height})")
    if arr.dtype != np.uint8:
        raise InvalidInputError(f"Expected 8-bit channels (uint8), got {arr.dtype}")
    return arr


def pixels_from_bytes(data: bytes, width: int, height: int) -> np.ndarray:
    """Wrap a row-major RGBA byte string as an (H, W, 4) buffer."""
    if not data:
        raise InvalidInputError("Pixel buffer is empty")
    if width <= 0 or height <= 0:
        raise InvalidInputError(f"Width and height must be positive, got {width}x{height}")
    expected = width * height * 4
    if len(data) != expected:
        raise InvalidInputError(
            f"Buffer holds {len(data)} bytes, expected {expected} for {width}x{height} RGBA"
        )
    return np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)


def classify_pixels(pixels: np.ndarray) -> np.ndarray:
    """Return the shape mask: True where the pixel is part of the shape."""
    pixels = validate_pixels(pixels)
    opaque_white = np.all(pixels == 255, axis=-1)
    transparent = pixels[..., 3] == 0
    return ~(opaque_white | transparent)


@numba.njit(cache=True)
def _mark_boundary(shape_mask: np.ndarray, offsets: np.ndarray, out: np.ndarray) -> None:
    height, width = shape_mask.shape
    for i in range(height):
        for j in range(width):
            if not shape_mask[i, j]:
                continue
            for k in range(offsets.shape[0]):
                ii = i + offsets[k, 0]
                jj = j + offsets[k, 1]
                if ii < 0 or ii >= height or jj < 0 or jj >= width or not shape_mask[ii, jj]:
                    out[i, j] = True
                    break


def find_boundary_pixels(shape_mask: np.ndarray, connectivity: int = 8) -> np.ndarray:
    """
    Find inside pixels with at least one outside neighbor.

    Args:
        shape_mask: Boolean 2D array where True = inside the shape
        connectivity: 8 (default) also checks diagonal neighbors; 4 checks
            only axis-aligned ones. Off-grid always counts as outside.

    Returns:
        Boolean 2D array where True = boundary pixel
    """
    if connectivity == 8:
        offsets = _OFFSETS_8
    elif connectivity == 4:
        offsets = _OFFSETS_4
    else:
        raise ValueError(f"connectivity must be 4 or 8, got {connectivity}")

    mask = np.ascontiguousarray(shape_mask, dtype=bool)
    boundary = np.zeros(mask.shape, dtype=bool)
    _mark_boundary(mask, offsets, boundary)
    return boundary


def find_interior_pixels(shape_mask: np.ndarray, boundary_mask: np.ndarray) -> np.ndarray:
    """Inside pixels that are not on the boundary (the solver's unknowns)."""
    return shape_mask & ~boundary_mask
