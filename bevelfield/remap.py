"""Turn a solved potential field into a (gray, coverage) output buffer."""

import numpy as np
from bevelfield import defaults
from bevelfield.errors import InvalidInputError
from bevelfield.mask import classify_pixels, find_interior_pixels, validate_pixels


def to_byte(values: np.ndarray) -> np.ndarray:
    """Round and clamp to 0-255 (canvas ImageData semantics)."""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def interior_maximum(u: np.ndarray, interior_mask: np.ndarray) -> float:
    """Largest potential over the interior pixels, 0.0 for an empty interior."""
    if not interior_mask.any():
        return 0.0
    return float(u[interior_mask].max())


def remap_field(
    u: np.ndarray,
    shape_mask: np.ndarray,
    boundary_mask: np.ndarray,
    exponent: float = defaults.DEFAULT_CONTRAST_EXPONENT,
) -> np.ndarray:
    """
    Normalize by the interior maximum and remap to gray levels.

    Inside pixels get gray = 255 * (1 - (u / max)^exponent) with full
    coverage; outside pixels get white with zero coverage. A zero maximum
    (empty interior or unsolved field) gives flat white inside.

    Returns:
        uint8 array shaped (H, W, 2): [..., 0] gray, [..., 1] coverage
    """
    height, width = u.shape
    out = np.empty((height, width, 2), dtype=np.uint8)
    out[..., 0] = defaults.OUTSIDE_GRAY
    out[..., 1] = defaults.OUTSIDE_COVERAGE

    max_val = interior_maximum(u, find_interior_pixels(shape_mask, boundary_mask))
    if max_val > 0.0:
        ratio = np.clip(u[shape_mask] / max_val, 0.0, 1.0)
        out[shape_mask, 0] = to_byte(255.0 * (1.0 - ratio ** exponent))
    else:
        out[shape_mask, 0] = 255
    out[shape_mask, 1] = defaults.INSIDE_COVERAGE
    return out


def reconcile_edges(upsampled: np.ndarray, source_pixels: np.ndarray) -> np.ndarray:
    """
    Re-derive an upsampled field against the full-resolution source.

    Outside source pixels become white with zero coverage. Inside pixels keep
    the upsampled gray and take the source alpha as coverage, so anti-aliased
    edges stay crisp. Inside pixels the upsample left with zero coverage get
    gray 0 rather than a stale interpolated value.
    """
    source_pixels = validate_pixels(source_pixels)
    if upsampled.shape != source_pixels.shape[:2] + (2,):
        raise InvalidInputError(
            f"Upsampled field {upsampled.shape} does not match source {source_pixels.shape[:2]}"
        )
    inside = classify_pixels(source_pixels)

    out = np.empty_like(upsampled)
    out[..., 0] = defaults.OUTSIDE_GRAY
    out[..., 1] = defaults.OUTSIDE_COVERAGE

    gray = np.where(upsampled[..., 1] == 0, 0, upsampled[..., 0])
    out[inside, 0] = gray[inside]
    out[inside, 1] = source_pixels[..., 3][inside]
    return out
