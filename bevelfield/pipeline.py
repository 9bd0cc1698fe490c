"""Bevel pipeline orchestration: RGBA buffer in, (gray, coverage) buffer out."""

import logging
import time
from pathlib import Path
from typing import Optional

import numpy as np
from bevelfield.errors import InvalidInputError, ResourceExhaustedError
from bevelfield.image_io import Rasterizer, ImageSource, load_pixels, save_output
from bevelfield.mask import classify_pixels, find_boundary_pixels, validate_pixels
from bevelfield.relaxation import relax
from bevelfield.remap import reconcile_edges, remap_field
from bevelfield.resample import PillowResampler, match_shape
from bevelfield.scaling import plan_solve
from bevelfield.sparse import build_neighbor_table
from bevelfield.types import BevelConfig, BevelResult, MODE_WORKING

logger = logging.getLogger(__name__)


def _check_output_size(output_size) -> tuple[int, int]:
    try:
        width, height = (int(v) for v in output_size)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Output size must be (width, height), got {output_size!r}") from e
    if width <= 0 or height <= 0:
        raise InvalidInputError(f"Output size must be positive, got {width}x{height}")
    return width, height


def process_pixels(
    pixels: np.ndarray,
    config: Optional[BevelConfig] = None,
    output_size: Optional[tuple[int, int]] = None,
    resampler=None,
) -> BevelResult:
    """Compute the bevel field for an RGBA buffer.

    Pure function: the input buffer is never modified, and nothing is cached
    between calls.

    Args:
        pixels: (H, W, 4) uint8 RGBA buffer
        config: Pipeline settings (defaults to BevelConfig())
        output_size: Final (width, height); defaults to the source size
        resampler: Object with resize_pixels / resize_field methods
            (defaults to PillowResampler)

    Returns:
        BevelResult whose output is a uint8 (height, width, 2) buffer of
        (gray, coverage) pairs at exactly output_size.

    Raises:
        InvalidInputError: Bad buffer or output size (before any mask work)
        ConfigError: Invalid configuration
        ResourceExhaustedError: Working buffers could not be allocated
    """
    config = config if config is not None else BevelConfig()
    config.validate()
    source = validate_pixels(pixels)
    source_h, source_w = source.shape[:2]
    out_w, out_h = _check_output_size(output_size if output_size is not None else (source_w, source_h))
    resampler = resampler if resampler is not None else PillowResampler()

    t_start = time.perf_counter()
    plan = plan_solve(source_w, source_h, config)
    solve_w, solve_h = plan.solve_size

    try:
        if plan.solve_size == (source_w, source_h):
            working = source
        else:
            working = match_shape(resampler.resize_pixels(source, plan.solve_size), (solve_h, solve_w))

        shape_mask = classify_pixels(working)
        boundary_mask = find_boundary_pixels(shape_mask, config.connectivity)
        table = build_neighbor_table(shape_mask, boundary_mask) if config.use_neighbor_table else None

        logger.info(
            "Solving %dx%d (%s mode, %.1f%% scale, %s, %d sweeps)...",
            solve_w, solve_h, plan.mode, plan.scale_factor * 100.0, config.method, plan.iterations,
        )
        relaxation = relax(shape_mask, boundary_mask, config.solver_config(plan.iterations), table=table)
        stats = relaxation.stats
        logger.info(
            "  Poisson solve: %d sweeps in %.3fs (%.2f Mpixels/s), residual %.2e",
            stats.sweeps, stats.elapsed, stats.mpixels_per_second, stats.residual,
        )
        logger.debug(
            "  Shape pixels: %d / %d, interior %d, boundary %d",
            int(shape_mask.sum()), solve_w * solve_h, stats.interior_pixels, stats.boundary_pixels,
        )

        output = remap_field(relaxation.field, shape_mask, boundary_mask, config.contrast_exponent)

        if (solve_w, solve_h) != (out_w, out_h):
            upsampled = match_shape(resampler.resize_field(output, (out_w, out_h)), (out_h, out_w))
            if (source_w, source_h) == (out_w, out_h):
                reference = source
            else:
                reference = match_shape(resampler.resize_pixels(source, (out_w, out_h)), (out_h, out_w))
            output = reconcile_edges(upsampled, reference)
    except MemoryError as e:
        raise ResourceExhaustedError(
            f"Out of memory solving at {solve_w}x{solve_h} for a {out_w}x{out_h} output"
        ) from e

    elapsed = time.perf_counter() - t_start
    if plan.mode == MODE_WORKING and plan.scale_factor < 1.0:
        logger.debug("  Working resolution speedup: ~%dx", round(1.0 / plan.scale_factor ** 2))
    logger.info("Total bevel time: %.3fs", elapsed)

    return BevelResult(
        output=output,
        mode=plan.mode,
        source_size=(source_w, source_h),
        solve_size=plan.solve_size,
        output_size=(out_w, out_h),
        stats=stats,
        elapsed=elapsed,
    )


def process_file(
    source: ImageSource,
    output_path: Optional[str | Path] = None,
    config: Optional[BevelConfig] = None,
    output_size: Optional[tuple[int, int]] = None,
    rasterizer: Optional[Rasterizer] = None,
) -> BevelResult:
    """Load an image, compute its bevel field, and optionally save it as PNG."""
    pixels = load_pixels(source, rasterizer=rasterizer)
    result = process_pixels(pixels, config=config, output_size=output_size)
    if output_path is not None:
        save_output(result.output, output_path)
        logger.info("Saved %s", output_path)
    return result
