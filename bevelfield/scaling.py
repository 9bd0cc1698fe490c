"""
Resolution policy: where the Poisson solve runs and for how many sweeps.

Direct mode solves at the source resolution clamped into a size band, with a
sweep count that scales quadratically with resolution (gradient width in the
relaxation grows with the square root of the sweep count). Working mode
always solves at a small fixed size with a fixed SOR sweep count (converted
to the equivalent count for slower disciplines) and leaves the upsampling to
the caller.
"""

from bevelfield import defaults
from bevelfield.errors import InvalidInputError
from bevelfield.types import BevelConfig, SolvePlan, MODE_DIRECT, MODE_WORKING


def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise InvalidInputError(f"Width and height must be positive, got {width}x{height}")


def clamp_resolution(
    width: int,
    height: int,
    min_size: int = defaults.DEFAULT_MIN_SIZE,
    max_size: int = defaults.DEFAULT_MAX_SIZE,
) -> tuple[int, int]:
    """Clamp the longer side into [min_size, max_size], preserving aspect ratio."""
    _check_size(width, height)
    if width > height:
        if width > max_size:
            height = height * max_size / width
            width = max_size
        elif width < min_size:
            height = height * min_size / width
            width = min_size
    else:
        if height > max_size:
            width = width * max_size / height
            height = max_size
        elif height < min_size:
            width = width * min_size / height
            height = min_size
    return max(1, int(round(width))), max(1, int(round(height)))


def working_resolution(
    width: int,
    height: int,
    working_size: int = defaults.DEFAULT_WORKING_SIZE,
) -> tuple[int, int]:
    """Scale so the longer side equals working_size (up or down)."""
    _check_size(width, height)
    scale = working_size / max(width, height)
    return max(1, int(round(width * scale))), max(1, int(round(height * scale)))


def vector_raster_size(
    width: float,
    height: float,
    size: int = defaults.VECTOR_RASTER_SIZE,
) -> tuple[int, int]:
    """High-fidelity raster size for a vector image: longer side = size."""
    if width <= 0 or height <= 0:
        raise InvalidInputError(f"Vector image has no extent ({width}x{height})")
    aspect = width / height
    if width > height:
        return size, max(1, int(round(size / aspect)))
    return max(1, int(round(size * aspect))), size


def iteration_count(
    method: str,
    width: int,
    height: int,
    gradient_proportion: float = defaults.DEFAULT_GRADIENT_PROPORTION,
    reference_size: int = defaults.DEFAULT_REFERENCE_SIZE,
    max_iterations: int = defaults.MAX_SCALED_ITERATIONS,
) -> int:
    """
    Sweep count that keeps the gradient width a fixed fraction of the image.

    Scales the per-method base count by (min(W, H) / reference_size)^2 and by
    gradient_proportion / BASE_GRADIENT_PROPORTION, capped at max_iterations.
    """
    if method not in defaults.BASE_ITERATIONS:
        raise ValueError(f"Unknown method: {method!r}")
    _check_size(width, height)
    base = defaults.BASE_ITERATIONS[method]
    scale = min(width, height) / reference_size
    iteration_scale = scale * scale * (gradient_proportion / defaults.BASE_GRADIENT_PROPORTION)
    scaled = int(round(base * iteration_scale))
    return max(1, min(scaled, max_iterations))


def working_iteration_count(method: str, working_iterations: int) -> int:
    """
    Sweeps for a working-resolution solve.

    working_iterations is counted in SOR sweeps; slower disciplines get the
    count that spreads the gradient as far, using the BASE_ITERATIONS ratios.
    """
    if method not in defaults.BASE_ITERATIONS:
        raise ValueError(f"Unknown method: {method!r}")
    ratio = defaults.BASE_ITERATIONS[method] / defaults.BASE_ITERATIONS[defaults.METHOD_SOR]
    return int(round(working_iterations * ratio))


def plan_solve(width: int, height: int, config: BevelConfig) -> SolvePlan:
    """Decide solve resolution and sweep count for a width x height source."""
    _check_size(width, height)
    if config.use_working_resolution:
        solve_size = working_resolution(width, height, config.working_size)
        return SolvePlan(
            mode=MODE_WORKING,
            source_size=(width, height),
            solve_size=solve_size,
            iterations=working_iteration_count(config.method, config.working_iterations),
        )

    solve_size = clamp_resolution(width, height, config.min_size, config.max_size)
    iterations = iteration_count(
        config.method,
        solve_size[0],
        solve_size[1],
        config.gradient_proportion,
        config.reference_size,
        config.max_scaled_iterations,
    )
    return SolvePlan(
        mode=MODE_DIRECT,
        source_size=(width, height),
        solve_size=solve_size,
        iterations=iterations,
    )
