"""
Relaxation solver for the bevel potential.

Solves the discrete screened problem u(p) = (C + S(p)) / 4 on the interior
pixels, where S(p) is the sum of the four axis-aligned neighbors (neighbors
outside the shape or off the grid count as 0). Boundary and outside pixels
stay at 0.

Disciplines:
- jacobi: every pixel updated from the previous sweep (two buffers)
- gauss-seidel: in place, red half-sweep then black half-sweep
- sor: as gauss-seidel, blended with the old value by omega

Each discipline runs either on the dense grid (neighbors checked on the fly)
or through a precomputed NeighborTable. Both paths give identical results.
"""

import time
from typing import Callable, Optional

import numba
import numpy as np
from bevelfield import defaults
from bevelfield.errors import InvalidInputError
from bevelfield.types import NeighborTable, RelaxationResult, SolverConfig, SolveStats

PRECISION = np.float64

RED = 0
BLACK = 1


# ---------------------------------------------------------------------------
# Dense kernels
# ---------------------------------------------------------------------------

@numba.njit(cache=True)
def _dense_stencil_sum(u, inside, i, j):
    height, width = u.shape
    sum_val = 0.0
    if j + 1 < width and inside[i, j + 1]:
        sum_val += u[i, j + 1]
    if j > 0 and inside[i, j - 1]:
        sum_val += u[i, j - 1]
    if i > 0 and inside[i - 1, j]:
        sum_val += u[i - 1, j]
    if i + 1 < height and inside[i + 1, j]:
        sum_val += u[i + 1, j]
    return sum_val


@numba.njit(cache=True)
def _dense_half_sweep(u, inside, boundary, parity, source_term, omega):
    """Update every pixel with (i + j) % 2 == parity in place."""
    height, width = u.shape
    for i in range(height):
        for j in range((i + parity) & 1, width, 2):
            if not inside[i, j] or boundary[i, j]:
                u[i, j] = 0.0
                continue
            sum_val = _dense_stencil_sum(u, inside, i, j)
            u[i, j] = omega * 0.25 * (source_term + sum_val) + (1.0 - omega) * u[i, j]


@numba.njit(cache=True)
def _dense_jacobi_sweep(src, dst, inside, boundary, source_term):
    height, width = src.shape
    for i in range(height):
        for j in range(width):
            if not inside[i, j] or boundary[i, j]:
                dst[i, j] = 0.0
                continue
            dst[i, j] = 0.25 * (source_term + _dense_stencil_sum(src, inside, i, j))


@numba.njit(cache=True)
def _dense_residual(u, inside, boundary, source_term):
    height, width = u.shape
    total = 0.0
    count = 0
    for i in range(height):
        for j in range(width):
            if not inside[i, j] or boundary[i, j]:
                continue
            r = _dense_stencil_sum(u, inside, i, j) - 4.0 * u[i, j] + source_term
            total += r * r
            count += 1
    if count == 0:
        return 0.0
    return np.sqrt(total / count)


# ---------------------------------------------------------------------------
# Table-driven kernels (operate on the flattened field)
# ---------------------------------------------------------------------------

@numba.njit(cache=True)
def _table_half_sweep(u, interior, neighbors, order, source_term, omega):
    for m in range(order.shape[0]):
        k = order[m]
        idx = interior[k]
        sum_val = 0.0
        for d in range(4):
            n = neighbors[k, d]
            if n >= 0:
                sum_val += u[n]
        u[idx] = omega * 0.25 * (source_term + sum_val) + (1.0 - omega) * u[idx]


@numba.njit(cache=True)
def _table_jacobi_sweep(src, dst, interior, boundary, neighbors, source_term):
    for m in range(boundary.shape[0]):
        dst[boundary[m]] = 0.0
    for k in range(interior.shape[0]):
        sum_val = 0.0
        for d in range(4):
            n = neighbors[k, d]
            if n >= 0:
                sum_val += src[n]
        dst[interior[k]] = 0.25 * (source_term + sum_val)


@numba.njit(cache=True)
def _table_clamp(u, boundary):
    for m in range(boundary.shape[0]):
        u[boundary[m]] = 0.0


@numba.njit(cache=True)
def _table_residual(u, interior, neighbors, source_term):
    n_pixels = interior.shape[0]
    if n_pixels == 0:
        return 0.0
    total = 0.0
    for k in range(n_pixels):
        sum_val = 0.0
        for d in range(4):
            n = neighbors[k, d]
            if n >= 0:
                sum_val += u[n]
        r = sum_val - 4.0 * u[interior[k]] + source_term
        total += r * r
    return np.sqrt(total / n_pixels)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _check_masks(shape_mask, boundary_mask, table):
    if shape_mask.ndim != 2 or shape_mask.shape != boundary_mask.shape:
        raise InvalidInputError(
            f"Shape mask {shape_mask.shape} and boundary mask {boundary_mask.shape} must be matching 2D arrays"
        )
    if table is not None and tuple(table.shape) != shape_mask.shape:
        raise InvalidInputError(
            f"Neighbor table was built for {table.shape}, masks are {shape_mask.shape}"
        )
    inside = np.ascontiguousarray(shape_mask, dtype=bool)
    boundary = np.ascontiguousarray(boundary_mask, dtype=bool)
    return inside, boundary


def compute_residual(
    u: np.ndarray,
    shape_mask: np.ndarray,
    boundary_mask: np.ndarray,
    source_term: float = defaults.DEFAULT_SOURCE_TERM,
    table: Optional[NeighborTable] = None,
) -> float:
    """
    RMS residual of the discrete equation over the interior pixels.

    For each interior pixel the residual is S(p) - 4 u(p) + C, which is zero
    once u solves Δu = -C exactly. Returns 0.0 for an empty interior.
    """
    inside, boundary = _check_masks(shape_mask, boundary_mask, table)
    field = np.ascontiguousarray(u, dtype=PRECISION)
    if table is not None:
        return float(_table_residual(field.ravel(), table.interior, table.neighbors, source_term))
    return float(_dense_residual(field, inside, boundary, source_term))


def relax(
    shape_mask: np.ndarray,
    boundary_mask: np.ndarray,
    config: SolverConfig,
    table: Optional[NeighborTable] = None,
    on_sweep: Optional[Callable[[int, np.ndarray], None]] = None,
) -> RelaxationResult:
    """
    Relax the potential field from zero.

    Args:
        shape_mask: Boolean 2D array, True inside the shape
        boundary_mask: Boolean 2D array of pixels clamped to 0
        config: Discipline, source term and termination policy
        table: Optional precomputed neighbors; when absent neighbors are
            resolved on the fly from the masks
        on_sweep: Optional observer called as on_sweep(sweep, field) after
            every completed sweep. It must not modify the field.

    Returns:
        RelaxationResult with the field (float64, same shape as the masks)
        and SolveStats. Under adaptive termination the residual is checked
        after every 10th sweep; the solve stops once it drops below the
        threshold or max_iterations sweeps have run.
    """
    config.validate()
    inside, boundary = _check_masks(shape_mask, boundary_mask, table)
    height, width = inside.shape

    if table is not None:
        interior_count = table.pixel_count
        boundary_count = int(table.boundary.size)
    else:
        interior_count = int(np.count_nonzero(inside & ~boundary))
        boundary_count = int(np.count_nonzero(boundary))

    jacobi = config.method == defaults.METHOD_JACOBI
    omega = config.effective_omega
    source_term = float(config.source_term)
    limit = config.sweep_limit if interior_count > 0 else 0

    u = np.zeros((height, width), dtype=PRECISION)
    scratch = np.zeros_like(u) if jacobi else None

    def residual_of(field):
        if table is not None:
            return _table_residual(field.ravel(), table.interior, table.neighbors, source_term)
        return _dense_residual(field, inside, boundary, source_term)

    sweeps = 0
    residual = None
    residual_sweep = -1
    converged = False

    t_start = time.perf_counter()
    for sweep in range(1, limit + 1):
        if table is not None:
            flat = u.ravel()
            if jacobi:
                _table_jacobi_sweep(flat, scratch.ravel(), table.interior, table.boundary,
                                    table.neighbors, source_term)
                u, scratch = scratch, u
            else:
                _table_clamp(flat, table.boundary)
                _table_half_sweep(flat, table.interior, table.neighbors, table.red, source_term, omega)
                _table_half_sweep(flat, table.interior, table.neighbors, table.black, source_term, omega)
        else:
            if jacobi:
                _dense_jacobi_sweep(u, scratch, inside, boundary, source_term)
                u, scratch = scratch, u
            else:
                _dense_half_sweep(u, inside, boundary, RED, source_term, omega)
                _dense_half_sweep(u, inside, boundary, BLACK, source_term, omega)
        sweeps = sweep

        if on_sweep is not None:
            on_sweep(sweep, u)

        if config.adaptive and sweep % defaults.CONVERGENCE_CHECK_INTERVAL == 0:
            residual = float(residual_of(u))
            residual_sweep = sweep
            if residual < config.convergence_threshold:
                converged = True
                break
    elapsed = time.perf_counter() - t_start

    if interior_count == 0:
        residual = 0.0
        converged = True
    elif residual_sweep != sweeps:
        residual = float(residual_of(u))

    stats = SolveStats(
        method=config.method,
        sweeps=sweeps,
        max_sweeps=config.sweep_limit,
        elapsed=elapsed,
        residual=residual,
        converged=converged,
        interior_pixels=interior_count,
        boundary_pixels=boundary_count,
    )
    return RelaxationResult(field=u, stats=stats)
