"""
Reference steady-state solve of the bevel equation.

Assembles the interior system 4 u(p) - S(p) = C directly and solves it with
conjugate gradients preconditioned by algebraic multigrid. This is the fixed
point every relaxation discipline approaches.
"""

import logging
from typing import Optional

import numpy as np
from pyamg import smoothed_aggregation_solver
from scipy.sparse import coo_matrix
from scipy.sparse.linalg import cg
from bevelfield import defaults
from bevelfield.sparse import build_neighbor_table
from bevelfield.types import NeighborTable

logger = logging.getLogger(__name__)

PRECISION = np.float64
SOLVER_TOL = 1e-10


def build_interior_system(table: NeighborTable, source_term: float):
    """
    Build the interior matrix (CSR) and right-hand side.

    Rows and columns follow table.interior. Boundary neighbors are held at
    zero so they drop out of the system.
    """
    height, width = table.shape
    n = table.pixel_count

    position = np.full(height * width, -1, dtype=np.int64)
    position[table.interior] = np.arange(n, dtype=np.int64)

    rows = [np.arange(n, dtype=np.int64)]
    cols = [np.arange(n, dtype=np.int64)]
    vals = [np.full(n, 4.0, dtype=PRECISION)]

    for d in range(4):
        neighbor = table.neighbors[:, d]
        col = np.where(neighbor >= 0, position[np.maximum(neighbor, 0)], -1)
        valid = col >= 0
        rows.append(np.flatnonzero(valid))
        cols.append(col[valid])
        vals.append(np.full(int(valid.sum()), -1.0, dtype=PRECISION))

    A = coo_matrix(
        (np.concatenate(vals), (np.concatenate(rows), np.concatenate(cols))),
        shape=(n, n),
        dtype=PRECISION,
    ).tocsr()
    rhs = np.full(n, source_term, dtype=PRECISION)
    return A, rhs


def solve_steady_state(
    shape_mask: np.ndarray,
    boundary_mask: np.ndarray,
    source_term: float = defaults.DEFAULT_SOURCE_TERM,
    table: Optional[NeighborTable] = None,
    tol: float = SOLVER_TOL,
    maxiter: int = 2000,
) -> np.ndarray:
    """Solve the bevel equation exactly; boundary and outside pixels are 0."""
    if table is None:
        table = build_neighbor_table(shape_mask, boundary_mask)

    u = np.zeros(table.shape, dtype=PRECISION)
    if table.pixel_count == 0:
        return u

    A, rhs = build_interior_system(table, source_term)
    multilevel_solver = smoothed_aggregation_solver(
        A,
        strength="symmetric",
        max_coarse=10,
        max_levels=10,
    )
    preconditioner = multilevel_solver.aspreconditioner()
    x, info = cg(A, rhs, M=preconditioner, rtol=tol, maxiter=maxiter)

    if info > 0:
        logger.warning("Steady-state solve did not converge after %d iterations", info)
    elif info < 0:
        raise RuntimeError(f"CG failed with error code {info}")

    u.ravel()[table.interior] = x
    return u
