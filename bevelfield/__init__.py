"""Poisson-relaxation bevel gradients for logo shapes.

Turns an RGBA logo buffer into a (gray, coverage) buffer whose gray level
falls off smoothly from the shape edge toward its interior.

Example:
    import numpy as np
    from bevelfield import BevelConfig, process_pixels

    result = process_pixels(rgba, BevelConfig(method="sor"))
    gray, coverage = result.gray, result.coverage
"""

from .errors import (
    BevelError,
    InvalidInputError,
    ConfigError,
    ConfigLoadError,
    ResourceExhaustedError,
)
from .types import BevelConfig, SolverConfig, NeighborTable, SolveStats, BevelResult
from .mask import classify_pixels, find_boundary_pixels, find_interior_pixels
from .sparse import build_neighbor_table
from .relaxation import relax, compute_residual
from .steady import solve_steady_state
from .scaling import plan_solve, iteration_count, working_iteration_count
from .remap import remap_field, reconcile_edges
from .pipeline import process_pixels, process_file

__all__ = [
    'BevelError',
    'InvalidInputError',
    'ConfigError',
    'ConfigLoadError',
    'ResourceExhaustedError',
    'BevelConfig',
    'SolverConfig',
    'NeighborTable',
    'SolveStats',
    'BevelResult',
    'classify_pixels',
    'find_boundary_pixels',
    'find_interior_pixels',
    'build_neighbor_table',
    'relax',
    'compute_residual',
    'solve_steady_state',
    'plan_solve',
    'iteration_count',
    'working_iteration_count',
    'remap_field',
    'reconcile_edges',
    'process_pixels',
    'process_file',
]
