"""Core data types for bevelfield."""

from dataclasses import dataclass
import numbers
import numpy as np
from bevelfield import defaults
from bevelfield.errors import ConfigError

MODE_DIRECT = "direct"
MODE_WORKING = "working"


def _check_types(config, integers, reals=(), flags=()) -> None:
    """Raise ConfigError unless each named field holds a value of its type.

    bool is rejected where a number is expected, and only a real bool counts
    as a flag (JSON "false" strings are not accepted).
    """
    for name in integers:
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise ConfigError(f"{name} must be an integer, got {value!r}")
    for name in reals:
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise ConfigError(f"{name} must be a number, got {value!r}")
    for name in flags:
        value = getattr(config, name)
        if not isinstance(value, (bool, np.bool_)):
            raise ConfigError(f"{name} must be true or false, got {value!r}")


def _check_method(method: str) -> None:
    if method not in defaults.METHODS:
        raise ConfigError(f"Unknown method: {method!r}. Available: {list(defaults.METHODS)}")


@dataclass(frozen=True)
class SolverConfig:
    """Settings for one relaxation solve.

    Attributes:
        method: Update discipline ("jacobi", "gauss-seidel" or "sor")
        iterations: Fixed sweep count (ignored when adaptive is set)
        source_term: Constant C in Δu = -C
        omega: Relaxation factor, only used by SOR
        adaptive: Stop on residual threshold instead of a fixed count
        convergence_threshold: RMS residual that ends an adaptive solve
        max_iterations: Sweep cap for adaptive solves
    """
    method: str = defaults.DEFAULT_METHOD
    iterations: int = defaults.DEFAULT_WORKING_ITERATIONS
    source_term: float = defaults.DEFAULT_SOURCE_TERM
    omega: float = defaults.DEFAULT_OMEGA
    adaptive: bool = defaults.DEFAULT_ADAPTIVE_CONVERGENCE
    convergence_threshold: float = defaults.DEFAULT_CONVERGENCE_THRESHOLD
    max_iterations: int = defaults.DEFAULT_MAX_ITERATIONS

    @property
    def sweep_limit(self) -> int:
        """Largest number of sweeps this configuration can run."""
        return self.max_iterations if self.adaptive else self.iterations

    @property
    def effective_omega(self) -> float:
        return self.omega if self.method == defaults.METHOD_SOR else 1.0

    def validate(self) -> None:
        _check_method(self.method)
        _check_types(
            self,
            integers=("iterations", "max_iterations"),
            reals=("source_term", "omega", "convergence_threshold"),
            flags=("adaptive",),
        )
        if self.iterations < 0:
            raise ConfigError(f"iterations must be >= 0, got {self.iterations}")
        if not 0.0 < self.omega < 2.0:
            raise ConfigError(f"omega must lie in (0, 2), got {self.omega}")
        if self.adaptive:
            if self.max_iterations < 1:
                raise ConfigError(f"max_iterations must be >= 1, got {self.max_iterations}")
            if self.convergence_threshold <= 0.0:
                raise ConfigError(
                    f"convergence_threshold must be positive, got {self.convergence_threshold}"
                )


@dataclass(frozen=True)
class BevelConfig:
    """Per-invocation settings for the whole bevel pipeline."""
    method: str = defaults.DEFAULT_METHOD
    adaptive_convergence: bool = defaults.DEFAULT_ADAPTIVE_CONVERGENCE
    convergence_threshold: float = defaults.DEFAULT_CONVERGENCE_THRESHOLD
    max_iterations: int = defaults.DEFAULT_MAX_ITERATIONS

    # Resolution policy
    use_working_resolution: bool = defaults.DEFAULT_USE_WORKING_RESOLUTION
    working_size: int = defaults.DEFAULT_WORKING_SIZE
    working_iterations: int = defaults.DEFAULT_WORKING_ITERATIONS
    min_size: int = defaults.DEFAULT_MIN_SIZE
    max_size: int = defaults.DEFAULT_MAX_SIZE

    # Iteration scaling (direct mode)
    gradient_proportion: float = defaults.DEFAULT_GRADIENT_PROPORTION
    reference_size: int = defaults.DEFAULT_REFERENCE_SIZE
    max_scaled_iterations: int = defaults.MAX_SCALED_ITERATIONS

    contrast_exponent: float = defaults.DEFAULT_CONTRAST_EXPONENT
    source_term: float = defaults.DEFAULT_SOURCE_TERM
    omega: float = defaults.DEFAULT_OMEGA
    use_neighbor_table: bool = defaults.DEFAULT_USE_NEIGHBOR_TABLE
    connectivity: int = defaults.DEFAULT_CONNECTIVITY

    def validate(self) -> None:
        """Raise ConfigError if any setting is out of range."""
        _check_method(self.method)
        _check_types(
            self,
            integers=(
                "max_iterations", "working_size", "working_iterations", "min_size",
                "max_size", "reference_size", "max_scaled_iterations", "connectivity",
            ),
            reals=(
                "convergence_threshold", "gradient_proportion", "contrast_exponent",
                "source_term", "omega",
            ),
            flags=("adaptive_convergence", "use_working_resolution", "use_neighbor_table"),
        )
        positive = {
            "working_size": self.working_size,
            "min_size": self.min_size,
            "max_size": self.max_size,
            "reference_size": self.reference_size,
            "max_scaled_iterations": self.max_scaled_iterations,
            "max_iterations": self.max_iterations,
            "gradient_proportion": self.gradient_proportion,
            "contrast_exponent": self.contrast_exponent,
            "convergence_threshold": self.convergence_threshold,
            "source_term": self.source_term,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ConfigError(f"{name} must be positive, got {value}")
        if self.working_iterations < 0:
            raise ConfigError(f"working_iterations must be >= 0, got {self.working_iterations}")
        if self.min_size > self.max_size:
            raise ConfigError(f"min_size ({self.min_size}) exceeds max_size ({self.max_size})")
        if not 0.0 < self.omega < 2.0:
            raise ConfigError(f"omega must lie in (0, 2), got {self.omega}")
        if self.connectivity not in (4, 8):
            raise ConfigError(f"connectivity must be 4 or 8, got {self.connectivity}")

    def solver_config(self, iterations: int) -> SolverConfig:
        """Build the solver settings for a solve planned at `iterations` sweeps."""
        return SolverConfig(
            method=self.method,
            iterations=iterations,
            source_term=self.source_term,
            omega=self.omega,
            adaptive=self.adaptive_convergence,
            convergence_threshold=self.convergence_threshold,
            max_iterations=self.max_iterations,
        )


@dataclass
class NeighborTable:
    """Precomputed stencil lookups for the interior pixels of one mask.

    Indices are linear (row-major) pixel indices. `neighbors` has one row per
    interior pixel holding [east, west, north, south], or -1 where the
    neighbor is off-grid or outside the shape. `red` and `black` are
    positions into `interior` split by (x + y) parity.
    """
    shape: tuple[int, int]
    interior: np.ndarray
    boundary: np.ndarray
    neighbors: np.ndarray
    red: np.ndarray
    black: np.ndarray

    @property
    def pixel_count(self) -> int:
        return int(self.interior.size)


@dataclass
class SolveStats:
    """Metadata from one relaxation solve."""
    method: str
    sweeps: int
    max_sweeps: int
    elapsed: float
    residual: float
    converged: bool
    interior_pixels: int
    boundary_pixels: int

    @property
    def mpixels_per_second(self) -> float:
        if self.elapsed <= 0.0:
            return 0.0
        return self.sweeps * self.interior_pixels / (self.elapsed * 1e6)


@dataclass
class RelaxationResult:
    """Solved potential field plus solve metadata."""
    field: np.ndarray
    stats: SolveStats


@dataclass(frozen=True)
class SolvePlan:
    """Where and how long to solve, as decided by the resolution scaler."""
    mode: str
    source_size: tuple[int, int]
    solve_size: tuple[int, int]
    iterations: int

    @property
    def scale_factor(self) -> float:
        return self.solve_size[0] / self.source_size[0]


@dataclass
class BevelResult:
    """Final (gray, coverage) buffer plus how it was produced."""
    output: np.ndarray
    mode: str
    source_size: tuple[int, int]
    solve_size: tuple[int, int]
    output_size: tuple[int, int]
    stats: SolveStats
    elapsed: float = 0.0

    @property
    def gray(self) -> np.ndarray:
        return self.output[..., 0]

    @property
    def coverage(self) -> np.ndarray:
        return self.output[..., 1]
