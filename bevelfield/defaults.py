"""Central place for bevelfield default settings."""

# Update disciplines
METHOD_JACOBI: str = "jacobi"
METHOD_GAUSS_SEIDEL: str = "gauss-seidel"
METHOD_SOR: str = "sor"
METHODS: tuple[str, ...] = (METHOD_JACOBI, METHOD_GAUSS_SEIDEL, METHOD_SOR)
DEFAULT_METHOD: str = METHOD_SOR

# Poisson relaxation
DEFAULT_SOURCE_TERM: float = 0.01  # Constant C in Δu = -C; only sweep count controls spread
DEFAULT_OMEGA: float = 1.9  # 1.8-1.95 is the useful SOR range for this stencil
DEFAULT_USE_NEIGHBOR_TABLE: bool = True
DEFAULT_CONNECTIVITY: int = 8

# Termination
DEFAULT_ADAPTIVE_CONVERGENCE: bool = False
DEFAULT_CONVERGENCE_THRESHOLD: float = 1e-4
DEFAULT_MAX_ITERATIONS: int = 500
CONVERGENCE_CHECK_INTERVAL: int = 10

# Iteration scaling (direct mode)
# Gradient width grows with sqrt(sweeps): 2x wider gradient needs 4x sweeps.
BASE_ITERATIONS: dict[str, int] = {
    METHOD_JACOBI: 600,
    METHOD_GAUSS_SEIDEL: 300,  # ~10% gradient at the reference size
    METHOD_SOR: 27,  # 40 sweeps at the reference size and default proportion
}
DEFAULT_GRADIENT_PROPORTION: float = 0.15
BASE_GRADIENT_PROPORTION: float = 0.1
DEFAULT_REFERENCE_SIZE: int = 500
MAX_SCALED_ITERATIONS: int = 5000

# Resolution (longest side, in pixels)
DEFAULT_MIN_SIZE: int = 500
DEFAULT_MAX_SIZE: int = 1000
DEFAULT_USE_WORKING_RESOLUTION: bool = True
DEFAULT_WORKING_SIZE: int = 500
DEFAULT_WORKING_ITERATIONS: int = 40
VECTOR_RASTER_SIZE: int = 1000

# Remap
DEFAULT_CONTRAST_EXPONENT: float = 1.0
OUTSIDE_GRAY: int = 255
OUTSIDE_COVERAGE: int = 0
INSIDE_COVERAGE: int = 255
