"""
Piecewise cubic spline interpolation supporting both NumPy and PyTorch backends.

API Styles
----------
This library provides two API styles:

1. Class-based API (recommended for repeated evaluation):
   - Spline: built once from control values, evaluated many times
   - Derivatives solved from a boundary condition, or supplied explicitly

2. Functional API (recommended for one-shot interpolation):
   - compute_spline(), cubic_spline_interpolate(), cubic_spline_derivative()
   - compute_derivatives() for the derivative solve alone

Usage Examples
--------------
Natural spline through scalar samples (arguments default to 0..N-1):
    spline = Spline(values=[0.0, 1.0, 0.0, -1.0])
    spline(1.5)

Clamped spline through 3D waypoints with linear extrapolation:
    spline = compute_spline(
        waypoints, times,
        boundary="clamped",
        start_derivative=np.zeros(3),
        end_derivative=np.zeros(3),
    )
    positions = spline(query_times)

Closed loop:
    spline = Spline(values=contour, boundary="circular")
    spline(t + spline.period)  # same as spline(t)

Conventions
-----------
- Values: (N,) for scalars or (N, D) for vectors; outputs keep that rank
- Derivatives: with respect to the local segment parameter in [0, 1]
- Boundary names: "smooth"/"natural", "clamped"/"fixed_tangentials", "circular"/"periodic"
"""

# Types, constants and boundary conditions
from ._core import (
    ArrayLike,
    Backend,
    BoundaryCondition,
    BoundaryKind,
    CLOSING_SEGMENT_SPAN,
    Circular,
    FixedTangentials,
    InvalidConfigurationError,
    SingularSystemError,
    Smooth,
    VectorValue,
    resolve_boundary,
)

# Segments
from .segment import SegmentPolynomial

# Derivative solving
from .derivatives import (
    compute_derivatives,
    derivative_bands,
    derivative_rhs,
    solve_bands,
)

# Splines
from .spline import (
    Spline,
    compute_spline,
    cubic_spline_derivative,
    cubic_spline_interpolate,
)

__all__ = [
    # Types
    "ArrayLike",
    "Backend",
    "VectorValue",
    # Constants
    "CLOSING_SEGMENT_SPAN",
    # Boundary conditions
    "BoundaryKind",
    "BoundaryCondition",
    "Smooth",
    "FixedTangentials",
    "Circular",
    "resolve_boundary",
    # Errors
    "InvalidConfigurationError",
    "SingularSystemError",
    # Classes
    "SegmentPolynomial",
    "Spline",
    # Derivatives
    "compute_derivatives",
    "derivative_rhs",
    "derivative_bands",
    "solve_bands",
    # Functional API
    "compute_spline",
    "cubic_spline_interpolate",
    "cubic_spline_derivative",
]

__version__ = "0.1.0"
