"""
Derivative solving for cubic Hermite splines.

Missing control-point derivatives are found per spatial dimension from the
tridiagonal (or cyclic) system that enforces second-derivative continuity
between adjacent unit-parameter segments:

    d[i-1] + 4*d[i] + d[i+1] = 3*(y[i+1] - y[i-1])

The first and last rows depend on the boundary policy:
    - smooth:            2*d[0] + d[1] = 3*(y[1] - y[0])  (zero curvature)
    - fixed tangentials: d[0] = start  (identity rows)
    - circular:          the first and last rows wrap around to each other
"""

from __future__ import annotations

import logging
from typing import Tuple, overload

import numpy as np
import scipy.linalg
import torch

from ._core import (
    ArrayLike,
    BoundaryCondition,
    Circular,
    FixedTangentials,
    InvalidConfigurationError,
    SingularSystemError,
    as_points,
    cat,
    like,
    resolve_boundary,
    stack,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Right-Hand Side
# =============================================================================


def fixed_tangents(boundary: FixedTangentials, points: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
    """
    Start and end tangents as flat vectors on the backend of points.

    Args:
        boundary: Fixed tangentials boundary condition
        points: Control values (N, D)

    Returns:
        (start, end), each of shape (D,)
    """
    d_dim = points.shape[-1]
    start = like(boundary.start, points).reshape(-1)
    end = like(boundary.end, points).reshape(-1)
    if start.shape[0] != d_dim or end.shape[0] != d_dim:
        raise InvalidConfigurationError(
            f"Tangent dimensions must match the values ({d_dim}), "
            f"got start={tuple(start.shape)} and end={tuple(end.shape)}"
        )
    return start, end


def derivative_rhs(y: ArrayLike, boundary: BoundaryCondition, dimension: int = 0) -> ArrayLike:
    """
    Build the right-hand side of the derivative system for one dimension.

    Args:
        y: Component `dimension` of every control value (N,)
        boundary: Boundary condition
        dimension: Index of the spatial dimension (selects the fixed tangent component)

    Returns:
        Right-hand side vector (N,)
    """
    interior = 3 * (y[2:] - y[:-2])

    if isinstance(boundary, Circular):
        first = 3 * (y[1] - y[-1])
        last = 3 * (y[0] - y[-2])
    elif isinstance(boundary, FixedTangentials):
        first = like(boundary.start, y).reshape(-1)[dimension]
        last = like(boundary.end, y).reshape(-1)[dimension]
    else:
        first = 3 * (y[1] - y[0])
        last = 3 * (y[-1] - y[-2])

    return cat([first.reshape(1), interior, last.reshape(1)], dim=0)


# =============================================================================
# System Matrix
# =============================================================================


def derivative_bands(n: int, boundary: BoundaryCondition) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Coefficient bands of the derivative system.

    Row i reads lower[i]*d[i-1] + diag[i]*d[i] + upper[i]*d[i+1]. For the
    circular policy, lower[0] couples to d[n-1] and upper[-1] couples to d[0].

    Returns:
        (lower, diag, upper), each of shape (n,)
    """
    lower = np.ones(n)
    diag = np.full(n, 4.0)
    upper = np.ones(n)

    if isinstance(boundary, Circular):
        return lower, diag, upper

    lower[0] = upper[-1] = 0.0
    if isinstance(boundary, FixedTangentials):
        diag[0] = diag[-1] = 1.0
        upper[0] = lower[-1] = 0.0
    else:
        diag[0] = diag[-1] = 2.0
    return lower, diag, upper


def dense_from_bands(lower: np.ndarray, diag: np.ndarray, upper: np.ndarray) -> np.ndarray:
    """Assemble the full (n, n) matrix, including wraparound couplings."""
    n = diag.shape[0]
    matrix = np.diag(diag).astype(np.float64)
    rows = np.arange(n)
    np.add.at(matrix, (rows, (rows - 1) % n), lower)
    np.add.at(matrix, (rows, (rows + 1) % n), upper)
    return matrix


# =============================================================================
# Linear Solve
# =============================================================================


@overload
def solve_bands(lower: np.ndarray, diag: np.ndarray, upper: np.ndarray, rhs: np.ndarray, cyclic: bool = ...) -> np.ndarray: ...
@overload
def solve_bands(lower: np.ndarray, diag: np.ndarray, upper: np.ndarray, rhs: torch.Tensor, cyclic: bool = ...) -> torch.Tensor: ...


def solve_bands(lower, diag, upper, rhs, cyclic=False):
    """
    Solve the (cyclic) tridiagonal system for one right-hand side.

    NumPy uses LAPACK banded/circulant solvers from SciPy; PyTorch solves the
    dense system so results stay differentiable.

    Raises:
        SingularSystemError: If the system cannot be solved
    """
    if isinstance(rhs, torch.Tensor):
        matrix = torch.as_tensor(dense_from_bands(lower, diag, upper), dtype=rhs.dtype, device=rhs.device)
        try:
            return torch.linalg.solve(matrix, rhs)
        except torch.linalg.LinAlgError as exc:
            raise SingularSystemError(f"Derivative system of size {rhs.shape[0]} is singular") from exc

    try:
        if cyclic:
            # Constant bands with wraparound form a circulant matrix
            column = dense_from_bands(lower, diag, upper)[:, 0]
            return scipy.linalg.solve_circulant(column, rhs)
        n = diag.shape[0]
        ab = np.zeros((3, n))
        ab[0, 1:] = upper[:-1]
        ab[1] = diag
        ab[2, :-1] = lower[1:]
        return scipy.linalg.solve_banded((1, 1), ab, rhs)
    except np.linalg.LinAlgError as exc:
        raise SingularSystemError(f"Derivative system of size {rhs.shape[0]} is singular") from exc


# =============================================================================
# Derivative Computation
# =============================================================================


@overload
def compute_derivatives(values: np.ndarray, boundary=..., arguments=...) -> np.ndarray: ...
@overload
def compute_derivatives(values: torch.Tensor, boundary=..., arguments=...) -> torch.Tensor: ...


def compute_derivatives(values, boundary="smooth", arguments=None):
    """
    Compute control-point derivatives with respect to the local segment parameter.

    Args:
        values: Control values (N,) or (N, D)
        boundary: Boundary condition or name ("smooth", "circular"; use a
            FixedTangentials instance for fixed end tangents)
        arguments: Argument of each control value (N,). Fixed tangents are
            slopes per argument unit and are scaled by the end segment widths;
            without arguments the spacing is taken as 1

    Returns:
        Derivatives with the same shape as values

    Example:
        >>> derivatives = compute_derivatives(waypoints, "circular")
        >>> spline = Spline.from_derivatives(times, waypoints, derivatives, "circular")
    """
    boundary = resolve_boundary(boundary)
    points = as_points(values)
    scalar = points.ndim == 1
    if scalar:
        points = points.reshape(-1, 1)
    if points.ndim != 2:
        raise InvalidConfigurationError(f"Values must have shape (N,) or (N, D), got {tuple(points.shape)}")

    n, d_dim = points.shape
    if n < 2:
        raise InvalidConfigurationError("Can't create piecewise spline with less than 2 control points")
    if isinstance(boundary, FixedTangentials):
        start, end = fixed_tangents(boundary, points)
        if arguments is not None:
            arguments = like(arguments, points).reshape(-1)
            if arguments.shape[0] != n:
                raise InvalidConfigurationError(
                    f"Length of values and arguments don't match, {n} != {arguments.shape[0]}"
                )
            # Local parameter slope = argument slope * segment width
            boundary = FixedTangentials(
                start=start * (arguments[1] - arguments[0]),
                end=end * (arguments[-1] - arguments[-2]),
            )

    cyclic = isinstance(boundary, Circular)
    lower, diag, upper = derivative_bands(n, boundary)
    logger.debug("Solving %d-point %s derivative system for %d dimension(s)", n, boundary.kind.value, d_dim)

    columns = []
    for dim in range(d_dim):
        rhs = derivative_rhs(points[:, dim], boundary, dim)
        columns.append(solve_bands(lower, diag, upper, rhs, cyclic=cyclic))

    derivatives = stack(columns, dim=-1)
    if scalar:
        return derivatives[:, 0]
    return derivatives
