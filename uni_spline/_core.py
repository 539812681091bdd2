"""
Core utilities: types, constants, boundary conditions and backend-agnostic operations.

This module provides the foundational building blocks used throughout uni_spline.
All internal modules depend on this module.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Literal, Optional, Protocol, Sequence, TypeVar, Union

import numpy as np
import torch


# =============================================================================
# Type Definitions
# =============================================================================

T = TypeVar("T", np.ndarray, torch.Tensor)
ArrayLike = Union[np.ndarray, torch.Tensor]
Backend = Literal["numpy", "torch"]


class VectorValue(Protocol):
    """Value in an N-dimensional vector space over the reals.

    NumPy and torch rows conform. Scalar control values are carried as
    one-component rows.
    """

    def __add__(self, other): ...
    def __sub__(self, other): ...
    def __mul__(self, scalar): ...
    def __rmul__(self, scalar): ...
    def __getitem__(self, dimension): ...


# =============================================================================
# Numerical Constants
# =============================================================================

CLOSING_SEGMENT_SPAN = 1.0  # Argument span of the circular closing segment


# =============================================================================
# Boundary Conditions
# =============================================================================


class BoundaryKind(str, Enum):
    """Boundary policies for derivative solving and extrapolation."""

    SMOOTH = "smooth"
    FIXED_TANGENTIALS = "fixed_tangentials"
    CIRCULAR = "circular"


_BOUNDARY_ALIASES = {
    "smooth": BoundaryKind.SMOOTH,
    "natural": BoundaryKind.SMOOTH,
    "fixed_tangentials": BoundaryKind.FIXED_TANGENTIALS,
    "clamped": BoundaryKind.FIXED_TANGENTIALS,
    "circular": BoundaryKind.CIRCULAR,
    "periodic": BoundaryKind.CIRCULAR,
}


@dataclass(frozen=True)
class Smooth:
    """Zero second derivative at both ends (natural spline)."""

    kind = BoundaryKind.SMOOTH


@dataclass(frozen=True)
class Circular:
    """Closed loop: the last point connects back to the first."""

    kind = BoundaryKind.CIRCULAR


@dataclass(frozen=True, eq=False)
class FixedTangentials:
    """Fixed first derivative at both ends.

    Attributes:
        start: Slope per argument unit at the first control point (D,) or scalar
        end: Slope per argument unit at the last control point (D,) or scalar
    """

    start: Union[VectorValue, float, Sequence[float]]
    end: Union[VectorValue, float, Sequence[float]]
    kind = BoundaryKind.FIXED_TANGENTIALS


BoundaryCondition = Union[Smooth, FixedTangentials, Circular]


class InvalidConfigurationError(ValueError):
    """Raised when a spline cannot be built from the given configuration."""

    pass


class SingularSystemError(RuntimeError):
    """Raised when the derivative system cannot be solved."""

    pass


def resolve_boundary(
    boundary: Union[str, BoundaryKind, BoundaryCondition],
    start_derivative: Optional[ArrayLike] = None,
    end_derivative: Optional[ArrayLike] = None,
) -> BoundaryCondition:
    """
    Normalize a boundary specification into a boundary condition instance.

    Args:
        boundary: Boundary instance, BoundaryKind, or name
            ("smooth"/"natural", "fixed_tangentials"/"clamped", "circular"/"periodic")
        start_derivative, end_derivative: Tangents for the fixed-tangentials policy

    Returns:
        Smooth, FixedTangentials or Circular instance
    """
    if isinstance(boundary, (Smooth, FixedTangentials, Circular)):
        return boundary

    key = boundary.value if isinstance(boundary, BoundaryKind) else str(boundary).lower()
    kind = _BOUNDARY_ALIASES.get(key)
    if kind is None:
        raise InvalidConfigurationError(
            f"Unknown boundary condition: {boundary!r}. "
            f"Use one of {sorted(_BOUNDARY_ALIASES)}"
        )

    if kind == BoundaryKind.SMOOTH:
        return Smooth()
    if kind == BoundaryKind.CIRCULAR:
        return Circular()
    if start_derivative is None or end_derivative is None:
        raise InvalidConfigurationError(
            "Fixed tangentials boundary requires both start_derivative and end_derivative"
        )
    return FixedTangentials(start=start_derivative, end=end_derivative)


# =============================================================================
# Backend Detection
# =============================================================================


def get_backend(x: ArrayLike) -> Backend:
    """Determine backend from input type."""
    return "torch" if isinstance(x, torch.Tensor) else "numpy"


def to_backend(
    x: ArrayLike,
    backend: Backend,
    dtype=None,
    device=None,
) -> ArrayLike:
    """Convert array to specified backend."""
    if backend == "torch":
        if isinstance(x, torch.Tensor):
            return x.to(dtype=dtype, device=device) if dtype or device else x
        return torch.as_tensor(x, dtype=dtype, device=device)
    if isinstance(x, torch.Tensor):
        x = x.detach().cpu().numpy()
    return np.asarray(x, dtype=dtype)


def like(x, reference: ArrayLike) -> ArrayLike:
    """Convert x to the backend, dtype and device of reference."""
    if isinstance(reference, torch.Tensor):
        return to_backend(x, "torch", dtype=reference.dtype, device=reference.device)
    return to_backend(x, "numpy", dtype=reference.dtype)


def as_points(values) -> ArrayLike:
    """
    Convert control values to a floating point array.

    Lists of tensors are stacked; other sequences become NumPy arrays.
    Integer input is promoted to float64.
    """
    if isinstance(values, (list, tuple)) and values and isinstance(values[0], torch.Tensor):
        values = torch.stack(list(values), dim=0)

    if isinstance(values, torch.Tensor):
        if not values.is_floating_point():
            values = values.to(torch.float64)
        return values

    points = np.asarray(values)
    if not np.issubdtype(points.dtype, np.floating):
        points = points.astype(np.float64)
    return points


# =============================================================================
# Backend-Agnostic Operations
# =============================================================================


def cat(arrays: List[ArrayLike], dim: int = -1) -> ArrayLike:
    """Concatenate arrays along dimension."""
    if isinstance(arrays[0], torch.Tensor):
        return torch.cat(arrays, dim=dim)
    return np.concatenate(arrays, axis=dim)


def stack(arrays: List[ArrayLike], dim: int = -1) -> ArrayLike:
    """Stack arrays along new dimension."""
    if isinstance(arrays[0], torch.Tensor):
        return torch.stack(arrays, dim=dim)
    return np.stack(arrays, axis=dim)


def diff(x: ArrayLike) -> ArrayLike:
    """First differences along the leading dimension."""
    return x[1:] - x[:-1]


def norm(x: ArrayLike, dim: int = -1) -> ArrayLike:
    """Euclidean norm along specified dimension."""
    if isinstance(x, torch.Tensor):
        return torch.linalg.vector_norm(x, dim=dim)
    return np.linalg.norm(x, axis=dim)


def searchsorted(sorted_sequence: ArrayLike, values: ArrayLike, side: str = "right") -> ArrayLike:
    """Insertion indices of values into a sorted 1-D sequence."""
    if isinstance(sorted_sequence, torch.Tensor):
        return torch.searchsorted(sorted_sequence.contiguous(), values.contiguous(), side=side)
    return np.searchsorted(sorted_sequence, values, side=side)


def clip(x: ArrayLike, low: int, high: int) -> ArrayLike:
    """Clamp values into [low, high]."""
    if isinstance(x, torch.Tensor):
        return torch.clamp(x, low, high)
    return np.clip(x, low, high)


def where(condition: ArrayLike, x: ArrayLike, y: ArrayLike) -> ArrayLike:
    """Elementwise selection."""
    if isinstance(condition, torch.Tensor):
        return torch.where(condition, x, y)
    return np.where(condition, x, y)


def remainder(x: ArrayLike, divisor: float) -> ArrayLike:
    """Remainder with the sign of the divisor."""
    if isinstance(x, torch.Tensor):
        return torch.remainder(x, divisor)
    return np.mod(x, divisor)


def arange(n: int, backend: Backend, dtype=None, device=None) -> ArrayLike:
    """Point indices 0..n-1 as floats."""
    if backend == "torch":
        return torch.arange(n, dtype=dtype or torch.float64, device=device)
    return np.arange(n, dtype=dtype or np.float64)


def readonly(x: T) -> T:
    """Return a copy that cannot be modified in place (NumPy only)."""
    if isinstance(x, torch.Tensor):
        return x.clone()
    x = np.array(x, copy=True)
    x.flags.writeable = False
    return x
