"""
Piecewise cubic Hermite splines over vector-valued control points.

Unified API:
    Spline(values, arguments, boundary="smooth")          # derivatives solved
    Spline.from_derivatives(arguments, values, derivs)    # derivatives given
    compute_spline(values, arguments, boundary, ...)      # functional helper

Boundary policies:
    - "smooth": natural end conditions, cubic extrapolation of the end segments
    - "fixed_tangentials": given end tangents, linear extrapolation along them
    - "circular": closed loop with an extra closing segment, periodic extrapolation

Queries outside the sampled domain never fail; they follow the boundary policy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

import numpy as np

from ._core import (
    CLOSING_SEGMENT_SPAN,
    ArrayLike,
    Backend,
    BoundaryCondition,
    BoundaryKind,
    Circular,
    FixedTangentials,
    InvalidConfigurationError,
    arange,
    as_points,
    cat,
    clip,
    diff,
    get_backend,
    like,
    norm,
    readonly,
    remainder,
    resolve_boundary,
    searchsorted,
    where,
)
from .derivatives import compute_derivatives, fixed_tangents
from .segment import SegmentPolynomial

logger = logging.getLogger(__name__)

BoundaryLike = Union[str, BoundaryKind, BoundaryCondition]


# =============================================================================
# Spline
# =============================================================================


@dataclass(frozen=True, eq=False)
class Spline:
    """
    Piecewise cubic spline through control values.

    When derivatives are omitted they are solved from the boundary condition.
    Segment i covers [arguments[i], arguments[i+1]] and is evaluated at the
    local parameter (t - arguments[i]) / (arguments[i+1] - arguments[i]).
    Under the circular policy one extra closing segment of argument span
    CLOSING_SEGMENT_SPAN joins the last value back to the first, so one loop
    covers `arguments[-1] - arguments[0] + CLOSING_SEGMENT_SPAN` and the
    spline repeats with that period, not with `arguments[-1] - arguments[0]`.
    For arguments [0, 1, 2, 3] the values at -4, 0 and 4 coincide.

    Fixed tangentials are slopes per argument unit. They pin the end
    derivatives of the solved system (scaled by the end segment widths) and
    give the slope of the linear extension, so the slope is continuous at
    both ends for any spacing.

    Attributes:
        values: Control values (N,) or (N, D)
        arguments: Strictly increasing arguments (N,), default 0..N-1
        derivatives: Derivatives w.r.t. the local parameter, same shape as values
            (explicit derivatives are used as given)
        boundary: Boundary condition
        norms: Euclidean norm of each derivative (N,)
        coefficients: Stacked SegmentPolynomial (S, D)

    Example:
        >>> spline = Spline(values=[0.0, 1.0, 0.0, -1.0], boundary="smooth")
        >>> spline(1.0)  # 1.0
        >>> spline(np.linspace(-1, 4, 50))  # extrapolates on both ends
    """

    values: ArrayLike
    arguments: Optional[ArrayLike] = None
    derivatives: Optional[ArrayLike] = None
    boundary: BoundaryLike = BoundaryKind.SMOOTH
    norms: ArrayLike = field(init=False, repr=False)
    coefficients: SegmentPolynomial = field(init=False, repr=False)
    backend: Backend = field(init=False, repr=False)
    _knots: ArrayLike = field(init=False, repr=False)
    _widths: ArrayLike = field(init=False, repr=False)
    _tangents: Optional[Tuple[ArrayLike, ArrayLike]] = field(init=False, repr=False)
    _scalar: bool = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate inputs and derive all segments eagerly."""
        boundary = resolve_boundary(self.boundary)
        points = as_points(self.values)
        scalar = points.ndim == 1
        if scalar:
            points = points.reshape(-1, 1)
        if points.ndim != 2:
            raise InvalidConfigurationError(
                f"Values must have shape (N,) or (N, D), got {tuple(points.shape)}"
            )

        n = points.shape[0]
        backend = get_backend(points)
        device = points.device if backend == "torch" else None

        if self.arguments is None:
            arguments = arange(n, backend, dtype=points.dtype, device=device)
        else:
            arguments = like(self.arguments, points).reshape(-1)
            if arguments.shape[0] != n:
                raise InvalidConfigurationError(
                    f"Length of values and arguments don't match, {n} != {arguments.shape[0]}"
                )

        if self.derivatives is None:
            if n < 2:
                raise InvalidConfigurationError(
                    "Can't create piecewise spline with less than 2 control points"
                )
            derivatives = compute_derivatives(points, boundary, arguments)
        else:
            derivatives = like(self.derivatives, points)
            if scalar and derivatives.ndim == 1:
                derivatives = derivatives.reshape(-1, 1)
            if derivatives.ndim == 0 or derivatives.shape[0] != n:
                raise InvalidConfigurationError(
                    "The number of derivatives must equal the number of control points, "
                    f"{n} != {derivatives.shape[0] if derivatives.ndim else 0}"
                )
            if tuple(derivatives.shape) != tuple(points.shape):
                raise InvalidConfigurationError(
                    f"Derivatives must have shape {tuple(points.shape)}, got {tuple(derivatives.shape)}"
                )
            if n < 2:
                raise InvalidConfigurationError(
                    "Can't create piecewise spline with less than 2 control points"
                )

        points, arguments, derivatives = readonly(points), readonly(arguments), readonly(derivatives)
        tangents = fixed_tangents(boundary, points) if isinstance(boundary, FixedTangentials) else None

        widths = diff(arguments)
        if bool((widths <= 0).any()):
            logger.warning(
                "Spline arguments are not strictly increasing; evaluation results are undefined"
            )

        coefficients = SegmentPolynomial.from_hermite(
            points[:-1], points[1:], derivatives[:-1], derivatives[1:]
        )
        knots = arguments
        if isinstance(boundary, Circular):
            closing = SegmentPolynomial.from_hermite(
                points[-1:], points[:1], derivatives[-1:], derivatives[:1]
            )
            coefficients = coefficients.stacked_with(closing)
            knots = cat([arguments, arguments[-1:] + CLOSING_SEGMENT_SPAN], dim=0)

        object.__setattr__(self, "boundary", boundary)
        object.__setattr__(self, "values", points[:, 0] if scalar else points)
        object.__setattr__(self, "arguments", arguments)
        object.__setattr__(self, "derivatives", derivatives[:, 0] if scalar else derivatives)
        object.__setattr__(self, "norms", readonly(norm(derivatives, dim=-1)))
        object.__setattr__(self, "coefficients", coefficients)
        object.__setattr__(self, "backend", backend)
        object.__setattr__(self, "_knots", knots)
        object.__setattr__(self, "_widths", diff(knots))
        object.__setattr__(self, "_tangents", tangents)
        object.__setattr__(self, "_scalar", scalar)

        logger.debug(
            "Built %s spline: %d points, %d segments, %d dimension(s)",
            boundary.kind.value,
            n,
            self.n_segments,
            self.n_dims,
        )

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_values(
        cls,
        values: ArrayLike,
        arguments: Optional[ArrayLike] = None,
        boundary: BoundaryLike = BoundaryKind.SMOOTH,
    ) -> "Spline":
        """Create spline, solving the derivatives from the boundary condition."""
        return cls(values=values, arguments=arguments, boundary=boundary)

    @classmethod
    def from_derivatives(
        cls,
        arguments: ArrayLike,
        values: ArrayLike,
        derivatives: ArrayLike,
        boundary: BoundaryLike = BoundaryKind.SMOOTH,
    ) -> "Spline":
        """
        Create spline from known values and derivatives at every control point.

        Args:
            arguments: Strictly increasing arguments (N,)
            values: Control values (N,) or (N, D)
            derivatives: Derivatives w.r.t. the local segment parameter, like values
            boundary: Boundary condition (selects extrapolation and the closing segment)

        Returns:
            Spline instance
        """
        return cls(values=values, arguments=arguments, derivatives=derivatives, boundary=boundary)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def n_points(self) -> int:
        return self.arguments.shape[0]

    @property
    def n_segments(self) -> int:
        return self.coefficients.a.shape[0]

    @property
    def n_dims(self) -> int:
        return self.coefficients.a.shape[-1]

    @property
    def segments(self) -> Tuple[SegmentPolynomial, ...]:
        """Per-segment polynomials, closing segment last for circular splines."""
        return tuple(self.coefficients[i] for i in range(self.n_segments))

    @property
    def domain(self) -> Tuple[float, float]:
        """First and last control argument."""
        return float(self.arguments[0]), float(self.arguments[-1])

    @property
    def period(self) -> Optional[float]:
        """
        Repeat length of a circular spline, None otherwise.

        Includes the closing segment: last - first + CLOSING_SEGMENT_SPAN.
        """
        if not isinstance(self.boundary, Circular):
            return None
        return float(self._knots[-1] - self._knots[0])

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def __call__(self, t: Union[float, ArrayLike]) -> ArrayLike:
        return self.evaluate(t)

    def evaluate(self, t: Union[float, ArrayLike]) -> ArrayLike:
        """
        Evaluate the spline at argument(s) t, extrapolating outside the domain.

        Args:
            t: Scalar or array of arguments (...)

        Returns:
            Values (..., D), or (...) for scalar control values
        """
        q, shape = self._query(t)
        q, idx, lam = self._locate(q)
        result = self.coefficients.take(idx)(lam[:, None])

        if self._tangents is not None:
            start, end = self._tangents
            first, last = self._knots[0], self._knots[-1]
            before = self.values_2d[0] - (first - q)[:, None] * start
            after = self.values_2d[-1] + (q - last)[:, None] * end
            result = where((q < first)[:, None], before, where((q > last)[:, None], after, result))

        return self._output(result, shape)

    def derivative(self, t: Union[float, ArrayLike], order: int = 1) -> ArrayLike:
        """
        Compute derivative (order=1,2,3) with respect to the argument.

        Follows the same extrapolation policy as evaluate(): the linear
        extension of fixed tangentials has slope start/end and no curvature.
        """
        if order not in (1, 2, 3):
            raise InvalidConfigurationError(f"order must be 1, 2, or 3, got {order}")

        q, shape = self._query(t)
        q, idx, lam = self._locate(q)
        scale = self._widths[idx][:, None] ** order
        result = self.coefficients.take(idx).derivative(lam[:, None], order) / scale

        if self._tangents is not None:
            start, end = self._tangents
            if order > 1:
                start, end = 0 * start, 0 * end
            first, last = self._knots[0], self._knots[-1]
            result = where((q < first)[:, None], start, where((q > last)[:, None], end, result))

        return self._output(result, shape)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    @property
    def values_2d(self) -> ArrayLike:
        return self.values.reshape(-1, 1) if self._scalar else self.values

    def _query(self, t: Union[float, ArrayLike]) -> Tuple[ArrayLike, Tuple[int, ...]]:
        """Flatten query arguments onto the spline's backend."""
        q = like(t, self._knots)
        return q.reshape(-1), tuple(q.shape)

    def _locate(self, q: ArrayLike) -> Tuple[ArrayLike, ArrayLike, ArrayLike]:
        """
        Find the segment index and local parameter for each query.

        Circular queries are first wrapped into one period. Queries before
        the first or after the last argument map to the end segments with a
        local parameter outside [0, 1].
        """
        knots = self._knots
        if isinstance(self.boundary, Circular):
            q = knots[0] + remainder(q - knots[0], self.period)
        idx = clip(searchsorted(knots, q, side="right") - 1, 0, self.n_segments - 1)
        lam = (q - knots[idx]) / self._widths[idx]
        return q, idx, lam

    def _output(self, result: ArrayLike, shape: Tuple[int, ...]) -> ArrayLike:
        if self._scalar:
            result = result[:, 0].reshape(shape)
        else:
            result = result.reshape(shape + (self.n_dims,))
        if isinstance(result, np.ndarray) and result.ndim == 0:
            return result[()]
        return result


# =============================================================================
# Functional API
# =============================================================================


def compute_spline(
    values: ArrayLike,
    arguments: Optional[ArrayLike] = None,
    boundary: BoundaryLike = "smooth",
    start_derivative: Optional[ArrayLike] = None,
    end_derivative: Optional[ArrayLike] = None,
    derivatives: Optional[ArrayLike] = None,
) -> Spline:
    """
    Compute a spline (compute once, evaluate many times).

    Args:
        values: Control values (N,) or (N, D)
        arguments: Argument of each control value (N,), default 0..N-1
        boundary: "smooth"/"natural", "clamped"/"fixed_tangentials", "circular"/"periodic"
        start_derivative, end_derivative: Tangents for "clamped"
        derivatives: Known derivatives; skips the derivative solve

    Returns:
        Spline with evaluate() and derivative() methods

    Example:
        >>> spline = compute_spline(waypoints, times, boundary="clamped",
        ...                         start_derivative=v0, end_derivative=v1)
        >>> pos = spline.evaluate(query_times)
        >>> vel = spline.derivative(query_times, order=1)
    """
    condition = resolve_boundary(boundary, start_derivative, end_derivative)
    return Spline(values=values, arguments=arguments, derivatives=derivatives, boundary=condition)


def cubic_spline_interpolate(
    values: ArrayLike,
    arguments: Optional[ArrayLike],
    query_times: ArrayLike,
    boundary: BoundaryLike = "smooth",
    start_derivative: Optional[ArrayLike] = None,
    end_derivative: Optional[ArrayLike] = None,
) -> ArrayLike:
    """
    Cubic spline interpolation and extrapolation.

    Args:
        values: Control values (N, D)
        arguments: Argument values (N,) or None for 0..N-1
        query_times: Arguments to evaluate (M,)
        boundary: Boundary condition type
        start_derivative, end_derivative: For "clamped"

    Returns:
        Interpolated values (M, D)
    """
    spline = compute_spline(values, arguments, boundary, start_derivative, end_derivative)
    return spline.evaluate(query_times)


def cubic_spline_derivative(
    values: ArrayLike,
    arguments: Optional[ArrayLike],
    query_times: ArrayLike,
    boundary: BoundaryLike = "smooth",
    start_derivative: Optional[ArrayLike] = None,
    end_derivative: Optional[ArrayLike] = None,
    order: int = 1,
) -> ArrayLike:
    """Compute derivative of cubic spline (order=1,2,3)."""
    spline = compute_spline(values, arguments, boundary, start_derivative, end_derivative)
    return spline.derivative(query_times, order)
