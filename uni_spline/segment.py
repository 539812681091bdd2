"""
Cubic Hermite segment polynomials.

A segment is f(t) = a + t*b + t²*c + t³*d over the local parameter t in [0, 1],
built from the values and derivatives at its two end points.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ._core import ArrayLike, InvalidConfigurationError, VectorValue, cat, get_backend


@dataclass(frozen=True, eq=False)
class SegmentPolynomial:
    """
    Cubic segment coefficients.

    Coefficients have shape (D,) for a single segment or (S, D) for a
    stack of S segments evaluated together.

    Example:
        >>> seg = SegmentPolynomial.from_hermite(p0, p1, d0, d1)
        >>> seg(0.0)  # p0
        >>> seg(1.0)  # p1
        >>> seg.derivative(0.0)  # d0
    """

    a: ArrayLike
    b: ArrayLike
    c: ArrayLike
    d: ArrayLike

    @classmethod
    def from_hermite(
        cls,
        p0: VectorValue,
        p1: VectorValue,
        d0: VectorValue,
        d1: VectorValue,
    ) -> "SegmentPolynomial":
        """
        Build the cubic matching values p0, p1 and derivatives d0, d1 at t=0 and t=1.

        Args:
            p0, p1: Values at the segment start and end (..., D)
            d0, d1: Derivatives with respect to the local parameter (..., D)

        Returns:
            SegmentPolynomial with coefficients of the same shape
        """
        a = p0
        b = d0
        c = 3 * (p1 - p0) - 2 * d0 - d1
        d = 2 * (p0 - p1) + d0 + d1
        return cls(a=a, b=b, c=c, d=d)

    @property
    def backend(self) -> str:
        return get_backend(self.a)

    @property
    def n_dims(self) -> int:
        return self.a.shape[-1] if self.a.ndim > 0 else 1

    def __len__(self) -> int:
        if self.a.ndim < 2:
            raise TypeError("Single segment has no length")
        return self.a.shape[0]

    def __getitem__(self, index) -> "SegmentPolynomial":
        return self.take(index)

    def take(self, index: Union[int, ArrayLike]) -> "SegmentPolynomial":
        """Select segment(s) from a stack by index or index array."""
        return SegmentPolynomial(
            a=self.a[index], b=self.b[index], c=self.c[index], d=self.d[index]
        )

    def __call__(self, t: Union[float, ArrayLike]) -> ArrayLike:
        return self.evaluate(t)

    def evaluate(self, t: Union[float, ArrayLike]) -> ArrayLike:
        """Evaluate f(t) (Horner's method). t broadcasts against the coefficients."""
        return self.a + t * (self.b + t * (self.c + t * self.d))

    def derivative(self, t: Union[float, ArrayLike], order: int = 1) -> ArrayLike:
        """Compute derivative (order=1,2,3) with respect to the local parameter."""
        if order == 1:
            return self.b + t * (2 * self.c + t * 3 * self.d)
        elif order == 2:
            return 2 * self.c + 6 * self.d * t
        elif order == 3:
            return 6 * self.d + 0 * t
        raise InvalidConfigurationError(f"order must be 1, 2, or 3, got {order}")

    def stacked_with(self, other: "SegmentPolynomial") -> "SegmentPolynomial":
        """Append the segments of other to this stack."""
        return SegmentPolynomial(
            a=cat([self.a, other.a], dim=0),
            b=cat([self.b, other.b], dim=0),
            c=cat([self.c, other.c], dim=0),
            d=cat([self.d, other.d], dim=0),
        )
