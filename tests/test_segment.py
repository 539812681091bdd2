"""Test cubic Hermite segment polynomials."""

import numpy as np
import pytest
from uni_spline import InvalidConfigurationError, SegmentPolynomial


def test_hermite_coefficients():
    """Check the closed form coefficients for a known segment."""
    seg = SegmentPolynomial.from_hermite(
        np.array([1.0]), np.array([3.0]), np.array([0.5]), np.array([-1.0])
    )
    assert seg.a == pytest.approx([1.0])
    assert seg.b == pytest.approx([0.5])
    assert seg.c == pytest.approx([3 * 2.0 - 2 * 0.5 + 1.0])
    assert seg.d == pytest.approx([2 * -2.0 + 0.5 - 1.0])


@pytest.mark.parametrize("dims", (1, 2, 5))
def test_hermite_end_conditions(dims: int):
    """Check segment hits its end values and derivatives."""
    np.random.seed(0)
    p0, p1, d0, d1 = np.random.random_sample((4, dims))
    seg = SegmentPolynomial.from_hermite(p0, p1, d0, d1)
    assert seg(0.0) == pytest.approx(p0)
    assert seg(1.0) == pytest.approx(p1)
    assert seg.derivative(0.0) == pytest.approx(d0)
    assert seg.derivative(1.0) == pytest.approx(d1)
    assert seg.n_dims == dims


def test_evaluate_outside_unit_interval():
    """Check evaluation is the plain cubic for any local parameter."""
    seg = SegmentPolynomial(
        a=np.array([1.0]), b=np.array([2.0]), c=np.array([3.0]), d=np.array([4.0])
    )
    for t in (-2.0, -0.5, 1.5, 3.0):
        assert seg(t) == pytest.approx([1 + 2 * t + 3 * t**2 + 4 * t**3])
        assert seg.derivative(t, order=1) == pytest.approx([2 + 6 * t + 12 * t**2])
        assert seg.derivative(t, order=2) == pytest.approx([6 + 24 * t])
        assert seg.derivative(t, order=3) == pytest.approx([24.0])


def test_invalid_derivative_order():
    """Check unsupported derivative orders are rejected."""
    seg = SegmentPolynomial.from_hermite(
        np.zeros(2), np.ones(2), np.zeros(2), np.zeros(2)
    )
    with pytest.raises(InvalidConfigurationError):
        seg.derivative(0.5, order=4)


def test_stack_selection():
    """Check stacked segments can be indexed and extended."""
    np.random.seed(3)
    p = np.random.random_sample((5, 3))
    d = np.random.random_sample((5, 3))
    stack = SegmentPolynomial.from_hermite(p[:-1], p[1:], d[:-1], d[1:])
    assert len(stack) == 4
    for i in range(4):
        assert stack[i](0.0) == pytest.approx(p[i])
        assert stack[i](1.0) == pytest.approx(p[i + 1])

    picked = stack.take(np.array([3, 0, 0]))
    values = picked(np.array([[1.0], [0.0], [1.0]]))
    assert values == pytest.approx(np.stack([p[4], p[0], p[1]]))

    closing = SegmentPolynomial.from_hermite(p[-1:], p[:1], d[-1:], d[:1])
    assert len(stack.stacked_with(closing)) == 5


def test_single_segment_has_no_length():
    """Check len() is only defined for stacks."""
    seg = SegmentPolynomial.from_hermite(
        np.zeros(2), np.ones(2), np.zeros(2), np.zeros(2)
    )
    with pytest.raises(TypeError):
        len(seg)
