"""Test evaluation outside the sampled domain for each boundary condition."""

import numpy as np
import pytest
from uni_spline import CLOSING_SEGMENT_SPAN, FixedTangentials, Spline


def _values(n: int, dims: int = 2, seed: int = 0) -> np.ndarray:
    np.random.seed(seed)
    return np.random.randn(n, dims)


@pytest.mark.parametrize("n", (2, 4, 7))
def test_circular_periodicity(n: int):
    """Check circular splines repeat with the closed-loop period."""
    values = _values(n)
    arguments = np.cumsum(np.random.random_sample(n) + 0.2) - 1.0
    spline = Spline(values=values, arguments=arguments, boundary="circular")
    period = arguments[-1] - arguments[0] + CLOSING_SEGMENT_SPAN
    assert spline.period == pytest.approx(period)

    t = np.linspace(arguments[0] - 0.3, arguments[-1] + 0.9, 41)
    base = spline(t)
    for k in (-5, -1, 1, 2, 10):
        assert spline(t + k * period) == pytest.approx(base, abs=1e-9)


def test_circular_just_before_start_uses_closing_segment():
    """Check queries up to one unit before the start follow the closing segment."""
    values = _values(5)
    spline = Spline(values=values, arguments=np.arange(5.0) + 10.0, boundary="circular")
    closing = spline.segments[-1]
    for negative in (0.1, 0.5, 1.0):
        assert spline(10.0 - negative) == pytest.approx(closing(1.0 - negative))


def test_circular_just_after_end_uses_closing_segment():
    """Check queries up to one unit after the end follow the closing segment."""
    values = _values(5)
    spline = Spline(values=values, boundary="circular")
    closing = spline.segments[-1]
    for positive in (0.0, 0.25, 0.75, 1.0):
        assert spline(4.0 + positive) == pytest.approx(closing(positive))


def test_circular_far_queries():
    """Check queries many periods away stay finite and wrap correctly."""
    values = _values(3)
    spline = Spline(values=values, boundary="circular")
    period = spline.period
    assert spline(1.0 + 1000 * period) == pytest.approx(values[1], abs=1e-8)
    assert spline(2.0 - 1000 * period) == pytest.approx(values[2], abs=1e-8)


def test_circular_closed_loop_is_smooth():
    """Check value and slope agree on both sides of the loop start."""
    spline = Spline(values=_values(6), boundary="circular")
    eps = 1e-7
    assert spline(-eps) == pytest.approx(spline(eps), abs=1e-5)
    assert spline.derivative(-1e-8) == pytest.approx(spline.derivative(1e-8), abs=1e-5)


@pytest.mark.parametrize("delta", (1e-3, 0.5, 2.0, 25.0))
def test_fixed_tangentials_linear_extension(delta: float):
    """Check fixed tangentials extend exactly linearly beyond both ends."""
    values = _values(4)
    start, end = np.array([1.5, -0.5]), np.array([0.25, 3.0])
    arguments = np.array([0.0, 1.0, 2.5, 3.0])
    spline = Spline(values=values, arguments=arguments, boundary=FixedTangentials(start, end))
    assert spline(arguments[0] - delta) == pytest.approx(values[0] - delta * start)
    assert spline(arguments[-1] + delta) == pytest.approx(values[-1] + delta * end)
    assert spline.derivative(arguments[0] - delta) == pytest.approx(start)
    assert spline.derivative(arguments[-1] + delta) == pytest.approx(end)
    assert spline.derivative(arguments[-1] + delta, order=2) == pytest.approx(np.zeros(2))


def test_fixed_tangentials_continuity():
    """Check value and slope are continuous where the linear extension starts."""
    start, end = np.array([2.0, -1.0]), np.array([0.5, 0.5])
    spline = Spline(values=_values(5), boundary=FixedTangentials(start, end))
    eps = 1e-8
    for edge in (0.0, 4.0):
        assert spline(edge - eps) == pytest.approx(spline(edge + eps), abs=1e-6)
    assert spline.derivative(1e-9) == pytest.approx(start, abs=1e-6)
    assert spline.derivative(4.0 - 1e-9) == pytest.approx(end, abs=1e-6)


@pytest.mark.parametrize(
    "arguments",
    (
        np.array([0.0, 2.0, 4.0]),
        np.array([-1.0, -0.75, 0.5, 3.5]),
        np.array([10.0, 10.1, 13.0, 13.05, 20.0]),
    ),
)
def test_fixed_tangentials_continuity_non_uniform(arguments):
    """Check the slope matches the tangents at both edges for any spacing."""
    start, end = np.array([1.0, -0.5]), np.array([2.0, 0.25])
    spline = Spline(
        values=_values(len(arguments)), arguments=arguments, boundary=FixedTangentials(start, end)
    )
    first, last = arguments[0], arguments[-1]
    eps = 1e-9
    assert spline.derivative(first + eps) == pytest.approx(spline.derivative(first - eps), abs=1e-6)
    assert spline.derivative(last - eps) == pytest.approx(spline.derivative(last + eps), abs=1e-6)
    assert spline.derivative(first + eps) == pytest.approx(start, abs=1e-6)
    assert spline.derivative(last - eps) == pytest.approx(end, abs=1e-6)


def test_fixed_tangentials_wide_spacing_line():
    """Check a line with matching tangents stays a line at spacing 2."""
    spline = Spline(
        values=[[0.0], [1.0], [2.0]],
        arguments=[0.0, 2.0, 4.0],
        boundary=FixedTangentials(start=[0.5], end=[0.5]),
    )
    t = np.array([-3.0, -1e-9, 1e-9, 1.0, 3.0, 4.0 + 1e-9, 7.0])
    assert spline(t) == pytest.approx(0.5 * t[:, None])
    assert spline.derivative(t) == pytest.approx(np.full((7, 1), 0.5))


def test_fixed_tangentials_scalar():
    """Check scalar fixed tangentials extend along scalar tangents."""
    spline = Spline(values=[1.0, 2.0, 0.0], boundary=FixedTangentials(start=0.5, end=-2.0))
    assert spline(-2.0) == pytest.approx(1.0 - 2.0 * 0.5)
    assert spline(3.0) == pytest.approx(0.0 + 1.0 * -2.0)


def test_smooth_extrapolates_end_cubics():
    """Check smooth splines continue the end segments as cubics."""
    values = _values(5)
    arguments = np.array([0.0, 2.0, 3.0, 5.0, 6.0])
    spline = Spline(values=values, arguments=arguments, boundary="smooth")
    first, last = spline.segments[0], spline.segments[-1]
    assert spline(-3.0) == pytest.approx(first((-3.0 - 0.0) / 2.0))
    assert spline(8.0) == pytest.approx(last((8.0 - 5.0) / 1.0))


def test_smooth_continuity_at_edges():
    """Check smooth extrapolation joins the interior continuously."""
    spline = Spline(values=_values(6), arguments=np.linspace(-1.0, 2.0, 6))
    eps = 1e-9
    for edge in (-1.0, 2.0):
        assert spline(edge - eps) == pytest.approx(spline(edge + eps), abs=1e-6)


@pytest.mark.parametrize("boundary", ("smooth", "circular", FixedTangentials(0.0, 0.0)))
def test_extreme_queries_never_raise(boundary):
    """Check evaluation is total over large real queries."""
    spline = Spline(values=[0.0, 1.0, 0.0, -1.0], boundary=boundary)
    result = spline(np.array([-1e12, -1.5, 1e6, 1e12]))
    assert result.shape == (4,)
    assert np.all(np.isfinite(result))
