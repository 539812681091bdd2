from uni_spline import (
    Spline, FixedTangentials,
    compute_spline, compute_derivatives,
    cubic_spline_interpolate,
)
import numpy as np
import torch

if __name__ == "__main__":
    # =========================================================================
    # 1. Scalar spline (natural boundary)
    # =========================================================================
    spline = Spline(values=[0.0, 1.0, 0.0, -1.0])
    for ti in [0.0, 1.0, 2.0, 3.0]:
        print(f"  f({ti:.1f}) = {spline(ti):+.4f}")

    # Extrapolation continues the end cubics
    print(f"Smooth extrapolation: f(-0.5)={spline(-0.5):+.4f}, f(3.5)={spline(3.5):+.4f}")

    # =========================================================================
    # 2. Vector spline with fixed tangents (linear extension outside)
    # =========================================================================
    print("\nFixed tangentials:")

    waypoints = np.array([[0, 0], [1, 2], [2, 1], [3, 3]], dtype=np.float64)
    times = np.array([0, 1, 2, 3], dtype=np.float64)
    boundary = FixedTangentials(start=np.array([1.0, 0.0]), end=np.array([0.0, 1.0]))

    spline = Spline(values=waypoints, arguments=times, boundary=boundary)
    query = np.array([-1.0, 0.5, 1.5, 2.5, 4.0])
    print(f"Positions: {spline(query)}")
    print(f"Velocity:  {spline.derivative(query)}")
    print(f"Derivative norms: {spline.norms}")

    # =========================================================================
    # 3. Closed loop
    # =========================================================================
    print("\nCircular:")

    square = np.array([[1, 0], [0, 1], [-1, 0], [0, -1]], dtype=np.float64)
    loop = Spline(values=square, boundary="circular")
    print(f"Period: {loop.period}")
    print(f"f(0)={loop(0.0)}  f(4)={loop(4.0)}  f(-4)={loop(-4.0)}")

    # =========================================================================
    # 4. Explicit derivatives
    # =========================================================================
    print("\nExplicit derivatives:")

    derivs = compute_derivatives(waypoints, "smooth")
    explicit = Spline.from_derivatives(times, waypoints, derivs, "smooth")
    print(f"Same as implicit: {np.allclose(explicit(query), compute_spline(waypoints, times)(query))}")

    # =========================================================================
    # 5. PyTorch backend
    # =========================================================================
    print("\nPyTorch:")

    points = torch.tensor(waypoints, requires_grad=True)
    pos = cubic_spline_interpolate(points, torch.tensor(times), torch.tensor([0.5, 1.5]))
    pos.sum().backward()
    print(f"Positions: {pos.detach()}")
    print(f"Gradient w.r.t. waypoints:\n{points.grad}")

    print("\nDone!")
