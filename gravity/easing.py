"""
Gravity Lens -- Bezier Easing

Cubic bezier timing curves solved numerically, the same way CSS
`cubic-bezier()` timing functions are evaluated.

The lens animation uses one fixed curve, cubic-bezier(0.4, 0.0, 0.2, 1.0):
a fast start that settles gently into the end value.
"""

LENS_CP1 = (0.4, 0.0)
LENS_CP2 = (0.2, 1.0)

NEWTON_ITERATIONS = 8
MIN_SLOPE = 1e-10


def _bezier_component(u, c1, c2):
    """One axis of a bezier with P0=0, P3=1."""
    return 3.0 * c1 * (1 - u) * (1 - u) * u + 3.0 * c2 * (1 - u) * u * u + u * u * u


def _bezier_slope(u, c1, c2):
    """Derivative of _bezier_component with respect to u."""
    return (3.0 * c1 * (1 - u) * (1 - u) +
            6.0 * (1 - u) * u * (c2 - c1) +
            3.0 * u * u * (1 - c2))


def cubic_bezier(t, cp1, cp2):
    """Evaluate a cubic bezier timing curve at progress t.

    Solves x(u) = t for the curve parameter u with Newton-Raphson,
    starting from u = t and clamping every step to [0, 1], then
    returns y(u).

    Args:
        t: Linear progress. Values outside (0, 1) saturate.
        cp1, cp2: (x, y) control points in normalized 0-1 space.

    Returns:
        Eased progress in [0, 1].
    """
    if t <= 0:
        return 0.0
    if t >= 1:
        return 1.0

    u = t
    for _ in range(NEWTON_ITERATIONS):
        x_error = _bezier_component(u, cp1[0], cp2[0]) - t
        dx = _bezier_slope(u, cp1[0], cp2[0])
        if abs(dx) < MIN_SLOPE:
            break
        u -= x_error / dx
        u = max(0.0, min(1.0, u))

    return _bezier_component(u, cp1[1], cp2[1])


def cubic_bezier_ease(t):
    """The lens easing curve, cubic-bezier(0.4, 0.0, 0.2, 1.0)."""
    return cubic_bezier(t, LENS_CP1, LENS_CP2)
