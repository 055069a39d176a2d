"""Plane geometry helpers used by the analyzer.

Points are plain ``(x, y)`` tuples of floats.
"""

import math

Vec = tuple[float, float]


def proper_atan(dx: float, dy: float) -> float:
    """Direction of ``(dx, dy)`` in degrees, in [0, 360).

    The zero vector maps to 90 degrees.
    """
    if dx == 0 and dy == 0:
        return 90.0
    angle = math.degrees(math.atan2(dy, dx))
    if angle < 0:
        angle += 360.0
    return 0.0 if angle >= 360.0 else angle


def dist2(a: Vec, b: Vec) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def dist2_to_line(p0: Vec, p1: Vec, pt: Vec) -> float:
    """Squared distance from ``pt`` to the infinite line through p0 and p1.

    A degenerate line falls back to the distance to p0.
    """
    dx = p1[0] - p0[0]
    dy = p1[1] - p0[1]
    length2 = dx * dx + dy * dy
    if length2 == 0:
        return dist2(p0, pt)
    cross = dx * (pt[1] - p0[1]) - dy * (pt[0] - p0[0])
    return cross * cross / length2


def dist2_to_segment(p0: Vec, p1: Vec, pt: Vec) -> float:
    """Squared distance from ``pt`` to the segment p0-p1."""
    dx = p1[0] - p0[0]
    dy = p1[1] - p0[1]
    length2 = dx * dx + dy * dy
    if length2 == 0:
        return dist2(p0, pt)
    t = ((pt[0] - p0[0]) * dx + (pt[1] - p0[1]) * dy) / length2
    t = max(0.0, min(1.0, t))
    return dist2((p0[0] + t * dx, p0[1] + t * dy), pt)


def line_intersection(a0: Vec, a1: Vec, b0: Vec, b1: Vec) -> Vec | None:
    """Intersection of the infinite lines a0-a1 and b0-b1.

    Returns:
        Intersection point, or None if the lines are parallel
    """
    d1x = a1[0] - a0[0]
    d1y = a1[1] - a0[1]
    d2x = b1[0] - b0[0]
    d2y = b1[1] - b0[1]
    denom = d1x * d2y - d1y * d2x
    if denom == 0:
        return None
    t = ((b0[0] - a0[0]) * d2y - (b0[1] - a0[1]) * d2x) / denom
    return (a0[0] + t * d1x, a0[1] + t * d1y)


def cross(o: Vec, a: Vec, b: Vec) -> float:
    """Z component of ``(a - o) x (b - o)``."""
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def unit_vector(angle_degrees: float) -> Vec:
    rad = math.radians(angle_degrees)
    return (math.cos(rad), math.sin(rad))
