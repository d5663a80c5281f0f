from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence, Tuple

Point = Tuple[float, float]  # (x, y)


class Orientation(int, Enum):
    COLLINEAR = 0
    CLOCKWISE = 1
    COUNTER_CLOCKWISE = 2


def orientation(a: Point, b: Point, c: Point) -> Orientation:
    """Rotational sense of a -> b -> c. Exact zero only; no tolerance band."""
    val = (b[1] - a[1]) * (c[0] - b[0]) - (b[0] - a[0]) * (c[1] - b[1])
    if val == 0:
        return Orientation.COLLINEAR
    if val > 0:
        return Orientation.CLOCKWISE
    return Orientation.COUNTER_CLOCKWISE


def is_on_segment(a: Point, b: Point, c: Point) -> bool:
    """True when b lies in the closed bounding box of a and c."""
    return (
        min(a[0], c[0]) <= b[0] <= max(a[0], c[0])
        and min(a[1], c[1]) <= b[1] <= max(a[1], c[1])
    )


def segments_intersect(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    o1 = orientation(p1, p2, q1)
    o2 = orientation(p1, p2, q2)
    o3 = orientation(q1, q2, p1)
    o4 = orientation(q1, q2, p2)

    if o1 != o2 and o3 != o4:
        return True

    # Collinear / touching cases
    if o1 == Orientation.COLLINEAR and is_on_segment(p1, q1, p2):
        return True
    if o2 == Orientation.COLLINEAR and is_on_segment(p1, q2, p2):
        return True
    if o3 == Orientation.COLLINEAR and is_on_segment(q1, p1, q2):
        return True
    if o4 == Orientation.COLLINEAR and is_on_segment(q1, p2, q2):
        return True

    return False


def intersection_point(p1: Point, p2: Point, q1: Point, q2: Point) -> Optional[Point]:
    """
    Crossing point of the infinite lines through p1p2 and q1q2.

    Returns None when the lines are parallel or coincident. The result is not
    clamped to either segment.
    """
    x1, y1 = p1
    x2, y2 = p2
    x3, y3 = q1
    x4, y4 = q2

    denominator = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if denominator == 0:
        return None

    a = x1 * y2 - y1 * x2
    b = x3 * y4 - y3 * x4
    x = (a * (x3 - x4) - (x1 - x2) * b) / denominator
    y = (a * (y3 - y4) - (y1 - y2) * b) / denominator
    return (x, y)


def polyline_segments(points: Sequence[Point]) -> List[Tuple[Point, Point]]:
    return list(zip(points, points[1:]))
