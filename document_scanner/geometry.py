"""
Geometry helpers for corner detection and rectification
"""

import math
from typing import NamedTuple, Optional, List, Tuple

import numpy as np

from .errors import InvalidCornersError


# Determinants below this are treated as parallel lines
PARALLEL_EPSILON = 1e-9


class Point(NamedTuple):
    """Point in image pixel coordinates."""
    x: float
    y: float

    def scaled(self, scale_x: float, scale_y: float) -> 'Point':
        return Point(self.x * scale_x, self.y * scale_y)


class Quadrilateral(NamedTuple):
    """
    Four corners of a document, clockwise from top-left.

    Use `Quadrilateral.from_points` to build one from unordered points.
    """
    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point

    @classmethod
    def from_points(cls, points) -> 'Quadrilateral':
        """Order any 4 points clockwise starting from top-left."""
        return sort_clockwise(points)

    def to_array(self) -> np.ndarray:
        """Corners as float32 array of shape (4, 2), the layout OpenCV expects."""
        return np.array([[p.x, p.y] for p in self], dtype=np.float32)

    def scaled(self, scale_x: float, scale_y: float) -> 'Quadrilateral':
        return Quadrilateral(*(p.scaled(scale_x, scale_y) for p in self))


class LineSegment(NamedTuple):
    """Line segment between two points, as returned by Hough detection."""
    start: Point
    end: Point

    @property
    def angle(self) -> float:
        """Direction in degrees, in range (-180, 180]."""
        return math.degrees(math.atan2(self.end.y - self.start.y, self.end.x - self.start.x))

    @property
    def is_horizontal(self) -> bool:
        angle = self.angle
        return abs(angle) < 45 or abs(angle - 180) < 45 or abs(angle + 180) < 45

    @property
    def mid_x(self) -> float:
        return (self.start.x + self.end.x) / 2.0

    @property
    def mid_y(self) -> float:
        return (self.start.y + self.end.y) / 2.0


def as_point(value) -> Point:
    """Convert any (x, y) pair (tuple, list, numpy row) to a Point."""
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(float(x), float(y))


def as_points(points) -> List[Point]:
    """
    Convert a sequence or array of points to a list of Point.

    Accepts contour-shaped arrays such as (4, 1, 2) as returned by OpenCV.
    """
    if isinstance(points, np.ndarray):
        points = points.reshape(-1, 2)
    return [as_point(p) for p in points]


def distance(p1, p2) -> float:
    """Euclidean distance between two points."""
    p1, p2 = as_point(p1), as_point(p2)
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def angle_between(vertex, p1, p2) -> float:
    """
    Angle at `vertex` between the rays to `p1` and `p2`.

    Args:
        vertex: Apex of the angle
        p1: End of the first ray
        p2: End of the second ray

    Returns:
        Angle in degrees in range [0, 180]. 0.0 if either ray has zero length.
    """
    vertex, p1, p2 = as_point(vertex), as_point(p1), as_point(p2)
    dx1, dy1 = p1.x - vertex.x, p1.y - vertex.y
    dx2, dy2 = p2.x - vertex.x, p2.y - vertex.y

    mag1 = math.hypot(dx1, dy1)
    mag2 = math.hypot(dx2, dy2)
    if mag1 == 0.0 or mag2 == 0.0:
        return 0.0

    cos_angle = (dx1 * dx2 + dy1 * dy2) / (mag1 * mag2)
    cos_angle = max(-1.0, min(1.0, cos_angle))
    return math.degrees(math.acos(cos_angle))


def line_intersection(a1, a2, b1, b2) -> Optional[Point]:
    """
    Intersect the ray through a1->a2 with the segment b1-b2.

    The first line is only bounded in the forward direction (t > 0), the
    second one is bounded to the open segment (0 < u < 1). Hough segments
    are often short fragments, so only the side being intersected against
    is strictly bounded.

    Returns:
        Intersection point or None for parallel lines and out of bounds hits
    """
    a1, a2, b1, b2 = as_point(a1), as_point(a2), as_point(b1), as_point(b2)

    denom = (a1.x - a2.x) * (b1.y - b2.y) - (a1.y - a2.y) * (b1.x - b2.x)
    if abs(denom) < PARALLEL_EPSILON:
        return None

    t = ((a1.x - b1.x) * (b1.y - b2.y) - (a1.y - b1.y) * (b1.x - b2.x)) / denom
    u = -((a1.x - a2.x) * (a1.y - b1.y) - (a1.y - a2.y) * (a1.x - b1.x)) / denom

    if t <= 0 or not 0 < u < 1:
        return None

    return Point(a1.x + t * (a2.x - a1.x), a1.y + t * (a2.y - a1.y))


def sort_clockwise(points) -> Quadrilateral:
    """
    Order 4 points as top-left, top-right, bottom-right, bottom-left.

    Top-left has the smallest x+y, bottom-right the largest. Top-right has
    the smallest y-x, bottom-left the largest. Ties keep input order.

    When that picks one point for two roles (a quad rotated by about 45
    degrees), the points are ordered by angle around their centroid
    instead, starting from the one with the smallest x+y.

    Raises:
        InvalidCornersError: if not exactly 4 points are given
    """
    pts = as_points(points)
    if len(pts) != 4:
        raise InvalidCornersError(f"Expected 4 corner points, got {len(pts)}")

    indices = range(4)
    roles = [
        min(indices, key=lambda i: pts[i].x + pts[i].y),
        min(indices, key=lambda i: pts[i].y - pts[i].x),
        max(indices, key=lambda i: pts[i].x + pts[i].y),
        max(indices, key=lambda i: pts[i].y - pts[i].x),
    ]
    if len(set(roles)) == 4:
        return Quadrilateral(*(pts[i] for i in roles))

    cx = sum(p.x for p in pts) / 4
    cy = sum(p.y for p in pts) / 4
    # y grows downwards, so ascending angle runs clockwise on screen
    ring = sorted(pts, key=lambda p: math.atan2(p.y - cy, p.x - cx))
    start = min(range(4), key=lambda i: ring[i].x + ring[i].y)
    return Quadrilateral(*(ring[start:] + ring[:start]))


def side_lengths(quad: Quadrilateral) -> Tuple[float, float, float, float]:
    """Lengths of the (top, right, bottom, left) sides."""
    tl, tr, br, bl = quad
    return distance(tl, tr), distance(tr, br), distance(bl, br), distance(tl, bl)


def interior_angles(quad: Quadrilateral) -> List[float]:
    """Interior angles at tl, tr, br, bl in degrees."""
    tl, tr, br, bl = quad
    return [
        angle_between(tl, tr, bl),
        angle_between(tr, tl, br),
        angle_between(br, tr, bl),
        angle_between(bl, tl, br),
    ]

