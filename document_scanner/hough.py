"""
Line based document detection (Hough fallback)

Used when no contour passes validation, typically because a document edge
is broken by shadows or the document touches the image border.
"""

import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .config import HoughConfig
from .geometry import LineSegment, Point, Quadrilateral, line_intersection, sort_clockwise
from .preprocessing import EdgeMap

logger = logging.getLogger(__name__)


def find_segments(canny: np.ndarray, config: HoughConfig = HoughConfig()) -> List[LineSegment]:
    """Probabilistic Hough segments of an edge image."""
    min_length = canny.shape[1] * config.min_length_ratio
    lines = cv2.HoughLinesP(
        canny,
        1,
        np.pi / 180,
        threshold=config.threshold,
        minLineLength=min_length,
        maxLineGap=config.max_gap
    )
    if lines is None:
        return []

    return [
        LineSegment(Point(float(x1), float(y1)), Point(float(x2), float(y2)))
        for x1, y1, x2, y2 in lines.reshape(-1, 4)
    ]


def split_by_orientation(segments: List[LineSegment]) -> Tuple[List[LineSegment], List[LineSegment]]:
    horizontal = [s for s in segments if s.is_horizontal]
    vertical = [s for s in segments if not s.is_horizontal]
    return horizontal, vertical


def _average_horizontal(segments: List[LineSegment]) -> LineSegment:
    """Collapse horizontal segments into one spanning all of them."""
    oriented = [s if s.start.x <= s.end.x else LineSegment(s.end, s.start) for s in segments]
    left_x = min(s.start.x for s in oriented)
    right_x = max(s.end.x for s in oriented)
    left_y = float(np.mean([s.start.y for s in oriented]))
    right_y = float(np.mean([s.end.y for s in oriented]))
    return LineSegment(Point(left_x, left_y), Point(right_x, right_y))


def _average_vertical(segments: List[LineSegment]) -> LineSegment:
    """Collapse vertical segments into one spanning all of them."""
    oriented = [s if s.start.y <= s.end.y else LineSegment(s.end, s.start) for s in segments]
    top_y = min(s.start.y for s in oriented)
    bottom_y = max(s.end.y for s in oriented)
    top_x = float(np.mean([s.start.x for s in oriented]))
    bottom_x = float(np.mean([s.end.x for s in oriented]))
    return LineSegment(Point(top_x, top_y), Point(bottom_x, bottom_y))


def cluster_edges(horizontal: List[LineSegment], vertical: List[LineSegment],
                  width: int, height: int) -> Optional[Tuple[LineSegment, ...]]:
    """
    Average segments on each side of the image centre.

    Returns:
        (top, bottom, left, right) lines, or None if a side has no segments
    """
    center_x = width / 2.0
    center_y = height / 2.0

    top = [s for s in horizontal if s.mid_y < center_y]
    bottom = [s for s in horizontal if s.mid_y >= center_y]
    left = [s for s in vertical if s.mid_x < center_x]
    right = [s for s in vertical if s.mid_x >= center_x]

    if not (top and bottom and left and right):
        return None

    return (
        _average_horizontal(top),
        _average_horizontal(bottom),
        _average_vertical(left),
        _average_vertical(right),
    )


def extreme_edges(horizontal: List[LineSegment], vertical: List[LineSegment]) -> Tuple[LineSegment, ...]:
    """Topmost, bottommost, leftmost and rightmost segments."""
    return (
        min(horizontal, key=lambda s: s.mid_y),
        max(horizontal, key=lambda s: s.mid_y),
        min(vertical, key=lambda s: s.mid_x),
        max(vertical, key=lambda s: s.mid_x),
    )


def _corner(horizontal: LineSegment, vertical: LineSegment, towards_left: bool) -> Optional[Point]:
    # Cast the horizontal edge as a ray from its far end towards the corner
    a, b = sorted((horizontal.start, horizontal.end), key=lambda p: p.x)
    if towards_left:
        a, b = b, a
    return line_intersection(a, b, vertical.start, vertical.end)


def detect_by_lines(edge_map: EdgeMap, config: HoughConfig = HoughConfig()) -> Optional[Quadrilateral]:
    """
    Detect document corners by intersecting the outermost edge lines.

    Args:
        edge_map: Preprocessed edges, the raw Canny image is used
        config: Hough parameters

    Returns:
        Corners in original image coordinates or None
    """
    segments = find_segments(edge_map.canny, config)
    horizontal, vertical = split_by_orientation(segments)
    logger.debug("Hough: %d horizontal, %d vertical segments", len(horizontal), len(vertical))

    if len(horizontal) < 2 or len(vertical) < 2:
        return None

    edges = None
    if len(segments) >= config.cluster_min_lines:
        edges = cluster_edges(horizontal, vertical, edge_map.width, edge_map.height)
    if edges is None:
        edges = extreme_edges(horizontal, vertical)
    top, bottom, left, right = edges

    corners = [
        _corner(top, left, towards_left=True),
        _corner(top, right, towards_left=False),
        _corner(bottom, right, towards_left=False),
        _corner(bottom, left, towards_left=True),
    ]

    if any(c is None for c in corners):
        logger.debug("Hough: edge lines do not intersect")
        return None
    if any(c.x < 0 or c.y < 0 for c in corners):
        logger.debug("Hough: intersection outside the image")
        return None

    return edge_map.to_original(sort_clockwise(corners))
