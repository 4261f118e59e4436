"""
Contour based document detection

Finds the largest 4-vertex polygon among the external contours of the edge
map and accepts it only when it looks like a physical sheet seen in
perspective.
"""

import logging
from typing import Optional

import cv2

from .config import ValidationConfig
from .geometry import Quadrilateral, sort_clockwise, side_lengths, interior_angles
from .preprocessing import EdgeMap

logger = logging.getLogger(__name__)


def find_largest_quad(edge_map: EdgeMap, approx_epsilon: float = 0.02,
                      min_area_ratio: float = 0.0) -> Optional[Quadrilateral]:
    """
    Largest 4-vertex polygon approximation of the external contours.

    Args:
        edge_map: Preprocessed edges
        approx_epsilon: Polygon approximation tolerance as ratio of perimeter
        min_area_ratio: Ignore polygons smaller than this share of the image

    Returns:
        Corners in edge map coordinates, or None
    """
    contours, _ = cv2.findContours(edge_map.edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    logger.debug("Found %d contours", len(contours))

    min_area = edge_map.area * min_area_ratio
    best = None
    best_area = 0.0

    for contour in contours:
        peri = cv2.arcLength(contour, True)
        approx = cv2.approxPolyDP(contour, approx_epsilon * peri, True)
        if len(approx) != 4:
            continue

        area = cv2.contourArea(approx)
        if area <= min_area or area <= best_area:
            continue

        best = approx
        best_area = area

    if best is None:
        return None

    return sort_clockwise(best)


def validate_quadrilateral(quad: Quadrilateral, config: ValidationConfig = ValidationConfig()) -> bool:
    """
    Check that a candidate has the proportions of a real document.

    Rules:
        - width/height ratio within (min_aspect, max_aspect)
        - opposite sides differ by less than max_symmetry_diff
        - every interior angle within max_angle_deviation of 90 degrees

    Args:
        quad: Clockwise ordered corners
        config: Validation thresholds

    Returns:
        True if all rules pass
    """
    top, right, bottom, left = side_lengths(quad)
    max_width = max(top, bottom)
    max_height = max(left, right)

    if max_width == 0 or max_height == 0:
        logger.debug("Rejected quad with degenerate sides")
        return False

    aspect = max_width / max_height
    if not config.min_aspect < aspect < config.max_aspect:
        logger.debug("Rejected quad: aspect ratio %.2f", aspect)
        return False

    width_diff = abs(top - bottom) / max_width
    height_diff = abs(left - right) / max_height
    if width_diff >= config.max_symmetry_diff or height_diff >= config.max_symmetry_diff:
        logger.debug("Rejected quad: side asymmetry %.2f / %.2f", width_diff, height_diff)
        return False

    angles = interior_angles(quad)
    if any(abs(angle - 90.0) >= config.max_angle_deviation for angle in angles):
        logger.debug("Rejected quad: angles %s", ", ".join(f"{a:.1f}" for a in angles))
        return False

    return True


def detect_by_contour(edge_map: EdgeMap, config: ValidationConfig = ValidationConfig(),
                      min_area_ratio: float = 0.0, validate: bool = True) -> Optional[Quadrilateral]:
    """
    Detect document corners from edge contours.

    Args:
        edge_map: Preprocessed edges
        config: Approximation and validation thresholds
        min_area_ratio: Minimum candidate area as share of the image
        validate: Apply the plausibility rules. The retry pass turns them off
            and relies on min_area_ratio alone.

    Returns:
        Corners in original image coordinates, ordered top-left, top-right,
        bottom-right, bottom-left, or None when no valid candidate exists
    """
    quad = find_largest_quad(edge_map, config.approx_epsilon, min_area_ratio)
    if quad is None:
        logger.debug("No 4-vertex contour found")
        return None

    if validate and not validate_quadrilateral(quad, config):
        return None

    return edge_map.to_original(quad)
