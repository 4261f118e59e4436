"""
Perspective rectification of a detected document
"""

from typing import Tuple

import cv2
import numpy as np

from .errors import InvalidImageError
from .geometry import Quadrilateral, distance, sort_clockwise


def destination_size(corners) -> Tuple[int, int]:
    """
    Output size for the rectified document.

    The longer of each pair of opposite sides is used, so content on the
    side closer to the camera is not squeezed.

    Args:
        corners: 4 points in any order

    Returns:
        (width, height) in pixels, at least 1 each
    """
    tl, tr, br, bl = sort_clockwise(corners)
    max_width = max(distance(br, bl), distance(tr, tl))
    max_height = max(distance(tr, br), distance(tl, bl))
    return max(1, int(round(max_width))), max(1, int(round(max_height)))


def perspective_matrix(corners: Quadrilateral, width: int, height: int) -> np.ndarray:
    """Homography mapping the corners onto a width x height rectangle."""
    dst = np.array([
        [0, 0],
        [width - 1, 0],
        [width - 1, height - 1],
        [0, height - 1]
    ], dtype=np.float32)
    return cv2.getPerspectiveTransform(corners.to_array(), dst)


def rectify(image: np.ndarray, corners) -> np.ndarray:
    """
    Warp the document to a top-down view.

    Corner roles are re-derived from the coordinates, so corners reordered
    by dragging still produce an upright result.

    Args:
        image: Source image, not modified
        corners: Quadrilateral or any sequence of 4 points in image coordinates

    Returns:
        New image sized from the longest opposite sides of the corners

    Raises:
        InvalidCornersError: if corners are not exactly 4 points
        InvalidImageError: if the image is missing or empty
    """
    if image is None or image.size == 0:
        raise InvalidImageError("No image to rectify")

    quad = sort_clockwise(corners)
    width, height = destination_size(quad)
    matrix = perspective_matrix(quad, width, height)
    return cv2.warpPerspective(image, matrix, (width, height))
