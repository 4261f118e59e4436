"""
Default corners when nothing can be detected
"""

from .errors import InvalidImageError
from .geometry import Point, Quadrilateral


def default_corners(width: int, height: int, inset: float = 0.1) -> Quadrilateral:
    """
    Centered rectangle inset from the image border.

    The margin is `inset * width` on all four sides, so the user gets
    handles that are easy to grab and drag onto the real document.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        inset: Margin as ratio of the image width

    Returns:
        Corners ordered top-left, top-right, bottom-right, bottom-left
    """
    if width <= 0 or height <= 0:
        raise InvalidImageError(f"Invalid image size {width}x{height}")

    margin = width * inset
    # very wide images would otherwise get top and bottom edges crossed
    margin_y = min(margin, height * 0.45)
    return Quadrilateral(
        Point(margin, margin_y),
        Point(width - margin, margin_y),
        Point(width - margin, height - margin_y),
        Point(margin, height - margin_y),
    )
