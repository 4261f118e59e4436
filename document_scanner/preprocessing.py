"""
Edge map preparation for corner detection
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

from .config import PreprocessConfig, PRIMARY
from .geometry import Quadrilateral
from .imaging import to_bgr, to_gray

logger = logging.getLogger(__name__)


@dataclass
class EdgeMap:
    """
    Edge images of a (possibly downscaled) input image.

    Attributes:
        edges: Closed binary edge map used for contour search
        canny: Raw Canny output used for line search
        scale_x: original width / working width
        scale_y: original height / working height
    """
    edges: np.ndarray
    canny: np.ndarray
    scale_x: float = 1.0
    scale_y: float = 1.0

    @property
    def width(self) -> int:
        return self.edges.shape[1]

    @property
    def height(self) -> int:
        return self.edges.shape[0]

    @property
    def area(self) -> int:
        return self.width * self.height

    def to_original(self, quad: Quadrilateral) -> Quadrilateral:
        """Scale corners found on the edge map back to original image coordinates."""
        return quad.scaled(self.scale_x, self.scale_y)


def downscale(image: np.ndarray, max_dimension: int) -> Tuple[np.ndarray, float, float]:
    """
    Shrink image so the longer side is at most `max_dimension`.

    Returns:
        (image, scale_x, scale_y) where scales map working coordinates back
        to the original image. Small images are returned unchanged.
    """
    h, w = image.shape[:2]
    larger = max(w, h)
    if larger <= max_dimension:
        return image, 1.0, 1.0

    factor = max_dimension / float(larger)
    new_w = max(1, int(w * factor))
    new_h = max(1, int(h * factor))
    resized = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)
    return resized, w / float(new_w), h / float(new_h)


def canny_thresholds(gray: np.ndarray, config: PreprocessConfig) -> Tuple[float, float]:
    """
    Canny thresholds for the image.

    Fixed thresholds from the config win; otherwise both are derived from
    the median intensity so the edge detector adapts to lighting.
    """
    if not config.adaptive:
        return float(config.canny_low), float(config.canny_high)

    median = float(np.median(cv2.medianBlur(gray, config.median_kernel)))
    low = max(config.canny_low_floor, config.canny_low_ratio * median)
    high = min(255.0, config.canny_high_ratio * median)
    return low, high


def preprocess(image: np.ndarray, config: PreprocessConfig = PRIMARY) -> EdgeMap:
    """
    Produce edge maps for corner detection.

    Steps: downscale, grayscale, histogram equalization, Gaussian blur,
    Canny with adaptive thresholds, morphological close.

    Args:
        image: Input image (gray, BGR, BGRA or PIL)
        config: Preprocessing parameters

    Returns:
        EdgeMap with scale factors back to the input resolution
    """
    image = to_bgr(image)
    working, scale_x, scale_y = downscale(image, config.max_dimension)

    gray = to_gray(working)
    if config.equalize:
        gray = cv2.equalizeHist(gray)

    blurred = cv2.GaussianBlur(gray, (config.blur_kernel, config.blur_kernel), 0)

    low, high = canny_thresholds(gray, config)
    canny = cv2.Canny(blurred, low, high)

    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (config.morph_kernel, config.morph_kernel))
    closed = cv2.dilate(canny, kernel)
    closed = cv2.erode(closed, kernel)

    logger.debug(
        "Edge map %dx%d (scale %.3f, %.3f), canny thresholds %.1f/%.1f",
        closed.shape[1], closed.shape[0], scale_x, scale_y, low, high
    )

    return EdgeMap(edges=closed, canny=canny, scale_x=scale_x, scale_y=scale_y)
