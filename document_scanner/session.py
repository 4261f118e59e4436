"""
Interactive corner adjustment

A ScanSession is the caller-held document of current corner positions
between detection and rectification. The UI feeds it drag gestures and
view sizes; the session keeps corners in image pixel coordinates.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from .errors import InvalidCornersError, SessionStateError
from .geometry import Point, as_point, as_points, distance
from .imaging import to_bgr
from .scanner import DetectionResult, DocumentScanner

logger = logging.getLogger(__name__)


class ScanState(Enum):
    AWAITING_INPUT = "awaiting_input"
    DETECTING = "detecting"
    CORNERS_READY = "corners_ready"
    RECTIFYING = "rectifying"
    DONE = "done"


class ScanSession:
    """
    State machine:
    AWAITING_INPUT -> DETECTING -> CORNERS_READY -> RECTIFYING -> DONE.

    DETECTING and RECTIFYING last only while the blocking call runs. A
    failed rectification goes back to CORNERS_READY.

    `retry()` drops corners and result and runs detection again.
    `reset()` goes back to AWAITING_INPUT.
    """

    def __init__(self, scanner: Optional[DocumentScanner] = None, handle_radius: float = 32.0):
        """
        Args:
            scanner: Detection pipeline, default configuration if omitted
            handle_radius: Max distance in image pixels for grabbing a corner
        """
        self.scanner = scanner or DocumentScanner()
        self.handle_radius = handle_radius
        self.reset()

    def reset(self):
        self.state = ScanState.AWAITING_INPUT
        self.image: Optional[np.ndarray] = None
        self.detection: Optional[DetectionResult] = None
        self.corners: List[Point] = []
        self.user_adjusted = False
        self.result: Optional[np.ndarray] = None
        self.grabbed: Optional[int] = None

    def _require(self, state: ScanState):
        if self.state is not state:
            raise SessionStateError(f"Operation needs state {state.value}, session is {self.state.value}")

    @property
    def image_size(self) -> Tuple[int, int]:
        if self.image is None:
            return 0, 0
        h, w = self.image.shape[:2]
        return w, h

    def load(self, image) -> DetectionResult:
        """Take a new image and detect its corners."""
        self.reset()
        self.image = to_bgr(image)
        return self._detect()

    def _detect(self) -> DetectionResult:
        self.state = ScanState.DETECTING
        self.detection = self.scanner.detect(self.image)
        self.corners = list(self.detection.corners)
        self.user_adjusted = False
        self.result = None
        self.grabbed = None
        self.state = ScanState.CORNERS_READY
        return self.detection

    def retry(self) -> DetectionResult:
        """Discard corners and any result and detect again on the same image."""
        if self.image is None:
            raise SessionStateError("No image loaded")
        return self._detect()

    def grab(self, point) -> Optional[int]:
        """
        Start dragging the corner nearest to `point`.

        Returns:
            Index of the grabbed corner, or None if no corner is within
            the handle radius
        """
        self._require(ScanState.CORNERS_READY)
        point = as_point(point)
        distances = [distance(point, c) for c in self.corners]
        index = int(np.argmin(distances))
        self.grabbed = index if distances[index] < self.handle_radius else None
        return self.grabbed

    def drag(self, delta_x: float, delta_y: float):
        """Move the grabbed corner. Without a grabbed corner this does nothing."""
        self._require(ScanState.CORNERS_READY)
        if self.grabbed is None:
            return
        corner = self.corners[self.grabbed]
        self.set_corner(self.grabbed, (corner.x + delta_x, corner.y + delta_y))

    def release(self):
        self.grabbed = None

    def set_corner(self, index: int, point):
        self._require(ScanState.CORNERS_READY)
        if not 0 <= index < 4:
            raise InvalidCornersError(f"Corner index out of range: {index}")
        self.corners[index] = as_point(point)
        self.user_adjusted = True

    def set_corners(self, points):
        self._require(ScanState.CORNERS_READY)
        points = as_points(points)
        if len(points) != 4:
            raise InvalidCornersError(f"Expected 4 corner points, got {len(points)}")
        self.corners = points
        self.user_adjusted = True

    def to_view(self, point, view_size: Tuple[int, int]) -> Point:
        """Map image coordinates to a display canvas of `view_size` (width, height)."""
        view_w, view_h = view_size
        img_w, img_h = self.image_size
        if view_w == 0 or view_h == 0 or img_w == 0 or img_h == 0:
            return Point(0.0, 0.0)
        point = as_point(point)
        return Point(point.x * view_w / img_w, point.y * view_h / img_h)

    def to_image(self, point, view_size: Tuple[int, int]) -> Point:
        """Map a display canvas position back to image coordinates."""
        view_w, view_h = view_size
        img_w, img_h = self.image_size
        if view_w == 0 or view_h == 0 or img_w == 0 or img_h == 0:
            return Point(0.0, 0.0)
        point = as_point(point)
        return Point(point.x * img_w / view_w, point.y * img_h / view_h)

    def rectify(self) -> np.ndarray:
        """Warp the image with the current corners and finish the session."""
        self._require(ScanState.CORNERS_READY)
        logger.debug("Rectifying with %s corners", "adjusted" if self.user_adjusted else "detected")
        self.state = ScanState.RECTIFYING
        self.grabbed = None
        try:
            self.result = self.scanner.rectify(self.image, self.corners)
        except Exception:
            self.state = ScanState.CORNERS_READY
            raise
        self.state = ScanState.DONE
        return self.result
