"""
Document detection pipeline

Runs the detectors in priority order and stops at the first one that
finds a plausible document:

1. contour search on the primary edge map
2. Hough line intersection on the same edge map
3. largest 4-vertex contour on a second, looser edge map, unvalidated
   but covering at least a tenth of the image
4. a default inset rectangle, which always succeeds
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

import numpy as np
from PIL import Image

from .config import ScannerConfig
from .contour import detect_by_contour
from .fallback import default_corners
from .geometry import Quadrilateral
from .hough import detect_by_lines
from .imaging import bgr_to_pil, to_bgr
from .preprocessing import EdgeMap, preprocess
from .rectify import rectify

logger = logging.getLogger(__name__)


class Strategy(Enum):
    """Detector that produced a set of corners"""
    CONTOUR = "contour"
    HOUGH = "hough"
    CONTOUR_RETRY = "contour-retry"
    FALLBACK = "fallback-default"


@dataclass(frozen=True)
class DetectionResult:
    corners: Quadrilateral
    strategy: Strategy

    @property
    def detected(self) -> bool:
        """False when the corners are only the default rectangle."""
        return self.strategy is not Strategy.FALLBACK


class DocumentScanner:
    """
    Detects document corners and rectifies documents.

    The scanner holds only configuration. Every call allocates its own
    buffers, so one instance can be shared between threads.
    """

    def __init__(self, config: Optional[ScannerConfig] = None):
        """
        Initialize the scanner.

        Args:
            config: Pipeline parameters, defaults are used if omitted
        """
        self.config = config or ScannerConfig()

    def _strategies(self, image: np.ndarray) -> List[Tuple[Strategy, Callable[[], Optional[Quadrilateral]]]]:
        config = self.config
        edge_maps = {}

        def primary() -> EdgeMap:
            if 'primary' not in edge_maps:
                edge_maps['primary'] = preprocess(image, config.preprocess)
            return edge_maps['primary']

        def retry() -> Optional[Quadrilateral]:
            edge_map = preprocess(image, config.retry_preprocess)
            return detect_by_contour(edge_map, config.validation, config.retry_min_area_ratio, validate=False)

        return [
            (Strategy.CONTOUR, lambda: detect_by_contour(primary(), config.validation)),
            (Strategy.HOUGH, lambda: detect_by_lines(primary(), config.hough)),
            (Strategy.CONTOUR_RETRY, retry),
        ]

    def detect(self, image) -> DetectionResult:
        """
        Find the document corners in the image.

        Args:
            image: BGR/BGRA/gray numpy array or PIL image

        Returns:
            DetectionResult with corners in image coordinates. Never None:
            when every detector fails, a default inset rectangle is returned.

        Raises:
            InvalidImageError: if the image is missing or empty
        """
        image = to_bgr(image)

        for strategy, run in self._strategies(image):
            corners = run()
            if corners is not None:
                logger.info("Document detected with %s strategy", strategy.value)
                return DetectionResult(corners, strategy)
            logger.debug("Strategy %s found nothing", strategy.value)

        h, w = image.shape[:2]
        logger.info("No document detected, using default corners")
        return DetectionResult(default_corners(w, h, self.config.fallback_inset), Strategy.FALLBACK)

    def rectify(self, image, corners):
        """
        Warp the region inside `corners` to a top-down image.

        PIL input gives a PIL result, numpy input a numpy array.
        """
        warped = rectify(to_bgr(image), corners)
        if isinstance(image, Image.Image):
            return bgr_to_pil(warped)
        return warped

    def scan(self, image) -> Tuple[DetectionResult, Union[np.ndarray, Image.Image]]:
        """
        Detect corners and rectify in one step.

        Returns:
            (detection result, rectified image of the same kind as the input)
        """
        bgr = to_bgr(image)
        result = self.detect(bgr)
        warped = rectify(bgr, result.corners)
        if isinstance(image, Image.Image):
            return result, bgr_to_pil(warped)
        return result, warped


def detect_corners(image, config: Optional[ScannerConfig] = None) -> DetectionResult:
    return DocumentScanner(config).detect(image)


def scan(image, config: Optional[ScannerConfig] = None) -> Tuple[DetectionResult, Union[np.ndarray, Image.Image]]:
    return DocumentScanner(config).scan(image)
