"""
Document Scanner

Detects the corners of a photographed document and warps it to a
flat, top-down image using OpenCV.
"""

from .config import ScannerConfig, PreprocessConfig, ValidationConfig, HoughConfig
from .errors import ScannerError, InvalidImageError, InvalidCornersError, ConfigError, SessionStateError
from .geometry import Point, Quadrilateral, LineSegment
from .rectify import rectify
from .scanner import DocumentScanner, DetectionResult, Strategy, detect_corners, scan
from .session import ScanSession, ScanState

__all__ = [
    'DocumentScanner', 'DetectionResult', 'Strategy', 'detect_corners', 'scan', 'rectify',
    'ScanSession', 'ScanState',
    'Point', 'Quadrilateral', 'LineSegment',
    'ScannerConfig', 'PreprocessConfig', 'ValidationConfig', 'HoughConfig',
    'ScannerError', 'InvalidImageError', 'InvalidCornersError', 'ConfigError', 'SessionStateError',
]
