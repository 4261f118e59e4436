"""
Exceptions raised by the document scanner
"""


class ScannerError(Exception):
    """Base class for all document scanner errors."""


class InvalidImageError(ScannerError, ValueError):
    """Image is missing, empty or has an unsupported layout."""


class InvalidCornersError(ScannerError, ValueError):
    """Corner input does not describe exactly 4 points."""


class ConfigError(ScannerError, ValueError):
    """Configuration value could not be parsed."""


class SessionStateError(ScannerError, RuntimeError):
    """Session operation called in the wrong state."""
