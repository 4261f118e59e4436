"""
Tunable parameters of the detection pipeline

The thresholds were tuned empirically on phone photos of paper, cards and
receipts. They are exposed here instead of being hard-coded so they can be
adjusted per deployment, either in code or through DOCSCAN_* environment
variables.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigError


@dataclass(frozen=True)
class PreprocessConfig:
    max_dimension: int = 1000     # downscale longest side to this before edge finding
    equalize: bool = True         # histogram equalization for uneven lighting
    blur_kernel: int = 3          # Gaussian blur kernel size (odd)
    median_kernel: int = 5        # median filter used for the adaptive Canny thresholds
    canny_low: Optional[float] = None   # fixed thresholds, None = adaptive from median
    canny_high: Optional[float] = None
    canny_low_floor: float = 20.0
    canny_low_ratio: float = 0.66
    canny_high_ratio: float = 1.33
    morph_kernel: int = 5         # dilate + erode element to close gaps in edges

    @property
    def adaptive(self) -> bool:
        return self.canny_low is None or self.canny_high is None


PRIMARY = PreprocessConfig()

# Looser pass used when both detectors fail on the primary edge map
RETRY = PreprocessConfig(equalize=False, blur_kernel=5, canny_low=30.0, canny_high=100.0)


@dataclass(frozen=True)
class ValidationConfig:
    approx_epsilon: float = 0.02          # polygon approximation tolerance (ratio of perimeter)
    min_aspect: float = 0.5               # width / height, exclusive bounds
    max_aspect: float = 2.5
    max_symmetry_diff: float = 0.30       # relative difference of opposite sides
    max_angle_deviation: float = 30.0     # degrees away from 90


@dataclass(frozen=True)
class HoughConfig:
    threshold: int = 50
    min_length_ratio: float = 0.25        # min segment length as ratio of image width
    max_gap: float = 20.0
    cluster_min_lines: int = 10           # use averaged edge clusters from this many segments


@dataclass
class ScannerConfig:
    preprocess: PreprocessConfig = field(default_factory=lambda: PRIMARY)
    retry_preprocess: PreprocessConfig = field(default_factory=lambda: RETRY)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    hough: HoughConfig = field(default_factory=HoughConfig)
    retry_min_area_ratio: float = 0.1     # retry pass ignores quads below 10% of the image
    fallback_inset: float = 0.1           # default corners inset, ratio of image width

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'ScannerConfig':
        """
        Build configuration from DOCSCAN_* environment variables.

        A .env file is loaded first (existing variables win).

        Args:
            env_file: Path to .env file, default is searched from the working directory

        Returns:
            Configuration with overridden defaults

        Raises:
            ConfigError: if a variable can't be parsed
        """
        load_dotenv(env_file)

        config = cls()
        max_dimension = _env('DOCSCAN_MAX_DIMENSION', int)
        if max_dimension is not None:
            if max_dimension <= 0:
                raise ConfigError(f"DOCSCAN_MAX_DIMENSION must be positive, got {max_dimension}")
            config.preprocess = replace(config.preprocess, max_dimension=max_dimension)
            config.retry_preprocess = replace(config.retry_preprocess, max_dimension=max_dimension)

        validation = {
            'approx_epsilon': _env('DOCSCAN_APPROX_EPSILON', float),
            'min_aspect': _env('DOCSCAN_MIN_ASPECT', float),
            'max_aspect': _env('DOCSCAN_MAX_ASPECT', float),
            'max_symmetry_diff': _env('DOCSCAN_MAX_SYMMETRY_DIFF', float),
            'max_angle_deviation': _env('DOCSCAN_MAX_ANGLE_DEVIATION', float),
        }
        config.validation = replace(
            config.validation,
            **{k: v for k, v in validation.items() if v is not None}
        )

        hough = {
            'threshold': _env('DOCSCAN_HOUGH_THRESHOLD', int),
            'max_gap': _env('DOCSCAN_HOUGH_MAX_GAP', float),
        }
        config.hough = replace(config.hough, **{k: v for k, v in hough.items() if v is not None})

        inset = _env('DOCSCAN_FALLBACK_INSET', float)
        if inset is not None:
            if not 0 <= inset < 0.5:
                raise ConfigError(f"DOCSCAN_FALLBACK_INSET must be in [0, 0.5), got {inset}")
            config.fallback_inset = inset

        return config


def _env(name: str, cast):
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return None
    try:
        return cast(value)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {name}: {value!r}") from e
