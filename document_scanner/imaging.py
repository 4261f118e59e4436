"""
Conversions between the image types accepted by the scanner
"""

from pathlib import Path
from typing import Union

import cv2
import numpy as np
from PIL import Image, ImageOps

from .errors import InvalidImageError


def pil_to_bgr(pil_img: Image.Image) -> np.ndarray:
    # respect EXIF orientation of camera photos
    pil_img = ImageOps.exif_transpose(pil_img)
    rgb = np.array(pil_img.convert("RGB"))
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)


def bgr_to_pil(bgr: np.ndarray) -> Image.Image:
    if bgr.ndim == 2:
        return Image.fromarray(bgr)
    rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
    return Image.fromarray(rgb)


def to_bgr(image: Union[np.ndarray, Image.Image]) -> np.ndarray:
    """
    Normalize input to an OpenCV image.

    Args:
        image: PIL image or numpy array (gray, BGR or BGRA)

    Returns:
        Gray or BGR numpy array. Alpha channel is dropped.

    Raises:
        InvalidImageError: for missing, empty or unsupported images
    """
    if image is None:
        raise InvalidImageError("No image given")

    if isinstance(image, Image.Image):
        image = pil_to_bgr(image)

    if not isinstance(image, np.ndarray):
        raise InvalidImageError(f"Unsupported image type: {type(image).__name__}")

    if image.size == 0 or image.ndim not in (2, 3):
        raise InvalidImageError(f"Empty or malformed image, shape {image.shape}")

    if image.ndim == 3:
        channels = image.shape[2]
        if channels == 4:
            image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
        elif channels == 1:
            image = image[:, :, 0]
        elif channels != 3:
            raise InvalidImageError(f"Unsupported channel count: {channels}")

    if image.dtype != np.uint8:
        raise InvalidImageError(f"Expected 8-bit image, got {image.dtype}")

    return image


def to_gray(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return image
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Load image from disk as BGR array.

    Raises:
        InvalidImageError: if the file is missing or can't be decoded
    """
    image = cv2.imread(str(path))
    if image is None:
        raise InvalidImageError(f"Failed to load image: {path}")
    return image
