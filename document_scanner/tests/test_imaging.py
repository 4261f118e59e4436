"""
Tests for image conversions
"""

import numpy as np
import pytest
from PIL import Image

from document_scanner.errors import InvalidImageError
from document_scanner.imaging import bgr_to_pil, load_image, to_bgr, to_gray


class TestToBgr:
    """Tests for to_bgr"""

    def test_pil_rgb_becomes_bgr(self):
        pil = Image.new("RGB", (4, 3), (255, 0, 0))
        bgr = to_bgr(pil)
        assert bgr.shape == (3, 4, 3)
        assert tuple(bgr[0, 0]) == (0, 0, 255)

    def test_pil_rgba_and_gray(self):
        assert to_bgr(Image.new("RGBA", (4, 3), (0, 255, 0, 128))).shape == (3, 4, 3)
        assert to_bgr(Image.new("L", (4, 3), 7)).shape == (3, 4, 3)

    def test_bgra_drops_alpha(self):
        bgra = np.zeros((5, 6, 4), dtype=np.uint8)
        bgra[..., 0] = 200
        bgr = to_bgr(bgra)
        assert bgr.shape == (5, 6, 3)
        assert bgr[0, 0, 0] == 200

    def test_gray_passthrough(self):
        gray = np.zeros((5, 6), dtype=np.uint8)
        assert to_bgr(gray) is gray
        assert to_gray(gray) is gray

    def test_single_channel_squeezed(self):
        assert to_bgr(np.zeros((5, 6, 1), dtype=np.uint8)).shape == (5, 6)

    @pytest.mark.parametrize("image", [
        None,
        np.zeros((0, 0, 3), dtype=np.uint8),
        np.zeros((5, 6, 3), dtype=np.float32),
        np.zeros(10, dtype=np.uint8),
        [[0, 0], [0, 0]],
    ])
    def test_rejected(self, image):
        with pytest.raises(InvalidImageError):
            to_bgr(image)

    def test_bgr_to_pil(self):
        bgr = np.zeros((3, 4, 3), dtype=np.uint8)
        bgr[..., 2] = 255
        assert bgr_to_pil(bgr).getpixel((0, 0)) == (255, 0, 0)


class TestLoadImage:
    """Tests for load_image"""

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidImageError, match="Failed to load image"):
            load_image(tmp_path / "missing.jpg")
