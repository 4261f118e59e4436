"""
Tests for contour based detection
"""

import cv2
import numpy as np
import pytest

from document_scanner.config import RETRY, ValidationConfig
from document_scanner.contour import detect_by_contour, find_largest_quad, validate_quadrilateral
from document_scanner.geometry import Point, Quadrilateral, sort_clockwise
from document_scanner.preprocessing import preprocess


def draw_quad(corners, size=(700, 500), background=0):
    """Filled white quadrilateral on a uniform background, size is (h, w)"""
    image = np.full((size[0], size[1], 3), background, dtype=np.uint8)
    cv2.fillPoly(image, [np.array(corners, dtype=np.int32)], (255, 255, 255))
    return image


def assert_corners_close(actual, expected, tolerance=5.0):
    for got, want in zip(actual, expected):
        assert abs(got.x - want[0]) <= tolerance and abs(got.y - want[1]) <= tolerance, \
            f"Corner {got} too far from {want}"


class TestValidateQuadrilateral:
    """Tests for the plausibility rules"""

    def test_rectangle_passes(self):
        quad = Quadrilateral(Point(0, 0), Point(400, 0), Point(400, 600), Point(0, 600))
        assert validate_quadrilateral(quad)

    def test_extreme_aspect_rejected(self):
        wide = Quadrilateral(Point(0, 0), Point(900, 0), Point(900, 300), Point(0, 300))
        tall = Quadrilateral(Point(0, 0), Point(100, 0), Point(100, 300), Point(0, 300))
        assert not validate_quadrilateral(wide)
        assert not validate_quadrilateral(tall)

    def test_asymmetric_widths_rejected(self):
        # top is half as long as the bottom
        quad = Quadrilateral(Point(150, 0), Point(350, 0), Point(500, 400), Point(0, 400))
        assert not validate_quadrilateral(quad)

    def test_asymmetric_heights_rejected(self):
        # left side is half again as long as the right, widths and angles pass
        quad = Quadrilateral(Point(0, 0), Point(400, 0), Point(400, 400), Point(0, 600))
        assert not validate_quadrilateral(quad)
        assert validate_quadrilateral(quad, ValidationConfig(max_symmetry_diff=0.35))

    def test_mild_perspective_passes(self):
        quad = Quadrilateral(Point(60, 40), Point(440, 50), Point(470, 620), Point(30, 610))
        assert validate_quadrilateral(quad)

    def test_skewed_angles_rejected(self):
        # parallelogram with 45 degree corners, sides are symmetric
        quad = Quadrilateral(Point(0, 0), Point(300, 0), Point(600, 300), Point(300, 300))
        assert not validate_quadrilateral(quad)

    def test_degenerate_rejected(self):
        p = Point(10, 10)
        assert not validate_quadrilateral(Quadrilateral(p, p, p, p))

    def test_configurable_thresholds(self):
        wide = Quadrilateral(Point(0, 0), Point(900, 0), Point(900, 300), Point(0, 300))
        assert validate_quadrilateral(wide, ValidationConfig(max_aspect=3.5))


class TestDetectByContour:
    """Tests for detect_by_contour"""

    def test_detects_rectangle(self):
        expected = [(50, 50), (449, 50), (449, 649), (50, 649)]
        image = draw_quad(expected)

        corners = detect_by_contour(preprocess(image))

        assert corners is not None
        assert_corners_close(corners, expected)
        assert validate_quadrilateral(corners)

    def test_detects_perspective_quad(self):
        expected = [(80, 60), (430, 90), (460, 640), (40, 610)]
        image = draw_quad(expected, background=40)

        corners = detect_by_contour(preprocess(image))

        assert corners is not None
        assert_corners_close(corners, expected)

    def test_detects_counter_clockwise_polygon(self):
        expected = [(80, 60), (430, 90), (460, 640), (40, 610)]
        image = draw_quad(list(reversed(expected)))

        corners = detect_by_contour(preprocess(image))
        assert corners is not None
        assert corners == sort_clockwise(corners)

    def test_corners_scaled_to_original(self):
        expected = [(200, 200), (1800, 200), (1800, 2600), (200, 2600)]
        image = draw_quad(expected, size=(2800, 2000))

        edge_map = preprocess(image)
        assert edge_map.scale_x > 1.0

        corners = detect_by_contour(edge_map)
        assert corners is not None
        assert_corners_close(corners, expected, tolerance=4 * edge_map.scale_x)

    def test_blank_image(self):
        image = np.zeros((400, 300, 3), dtype=np.uint8)
        assert detect_by_contour(preprocess(image)) is None

    def test_triangle_is_not_a_document(self):
        image = draw_quad([(250, 50), (450, 600), (50, 600)])
        assert detect_by_contour(preprocess(image)) is None

    def test_implausible_quad_rejected(self):
        # long thin strip: a valid 4-gon that fails the aspect rule
        image = draw_quad([(50, 300), (450, 300), (450, 360), (50, 360)])
        edge_map = preprocess(image)

        assert find_largest_quad(edge_map) is not None
        assert detect_by_contour(edge_map) is None

    def test_min_area_ratio(self):
        image = draw_quad([(200, 300), (300, 300), (300, 420), (200, 420)])
        edge_map = preprocess(image)

        assert detect_by_contour(edge_map) is not None
        assert detect_by_contour(edge_map, min_area_ratio=0.1) is None

    def test_unvalidated_keeps_implausible_quad(self):
        expected = [(200, 100), (300, 100), (480, 650), (20, 650)]
        image = draw_quad(expected)
        edge_map = preprocess(image, RETRY)

        assert detect_by_contour(edge_map, min_area_ratio=0.1) is None

        corners = detect_by_contour(edge_map, min_area_ratio=0.1, validate=False)
        assert corners is not None
        assert_corners_close(corners, expected, tolerance=8.0)
