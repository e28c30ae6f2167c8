"""Tests for the pixel difference engine."""

import pytest

from helpers import BLUE, RED, noise, paint
from visual_parity.comparison.pixel_diff import color_difference, diff_pixels, pixel_diff_label
from visual_parity.errors import DimensionError
from visual_parity.models.config import PixelDiffOptions
from visual_parity.models.pixel_buffer import PixelBuffer


class TestDiffPixels:
    """Tests for diff_pixels."""

    def test_identical_buffers_have_no_difference(self, red_100):
        result = diff_pixels(red_100, red_100)
        assert result.count == 0
        assert result.percent == 0.0
        assert result.antialiased == 0

    def test_blue_square_counts_every_pixel(self, red_100, red_with_blue_corner):
        result = diff_pixels(red_100, red_with_blue_corner)
        assert result.count == 100
        assert result.percent == pytest.approx(1.0)

    def test_count_is_symmetric(self):
        a, b = noise(20, 20, seed=7), noise(20, 20, seed=8)
        assert diff_pixels(a, b).count == diff_pixels(b, a).count

    def test_mask_marks_differences(self, red_100, red_with_blue_corner):
        mask = diff_pixels(red_100, red_with_blue_corner).mask.to_array()
        assert mask.shape == (100, 100, 4)
        assert tuple(mask[0, 0]) == (255, 0, 0, 255)
        assert tuple(mask[9, 9]) == (255, 0, 0, 255)
        assert mask[50, 50, 3] == 0
        assert mask[10, 10, 3] == 0

    def test_custom_diff_color(self, red_100, red_with_blue_corner):
        options = PixelDiffOptions(diff_color=(0, 255, 0))
        mask = diff_pixels(red_100, red_with_blue_corner, options).mask.to_array()
        assert tuple(mask[5, 5]) == (0, 255, 0, 255)

    def test_antialiased_edge_is_not_counted(self, hard_edge, soft_edge):
        result = diff_pixels(hard_edge, soft_edge)
        assert result.count == 0
        assert result.antialiased == 10

    def test_include_aa_counts_edge(self, hard_edge, soft_edge):
        result = diff_pixels(hard_edge, soft_edge, PixelDiffOptions(include_aa=True))
        assert result.count == 10
        assert result.antialiased == 0
        assert result.percent == pytest.approx(10.0)

    def test_aa_pixels_transparent_in_mask_by_default(self, hard_edge, soft_edge):
        mask = diff_pixels(hard_edge, soft_edge).mask.to_array()
        assert mask[..., 3].max() == 0

    def test_aa_color_paints_aa_pixels(self, hard_edge, soft_edge):
        options = PixelDiffOptions(aa_color=(255, 255, 0))
        mask = diff_pixels(hard_edge, soft_edge, options).mask.to_array()
        assert tuple(mask[4, 5]) == (255, 255, 0, 255)
        assert mask[4, 4, 3] == 0

    def test_threshold_one_ignores_everything(self, red_100, red_with_blue_corner):
        result = diff_pixels(red_100, red_with_blue_corner, PixelDiffOptions(threshold=1.0))
        assert result.count == 0

    def test_subtle_change_below_threshold(self):
        a = PixelBuffer.solid(10, 10, (100, 100, 100, 255))
        b = PixelBuffer.solid(10, 10, (102, 100, 100, 255))
        assert diff_pixels(a, b).count == 0

    def test_transparent_pixels_blend_to_white(self):
        transparent_red = PixelBuffer.solid(4, 4, (255, 0, 0, 0))
        white = PixelBuffer.solid(4, 4, (255, 255, 255, 255))
        assert diff_pixels(transparent_red, white).count == 0

    def test_more_changed_pixels_never_lower_count(self, red_100):
        small = paint(red_100, 0, 0, 5, 5, BLUE)
        large = paint(red_100, 0, 0, 20, 20, BLUE)
        assert diff_pixels(red_100, large).count >= diff_pixels(red_100, small).count

    def test_empty_buffers(self):
        empty = PixelBuffer.solid(0, 0)
        result = diff_pixels(empty, empty)
        assert result.count == 0
        assert result.percent == 0.0

    def test_size_mismatch_raises(self, red_100):
        with pytest.raises(DimensionError):
            diff_pixels(red_100, PixelBuffer.solid(50, 50, RED))


class TestColorDifference:
    """Tests for color_difference."""

    def test_identical(self, red_100):
        assert color_difference(red_100, red_100) == (0.0, 0)

    def test_blue_corner(self, red_100, red_with_blue_corner):
        percent, max_delta = color_difference(red_100, red_with_blue_corner)
        assert percent == pytest.approx(1.0)
        assert max_delta == 510

    def test_noise_threshold_is_exclusive(self):
        a = PixelBuffer.solid(10, 10, (100, 100, 100, 255))
        b = PixelBuffer.solid(10, 10, (110, 110, 110, 255))
        assert color_difference(a, b) == (0.0, 30)
        percent, _ = color_difference(a, b, noise=29)
        assert percent == pytest.approx(100.0)

    def test_size_mismatch_raises(self, red_100):
        with pytest.raises(DimensionError):
            color_difference(red_100, PixelBuffer.solid(10, 10, RED))


class TestPixelDiffLabel:
    """Tests for the pixel difference label."""

    @pytest.mark.parametrize("percent,label", [
        (0.0, "Acceptable"),
        (0.99, "Acceptable"),
        (1.0, "Minor Issues"),
        (4.99, "Minor Issues"),
        (5.0, "Significant Differences"),
    ])
    def test_thresholds(self, percent, label):
        assert pixel_diff_label(percent) == label
