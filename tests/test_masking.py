"""Tests for mask-driven operations and colour keying."""

import numpy as np
import pytest

from pixel_adjust.processing.masking import (
    apply_alpha_mask,
    apply_blur_with_mask,
    apply_color_key,
    color_key_alpha_map,
    edge_clamped_gaussian_blur,
    parse_hex_color,
    separable_gaussian_kernel,
)
from pixel_adjust.processing.raster import Raster
from pixel_adjust.utils.errors import DimensionMismatch


def _mask_like(raster, value):
    return Raster.blank(raster.width, raster.height, (value, value, value, 255))


class TestGaussian:
    """Tests for the edge-clamped blur used by masked blending."""

    def test_kernel_is_normalised(self):
        kernel = separable_gaussian_kernel(4.5)
        assert kernel.size == 9
        assert kernel.sum() == pytest.approx(1.0)
        assert kernel[4] == kernel.max()

    def test_small_radius_still_three_taps(self):
        assert separable_gaussian_kernel(0.5).size == 3

    def test_flat_stays_flat_at_edges(self, flat_raster):
        assert edge_clamped_gaussian_blur(flat_raster, 6) == flat_raster

    def test_zero_radius_copies(self, noisy_raster):
        result = edge_clamped_gaussian_blur(noisy_raster, 0)
        assert result == noisy_raster
        assert result.pixels is not noisy_raster.pixels


class TestBlurWithMask:
    """Tests for apply_blur_with_mask."""

    def test_zero_mask_is_identity(self, noisy_raster):
        result = apply_blur_with_mask(noisy_raster, _mask_like(noisy_raster, 0), 5)
        assert result == noisy_raster

    def test_full_mask_on_flat_raster(self, flat_raster):
        result = apply_blur_with_mask(flat_raster, _mask_like(flat_raster, 255), 5)
        assert result == flat_raster

    def test_full_mask_blurs(self, sample_raster):
        result = apply_blur_with_mask(sample_raster, _mask_like(sample_raster, 255), 4)
        # the quadrant boundary softens
        assert result.pixels[19, 10, 2] > 0
        assert result.pixels[0, 0, 0] == 255

    def test_source_alpha_kept(self, noisy_raster):
        result = apply_blur_with_mask(noisy_raster, _mask_like(noisy_raster, 200), 3, feather=4)
        assert np.array_equal(result.alpha, noisy_raster.alpha)

    def test_source_not_modified(self, noisy_raster):
        before = noisy_raster.clone()
        apply_blur_with_mask(noisy_raster, _mask_like(noisy_raster, 128), 3)
        assert noisy_raster == before

    def test_size_mismatch(self, sample_raster):
        with pytest.raises(DimensionMismatch) as info:
            apply_blur_with_mask(sample_raster, Raster.blank(10, 10, (255, 255, 255, 255)), 3)
        assert info.value.expected == (40, 40)
        assert info.value.actual == (10, 10)


class TestAlphaMask:
    """Tests for apply_alpha_mask."""

    def test_red_channel_becomes_alpha(self, sample_raster):
        mask = Raster.blank(40, 40, (0, 255, 255, 255))
        mask.pixels[:, :10] = (90, 0, 0, 0)
        result = apply_alpha_mask(sample_raster, mask)
        assert np.all(result.alpha[:, :10] == 90)
        assert np.all(result.alpha[:, 10:] == 0)
        assert np.array_equal(result.rgb, sample_raster.rgb)

    def test_size_mismatch(self, sample_raster):
        with pytest.raises(DimensionMismatch):
            apply_alpha_mask(sample_raster, Raster.blank(40, 41))


class TestColorKey:
    """Tests for colour-distance keying."""

    def test_parse_hex(self):
        assert parse_hex_color("#00ff80") == (0, 255, 128)
        assert parse_hex_color("102030") == (16, 32, 48)
        assert parse_hex_color((1, 2, 3)) == (1, 2, 3)
        with pytest.raises(ValueError):
            parse_hex_color("#fff")

    def test_exact_match_is_removed(self, sample_raster):
        alpha = color_key_alpha_map(sample_raster, "#00ff00", 1)
        assert np.all(alpha[:20, 20:] == 0)
        assert np.all(alpha[:20, :20] == 255)
        assert alpha.dtype == np.uint8

    def test_invert(self, sample_raster):
        alpha = color_key_alpha_map(sample_raster, "#00ff00", 1, invert=True)
        assert np.all(alpha[:20, 20:] == 255)
        assert np.all(alpha[20:, :20] == 0)

    def test_feather_midpoint(self):
        # distance exactly at the tolerance sits in the middle of the ramp
        raster = Raster.blank(1, 1, (255, 255, 255, 255))
        alpha = color_key_alpha_map(raster, "#000000", 100, feather=10)
        assert alpha[0, 0] == 128

    def test_feather_ramp_ends(self):
        raster = Raster.blank(2, 1, (0, 0, 0, 255))
        raster.pixels[0, 1] = (255, 255, 255, 255)
        alpha = color_key_alpha_map(raster, "#000000", 40, feather=10)
        assert alpha.tolist() == [[0, 255]]

    def test_apply_keeps_colours(self, sample_raster):
        result = apply_color_key(sample_raster, (255, 0, 0), 5)
        assert np.array_equal(result.rgb, sample_raster.rgb)
        assert np.all(result.alpha[:20, :20] == 0)
        assert np.all(result.alpha[20:, 20:] == 255)
