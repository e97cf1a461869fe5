"""Tests for luma-zone tone corrections."""

import numpy as np
import pytest

from pixel_adjust.processing.params import ToneSpec
from pixel_adjust.processing.raster import Raster
from pixel_adjust.processing.tone_zones import apply_tone_zones, highlight_factor, shadow_factor


def _pixel(rgb, spec):
    raster = Raster.blank(1, 1, tuple(rgb) + (255,))
    apply_tone_zones(raster, spec)
    return tuple(int(v) for v in raster.pixels[0, 0, :3])


class TestFactors:
    """Tests for the zone factors."""

    def test_highlight_factor(self):
        assert highlight_factor(255) == pytest.approx(1.0)
        assert highlight_factor(192) == 0.0
        assert highlight_factor(100) == 0.0

    def test_shadow_factor(self):
        assert shadow_factor(0) == pytest.approx(1.0)
        assert shadow_factor(32) == pytest.approx(0.5)
        assert shadow_factor(64) == 0.0


class TestApplyToneZones:
    """Tests for apply_tone_zones."""

    def test_default_is_noop(self, noisy_raster):
        before = noisy_raster.clone()
        apply_tone_zones(noisy_raster, ToneSpec())
        assert noisy_raster == before

    def test_highlights_only_touch_bright_pixels(self):
        assert _pixel((250, 250, 250), ToneSpec(highlights=-50)) == (204, 204, 204)
        assert _pixel((100, 100, 100), ToneSpec(highlights=-50)) == (100, 100, 100)

    def test_shadows_only_touch_dark_pixels(self):
        assert _pixel((0, 0, 0), ToneSpec(shadows=40)) == (40, 40, 40)
        assert _pixel((150, 150, 150), ToneSpec(shadows=40)) == (150, 150, 150)

    def test_whites_and_blacks_are_additive(self):
        assert _pixel((100, 120, 140), ToneSpec(whites=10, blacks=5)) == (105, 125, 145)
        assert _pixel((252, 3, 128), ToneSpec(whites=10)) == (255, 13, 138)

    def test_dehaze_is_red_weighted(self):
        assert _pixel((100, 100, 100), ToneSpec(dehaze=50)) == (150, 75, 75)

    def test_saturation_spreads_from_mean(self):
        assert _pixel((150, 100, 50), ToneSpec(saturation=100)) == (200, 100, 0)
        assert _pixel((150, 100, 50), ToneSpec(saturation=-100)) == (100, 100, 100)

    def test_vibrance_leaves_gray_alone(self):
        assert _pixel((128, 128, 128), ToneSpec(vibrance=100)) == (128, 128, 128)

    def test_vibrance_scales_with_chroma(self):
        assert _pixel((150, 100, 50), ToneSpec(vibrance=100)) == (160, 100, 40)

    def test_alpha_untouched(self, noisy_raster):
        before = noisy_raster.clone()
        apply_tone_zones(noisy_raster, ToneSpec(highlights=30, shadows=-20, dehaze=10, vibrance=40))
        assert np.array_equal(noisy_raster.alpha, before.alpha)

    def test_accepts_mapping(self):
        assert _pixel((0, 0, 0), {"shadows": 40}) == (40, 40, 40)
