# Luma-zone tone corrections
"""
Highlights/shadows, whites/blacks, dehaze, saturation and vibrance.

All work happens on float copies of the colour channels with a clamp to
0..255 after every step; the result is rounded once when written back.
"""

import numpy as np

from ..config import settings
from ..utils.logger import get_logger
from .color_space import luma
from .params import ToneSpec

logger = get_logger(__name__)


def _clamp(values):
    return np.clip(values, 0.0, 255.0)


def highlight_factor(lum, threshold=None):
    """Boost factor for the highlight slider: ramps 0..1 over luma (threshold, 255]."""
    if threshold is None:
        threshold = settings.PIPELINE_DEFAULTS["highlight_luma"]
    lum = np.asarray(lum, dtype=np.float64)
    return np.where(lum > threshold, (lum - threshold) / (255.0 - threshold), 0.0)


def shadow_factor(lum, threshold=None):
    """Boost factor for the shadow slider: 1 at black, falling to 0 at threshold."""
    if threshold is None:
        threshold = settings.PIPELINE_DEFAULTS["shadow_luma"]
    lum = np.asarray(lum, dtype=np.float64)
    return np.where(lum < threshold, 1.0 - lum / threshold, 0.0)


def apply_saturation(rgb, amount):
    """Push channels away from (or toward) their mean; amount is a percentage."""
    avg = rgb.mean(axis=-1, keepdims=True)
    return _clamp(rgb + (rgb - avg) * (amount / 100.0))


def apply_vibrance(rgb, amount):
    """
    Saturation scaled by how far the pixel already is from gray.

    The (max - avg) / 255 weight leaves neutral pixels alone; a pixel whose
    max equals its mean has no chroma and is passed through.
    """
    avg = rgb.mean(axis=-1, keepdims=True)
    mx = rgb.max(axis=-1, keepdims=True)
    spread = mx - avg
    weight = np.where(spread > 0, spread / 255.0, 0.0)
    return _clamp(rgb + (rgb - avg) * (amount / 100.0) * weight)


def apply_dehaze(rgb, amount):
    """Red-weighted contrast boost: red x(1 + d/100), green and blue x(1 - d/200)."""
    factors = np.array([1.0 + amount / 100.0, 1.0 - amount / 200.0, 1.0 - amount / 200.0])
    return _clamp(rgb * factors)


def apply_tone_zones(raster, spec):
    """
    Apply a ToneSpec to a raster in place. Alpha is untouched.

    Order per pixel: highlight/shadow boost, +whites-blacks, dehaze,
    saturation, vibrance.
    """
    if not isinstance(spec, ToneSpec):
        spec = ToneSpec(**dict(spec))
    if spec.is_default():
        return raster

    rgb = raster.rgb.astype(np.float64)
    lum = luma(rgb)[..., np.newaxis]

    if spec.highlights != 0:
        rgb = _clamp(rgb + spec.highlights * highlight_factor(lum))
    if spec.shadows != 0:
        rgb = _clamp(rgb + spec.shadows * shadow_factor(lum))

    level = spec.whites - spec.blacks
    if level != 0:
        rgb = _clamp(rgb + level)

    if spec.dehaze != 0:
        rgb = apply_dehaze(rgb, spec.dehaze)
    if spec.saturation != 0:
        rgb = apply_saturation(rgb, spec.saturation)
    if spec.vibrance != 0:
        rgb = apply_vibrance(rgb, spec.vibrance)

    raster.rgb[...] = np.rint(rgb).astype(np.uint8)
    return raster
