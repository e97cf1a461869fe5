# Three-zone color grading
import numpy as np

from ..config import settings
from ..utils.logger import get_logger
from .color_space import hsl_to_rgb, luma
from .params import GradingSpec, GradingZone

logger = get_logger(__name__)

ZONE_NAMES = ("shadows", "midtones", "highlights")


def shadow_weight(lum, blending=1.0):
    """max(0, 1 - 2L) * blending, L in 0..1."""
    return np.maximum(0.0, 1.0 - 2.0 * np.asarray(lum, dtype=np.float64)) * blending


def highlight_weight(lum, blending=1.0):
    """max(0, 2(L - 0.5)) * blending, L in 0..1."""
    return np.maximum(0.0, 2.0 * (np.asarray(lum, dtype=np.float64) - 0.5)) * blending


def midtone_weight(lum, blending=1.0):
    """(1 - 2|L - 0.5|) * blending; peaks at L = 0.5."""
    return (1.0 - 2.0 * np.abs(np.asarray(lum, dtype=np.float64) - 0.5)) * blending


def zone_tint(zone):
    """
    Signed RGB tint of a zone: its hue and saturation at lightness 0.5, minus mid-gray.

    The zone's own l is not part of the tint colour.
    """
    zone = GradingZone.coerce(zone)
    r, g, b = hsl_to_rgb((zone.h % 360.0) / 360.0, min(1.0, max(0.0, zone.s)), 0.5)
    return np.array([r - 128.0, g - 128.0, b - 128.0], dtype=np.float64)


def zone_weights(lum, spec):
    """
    Per-zone weight arrays for a GradingSpec.

    balance tilts the shadow/highlight split: shadows x(1 - balance),
    highlights x(1 + balance). Midtones are unaffected.
    """
    blending = spec.blending
    return {
        "shadows": shadow_weight(lum, blending) * (1.0 - spec.balance),
        "midtones": midtone_weight(lum, blending),
        "highlights": highlight_weight(lum, blending) * (1.0 + spec.balance),
    }


def apply_grading(raster, spec, intensity=None):
    """
    Apply zone tints and the temperature/tint shift to a raster in place.

    Args:
        raster: Raster to modify (alpha untouched).
        spec: GradingSpec or mapping.
        intensity: Tint multiplier, defaults to PIPELINE_DEFAULTS["grading_intensity"].
    """
    if not isinstance(spec, GradingSpec):
        spec = GradingSpec.from_mapping(spec)
    if spec.is_default():
        return raster
    if intensity is None:
        intensity = settings.PIPELINE_DEFAULTS["grading_intensity"]

    rgb = raster.rgb.astype(np.float64)
    zones = spec.active_zones()

    if zones:
        lum = (luma(rgb) / 255.0)[..., np.newaxis]
        weights = zone_weights(lum, spec)
        # Zone tints add up before a single clamp
        offset = np.zeros_like(rgb)
        for name, zone in zones:
            tint = zone_tint(zone)
            logger.debug("Grading %s with tint %s", name, tint)
            offset += tint * weights[name] * intensity
        rgb = np.clip(rgb + offset, 0.0, 255.0)

    if spec.temperature != 0 or spec.tint != 0:
        temp_shift = spec.temperature * settings.PIPELINE_DEFAULTS["temperature_scale"]
        tint_shift = spec.tint * settings.PIPELINE_DEFAULTS["tint_scale"]
        rgb = np.clip(rgb + np.array([temp_shift, tint_shift, -temp_shift]), 0.0, 255.0)

    raster.rgb[...] = np.rint(rgb).astype(np.uint8)
    return raster
