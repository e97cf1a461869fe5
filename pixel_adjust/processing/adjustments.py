# Basic brightness/contrast adjustment
import numpy as np

from ..utils.logger import get_logger

logger = get_logger(__name__)

MID_GRAY = 128.0


class ImageAdjustments:
    """Basic per-channel adjustments on RGBA rasters (alpha untouched)."""

    @staticmethod
    def contrast_factor(contrast):
        """Slider value -> multiplier: 0 keeps, +100 doubles, -100 flattens to gray."""
        return float(contrast) / 100.0 + 1.0

    @staticmethod
    def adjust_brightness_contrast(rgb, brightness, contrast):
        """
        Brightness and contrast on a float RGB array.

        v' = v * c + 128 * (1 - c) + brightness, clamped to 0..255.
        """
        c = ImageAdjustments.contrast_factor(contrast)
        result = rgb * c + MID_GRAY * (1.0 - c) + float(brightness)
        return np.clip(result, 0.0, 255.0)


def apply_brightness_contrast(raster, brightness, contrast):
    """Apply brightness/contrast to a raster in place."""
    if brightness == 0 and contrast == 0:
        return raster
    logger.debug("Brightness %s, contrast %s", brightness, contrast)
    rgb = raster.rgb.astype(np.float64)
    rgb = ImageAdjustments.adjust_brightness_contrast(rgb, brightness, contrast)
    raster.rgb[...] = np.rint(rgb).astype(np.uint8)
    return raster
