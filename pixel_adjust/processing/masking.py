# Mask-driven raster operations
"""
Operations that combine a raster with a second, same-sized raster or derive
an alpha map from colour distance.

Masks are RGBA rasters; only their red channel is read (a grayscale mask has
R == G == B). Combining rasters of different sizes raises DimensionMismatch
instead of resampling.
"""

import math

import cv2
import numpy as np

from ..utils.logger import get_logger
from .raster import Raster

logger = get_logger(__name__)

MAX_RGB_DISTANCE = math.sqrt(3 * 255.0 * 255.0)


def _store_bytes(values):
    # byte-clamped store: clamp, round half to even
    return np.rint(np.clip(values, 0, 255)).astype(np.uint8)


def separable_gaussian_kernel(radius):
    """1-D Gaussian of side max(1, floor(radius)) * 2 + 1 with sigma = radius / 3, normalised."""
    size = max(1, int(math.floor(radius))) * 2 + 1
    sigma = radius / 3.0
    half = size // 2
    x = np.arange(-half, half + 1, dtype=np.float64)
    kernel = np.exp(-(x * x) / (2.0 * sigma * sigma))
    return kernel / kernel.sum()


def edge_clamped_gaussian_blur(raster: Raster, radius: float) -> Raster:
    """
    Gaussian blur with edge-clamped sampling, returned as a new raster.

    Horizontal then vertical pass; the intermediate result is stored as bytes
    the same way the final one is.
    """
    if radius <= 0:
        return raster.clone()
    kernel = separable_gaussian_kernel(radius)
    src = raster.pixels.astype(np.float64)

    horizontal = cv2.filter2D(src, cv2.CV_64F, kernel.reshape(1, -1), borderType=cv2.BORDER_REPLICATE)
    horizontal = _store_bytes(horizontal).astype(np.float64)
    vertical = cv2.filter2D(horizontal, cv2.CV_64F, kernel.reshape(-1, 1), borderType=cv2.BORDER_REPLICATE)
    return Raster(_store_bytes(vertical))


def apply_blur_with_mask(raster: Raster, mask: Raster, blur_amount: float, feather: float = 0) -> Raster:
    """
    Blend a blurred copy of raster over itself, weighted by mask.

    Args:
        raster: Source raster (not modified).
        mask: Same-sized raster; R / 255 is the blur weight per pixel.
        blur_amount: Gaussian radius for the blurred copy.
        feather: When > 1, the mask itself is blurred by this radius first.

    Returns:
        New raster; alpha is copied from the source.

    Raises:
        DimensionMismatch: mask and raster sizes differ.
    """
    raster.ensure_same_size(mask)
    logger.debug("Masked blur: radius %s, feather %s", blur_amount, feather)

    blurred = edge_clamped_gaussian_blur(raster, blur_amount)
    if feather > 1:
        mask = edge_clamped_gaussian_blur(mask, feather)

    weight = (mask.pixels[..., 0].astype(np.float64) / 255.0)[..., np.newaxis]
    src_rgb = raster.rgb.astype(np.float64)
    blur_rgb = blurred.rgb.astype(np.float64)

    result = raster.clone()
    result.rgb[...] = _store_bytes(src_rgb * (1.0 - weight) + blur_rgb * weight)
    return result


def apply_alpha_mask(raster: Raster, mask: Raster) -> Raster:
    """New raster whose alpha is the mask's red channel."""
    raster.ensure_same_size(mask)
    result = raster.clone()
    result.alpha[...] = mask.pixels[..., 0]
    return result


def parse_hex_color(color):
    """'#rrggbb' (or 'rrggbb') -> (r, g, b). Tuples pass through."""
    if isinstance(color, str):
        value = color.lstrip("#")
        if len(value) != 6:
            raise ValueError(f"Expected a #rrggbb colour, got '{color}'")
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    r, g, b = color
    return int(r), int(g), int(b)


def color_key_alpha_map(raster: Raster, target, tolerance: float, invert: bool = False, feather: float = 0) -> np.ndarray:
    """
    Alpha map that removes colours near target.

    Distance to target is normalised by the largest possible RGB distance and
    compared with tolerance / 100. Without feathering the map is binary
    (0 within tolerance, 255 outside); with feather it ramps linearly over
    tolerance +/- feather / 100.

    Returns:
        uint8 array (height, width).
    """
    target_rgb = np.asarray(parse_hex_color(target), dtype=np.float64)
    diff = raster.rgb.astype(np.float64) - target_rgb
    distance = np.sqrt(np.sum(diff * diff, axis=-1)) / MAX_RGB_DISTANCE
    threshold = tolerance / 100.0

    if feather == 0:
        alpha = np.where(distance <= threshold, 0.0, 1.0)
    else:
        feather_range = feather / 100.0
        offset = distance - threshold
        alpha = np.clip((offset + feather_range) / (feather_range * 2.0), 0.0, 1.0)

    if invert:
        alpha = 1.0 - alpha
    return np.floor(alpha * 255.0 + 0.5).astype(np.uint8)


def apply_color_key(raster: Raster, target, tolerance: float, invert: bool = False, feather: float = 0) -> Raster:
    """New raster with alpha replaced by color_key_alpha_map."""
    result = raster.clone()
    result.alpha[...] = color_key_alpha_map(raster, target, tolerance, invert, feather)
    return result
