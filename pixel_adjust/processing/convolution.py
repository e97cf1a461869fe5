# Square-kernel convolution and kernel generators
"""
Spatial convolution over RGBA rasters.

Samples that fall outside the raster are skipped, i.e. they contribute zero
weight; they are not clamped to the edge. Border pixels of a blur therefore
darken and lose alpha.

Cost is O(w * h * k^2), so callers cap sizes with the cap_* helpers before
building a kernel.
"""

import math

import cv2
import numpy as np

from ..config import settings
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Fixed unsharp kernel; sharpen/texture/clarity rescale its weights
UNSHARP_KERNEL = (0.0, -1.0, 0.0,
                  -1.0, 5.0, -1.0,
                  0.0, -1.0, 0.0)

_ALPHA_ZERO_EPS = 1e-9


def _as_kernel_matrix(kernel, k):
    if k < 1 or k % 2 == 0:
        raise ValueError(f"Kernel size must be an odd integer >= 1, got {k}")
    values = np.asarray(kernel, dtype=np.float64).ravel()
    if values.size != k * k:
        raise ValueError(f"Kernel of size {k} needs {k * k} weights, got {values.size}")
    return values.reshape(k, k)


def apply_convolution(raster, kernel, k):
    """
    Convolve a raster in place with a k x k kernel.

    For every pixel the weighted sum kernel[ky*k+kx] * sample(x+kx-k//2, y+ky-k//2)
    is taken independently for R, G, B and A. Each result is clamped to
    [0, 255] and rounded; alpha falls back to the source alpha wherever the
    weighted alpha sum is zero.

    Args:
        raster: Raster to modify.
        kernel: k*k weights, row-major (flat sequence or k x k array).
        k: Odd kernel side.

    Returns:
        The same raster, for chaining.
    """
    matrix = _as_kernel_matrix(kernel, k)
    if raster.width == 0 or raster.height == 0:
        return raster

    logger.debug("Convolving %dx%d raster with %dx%d kernel", raster.width, raster.height, k, k)
    src = raster.pixels.astype(np.float64)
    # filter2D correlates (no kernel flip), anchored at the centre; constant
    # zero border == out-of-bounds samples skipped.
    out = cv2.filter2D(src, cv2.CV_64F, matrix, borderType=cv2.BORDER_CONSTANT)

    alpha = out[..., 3]
    alpha_is_zero = np.abs(alpha) < _ALPHA_ZERO_EPS
    out[..., 3] = np.where(alpha_is_zero, src[..., 3], alpha)

    np.clip(out, 0.0, 255.0, out=out)
    raster.pixels[...] = np.rint(out).astype(np.uint8)
    return raster


# --- Kernel generators ---

def box_kernel(size):
    """Uniform size x size kernel, every weight 1/size^2."""
    size = int(size)
    if size < 1:
        raise ValueError(f"Box kernel size must be >= 1, got {size}")
    count = size * size
    return np.full(count, 1.0 / count, dtype=np.float64)


def gaussian_kernel(radius):
    """
    Normalised 2-D Gaussian with side 2*radius+1 and sigma = radius/2.

    A radius of 0 gives the 1x1 identity kernel.
    """
    r = int(radius)
    if r < 0:
        raise ValueError(f"Gaussian radius must be >= 0, got {radius}")
    if r == 0:
        return np.ones(1, dtype=np.float64)
    sigma = r / 2.0
    two_sigma_sq = 2.0 * sigma * sigma
    coords = np.arange(-r, r + 1, dtype=np.float64)
    yy, xx = np.meshgrid(coords, coords, indexing="ij")
    kernel = np.exp(-(xx * xx + yy * yy) / two_sigma_sq)
    return (kernel / kernel.sum()).ravel()


def _unsharp(center, edge):
    return np.array([
        0.0, edge, 0.0,
        edge, center, edge,
        0.0, edge, 0.0,
    ], dtype=np.float64)


def sharpen_kernel(amount):
    """Unsharp kernel with centre 1 + 4*amount and edges -amount (amount 1 == UNSHARP_KERNEL)."""
    amount = float(amount)
    return _unsharp(1.0 + 4.0 * amount, -amount)


def detail_kernel(amount, scale):
    """Unsharp kernel with centre 5 + amount*scale; edges stay at -1."""
    return _unsharp(5.0 + float(amount) * float(scale), -1.0)


def texture_kernel(amount):
    return detail_kernel(amount, settings.PIPELINE_DEFAULTS["texture_scale"])


def clarity_kernel(amount):
    return detail_kernel(amount, settings.PIPELINE_DEFAULTS["clarity_scale"])


# --- Size caps ---

def cap_box_size(blur, max_size=None):
    """
    Box kernel side for a blur slider value: rounded, capped, forced odd.

    Returns 0 when no blur should be applied.
    """
    if max_size is None:
        max_size = settings.PIPELINE_DEFAULTS["max_box_blur_size"]
    size = min(int(math.floor(blur + 0.5)), int(max_size))
    if size <= 0:
        return 0
    if size % 2 == 0:
        size += 1
    if size > max_size:
        size -= 2
    return max(size, 1)


def cap_gaussian_radius(gaussian, max_radius=None):
    if max_radius is None:
        max_radius = settings.PIPELINE_DEFAULTS["max_gaussian_radius"]
    return max(0, min(int(math.floor(gaussian + 0.5)), int(max_radius)))


def sharpen_passes(sharpen, max_passes=None):
    """Number of sharpen passes for a slider value (ceil, capped)."""
    if max_passes is None:
        max_passes = settings.PIPELINE_DEFAULTS["max_sharpen_passes"]
    if sharpen <= 0:
        return 0
    return min(int(math.ceil(sharpen)), int(max_passes))
