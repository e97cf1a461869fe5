# RGB <-> HSL conversion
"""
RGB <-> HSL conversion primitives.

Scalar functions work on single 8-bit triples; the *_array variants apply the
same formulas element-wise to numpy arrays so whole rasters can be converted
at once. Hue is fractional in [0, 1) (multiply by 360 for degrees); saturation
and lightness are in [0, 1].
"""

import math

import numpy as np

LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def rgb_to_hsl(r, g, b):
    """Convert 8-bit RGB to (h, s, l) with every component in [0, 1]."""
    r /= 255.0
    g /= 255.0
    b /= 255.0

    mx = max(r, g, b)
    mn = min(r, g, b)
    h = 0.0
    s = 0.0
    l = (mx + mn) / 2.0

    if mx != mn:
        d = mx - mn
        s = d / (2.0 - mx - mn) if l > 0.5 else d / (mx + mn)
        if mx == r:
            h = (g - b) / d + (6.0 if g < b else 0.0)
        elif mx == g:
            h = (b - r) / d + 2.0
        else:
            h = (r - g) / d + 4.0
        h /= 6.0

    return h, s, l


def _hue_to_rgb(p, q, t):
    if t < 0:
        t += 1.0
    if t > 1:
        t -= 1.0
    if t < 1.0 / 6.0:
        return p + (q - p) * 6.0 * t
    if t < 1.0 / 2.0:
        return q
    if t < 2.0 / 3.0:
        return p + (q - p) * (2.0 / 3.0 - t) * 6.0
    return p


def hsl_to_rgb(h, s, l):
    """Convert (h, s, l) in [0, 1] to rounded 8-bit (r, g, b)."""
    if s == 0:
        r = g = b = l
    else:
        q = l * (1.0 + s) if l < 0.5 else l + s - l * s
        p = 2.0 * l - q
        r = _hue_to_rgb(p, q, h + 1.0 / 3.0)
        g = _hue_to_rgb(p, q, h)
        b = _hue_to_rgb(p, q, h - 1.0 / 3.0)

    return _round_half_up(r * 255.0), _round_half_up(g * 255.0), _round_half_up(b * 255.0)


# --- Vectorised versions ---

def rgb_to_hsl_array(rgb):
    """
    Element-wise rgb_to_hsl.

    Args:
        rgb: array (..., 3) of 0-255 values (any numeric dtype).

    Returns:
        Tuple of float64 arrays (h, s, l) with the leading shape of rgb.
    """
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    mx = np.max(rgb, axis=-1)
    mn = np.min(rgb, axis=-1)
    l = (mx + mn) / 2.0
    d = mx - mn
    chromatic = d != 0

    # Denominators are only used where chromatic; keep them non-zero elsewhere
    safe_d = np.where(chromatic, d, 1.0)
    s_denom = np.where(l > 0.5, 2.0 - mx - mn, mx + mn)
    s_denom = np.where(chromatic, s_denom, 1.0)
    s = np.where(chromatic, d / s_denom, 0.0)

    # Same precedence as the scalar version: red wins ties, then green
    h_r = (g - b) / safe_d + np.where(g < b, 6.0, 0.0)
    h_g = (b - r) / safe_d + 2.0
    h_b = (r - g) / safe_d + 4.0
    h = np.where(mx == r, h_r, np.where(mx == g, h_g, h_b)) / 6.0
    h = np.where(chromatic, h, 0.0)

    return h, s, l


def _hue_to_rgb_array(p, q, t):
    t = np.where(t < 0, t + 1.0, t)
    t = np.where(t > 1, t - 1.0, t)
    return np.select(
        [t < 1.0 / 6.0, t < 0.5, t < 2.0 / 3.0],
        [p + (q - p) * 6.0 * t, q, p + (q - p) * (2.0 / 3.0 - t) * 6.0],
        default=p,
    )


def hsl_to_rgb_array(h, s, l):
    """
    Element-wise hsl_to_rgb.

    Returns:
        float64 array (..., 3) of rounded 0-255 values.
    """
    h = np.asarray(h, dtype=np.float64)
    s = np.asarray(s, dtype=np.float64)
    l = np.asarray(l, dtype=np.float64)

    q = np.where(l < 0.5, l * (1.0 + s), l + s - l * s)
    p = 2.0 * l - q

    r = _hue_to_rgb_array(p, q, h + 1.0 / 3.0)
    g = _hue_to_rgb_array(p, q, h)
    b = _hue_to_rgb_array(p, q, h - 1.0 / 3.0)

    achromatic = s == 0
    r = np.where(achromatic, l, r)
    g = np.where(achromatic, l, g)
    b = np.where(achromatic, l, b)

    rgb = np.stack([r, g, b], axis=-1) * 255.0
    return np.floor(rgb + 0.5)


def luma(rgb):
    """Perceptual brightness 0.299 R + 0.587 G + 0.114 B on the input's scale."""
    rgb = np.asarray(rgb, dtype=np.float64)
    wr, wg, wb = LUMA_WEIGHTS
    return wr * rgb[..., 0] + wg * rgb[..., 1] + wb * rgb[..., 2]
