# Hue-band scoped HSL correction
"""
Selective color: per-band hue/saturation/lightness offsets.

Every pixel is classified into exactly one of the eight HUE_BANDS. Pixels in
a band with an active offset are shifted in HSL space and written back; all
other pixels are left byte-identical. Hue shifts are clamped to the band's own
range so a shifted color keeps its identity (a red never becomes an orange).
"""

import numpy as np

from ..utils.logger import get_logger
from .color_space import hsl_to_rgb_array, rgb_to_hsl_array
from .params import HUE_BANDS, HslOffset, SelectiveColorSpec, canonical_band_name

logger = get_logger(__name__)

_BAND_BY_NAME = {band.name: band for band in HUE_BANDS}


def find_band(deg):
    """First HueBand containing deg (degrees, 0..360). Shared boundaries go to the earlier band."""
    deg = deg % 360.0
    for band in HUE_BANDS:
        if band.contains(deg):
            return band
    # bands cover the whole circle
    raise ValueError(f"No hue band contains {deg}")


def shift_hue_within_band(deg, band, offset):
    """
    Shift a hue by offset degrees without leaving band.

    The hue is moved into the band's numeric space (wrapping bands extend past
    360), shifted, clamped to [start, end] and brought back to 0..360.
    Works on scalars and numpy arrays alike.
    """
    start, end = band.span
    deg_norm = np.where(deg < start, deg + 360.0, deg)
    shifted = np.clip(deg_norm + offset, start, end)
    result = np.mod(shifted, 360.0)
    if np.ndim(result) == 0:
        return float(result)
    return result


def percent_multiplier(value):
    """
    Multiplier for an s/l offset.

    Fractions (|v| <= 1) are read as percent / 100, larger magnitudes as a
    percentage already: 0.2 and 20 both mean +20%, i.e. a factor of 1.2.
    """
    value = float(value)
    percent = value * 100.0 if abs(value) <= 1 else value
    return 1.0 + percent / 100.0


def band_indices(hue_deg):
    """Index into HUE_BANDS for every hue in an array, first match wins."""
    indices = np.full(np.shape(hue_deg), -1, dtype=np.int8)
    for index, band in enumerate(HUE_BANDS):
        if band.wraps:
            inside = (hue_deg >= band.start) | (hue_deg <= band.end)
        else:
            inside = (hue_deg >= band.start) & (hue_deg <= band.end)
        indices[(indices < 0) & inside] = index
    return indices


def apply_selective_color(raster, spec):
    """
    Apply band offsets to a raster in place.

    Args:
        raster: Raster to modify.
        spec: SelectiveColorSpec, or a mapping of band name -> offset.

    Returns:
        The same raster.
    """
    if not isinstance(spec, SelectiveColorSpec):
        spec = SelectiveColorSpec.from_mapping(spec)
    if spec.is_default():
        return raster

    rgb = raster.rgb
    h, s, l = rgb_to_hsl_array(rgb)
    deg = np.mod(h * 360.0 + 360.0, 360.0)
    indices = band_indices(deg)

    touched = np.zeros(indices.shape, dtype=bool)
    for name, offset in spec.bands:
        band = _BAND_BY_NAME[canonical_band_name(name)]
        offset = HslOffset.coerce(offset)
        mask = indices == HUE_BANDS.index(band)
        if not mask.any():
            continue
        logger.debug("Selective color on %s: %d pixels, offset %s", band.name, int(mask.sum()), offset)

        if offset.h != 0:
            h[mask] = shift_hue_within_band(deg[mask], band, offset.h) / 360.0
        if offset.s != 0:
            s[mask] = np.clip(s[mask] * percent_multiplier(offset.s), 0.0, 1.0)
        if offset.l != 0:
            l[mask] = np.clip(l[mask] * percent_multiplier(offset.l), 0.0, 1.0)
        touched |= mask

    if touched.any():
        converted = hsl_to_rgb_array(h[touched], s[touched], l[touched])
        rgb[touched] = np.clip(converted, 0, 255).astype(np.uint8)
    return raster
