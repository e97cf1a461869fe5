# Tone curves: monotone cubic LUTs
"""
Builds 256-entry lookup tables from sparse control points and applies them.

Interpolation is a monotone cubic Hermite spline (Fritsch-Carlson style
tangent limiting): interior tangents are zeroed at local extrema so the curve
never overshoots between control points.
"""

import math

import cv2
import numpy as np

from ..utils.errors import InvalidCurveSpec
from ..utils.logger import get_logger
from .params import CURVE_CHANNELS, CurvePoint, CurveSpec, is_identity_points

logger = get_logger(__name__)

IDENTITY_LUT = np.arange(256, dtype=np.uint8)
IDENTITY_LUT.flags.writeable = False


def normalize_points(points):
    """
    Sort, clamp and complete a list of control points.

    Points are clamped to 0..255 and sorted by x. When several points share an
    x the last one given wins. Missing endpoints at x=0 and x=255 are
    synthesized with the y of their nearest neighbour.

    Args:
        points: Iterable of CurvePoint, (x, y) pairs or {"x", "y"} mappings.

    Returns:
        (xs, ys) float64 arrays with strictly increasing xs, starting at 0 and
        ending at 255.

    Raises:
        InvalidCurveSpec: fewer than two points or non-finite coordinates.
    """
    try:
        coerced = [CurvePoint.coerce(p) for p in (points or ())]
    except (TypeError, ValueError, KeyError) as e:
        raise InvalidCurveSpec(f"Malformed curve points: {e}", points=points, original_error=e) from e

    if len(coerced) < 2:
        raise InvalidCurveSpec(f"A curve needs at least 2 points, got {len(coerced)}", points=points)
    for p in coerced:
        if not (math.isfinite(p.x) and math.isfinite(p.y)):
            raise InvalidCurveSpec(f"Non-finite curve point ({p.x}, {p.y})", points=points)

    by_x = {}
    for p in coerced:
        x = min(255.0, max(0.0, p.x))
        by_x[x] = min(255.0, max(0.0, p.y))

    xs = sorted(by_x)
    ys = [by_x[x] for x in xs]

    if xs[0] > 0:
        xs.insert(0, 0.0)
        ys.insert(0, ys[0])
    if xs[-1] < 255:
        xs.append(255.0)
        ys.append(ys[-1])

    return np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)


def _tangents(xs, ys):
    dxs = np.diff(xs)
    ms = np.diff(ys) / dxs

    c1s = np.empty(len(xs), dtype=np.float64)
    c1s[0] = ms[0]
    c1s[-1] = ms[-1]
    for i in range(len(ms) - 1):
        m, m_next = ms[i], ms[i + 1]
        if m * m_next <= 0:
            # opposite signs (or flat): local extremum, no overshoot
            c1s[i + 1] = 0.0
        else:
            dx, dx_next = dxs[i], dxs[i + 1]
            common = dx + dx_next
            c1s[i + 1] = 3.0 * common / ((common + dx_next) / m + (common + dx) / m_next)
    return c1s


def build_lut(points):
    """
    Build a 256-entry uint8 LUT from curve control points.

    Invalid point sets are recovered locally: a warning is logged and the
    identity LUT is returned.
    """
    try:
        xs, ys = normalize_points(points)
    except InvalidCurveSpec as e:
        logger.warning("Invalid curve, using identity: %s", e)
        return IDENTITY_LUT.copy()

    c1s = _tangents(xs, ys)
    lut = np.zeros(256, dtype=np.float64)

    for i in range(len(xs) - 1):
        x_start, x_end = xs[i], xs[i + 1]
        dx = x_end - x_start
        # integer inputs covered by this segment (shared endpoints are
        # recomputed by the next segment with the same value)
        x = np.arange(math.ceil(x_start), math.floor(x_end) + 1, dtype=np.float64)
        if x.size == 0:
            continue
        t = (x - x_start) / dx
        t2 = t * t
        t3 = t2 * t

        h00 = 2 * t3 - 3 * t2 + 1
        h10 = t3 - 2 * t2 + t
        h01 = -2 * t3 + 3 * t2
        h11 = t3 - t2

        y = h00 * ys[i] + h10 * dx * c1s[i] + h01 * ys[i + 1] + h11 * dx * c1s[i + 1]
        lut[x.astype(np.intp)] = y

    return np.clip(np.floor(lut + 0.5), 0, 255).astype(np.uint8)


def is_identity_curve(points):
    """True when points describe the untouched diagonal."""
    try:
        return is_identity_points([CurvePoint.coerce(p) for p in points])
    except (TypeError, ValueError, KeyError):
        return False


def build_curve_luts(spec):
    """Dict of channel name -> LUT for a CurveSpec."""
    return {channel: build_lut(getattr(spec, channel)) for channel in CURVE_CHANNELS}


def compose_luts(channel_lut, master_lut):
    """Single LUT equivalent to channel_lut followed by master_lut."""
    return master_lut[channel_lut]


def apply_curves(raster, spec):
    """
    Apply channel curves then the master curve to R, G and B in place.

    Alpha is untouched.
    """
    if not isinstance(spec, CurveSpec):
        spec = CurveSpec.from_mapping(spec)
    if spec.is_default():
        return raster

    luts = build_curve_luts(spec)
    master = luts["master"]
    for index, channel in enumerate(("red", "green", "blue")):
        lut = compose_luts(luts[channel], master)
        plane = np.ascontiguousarray(raster.pixels[..., index])
        raster.pixels[..., index] = cv2.LUT(plane, lut)
    return raster
