# Effect parameter model
"""
Typed, value-comparable parameter records for the pixel pipeline.

EffectParams is long-lived editor state: the editor builds a new instance on
every change (the records are frozen) and the pipeline only reads it. Equality
is by value, which is what the orchestrator's history diff relies on.
"""

from __future__ import annotations

import dataclasses
import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


# --- Hue bands ---

@dataclass(frozen=True)
class HueBand:
    """A named range on the hue circle, in degrees. start > end means it wraps past 0."""
    name: str
    start: float
    end: float

    @property
    def wraps(self) -> bool:
        return self.start > self.end

    def contains(self, deg: float) -> bool:
        if self.wraps:
            return deg >= self.start or deg <= self.end
        return self.start <= deg <= self.end

    @property
    def span(self) -> Tuple[float, float]:
        """(start, end) with end pushed past 360 for the wrapping band."""
        if self.wraps:
            return self.start, self.end + 360.0
        return self.start, self.end


# Contiguous, cover the whole circle; red is the only wrapping band.
# Lookup is first-match, so shared boundaries belong to the earlier band.
HUE_BANDS: Tuple[HueBand, ...] = (
    HueBand("red", 345.0, 15.0),
    HueBand("orange", 15.0, 45.0),
    HueBand("yellow", 45.0, 75.0),
    HueBand("green", 75.0, 165.0),
    HueBand("aqua", 165.0, 195.0),
    HueBand("blue", 195.0, 255.0),
    HueBand("purple", 255.0, 285.0),
    HueBand("magenta", 285.0, 345.0),
)

BAND_NAMES: Tuple[str, ...] = tuple(band.name for band in HUE_BANDS)
BAND_ALIASES = {"cyan": "aqua"}


def canonical_band_name(name: str) -> str:
    key = str(name).strip().lower()
    key = BAND_ALIASES.get(key, key)
    if key not in BAND_NAMES:
        raise ValueError(f"Unknown hue band '{name}'. Expected one of: {', '.join(BAND_NAMES)}")
    return key


# --- Selective color ---

@dataclass(frozen=True)
class HslOffset:
    """Per-band offsets: h in degrees, s and l as percent (or fraction when |v| <= 1)."""
    h: float = 0.0
    s: float = 0.0
    l: float = 0.0

    @classmethod
    def coerce(cls, value: Any) -> "HslOffset":
        if isinstance(value, HslOffset):
            return value
        if isinstance(value, Mapping):
            return cls(
                h=float(value.get("h", 0) or 0),
                s=float(value.get("s", 0) or 0),
                l=float(value.get("l", 0) or 0),
            )
        h, s, l = value
        return cls(float(h), float(s), float(l))

    def is_zero(self) -> bool:
        return self.h == 0 and self.s == 0 and self.l == 0


@dataclass(frozen=True)
class SelectiveColorSpec:
    """
    Mapping from band name to HslOffset.

    Stored canonically: aliases resolved, all-zero offsets dropped, sorted by
    band order. Two specs with the same effect therefore compare equal.
    """
    bands: Tuple[Tuple[str, HslOffset], ...] = ()

    def __post_init__(self):
        merged: Dict[str, HslOffset] = {}
        for name, offset in self.bands:
            merged[canonical_band_name(name)] = HslOffset.coerce(offset)
        canonical = tuple(
            (name, merged[name]) for name in BAND_NAMES
            if name in merged and not merged[name].is_zero()
        )
        object.__setattr__(self, "bands", canonical)

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> "SelectiveColorSpec":
        if not mapping:
            return cls()
        return cls(tuple((name, HslOffset.coerce(value)) for name, value in mapping.items()))

    def get(self, name: str) -> HslOffset:
        key = canonical_band_name(name)
        for band_name, offset in self.bands:
            if band_name == key:
                return offset
        return HslOffset()

    def as_dict(self) -> Dict[str, HslOffset]:
        return dict(self.bands)

    def is_default(self) -> bool:
        return not self.bands


# --- Tone zones ---

@dataclass(frozen=True)
class ToneSpec:
    """Signed tone sliders; 0 is a no-op for every field."""
    highlights: float = 0.0
    shadows: float = 0.0
    whites: float = 0.0
    blacks: float = 0.0
    vibrance: float = 0.0
    saturation: float = 0.0
    dehaze: float = 0.0

    def is_default(self) -> bool:
        return all(getattr(self, f.name) == 0 for f in dataclasses.fields(self))


# --- Curves ---

@dataclass(frozen=True)
class CurvePoint:
    x: float
    y: float

    @classmethod
    def coerce(cls, value: Any) -> "CurvePoint":
        if isinstance(value, CurvePoint):
            return value
        if isinstance(value, Mapping):
            return cls(float(value["x"]), float(value["y"]))
        x, y = value
        return cls(float(x), float(y))


IDENTITY_CURVE: Tuple[CurvePoint, ...] = (CurvePoint(0.0, 0.0), CurvePoint(255.0, 255.0))
CURVE_CHANNELS: Tuple[str, ...] = ("master", "red", "green", "blue")


def _coerce_points(points: Optional[Iterable[Any]]) -> Tuple[CurvePoint, ...]:
    if points is None:
        return IDENTITY_CURVE
    return tuple(CurvePoint.coerce(p) for p in points)


def is_identity_points(points: Iterable[CurvePoint]) -> bool:
    """True when the points describe the y = x line from (0, 0) to (255, 255)."""
    ordered = sorted(points, key=lambda p: p.x)
    if len(ordered) < 2:
        return False
    if (ordered[0].x, ordered[0].y) != (0, 0) or (ordered[-1].x, ordered[-1].y) != (255, 255):
        return False
    return all(p.x == p.y for p in ordered)


@dataclass(frozen=True)
class CurveSpec:
    """Control points per channel. Channel curves run first, then master."""
    master: Tuple[CurvePoint, ...] = IDENTITY_CURVE
    red: Tuple[CurvePoint, ...] = IDENTITY_CURVE
    green: Tuple[CurvePoint, ...] = IDENTITY_CURVE
    blue: Tuple[CurvePoint, ...] = IDENTITY_CURVE

    def __post_init__(self):
        for channel in CURVE_CHANNELS:
            object.__setattr__(self, channel, _coerce_points(getattr(self, channel)))

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> "CurveSpec":
        if not mapping:
            return cls()
        return cls(**{channel: mapping.get(channel) for channel in CURVE_CHANNELS})

    def is_default(self) -> bool:
        return all(is_identity_points(getattr(self, channel)) for channel in CURVE_CHANNELS)


# --- Color grading ---

@dataclass(frozen=True)
class GradingZone:
    h: float = 0.0   # degrees
    s: float = 0.0   # 0..1
    l: float = 0.0   # 0..1

    @classmethod
    def coerce(cls, value: Any) -> "GradingZone":
        if isinstance(value, GradingZone):
            return value
        if isinstance(value, Mapping):
            return cls(float(value.get("h", 0)), float(value.get("s", 0)), float(value.get("l", 0)))
        h, s, l = value
        return cls(float(h), float(s), float(l))


@dataclass(frozen=True)
class GradingSpec:
    shadows: GradingZone = field(default_factory=GradingZone)
    midtones: GradingZone = field(default_factory=GradingZone)
    highlights: GradingZone = field(default_factory=GradingZone)
    blending: float = 0.5     # 0..1
    balance: float = 0.0      # -1..1
    temperature: float = 0.0  # -1..1
    tint: float = 0.0         # -1..1

    def __post_init__(self):
        for zone in ("shadows", "midtones", "highlights"):
            object.__setattr__(self, zone, GradingZone.coerce(getattr(self, zone)))

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> "GradingSpec":
        if not mapping:
            return cls()
        kwargs = {}
        for name in ("shadows", "midtones", "highlights"):
            if mapping.get(name) is not None:
                kwargs[name] = GradingZone.coerce(mapping[name])
        for name in ("blending", "balance", "temperature", "tint"):
            if mapping.get(name) is not None:
                kwargs[name] = float(mapping[name])
        return cls(**kwargs)

    def active_zones(self) -> List[Tuple[str, GradingZone]]:
        return [(name, getattr(self, name)) for name in ("shadows", "midtones", "highlights")
                if getattr(self, name).s > 0]

    def is_default(self) -> bool:
        """No visible effect: no saturated zone and no temperature/tint shift."""
        return not self.active_zones() and self.temperature == 0 and self.tint == 0


# --- Aggregate ---

SCALAR_FIELDS: Tuple[str, ...] = (
    "blur", "gaussian", "sharpen", "texture", "clarity",
    "bg_threshold", "bg_threshold_black", "brightness", "contrast",
)


@dataclass(frozen=True)
class EffectParams:
    """Everything one pipeline run needs besides the source raster."""
    blur: float = 0.0
    gaussian: float = 0.0
    sharpen: float = 0.0
    texture: float = 0.0
    clarity: float = 0.0
    bg_threshold: float = 0.0
    bg_threshold_black: float = 0.0
    brightness: float = 0.0
    contrast: float = 0.0
    tone: ToneSpec = field(default_factory=ToneSpec)
    selective_color: SelectiveColorSpec = field(default_factory=SelectiveColorSpec)
    curves: CurveSpec = field(default_factory=CurveSpec)
    grading: GradingSpec = field(default_factory=GradingSpec)

    def is_default(self) -> bool:
        """True when a pipeline run would be an exact no-op."""
        return (
            all(getattr(self, name) == 0 for name in SCALAR_FIELDS)
            and self.tone.is_default()
            and self.selective_color.is_default()
            and self.curves.is_default()
            and self.grading.is_default()
        )

    def replace(self, **changes) -> "EffectParams":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "EffectParams":
        """
        Build params from a flat option bag.

        Accepts snake_case or the camelCase keys used by the editor
        (bgThreshold, hslAdjustments, colorGrading, ...). Unknown keys raise
        ValueError rather than being silently ignored.
        """
        scalars: Dict[str, float] = {}
        tone: Dict[str, float] = {}
        selective = None
        curves = None
        grading = None

        for raw_key, value in options.items():
            key = _OPTION_ALIASES.get(raw_key, raw_key)
            if key in SCALAR_FIELDS:
                scalars[key] = float(value)
            elif key in _TONE_FIELDS:
                tone[key] = float(value)
            elif key == "selective_color":
                selective = value if isinstance(value, SelectiveColorSpec) else SelectiveColorSpec.from_mapping(value)
            elif key == "curves":
                curves = value if isinstance(value, CurveSpec) else CurveSpec.from_mapping(value)
            elif key == "grading":
                grading = value if isinstance(value, GradingSpec) else GradingSpec.from_mapping(value)
            elif key == "tone":
                tone.update({k: float(v) for k, v in dict(value).items()})
            else:
                raise ValueError(f"Unknown effect option '{raw_key}'")

        return cls(
            tone=ToneSpec(**tone),
            selective_color=selective or SelectiveColorSpec(),
            curves=curves or CurveSpec(),
            grading=grading or GradingSpec(),
            **scalars,
        )


_TONE_FIELDS = tuple(f.name for f in dataclasses.fields(ToneSpec))

_OPTION_ALIASES = {
    "bgThreshold": "bg_threshold",
    "bgThresholdBlack": "bg_threshold_black",
    "hslAdjustments": "selective_color",
    "hsl": "selective_color",
    "colorGrading": "grading",
}


DEFAULT_PARAMS = EffectParams()


# --- Diffing ---

def diff_params(old: Optional[EffectParams], new: EffectParams) -> List[Tuple[str, Any]]:
    """
    Field-by-field differences between two parameter sets.

    Nested records are expanded into dotted names (tone.highlights,
    selective_color.red, grading.shadows, curves.master). A missing old set
    is treated as the defaults.
    """
    if old is None:
        old = DEFAULT_PARAMS
    changes: List[Tuple[str, Any]] = []
    _diff_into(changes, "", old, new)
    return changes


def _diff_into(changes: List[Tuple[str, Any]], prefix: str, old: Any, new: Any) -> None:
    if isinstance(new, SelectiveColorSpec) and isinstance(old, SelectiveColorSpec):
        old_bands, new_bands = old.as_dict(), new.as_dict()
        for name in BAND_NAMES:
            before = old_bands.get(name, HslOffset())
            after = new_bands.get(name, HslOffset())
            if before != after:
                changes.append((f"{prefix}{name}", after))
        return
    if isinstance(new, (ToneSpec, GradingSpec, EffectParams, CurveSpec)) and type(old) is type(new):
        for f in dataclasses.fields(new):
            _diff_into(changes, f"{prefix}{f.name}.", getattr(old, f.name), getattr(new, f.name))
        return
    if old != new:
        changes.append((prefix.rstrip("."), new))


def format_value(value: Any) -> str:
    """Compact label text for a parameter value."""
    if isinstance(value, float):
        if math.isfinite(value) and value == int(value):
            return str(int(value))
        return f"{value:g}"
    if dataclasses.is_dataclass(value):
        return json.dumps(_plain(dataclasses.asdict(value)), separators=(",", ":"))
    if isinstance(value, tuple):
        return json.dumps(_plain([dataclasses.asdict(v) if dataclasses.is_dataclass(v) else v for v in value]),
                          separators=(",", ":"))
    return str(value)


def _plain(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, float) and math.isfinite(value) and value == int(value):
        return int(value)
    return value


def describe_changes(changes: List[Tuple[str, Any]]) -> str:
    """History label for a list of changes: 'blur=3, tone.highlights=20'."""
    return ", ".join(f"{name}={format_value(value)}" for name, value in changes)
