"""Tests for the effect parameter model."""

import pytest

from pixel_adjust.processing.params import (
    DEFAULT_PARAMS,
    CurvePoint,
    CurveSpec,
    EffectParams,
    GradingSpec,
    GradingZone,
    HslOffset,
    SelectiveColorSpec,
    ToneSpec,
    describe_changes,
    diff_params,
    format_value,
)


class TestDefaults:
    """Tests for is_default."""

    def test_fresh_params_are_default(self):
        assert EffectParams().is_default()
        assert DEFAULT_PARAMS == EffectParams()

    @pytest.mark.parametrize("changes", [
        {"blur": 1},
        {"bg_threshold_black": 3},
        {"tone": ToneSpec(dehaze=5)},
        {"selective_color": SelectiveColorSpec.from_mapping({"blue": {"l": 0.1}})},
        {"curves": CurveSpec(green=[(0, 0), (100, 140), (255, 255)])},
        {"grading": GradingSpec(tint=-0.2)},
    ])
    def test_any_change_is_not_default(self, changes):
        assert not DEFAULT_PARAMS.replace(**changes).is_default()

    def test_identity_curve_with_extra_points_is_default(self):
        spec = CurveSpec(master=[(0, 0), (64, 64), (255, 255)])
        assert spec.is_default()

    def test_unsaturated_grading_is_default(self):
        spec = GradingSpec(shadows=GradingZone(h=200, s=0.0, l=0.3), blending=0.9, balance=0.4)
        assert spec.is_default()


class TestSelectiveColorSpec:
    """Canonical storage for selective color offsets."""

    def test_cyan_alias_equals_aqua(self):
        assert SelectiveColorSpec.from_mapping({"cyan": {"s": 10}}) == \
            SelectiveColorSpec.from_mapping({"aqua": {"s": 10}})

    def test_zero_offsets_dropped(self):
        spec = SelectiveColorSpec.from_mapping({"red": {"h": 0}, "green": {"h": 5}})
        assert [name for name, _ in spec.bands] == ["green"]
        assert spec.get("red") == HslOffset()

    def test_order_does_not_matter(self):
        a = SelectiveColorSpec.from_mapping({"blue": (1, 0, 0), "red": (2, 0, 0)})
        b = SelectiveColorSpec.from_mapping({"red": (2, 0, 0), "blue": (1, 0, 0)})
        assert a == b

    def test_unknown_band(self):
        with pytest.raises(ValueError, match="Unknown hue band"):
            SelectiveColorSpec.from_mapping({"teal": {"h": 1}})


class TestFromDict:
    """Tests for EffectParams.from_dict."""

    def test_camel_case_keys(self):
        params = EffectParams.from_dict({
            "bgThreshold": 20,
            "bgThresholdBlack": 4,
            "hslAdjustments": {"cyan": {"s": -10}},
            "colorGrading": {"temperature": 0.3, "midtones": {"h": 30, "s": 0.2, "l": 0.5}},
            "highlights": 10,
            "contrast": -5,
        })
        assert params.bg_threshold == 20.0
        assert params.bg_threshold_black == 4.0
        assert params.selective_color.get("aqua") == HslOffset(s=-10.0)
        assert params.grading.temperature == 0.3
        assert params.grading.midtones == GradingZone(30.0, 0.2, 0.5)
        assert params.tone.highlights == 10.0
        assert params.contrast == -5.0

    def test_nested_tone_and_curves(self):
        params = EffectParams.from_dict({
            "tone": {"shadows": 15},
            "curves": {"master": [{"x": 0, "y": 10}, {"x": 255, "y": 245}]},
        })
        assert params.tone == ToneSpec(shadows=15.0)
        assert params.curves.master == (CurvePoint(0.0, 10.0), CurvePoint(255.0, 245.0))
        assert params.curves.red == CurveSpec().red

    def test_empty_is_default(self):
        assert EffectParams.from_dict({}) == DEFAULT_PARAMS

    def test_unknown_key_raises(self):
        with pytest.raises(ValueError, match="vignette"):
            EffectParams.from_dict({"vignette": 3})


class TestDiff:
    """Tests for diff_params and history labels."""

    def test_no_changes(self):
        assert diff_params(DEFAULT_PARAMS, EffectParams()) == []

    def test_none_is_defaults(self):
        assert diff_params(None, EffectParams(blur=3)) == [("blur", 3)]

    def test_nested_fields_are_dotted(self):
        old = EffectParams(tone=ToneSpec(highlights=5))
        new = EffectParams(blur=3, tone=ToneSpec(highlights=20))
        assert diff_params(old, new) == [("blur", 3), ("tone.highlights", 20)]
        assert describe_changes(diff_params(old, new)) == "blur=3, tone.highlights=20"

    def test_selective_color_label(self):
        new = EffectParams(selective_color=SelectiveColorSpec.from_mapping({"red": {"h": 10}}))
        changes = diff_params(DEFAULT_PARAMS, new)
        assert changes == [("selective_color.red", HslOffset(h=10.0))]
        assert describe_changes(changes) == 'selective_color.red={"h":10,"s":0,"l":0}'

    def test_removed_band_reports_zero_offset(self):
        old = EffectParams(selective_color=SelectiveColorSpec.from_mapping({"green": {"s": 5}}))
        assert diff_params(old, DEFAULT_PARAMS) == [("selective_color.green", HslOffset())]

    def test_grading_zone_label(self):
        new = EffectParams(grading=GradingSpec(shadows=GradingZone(h=220, s=0.5)))
        assert describe_changes(diff_params(None, new)) == 'grading.shadows={"h":220,"s":0.5,"l":0}'

    def test_curve_label(self):
        new = EffectParams(curves=CurveSpec(red=[(0, 0), (128, 140), (255, 255)]))
        changes = diff_params(None, new)
        assert [name for name, _ in changes] == ["curves.red"]
        assert describe_changes(changes) == \
            'curves.red=[{"x":0,"y":0},{"x":128,"y":140},{"x":255,"y":255}]'

    @pytest.mark.parametrize("value, text", [
        (3.0, "3"), (0.25, "0.25"), (-12.0, "-12"), (7, "7"),
    ])
    def test_format_value(self, value, text):
        assert format_value(value) == text
