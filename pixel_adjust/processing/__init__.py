# Processing package initialization
from .raster import Raster
from .params import (
    EffectParams, DEFAULT_PARAMS, ToneSpec, CurvePoint, CurveSpec,
    HslOffset, SelectiveColorSpec, GradingZone, GradingSpec,
    HueBand, HUE_BANDS, diff_params, describe_changes,
)
from .adjustments import ImageAdjustments, apply_brightness_contrast
from .convolution import (
    apply_convolution, box_kernel, gaussian_kernel, sharpen_kernel,
    texture_kernel, clarity_kernel, cap_box_size, cap_gaussian_radius, sharpen_passes,
)
from .curves import build_lut, build_curve_luts, apply_curves, normalize_points, is_identity_curve
from .selective_color import apply_selective_color, find_band, shift_hue_within_band
from .tone_zones import apply_tone_zones
from .grading import apply_grading, shadow_weight, midtone_weight, highlight_weight
from .threshold import threshold_white, threshold_black
from .histogram import Histogram, compute_histogram
from .masking import apply_blur_with_mask, apply_alpha_mask, color_key_alpha_map, apply_color_key
from .pipeline import PixelPipeline, PipelineStage, PipelineResult, run_pipeline
