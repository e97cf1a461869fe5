# Fixed-order pixel pipeline
"""
Composes the processing stages over one RGBA raster.

Stage order is fixed and not commutative:

    box blur -> gaussian blur -> sharpen -> texture -> clarity
    -> threshold white -> threshold black -> brightness/contrast
    -> tone zones -> curves -> selective color -> grading

A stage whose parameters are all at their no-op value is not planned at all,
so moving a slider away and back reproduces the input exactly.
"""

from typing import Dict, Any, Optional, Callable, List
from dataclasses import dataclass, field
import time

from ..utils.logger import get_logger
from .adjustments import apply_brightness_contrast
from .convolution import (
    apply_convolution, box_kernel, cap_box_size, cap_gaussian_radius, clarity_kernel,
    gaussian_kernel, sharpen_kernel, sharpen_passes, texture_kernel,
)
from .curves import apply_curves
from .grading import apply_grading
from .params import DEFAULT_PARAMS, EffectParams
from .raster import Raster
from .selective_color import apply_selective_color
from .threshold import threshold_black, threshold_white, white_cutoff
from .tone_zones import apply_tone_zones

logger = get_logger(__name__)


@dataclass
class PipelineStage:
    """A planned stage of a pipeline run."""
    name: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PipelineResult:
    """Result of pipeline execution."""
    raster: Raster
    stages_executed: List[str]
    stage_times: Dict[str, float]
    total_time: float


class PixelPipeline:
    """
    Stateless runner for the adjustment stages.

    One instance can be shared; run() never touches the source raster and
    always returns a new one of identical size.
    """

    def plan(self, params: Optional[EffectParams] = None) -> List[PipelineStage]:
        """
        Stages that a run with these params will execute, in order.

        Args:
            params: Effect parameters (defaults when None).

        Returns:
            List of PipelineStage; empty for default params.
        """
        if params is None:
            params = DEFAULT_PARAMS
        if params.is_default():
            return []

        stages: List[PipelineStage] = []

        # Convolution
        size = cap_box_size(params.blur)
        if size > 1:
            stages.append(PipelineStage("box_blur", {"size": size}))
        radius = cap_gaussian_radius(params.gaussian)
        if radius > 0:
            stages.append(PipelineStage("gaussian_blur", {"radius": radius}))
        passes = sharpen_passes(params.sharpen)
        if passes > 0:
            stages.append(PipelineStage("sharpen", {"passes": passes, "amount": min(params.sharpen, 1.0)}))
        if params.texture != 0:
            stages.append(PipelineStage("texture", {"amount": params.texture}))
        if params.clarity != 0:
            stages.append(PipelineStage("clarity", {"amount": params.clarity}))

        # Alpha matting
        if params.bg_threshold > 0:
            stages.append(PipelineStage("threshold_white", {"cutoff": white_cutoff(params.bg_threshold)}))
        if params.bg_threshold_black > 0:
            stages.append(PipelineStage("threshold_black", {"cutoff": params.bg_threshold_black}))

        if params.brightness != 0 or params.contrast != 0:
            stages.append(PipelineStage("brightness_contrast", {
                "brightness": params.brightness,
                "contrast": params.contrast,
            }))

        if not params.tone.is_default():
            stages.append(PipelineStage("tone", {"spec": params.tone}))
        if not params.curves.is_default():
            stages.append(PipelineStage("curves", {"spec": params.curves}))
        if not params.selective_color.is_default():
            stages.append(PipelineStage("selective_color", {"spec": params.selective_color}))
        if not params.grading.is_default():
            stages.append(PipelineStage("grading", {"spec": params.grading}))

        return stages

    def run(self, source: Raster, params: Optional[EffectParams] = None) -> Raster:
        """Run the pipeline and return the processed clone of source."""
        return self.run_detailed(source, params).raster

    def run_detailed(
        self,
        source: Raster,
        params: Optional[EffectParams] = None,
        progress_callback: Callable[[str, float], None] = None,
    ) -> PipelineResult:
        """
        Run the pipeline, recording which stages ran and how long each took.

        Args:
            source: Input raster; never modified.
            params: Effect parameters (defaults when None).
            progress_callback: Optional callback(stage_name, percent).

        Returns:
            PipelineResult whose raster is a new buffer.
        """
        if params is None:
            params = DEFAULT_PARAMS

        total_start = time.perf_counter()
        raster = source.clone()
        stages = self.plan(params)

        if not stages:
            logger.debug("Default parameters, returning an unmodified copy")
            return PipelineResult(raster, [], {}, time.perf_counter() - total_start)

        stages_executed = []
        stage_times = {}
        for i, stage in enumerate(stages):
            if progress_callback:
                progress_callback(stage.name, (i / len(stages)) * 100)

            stage_start = time.perf_counter()
            self._execute_stage(stage, raster)
            stage_times[stage.name] = time.perf_counter() - stage_start
            stages_executed.append(stage.name)
            logger.debug("Stage %s took %.1f ms", stage.name, stage_times[stage.name] * 1000)

        if progress_callback:
            progress_callback("complete", 100)

        return PipelineResult(
            raster=raster,
            stages_executed=stages_executed,
            stage_times=stage_times,
            total_time=time.perf_counter() - total_start,
        )

    def _execute_stage(self, stage: PipelineStage, raster: Raster) -> None:
        p = stage.params
        if stage.name == "box_blur":
            apply_convolution(raster, box_kernel(p["size"]), p["size"])
        elif stage.name == "gaussian_blur":
            apply_convolution(raster, gaussian_kernel(p["radius"]), 2 * p["radius"] + 1)
        elif stage.name == "sharpen":
            kernel = sharpen_kernel(p["amount"])
            for _ in range(p["passes"]):
                apply_convolution(raster, kernel, 3)
        elif stage.name == "texture":
            apply_convolution(raster, texture_kernel(p["amount"]), 3)
        elif stage.name == "clarity":
            apply_convolution(raster, clarity_kernel(p["amount"]), 3)
        elif stage.name == "threshold_white":
            threshold_white(raster, p["cutoff"])
        elif stage.name == "threshold_black":
            threshold_black(raster, p["cutoff"])
        elif stage.name == "brightness_contrast":
            apply_brightness_contrast(raster, p["brightness"], p["contrast"])
        elif stage.name == "tone":
            apply_tone_zones(raster, p["spec"])
        elif stage.name == "curves":
            apply_curves(raster, p["spec"])
        elif stage.name == "selective_color":
            apply_selective_color(raster, p["spec"])
        elif stage.name == "grading":
            apply_grading(raster, p["spec"])
        else:
            raise ValueError(f"Unknown pipeline stage '{stage.name}'")


_default_pipeline = PixelPipeline()


def run_pipeline(source: Raster, params: Optional[EffectParams] = None) -> Raster:
    """Module-level convenience around a shared PixelPipeline."""
    return _default_pipeline.run(source, params)
