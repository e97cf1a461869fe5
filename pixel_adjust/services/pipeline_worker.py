from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..config import settings
from ..processing.params import EffectParams
from ..processing.pipeline import PixelPipeline
from ..processing.raster import Raster
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class WorkerRequest:
    """One unit of work: the full source raster plus the params to apply."""

    id: str
    raster: Raster
    params: EffectParams


@dataclass(frozen=True)
class WorkerResponse:
    """Exactly one per request, matched by id. raster is set only on success."""

    id: str
    success: bool
    raster: Optional[Raster] = None
    error: Optional[str] = None


class PipelineWorker:
    """
    Runs the pixel pipeline for a request. Stateless between requests.

    handle() never raises: any failure is reported as a failed response.
    """

    def __init__(self, pipeline: Optional[PixelPipeline] = None, slow_pass_warning_ms: Optional[float] = None) -> None:
        self._pipeline = pipeline or PixelPipeline()
        if slow_pass_warning_ms is None:
            slow_pass_warning_ms = settings.PIPELINE_DEFAULTS["slow_pass_warning_ms"]
        self._slow_pass_warning_ms = slow_pass_warning_ms

    def handle(self, request: WorkerRequest) -> WorkerResponse:
        try:
            result = self._pipeline.run_detailed(request.raster, request.params)
        except Exception as e:
            logger.exception("Error during background pipeline pass for %s", request.id)
            return WorkerResponse(id=request.id, success=False, error=f"Processing failed: {e}")

        elapsed_ms = result.total_time * 1000
        if elapsed_ms > self._slow_pass_warning_ms:
            logger.warning(
                "Slow pipeline pass for %s: %.0f ms on %dx%d (%s)",
                request.id,
                elapsed_ms,
                request.raster.width,
                request.raster.height,
                ", ".join(result.stages_executed) or "no stages",
            )
        return WorkerResponse(id=request.id, success=True, raster=result.raster)
