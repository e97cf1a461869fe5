from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from ..config import settings
from ..processing.histogram import Histogram, compute_histogram
from ..processing.params import DEFAULT_PARAMS, EffectParams, describe_changes, diff_params
from ..processing.pipeline import PixelPipeline
from ..processing.raster import Raster
from ..utils.errors import RequestSuperseded, WorkerUnavailable
from ..utils.history import HistoryStack
from ..utils.logger import get_logger
from .worker_client import PipelineWorkerClient

logger = get_logger(__name__)

BASE_LABEL = "Base image"
RESET_LABEL = "Reset to base image"


@dataclass(frozen=True)
class Checkpoint:
    """A history entry: the committed params and the raster they produced."""

    params: EffectParams
    raster: Raster


@dataclass(frozen=True)
class EffectsResult:
    raster: Raster
    histogram: Histogram
    changes: Tuple[Tuple[str, Any], ...]
    checkpoint_recorded: bool


class EffectsOrchestrator:
    """
    Keeps one editing session's pipeline state.

    Owns the pristine source raster (captured once per load, never mutated),
    the last committed params and the checkpoint history. Every run starts
    from the pristine raster, so adjustments stay non-destructive.
    """

    def __init__(
        self,
        client: Optional[PipelineWorkerClient] = None,
        pipeline: Optional[PixelPipeline] = None,
        history_size: Optional[int] = None,
    ) -> None:
        self._client = client
        self._pipeline = pipeline or PixelPipeline()
        if history_size is None:
            history_size = settings.HISTORY_DEFAULTS["max_size"]
        # Checkpoints hold frozen params and read-only rasters
        self._history: HistoryStack[Checkpoint] = HistoryStack(max_size=history_size, deep_copy=False)

        self._pristine: Optional[Raster] = None
        self.last_committed_params: EffectParams = DEFAULT_PARAMS
        self.current_raster: Optional[Raster] = None
        self.current_histogram: Optional[Histogram] = None

    # --- Session state ---

    @property
    def pristine(self) -> Optional[Raster]:
        return self._pristine

    @property
    def history(self) -> HistoryStack[Checkpoint]:
        return self._history

    @property
    def has_image(self) -> bool:
        return self._pristine is not None

    def load_image(self, raster: Raster) -> Histogram:
        """
        Start a session on a new image.

        The raster is copied into a read-only pristine buffer; history and the
        committed params are reset and a base checkpoint is recorded.
        """
        self._pristine = raster.read_only()
        self.last_committed_params = DEFAULT_PARAMS
        self._history.clear()
        self._show(self._pristine.clone())
        self._history.push(Checkpoint(DEFAULT_PARAMS, self._pristine), BASE_LABEL)
        logger.info("Loaded %dx%d image", raster.width, raster.height)
        return self.current_histogram

    # --- Effects ---

    async def apply_effects(self, params: EffectParams, commit: bool = True) -> Optional[EffectsResult]:
        """
        Run the pipeline on the pristine raster with params.

        Args:
            params: Complete parameter set for this edit.
            commit: Record a checkpoint if params differ from the last
                committed set. Pass False for intermediate slider positions.

        Returns:
            EffectsResult, or None when the request was superseded by a newer
            one or another image was loaded before it finished.

        Raises:
            RuntimeError: no image loaded.
            RequestTimeout: the worker did not answer in time.
            ProcessingError: the worker reported a failure.
        """
        if self._pristine is None:
            raise RuntimeError("No image loaded")

        source = self._pristine
        try:
            raster = await self._run(params)
        except RequestSuperseded as e:
            logger.debug("Discarding superseded result: %s", e)
            return None

        if self._pristine is not source:
            logger.debug("Image reloaded while processing, discarding result")
            return None
        return self._commit(params, raster, commit)

    def apply_effects_sync(self, params: EffectParams, commit: bool = True) -> EffectsResult:
        """apply_effects on the calling thread, without the worker."""
        if self._pristine is None:
            raise RuntimeError("No image loaded")
        return self._commit(params, self._pipeline.run(self._pristine, params), commit)

    def _commit(self, params: EffectParams, raster: Raster, commit: bool) -> EffectsResult:
        self._show(raster)

        changes = tuple(diff_params(self.last_committed_params, params))
        recorded = False
        if commit and changes:
            label = describe_changes(list(changes))
            self._history.push(Checkpoint(params, raster.read_only()), label)
            self.last_committed_params = params
            recorded = True
            logger.debug("Checkpoint: %s", label)

        return EffectsResult(raster, self.current_histogram, changes, recorded)

    async def _run(self, params: EffectParams) -> Raster:
        if self._client is None:
            return self._pipeline.run(self._pristine, params)
        try:
            return await self._client.process(self._pristine, params)
        except WorkerUnavailable as e:
            logger.warning("%s; running pipeline in the foreground", e)
            return self._pipeline.run(self._pristine, params)

    def reset_to_base(self) -> Optional[Raster]:
        """Show the pristine image again and record a reset checkpoint."""
        if self._pristine is None:
            return None
        self.last_committed_params = DEFAULT_PARAMS
        self._show(self._pristine.clone())
        self._history.push(Checkpoint(DEFAULT_PARAMS, self._pristine), RESET_LABEL)
        return self.current_raster

    # --- History ---

    def undo(self) -> Optional[Checkpoint]:
        return self._restore(self._history.undo())

    def redo(self) -> Optional[Checkpoint]:
        return self._restore(self._history.redo())

    def history_labels(self) -> List[str]:
        return self._history.descriptions()

    def _restore(self, checkpoint: Optional[Checkpoint]) -> Optional[Checkpoint]:
        if checkpoint is None:
            return None
        self.last_committed_params = checkpoint.params
        self._show(checkpoint.raster.clone())
        return checkpoint

    def _show(self, raster: Raster) -> None:
        self.current_raster = raster
        self.current_histogram = compute_histogram(raster)
