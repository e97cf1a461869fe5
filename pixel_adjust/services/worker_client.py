from __future__ import annotations

import asyncio
import concurrent.futures
from typing import Dict, Optional

from ..config import settings
from ..processing.params import EffectParams
from ..processing.raster import Raster
from ..utils.errors import ProcessingError, RequestSuperseded, RequestTimeout, WorkerUnavailable
from ..utils.logger import get_logger
from .pipeline_worker import PipelineWorker, WorkerRequest, WorkerResponse

logger = get_logger(__name__)


class PipelineWorkerClient:
    """
    Runs pipeline requests on a dedicated worker thread.

    Callers await process() on the event loop; the pipeline itself runs on a
    single-thread executor. Only the newest request is honoured: sending a new
    one rejects every pending request with RequestSuperseded, and responses
    whose id is no longer pending are dropped. Dispatches are at least
    min_interval apart; a call still waiting out the throttle when a newer
    call arrives is rejected without reaching the worker. All bookkeeping
    happens on the event loop thread.
    """

    def __init__(
        self,
        worker: Optional[PipelineWorker] = None,
        executor: Optional[concurrent.futures.Executor] = None,
        timeout: Optional[float] = None,
        min_interval: Optional[float] = None,
    ) -> None:
        defaults = settings.WORKER_DEFAULTS
        self._worker = worker or PipelineWorker()
        self._owns_executor = executor is None
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=defaults["thread_name_prefix"]
        )
        self._timeout = defaults["timeout_seconds"] if timeout is None else timeout
        self._min_interval = defaults["min_request_interval_seconds"] if min_interval is None else min_interval

        self._pending: Dict[str, asyncio.Future] = {}
        self._request_counter = 0
        self._last_request_time: Optional[float] = None
        self._closed = False
        self.last_error: Optional[str] = None

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def is_processing(self) -> bool:
        return bool(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    async def process(self, raster: Raster, params: EffectParams) -> Raster:
        """
        Run the pipeline for raster/params off the event loop.

        Returns:
            The processed raster.

        Raises:
            RequestSuperseded: a newer request was sent before this one finished.
            RequestTimeout: no response within the timeout.
            ProcessingError: the worker reported a failure.
            WorkerUnavailable: the client is closed or the executor refuses work.
        """
        if self._closed:
            raise WorkerUnavailable("Pipeline worker client is closed")

        loop = asyncio.get_running_loop()
        self._request_counter += 1
        number = self._request_counter
        request_id = f"req_{number}"

        # Throttle so rapid slider changes do not flood the worker
        if self._last_request_time is not None:
            wait = self._min_interval - (loop.time() - self._last_request_time)
            if wait > 0:
                await asyncio.sleep(wait)
                if self._closed:
                    raise WorkerUnavailable(f"Worker closed before {request_id} was sent")
                if number != self._request_counter:
                    # a newer call arrived while this one waited
                    logger.debug("Superseding %s before dispatch", request_id)
                    raise RequestSuperseded(request_id)
        self._last_request_time = loop.time()

        # Only the latest request is kept
        self._supersede_pending()

        future = loop.create_future()
        self._pending[request_id] = future

        request = WorkerRequest(id=request_id, raster=raster, params=params)
        try:
            work = self._executor.submit(self._worker.handle, request)
        except RuntimeError as e:
            # executor already shut down
            del self._pending[request_id]
            raise WorkerUnavailable(f"Pipeline executor refused {request_id}", original_error=e) from e

        work.add_done_callback(lambda done: self._post_to_loop(loop, request_id, done))
        timeout_handle = loop.call_later(self._timeout, self._on_timeout, request_id)
        logger.debug("Dispatched %s", request_id)

        try:
            return await future
        finally:
            timeout_handle.cancel()
            if self._pending.get(request_id) is future:
                del self._pending[request_id]

    def _post_to_loop(self, loop: asyncio.AbstractEventLoop, request_id: str, done: concurrent.futures.Future) -> None:
        # Runs on the worker thread
        if loop.is_closed():
            logger.debug("Event loop closed, dropping response for %s", request_id)
            return
        try:
            loop.call_soon_threadsafe(self._on_response, request_id, done)
        except RuntimeError:
            logger.debug("Event loop closed, dropping response for %s", request_id)

    def _on_response(self, request_id: str, done: concurrent.futures.Future) -> None:
        future = self._pending.pop(request_id, None)
        if future is None or future.done():
            logger.debug("Ignoring stale response for %s", request_id)
            return

        if done.cancelled():
            future.set_exception(WorkerUnavailable(f"Request {request_id} was cancelled by executor shutdown"))
            return

        response: WorkerResponse = done.result()
        if response.success:
            self.last_error = None
            future.set_result(response.raster)
        else:
            self.last_error = response.error or "Worker processing failed"
            future.set_exception(ProcessingError(self.last_error, step=request_id))

    def _on_timeout(self, request_id: str) -> None:
        future = self._pending.pop(request_id, None)
        if future is None or future.done():
            return
        error = RequestTimeout(request_id, self._timeout)
        self.last_error = error.user_message
        logger.warning("Request %s timed out after %gs", request_id, self._timeout)
        future.set_exception(error)

    def _supersede_pending(self) -> None:
        if not self._pending:
            return
        old = list(self._pending.items())
        self._pending.clear()
        for request_id, future in old:
            if not future.done():
                logger.debug("Superseding %s", request_id)
                future.set_exception(RequestSuperseded(request_id))

    def close(self) -> None:
        """Reject pending requests and stop accepting new ones."""
        if self._closed:
            return
        self._closed = True
        old = list(self._pending.items())
        self._pending.clear()
        for request_id, future in old:
            if not future.done():
                future.set_exception(WorkerUnavailable(f"Worker closed before {request_id} completed"))
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    async def __aenter__(self) -> "PipelineWorkerClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
