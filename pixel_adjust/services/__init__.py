# Services package initialization
from .pipeline_worker import PipelineWorker, WorkerRequest, WorkerResponse
from .worker_client import PipelineWorkerClient
from .effects_orchestrator import Checkpoint, EffectsOrchestrator, EffectsResult
