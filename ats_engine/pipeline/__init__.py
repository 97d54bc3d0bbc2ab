from .cache import BoundedMap, ResultCache, input_fingerprint
from .channel import (
    CancellationToken,
    PipelineClosedError,
    ScoringCancelledError,
    ScoringChannel,
    ScoringPipelineError,
    ScoringTimeoutError,
    ScoringWorkerError,
    WorkerCrashedError,
)
from .orchestrator import ScoreOrchestrator, ScoreUpdate
from .worker import ScoringWorker

__all__ = [
    "BoundedMap",
    "ResultCache",
    "input_fingerprint",
    "CancellationToken",
    "ScoringChannel",
    "ScoringWorker",
    "ScoreOrchestrator",
    "ScoreUpdate",
    "ScoringPipelineError",
    "ScoringTimeoutError",
    "ScoringCancelledError",
    "ScoringWorkerError",
    "WorkerCrashedError",
    "PipelineClosedError",
]
