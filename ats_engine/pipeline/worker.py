from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from ats_engine.feedback import generate_feedback
from ats_engine.schemas.worker import (
    CALCULATE_SCORE,
    ERROR,
    FEEDBACK_GENERATED,
    GENERATE_FEEDBACK,
    GET_PERFORMANCE,
    PERFORMANCE_METRICS,
    SCORE_CALCULATED,
    PerformanceInfo,
    ScorePayload,
    WorkerRequest,
    WorkerResponse,
)
from ats_engine.scoring import calculate_ats_score

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], tuple[str, dict[str, Any]]]

_STOP = None


def _calculate_score(payload: dict[str, Any]) -> tuple[str, dict[str, Any]]:
    request = ScorePayload.model_validate(payload)
    result = calculate_ats_score(request.resume_text, request.job_text, request.resume)
    return SCORE_CALCULATED, result.model_dump(mode="json")


def _generate_feedback(payload: dict[str, Any]) -> tuple[str, dict[str, Any]]:
    request = ScorePayload.model_validate(payload)
    feedback = generate_feedback(request.resume_text, request.job_text, request.resume)
    return FEEDBACK_GENERATED, feedback.model_dump(mode="json")


def _echo_id(message: Any) -> str | int:
    raw = message.get("id", "") if isinstance(message, dict) else ""
    if isinstance(raw, (str, int)) and not isinstance(raw, bool):
        return raw
    return str(raw)


def default_handlers() -> dict[str, Handler]:
    return {
        CALCULATE_SCORE: _calculate_score,
        GENERATE_FEEDBACK: _generate_feedback,
    }


class PerformanceTracker:
    def __init__(self) -> None:
        self.count = 0
        self.total_ms = 0.0
        self.min_ms: float | None = None
        self.max_ms: float | None = None

    def record(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = duration_ms if self.min_ms is None else min(self.min_ms, duration_ms)
        self.max_ms = duration_ms if self.max_ms is None else max(self.max_ms, duration_ms)

    def snapshot(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "total_ms": round(self.total_ms, 3),
            "average_ms": round(self.total_ms / self.count, 3) if self.count else 0.0,
            "min_ms": round(self.min_ms, 3) if self.min_ms is not None else None,
            "max_ms": round(self.max_ms, 3) if self.max_ms is not None else None,
        }


class ScoringWorker:
    """Runs scoring on one dedicated thread; talks only through plain message dicts."""

    def __init__(
        self,
        deliver: Callable[[dict[str, Any]], None],
        on_crash: Callable[[str], None],
        handlers: dict[str, Handler] | None = None,
        *,
        name: str = "ats-scoring-worker",
    ) -> None:
        self._deliver = deliver
        self._on_crash = on_crash
        self._handlers = handlers if handlers is not None else default_handlers()
        self._inbox: queue.Queue[dict[str, Any] | None] = queue.Queue()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self.performance = PerformanceTracker()

    @property
    def name(self) -> str:
        return self._thread.name

    def start(self) -> None:
        self._thread.start()
        logger.info("scoring_worker_started name=%s", self.name)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def post(self, message: dict[str, Any]) -> None:
        self._inbox.put(message)

    def stop(self, timeout: float | None = 1.0) -> None:
        self._inbox.put(_STOP)
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout)

    def _run(self) -> None:
        try:
            while True:
                message = self._inbox.get()
                if message is _STOP:
                    break
                self._deliver(self.handle(message))
        except BaseException as exc:
            logger.error("scoring_worker_crashed name=%s error=%s", self.name, exc, exc_info=True)
            self._on_crash(f"{type(exc).__name__}: {exc}")
            raise
        logger.info("scoring_worker_stopped name=%s", self.name)

    def handle(self, message: dict[str, Any]) -> dict[str, Any]:
        try:
            request = WorkerRequest.model_validate(message)
        except ValidationError as exc:
            return WorkerResponse(
                type=ERROR,
                id=_echo_id(message),
                error=f"Malformed worker message: {exc.error_count()} validation error(s)",
            ).model_dump(mode="json")

        if request.type == GET_PERFORMANCE:
            return WorkerResponse(
                type=PERFORMANCE_METRICS,
                id=request.id,
                payload=self.performance.snapshot(),
            ).model_dump(mode="json")

        handler = self._handlers.get(request.type)
        if handler is None:
            return WorkerResponse(
                type=ERROR,
                id=request.id,
                error=f"Unknown message type: {request.type}",
            ).model_dump(mode="json")

        started = time.perf_counter()
        try:
            response_type, payload = handler(request.payload)
        except Exception as exc:
            logger.warning(
                "scoring_worker_request_failed id=%s type=%s error=%s",
                request.id,
                request.type,
                exc,
            )
            return WorkerResponse(
                type=ERROR,
                id=request.id,
                error=str(exc) or type(exc).__name__,
            ).model_dump(mode="json")

        duration_ms = (time.perf_counter() - started) * 1000.0
        self.performance.record(duration_ms)
        return WorkerResponse(
            type=response_type,
            id=request.id,
            payload=payload,
            performance=PerformanceInfo(duration=duration_ms, timestamp=time.time() * 1000.0),
        ).model_dump(mode="json")
