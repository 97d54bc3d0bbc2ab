from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from ats_engine.core.config import settings
from ats_engine.schemas.feedback import Feedback
from ats_engine.schemas.resume import Resume
from ats_engine.schemas.scoring import ATSResult
from ats_engine.schemas.worker import (
    CALCULATE_SCORE,
    ERROR,
    GENERATE_FEEDBACK,
    GET_PERFORMANCE,
    ScorePayload,
    WorkerRequest,
    WorkerResponse,
)

from .cache import BoundedMap
from .worker import ScoringWorker

logger = logging.getLogger(__name__)

WorkerFactory = Callable[[Callable[[dict[str, Any]], None], Callable[[str], None]], ScoringWorker]


class ScoringPipelineError(RuntimeError):
    pass


class ScoringTimeoutError(ScoringPipelineError):
    pass


class ScoringCancelledError(ScoringPipelineError):
    pass


class WorkerCrashedError(ScoringPipelineError):
    pass


class ScoringWorkerError(ScoringPipelineError):
    pass


class PipelineClosedError(ScoringPipelineError):
    pass


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False
        self._reason: str | None = None
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        if self._cancelled:
            callback()
            return lambda: None
        self._callbacks.append(callback)

        def remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return remove

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise ScoringCancelledError(self._reason or "cancelled")


def _default_worker_factory(
    deliver: Callable[[dict[str, Any]], None],
    on_crash: Callable[[str], None],
) -> ScoringWorker:
    return ScoringWorker(deliver, on_crash)


class ScoringChannel:
    """Async request/response channel in front of a single scoring worker thread.

    Every request gets a correlation id and a future in the pending table.
    The worker is started lazily on the first request and restarted on the
    next request after it crashes.
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        pending_limit: int | None = None,
        worker_factory: WorkerFactory | None = None,
    ) -> None:
        self._timeout = timeout if timeout is not None else settings.scoring_request_timeout_seconds
        self._pending: BoundedMap[str, asyncio.Future[WorkerResponse]] = BoundedMap(
            pending_limit or settings.scoring_pending_limit,
            on_evict=self._reject_evicted,
        )
        self._worker_factory = worker_factory or _default_worker_factory
        self._worker: ScoringWorker | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._generation = 0
        self._closed = False
        self.requests_sent = 0
        self.worker_starts = 0

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_worker(self) -> ScoringWorker:
        if self._closed:
            raise PipelineClosedError("Scoring channel is closed.")
        loop = asyncio.get_running_loop()
        worker = self._worker
        if worker is not None and worker.is_alive() and self._loop is loop:
            return worker
        if worker is not None:
            self._fail_pending(lambda: WorkerCrashedError("Scoring worker is no longer running."))
            worker.stop(timeout=0)

        self._generation += 1
        generation = self._generation
        self._loop = loop

        def deliver(message: dict[str, Any]) -> None:
            try:
                loop.call_soon_threadsafe(self._on_message, generation, message)
            except RuntimeError:
                logger.debug("scoring_response_dropped reason=loop_closed id=%s", message.get("id"))

        def on_crash(reason: str) -> None:
            try:
                loop.call_soon_threadsafe(self._on_crash, generation, reason)
            except RuntimeError:
                logger.debug("scoring_crash_unreported reason=loop_closed")

        worker = self._worker_factory(deliver, on_crash)
        worker.start()
        self._worker = worker
        self.worker_starts += 1
        return worker

    async def request(
        self,
        message_type: str,
        payload: dict[str, Any] | None = None,
        *,
        token: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> WorkerResponse:
        if token is not None:
            token.raise_if_cancelled()
        worker = self._ensure_worker()
        loop = asyncio.get_running_loop()
        request_id = uuid.uuid4().hex
        future: asyncio.Future[WorkerResponse] = loop.create_future()
        self._pending.put(request_id, future)

        remove_callback: Callable[[], None] | None = None
        if token is not None:
            remove_callback = token.add_callback(lambda: self._cancel_pending(request_id, token.reason))

        message = WorkerRequest(type=message_type, id=request_id, payload=payload or {}).model_dump(mode="json")
        worker.post(message)
        self.requests_sent += 1
        limit = timeout if timeout is not None else self._timeout
        try:
            return await asyncio.wait_for(future, limit)
        except asyncio.TimeoutError as exc:
            logger.warning("scoring_request_timeout id=%s type=%s timeout=%s", request_id, message_type, limit)
            raise ScoringTimeoutError(f"Scoring request timed out after {limit} seconds.") from exc
        finally:
            self._pending.pop(request_id, None)
            if remove_callback is not None:
                remove_callback()

    async def score(
        self,
        resume_text: str,
        job_text: str,
        resume: Resume | None = None,
        *,
        token: CancellationToken | None = None,
    ) -> ATSResult:
        payload = ScorePayload(resume_text=resume_text, job_text=job_text, resume=resume)
        response = await self.request(CALCULATE_SCORE, payload.model_dump(mode="json"), token=token)
        return _parse(ATSResult, response)

    async def feedback(
        self,
        resume_text: str,
        job_text: str,
        resume: Resume | None = None,
        *,
        token: CancellationToken | None = None,
    ) -> Feedback:
        payload = ScorePayload(resume_text=resume_text, job_text=job_text, resume=resume)
        response = await self.request(GENERATE_FEEDBACK, payload.model_dump(mode="json"), token=token)
        return _parse(Feedback, response)

    async def performance(self) -> dict[str, Any]:
        response = await self.request(GET_PERFORMANCE)
        return dict(response.payload or {})

    def _on_message(self, generation: int, message: dict[str, Any]) -> None:
        if generation != self._generation:
            logger.debug("scoring_response_dropped reason=stale_worker id=%s", message.get("id"))
            return
        response = WorkerResponse.model_validate(message)
        future = self._pending.pop(response.id, None)
        if future is None or future.done():
            logger.debug("scoring_response_dropped reason=no_pending_request id=%s", response.id)
            return
        if response.type == ERROR:
            future.set_exception(ScoringWorkerError(response.error or "Scoring worker returned an error."))
        else:
            future.set_result(response)

    def _on_crash(self, generation: int, reason: str) -> None:
        if generation != self._generation:
            return
        logger.error("scoring_worker_lost reason=%s pending=%s", reason, len(self._pending))
        self._worker = None
        self._fail_pending(lambda: WorkerCrashedError(f"Scoring worker crashed: {reason}"))

    def _cancel_pending(self, request_id: str, reason: str | None) -> None:
        future = self._pending.pop(request_id, None)
        if future is not None and not future.done():
            logger.debug("scoring_request_cancelled id=%s reason=%s", request_id, reason)
            future.set_exception(ScoringCancelledError(reason or "cancelled"))

    @staticmethod
    def _reject_evicted(request_id: str, future: asyncio.Future[WorkerResponse]) -> None:
        if not future.done():
            logger.warning("scoring_request_evicted id=%s", request_id)
            future.set_exception(ScoringCancelledError("Too many pending scoring requests."))

    def _fail_pending(self, make_error: Callable[[], ScoringPipelineError]) -> None:
        for _, future in self._pending.drain():
            if not future.done():
                future.set_exception(make_error())

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._fail_pending(lambda: PipelineClosedError("Scoring channel is closed."))
        worker, self._worker = self._worker, None
        if worker is not None:
            await asyncio.get_running_loop().run_in_executor(None, worker.stop)

    async def __aenter__(self) -> ScoringChannel:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _parse(model: Any, response: WorkerResponse) -> Any:
    try:
        return model.model_validate(response.payload or {})
    except ValidationError as exc:
        raise ScoringWorkerError(f"Malformed {response.type} payload from worker.") from exc
