from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import ValidationError

from ats_engine.core.config import settings
from ats_engine.schemas.resume import Resume
from ats_engine.schemas.scoring import ATSResult
from ats_engine.schemas.worker import CALCULATE_SCORE, PerformanceInfo, ScorePayload, WorkerResponse

from .cache import ResultCache, input_fingerprint
from .channel import (
    CancellationToken,
    PipelineClosedError,
    ScoringCancelledError,
    ScoringPipelineError,
    ScoringWorkerError,
)

logger = logging.getLogger(__name__)


class RequestChannel(Protocol):
    async def request(
        self,
        message_type: str,
        payload: dict[str, Any] | None = None,
        *,
        token: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> WorkerResponse:
        ...


@dataclass(slots=True)
class ScoreInput:
    resume_text: str
    job_text: str
    resume: Resume | None = None


@dataclass(slots=True)
class ScoreUpdate:
    result: ATSResult
    fingerprint: str
    sequence: int
    from_cache: bool = False
    performance: PerformanceInfo | None = None


@dataclass(slots=True)
class _InFlight:
    sequence: int
    token: CancellationToken
    task: asyncio.Task[None]


class ScoreOrchestrator:
    """Turns a stream of input edits into at most one live scoring request.

    Edits are debounced, unchanged inputs are skipped, repeated inputs are
    served from a small cache, and a newer computation cancels the one in
    flight. Must be driven from a single event loop.
    """

    def __init__(
        self,
        channel: RequestChannel,
        *,
        debounce_seconds: float | None = None,
        min_text_length: int | None = None,
        cache_size: int | None = None,
        on_result: Callable[[ScoreUpdate], None] | None = None,
        on_error: Callable[[ScoringPipelineError], None] | None = None,
    ) -> None:
        self._channel = channel
        self._debounce = (
            debounce_seconds if debounce_seconds is not None else settings.scoring_debounce_ms / 1000.0
        )
        self._min_text_length = (
            min_text_length if min_text_length is not None else settings.scoring_min_text_length
        )
        self._cache: ResultCache[ATSResult] = ResultCache(cache_size or settings.scoring_cache_size)
        self._on_result = on_result
        self._on_error = on_error

        self._timer: asyncio.TimerHandle | None = None
        self._queued: ScoreInput | None = None
        self._inflight: _InFlight | None = None
        self._sequence = 0
        self._applied_sequence = 0
        self._last_fingerprint: str | None = None
        self._idle = asyncio.Event()
        self._idle.set()
        self._closed = False

        self.latest: ScoreUpdate | None = None
        self.dispatched = 0

    @property
    def cache_stats(self) -> dict[str, int]:
        return self._cache.stats()

    @property
    def busy(self) -> bool:
        return self._timer is not None or self._inflight is not None

    def submit(self, resume_text: str, job_text: str, resume: Resume | None = None) -> None:
        if self._closed:
            raise PipelineClosedError("Score orchestrator is closed.")
        loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
            logger.debug("score_input_superseded")
        self._queued = ScoreInput(resume_text=resume_text or "", job_text=job_text or "", resume=resume)
        self._timer = loop.call_later(self._debounce, self._fire)
        self._update_idle()

    def flush(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._fire()

    def clear_cache(self) -> None:
        self._cache.clear()

    async def wait_idle(self) -> None:
        await self._idle.wait()

    def _fire(self) -> None:
        self._timer = None
        pending, self._queued = self._queued, None
        try:
            if pending is not None:
                self._dispatch(pending)
        finally:
            self._update_idle()

    def _dispatch(self, pending: ScoreInput) -> None:
        if (
            len(pending.resume_text.strip()) < self._min_text_length
            or len(pending.job_text.strip()) < self._min_text_length
        ):
            logger.debug("score_input_below_minimum min_length=%s", self._min_text_length)
            return

        fingerprint = input_fingerprint(pending.resume_text, pending.job_text)
        if fingerprint == self._last_fingerprint:
            logger.debug("score_input_unchanged fingerprint=%s", fingerprint[:12])
            return

        self._last_fingerprint = fingerprint
        self._cancel_inflight("superseded")
        self._sequence += 1
        cached = self._cache.get(fingerprint)
        if cached is not None:
            logger.debug("score_cache_hit fingerprint=%s", fingerprint[:12])
            self._apply(ScoreUpdate(result=cached, fingerprint=fingerprint, sequence=self._sequence, from_cache=True))
            return

        token = CancellationToken()
        task = asyncio.get_running_loop().create_task(self._compute(self._sequence, token, fingerprint, pending))
        self._inflight = _InFlight(sequence=self._sequence, token=token, task=task)
        self.dispatched += 1

    async def _compute(
        self,
        sequence: int,
        token: CancellationToken,
        fingerprint: str,
        pending: ScoreInput,
    ) -> None:
        payload = ScorePayload(
            resume_text=pending.resume_text,
            job_text=pending.job_text,
            resume=pending.resume,
        ).model_dump(mode="json")
        try:
            response = await self._channel.request(CALCULATE_SCORE, payload, token=token)
            result = ATSResult.model_validate(response.payload or {})
        except (ScoringPipelineError, ValidationError) as exc:
            if isinstance(exc, ScoringCancelledError) and token.cancelled:
                logger.debug("score_request_cancelled sequence=%s", sequence)
            elif self._is_current(sequence, token):
                self._inflight = None
                self._last_fingerprint = None
                error = exc if isinstance(exc, ScoringPipelineError) else ScoringWorkerError(str(exc))
                logger.warning("score_request_failed sequence=%s error=%s", sequence, error)
                if self._on_error is not None:
                    self._on_error(error)
            return
        finally:
            self._update_idle()

        self._cache.put(fingerprint, result)
        if not self._is_current(sequence, token):
            logger.debug("score_result_discarded sequence=%s", sequence)
            return
        self._inflight = None
        self._apply(
            ScoreUpdate(
                result=result,
                fingerprint=fingerprint,
                sequence=sequence,
                performance=response.performance,
            )
        )
        self._update_idle()

    def _is_current(self, sequence: int, token: CancellationToken) -> bool:
        return not token.cancelled and self._inflight is not None and self._inflight.sequence == sequence

    def _cancel_inflight(self, reason: str) -> None:
        inflight, self._inflight = self._inflight, None
        if inflight is not None:
            inflight.token.cancel(reason)

    def _apply(self, update: ScoreUpdate) -> None:
        if update.sequence <= self._applied_sequence:
            logger.debug("score_result_out_of_order sequence=%s", update.sequence)
            return
        self._applied_sequence = update.sequence
        self.latest = update
        if self._on_result is not None:
            self._on_result(update)

    def _update_idle(self) -> None:
        if self._timer is None and self._inflight is None:
            self._idle.set()
        else:
            self._idle.clear()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._queued = None
        inflight = self._inflight
        self._cancel_inflight("closed")
        if inflight is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await inflight.task
        self._update_idle()

    async def __aenter__(self) -> ScoreOrchestrator:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
