import asyncio
import contextlib
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from ats_engine.pipeline import (
    ScoreOrchestrator,
    ScoreUpdate,
    ScoringChannel,
    ScoringPipelineError,
    ScoringTimeoutError,
)
from ats_engine.core.rate_limit import rate_limit
from ats_engine.schemas.feedback import Feedback
from ats_engine.schemas.scoring import ATSResult
from ats_engine.schemas.worker import ERROR, SCORE_CALCULATED, ScorePayload
from ats_engine.services.scoring_service import (
    InvalidScoringInput,
    feedback_for_resume,
    score_resume,
    validate_score_inputs,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _channel(app: Any) -> ScoringChannel:
    channel = getattr(app.state, "scoring_channel", None)
    if channel is None or channel.closed:
        channel = ScoringChannel()
        app.state.scoring_channel = channel
    return channel


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, InvalidScoringInput):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(exc, ScoringTimeoutError):
        return HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.post("/ats/score", response_model=ATSResult)
@rate_limit()
async def ats_score(request: Request, payload: ScorePayload):
    try:
        return await score_resume(_channel(request.app), payload)
    except (InvalidScoringInput, ScoringPipelineError) as exc:
        raise _http_error(exc) from exc


@router.post("/ats/feedback", response_model=Feedback)
@rate_limit()
async def ats_feedback(request: Request, payload: ScorePayload):
    try:
        return await feedback_for_resume(_channel(request.app), payload)
    except (InvalidScoringInput, ScoringPipelineError) as exc:
        raise _http_error(exc) from exc


async def _pump(websocket: WebSocket, outbox: "asyncio.Queue[dict[str, Any]]") -> None:
    try:
        while True:
            message = await outbox.get()
            await websocket.send_json(message)
    except WebSocketDisconnect:
        logger.debug("ats_live_send_skipped reason=disconnected")


@router.websocket("/ats/live")
async def ats_live(websocket: WebSocket):
    await websocket.accept()
    outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    def on_result(update: ScoreUpdate) -> None:
        outbox.put_nowait(
            {
                "type": SCORE_CALCULATED,
                "id": str(update.sequence),
                "payload": update.result.model_dump(mode="json"),
                "cached": update.from_cache,
                "performance": update.performance.model_dump(mode="json") if update.performance else None,
            }
        )

    def on_error(exc: ScoringPipelineError) -> None:
        outbox.put_nowait({"type": ERROR, "error": str(exc)})

    orchestrator = ScoreOrchestrator(_channel(websocket.app), on_result=on_result, on_error=on_error)
    sender = asyncio.create_task(_pump(websocket, outbox))
    try:
        while True:
            data = await websocket.receive_json()
            try:
                payload = ScorePayload.model_validate(data)
                resume_text, job_text = validate_score_inputs(payload.resume_text, payload.job_text)
            except (ValidationError, InvalidScoringInput) as exc:
                outbox.put_nowait({"type": ERROR, "error": str(exc)})
                continue
            orchestrator.submit(resume_text, job_text, payload.resume)
    except WebSocketDisconnect:
        logger.info("ats_live_session_closed dispatched=%s cache=%s", orchestrator.dispatched, orchestrator.cache_stats)
    finally:
        await orchestrator.aclose()
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender
