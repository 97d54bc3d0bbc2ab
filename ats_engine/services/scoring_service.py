from __future__ import annotations

import logging
import re
import time

from ats_engine.core.config import settings
from ats_engine.pipeline import CancellationToken, ScoringChannel
from ats_engine.schemas.feedback import Feedback
from ats_engine.schemas.scoring import ATSResult
from ats_engine.schemas.worker import ScorePayload

logger = logging.getLogger(__name__)

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_ZERO_WIDTH_RE = re.compile(r"[\u200b-\u200d\u2060\ufeff]")


class InvalidScoringInput(ValueError):
    pass


def sanitize_text(text: str | None) -> str:
    if not text:
        return ""
    clean = text.replace("\r\n", "\n").replace("\r", "\n")
    clean = _ZERO_WIDTH_RE.sub("", clean)
    return _CONTROL_CHARS_RE.sub("", clean)


def validate_score_inputs(resume_text: str | None, job_text: str | None) -> tuple[str, str]:
    resume_clean = sanitize_text(resume_text)
    job_clean = sanitize_text(job_text)
    limit = settings.scoring_max_text_length
    if len(resume_clean) > limit:
        raise InvalidScoringInput(f"Resume text exceeds the maximum of {limit} characters.")
    if len(job_clean) > limit:
        raise InvalidScoringInput(f"Job description exceeds the maximum of {limit} characters.")
    return resume_clean, job_clean


async def score_resume(
    channel: ScoringChannel,
    payload: ScorePayload,
    *,
    token: CancellationToken | None = None,
) -> ATSResult:
    resume_text, job_text = validate_score_inputs(payload.resume_text, payload.job_text)
    started = time.perf_counter()
    result = await channel.score(resume_text, job_text, payload.resume, token=token)
    logger.info(
        "ats_score_computed overall=%.1f warnings=%s duration_ms=%.1f",
        result.overall_score,
        len(result.warnings),
        (time.perf_counter() - started) * 1000.0,
    )
    return result


async def feedback_for_resume(
    channel: ScoringChannel,
    payload: ScorePayload,
    *,
    token: CancellationToken | None = None,
) -> Feedback:
    resume_text, job_text = validate_score_inputs(payload.resume_text, payload.job_text)
    started = time.perf_counter()
    feedback = await channel.feedback(resume_text, job_text, payload.resume, token=token)
    logger.info(
        "ats_feedback_generated total=%s critical=%s duration_ms=%.1f",
        feedback.statistics.total,
        feedback.statistics.critical,
        (time.perf_counter() - started) * 1000.0,
    )
    return feedback
