from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, model_validator

from ats_engine.core.config import settings

from .resume import Resume

CALCULATE_SCORE = "CALCULATE_SCORE"
SCORE_CALCULATED = "SCORE_CALCULATED"
GENERATE_FEEDBACK = "GENERATE_FEEDBACK"
FEEDBACK_GENERATED = "FEEDBACK_GENERATED"
GET_PERFORMANCE = "GET_PERFORMANCE"
PERFORMANCE_METRICS = "PERFORMANCE_METRICS"
ERROR = "ERROR"


class ScorePayload(BaseModel):
    resume_text: str = Field(
        default="",
        max_length=settings.scoring_max_text_length,
        validation_alias=AliasChoices("resume_text", "resumeText"),
    )
    job_text: str = Field(
        default="",
        max_length=settings.scoring_max_text_length,
        validation_alias=AliasChoices("job_text", "jobText"),
    )
    resume: Resume | None = None

    @model_validator(mode="after")
    def use_parsed_resume_text(self):
        if not self.resume_text.strip() and self.resume is not None:
            self.resume_text = self.resume.raw_text
        return self


class PerformanceInfo(BaseModel):
    duration: float = Field(ge=0.0)
    timestamp: float


class WorkerRequest(BaseModel):
    type: str
    id: str | int
    payload: dict[str, Any] = Field(default_factory=dict)


class WorkerResponse(BaseModel):
    type: str
    id: str | int
    payload: dict[str, Any] | None = None
    error: str | None = None
    performance: PerformanceInfo | None = None
