from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .scoring import Severity

FeedbackCategory = Literal[
    "input",
    "missing_keywords",
    "formatting",
    "action_verbs",
    "quantification",
    "word_usage",
]


class FeedbackSuggestion(BaseModel):
    category: FeedbackCategory
    severity: Severity
    title: str
    message: str
    suggestion: str = Field(min_length=1)
    keywords: list[str] | None = None
    weak_verbs: list[str] | None = None
    examples: list[str] | None = None


class FeedbackBySeverity(BaseModel):
    critical: list[FeedbackSuggestion] = Field(default_factory=list)
    warning: list[FeedbackSuggestion] = Field(default_factory=list)
    improvement: list[FeedbackSuggestion] = Field(default_factory=list)


class FeedbackStatistics(BaseModel):
    total: int = Field(default=0, ge=0)
    critical: int = Field(default=0, ge=0)
    warning: int = Field(default=0, ge=0)
    improvement: int = Field(default=0, ge=0)


class FeedbackDetails(BaseModel):
    missing_keyword_count: int = 0
    critical_keyword_count: int = 0
    weak_verb_count: int = 0
    quantified_bullets: int = 0
    unquantified_bullets: int = 0
    quantification_rate: float | None = None
    overused_word_count: int = 0
    formatting_violation_count: int = 0


class Feedback(BaseModel):
    suggestions: list[FeedbackSuggestion] = Field(default_factory=list)
    by_severity: FeedbackBySeverity = Field(default_factory=FeedbackBySeverity)
    statistics: FeedbackStatistics = Field(default_factory=FeedbackStatistics)
    summary: str = ""
    details: FeedbackDetails = Field(default_factory=FeedbackDetails)
