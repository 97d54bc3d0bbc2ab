from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from ats_engine.core.config import settings
from ats_engine.schemas.feedback import (
    Feedback,
    FeedbackBySeverity,
    FeedbackDetails,
    FeedbackStatistics,
    FeedbackSuggestion,
)
from ats_engine.schemas.resume import Resume
from ats_engine.scoring.formatting import check_formatting
from ats_engine.scoring.impact import detect_impact
from ats_engine.scoring.keywords import match_keywords
from ats_engine.scoring.skills import match_skills
from ats_engine.semantic.text import words
from ats_engine.taxonomy import TaxonomyProvider, get_default_taxonomy_provider

from . import templates
from .rules import (
    detect_missing_keywords,
    detect_overused_words,
    detect_unquantified_bullets,
    detect_weak_action_verbs,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SEVERITY_ORDER = {"critical": 0, "warning": 1, "improvement": 2}
CATEGORY_PRIORITY = {
    "input": 6,
    "missing_keywords": 5,
    "formatting": 4,
    "action_verbs": 3,
    "quantification": 2,
    "word_usage": 1,
}


def _guard(name: str, compute: Callable[[], T], default: T) -> T:
    try:
        return compute()
    except Exception as exc:
        logger.warning("feedback_detector_failed detector=%s error=%s", name, exc)
        return default


def prioritize(suggestions: list[FeedbackSuggestion]) -> list[FeedbackSuggestion]:
    return sorted(
        suggestions,
        key=lambda item: (
            SEVERITY_ORDER[item.severity],
            -CATEGORY_PRIORITY.get(item.category, 0),
            item.title.lower(),
        ),
    )


def _assemble(suggestions: list[FeedbackSuggestion], details: FeedbackDetails) -> Feedback:
    ordered = prioritize(suggestions)
    by_severity = FeedbackBySeverity(
        critical=[item for item in ordered if item.severity == "critical"],
        warning=[item for item in ordered if item.severity == "warning"],
        improvement=[item for item in ordered if item.severity == "improvement"],
    )
    statistics = FeedbackStatistics(
        total=len(ordered),
        critical=len(by_severity.critical),
        warning=len(by_severity.warning),
        improvement=len(by_severity.improvement),
    )
    return Feedback(
        suggestions=ordered,
        by_severity=by_severity,
        statistics=statistics,
        summary=templates.build_summary(statistics, details),
        details=details,
    )


def generate_feedback(
    resume_text: str | None,
    job_text: str | None,
    resume: Resume | None = None,
    *,
    taxonomy: TaxonomyProvider | None = None,
) -> Feedback:
    resume_text = resume_text or (resume.raw_text if resume is not None else "") or ""
    job_text = job_text or ""
    details = FeedbackDetails()

    if not resume_text.strip():
        return _assemble([templates.missing_resume_text()], details)

    provider = taxonomy or get_default_taxonomy_provider()
    suggestions: list[FeedbackSuggestion] = []

    if len(job_text.strip()) >= settings.scoring_min_text_length:
        keyword_result = _guard("keywords", lambda: match_keywords(resume_text, job_text, provider), None)
        skills_result = _guard("skills", lambda: match_skills(resume_text, job_text, provider), None)
        if keyword_result is not None:
            missing = detect_missing_keywords(keyword_result, skills_result)
            details.critical_keyword_count = len(missing.critical)
            details.missing_keyword_count = len(missing.critical) + len(missing.important)
            if missing.critical:
                suggestions.append(templates.critical_keywords(missing.critical))
            if missing.important:
                suggestions.append(templates.important_keywords(missing.important))
    else:
        suggestions.append(templates.missing_job_text())

    verb_hits = _guard("action_verbs", lambda: detect_weak_action_verbs(resume_text), [])
    weak = [hit for hit in verb_hits if hit.strength == "weak"]
    medium = [hit for hit in verb_hits if hit.strength == "medium"]
    details.weak_verb_count = len(weak)
    if weak:
        suggestions.append(templates.weak_verbs(weak))
    if medium:
        suggestions.append(templates.medium_verbs(medium))

    report = _guard("quantification", lambda: detect_unquantified_bullets(resume_text), None)
    if report is not None:
        details.quantified_bullets = len(report.quantified)
        details.unquantified_bullets = len(report.unquantified)
        details.quantification_rate = report.rate
        if report.unquantified:
            suggestions.append(templates.unquantified_bullets(report))
        elif report.rate is None and len(words(resume_text)) >= 50:
            impact = _guard("impact", lambda: detect_impact(resume_text), None)
            if impact is not None and not impact.metrics:
                suggestions.append(templates.no_measurable_results())

    overused = _guard("word_usage", lambda: detect_overused_words(resume_text), [])
    details.overused_word_count = len(overused)
    suggestions.extend(templates.overused_word(item) for item in overused)

    formatting = _guard("formatting", lambda: check_formatting(resume_text, resume), None)
    if formatting is not None:
        violations = formatting.violations
        details.formatting_violation_count = len(violations)
        suggestions.extend(templates.formatting_violation(issue) for issue in violations)

    return _assemble(suggestions, details)
