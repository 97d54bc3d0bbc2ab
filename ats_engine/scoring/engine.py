from __future__ import annotations

import logging
import math
from collections.abc import Callable
from typing import Any

from ats_engine.core.config import settings
from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.schemas.resume import Resume
from ats_engine.schemas.scoring import (
    ATSResult,
    DimensionName,
    FormattingDetails,
    FormattingResult,
    ImpactMetricsDetails,
    ImpactResult,
    KeywordMatchDetails,
    KeywordMatchResult,
    ReadabilityDetails,
    ReadabilityResult,
    ScoreBreakdown,
    SkillsAlignmentDetails,
    SkillsMatchResult,
    SubScore,
)
from ats_engine.taxonomy import TaxonomyProvider, get_default_taxonomy_provider

from .formatting import check_formatting
from .impact import detect_impact
from .keywords import match_keywords
from .readability import check_readability
from .skills import match_skills

logger = logging.getLogger(__name__)

DIMENSION_WEIGHTS: dict[DimensionName, float] = {
    "keyword_match": 35.0,
    "skills_alignment": 25.0,
    "formatting": 20.0,
    "impact_metrics": 10.0,
    "readability": 10.0,
}

DIMENSION_LABELS: dict[DimensionName, str] = {
    "keyword_match": "keyword match",
    "skills_alignment": "skills alignment",
    "formatting": "formatting",
    "impact_metrics": "impact metrics",
    "readability": "readability",
}

_EMPTY_DETAILS: dict[DimensionName, Callable[..., Any]] = {
    "keyword_match": KeywordMatchDetails,
    "skills_alignment": SkillsAlignmentDetails,
    "formatting": FormattingDetails,
    "impact_metrics": ImpactMetricsDetails,
    "readability": ReadabilityDetails,
}


def _finite(value: float, low: float, high: float) -> float:
    if value is None or not math.isfinite(value):
        return low
    return max(low, min(high, value))


def _keyword_details(result: KeywordMatchResult) -> KeywordMatchDetails:
    return KeywordMatchDetails(
        similarity=round(result.similarity, 4),
        coverage=round(result.coverage, 4),
        matched_keywords=[hit.term for hit in result.matched_keywords],
        missing_keywords=[hit.term for hit in result.missing_keywords],
        stuffing_detected=result.stuffing.is_stuffing,
        stuffed_terms=list(result.stuffing.terms),
    )


def _skills_details(result: SkillsMatchResult) -> SkillsAlignmentDetails:
    return SkillsAlignmentDetails(
        hard_score=round(result.hard_skills.score, 4),
        soft_score=round(result.soft_skills.score, 4),
        tools_score=round(result.tools.score, 4),
        matched_skills=[*result.hard_skills.matched, *result.soft_skills.matched, *result.tools.matched],
        missing_skills=[*result.hard_skills.missing, *result.soft_skills.missing, *result.tools.missing],
    )


def _formatting_details(result: FormattingResult) -> FormattingDetails:
    return FormattingDetails(issues=list(result.issues), warnings=list(result.warnings))


def _impact_details(result: ImpactResult) -> ImpactMetricsDetails:
    return ImpactMetricsDetails(
        metric_count=len(result.metrics),
        statement_count=len(result.impact_statements),
        metric_types=list(result.details.metric_types),
        examples=[metric.text for metric in result.metrics[:5]],
    )


def _readability_details(result: ReadabilityResult) -> ReadabilityDetails:
    return ReadabilityDetails(
        word_count=result.word_count,
        avg_sentence_length=result.avg_sentence_length,
        issues=[issue.message for issue in result.issues],
    )


_DETAIL_BUILDERS: dict[DimensionName, Callable[[Any], Any]] = {
    "keyword_match": _keyword_details,
    "skills_alignment": _skills_details,
    "formatting": _formatting_details,
    "impact_metrics": _impact_details,
    "readability": _readability_details,
}


def _sub_score(name: DimensionName, unit_score: float, details: Any) -> SubScore:
    weight = DIMENSION_WEIGHTS[name]
    score = _finite(unit_score * 100.0, 0.0, 100.0)
    return SubScore(
        score=score,
        weight=weight,
        weighted_score=_finite(score * weight / 100.0, 0.0, weight),
        details=details,
    )


def _run_dimension(
    name: DimensionName,
    compute: Callable[[], Any],
    warnings: list[str],
) -> tuple[SubScore, Any | None]:
    try:
        result = compute()
        details = _DETAIL_BUILDERS[name](result)
        return _sub_score(name, float(result.score), details), result
    except Exception as exc:
        logger.warning("ats_dimension_failed dimension=%s error=%s", name, exc)
        warnings.append(f"The {DIMENSION_LABELS[name]} check failed and was scored as 0.")
        details = _EMPTY_DETAILS[name](failed=True, error=str(exc) or type(exc).__name__)
        return _sub_score(name, 0.0, details), None


def _explanation(overall: float, breakdown: ScoreBreakdown) -> str:
    excellent = float(get_scoring_value("scoring.explanation_tiers.excellent", 80))
    good = float(get_scoring_value("scoring.explanation_tiers.good", 60))
    fair = float(get_scoring_value("scoring.explanation_tiers.fair", 40))
    if overall >= excellent:
        headline = "Excellent match: your resume is well optimized for this position."
    elif overall >= good:
        headline = "Good match: a few targeted changes would make your resume more competitive."
    elif overall >= fair:
        headline = "Fair match: your resume needs work to pass ATS screening for this role."
    else:
        headline = "Low match: your resume is unlikely to pass ATS screening for this role as written."

    ranked = sorted(breakdown.items(), key=lambda item: item[1].score)
    weakest_name, weakest = ranked[0]
    strongest_name, strongest = ranked[-1]
    if strongest.score - weakest.score < 1.0:
        return headline
    return (
        f"{headline} Strongest area: {DIMENSION_LABELS[strongest_name]} ({round(strongest.score)}/100). "
        f"Weakest area: {DIMENSION_LABELS[weakest_name]} ({round(weakest.score)}/100)."
    )


def _recommendation(name: DimensionName, result: Any | None) -> str:
    if result is None:
        return f"The {DIMENSION_LABELS[name]} check could not complete; run the analysis again."
    if name == "keyword_match":
        if result.stuffing.is_stuffing:
            terms = ", ".join(result.stuffing.terms[:3])
            return f"Reduce repetition of {terms}; keyword stuffing lowers your ranking."
        missing = [hit.term for hit in result.missing_keywords[:5]]
        if missing:
            return f"Add missing job keywords where they truthfully apply: {', '.join(missing)}."
        return "Mirror the job description's wording more closely in your experience bullets."
    if name == "skills_alignment":
        if result.hard_skills.missing:
            return f"Highlight required technical skills you have: {', '.join(result.hard_skills.missing[:5])}."
        if result.tools.missing:
            return f"Mention the tools and platforms the role uses: {', '.join(result.tools.missing[:5])}."
        if result.soft_skills.missing:
            return f"Show evidence of these soft skills: {', '.join(result.soft_skills.missing[:5])}."
        return "List your relevant skills in a dedicated Skills section."
    if name == "formatting":
        violations = result.violations
        if violations:
            return violations[0].suggestion
        return "Keep a simple single-column layout with standard section headings."
    if name == "impact_metrics":
        return "Quantify achievements with numbers, percentages, dollar amounts or team sizes."
    if result.issues:
        return result.issues[0].message
    return "Use short, scannable bullet points that start with strong action verbs."


def _recommendations(breakdown: ScoreBreakdown, results: dict[DimensionName, Any | None]) -> list[str]:
    threshold = float(get_scoring_value("scoring.recommendation_threshold", 80))
    limit = int(get_scoring_value("scoring.max_recommendations", 5))
    candidates = [
        (sub.weight * (100.0 - sub.score), name)
        for name, sub in breakdown.items()
        if sub.score < threshold
    ]
    candidates.sort(key=lambda item: -item[0])
    return [_recommendation(name, results.get(name)) for _, name in candidates[:limit]]


def _empty_result(reason: str, recommendation: str) -> ATSResult:
    breakdown = ScoreBreakdown(
        **{name: _sub_score(name, 0.0, factory()) for name, factory in _EMPTY_DETAILS.items()}
    )
    return ATSResult(
        overall_score=0.0,
        breakdown=breakdown,
        explanation=reason,
        recommendations=[recommendation],
        warnings=[reason],
    )


def calculate_ats_score(
    resume_text: str | None,
    job_text: str | None,
    resume: Resume | None = None,
    *,
    taxonomy: TaxonomyProvider | None = None,
) -> ATSResult:
    resume_text = resume_text or (resume.raw_text if resume is not None else "") or ""
    job_text = job_text or ""

    if not resume_text.strip():
        return _empty_result(
            "No resume text was provided, so no score could be calculated.",
            "Paste or upload your resume to get a score.",
        )
    if len(job_text.strip()) < settings.scoring_min_text_length:
        return _empty_result(
            "The job description is missing or too short to score against.",
            f"Paste the full job description (at least {settings.scoring_min_text_length} characters).",
        )

    provider = taxonomy or get_default_taxonomy_provider()
    warnings: list[str] = []
    computations: dict[DimensionName, Callable[[], Any]] = {
        "keyword_match": lambda: match_keywords(resume_text, job_text, provider),
        "skills_alignment": lambda: match_skills(resume_text, job_text, provider),
        "formatting": lambda: check_formatting(resume_text, resume),
        "impact_metrics": lambda: detect_impact(resume_text),
        "readability": lambda: check_readability(resume_text),
    }

    sub_scores: dict[DimensionName, SubScore] = {}
    results: dict[DimensionName, Any | None] = {}
    for name, compute in computations.items():
        sub_scores[name], results[name] = _run_dimension(name, compute, warnings)

    breakdown = ScoreBreakdown(**sub_scores)
    overall = _finite(sum(sub.weighted_score for _, sub in breakdown.items()), 0.0, 100.0)
    return ATSResult(
        overall_score=overall,
        breakdown=breakdown,
        explanation=_explanation(overall, breakdown),
        recommendations=_recommendations(breakdown, results),
        warnings=warnings,
    )
