from __future__ import annotations

import re

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.schemas.scoring import (
    ImpactBreakdown,
    ImpactMetric,
    ImpactMetricType,
    ImpactResult,
    ImpactStatement,
)

_NUMBER = r"(\d[\d,]*(?:\.\d+)?)"
_MAGNITUDE = r"([kKmMbB](?:n|illion)?\b)?"
_COUNT_NOUNS = (
    r"users?|customers?|clients?|requests?|transactions?|orders?|accounts?|projects?|"
    r"applications?|records?|visitors?|subscribers?|downloads?|deals?|leads?|tickets?|"
    r"services?|servers?|employees?|students?|stores?|locations?|sites?|products?|"
    r"members?|patients?|partners?|vendors?|events?|queries|calls|releases?|deployments?"
)
_TEAM_NOUNS = (
    r"people|engineers?|developers?|members?|employees?|analysts?|designers?|"
    r"direct reports|reports|interns|contractors|specialists|professionals|staff"
)

# Earlier patterns claim their span first, so "reduced latency by 40%" is one
# time metric rather than a time metric plus a percentage.
_METRIC_PATTERNS: tuple[tuple[ImpactMetricType, re.Pattern[str]], ...] = (
    (
        "time",
        re.compile(
            r"\b(?:time|times|latency|downtime|turnaround|runtime|lead time|cycle time|load time|"
            r"response time|build time|processing time)\b[^.\n]{0,40}?\bby\s+"
            + _NUMBER
            + r"\s*(%|percent\b|x\b|hours?\b|hrs?\b|minutes?\b|mins?\b|seconds?\b|ms\b|days?\b|weeks?\b)",
            re.IGNORECASE,
        ),
    ),
    (
        "time",
        re.compile(
            r"\b(?:saved|saving|saves|reduced|cut|shortened|eliminated)\s+(?:[\w-]+\s+){0,3}?"
            + _NUMBER
            + r"\+?\s*(hours?|hrs|minutes?|mins|days?|weeks?|months?)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "scale",
        re.compile(
            r"\b(?:team|group|department|organization|squad|staff)\s+of\s+"
            + _NUMBER
            + r"\+?\s*(?:[\w-]+\s+)?(?:"
            + _TEAM_NOUNS
            + r")?",
            re.IGNORECASE,
        ),
    ),
    (
        "scale",
        re.compile(r"\b" + _NUMBER + r"[\s-](?:person|member|engineer|developer)\s+team\b", re.IGNORECASE),
    ),
    (
        "scale",
        re.compile(
            r"\b(?:led|managed|mentored|supervised|coached|hired|directed|oversaw)\s+"
            + _NUMBER
            + r"\+?\s+(?:[\w-]+\s+)?(?:"
            + _TEAM_NOUNS
            + r")\b",
            re.IGNORECASE,
        ),
    ),
    (
        "currency",
        re.compile(r"[$€£]\s?" + _NUMBER + r"\s*" + _MAGNITUDE, re.IGNORECASE),
    ),
    (
        "count",
        re.compile(
            r"(?<![\w.$€£])"
            + _NUMBER
            + r"\s*"
            + _MAGNITUDE
            + r"\+?\s*(?:(?:daily|monthly|weekly|annual|active|concurrent|new|unique|paying|enterprise)\s+){0,2}(?:"
            + _COUNT_NOUNS
            + r")\b",
            re.IGNORECASE,
        ),
    ),
    (
        "percentage",
        re.compile(r"(?<![\w.])" + _NUMBER + r"\s*(?:%|percent\b)", re.IGNORECASE),
    ),
)

_IMPACT_STATEMENT_RE = re.compile(
    r"\b(?:achieved|accomplished|resulted in|resulting in|leading to|led to|contributed to|"
    r"enabled|exceeded|surpassed|earned|awarded|recognized for)\b[^.\n]{10,100}",
    re.IGNORECASE,
)
_HAS_METRIC_RE = re.compile(r"\d|%|[$€£]")
_MULTIPLIERS = {"k": 1_000.0, "m": 1_000_000.0, "b": 1_000_000_000.0}


def _parse_value(number: str, magnitude: str | None) -> float | None:
    try:
        value = float(number.replace(",", ""))
    except ValueError:
        return None
    if magnitude:
        value *= _MULTIPLIERS.get(magnitude[0].lower(), 1.0)
    return value


def _is_high_magnitude(metric_type: ImpactMetricType, value: float | None, unit: str | None) -> bool:
    if value is None:
        return False
    if metric_type == "percentage":
        return value >= float(get_scoring_value("impact.high_percentage", 20))
    if metric_type == "time":
        return bool(unit) and unit.lower() in {"%", "percent", "x"} and value >= float(
            get_scoring_value("impact.high_percentage", 20)
        )
    if metric_type == "currency":
        return value >= float(get_scoring_value("impact.high_currency", 10000))
    if metric_type == "count":
        return value >= float(get_scoring_value("impact.high_count", 1000))
    return False


def _overlaps(span: tuple[int, int], claimed: list[tuple[int, int]]) -> bool:
    start, end = span
    return any(start < other_end and other_start < end for other_start, other_end in claimed)


def find_metrics(text: str) -> list[ImpactMetric]:
    claimed: list[tuple[int, int]] = []
    found: list[tuple[int, ImpactMetric]] = []
    for metric_type, pattern in _METRIC_PATTERNS:
        for match in pattern.finditer(text):
            span = match.span()
            if _overlaps(span, claimed):
                continue
            claimed.append(span)
            groups = match.groups()
            number = groups[0] if groups else None
            extra = groups[1] if len(groups) > 1 else None
            magnitude = extra if metric_type in {"currency", "count"} else None
            value = _parse_value(number, magnitude) if number else None
            found.append(
                (
                    span[0],
                    ImpactMetric(
                        type=metric_type,
                        text=match.group(0).strip(),
                        value=value,
                        high_magnitude=_is_high_magnitude(metric_type, value, extra),
                    ),
                )
            )
    found.sort(key=lambda item: item[0])
    return [metric for _, metric in found]


def find_impact_statements(text: str) -> list[ImpactStatement]:
    seen: set[str] = set()
    statements: list[ImpactStatement] = []
    for match in _IMPACT_STATEMENT_RE.finditer(text):
        statement = match.group(0).strip()
        key = statement.lower()
        if key in seen:
            continue
        seen.add(key)
        statements.append(ImpactStatement(text=statement, has_metric=bool(_HAS_METRIC_RE.search(statement))))
    return statements


def detect_impact(text: str | None) -> ImpactResult:
    content = text or ""
    if not content.strip():
        return ImpactResult()

    metrics = find_metrics(content)
    statements = find_impact_statements(content)
    metric_types = sorted({metric.type for metric in metrics})

    metric_cap = float(get_scoring_value("impact.metric_points", 50))
    metric_saturation = float(get_scoring_value("impact.metric_saturation", 10))
    diversity_cap = float(get_scoring_value("impact.diversity_points", 20))
    per_type = float(get_scoring_value("impact.diversity_per_type", 5))
    statement_cap = float(get_scoring_value("impact.statement_points", 20))
    statement_saturation = float(get_scoring_value("impact.statement_saturation", 5))
    quality_cap = float(get_scoring_value("impact.quality_points", 10))
    per_quality = float(get_scoring_value("impact.quality_per_metric", 2))

    metric_points = min(metric_cap, len(metrics) / metric_saturation * metric_cap)
    diversity_points = min(diversity_cap, len(metric_types) * per_type)
    statement_points = min(statement_cap, len(statements) / statement_saturation * statement_cap)
    quality_points = min(quality_cap, sum(1 for metric in metrics if metric.high_magnitude) * per_quality)
    total = metric_points + diversity_points + statement_points + quality_points

    return ImpactResult(
        score=max(0.0, min(1.0, total / 100.0)),
        metrics=metrics,
        impact_statements=statements,
        details=ImpactBreakdown(
            metric_points=round(metric_points, 2),
            diversity_points=round(diversity_points, 2),
            statement_points=round(statement_points, 2),
            quality_points=round(quality_points, 2),
            metric_types=metric_types,
        ),
    )
