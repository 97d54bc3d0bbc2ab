from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

Severity = Literal["critical", "warning", "improvement"]
SkillCategory = Literal["hard", "soft", "tool"]
ImpactMetricType = Literal["percentage", "currency", "count", "time", "scale"]
DimensionName = Literal[
    "keyword_match",
    "skills_alignment",
    "formatting",
    "impact_metrics",
    "readability",
]


class KeywordHit(BaseModel):
    term: str
    job_count: int = Field(default=0, ge=0)
    resume_count: int = Field(default=0, ge=0)
    weight: float = 0.0
    category: SkillCategory | None = None


class StuffingReport(BaseModel):
    is_stuffing: bool = False
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    penalty: float = Field(default=0.0, ge=0.0, le=1.0)
    terms: list[str] = Field(default_factory=list)
    per_100_words: dict[str, float] = Field(default_factory=dict)


class KeywordMatchResult(BaseModel):
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    matched_keywords: list[KeywordHit] = Field(default_factory=list)
    missing_keywords: list[KeywordHit] = Field(default_factory=list)
    similarity: float = Field(default=0.0, ge=0.0, le=1.0)
    coverage: float = Field(default=0.0, ge=0.0, le=1.0)
    stuffing: StuffingReport = Field(default_factory=StuffingReport)


class SkillCategoryMatch(BaseModel):
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    required: list[str] = Field(default_factory=list)
    found: list[str] = Field(default_factory=list)
    matched: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    extra: list[str] = Field(default_factory=list)


class SkillsMatchResult(BaseModel):
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    hard_skills: SkillCategoryMatch = Field(default_factory=SkillCategoryMatch)
    soft_skills: SkillCategoryMatch = Field(default_factory=SkillCategoryMatch)
    tools: SkillCategoryMatch = Field(default_factory=SkillCategoryMatch)
    details: dict[str, int] = Field(default_factory=dict)


class FormattingIssue(BaseModel):
    code: str
    severity: Severity
    message: str
    suggestion: str
    deduction: float = Field(default=0.0, ge=0.0)


class FormattingResult(BaseModel):
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    issues: list[FormattingIssue] = Field(default_factory=list)
    warnings: list[FormattingIssue] = Field(default_factory=list)
    details: dict[str, int] = Field(default_factory=dict)

    @property
    def violations(self) -> list[FormattingIssue]:
        return [*self.issues, *self.warnings]


class ImpactMetric(BaseModel):
    type: ImpactMetricType
    text: str
    value: float | None = None
    high_magnitude: bool = False


class ImpactStatement(BaseModel):
    text: str
    has_metric: bool = False


class ImpactBreakdown(BaseModel):
    metric_points: float = 0.0
    diversity_points: float = 0.0
    statement_points: float = 0.0
    quality_points: float = 0.0
    metric_types: list[ImpactMetricType] = Field(default_factory=list)


class ImpactResult(BaseModel):
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    metrics: list[ImpactMetric] = Field(default_factory=list)
    impact_statements: list[ImpactStatement] = Field(default_factory=list)
    details: ImpactBreakdown = Field(default_factory=ImpactBreakdown)


class ReadabilityIssue(BaseModel):
    code: str
    message: str
    deduction: float = Field(default=0.0, ge=0.0)


class ReadabilityResult(BaseModel):
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    word_count: int = Field(default=0, ge=0)
    sentence_count: int = Field(default=0, ge=0)
    avg_sentence_length: float = Field(default=0.0, ge=0.0)
    issues: list[ReadabilityIssue] = Field(default_factory=list)
    warnings: list[ReadabilityIssue] = Field(default_factory=list)
    details: dict[str, float] = Field(default_factory=dict)


class _DimensionDetails(BaseModel):
    failed: bool = False
    error: str | None = None


class KeywordMatchDetails(_DimensionDetails):
    kind: Literal["keyword_match"] = "keyword_match"
    similarity: float = 0.0
    coverage: float = 0.0
    matched_keywords: list[str] = Field(default_factory=list)
    missing_keywords: list[str] = Field(default_factory=list)
    stuffing_detected: bool = False
    stuffed_terms: list[str] = Field(default_factory=list)


class SkillsAlignmentDetails(_DimensionDetails):
    kind: Literal["skills_alignment"] = "skills_alignment"
    hard_score: float = 0.0
    soft_score: float = 0.0
    tools_score: float = 0.0
    matched_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)


class FormattingDetails(_DimensionDetails):
    kind: Literal["formatting"] = "formatting"
    issues: list[FormattingIssue] = Field(default_factory=list)
    warnings: list[FormattingIssue] = Field(default_factory=list)


class ImpactMetricsDetails(_DimensionDetails):
    kind: Literal["impact_metrics"] = "impact_metrics"
    metric_count: int = 0
    statement_count: int = 0
    metric_types: list[ImpactMetricType] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)


class ReadabilityDetails(_DimensionDetails):
    kind: Literal["readability"] = "readability"
    word_count: int = 0
    avg_sentence_length: float = 0.0
    issues: list[str] = Field(default_factory=list)


DimensionDetails = Annotated[
    Union[
        KeywordMatchDetails,
        SkillsAlignmentDetails,
        FormattingDetails,
        ImpactMetricsDetails,
        ReadabilityDetails,
    ],
    Field(discriminator="kind"),
]


class SubScore(BaseModel):
    score: float = Field(ge=0.0, le=100.0)
    weight: float = Field(ge=0.0, le=100.0)
    weighted_score: float = Field(ge=0.0, le=100.0)
    details: DimensionDetails


class ScoreBreakdown(BaseModel):
    keyword_match: SubScore
    skills_alignment: SubScore
    formatting: SubScore
    impact_metrics: SubScore
    readability: SubScore

    def items(self) -> list[tuple[str, SubScore]]:
        return [
            ("keyword_match", self.keyword_match),
            ("skills_alignment", self.skills_alignment),
            ("formatting", self.formatting),
            ("impact_metrics", self.impact_metrics),
            ("readability", self.readability),
        ]


class ATSResult(BaseModel):
    overall_score: float = Field(ge=0.0, le=100.0)
    breakdown: ScoreBreakdown
    explanation: str
    recommendations: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def display_score(self) -> int:
        return int(round(self.overall_score))
