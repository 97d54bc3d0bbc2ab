from __future__ import annotations

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.schemas.feedback import FeedbackDetails, FeedbackStatistics, FeedbackSuggestion
from ats_engine.schemas.scoring import FormattingIssue, KeywordHit

from .rules import OverusedWord, QuantificationReport, VerbHit

NO_ISSUES_SUMMARY = "Your resume looks great! No issues were detected against this job description."


def _join(terms: list[str], limit: int = 8) -> str:
    shown = terms[:limit]
    text = ", ".join(shown)
    if len(terms) > limit:
        text += f" and {len(terms) - limit} more"
    return text


def missing_resume_text() -> FeedbackSuggestion:
    return FeedbackSuggestion(
        category="input",
        severity="critical",
        title="Resume text is missing",
        message="No resume text was provided, so nothing could be analyzed.",
        suggestion="Paste or upload your resume to get feedback.",
    )


def missing_job_text() -> FeedbackSuggestion:
    return FeedbackSuggestion(
        category="input",
        severity="warning",
        title="Job description is missing or too short",
        message="Keyword feedback needs the full job description you are applying for.",
        suggestion="Paste the full job description to see which keywords you are missing.",
    )


def critical_keywords(hits: list[KeywordHit]) -> FeedbackSuggestion:
    terms = [hit.term for hit in hits]
    return FeedbackSuggestion(
        category="missing_keywords",
        severity="critical",
        title=f"Missing {len(terms)} critical keyword{'s' if len(terms) != 1 else ''}",
        message=f"The job description emphasizes terms your resume never mentions: {_join(terms)}.",
        suggestion="Work these keywords into your summary, skills and experience bullets where they truthfully apply.",
        keywords=terms,
    )


def important_keywords(hits: list[KeywordHit]) -> FeedbackSuggestion:
    terms = [hit.term for hit in hits]
    return FeedbackSuggestion(
        category="missing_keywords",
        severity="warning",
        title=f"Missing {len(terms)} important keyword{'s' if len(terms) != 1 else ''}",
        message=f"These terms appear more than once in the job description: {_join(terms)}.",
        suggestion="Add the ones that match your experience, ideally with a concrete example.",
        keywords=terms,
    )


def weak_verbs(hits: list[VerbHit]) -> FeedbackSuggestion:
    limit = int(get_scoring_value("feedback.max_verb_examples", 5))
    verbs = sorted({hit.verb for hit in hits})
    replacements = sorted({suggestion for hit in hits for suggestion in hit.suggestions})
    return FeedbackSuggestion(
        category="action_verbs",
        severity="warning",
        title="Replace weak action verbs",
        message=f"{len(hits)} statement{'s' if len(hits) != 1 else ''} open with passive or vague verbs ({', '.join(verbs)}).",
        suggestion=f"Start with verbs that show ownership, such as {', '.join(replacements[:6])}.",
        weak_verbs=verbs,
        examples=[hit.context for hit in hits[:limit]],
    )


def medium_verbs(hits: list[VerbHit]) -> FeedbackSuggestion:
    limit = int(get_scoring_value("feedback.max_verb_examples", 5))
    verbs = sorted({hit.verb for hit in hits})
    replacements = sorted({suggestion for hit in hits for suggestion in hit.suggestions})
    return FeedbackSuggestion(
        category="action_verbs",
        severity="improvement",
        title="Strengthen common action verbs",
        message=f"Verbs like {', '.join(verbs)} are fine but overused in resumes.",
        suggestion=f"Consider more specific alternatives: {', '.join(replacements[:6])}.",
        weak_verbs=verbs,
        examples=[hit.context for hit in hits[:limit]],
    )


def unquantified_bullets(report: QuantificationReport) -> FeedbackSuggestion:
    limit = int(get_scoring_value("feedback.max_unquantified_examples", 3))
    count = len(report.unquantified)
    rate = report.rate or 0.0
    return FeedbackSuggestion(
        category="quantification",
        severity="warning",
        title="Quantify your achievements",
        message=(
            f"{count} achievement statement{'s' if count != 1 else ''} lack numbers; "
            f"only {round(rate * 100)}% of your accomplishments are quantified."
        ),
        suggestion="Add a number to each accomplishment: percentages, revenue, time saved, users served or team size.",
        examples=report.unquantified[:limit],
    )


def no_measurable_results() -> FeedbackSuggestion:
    return FeedbackSuggestion(
        category="quantification",
        severity="warning",
        title="No measurable results found",
        message="The resume does not show any quantified outcomes.",
        suggestion="Describe results with metrics, for example 'cut deployment time by 40%' or 'served 10,000 users'.",
    )


def overused_word(item: OverusedWord) -> FeedbackSuggestion:
    if item.generic:
        return FeedbackSuggestion(
            category="word_usage",
            severity="warning",
            title=f"'{item.word}' is repeated heavily",
            message=f"'{item.word}' makes up {round(item.ratio * 100)}% of all words ({item.count} uses).",
            suggestion="Vary your wording so the resume does not read as keyword-stuffed.",
            keywords=[item.word],
        )
    return FeedbackSuggestion(
        category="word_usage",
        severity="warning",
        title=f"Overused word: '{item.word}'",
        message=f"'{item.word}' appears {item.count} times and is a common resume cliche.",
        suggestion=f"Try alternatives such as {', '.join(item.alternatives)}.",
        keywords=[item.word],
        examples=list(item.alternatives),
    )


def formatting_violation(issue: FormattingIssue) -> FeedbackSuggestion:
    title = issue.code.replace("_", " ").capitalize()
    return FeedbackSuggestion(
        category="formatting",
        severity=issue.severity,
        title=title,
        message=issue.message,
        suggestion=issue.suggestion,
    )


def build_summary(statistics: FeedbackStatistics, details: FeedbackDetails) -> str:
    if statistics.total == 0:
        return NO_ISSUES_SUMMARY

    parts = []
    if statistics.critical:
        parts.append(f"{statistics.critical} critical issue{'s' if statistics.critical != 1 else ''}")
    if statistics.warning:
        parts.append(f"{statistics.warning} warning{'s' if statistics.warning != 1 else ''}")
    if statistics.improvement:
        parts.append(f"{statistics.improvement} improvement{'s' if statistics.improvement != 1 else ''}")
    summary = f"Found {statistics.total} suggestion{'s' if statistics.total != 1 else ''}: {', '.join(parts)}."

    highlights: list[str] = []
    if details.missing_keyword_count:
        highlights.append(
            f"You are missing {details.missing_keyword_count} important keyword"
            f"{'s' if details.missing_keyword_count != 1 else ''} from the job description."
        )
    if details.quantification_rate is not None and details.quantification_rate < 0.5:
        highlights.append(
            f"Only {round(details.quantification_rate * 100)}% of your achievements include measurable results."
        )
    if not highlights and details.formatting_violation_count:
        highlights.append(
            f"{details.formatting_violation_count} formatting issue"
            f"{'s' if details.formatting_violation_count != 1 else ''} may affect ATS parsing."
        )
    if highlights:
        summary = f"{summary} {' '.join(highlights[:2])}"
    return summary
