from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Literal

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.schemas.scoring import KeywordHit, KeywordMatchResult, SkillsMatchResult
from ats_engine.semantic.text import STOPWORDS, bullet_lines, sentences, words

WEAK_VERBS: dict[str, list[str]] = {
    "worked": ["Executed", "Delivered", "Engineered"],
    "helped": ["Enabled", "Facilitated", "Supported"],
    "assisted": ["Partnered", "Contributed", "Collaborated"],
    "handled": ["Managed", "Resolved", "Directed"],
    "participated": ["Contributed", "Collaborated", "Drove"],
    "involved": ["Contributed", "Engaged", "Drove"],
    "responsible": ["Led", "Owned", "Directed"],
    "tasked": ["Owned", "Led", "Delivered"],
    "did": ["Executed", "Completed", "Performed"],
    "tried": ["Tested", "Piloted", "Experimented"],
    "used": ["Applied", "Leveraged", "Deployed"],
    "utilized": ["Applied", "Leveraged", "Deployed"],
    "dealt": ["Resolved", "Negotiated", "Addressed"],
    "got": ["Secured", "Earned", "Obtained"],
}

MEDIUM_VERBS: dict[str, list[str]] = {
    "managed": ["Directed", "Orchestrated", "Spearheaded"],
    "created": ["Designed", "Architected", "Launched"],
    "developed": ["Engineered", "Built", "Pioneered"],
    "improved": ["Optimized", "Accelerated", "Transformed"],
    "supported": ["Enabled", "Championed", "Strengthened"],
    "maintained": ["Sustained", "Hardened", "Modernized"],
    "coordinated": ["Orchestrated", "Aligned", "Directed"],
    "performed": ["Executed", "Delivered", "Conducted"],
    "completed": ["Delivered", "Finalized", "Shipped"],
    "made": ["Built", "Produced", "Crafted"],
}

OVERUSED_WORDS: dict[str, list[str]] = {
    "responsible": ["accountable", "in charge of", "owned"],
    "passionate": ["dedicated", "committed", "driven"],
    "motivated": ["driven", "determined", "ambitious"],
    "hardworking": ["diligent", "industrious", "persistent"],
    "dynamic": ["adaptable", "energetic", "versatile"],
    "synergy": ["collaboration", "alignment", "partnership"],
    "excellent": ["exceptional", "outstanding", "superior"],
    "various": ["multiple", "diverse", "several"],
    "successfully": ["(remove; show the result instead)"],
    "leveraged": ["applied", "used", "harnessed"],
    "innovative": ["novel", "inventive", "original"],
    "strategic": ["deliberate", "planned", "targeted"],
    "expert": ["specialist", "authority", "practitioner"],
    "team": ["group", "squad", "unit"],
    "great": ["significant", "substantial", "notable"],
    "detail-oriented": ["meticulous", "thorough", "precise"],
    "results-driven": ["(show the results with numbers instead)"],
}

_ACCOMPLISHMENT_START_RE = re.compile(
    r"^(?:built|led|delivered|optimized|designed|implemented|migrated|reduced|increased|"
    r"developed|created|launched|deployed|automated|architected|engineered|configured|"
    r"managed|directed|established|spearheaded|streamlined|scaled|integrated|refactored|"
    r"resolved|achieved|improved|accelerated|negotiated|mentored|coached|trained|"
    r"coordinated|transformed|executed|maintained|modernized|introduced|eliminated|"
    r"expanded|grew|generated|saved|drove|owned|shipped|worked|helped|assisted|handled|"
    r"supported|responsible)\b",
    re.IGNORECASE,
)
_QUANTIFIED_RE = re.compile(
    r"\d|%|[$€£]|\b(?:double[ds]?|triple[ds]?|half|halved|million|thousand|billion|dozens?|hundreds?)\b",
    re.IGNORECASE,
)

VerbStrength = Literal["weak", "medium"]


@dataclass(slots=True)
class VerbHit:
    verb: str
    strength: VerbStrength
    context: str
    suggestions: list[str] = field(default_factory=list)


@dataclass(slots=True)
class QuantificationReport:
    quantified: list[str] = field(default_factory=list)
    unquantified: list[str] = field(default_factory=list)

    @property
    def rate(self) -> float | None:
        total = len(self.quantified) + len(self.unquantified)
        if total == 0:
            return None
        return len(self.quantified) / total


@dataclass(slots=True)
class OverusedWord:
    word: str
    count: int
    ratio: float
    alternatives: list[str] = field(default_factory=list)
    generic: bool = False


@dataclass(slots=True)
class MissingKeywords:
    critical: list[KeywordHit] = field(default_factory=list)
    important: list[KeywordHit] = field(default_factory=list)


def _statement_units(text: str) -> list[str]:
    bullets = bullet_lines(text)
    if bullets:
        return bullets
    return sentences(text)


def _context(unit: str, limit: int = 80) -> str:
    clean = " ".join(unit.split())
    if len(clean) <= limit:
        return clean
    return clean[: limit - 3].rstrip() + "..."


def detect_missing_keywords(
    keyword_result: KeywordMatchResult,
    skills_result: SkillsMatchResult | None = None,
) -> MissingKeywords:
    critical_frequency = int(get_scoring_value("feedback.critical_keyword_frequency", 3))
    important_frequency = int(get_scoring_value("feedback.important_keyword_frequency", 2))
    limit = int(get_scoring_value("feedback.max_missing_keywords", 10))

    hits: dict[str, KeywordHit] = {hit.term.lower(): hit for hit in keyword_result.missing_keywords}
    if skills_result is not None:
        for label in skills_result.hard_skills.missing:
            hits.setdefault(label.lower(), KeywordHit(term=label, job_count=1, category="hard"))

    def is_critical(hit: KeywordHit) -> bool:
        return hit.job_count >= critical_frequency or hit.category == "hard"

    ranked = sorted(
        hits.values(),
        key=lambda hit: (not is_critical(hit), -hit.job_count, -hit.weight, hit.term.lower()),
    )[:limit]
    report = MissingKeywords()
    for hit in ranked:
        if is_critical(hit):
            report.critical.append(hit)
        elif hit.job_count >= important_frequency:
            report.important.append(hit)
    return report


def detect_weak_action_verbs(text: str | None) -> list[VerbHit]:
    if not text:
        return []
    weak_window = int(get_scoring_value("feedback.weak_verb_window", 5))
    medium_window = int(get_scoring_value("feedback.medium_verb_window", 2))

    hits: list[VerbHit] = []
    for unit in _statement_units(text):
        leading = [word.lower() for word in words(unit)[:weak_window]]
        weak = next((word for word in leading if word in WEAK_VERBS), None)
        if weak is not None:
            hits.append(VerbHit(verb=weak, strength="weak", context=_context(unit), suggestions=list(WEAK_VERBS[weak])))
            continue
        medium = next((word for word in leading[:medium_window] if word in MEDIUM_VERBS), None)
        if medium is not None:
            hits.append(
                VerbHit(verb=medium, strength="medium", context=_context(unit), suggestions=list(MEDIUM_VERBS[medium]))
            )
    return hits


def detect_unquantified_bullets(text: str | None) -> QuantificationReport:
    report = QuantificationReport()
    if not text:
        return report
    for unit in _statement_units(text):
        if len(words(unit)) < 4 or not _ACCOMPLISHMENT_START_RE.match(unit):
            continue
        if _QUANTIFIED_RE.search(unit):
            report.quantified.append(unit)
        else:
            report.unquantified.append(unit)
    return report


def detect_overused_words(text: str | None) -> list[OverusedWord]:
    all_words = [word.lower() for word in words(text)]
    total = len(all_words)
    if total == 0:
        return []
    min_count = int(get_scoring_value("feedback.overused_min_count", 3))
    min_ratio = float(get_scoring_value("feedback.overused_min_ratio", 0.02))
    generic_ratio = float(get_scoring_value("feedback.generic_word_ratio", 0.1))

    counts = Counter(all_words)
    flagged: list[OverusedWord] = []
    for word, count in counts.most_common():
        ratio = count / total
        if word in OVERUSED_WORDS:
            if count >= min_count or (count >= 2 and ratio >= min_ratio):
                flagged.append(
                    OverusedWord(word=word, count=count, ratio=ratio, alternatives=list(OVERUSED_WORDS[word]))
                )
        elif ratio > generic_ratio and count >= min_count and len(word) >= 4 and word not in STOPWORDS:
            flagged.append(OverusedWord(word=word, count=count, ratio=ratio, generic=True))
    return flagged
