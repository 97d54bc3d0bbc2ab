from __future__ import annotations

import re
from dataclasses import dataclass

from ats_engine.schemas.scoring import SkillCategory, SkillCategoryMatch, SkillsMatchResult
from ats_engine.taxonomy import TaxonomyProvider, get_default_taxonomy_provider

CATEGORY_WEIGHTS: dict[SkillCategory, float] = {"hard": 0.6, "soft": 0.25, "tool": 0.15}

_RAW_TOKEN_RE = re.compile(r"\.?[A-Za-z0-9][A-Za-z0-9+#./-]*")
_TOKEN_TRIM = ".-/"
_MAX_PHRASE_TOKENS = 3
# Short names that are also ordinary words only count in their proper spelling.
_CASE_SENSITIVE_SKILLS = {"go": "Go", "r": "R", "c": "C"}


@dataclass(slots=True)
class TermMention:
    text: str
    skill_id: str | None = None


def _raw_tokens(text: str) -> list[str]:
    tokens: list[str] = []
    for raw in _RAW_TOKEN_RE.findall(text):
        token = raw.rstrip(_TOKEN_TRIM)
        if token:
            tokens.append(token)
    return tokens


def _lookup(phrase: str, raw: str, provider: TaxonomyProvider) -> str | None:
    _, skill_id = provider.normalize_skill(phrase)
    if skill_id is None:
        return None
    required = _CASE_SENSITIVE_SKILLS.get(phrase)
    if required is not None and raw != required:
        return None
    return skill_id


def scan_terms(text: str | None, provider: TaxonomyProvider | None = None) -> list[TermMention]:
    """Tokenize text, merging known multi-word skills into one mention (longest match wins)."""
    if not text:
        return []
    provider = provider or get_default_taxonomy_provider()
    raw_tokens = _raw_tokens(text)
    lowered = [token.lower() for token in raw_tokens]

    mentions: list[TermMention] = []
    index = 0
    while index < len(raw_tokens):
        matched = False
        for size in range(min(_MAX_PHRASE_TOKENS, len(raw_tokens) - index), 0, -1):
            phrase = " ".join(lowered[index : index + size])
            raw = " ".join(raw_tokens[index : index + size])
            skill_id = _lookup(phrase, raw, provider)
            if skill_id is not None:
                mentions.append(TermMention(text=phrase, skill_id=skill_id))
                index += size
                matched = True
                break
        if matched:
            continue

        token = lowered[index]
        if "/" in token:
            # "JavaScript/TypeScript" lists two skills in one token.
            for part_raw in raw_tokens[index].split("/"):
                part = part_raw.lower()
                if part:
                    mentions.append(TermMention(text=part, skill_id=_lookup(part, part_raw, provider)))
        else:
            mentions.append(TermMention(text=token))
        index += 1
    return mentions


def extract_skills(
    text: str | None,
    provider: TaxonomyProvider | None = None,
) -> dict[SkillCategory, set[str]]:
    provider = provider or get_default_taxonomy_provider()
    found: dict[SkillCategory, set[str]] = {"hard": set(), "soft": set(), "tool": set()}
    for mention in scan_terms(text, provider):
        if mention.skill_id is None:
            continue
        category = provider.category(mention.skill_id)
        if category is not None:
            found[category].add(mention.skill_id)
    return found


def normalize_skill(raw: str, provider: TaxonomyProvider | None = None) -> str:
    """Display name of a skill spelling ("JS" -> "JavaScript"); unknown input is returned trimmed."""
    provider = provider or get_default_taxonomy_provider()
    _, skill_id = provider.normalize_skill(raw)
    if skill_id is None:
        return raw.strip()
    return provider.label(skill_id)


def categorize_skill(raw: str, provider: TaxonomyProvider | None = None) -> SkillCategory | None:
    provider = provider or get_default_taxonomy_provider()
    _, skill_id = provider.normalize_skill(raw)
    if skill_id is None:
        return None
    return provider.category(skill_id)


def _labels(skill_ids: set[str], provider: TaxonomyProvider) -> list[str]:
    return sorted((provider.label(skill_id) for skill_id in skill_ids), key=str.lower)


def _match_category(
    found: set[str],
    required: set[str],
    provider: TaxonomyProvider,
) -> SkillCategoryMatch:
    matched = found & required
    if not required:
        score = 1.0
    elif not found:
        score = 0.0
    else:
        score = len(matched) / len(required)
    return SkillCategoryMatch(
        score=score,
        required=_labels(required, provider),
        found=_labels(found, provider),
        matched=_labels(matched, provider),
        missing=_labels(required - found, provider),
        extra=_labels(found - required, provider),
    )


def match_skills(
    resume_text: str | None,
    job_text: str | None,
    provider: TaxonomyProvider | None = None,
) -> SkillsMatchResult:
    if not (resume_text or "").strip() or not (job_text or "").strip():
        return SkillsMatchResult()

    provider = provider or get_default_taxonomy_provider()
    resume_skills = extract_skills(resume_text, provider)
    job_skills = extract_skills(job_text, provider)

    hard = _match_category(resume_skills["hard"], job_skills["hard"], provider)
    soft = _match_category(resume_skills["soft"], job_skills["soft"], provider)
    tools = _match_category(resume_skills["tool"], job_skills["tool"], provider)

    score = (
        CATEGORY_WEIGHTS["hard"] * hard.score
        + CATEGORY_WEIGHTS["soft"] * soft.score
        + CATEGORY_WEIGHTS["tool"] * tools.score
    )
    required_count = sum(len(skills) for skills in job_skills.values())
    matched_count = len(hard.matched) + len(soft.matched) + len(tools.matched)
    return SkillsMatchResult(
        score=max(0.0, min(1.0, score)),
        hard_skills=hard,
        soft_skills=soft,
        tools=tools,
        details={
            "job_skill_count": required_count,
            "resume_skill_count": sum(len(skills) for skills in resume_skills.values()),
            "matched_count": matched_count,
            "missing_count": required_count - matched_count,
        },
    )
