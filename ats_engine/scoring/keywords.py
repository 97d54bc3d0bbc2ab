from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.schemas.scoring import KeywordHit, KeywordMatchResult, StuffingReport
from ats_engine.semantic.text import STOPWORDS, tokenize
from ats_engine.semantic.tfidf import compute_idf, compute_tf, document_similarity
from ats_engine.taxonomy import TaxonomyProvider, get_default_taxonomy_provider

from .skills import scan_terms


def keyword_terms(text: str | None, provider: TaxonomyProvider | None = None) -> list[str]:
    """Content terms of a text, with skill spellings collapsed to their canonical id."""
    min_length = int(get_scoring_value("keyword_match.min_term_length", 3))
    terms: list[str] = []
    for mention in scan_terms(text, provider):
        if mention.skill_id is not None:
            terms.append(mention.skill_id)
            continue
        token = mention.text
        if token in STOPWORDS or len(token) < min_length or token[0].isdigit():
            continue
        terms.append(token)
    return terms


def rank_job_keywords(
    job_terms: Sequence[str],
    resume_terms: Sequence[str],
    *,
    limit: int | None = None,
) -> list[tuple[str, float]]:
    """Top job terms by TF * (1 + IDF) against the two-document corpus.

    The add-one keeps terms both sides share in the ranking (their IDF is 0)
    while still lifting terms only the posting uses.
    """
    if not job_terms:
        return []
    top_n = limit if limit is not None else int(get_scoring_value("keyword_match.top_keywords", 25))
    tf = compute_tf(job_terms)
    idf = compute_idf([set(job_terms), set(resume_terms)])
    weighted = [(term, frequency * (1.0 + idf.get(term, 0.0))) for term, frequency in tf.items()]
    weighted.sort(key=lambda item: (-item[1], item[0]))
    return weighted[:top_n]


def detect_keyword_stuffing(terms: Sequence[str], total_words: int) -> StuffingReport:
    if not terms or total_words <= 0:
        return StuffingReport()

    min_occurrences = int(get_scoring_value("keyword_match.stuffing.min_occurrences", 10))
    max_per_100 = float(get_scoring_value("keyword_match.stuffing.max_per_100_words", 5.0))
    saturation = float(get_scoring_value("keyword_match.stuffing.saturation_ratio", 0.2))
    max_penalty = float(get_scoring_value("keyword_match.stuffing.max_penalty", 0.2))

    flagged: dict[str, float] = {}
    excess_ratio = 0.0
    for term, count in Counter(terms).most_common():
        per_100 = count / total_words * 100.0
        if count >= min_occurrences and per_100 >= max_per_100:
            flagged[term] = round(per_100, 2)
            excess_ratio += count / total_words

    if not flagged:
        return StuffingReport()

    score = min(1.0, excess_ratio / saturation) if saturation > 0 else 1.0
    return StuffingReport(
        is_stuffing=True,
        score=score,
        penalty=min(1.0, score * max_penalty),
        terms=list(flagged),
        per_100_words=flagged,
    )


def match_keywords(
    resume_text: str | None,
    job_text: str | None,
    provider: TaxonomyProvider | None = None,
) -> KeywordMatchResult:
    provider = provider or get_default_taxonomy_provider()
    resume_terms = keyword_terms(resume_text, provider)
    job_terms = keyword_terms(job_text, provider)
    if not resume_terms or not job_terms:
        return KeywordMatchResult()

    similarity = document_similarity(resume_terms, job_terms)
    job_counts = Counter(job_terms)
    resume_counts = Counter(resume_terms)

    matched: list[KeywordHit] = []
    missing: list[KeywordHit] = []
    for term, weight in rank_job_keywords(job_terms, resume_terms):
        hit = KeywordHit(
            term=provider.label(term),
            job_count=job_counts[term],
            resume_count=resume_counts.get(term, 0),
            weight=round(weight, 6),
            category=provider.category(term),
        )
        if hit.resume_count > 0:
            matched.append(hit)
        else:
            missing.append(hit)

    total = len(matched) + len(missing)
    coverage = len(matched) / total if total else 0.0
    coverage_weight = float(get_scoring_value("keyword_match.coverage_weight", 0.7))
    similarity_weight = float(get_scoring_value("keyword_match.similarity_weight", 0.3))
    base = coverage_weight * coverage + similarity_weight * similarity

    stuffing = detect_keyword_stuffing(resume_terms, len(tokenize(resume_text)))
    score = base * (1.0 - stuffing.penalty)
    return KeywordMatchResult(
        score=max(0.0, min(1.0, score)),
        matched_keywords=matched,
        missing_keywords=missing,
        similarity=similarity,
        coverage=coverage,
        stuffing=stuffing,
    )
