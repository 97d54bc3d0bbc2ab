from __future__ import annotations

from collections import Counter

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.schemas.scoring import ReadabilityIssue, ReadabilityResult
from ats_engine.semantic.text import STOPWORDS, bullet_lines, count_section_headings, sentences, words


def _cfg(key: str, default: float) -> float:
    return float(get_scoring_value(f"readability.{key}", default))


def check_readability(text: str | None) -> ReadabilityResult:
    content = text or ""
    all_words = words(content)
    word_count = len(all_words)
    if word_count == 0:
        return ReadabilityResult()

    sentence_list = sentences(content)
    sentence_lengths = [len(words(sentence)) for sentence in sentence_list] or [word_count]
    avg_sentence_length = sum(sentence_lengths) / len(sentence_lengths)
    avg_word_length = sum(len(word) for word in all_words) / word_count
    section_count = count_section_headings(content)
    bullet_count = len(bullet_lines(content))

    issues: list[ReadabilityIssue] = []
    warnings: list[ReadabilityIssue] = []

    very_short = _cfg("very_short_words", 50)
    page_words = _cfg("page_words", 800)
    length_cap: float | None = None
    if word_count < very_short:
        length_cap = _cfg("very_short_cap", 40) * word_count / very_short
        issues.append(
            ReadabilityIssue(
                code="too_short",
                message=f"Only {word_count} words; a resume needs enough detail to be evaluated.",
                deduction=round(100.0 - length_cap, 2),
            )
        )
    elif word_count < _cfg("short_words", 200):
        issues.append(
            ReadabilityIssue(
                code="short",
                message=f"At {word_count} words the resume is brief; add detail on your experience.",
                deduction=_cfg("short_penalty", 15),
            )
        )
    elif word_count > 2 * page_words:
        issues.append(
            ReadabilityIssue(
                code="too_long",
                message=f"At {word_count} words the resume runs well past two pages; trim older or less relevant content.",
                deduction=_cfg("too_long_penalty", 15),
            )
        )
    elif word_count > page_words:
        issues.append(
            ReadabilityIssue(
                code="long",
                message=f"At {word_count} words the resume is longer than one page.",
                deduction=_cfg("long_penalty", 5),
            )
        )

    if avg_sentence_length > _cfg("sentence_issue_words", 25):
        issues.append(
            ReadabilityIssue(
                code="long_sentences_average",
                message=f"Sentences average {avg_sentence_length:.1f} words; aim for under 20.",
                deduction=_cfg("sentence_issue_penalty", 10),
            )
        )
    elif avg_sentence_length > _cfg("sentence_warning_words", 20):
        warnings.append(
            ReadabilityIssue(
                code="long_sentences_average",
                message=f"Sentences average {avg_sentence_length:.1f} words; shorter bullets scan better.",
            )
        )

    long_sentences = sum(1 for length in sentence_lengths if length > _cfg("long_sentence_words", 40))
    if long_sentences:
        issues.append(
            ReadabilityIssue(
                code="overlong_sentences",
                message=f"{long_sentences} sentence(s) exceed {int(_cfg('long_sentence_words', 40))} words.",
                deduction=min(
                    _cfg("long_sentence_max_penalty", 15),
                    long_sentences * _cfg("long_sentence_penalty", 5),
                ),
            )
        )

    if section_count < _cfg("min_section_headers", 2):
        issues.append(
            ReadabilityIssue(
                code="missing_sections",
                message="The resume lacks clear section headings.",
                deduction=_cfg("section_penalty", 10),
            )
        )

    if avg_word_length > _cfg("max_chars_per_word", 6.5):
        warnings.append(
            ReadabilityIssue(
                code="dense_vocabulary",
                message=f"Words average {avg_word_length:.1f} characters; prefer plain language.",
            )
        )

    min_repeat_length = int(_cfg("repeated_word_min_length", 5))
    repeated = [
        word
        for word, count in Counter(word.lower() for word in all_words).most_common()
        if count > _cfg("repeated_word_count", 10) and len(word) >= min_repeat_length and word not in STOPWORDS
    ]
    if repeated:
        warnings.append(
            ReadabilityIssue(
                code="repeated_words",
                message=f"Frequently repeated words: {', '.join(repeated[:5])}.",
            )
        )

    if bullet_count == 0 and word_count > 150:
        warnings.append(
            ReadabilityIssue(
                code="no_bullets",
                message="No bullet points found; bullets make experience easier to scan.",
            )
        )

    score = 100.0 - sum(issue.deduction for issue in issues if issue.code != "too_short")
    if length_cap is not None:
        score = min(score, length_cap)
    score = max(0.0, min(100.0, score))

    return ReadabilityResult(
        score=score / 100.0,
        word_count=word_count,
        sentence_count=len(sentence_list),
        avg_sentence_length=round(avg_sentence_length, 2),
        issues=issues,
        warnings=warnings,
        details={
            "avg_word_length": round(avg_word_length, 2),
            "bullet_count": float(bullet_count),
            "section_count": float(section_count),
            "long_sentence_count": float(long_sentences),
        },
    )
