from __future__ import annotations

import re

_TOKEN_RE = re.compile(r"[a-z0-9][a-z0-9+#./-]*")
_WORD_RE = re.compile(r"[A-Za-z][A-Za-z'-]*")
_TOKEN_TRIM = ".-/"

BULLET_CHARS = "•◦▪▫●○■□◆◇▶►-–—*·"
_BULLET_PATTERN = re.compile(rf"^\s*(?:[{re.escape(BULLET_CHARS)}]|(?:\d+[\.\)]))\s+")
EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_RE = re.compile(
    r"(?:\+?\d{1,3}[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}\b"
    r"|\+\d{1,3}[\s.-]?\d[\d\s.-]{6,}\d"
)
_SECTION_RE = re.compile(
    r"^\s*(summary|professional summary|objective|profile|experience|work experience|"
    r"professional experience|employment history|skills|technical skills|education|"
    r"projects|certifications|awards|publications|volunteer(?: experience)?)\s*:?\s*$",
    re.IGNORECASE,
)
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")

STOPWORDS = frozenset(
    {
        # Articles, pronouns, determiners
        "a", "an", "the", "and", "or", "for", "with", "that", "this", "your", "you", "from",
        "into", "our", "are", "its", "his", "her", "their", "they", "them", "these", "those",
        "which", "what", "who", "whom", "whose", "where", "when", "how", "why", "each",
        "every", "both", "few", "many", "much", "some", "any", "all", "most", "other",
        "such", "than", "then", "we", "us", "i", "me", "my", "it", "he", "she", "s",
        # Modals and auxiliaries
        "is", "be", "am", "will", "must", "have", "has", "had", "can", "could", "would",
        "should", "shall", "may", "might", "been", "being", "was", "were", "do", "did",
        "does", "not", "no", "also", "too", "very", "just", "only", "even", "still", "yet",
        # Prepositions and conjunctions
        "to", "of", "in", "on", "at", "by", "as", "if", "so", "but", "nor", "about",
        "above", "after", "before", "between", "during", "under", "over", "through",
        "while", "since", "because", "although", "though", "whether", "here", "there",
        "per", "via", "etc", "e.g", "i.e",
        # Posting filler
        "job", "role", "position", "candidate", "looking", "seeking", "join", "plus",
        "years", "year", "including", "within", "across", "well", "ideal", "new",
        "required", "requirements", "preferred", "responsibilities", "qualifications",
    }
)


def tokenize(text: str | None) -> list[str]:
    """Lower-case terms, keeping the punctuation skill names rely on (c++, node.js, ci/cd)."""
    if not text:
        return []
    tokens: list[str] = []
    for raw in _TOKEN_RE.findall(text.lower()):
        token = raw.rstrip(_TOKEN_TRIM)
        if token:
            tokens.append(token)
    return tokens


def content_terms(text: str | None, *, min_length: int = 3) -> list[str]:
    return [
        token
        for token in tokenize(text)
        if token not in STOPWORDS and len(token) >= min_length and not token[0].isdigit()
    ]


def words(text: str | None) -> list[str]:
    if not text:
        return []
    return _WORD_RE.findall(text)


def lines(text: str | None) -> list[str]:
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]


def sentences(text: str | None) -> list[str]:
    """Split on sentence punctuation and on line breaks, since bullets rarely end with a period."""
    result: list[str] = []
    for line in lines(text):
        for part in _SENTENCE_SPLIT_RE.split(strip_bullet_prefix(line)):
            if words(part):
                result.append(part.strip())
    return result


def is_bullet_like(line: str) -> bool:
    return bool(_BULLET_PATTERN.match(line))


def strip_bullet_prefix(line: str) -> str:
    return _BULLET_PATTERN.sub("", line).strip()


def bullet_lines(text: str | None) -> list[str]:
    return [strip_bullet_prefix(line) for line in lines(text) if is_bullet_like(line)]


def normalize_line(line: str) -> str:
    return re.sub(r"\s+", " ", line).strip()


def is_section_heading(line: str) -> bool:
    stripped = normalize_line(line)
    if not stripped:
        return False
    if _SECTION_RE.match(stripped):
        return True
    letters = [char for char in stripped if char.isalpha()]
    return bool(
        letters
        and stripped.isupper()
        and len(stripped.split()) <= 4
        and len(stripped) <= 36
        and not EMAIL_RE.search(stripped)
    )


def count_section_headings(text: str | None) -> int:
    return sum(1 for line in lines(text) if is_section_heading(line))


def has_email(text: str | None) -> bool:
    return bool(text and EMAIL_RE.search(text))


def has_phone(text: str | None) -> bool:
    return bool(text and PHONE_RE.search(text))
