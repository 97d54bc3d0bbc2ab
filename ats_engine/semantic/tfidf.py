from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Sequence

SparseVector = dict[str, float]


def compute_tf(terms: Sequence[str]) -> SparseVector:
    """Term count divided by document length, case-folded."""
    if not terms:
        return {}
    counts = Counter(term.lower() for term in terms)
    total = len(terms)
    return {term: count / total for term, count in counts.items()}


def compute_idf(documents: Sequence[Iterable[str]]) -> SparseVector:
    """ln(N / df) over the given corpus; a term found in every document weighs 0."""
    vocabularies = [{term.lower() for term in doc} for doc in documents]
    total = len(vocabularies)
    if total == 0:
        return {}
    document_frequency: Counter[str] = Counter()
    for vocabulary in vocabularies:
        document_frequency.update(vocabulary)
    return {term: math.log(total / df) for term, df in document_frequency.items() if df > 0}


def tfidf_vector(tf: SparseVector, idf: SparseVector) -> SparseVector:
    vector: SparseVector = {}
    for term, frequency in tf.items():
        weight = frequency * idf.get(term, 0.0)
        if weight > 0:
            vector[term] = weight
    return vector


def cosine_similarity(left: SparseVector, right: SparseVector) -> float:
    if not left or not right:
        return 0.0
    vocabulary = sorted(set(left) | set(right))
    dot = sum(left.get(term, 0.0) * right.get(term, 0.0) for term in vocabulary)
    left_norm = math.sqrt(sum(left.get(term, 0.0) ** 2 for term in vocabulary))
    right_norm = math.sqrt(sum(right.get(term, 0.0) ** 2 for term in vocabulary))
    if left_norm <= 0 or right_norm <= 0:
        return 0.0
    return dot / (left_norm * right_norm)


def document_similarity(left_terms: Sequence[str] | None, right_terms: Sequence[str] | None) -> float:
    """TF-IDF cosine similarity of two tokenized documents, in [0, 1].

    The corpus is just the two documents, so a term both sides use gets
    IDF 0 and the vectors are driven by what each side has on its own.
    When both vectors collapse (every term shared), IDF carries no signal
    and the raw term distributions are compared instead; identical
    documents therefore score 1.0.
    """
    if not left_terms or not right_terms:
        return 0.0

    left_tf = compute_tf(left_terms)
    right_tf = compute_tf(right_terms)
    if left_tf == right_tf:
        return 1.0

    idf = compute_idf([left_tf.keys(), right_tf.keys()])
    left_vector = tfidf_vector(left_tf, idf)
    right_vector = tfidf_vector(right_tf, idf)
    if not left_vector and not right_vector:
        return _clamp_unit(cosine_similarity(left_tf, right_tf))
    return _clamp_unit(cosine_similarity(left_vector, right_vector))


def _clamp_unit(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(1.0, value))
