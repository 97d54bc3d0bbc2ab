from .text import STOPWORDS, content_terms, sentences, tokenize, words
from .tfidf import compute_idf, compute_tf, cosine_similarity, document_similarity, tfidf_vector

__all__ = [
    "STOPWORDS",
    "tokenize",
    "content_terms",
    "words",
    "sentences",
    "compute_tf",
    "compute_idf",
    "tfidf_vector",
    "cosine_similarity",
    "document_similarity",
]
