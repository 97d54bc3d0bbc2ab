from .engine import generate_feedback, prioritize
from .rules import (
    detect_missing_keywords,
    detect_overused_words,
    detect_unquantified_bullets,
    detect_weak_action_verbs,
)

__all__ = [
    "generate_feedback",
    "prioritize",
    "detect_missing_keywords",
    "detect_weak_action_verbs",
    "detect_unquantified_bullets",
    "detect_overused_words",
]
