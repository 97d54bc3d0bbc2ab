from .engine import DIMENSION_WEIGHTS, calculate_ats_score
from .formatting import check_formatting
from .impact import detect_impact
from .keywords import detect_keyword_stuffing, match_keywords
from .readability import check_readability
from .skills import categorize_skill, extract_skills, match_skills, normalize_skill

__all__ = [
    "DIMENSION_WEIGHTS",
    "calculate_ats_score",
    "match_keywords",
    "detect_keyword_stuffing",
    "match_skills",
    "extract_skills",
    "categorize_skill",
    "normalize_skill",
    "check_formatting",
    "detect_impact",
    "check_readability",
]
