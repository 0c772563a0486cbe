"""Edit-distance similarity for skill names and job titles."""

import logging

from rapidfuzz.distance import Levenshtein

logger = logging.getLogger(__name__)

# Tokens scoring above this are treated as the same skill/title
DEFAULT_THRESHOLD = 0.8


def string_similarity(text_a: str, text_b: str) -> float:
    """Normalized Levenshtein similarity in [0, 1].

    ``(max_len - edit_distance) / max_len``; two empty strings are identical.
    """
    if not text_a and not text_b:
        return 1.0
    longest = max(len(text_a), len(text_b))
    distance = Levenshtein.distance(text_a, text_b)
    return (longest - distance) / longest


def is_similar(text_a: str, text_b: str, threshold: float = DEFAULT_THRESHOLD) -> bool:
    """Case-insensitive fuzzy equality: similarity strictly above ``threshold``."""
    return string_similarity(text_a.lower(), text_b.lower()) > threshold


def any_similar(token: str, candidates: list[str], threshold: float = DEFAULT_THRESHOLD) -> bool:
    return any(is_similar(token, c, threshold) for c in candidates)
