"""
Checks that references reported for a segment actually occur in its text.

A reference is kept when its normalized form is a substring of the
normalized text, or failing that when some window of the text of roughly
the same length is within an edit-distance ratio of it.
"""

import logging
import math
import re

from rapidfuzz.distance import Levenshtein

logger = logging.getLogger(__name__)

_WS_RE = re.compile(r"\s+")


def normalize_reference(text: str) -> str:
    return _WS_RE.sub(" ", text.lower()).strip()


def _word_starts(text: str) -> list[int]:
    return [0] + [m.end() for m in _WS_RE.finditer(text) if m.end() < len(text)]


def fuzzy_contains(reference: str, text: str, max_distance_ratio: float, window_band: float) -> bool:
    """True if a window of ``text`` near ``reference``'s length is close enough to it."""
    size = len(reference)
    shortest = max(1, math.floor(size * (1 - window_band)))
    longest = max(shortest, math.ceil(size * (1 + window_band)))
    for start in _word_starts(text):
        for length in range(shortest, longest + 1):
            if start + length > len(text):
                break
            window = text[start:start + length]
            score = Levenshtein.normalized_distance(reference, window, score_cutoff=max_distance_ratio)
            if score <= max_distance_ratio:
                return True
    return False


def validate_references(
    refs: list[str],
    source_text: str,
    max_distance_ratio: float = 0.2,
    window_band: float = 0.25,
) -> list[str]:
    """Drop references that cannot be found in ``source_text``; keeps input order."""
    haystack = normalize_reference(source_text)
    kept: list[str] = []
    seen: set[str] = set()
    for ref in refs:
        needle = normalize_reference(ref)
        if not needle or needle in seen:
            continue
        if needle in haystack or fuzzy_contains(needle, haystack, max_distance_ratio, window_band):
            kept.append(ref.strip())
            seen.add(needle)
        else:
            logger.debug("Dropping reference not found in text: %r", ref)
    logger.info("References: %d of %d kept", len(kept), len(refs))
    return kept
