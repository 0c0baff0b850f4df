"""Cheap lexical similarity between concept labels.

This is a deliberately crude proxy (case-insensitive equality, substring
containment, character overlap) and not an edit distance. Replacing it changes
ranking behaviour.
"""

from __future__ import annotations

EXACT_MATCH = 1.0
SUBSTRING_MATCH = 0.8


def calculate_similarity(first: str, second: str) -> float:
    """Return a symmetric score in [0.0, 1.0] for two labels.

    1.0 for case-insensitive equality, 0.8 when one label contains the other,
    otherwise the number of distinct characters shared by both labels divided
    by the length of the longer label. Empty labels score 0.0.
    """
    if not first or not second:
        return 0.0

    a = first.lower()
    b = second.lower()
    if a == b:
        return EXACT_MATCH
    if a in b or b in a:
        return SUBSTRING_MATCH

    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    common = len(set(shorter) & set(longer))
    return common / len(longer)


__all__ = ["calculate_similarity", "EXACT_MATCH", "SUBSTRING_MATCH"]
