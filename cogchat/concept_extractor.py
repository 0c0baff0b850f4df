"""
Concept Extractor - free text to candidate concept tokens.

Two deliberately different tokenisers live here:

- ``extract``   favours semantic concepts: alphabetic runs of 3+ letters,
                lowercased, minus a small stop-word list.
- ``tokenize``  favours literal pattern reconstruction: whitespace split,
                punctuation stripped, lowercased, anything longer than one
                character, no stop-word filtering.

``keywords`` is the variant the store uses when learning a category: any
alphabetic run longer than two letters, minus a shorter stop-word list.
"""

from __future__ import annotations

import re
import string
from typing import Iterable, List, Optional

CONCEPT_STOP_WORDS = frozenset({
    "the", "and", "but", "for", "are", "was", "you", "what", "how",
})

KEYWORD_STOP_WORDS = frozenset({"the", "and", "but", "for", "are", "was"})

_CONCEPT_RE = re.compile(r"\b[a-zA-Z]{3,}\b")
_WORD_RE = re.compile(r"\b[a-zA-Z]+\b")
_PUNCTUATION = str.maketrans("", "", string.punctuation)


class ConceptExtractor:
    """Turns raw text into normalised concept and pattern tokens."""

    def __init__(
        self,
        stop_words: Optional[Iterable[str]] = None,
        keyword_stop_words: Optional[Iterable[str]] = None,
    ):
        self.stop_words = frozenset(stop_words) if stop_words is not None else CONCEPT_STOP_WORDS
        self.keyword_stop_words = (
            frozenset(keyword_stop_words) if keyword_stop_words is not None else KEYWORD_STOP_WORDS
        )

    def extract(self, text: str) -> List[str]:
        """Concept tokens in order of appearance (duplicates kept)."""
        concepts = []
        for match in _CONCEPT_RE.finditer(text or ""):
            word = match.group(0).lower()
            if word not in self.stop_words:
                concepts.append(word)
        return concepts

    def tokenize(self, text: str) -> List[str]:
        """Loose whitespace tokens used to rebuild patterns."""
        tokens = []
        for raw in (text or "").split():
            token = raw.translate(_PUNCTUATION).lower()
            if len(token) > 1:
                tokens.append(token)
        return tokens

    def keywords(self, text: str) -> List[str]:
        keywords = []
        for match in _WORD_RE.finditer(text or ""):
            word = match.group(0).lower()
            if len(word) > 2 and word not in self.keyword_stop_words:
                keywords.append(word)
        return keywords


__all__ = ["ConceptExtractor", "CONCEPT_STOP_WORDS", "KEYWORD_STOP_WORDS"]
