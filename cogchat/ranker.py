"""
Response Ranker - scores candidate (pattern, template) pairs against input.

Scoring compares every input concept with every pattern concept:

    exact match                      -> 1.0
    inheritance in either direction  -> 0.8
    lexically similar concept        -> 0.6

and divides the total by the number of pairs that contributed anything.
Pairs that contribute nothing are left out of the denominator, so a single
strong match among many unrelated concepts still scores high.

When no candidate is usable the ranker falls back to a sentence derived from
the concept hierarchy, or to "" which callers must treat as "no answer".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .concept_extractor import ConceptExtractor
from .knowledge_store import KnowledgeStore

logger = logging.getLogger(__name__)

EXACT_SCORE = 1.0
INHERITANCE_SCORE = 0.8
SIMILAR_SCORE = 0.6

PARENT_TEMPLATE = "I know that {concept} is related to {parent}."
CHILD_TEMPLATE = "When you mention {concept}, I think of {child}."


@dataclass(frozen=True)
class Candidate:
    """A parsed category: the pattern to match and the template to answer with."""
    pattern: str
    template: str

    @classmethod
    def coerce(cls, item: Union["Candidate", Tuple[str, str]]) -> "Candidate":
        if isinstance(item, Candidate):
            return item
        pattern, template = item
        return cls(pattern=pattern, template=template)


@dataclass
class ScoredCandidate:
    candidate: Candidate
    score: float
    position: int           # Index in the input pool

    @property
    def template(self) -> str:
        return self.candidate.template


class ResponseRanker:
    """Orders candidate responses by concept similarity to the user input."""

    def __init__(
        self,
        store: KnowledgeStore,
        extractor: Optional[ConceptExtractor] = None,
        similar_threshold: float = 0.6,
        min_score: float = 0.0,
        use_related_responses: bool = False,
        related_threshold: float = 0.6,
    ):
        self.store = store
        self.extractor = extractor or store.extractor
        self.similar_threshold = similar_threshold
        self.min_score = min_score
        self.use_related_responses = use_related_responses
        self.related_threshold = related_threshold

    def score(self, input_text: str, pattern_text: str) -> float:
        input_concepts = self.extractor.extract(input_text)
        pattern_concepts = self.extractor.extract(pattern_text)
        if not input_concepts or not pattern_concepts:
            return 0.0

        total = 0.0
        matches = 0
        for input_concept in input_concepts:
            similar_names = None
            for pattern_concept in pattern_concepts:
                if input_concept == pattern_concept:
                    total += EXACT_SCORE
                    matches += 1
                elif (self.store.has_inheritance(input_concept, pattern_concept)
                      or self.store.has_inheritance(pattern_concept, input_concept)):
                    total += INHERITANCE_SCORE
                    matches += 1
                else:
                    if similar_names is None:
                        similar_names = {
                            atom.name for atom in
                            self.store.find_similar_concepts(input_concept, self.similar_threshold)
                        }
                    if pattern_concept in similar_names:
                        total += SIMILAR_SCORE
                        matches += 1

        return total / matches if matches else 0.0

    def score_all(
        self,
        input_text: str,
        candidates: Iterable[Union[Candidate, Tuple[str, str]]],
    ) -> List[ScoredCandidate]:
        """Score every candidate and return them best-first.

        Ties keep pool order.
        """
        pool = [Candidate.coerce(item) for item in candidates]
        if not pool:
            return []

        scores = np.array([self.score(input_text, c.pattern) for c in pool], dtype=float)
        order = np.argsort(-scores, kind="stable")

        ranked = [ScoredCandidate(pool[i], float(scores[i]), int(i)) for i in order]
        for scored in ranked[:5]:
            logger.debug(f"  {scored.score:.3f}  {scored.candidate.pattern!r}")
        return ranked

    def rank(
        self,
        input_text: str,
        candidates: Iterable[Union[Candidate, Tuple[str, str]]],
    ) -> List[Candidate]:
        return [scored.candidate for scored in self.score_all(input_text, candidates)]

    def is_usable(self, scored: ScoredCandidate) -> bool:
        return bool(scored.template.strip()) and scored.score >= self.min_score

    def pick(self, ranked: Sequence[ScoredCandidate]) -> Optional[ScoredCandidate]:
        """First usable candidate of an already ranked pool."""
        for scored in ranked:
            if self.is_usable(scored):
                return scored
        return None

    def best_response(
        self,
        input_text: str,
        candidates: Iterable[Union[Candidate, Tuple[str, str]]] = (),
    ) -> str:
        """Template of the best usable candidate, else a knowledge sentence, else ""."""
        best = self.pick(self.score_all(input_text, candidates))
        if best is not None:
            return best.template
        return self.knowledge_response(input_text)

    def knowledge_response(self, input_text: str) -> str:
        """Sentence built from the concept hierarchy, or "" when nothing applies."""
        concepts = self.extractor.extract(input_text)
        if not concepts:
            return ""

        if self.use_related_responses:
            for response in self.store.related_responses(input_text, self.related_threshold):
                if response and response != input_text:
                    return response

        for concept in concepts:
            parents = self.store.parents_of(concept)
            if parents:
                return PARENT_TEMPLATE.format(concept=concept, parent=parents[0])
            children = self.store.children_of(concept)
            if children:
                return CHILD_TEMPLATE.format(concept=concept, child=children[0])

        return ""


__all__ = ["Candidate", "ScoredCandidate", "ResponseRanker"]
