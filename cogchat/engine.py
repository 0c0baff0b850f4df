"""
Cognitive engine - assembles store, extractor, ranker and learning loop.

One user turn is processed synchronously:

    input -> extract concepts -> rank candidates -> best template
          -> (else) knowledge sentence -> (else) generative fallback
          -> record the exchange

The engine owns the knowledge store for its lifetime and hands it to every
component explicitly; there is no module-level singleton.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from .concept_extractor import ConceptExtractor
from .config import EngineConfig
from .fallback import GenerativeFallback
from .knowledge_store import KnowledgeStore
from .learning import LearningLoop
from .ranker import Candidate, ResponseRanker

logger = logging.getLogger(__name__)

CandidateLike = Union[Candidate, Tuple[str, str]]

# Seed is-a hierarchy: parent -> children
SEED_HIERARCHY = {
    "animal": ("dog", "cat"),
    "emotion": ("happy", "sad"),
    "color": ("red", "blue"),
}


@dataclass
class EngineResponse:
    """Outcome of one turn."""

    text: str
    source: str = "none"        # candidate, knowledge, fallback, none
    score: float = 0.0
    candidate: Optional[Candidate] = None

    @property
    def answered(self) -> bool:
        return bool(self.text)


class CognitiveEngine:
    """
    Concept-graph response engine.

    Usage:
        engine = CognitiveEngine()
        engine.initialize_from_categories([("HELLO", "Hi there!")])
        reply = engine.respond("What is a dog?")
        reply.text    # "I know that dog is related to animal."
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        store: Optional[KnowledgeStore] = None,
        extractor: Optional[ConceptExtractor] = None,
        fallback: Optional[GenerativeFallback] = None,
    ):
        self.config = config or EngineConfig()
        self.extractor = extractor or (store.extractor if store is not None else ConceptExtractor())
        self.store = store if store is not None else KnowledgeStore(self.extractor)
        self.store.similarity_threshold = self.config.similarity_threshold
        self.fallback = fallback

        self.ranker = ResponseRanker(
            self.store,
            self.extractor,
            similar_threshold=self.config.ranking_similar_threshold,
            min_score=self.config.min_score,
            use_related_responses=self.config.use_related_responses,
            related_threshold=self.config.related_threshold,
        )
        self.learning = LearningLoop(
            self.store,
            self.extractor,
            learning_threshold=self.config.learning_threshold,
            max_turns=self.config.history_max_turns,
        )

        if self.config.seed_hierarchy:
            self.build_concept_hierarchy()

    # ------------------------------------------------------------------ #
    # Knowledge bootstrap
    # ------------------------------------------------------------------ #

    def build_concept_hierarchy(self) -> None:
        with self.store.batch():
            for parent_name, children in SEED_HIERARCHY.items():
                parent = self.store.add_concept(parent_name)
                for child_name in children:
                    self.store.add_inheritance(self.store.add_concept(child_name), parent)

    def initialize_from_categories(self, categories: Iterable[CandidateLike]) -> int:
        """Learn every non-empty (pattern, template) pair; returns how many."""
        learned = 0
        with self.store.batch():
            for item in categories:
                category = Candidate.coerce(item)
                if not category.pattern or not category.template:
                    continue
                self.store.learn(category.pattern, category.template)
                self.learning.establish_relationships(category.pattern, category.template)
                learned += 1

        logger.info(f"Initialised from {learned} categories, store size {self.store.size()}")
        return learned

    # ------------------------------------------------------------------ #
    # Responding
    # ------------------------------------------------------------------ #

    def enhanced_pattern_match(self, user_input: str, candidates: Iterable[CandidateLike] = ()) -> str:
        """Best template for ``user_input`` or a knowledge sentence; "" for no answer."""
        return self.ranker.best_response(user_input, candidates)

    def knowledge_response(self, user_input: str) -> str:
        return self.ranker.knowledge_response(user_input)

    def contextual_response(self, user_input: str) -> str:
        """Knowledge response with the current topic prepended to the input."""
        return self.ranker.knowledge_response(self.learning.contextual_input(user_input))

    def expand_pattern(self, pattern: str) -> str:
        expanded = self.store.generate_pattern(pattern, self.config.pattern_similar_threshold)
        return expanded or pattern

    def respond(self, user_input: str, candidates: Iterable[CandidateLike] = ()) -> EngineResponse:
        """Process one turn and record it."""
        text = user_input.strip()
        if not text:
            return EngineResponse(text="")

        best = self.ranker.pick(self.ranker.score_all(text, candidates))
        if best is not None:
            response = EngineResponse(best.template, "candidate", best.score, best.candidate)
        else:
            response = EngineResponse(self.ranker.knowledge_response(text), "knowledge")

        if not response.answered:
            response = self._ask_fallback(text)

        if response.answered:
            satisfaction = self.config.interaction_satisfaction
            if response.source == "fallback" and not self.config.learn_from_fallback:
                satisfaction = 0.0
            self.learning.record_interaction(text, response.text, satisfaction)
        else:
            logger.debug(f"No answer for {text!r}")

        return response

    def _ask_fallback(self, text: str) -> EngineResponse:
        if not self.config.fallback_enabled or self.fallback is None:
            return EngineResponse(text="")
        if not self.fallback.is_configured():
            return EngineResponse(text="")

        generated = self.fallback.generate(text, self.learning.history)
        if not generated:
            return EngineResponse(text="")
        return EngineResponse(generated, "fallback")

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def current_topic(self) -> str:
        return self.learning.current_topic

    @property
    def history(self):
        return self.learning.history

    def knowledge_stats(self) -> Dict[str, Any]:
        stats = self.store.statistics()
        stats["current_topic"] = self.learning.current_topic or None
        stats["history_length"] = len(self.learning.history)
        return stats

    def print_knowledge_stats(self) -> Dict[str, Any]:
        print("\n=== Knowledge Statistics ===")
        self.store.print_statistics()
        print(f"Current topic: {self.learning.current_topic or 'none'}")
        print(f"Conversation history length: {len(self.learning.history)}")
        print("============================\n")
        return self.knowledge_stats()

    def reset(self) -> None:
        """Forget everything, then re-seed the hierarchy if configured."""
        self.store.clear()
        self.learning.reset()
        if self.config.seed_hierarchy:
            self.build_concept_hierarchy()
