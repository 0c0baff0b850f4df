"""
Learning Loop - feeds accepted exchanges back into the knowledge store.

After every exchange:
  1. The pair is appended to the bounded conversation history.
  2. If the user was satisfied enough, the pair is learned: sentence
     implication, keyword concepts, and an implication from every input
     concept to every response concept.
  3. The current topic follows the newest text, broadened to its parent
     concept when one is known.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .concept_extractor import ConceptExtractor
from .conversation_history import ConversationHistory
from .knowledge_store import KnowledgeStore

logger = logging.getLogger(__name__)


class LearningLoop:
    """Short-term memory plus write-back of satisfying exchanges."""

    def __init__(
        self,
        store: KnowledgeStore,
        extractor: Optional[ConceptExtractor] = None,
        history: Optional[ConversationHistory] = None,
        learning_threshold: float = 0.7,
        max_turns: int = 10,
    ):
        self.store = store
        self.extractor = extractor or store.extractor
        self.conversation_history = history or ConversationHistory(max_turns=max_turns)
        self.learning_threshold = learning_threshold
        self.current_topic = ""

    @property
    def history(self) -> List[str]:
        """Recent exchanges as "User: ..." / "Bot: ..." lines, oldest first."""
        return self.conversation_history.lines()

    def record_interaction(self, user_input: str, response: str, satisfaction: float = 1.0) -> bool:
        """Remember an exchange; returns True when it was learned."""
        self.conversation_history.add_turn(user_input, response, satisfaction)

        learned = satisfaction > self.learning_threshold
        if learned:
            with self.store.batch():
                self.store.learn(user_input, response)
                links = self.establish_relationships(user_input, response)
            logger.info(
                f"Learned exchange (satisfaction={satisfaction:.2f}, {links} concept links)"
            )

        self.update_context(user_input, response)
        return learned

    def establish_relationships(self, source: str, target: str) -> int:
        """Link every concept of ``source`` to every concept of ``target``."""
        source_concepts = self.extractor.extract(source)
        target_concepts = self.extractor.extract(target)

        count = 0
        with self.store.batch():
            for source_concept in source_concepts:
                for target_concept in target_concepts:
                    self.store.add_implication(
                        self.store.add_concept(source_concept),
                        self.store.add_concept(target_concept),
                    )
                    count += 1
        return count

    # ------------------------------------------------------------------ #
    # Topic tracking
    # ------------------------------------------------------------------ #

    def update_context(self, user_input: str, response: str) -> None:
        self.update_topic(user_input)
        self.update_topic(response)

    def update_topic(self, text: str) -> str:
        concepts = self.extractor.extract(text)
        if concepts:
            topic = concepts[0]
            parents = self.store.parents_of(topic)
            if parents:
                topic = parents[0]
            self.current_topic = topic
        return self.current_topic

    def infer_topic_from_context(self) -> str:
        # Needs at least two full exchanges
        if len(self.conversation_history) >= 2:
            last = self.conversation_history.get_recent_turns(1)[0]
            concepts = self.extractor.extract(last.bot_response)
            if concepts:
                return concepts[0]
        return self.current_topic

    def contextual_input(self, user_input: str) -> str:
        """Input prefixed with the current topic, if any."""
        if self.current_topic:
            return f"{self.current_topic} {user_input}"
        return user_input

    def reset(self) -> None:
        self.conversation_history.clear()
        self.current_topic = ""
