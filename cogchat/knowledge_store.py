"""
Knowledge Store - indexed, deduplicated collection of atoms.

Holds the concept graph used to rank and enrich candidate responses:

  - Key index   (type, name, outgoing) -> atom, for dedup and exact lookup
  - Type index  type -> atoms in insertion order
  - Incoming    atom id -> links referencing it (derived, rebuildable)

Every atom enters through ``add``; the typed helpers are thin wrappers over
it, so the indices can never drift from the primary collection. Writes are
serialised behind a re-entrant lock so the "does it exist / insert it" pair
stays atomic when the store is shared between threads.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional

from .atoms import Atom, AtomKey, AtomType, WILDCARD
from .concept_extractor import ConceptExtractor
from .errors import InvalidReferenceError
from .similarity import calculate_similarity

logger = logging.getLogger(__name__)

# Keywords containing one of these markers are filed under ANIMAL_CONCEPT
ANIMAL_MARKERS = ("animal", "pet")
ANIMAL_CONCEPT = "animal"


class KnowledgeStore:
    """
    In-memory hypergraph of concepts, words, sentences and their links.

    Usage:
        store = KnowledgeStore()
        dog = store.add_concept("dog")
        animal = store.add_concept("animal")
        store.add_inheritance(dog, animal)
        store.has_inheritance("dog", "animal")   # True
        store.parents_of("dog")                  # ["animal"]
    """

    def __init__(
        self,
        extractor: Optional[ConceptExtractor] = None,
        similarity_threshold: float = 0.7,
    ):
        self.extractor = extractor or ConceptExtractor()
        self.similarity_threshold = similarity_threshold

        self._atoms: List[Atom] = []
        self._key_index: Dict[AtomKey, Atom] = {}
        self._type_index: Dict[AtomType, List[Atom]] = {}
        self._incoming: Dict[int, List[Atom]] = {}

        self._lock = threading.RLock()

    # ------------------------------------------------------------------ #
    # Insertion
    # ------------------------------------------------------------------ #

    @contextmanager
    def batch(self) -> Iterator["KnowledgeStore"]:
        """Hold the writer lock across several mutations."""
        with self._lock:
            yield self

    def add(self, atom: Optional[Atom]) -> Atom:
        """Insert ``atom`` or return the stored duplicate.

        A duplicate keeps the higher of the two truth values. Links must
        reference atoms that are already stored; the stored instances are
        substituted for value-equal copies.
        """
        if atom is None:
            raise InvalidReferenceError("Cannot add a missing atom")

        with self._lock:
            existing = self._key_index.get(atom.key)
            if existing is not None:
                if atom.truth_value > existing.truth_value:
                    existing.set_truth_value(atom.truth_value)
                    logger.debug(f"Raised truth value of {existing}")
                return existing

            if atom.is_link:
                atom = self._canonical_link(atom)

            self._index_atom(atom)
            return atom

    def _canonical_link(self, link: Atom) -> Atom:
        stored = []
        for target in link.outgoing:
            found = self._key_index.get(target.key)
            if found is None:
                raise InvalidReferenceError(f"{target} is not in the knowledge store")
            stored.append(found)

        if all(a is b for a, b in zip(stored, link.outgoing)):
            return link
        return Atom.link(link.type, stored, truth_value=link.truth_value)

    def _index_atom(self, atom: Atom) -> None:
        self._atoms.append(atom)
        self._key_index[atom.key] = atom
        self._type_index.setdefault(atom.type, []).append(atom)
        self._incoming[atom.id] = []
        for target in atom.outgoing:
            referencing = self._incoming.get(target.id)
            if referencing is None:
                # Entry lost: rederive it so older links stay visible
                referencing = self._scan_incoming(target)
                self._incoming[target.id] = referencing
            if atom not in referencing:
                referencing.append(atom)

    def add_concept(self, name: str) -> Atom:
        return self.add(Atom.node(AtomType.CONCEPT_NODE, name))

    def add_word(self, word: str) -> Atom:
        return self.add(Atom.node(AtomType.WORD_NODE, word))

    def add_sentence(self, sentence: str) -> Atom:
        return self.add(Atom.node(AtomType.SENTENCE_NODE, sentence))

    def add_inheritance(self, child: Optional[Atom], parent: Optional[Atom]) -> Atom:
        """Record "child is-a parent"."""
        return self.add(Atom.link(AtomType.INHERITANCE_LINK, (child, parent)))

    def add_implication(self, antecedent: Optional[Atom], consequent: Optional[Atom]) -> Atom:
        """Record "antecedent suggests consequent"."""
        return self.add(Atom.link(AtomType.IMPLICATION_LINK, (antecedent, consequent)))

    # ------------------------------------------------------------------ #
    # Retrieval
    # ------------------------------------------------------------------ #

    def get(self, atom_type: AtomType, name: str) -> Optional[Atom]:
        """Exact node lookup; ``None`` when absent."""
        return self._key_index.get((atom_type, name, ()))

    def get_link(self, atom_type: AtomType, outgoing: Iterable[Atom]) -> Optional[Atom]:
        """Exact link lookup by its referenced atoms."""
        key = (atom_type, "", tuple(atom.key for atom in outgoing))
        return self._key_index.get(key)

    def by_type(self, atom_type: AtomType) -> List[Atom]:
        with self._lock:
            return list(self._type_index.get(atom_type, ()))

    def by_name(self, name: str) -> List[Atom]:
        with self._lock:
            return [atom for atom in self._atoms if atom.name == name]

    def all_atoms(self) -> List[Atom]:
        with self._lock:
            return list(self._atoms)

    def incoming(self, atom: Atom) -> List[Atom]:
        """Links that reference ``atom``."""
        with self._lock:
            stored = self._key_index.get(atom.key)
            if stored is None:
                return []
            referencing = self._incoming.get(stored.id)
            if referencing is not None:
                return list(referencing)
            return self._scan_incoming(stored)

    def _scan_incoming(self, atom: Atom) -> List[Atom]:
        return [
            link for link in self._atoms
            if link.is_link and any(target is atom for target in link.outgoing)
        ]

    def rebuild_incoming(self) -> None:
        """Recompute the incoming table by scanning every link."""
        with self._lock:
            self._incoming = {atom.id: [] for atom in self._atoms}
            for link in self._atoms:
                for target in link.outgoing:
                    referencing = self._incoming.setdefault(target.id, [])
                    if link not in referencing:
                        referencing.append(link)
            logger.debug(f"Rebuilt incoming table for {len(self._atoms)} atoms")

    def _links_from(self, atom: Atom, link_type: AtomType, position: int) -> List[Atom]:
        return [
            link for link in self.incoming(atom)
            if link.type is link_type and link.outgoing[position] is atom
        ]

    # ------------------------------------------------------------------ #
    # Search
    # ------------------------------------------------------------------ #

    def find_matching(self, pattern: str) -> List[Atom]:
        """Case-insensitive substring search over atom names."""
        needle = pattern.lower()
        with self._lock:
            return [atom for atom in self._atoms if needle in atom.name.lower()]

    def find_similar_concepts(self, name: str, threshold: Optional[float] = None) -> List[Atom]:
        """Concept nodes whose similarity to ``name`` is at least ``threshold``.

        Defaults to the store's ``similarity_threshold``.
        """
        if threshold is None:
            threshold = self.similarity_threshold
        return [
            concept for concept in self.by_type(AtomType.CONCEPT_NODE)
            if calculate_similarity(name, concept.name) >= threshold
        ]

    # ------------------------------------------------------------------ #
    # Knowledge queries
    # ------------------------------------------------------------------ #

    def has_inheritance(self, child: str, parent: str) -> bool:
        """True iff a direct inheritance link ``child -> parent`` exists."""
        child_atom = self.get(AtomType.CONCEPT_NODE, child)
        parent_atom = self.get(AtomType.CONCEPT_NODE, parent)
        if child_atom is None or parent_atom is None:
            return False
        return self.get_link(AtomType.INHERITANCE_LINK, (child_atom, parent_atom)) is not None

    def parents_of(self, concept: str) -> List[str]:
        atom = self.get(AtomType.CONCEPT_NODE, concept)
        if atom is None:
            return []
        return [link.parent.name for link in self._links_from(atom, AtomType.INHERITANCE_LINK, 0)]

    def children_of(self, concept: str) -> List[str]:
        atom = self.get(AtomType.CONCEPT_NODE, concept)
        if atom is None:
            return []
        return [link.child.name for link in self._links_from(atom, AtomType.INHERITANCE_LINK, 1)]

    def related_responses(self, text: str, threshold: float = 0.6) -> List[str]:
        """Consequents of implications whose antecedent resembles a token of ``text``."""
        responses = []
        for token in self.extractor.tokenize(text):
            for concept in self.find_similar_concepts(token, threshold):
                for link in self._links_from(concept, AtomType.IMPLICATION_LINK, 0):
                    responses.append(link.consequent.name)
        return responses

    def generate_pattern(self, text: str, threshold: float = 0.8) -> str:
        """Rebuild ``text`` as a pattern of known concepts and wildcards."""
        parts = []
        for token in self.extractor.tokenize(text):
            if self.get(AtomType.CONCEPT_NODE, token) is not None:
                parts.append(token)
                continue
            similar = self.find_similar_concepts(token, threshold)
            parts.append(similar[0].name if similar else WILDCARD)
        return " ".join(parts)

    # ------------------------------------------------------------------ #
    # Learning
    # ------------------------------------------------------------------ #

    def learn(self, pattern: str, template: str) -> Atom:
        """Absorb a (pattern, template) pair.

        Adds sentence nodes joined by an implication, a concept per pattern
        keyword, and files animal/pet keywords under the "animal" concept.
        Returns the implication link.
        """
        with self._lock:
            implication = self.add_implication(
                self.add_sentence(pattern),
                self.add_sentence(template),
            )

            for keyword in self.extractor.keywords(pattern):
                concept = self.add_concept(keyword)
                if keyword != ANIMAL_CONCEPT and any(m in keyword for m in ANIMAL_MARKERS):
                    self.add_inheritance(concept, self.add_concept(ANIMAL_CONCEPT))

            return implication

    # ------------------------------------------------------------------ #
    # Statistics and housekeeping
    # ------------------------------------------------------------------ #

    def size(self) -> int:
        return len(self._atoms)

    def __len__(self) -> int:
        return len(self._atoms)

    def __contains__(self, atom: object) -> bool:
        return isinstance(atom, Atom) and atom.key in self._key_index

    def statistics(self) -> Dict[str, object]:
        with self._lock:
            return {
                "total": len(self._atoms),
                "by_type": {
                    atom_type.value: len(atoms)
                    for atom_type, atoms in self._type_index.items()
                },
            }

    def print_statistics(self) -> Dict[str, object]:
        stats = self.statistics()
        print("Knowledge store statistics:")
        print(f"  Total atoms: {stats['total']}")
        for type_name, count in stats["by_type"].items():
            print(f"  {type_name:<12s}: {count} atoms")
        return stats

    def clear(self) -> None:
        """Drop every atom and index in one step."""
        with self._lock:
            count = len(self._atoms)
            self._atoms = []
            self._key_index = {}
            self._type_index = {}
            self._incoming = {}
        logger.info(f"Cleared knowledge store ({count} atoms)")


__all__ = ["KnowledgeStore", "ANIMAL_CONCEPT"]
