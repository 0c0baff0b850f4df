"""
Atoms - typed units of knowledge for the cognitive core.

An atom is either a NODE (a labelled leaf: concept, word, sentence) or a
LINK (an ordered tuple of referenced atoms: inheritance, implication, ...).
The kind lattice is closed, so it is modelled as a single tagged class
switched on ``AtomType`` rather than an open subclass hierarchy.

Equality is by value (type + name, plus the referenced atoms for links);
the numeric ``id`` is bookkeeping only and never takes part in equality.
"""

from __future__ import annotations

import itertools
from enum import Enum
from typing import Iterable, Optional, Tuple

from .errors import InvalidReferenceError, InvalidValueError


class AtomType(Enum):
    """Closed set of atom kinds."""
    ATOM = "atom"
    NODE = "node"
    LINK = "link"
    CONCEPT_NODE = "concept"
    WORD_NODE = "word"
    SENTENCE_NODE = "sentence"
    IMPLICATION_LINK = "implication"
    INHERITANCE_LINK = "inheritance"
    SIMILARITY_LINK = "similarity"
    PATTERN_LINK = "pattern"


NODE_TYPES = frozenset({
    AtomType.ATOM,
    AtomType.NODE,
    AtomType.CONCEPT_NODE,
    AtomType.WORD_NODE,
    AtomType.SENTENCE_NODE,
})

LINK_TYPES = frozenset({
    AtomType.LINK,
    AtomType.IMPLICATION_LINK,
    AtomType.INHERITANCE_LINK,
    AtomType.SIMILARITY_LINK,
    AtomType.PATTERN_LINK,
})

# Binary links whose two positions carry meaning (child/parent, antecedent/consequent)
BINARY_LINK_TYPES = frozenset({AtomType.INHERITANCE_LINK, AtomType.IMPLICATION_LINK})

WILDCARD = "*"

# Function words a sentence pattern turns into wildcards
SENTENCE_WILDCARD_WORDS = ("the", "a", "an", "is", "are", "was", "were")

AtomKey = Tuple[AtomType, str, tuple]

_next_id = itertools.count(1)


def _check_truth_value(value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidValueError(f"Truth value must be a number, got {value!r}") from None
    # NaN fails both comparisons and is rejected here as well
    if not 0.0 <= value <= 1.0:
        raise InvalidValueError(f"Truth value {value} outside [0.0, 1.0]")
    return value


class Atom:
    """A node or link in the knowledge graph."""

    __slots__ = ("_type", "_name", "_outgoing", "_truth_value", "_id", "_key")

    def __init__(
        self,
        atom_type: AtomType,
        name: str = "",
        outgoing: Iterable[Optional["Atom"]] = (),
        truth_value: float = 1.0,
    ):
        outgoing = tuple(outgoing)

        if atom_type in LINK_TYPES:
            if any(atom is None for atom in outgoing):
                raise InvalidReferenceError(f"{atom_type.value} link references a missing atom")
            if atom_type in BINARY_LINK_TYPES and len(outgoing) != 2:
                raise InvalidReferenceError(
                    f"{atom_type.value} link needs exactly 2 atoms, got {len(outgoing)}"
                )
            name = ""
        elif outgoing:
            raise InvalidReferenceError(f"{atom_type.value} node cannot reference other atoms")

        self._type = atom_type
        self._name = name
        self._outgoing: Tuple[Atom, ...] = outgoing
        self._truth_value = _check_truth_value(truth_value)
        self._id = next(_next_id)
        self._key: AtomKey = (atom_type, name, tuple(atom.key for atom in outgoing))

    @classmethod
    def node(cls, atom_type: AtomType, name: str, truth_value: float = 1.0) -> "Atom":
        if atom_type not in NODE_TYPES:
            raise ValueError(f"{atom_type} is not a node type")
        return cls(atom_type, name, truth_value=truth_value)

    @classmethod
    def link(
        cls,
        atom_type: AtomType,
        outgoing: Iterable[Optional["Atom"]],
        truth_value: float = 1.0,
    ) -> "Atom":
        if atom_type not in LINK_TYPES:
            raise ValueError(f"{atom_type} is not a link type")
        return cls(atom_type, outgoing=outgoing, truth_value=truth_value)

    # ------------------------------------------------------------------ #
    # Core properties
    # ------------------------------------------------------------------ #

    @property
    def type(self) -> AtomType:
        return self._type

    @property
    def name(self) -> str:
        return self._name

    @property
    def id(self) -> int:
        return self._id

    @property
    def key(self) -> AtomKey:
        """Value identity used for deduplication and hashing."""
        return self._key

    @property
    def truth_value(self) -> float:
        return self._truth_value

    def set_truth_value(self, value: float) -> None:
        self._truth_value = _check_truth_value(value)

    @property
    def outgoing(self) -> Tuple["Atom", ...]:
        return self._outgoing

    @property
    def arity(self) -> int:
        return len(self._outgoing)

    @property
    def is_node(self) -> bool:
        return self._type in NODE_TYPES

    @property
    def is_link(self) -> bool:
        return self._type in LINK_TYPES

    # Positional accessors for binary links
    @property
    def child(self) -> "Atom":
        self._require(AtomType.INHERITANCE_LINK)
        return self._outgoing[0]

    @property
    def parent(self) -> "Atom":
        self._require(AtomType.INHERITANCE_LINK)
        return self._outgoing[1]

    @property
    def antecedent(self) -> "Atom":
        self._require(AtomType.IMPLICATION_LINK)
        return self._outgoing[0]

    @property
    def consequent(self) -> "Atom":
        self._require(AtomType.IMPLICATION_LINK)
        return self._outgoing[1]

    def _require(self, atom_type: AtomType) -> None:
        if self._type is not atom_type:
            raise AttributeError(f"{self._type.value} atom has no {atom_type.value} roles")

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #

    def to_string(self) -> str:
        tv = f"tv={self._truth_value:g}"
        if self._type is AtomType.CONCEPT_NODE:
            return f"ConceptNode({self._name}, {tv})"
        if self._type is AtomType.WORD_NODE:
            return f"WordNode({self._name}, {tv})"
        if self._type is AtomType.SENTENCE_NODE:
            return f"SentenceNode({self._name}, {tv})"
        if self._type is AtomType.INHERITANCE_LINK:
            return f"InheritanceLink({self.child.name} -> {self.parent.name}, {tv})"
        if self._type is AtomType.IMPLICATION_LINK:
            return f"ImplicationLink({self.antecedent.name} => {self.consequent.name}, {tv})"
        if self.is_link:
            inner = ", ".join(atom.to_string() for atom in self._outgoing)
            return f"Link[{self._type.value}]({inner}, {tv})"
        if self._type is AtomType.ATOM:
            return f"Atom[{self._type.value}]({self._name}, {tv})"
        return f"Node[{self._type.value}]({self._name}, {tv})"

    def to_pattern(self) -> str:
        """Project the atom onto a loose, matchable template string."""
        if self.is_link:
            return " ".join(atom.to_pattern() for atom in self._outgoing)
        if not self._name:
            return WILDCARD
        if self._type is AtomType.WORD_NODE:
            return self._name
        if self._type is AtomType.SENTENCE_NODE:
            return _wildcard_function_words(self._name)
        return "_".join(self._name.split())

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"<Atom #{self._id} {self.to_string()}>"

    # ------------------------------------------------------------------ #
    # Equality and hashing
    # ------------------------------------------------------------------ #

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Atom):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)


def _wildcard_function_words(sentence: str) -> str:
    pattern = sentence
    for word in SENTENCE_WILDCARD_WORDS:
        search = f" {word} "
        replacement = f" {WILDCARD} "
        pos = pattern.find(search)
        while pos != -1:
            pattern = pattern[:pos] + replacement + pattern[pos + len(search):]
            pos = pattern.find(search, pos + len(replacement))
    return pattern


__all__ = [
    "Atom",
    "AtomKey",
    "AtomType",
    "LINK_TYPES",
    "NODE_TYPES",
    "WILDCARD",
]
