from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from cogchat.concept_extractor import ConceptExtractor
from cogchat.config import EngineConfig
from cogchat.engine import CognitiveEngine
from cogchat.knowledge_store import KnowledgeStore
from cogchat.learning import LearningLoop
from cogchat.ranker import ResponseRanker


@pytest.fixture
def extractor():
    return ConceptExtractor()


@pytest.fixture
def store(extractor):
    """Empty knowledge store."""
    return KnowledgeStore(extractor)


@pytest.fixture
def animal_store(store):
    """Store holding dog/cat -> animal."""
    animal = store.add_concept("animal")
    store.add_inheritance(store.add_concept("dog"), animal)
    store.add_inheritance(store.add_concept("cat"), animal)
    return store


@pytest.fixture
def ranker(animal_store):
    return ResponseRanker(animal_store)


@pytest.fixture
def loop(store):
    return LearningLoop(store)


@pytest.fixture
def engine():
    """Engine with the seed hierarchy and no generative fallback."""
    return CognitiveEngine(EngineConfig(fallback_enabled=False))
