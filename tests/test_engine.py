"""End-to-end tests for the cognitive engine."""

from cogchat.atoms import AtomType
from cogchat.config import EngineConfig
from cogchat.engine import SEED_HIERARCHY, CognitiveEngine
from cogchat.fallback import GenerativeFallback
from cogchat.ranker import Candidate


class StubFallback(GenerativeFallback):
    def __init__(self, reply="Quantum physics is strange.", configured=True):
        self.reply = reply
        self.configured = configured
        self.calls = []

    def is_configured(self):
        return self.configured

    def generate(self, prompt, history=()):
        self.calls.append((prompt, list(history)))
        return self.reply


def test_seed_hierarchy(engine):
    for parent, children in SEED_HIERARCHY.items():
        for child in children:
            assert engine.store.has_inheritance(child, parent)
    stats = engine.knowledge_stats()
    assert stats["by_type"] == {"concept": 9, "inheritance": 6}


def test_no_seed_when_disabled():
    engine = CognitiveEngine(EngineConfig(seed_hierarchy=False, fallback_enabled=False))
    assert engine.store.size() == 0


def test_similarity_threshold_reaches_store():
    loose = CognitiveEngine(EngineConfig(fallback_enabled=False))
    strict = CognitiveEngine(EngineConfig(fallback_enabled=False, similarity_threshold=0.9))

    assert [a.name for a in loose.store.find_similar_concepts("dogs")] == ["dog"]
    assert strict.store.find_similar_concepts("dogs") == []


def test_knowledge_answer_for_known_concept(engine):
    reply = engine.respond("What is a dog?")

    assert reply.text == "I know that dog is related to animal."
    assert reply.source == "knowledge"
    assert engine.history == ["User: What is a dog?", "Bot: I know that dog is related to animal."]
    assert engine.current_topic == "know"


def test_candidate_beats_knowledge(engine):
    pool = [Candidate("HELLO", "Hi!"), Candidate("WHAT IS A DOG", "A dog barks.")]
    reply = engine.respond("What is a dog?", pool)

    assert reply.source == "candidate"
    assert reply.text == "A dog barks."
    assert reply.score == 1.0
    assert reply.candidate == pool[1]


def test_blank_input(engine):
    reply = engine.respond("   ")
    assert not reply.answered
    assert engine.history == []


def test_unanswerable_without_fallback(engine):
    reply = engine.respond("quantum physics")
    assert reply.text == ""
    assert reply.source == "none"
    assert engine.history == []


def test_fallback_answers_but_is_not_learned():
    fallback = StubFallback()
    engine = CognitiveEngine(fallback=fallback)
    engine.respond("What is a dog?")

    reply = engine.respond("quantum physics")

    assert reply.source == "fallback"
    assert reply.text == "Quantum physics is strange."
    prompt, history = fallback.calls[0]
    assert prompt == "quantum physics"
    assert history == ["User: What is a dog?", "Bot: I know that dog is related to animal."]
    assert engine.store.get(AtomType.SENTENCE_NODE, "quantum physics") is None
    assert engine.history[-1] == "Bot: Quantum physics is strange."


def test_fallback_learned_when_enabled():
    engine = CognitiveEngine(EngineConfig(learn_from_fallback=True), fallback=StubFallback())
    engine.respond("quantum physics")
    assert engine.store.get(AtomType.SENTENCE_NODE, "quantum physics") is not None


def test_fallback_skipped_when_unconfigured():
    fallback = StubFallback(configured=False)
    engine = CognitiveEngine(fallback=fallback)
    assert engine.respond("quantum physics").text == ""
    assert fallback.calls == []


def test_fallback_failure_means_no_answer():
    engine = CognitiveEngine(fallback=StubFallback(reply=None))
    assert not engine.respond("quantum physics").answered


def test_initialize_from_categories(engine):
    learned = engine.initialize_from_categories([
        ("HELLO", "Hi there!"),
        ("", "ignored"),
        Candidate("MY PET", "I like pets"),
    ])

    assert learned == 2
    assert engine.store.get(AtomType.SENTENCE_NODE, "HELLO") is not None
    assert engine.store.has_inheritance("pet", "animal")
    assert engine.store.get(AtomType.CONCEPT_NODE, "pets") is not None


def test_enhanced_pattern_match(engine):
    assert engine.enhanced_pattern_match("tell me about red") == "I know that red is related to color."
    assert engine.enhanced_pattern_match("hmm", [("HELLO", "Hi!")]) == "Hi!"


def test_contextual_response(engine):
    engine.learning.update_topic("my cat")
    assert engine.current_topic == "animal"
    assert engine.contextual_response("tell me") == "When you mention animal, I think of dog."


def test_expand_pattern(engine):
    assert engine.expand_pattern("my dogs run") == "* dog *"
    assert engine.expand_pattern("") == ""


def test_print_knowledge_stats(engine, capsys):
    stats = engine.print_knowledge_stats()
    out = capsys.readouterr().out
    assert "Total atoms: 15" in out
    assert stats["total"] == 15
    assert stats["current_topic"] is None
    assert stats["history_length"] == 0


def test_reset_reseeds(engine):
    engine.initialize_from_categories([("HELLO", "Hi there!")])
    engine.respond("What is a dog?")

    engine.reset()

    assert engine.history == []
    assert engine.current_topic == ""
    assert engine.store.size() == 15
