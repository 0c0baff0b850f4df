"""Tests for candidate scoring, ordering and the knowledge fallback."""

import pytest

from cogchat.ranker import Candidate, ResponseRanker


def test_exact_concept_match(ranker):
    assert ranker.score("I love dogs", "DOGS") == pytest.approx(1.0)


def test_inheritance_match_either_direction(ranker):
    assert ranker.score("tell me about a dog", "ANIMAL") == pytest.approx(0.8)
    assert ranker.score("animal facts", "DOG") == pytest.approx(0.8)


def test_similar_concept_match(animal_store):
    animal_store.add_concept("dogs")
    ranker = ResponseRanker(animal_store)
    # "dog" and "dogs" are neither equal nor linked, but lexically similar
    assert ranker.score("dog", "DOGS") == pytest.approx(0.6)


def test_similar_match_requires_pattern_concept_in_store(ranker):
    assert ranker.score("dog", "DOGGY") == 0.0


def test_divides_by_contributing_pairs_only(ranker):
    # pairs: (dog, dog)=1.0 contributes; (weather, dog) and friends contribute nothing
    assert ranker.score("dog weather today", "DOG") == pytest.approx(1.0)
    assert ranker.score("dog cat", "DOG") == pytest.approx(1.0)


def test_mixed_contributions_are_averaged(ranker):
    # (dog, dog)=1.0 and (dog, animal)=0.8 -> 1.8 / 2
    assert ranker.score("dog", "DOG ANIMAL") == pytest.approx(0.9)


def test_no_concepts_scores_zero(ranker):
    assert ranker.score("", "DOG") == 0.0
    assert ranker.score("how are you", "DOG") == 0.0
    assert ranker.score("dog", "*") == 0.0


def test_rank_is_stable_on_ties(ranker, monkeypatch):
    a = Candidate("A", "answer a")
    b = Candidate("B", "answer b")
    c = Candidate("C", "answer c")
    scores = {"A": 0.5, "B": 0.5, "C": 0.9}
    monkeypatch.setattr(ranker, "score", lambda text, pattern: scores[pattern])

    assert ranker.rank("anything", [a, b, c]) == [c, a, b]


def test_score_all_reports_positions(ranker):
    ranked = ranker.score_all("my dog", [("HELLO", "hi"), ("DOG", "woof")])
    assert [s.position for s in ranked] == [1, 0]
    assert ranked[0].score == pytest.approx(1.0)
    assert ranked[1].score == 0.0


def test_rank_accepts_pairs(ranker):
    assert ranker.rank("cat", [("DOG", "woof"), ("CAT", "meow")])[0] == Candidate("CAT", "meow")


def test_rank_empty_pool(ranker):
    assert ranker.rank("dog", []) == []


def test_best_response_prefers_top_candidate(ranker):
    pool = [Candidate("HELLO", "Hi!"), Candidate("WHAT IS A DOG", "A dog barks.")]
    assert ranker.best_response("What is a dog?", pool) == "A dog barks."


def test_best_response_skips_empty_templates(ranker):
    pool = [Candidate("DOG", "   "), Candidate("HELLO", "Hi!")]
    assert ranker.best_response("dog", pool) == "Hi!"


def test_best_response_falls_back_to_parent(ranker):
    assert ranker.best_response("What is a dog?", []) == "I know that dog is related to animal."


def test_best_response_falls_back_to_child(ranker):
    assert ranker.best_response("Any animal?", []) == "When you mention animal, I think of dog."


def test_fallback_checks_concepts_in_order(ranker):
    assert ranker.best_response("zebra or cat", []) == "I know that cat is related to animal."


def test_no_answer_is_empty(ranker):
    assert ranker.best_response("quantum physics", []) == ""
    assert ranker.best_response("", []) == ""


def test_unusable_candidates_trigger_fallback(animal_store):
    ranker = ResponseRanker(animal_store, min_score=0.5)
    assert ranker.best_response("What is a dog?", [("HELLO", "Hi!")]) == (
        "I know that dog is related to animal."
    )


def test_related_responses_used_when_enabled(animal_store):
    ranker = ResponseRanker(animal_store, use_related_responses=True)
    dogs = animal_store.add_concept("dogs")
    animal_store.add_implication(dogs, animal_store.add_concept("fetch"))
    assert ranker.knowledge_response("dogs") == "fetch"
