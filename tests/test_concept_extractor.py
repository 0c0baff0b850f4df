from cogchat.concept_extractor import ConceptExtractor


def test_extract_drops_short_words_and_stop_words(extractor):
    assert extractor.extract("What is a dog?") == ["dog"]


def test_extract_lowercases_and_keeps_order(extractor):
    assert extractor.extract("Dogs are GREAT pets") == ["dogs", "great", "pets"]


def test_extract_skips_alphanumeric_runs(extractor):
    assert extractor.extract("r2d2 robots and you") == ["robots"]


def test_extract_empty(extractor):
    assert extractor.extract("") == []
    assert extractor.extract("a an to is") == []


def test_tokenize_keeps_stop_words(extractor):
    assert extractor.tokenize("What is the dog's name?") == ["what", "is", "the", "dogs", "name"]


def test_tokenize_drops_single_characters(extractor):
    assert extractor.tokenize("I saw a cat !") == ["saw", "cat"]


def test_variants_differ(extractor):
    text = "How are you?"
    assert extractor.extract(text) == []
    assert extractor.tokenize(text) == ["how", "are", "you"]


def test_keywords_use_shorter_stop_list(extractor):
    assert extractor.keywords("What do you know about the cat") == ["what", "you", "know", "about", "cat"]


def test_custom_stop_words():
    custom = ConceptExtractor(stop_words={"dog"})
    assert custom.extract("dog and cat") == ["and", "cat"]
