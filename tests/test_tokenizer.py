from relevance.tokenizer import STOPWORDS, is_bengali, tokenize


def test_tokenize_lowercases_and_splits_on_punctuation() -> None:
    assert tokenize("Machine-Learning, DEEP networks!") == ["machine", "learning", "deep", "networks"]


def test_tokenize_drops_short_tokens_and_stopwords() -> None:
    assert tokenize("the cat is on a mat with python") == ["python"]


def test_tokenize_empty_inputs() -> None:
    assert tokenize("") == []
    assert tokenize(None) == []
    assert tokenize("   ...   ") == []


def test_stopwords_are_fixed() -> None:
    assert STOPWORDS == frozenset(
        {"of", "in", "to", "and", "the", "a", "an", "for", "with", "on", "at", "by", "is", "are"}
    )


def test_is_bengali() -> None:
    assert is_bengali("আমার সোনার বাংলা")
    assert is_bengali("mixed text বাংলা")
    assert not is_bengali("plain english text")
    assert not is_bengali("")
