from bible_study.search.tokenizer import tokenize


def test_keeps_verse_reference_and_drops_short_words():
    terms = tokenize("What is John 3:16 about?")

    assert terms == ["what", "john", "3:16", "about"]
    assert "is" not in terms


def test_lowercases_and_strips_punctuation():
    assert tokenize("FAITH, Hope & LOVE!!") == ["faith", "hope", "love"]


def test_drops_tokens_shorter_than_three_characters():
    assert tokenize("of in on an to be faith") == ["faith"]


def test_non_ascii_letters_become_separators():
    # é は英数字ではないので区切りになる
    assert tokenize("café sermon") == ["caf", "sermon"]


def test_empty_and_blank_input():
    assert tokenize("") == []
    assert tokenize("   \n\t ") == []


def test_is_deterministic():
    query = "How does Malik Speckman explain John 15:1-8?"
    assert tokenize(query) == tokenize(query)
