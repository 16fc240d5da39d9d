"""Tests for the word-count policies."""

import pytest

from docstruct.ingestion.tokenizer import (
    WhitespaceWordCounter,
    WordCounter,
    count_words,
)


@pytest.fixture
def counter() -> WhitespaceWordCounter:
    return WhitespaceWordCounter()


class TestWhitespaceWordCounter:
    def test_empty_string(self, counter: WhitespaceWordCounter) -> None:
        assert counter.count("") == 0

    def test_whitespace_only(self, counter: WhitespaceWordCounter) -> None:
        assert counter.count("  \n\t ") == 0

    def test_simple_sentences(self, counter: WhitespaceWordCounter) -> None:
        assert counter.count("Hello world.") == 2
        assert counter.count("How are you?") == 3

    def test_punctuation_only_tokens_do_not_count(
        self, counter: WhitespaceWordCounter
    ) -> None:
        assert counter.count("Wait ... what — really !") == 3

    def test_numbers_do_not_count(self, counter: WhitespaceWordCounter) -> None:
        assert counter.count("Chapter 42 costs 3.14 or 1,000.") == 3

    def test_ordinal_counts_as_word(self, counter: WhitespaceWordCounter) -> None:
        assert counter.count("2nd") == 1

    def test_short_hyphenated_is_one_word(self, counter: WhitespaceWordCounter) -> None:
        assert counter.count("well-known") == 1
        assert counter.count("mother-in-law") == 1

    def test_long_hyphenated_counts_parts(self, counter: WhitespaceWordCounter) -> None:
        assert counter.count("one-two-three-four") == 4

    def test_hyphenated_exception(self, counter: WhitespaceWordCounter) -> None:
        assert counter.count("state-of-the-art") == 2
        assert counter.count("State-of-the-art.") == 2

    def test_url_counts_segments(self, counter: WhitespaceWordCounter) -> None:
        assert counter.count("https://example.com") == 1
        assert counter.count("https://example.com/docs") == 2

    def test_url_count_is_capped(self, counter: WhitespaceWordCounter) -> None:
        assert counter.count("https://example.com/a/b/c/d?x=1") == 3

    def test_deterministic(self, counter: WhitespaceWordCounter) -> None:
        text = "The quick brown fox, https://x.org/a, jumps 3 times."
        assert counter.count(text) == counter.count(text)


class TestWordCounterPlugin:
    def test_custom_counter(self) -> None:
        class CharacterCounter(WordCounter):
            def count(self, text: str) -> int:
                return len(text.replace(" ", ""))

        assert CharacterCounter().count("日本 語") == 3

    def test_abstract_counter_cannot_be_instantiated(self) -> None:
        with pytest.raises(TypeError):
            WordCounter()  # type: ignore[abstract]


class TestCountWords:
    def test_uses_default_policy(self) -> None:
        assert count_words("Hello world. How are you?") == 5
