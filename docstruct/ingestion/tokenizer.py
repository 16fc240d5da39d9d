"""Word-count policies used by the segmenter."""

import re
from abc import ABC, abstractmethod

# Counting policy constants
MAX_URL_WORD_COUNT = 3
MAX_HYPHEN_PARTS_AS_ONE_WORD = 3

# Hyphenated compounds whose word count is fixed regardless of part count.
HYPHENATED_WORD_EXCEPTIONS: dict[str, int] = {
    "state-of-the-art": 2,
}

URL_PATTERN = re.compile(r"^https?://\S+", re.IGNORECASE)
URL_SEPARATORS = re.compile(r"[/?#&=]")
NUMERIC_PATTERN = re.compile(r"^\d+(?:[.,]\d+)*\.?$")
NON_WORD_CHARS = re.compile(r"[^\w.-]")


class WordCounter(ABC):
    """Counts words in a piece of text.

    Implementations must be deterministic: the same text always yields the
    same count. Counts are taken at sentence level only; higher levels sum.
    """

    @abstractmethod
    def count(self, text: str) -> int:
        raise NotImplementedError


class WhitespaceWordCounter(WordCounter):
    """Whitespace tokenizer with special handling for numbers, URLs and compounds.

    Policy, applied per whitespace-delimited token:
    - a URL counts as its non-empty host/path/query segments, capped at
      ``MAX_URL_WORD_COUNT``;
    - a token with no word characters (punctuation, emoji) counts as 0;
    - a purely numeric token counts as 0;
    - a hyphenated token counts as 1 unless it has more than
      ``MAX_HYPHEN_PARTS_AS_ONE_WORD`` parts, then as its part count,
      except for entries in ``HYPHENATED_WORD_EXCEPTIONS``;
    - anything else counts as 1.

    This is not linguistically correct for scripts without spaces (CJK etc.);
    plug in another ``WordCounter`` for those.
    """

    def count(self, text: str) -> int:
        return sum(self.count_token(token) for token in text.split())

    def count_token(self, token: str) -> int:
        if URL_PATTERN.match(token):
            return self._count_url(token)

        clean = NON_WORD_CHARS.sub("", token)
        if not clean.strip(".-_"):
            return 0

        if NUMERIC_PATTERN.match(clean):
            return 0

        if "-" in clean.strip("-"):
            return self._count_hyphenated(clean.strip(".-"))

        return 1

    def _count_url(self, token: str) -> int:
        without_scheme = re.sub(r"^https?://", "", token, flags=re.IGNORECASE)
        segments = [part for part in URL_SEPARATORS.split(without_scheme) if part]
        return min(len(segments), MAX_URL_WORD_COUNT)

    def _count_hyphenated(self, token: str) -> int:
        exception = HYPHENATED_WORD_EXCEPTIONS.get(token.lower())
        if exception is not None:
            return exception

        parts = [part for part in token.split("-") if part]
        if len(parts) <= MAX_HYPHEN_PARTS_AS_ONE_WORD:
            return 1
        return len(parts)


def count_words(text: str) -> int:
    """Count words in ``text`` with the default whitespace policy.

    Args:
        text: The text to count.

    Returns:
        Word count under ``WhitespaceWordCounter``.
    """
    return WhitespaceWordCounter().count(text)
