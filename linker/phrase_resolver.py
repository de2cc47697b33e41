from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from linker.entity_index import EntityIndex
from linker.match_config import Category, MatchConfig, classify
from linker.tokenizer import Token, is_word_char, tokenize, word_bounds


@dataclass(frozen=True)
class PhraseMatch:
    """The longest indexed phrase around a point, with offsets into the queried text."""

    phrase: str
    category: Category
    start: int
    end: int
    word_count: int


class PhraseResolver:
    """Finds the longest indexed phrase containing the word under a point."""

    def __init__(self, index: EntityIndex) -> None:
        self._index = index

    def resolve(self, text: str, offset: int, config: MatchConfig) -> Optional[PhraseMatch]:
        if not text:
            return None
        word_start, word_end = word_bounds(text, offset)
        if word_start == word_end:
            return None

        window_start, window_end = self._window(text, word_start, word_end, config.window_radius)
        window = text[window_start:window_end]
        tokens = tokenize(window)
        pivot = self._pivot_index(tokens, word_start - window_start)
        if pivot is None:
            return None

        for length in range(config.max_phrase_words, 0, -1):
            for shift in range(length):
                first = pivot - shift
                last = first + length
                if first < 0 or last > len(tokens):
                    continue
                start = tokens[first].start
                end = tokens[last - 1].end
                phrase = window[start:end]
                category = classify(self._index, phrase, length, config)
                if category is not None:
                    return PhraseMatch(
                        phrase=phrase,
                        category=category,
                        start=window_start + start,
                        end=window_start + end,
                        word_count=length,
                    )
        return None

    @staticmethod
    def _window(text: str, word_start: int, word_end: int, radius: int):
        start = max(0, word_start - radius)
        end = min(len(text), word_end + radius)
        # Widen to word boundaries so the edge tokens are never truncated.
        while start > 0 and is_word_char(text[start - 1]):
            start -= 1
        while end < len(text) and is_word_char(text[end]):
            end += 1
        return start, end

    @staticmethod
    def _pivot_index(tokens: List[Token], relative_offset: int) -> Optional[int]:
        for i, token in enumerate(tokens):
            if token.start <= relative_offset <= token.end:
                return i
        return None


def resolve_phrase(index: EntityIndex, text: str, offset: int, config: MatchConfig) -> Optional[PhraseMatch]:
    return PhraseResolver(index).resolve(text, offset, config)
