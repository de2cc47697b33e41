from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from linker.entity_index import EntityIndex
from linker.match_config import Category, MatchConfig, classify
from linker.tokenizer import tokenize


@dataclass(frozen=True)
class Span:
    phrase: str
    category: Category
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


class SpanSelector:
    """Picks a non-overlapping, longest-first set of indexed phrases in a block of text."""

    def __init__(self, index: EntityIndex) -> None:
        self._index = index

    def candidates(self, text: str, config: MatchConfig) -> List[Span]:
        """Every classified phrase, in discovery order (start ascending, longer first)."""

        tokens = tokenize(text)
        found: List[Span] = []
        for i in range(len(tokens)):
            for length in range(config.max_phrase_words, 0, -1):
                if i + length > len(tokens):
                    continue
                start = tokens[i].start
                end = tokens[i + length - 1].end
                phrase = text[start:end]
                category = classify(self._index, phrase, length, config)
                if category is not None:
                    found.append(Span(phrase=phrase, category=category, start=start, end=end))
        return found

    def select_spans(self, text: str, config: MatchConfig) -> List[Span]:
        if not text:
            return []
        # sorted() is stable: equal lengths keep discovery order.
        ranked = sorted(self.candidates(text, config), key=lambda span: span.length, reverse=True)
        claimed = [False] * len(text)
        accepted: List[Span] = []
        for span in ranked:
            if any(claimed[span.start:span.end]):
                continue
            for pos in range(span.start, span.end):
                claimed[pos] = True
            accepted.append(span)
        accepted.sort(key=lambda span: span.start)
        return accepted


def default_wrap(span: Span) -> str:
    return '<span class="magiclink-word" data-category="{}">{}</span>'.format(
        span.category.value, span.phrase
    )


def wrap_spans(text: str, spans: Sequence[Span], wrap: Optional[Callable[[Span], str]] = None) -> str:
    """Rebuild ``text`` left to right, replacing each span with ``wrap(span)``.

    ``spans`` must be ordered and non-overlapping, as returned by
    :meth:`SpanSelector.select_spans`. Text between spans passes through verbatim.
    """

    wrap = wrap or default_wrap
    parts: List[str] = []
    cursor = 0
    for span in spans:
        parts.append(text[cursor:span.start])
        parts.append(wrap(span))
        cursor = span.end
    parts.append(text[cursor:])
    return "".join(parts)
