from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Tuple

_WORD_RE = re.compile(r"\w+")


@dataclass(frozen=True)
class Token:
    """A maximal run of word characters and its half-open offsets in the source text."""

    text: str
    start: int
    end: int


def is_word_char(ch: str) -> bool:
    return bool(ch) and _WORD_RE.fullmatch(ch) is not None


def iter_tokens(text: str) -> Iterator[Token]:
    """Yield tokens left to right. Calling it again restarts the scan."""

    for match in _WORD_RE.finditer(text or ""):
        yield Token(text=match.group(0), start=match.start(), end=match.end())


def tokenize(text: str) -> List[Token]:
    return list(iter_tokens(text))


def word_bounds(text: str, offset: int) -> Tuple[int, int]:
    """Expand ``offset`` left and right over word characters.

    Returns an empty range (start == end) when the offset is neither inside nor
    adjacent to a word.
    """

    offset = max(0, min(offset, len(text)))
    start = offset
    end = offset
    while start > 0 and is_word_char(text[start - 1]):
        start -= 1
    while end < len(text) and is_word_char(text[end]):
        end += 1
    return start, end
