from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, FrozenSet, Optional, Tuple

if TYPE_CHECKING:
    from linker.entity_index import EntityIndex

logger = logging.getLogger(__name__)

MIN_PHRASE_WORDS = 1
MAX_PHRASE_WORDS = 10
DEFAULT_WINDOW_RADIUS = 100


class Category(Enum):
    NOTE = "note"
    HEADING = "heading"
    TAG = "tag"
    PROPERTY = "property"


# Order in which a phrase is tested; the first hit names its category.
CATEGORY_PRIORITY: Tuple[Category, ...] = (
    Category.NOTE,
    Category.HEADING,
    Category.TAG,
    Category.PROPERTY,
)


def normalize_key(text: str) -> str:
    return (text or "").strip().lower()


def _clamp(name: str, value: int, low: int, high: Optional[int] = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s %r; using %s", name, value, low)
        return low
    clamped = max(low, number)
    if high is not None:
        clamped = min(high, clamped)
    if clamped != number:
        logger.warning("Clamped %s from %s to %s", name, number, clamped)
    return clamped


@dataclass(frozen=True)
class MatchConfig:
    """Immutable knobs shared by indexing, phrase resolution and span selection.

    Out-of-range numbers are clamped on construction so interactive matching
    keeps working with a bad settings file.
    """

    max_phrase_words: int = 5
    min_match_length: int = 3
    excluded_words: FrozenSet[str] = field(default_factory=frozenset)
    detect_notes: bool = True
    detect_headings: bool = True
    detect_tags: bool = True
    detect_properties: bool = True
    window_radius: int = DEFAULT_WINDOW_RADIUS

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "max_phrase_words",
            _clamp("max_phrase_words", self.max_phrase_words, MIN_PHRASE_WORDS, MAX_PHRASE_WORDS),
        )
        object.__setattr__(self, "min_match_length", _clamp("min_match_length", self.min_match_length, 1))
        object.__setattr__(self, "window_radius", _clamp("window_radius", self.window_radius, 1))
        object.__setattr__(
            self,
            "excluded_words",
            frozenset(normalize_key(word) for word in self.excluded_words if normalize_key(word)),
        )

    def is_enabled(self, category: Category) -> bool:
        if category is Category.NOTE:
            return self.detect_notes
        if category is Category.HEADING:
            return self.detect_headings
        if category is Category.TAG:
            return self.detect_tags
        return self.detect_properties

    def index_signature(self) -> Tuple[bool, bool, bool, int]:
        """Values that change what gets indexed, as opposed to what gets matched."""
        return (self.detect_headings, self.detect_tags, self.detect_properties, self.min_match_length)


def classify(index: "EntityIndex", phrase: str, word_count: int, config: MatchConfig) -> Optional[Category]:
    """Return the category ``phrase`` matches, or ``None``.

    Exclusions only apply to single-word phrases; a phrase is reported under
    the first enabled category in priority order even if it matches several.
    """

    key = normalize_key(phrase)
    if not key:
        return None
    if word_count == 1 and key in config.excluded_words:
        return None
    if len(phrase) < config.min_match_length:
        return None
    for category in CATEGORY_PRIORITY:
        if config.is_enabled(category) and index.has(category, key):
            return category
    return None
