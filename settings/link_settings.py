import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, FrozenSet

from linker.match_config import MatchConfig

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_WORDS = "the, and, for, with, this, that, from, have, been"
SETTINGS_FILENAME = "magiclink_settings.json"


def parse_excluded_words(raw: str) -> FrozenSet[str]:
    """Split a comma-separated list into trimmed, lowercased words."""
    if not raw:
        return frozenset()
    return frozenset(word.strip().lower() for word in str(raw).split(",") if word.strip())


@dataclass
class LinkSettings:
    """User-facing settings, persisted as JSON.

    Numeric values are stored as entered; :meth:`to_match_config` clamps them.
    """

    hover_delay_ms: int = 250
    min_word_length: int = 3
    max_results: int = 10
    max_phrase_words: int = 5
    detect_notes: bool = True
    detect_headings: bool = True
    detect_tags: bool = True
    detect_properties: bool = True
    excluded_words: str = DEFAULT_EXCLUDED_WORDS
    show_insert_buttons: bool = True

    def excluded_word_set(self) -> FrozenSet[str]:
        return parse_excluded_words(self.excluded_words)

    def to_match_config(self) -> MatchConfig:
        return MatchConfig(
            max_phrase_words=self.max_phrase_words,
            min_match_length=self.min_word_length,
            excluded_words=self.excluded_word_set(),
            detect_notes=self.detect_notes,
            detect_headings=self.detect_headings,
            detect_tags=self.detect_tags,
            detect_properties=self.detect_properties,
        )

    def effective_max_results(self) -> int:
        try:
            return max(1, int(self.max_results))
        except (TypeError, ValueError):
            return LinkSettings.max_results

    def effective_hover_delay_ms(self) -> int:
        try:
            return max(0, int(self.hover_delay_ms))
        except (TypeError, ValueError):
            return LinkSettings.hover_delay_ms

    def as_data(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "LinkSettings":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in (data or {}).items() if key in known})


def load_settings(path: str) -> LinkSettings:
    if not os.path.exists(path):
        return LinkSettings()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not load settings from %s: %s", path, e)
        return LinkSettings()
    if not isinstance(data, dict):
        logger.warning("Settings file %s does not hold an object; using defaults", path)
        return LinkSettings()
    return LinkSettings.from_data(data)


def save_settings(settings: LinkSettings, path: str) -> None:
    dirpath = os.path.dirname(path)
    if dirpath and not os.path.exists(dirpath):
        os.makedirs(dirpath, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings.as_data(), f, indent=2)
