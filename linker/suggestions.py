from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from linker.entity_index import EntityIndex, HeadingRecord, PropertyRecord, TagRecord
from linker.match_config import Category, MatchConfig, normalize_key


def note_link(display_name: str) -> str:
    return f"[[{display_name}]]"


def heading_link(display_name: str, heading: str) -> str:
    return f"[[{display_name}#{heading}]]"


def tag_link(tag: str) -> str:
    return f"#{tag}"


def property_link(display_name: str) -> str:
    return note_link(display_name)


def local_heading_link(heading: str) -> str:
    return f"[[#{heading}]]"


@dataclass(frozen=True)
class Suggestion:
    """One navigable row of the hover popup."""

    category: Category
    label: str
    document_id: str
    link_text: str
    line: Optional[int] = None


@dataclass
class SuggestionSet:
    phrase: str
    current_heading: Optional[Suggestion] = None
    notes: List[Suggestion] = field(default_factory=list)
    headings: List[Suggestion] = field(default_factory=list)
    tags: List[Suggestion] = field(default_factory=list)
    properties: List[Suggestion] = field(default_factory=list)

    @property
    def word_count(self) -> int:
        return len(self.phrase.split())

    def is_empty(self) -> bool:
        return not (self.current_heading or self.notes or self.headings or self.tags or self.properties)

    def sections(self) -> List[Tuple[Category, List[Suggestion]]]:
        return [
            (category, rows)
            for category, rows in (
                (Category.NOTE, self.notes),
                (Category.HEADING, self.headings),
                (Category.TAG, self.tags),
                (Category.PROPERTY, self.properties),
            )
            if rows
        ]


def build_suggestions(
    index: EntityIndex,
    phrase: str,
    config: MatchConfig,
    max_results: int,
    active_document_id: Optional[str] = None,
) -> SuggestionSet:
    """Collect popup rows for ``phrase`` across every enabled category.

    Headings, tags and properties of the active document are left out; a
    heading of the active document itself becomes ``current_heading``. Each
    category is capped to ``max_results`` rows.
    """

    limit = max(1, int(max_results))
    result = SuggestionSet(phrase=phrase)

    if config.detect_notes:
        result.notes = [
            Suggestion(Category.NOTE, rec.display_name, rec.document_id, note_link(rec.display_name))
            for rec in index.lookup_title(phrase)[:limit]
        ]

    if config.detect_headings:
        headings: List[HeadingRecord] = index.lookup_heading(phrase)
        if active_document_id is not None:
            for rec in headings:
                if rec.document_id == active_document_id:
                    result.current_heading = Suggestion(
                        Category.HEADING,
                        f"Here → #{rec.heading}",
                        rec.document_id,
                        local_heading_link(rec.heading),
                        rec.line,
                    )
                    break
        result.headings = [
            Suggestion(
                Category.HEADING,
                f"{rec.display_name} → #{rec.heading}",
                rec.document_id,
                heading_link(rec.display_name, rec.heading),
                rec.line,
            )
            for rec in headings
            if rec.document_id != active_document_id
        ][:limit]

    if config.detect_tags:
        tags: List[TagRecord] = index.lookup_tag(phrase)
        result.tags = [
            Suggestion(
                Category.TAG,
                f"{rec.display_name} (line {rec.line + 1})",
                rec.document_id,
                tag_link(rec.tag),
                rec.line,
            )
            for rec in tags
            if rec.document_id != active_document_id
        ][:limit]

    if config.detect_properties:
        properties: List[PropertyRecord] = index.lookup_property(phrase)
        result.properties = [
            Suggestion(
                Category.PROPERTY,
                f"{rec.display_name} ({rec.property_name})",
                rec.document_id,
                property_link(rec.display_name),
            )
            for rec in properties
            if rec.document_id != active_document_id
        ][:limit]

    return result


def _phrase_pattern(phrase: str) -> "re.Pattern[str]":
    return re.compile(r"\b" + re.escape(phrase) + r"\b", re.IGNORECASE)


def find_first_occurrence(lines: Sequence[str], phrase: str) -> Optional[Tuple[int, int, int]]:
    """Return ``(line, start, end)`` of the first whole-word, case-insensitive hit."""

    if not normalize_key(phrase):
        return None
    pattern = _phrase_pattern(phrase)
    for line_number, line in enumerate(lines):
        match = pattern.search(line)
        if match:
            return line_number, match.start(), match.end()
    return None


def insert_link(lines: Sequence[str], phrase: str, link_text: str) -> List[str]:
    """Replace the first occurrence of ``phrase`` with ``link_text``.

    Lines are returned unchanged when the phrase does not occur.
    """

    updated = list(lines)
    hit = find_first_occurrence(updated, phrase)
    if hit is None:
        return updated
    line_number, start, end = hit
    line = updated[line_number]
    updated[line_number] = line[:start] + link_text + line[end:]
    return updated
