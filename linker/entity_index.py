from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Union

from linker.match_config import Category, MatchConfig, normalize_key

logger = logging.getLogger(__name__)

# Frontmatter key the host uses for source positions, never a user property.
RESERVED_PROPERTY_KEY = "position"


@dataclass(frozen=True)
class Heading:
    text: str
    line: int


@dataclass(frozen=True)
class TagOccurrence:
    tag: str
    line: int


@dataclass
class DocumentMetadata:
    """Structural facts parsed from a document: headings, tags and frontmatter."""

    headings: List[Heading] = field(default_factory=list)
    tags: List[TagOccurrence] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Document:
    document_id: str
    display_name: str
    metadata: Optional[DocumentMetadata] = None


@dataclass(frozen=True)
class NoteRecord:
    document_id: str
    display_name: str


@dataclass(frozen=True)
class HeadingRecord:
    document_id: str
    display_name: str
    heading: str
    line: int


@dataclass(frozen=True)
class TagRecord:
    document_id: str
    display_name: str
    tag: str
    line: int


@dataclass(frozen=True)
class PropertyRecord:
    document_id: str
    display_name: str
    property_name: str
    value: str


SourceRecord = Union[NoteRecord, HeadingRecord, TagRecord, PropertyRecord]


def strip_tag_marker(tag: str) -> str:
    return tag[1:] if tag.startswith("#") else tag


class EntityIndex:
    """Four normalized-key mappings over a document collection.

    Lists keep insertion order and are never deduplicated; a key whose list
    empties is dropped. Records carry denormalized copies of the facts they
    need, never the source document itself.
    """

    def __init__(self, config: Optional[MatchConfig] = None) -> None:
        self.config = config or MatchConfig()
        self._maps: Dict[Category, Dict[str, List[SourceRecord]]] = {category: {} for category in Category}

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def clear(self) -> None:
        for mapping in self._maps.values():
            mapping.clear()

    def index_document(self, document: Document) -> None:
        """Append ``document``'s records. Callers remove prior entries first."""

        doc_id = document.document_id
        name = document.display_name
        self._append(Category.NOTE, name, NoteRecord(doc_id, name))

        metadata = document.metadata
        if metadata is None:
            logger.debug("No metadata for %s; indexed title only", doc_id)
            return

        if self.config.detect_headings:
            for heading in metadata.headings:
                self._append(Category.HEADING, heading.text, HeadingRecord(doc_id, name, heading.text, heading.line))

        if self.config.detect_tags:
            for occurrence in metadata.tags:
                tag = strip_tag_marker(occurrence.tag)
                self._append(Category.TAG, tag, TagRecord(doc_id, name, tag, occurrence.line))

        if self.config.detect_properties:
            for prop, raw in metadata.properties.items():
                if prop == RESERVED_PROPERTY_KEY:
                    continue
                values = raw if isinstance(raw, (list, tuple)) else [raw]
                for value in values:
                    if isinstance(value, str) and len(value) >= self.config.min_match_length:
                        self._append(Category.PROPERTY, value, PropertyRecord(doc_id, name, prop, value))

    def remove_document(self, document_id: str) -> None:
        for mapping in self._maps.values():
            for key in list(mapping.keys()):
                kept = [record for record in mapping[key] if record.document_id != document_id]
                if not kept:
                    del mapping[key]
                elif len(kept) != len(mapping[key]):
                    mapping[key] = kept

    def _append(self, category: Category, text: str, record: SourceRecord) -> None:
        key = normalize_key(text)
        if not key:
            return
        self._maps[category].setdefault(key, []).append(record)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def lookup(self, category: Category, text: str) -> List[SourceRecord]:
        return list(self._maps[category].get(normalize_key(text), ()))

    def has(self, category: Category, text: str) -> bool:
        return normalize_key(text) in self._maps[category]

    def lookup_title(self, name: str) -> List[NoteRecord]:
        return self.lookup(Category.NOTE, name)  # type: ignore[return-value]

    def lookup_heading(self, text: str) -> List[HeadingRecord]:
        return self.lookup(Category.HEADING, text)  # type: ignore[return-value]

    def lookup_tag(self, text: str) -> List[TagRecord]:
        return self.lookup(Category.TAG, strip_tag_marker(text.strip()))  # type: ignore[return-value]

    def lookup_property(self, text: str) -> List[PropertyRecord]:
        return self.lookup(Category.PROPERTY, text)  # type: ignore[return-value]

    def has_title(self, name: str) -> bool:
        return self.has(Category.NOTE, name)

    def has_heading(self, text: str) -> bool:
        return self.has(Category.HEADING, text)

    def has_tag(self, text: str) -> bool:
        return self.has(Category.TAG, strip_tag_marker(text.strip()))

    def has_property(self, text: str) -> bool:
        return self.has(Category.PROPERTY, text)

    def keys(self, category: Category) -> List[str]:
        return list(self._maps[category].keys())

    def document_ids(self) -> Set[str]:
        ids: Set[str] = set()
        for mapping in self._maps.values():
            for records in mapping.values():
                ids.update(record.document_id for record in records)
        return ids

    def stats(self) -> Dict[str, int]:
        return {category.value: len(mapping) for category, mapping in self._maps.items()}

    def snapshot(self) -> Dict[str, Dict[str, List[SourceRecord]]]:
        """Copy of every mapping keyed by category value, for inspection and tests."""
        return {
            category.value: {key: list(records) for key, records in mapping.items()}
            for category, mapping in self._maps.items()
        }
