from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from linker.entity_index import Document, EntityIndex
from linker.match_config import MatchConfig

logger = logging.getLogger(__name__)

DocumentSource = Callable[[], Iterable[Document]]


class IndexMaintainer(QObject):
    """Keeps an :class:`EntityIndex` in step with document lifecycle events.

    The host calls the ``on_document_*`` handlers one at a time from its event
    loop. Every handler removes the document's previous records before
    re-indexing it, so overlapping events for one document end with the state
    of the last one applied.
    """

    # Emits the affected document id, or "" after a full rebuild.
    index_changed = pyqtSignal(str)

    def __init__(
        self,
        index: EntityIndex,
        document_source: Optional[DocumentSource] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.index = index
        self._document_source = document_source

    def rebuild(self) -> int:
        self.index.clear()
        count = 0
        if self._document_source is not None:
            for document in self._document_source():
                self.index.index_document(document)
                count += 1
        logger.debug("Rebuilt link index from %d documents: %s", count, self.index.stats())
        self.index_changed.emit("")
        return count

    def on_document_created(self, document: Document) -> None:
        self.index.remove_document(document.document_id)
        self.index.index_document(document)
        logger.debug("Indexed new document %s", document.document_id)
        self.index_changed.emit(document.document_id)

    def on_document_deleted(self, document_id: str) -> None:
        self.index.remove_document(document_id)
        logger.debug("Removed document %s from link index", document_id)
        self.index_changed.emit(document_id)

    def on_document_renamed(self, old_id: str, document: Document) -> None:
        self.index.remove_document(old_id)
        self.index.remove_document(document.document_id)
        self.index.index_document(document)
        logger.debug("Re-indexed %s after rename from %s", document.document_id, old_id)
        self.index_changed.emit(document.document_id)

    def on_document_changed(self, document: Document) -> None:
        self.index.remove_document(document.document_id)
        self.index.index_document(document)
        self.index_changed.emit(document.document_id)

    def apply_config(self, config: MatchConfig) -> bool:
        """Install ``config``; rebuild when it changes what gets indexed.

        Returns True when a rebuild happened.
        """

        previous = self.index.config
        self.index.config = config
        if previous.index_signature() == config.index_signature():
            return False
        logger.debug("Index settings changed; rebuilding")
        self.rebuild()
        return True
