from __future__ import annotations

import logging
from contextlib import suppress
from typing import List, Optional

from PyQt5.QtCore import QObject, pyqtSignal
from PyQt5.QtGui import QTextDocument

from linker.entity_index import Document, EntityIndex
from linker.index_maintainer import IndexMaintainer
from linker.match_config import MatchConfig
from linker.phrase_resolver import PhraseMatch, PhraseResolver
from linker.span_selector import Span, SpanSelector
from linker.suggestions import SuggestionSet, build_suggestions
from settings.link_settings import LinkSettings
from util.hover_scheduler import HoverScheduler
from util.link_highlighter import LinkHighlighter
from vault.vault_loader import load_vault
from vault.vault_watcher import VaultWatcher

logger = logging.getLogger(__name__)


class LinkService(QObject):
    """Coordinates the link index, matching and highlighting for one vault."""

    index_reloaded = pyqtSignal()

    def __init__(
        self,
        vault_root: str,
        settings: Optional[LinkSettings] = None,
        watch: bool = False,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.vault_root = vault_root
        self.settings = settings or LinkSettings()
        self._config = self.settings.to_match_config()
        self.index = EntityIndex(self._config)
        self.maintainer = IndexMaintainer(self.index, self._load_documents, self)
        self.resolver = PhraseResolver(self.index)
        self.selector = SpanSelector(self.index)
        self._highlighters: List[LinkHighlighter] = []
        self.maintainer.index_changed.connect(self._on_index_changed)
        self.maintainer.rebuild()

        self.watcher: Optional[VaultWatcher] = None
        if watch:
            self.watcher = VaultWatcher(vault_root, self.maintainer, self)
            self.watcher.start()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def config(self) -> MatchConfig:
        return self._config

    def resolve_at(self, text: str, offset: int) -> Optional[PhraseMatch]:
        return self.resolver.resolve(text, offset, self._config)

    def highlight(self, text: str) -> List[Span]:
        return self.selector.select_spans(text, self._config)

    def suggestions_for(self, phrase: str, active_document_id: Optional[str] = None) -> SuggestionSet:
        return build_suggestions(
            self.index,
            phrase,
            self._config,
            self.settings.effective_max_results(),
            active_document_id,
        )

    def create_hover_scheduler(self, parent: Optional[QObject] = None) -> HoverScheduler:
        return HoverScheduler(self.resolve_at, self.settings.effective_hover_delay_ms(), parent or self)

    def attach_highlighter(self, document: QTextDocument) -> LinkHighlighter:
        highlighter = LinkHighlighter(document, self.selector, lambda: self._config)
        self._highlighters.append(highlighter)
        return highlighter

    def detach_highlighter(self, highlighter: LinkHighlighter) -> None:
        if highlighter in self._highlighters:
            self._highlighters.remove(highlighter)
            with suppress(RuntimeError):
                highlighter.setDocument(None)

    def update_settings(self, settings: LinkSettings) -> None:
        self.settings = settings
        self._config = settings.to_match_config()
        if not self.maintainer.apply_config(self._config):
            self._rehighlight_all()

    def refresh_index(self) -> None:
        logger.debug("Refreshing link index for %s", self.vault_root)
        self.maintainer.rebuild()

    def shutdown(self) -> None:
        if self.watcher is not None:
            self.watcher.stop()
        with suppress(TypeError, RuntimeError):
            self.maintainer.index_changed.disconnect(self._on_index_changed)
        for highlighter in list(self._highlighters):
            self.detach_highlighter(highlighter)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _load_documents(self) -> List[Document]:
        return load_vault(self.vault_root)

    def _on_index_changed(self, _document_id: str) -> None:
        self._rehighlight_all()
        self.index_reloaded.emit()

    def _rehighlight_all(self) -> None:
        for highlighter in self._highlighters:
            with suppress(RuntimeError):
                highlighter.rehighlight()
