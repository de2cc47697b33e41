from __future__ import annotations

from typing import Callable, Dict, List, Optional

from PyQt5.QtGui import QColor, QSyntaxHighlighter, QTextCharFormat, QTextDocument

from linker.match_config import Category, MatchConfig
from linker.span_selector import Span, SpanSelector

DEFAULT_CATEGORY_COLORS: Dict[Category, str] = {
    Category.NOTE: "#7c5cff",
    Category.HEADING: "#2f9e44",
    Category.TAG: "#e8590c",
    Category.PROPERTY: "#1971c2",
}


class LinkHighlighter(QSyntaxHighlighter):
    """Underline linkable phrases block by block and remember what was found."""

    def __init__(
        self,
        document: QTextDocument,
        selector: SpanSelector,
        config_provider: Callable[[], MatchConfig],
        colors: Optional[Dict[Category, str]] = None,
    ) -> None:
        super().__init__(document)
        self._selector = selector
        self._config_provider = config_provider
        self._formats: Dict[Category, QTextCharFormat] = {}
        self._block_spans: Dict[int, List[Span]] = {}
        self._enabled = True
        palette = dict(DEFAULT_CATEGORY_COLORS)
        palette.update(colors or {})
        for category, color in palette.items():
            fmt = QTextCharFormat()
            fmt.setFontUnderline(True)
            fmt.setUnderlineStyle(QTextCharFormat.DashUnderline)
            fmt.setUnderlineColor(QColor(color))
            self._formats[category] = fmt

    def set_enabled(self, enabled: bool) -> None:
        if enabled == self._enabled:
            return
        self._enabled = enabled
        self.rehighlight()

    def spans_for_block(self, block_number: int) -> List[Span]:
        return list(self._block_spans.get(block_number, []))

    def span_at(self, block_number: int, column: int) -> Optional[Span]:
        for span in self._block_spans.get(block_number, []):
            if span.start <= column < span.end:
                return span
        return None

    def highlightBlock(self, text: str) -> None:  # noqa: N802 - Qt override
        block_number = self.currentBlock().blockNumber()
        if not self._enabled or not text:
            self._block_spans.pop(block_number, None)
            return
        spans = self._selector.select_spans(text, self._config_provider())
        for span in spans:
            self.setFormat(span.start, span.length, self._formats[span.category])
        if spans:
            self._block_spans[block_number] = spans
        else:
            self._block_spans.pop(block_number, None)
