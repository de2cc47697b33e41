from __future__ import annotations

from typing import Callable, Optional, Tuple

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from linker.phrase_resolver import PhraseMatch

TYPING_QUIET_MS = 2000

Resolver = Callable[[str, int], Optional[PhraseMatch]]


class HoverScheduler(QObject):
    """Defers phrase resolution until the pointer rests on a spot.

    Every :meth:`hover` supersedes the pending one; nothing is resolved until
    the delay elapses, so a cancelled hover leaves no state behind. Hovers are
    ignored while the user is typing.
    """

    phrase_ready = pyqtSignal(object)

    def __init__(self, resolver: Resolver, delay_ms: int = 250, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._resolver = resolver
        self._pending: Optional[Tuple[str, int]] = None
        self._last_phrase: Optional[str] = None
        self._typing = False

        self._hover_timer = QTimer(self)
        self._hover_timer.setSingleShot(True)
        self._hover_timer.setInterval(max(0, delay_ms))
        self._hover_timer.timeout.connect(self.flush)

        self._typing_timer = QTimer(self)
        self._typing_timer.setSingleShot(True)
        self._typing_timer.setInterval(TYPING_QUIET_MS)
        self._typing_timer.timeout.connect(self._on_typing_stopped)

    def is_pending(self) -> bool:
        return self._pending is not None

    def is_typing(self) -> bool:
        return self._typing

    def hover(self, text: str, offset: int) -> None:
        if self._typing:
            return
        self._pending = (text, offset)
        if self._hover_timer.isActive():
            self._hover_timer.stop()
        self._hover_timer.start()

    def leave(self) -> None:
        self._hover_timer.stop()
        self._pending = None

    def reset(self) -> None:
        """Forget the last shown phrase, e.g. after the popup closed."""
        self.leave()
        self._last_phrase = None

    def note_typing(self) -> None:
        self._typing = True
        self.leave()
        if self._typing_timer.isActive():
            self._typing_timer.stop()
        self._typing_timer.start()

    def flush(self) -> Optional[PhraseMatch]:
        """Resolve the pending hover now; emits ``phrase_ready`` for a new phrase."""

        self._hover_timer.stop()
        pending = self._pending
        self._pending = None
        if pending is None:
            return None
        match = self._resolver(*pending)
        if match is None or match.phrase == self._last_phrase:
            return None
        self._last_phrase = match.phrase
        self.phrase_ready.emit(match)
        return match

    def _on_typing_stopped(self) -> None:
        self._typing = False
