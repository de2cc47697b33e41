from __future__ import annotations

import logging
import os
from contextlib import suppress
from typing import Dict, List, Optional, Tuple

from PyQt5.QtCore import QFileSystemWatcher, QObject, QTimer, pyqtSignal

from linker.index_maintainer import IndexMaintainer
from vault.vault_loader import document_id_for, iter_markdown_paths, load_document

logger = logging.getLogger(__name__)

Snapshot = Dict[str, Tuple[int, int]]


class VaultWatcher(QObject):
    """Debounced QFileSystemWatcher that feeds vault changes to an IndexMaintainer.

    Bursts of filesystem events collapse into one :meth:`rescan`, which diffs
    ``(mtime_ns, size)`` snapshots. A rename shows up as a deletion plus a
    creation since the filesystem does not pair them.
    """

    rescanned = pyqtSignal(int)

    def __init__(
        self,
        root: str,
        maintainer: IndexMaintainer,
        parent: Optional[QObject] = None,
        interval_ms: int = 250,
    ) -> None:
        super().__init__(parent)
        self._root = root
        self._maintainer = maintainer
        self._snapshot: Snapshot = {}
        self._paths: Dict[str, str] = {}
        self._watcher = QFileSystemWatcher(self)
        self._watcher.fileChanged.connect(self._on_path_changed)
        self._watcher.directoryChanged.connect(self._on_path_changed)
        self._rescan_timer = QTimer(self)
        self._rescan_timer.setSingleShot(True)
        self._rescan_timer.setInterval(interval_ms)
        self._rescan_timer.timeout.connect(self.rescan)

    def start(self) -> None:
        """Record the current state without dispatching events and begin watching."""
        self._snapshot = self._take_snapshot()
        self._reset_watch_paths()

    def stop(self) -> None:
        self._rescan_timer.stop()
        self._clear_watch_paths()

    def rescan(self) -> int:
        """Dispatch created/deleted/changed events for everything that moved.

        Returns the number of events dispatched.
        """

        current = self._take_snapshot()
        previous = self._snapshot
        self._snapshot = current
        events = 0

        for document_id in sorted(previous.keys() - current.keys()):
            self._maintainer.on_document_deleted(document_id)
            events += 1
        for document_id in sorted(current.keys() - previous.keys()):
            self._maintainer.on_document_created(load_document(self._root, self._paths[document_id]))
            events += 1
        for document_id in sorted(current.keys() & previous.keys()):
            if current[document_id] != previous[document_id]:
                self._maintainer.on_document_changed(load_document(self._root, self._paths[document_id]))
                events += 1

        if events:
            logger.debug("Vault rescan dispatched %d events", events)
        self._reset_watch_paths()
        self.rescanned.emit(events)
        return events

    def _take_snapshot(self) -> Snapshot:
        snapshot: Snapshot = {}
        paths: Dict[str, str] = {}
        if not os.path.isdir(self._root):
            self._paths = paths
            return snapshot
        for path in iter_markdown_paths(self._root):
            try:
                stat = os.stat(path)
            except OSError:
                continue
            document_id = document_id_for(self._root, path)
            snapshot[document_id] = (stat.st_mtime_ns, stat.st_size)
            paths[document_id] = str(path)
        self._paths = paths
        return snapshot

    def _watch_targets(self) -> List[str]:
        targets: List[str] = []
        if not os.path.isdir(self._root):
            return targets
        for dirpath, dirnames, _filenames in os.walk(self._root):
            dirnames[:] = [name for name in dirnames if not name.startswith(".")]
            targets.append(dirpath)
        targets.extend(self._paths.values())
        return targets

    def _clear_watch_paths(self) -> None:
        for path in list(self._watcher.files()) + list(self._watcher.directories()):
            with suppress(RuntimeError, TypeError):
                self._watcher.removePath(path)

    def _reset_watch_paths(self) -> None:
        self._watcher.blockSignals(True)
        self._clear_watch_paths()
        targets = self._watch_targets()
        if targets:
            self._watcher.addPaths(targets)
        self._watcher.blockSignals(False)

    def _on_path_changed(self, _path: str) -> None:
        if self._rescan_timer.isActive():
            self._rescan_timer.stop()
        self._rescan_timer.start()
