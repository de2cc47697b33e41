import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt5.QtWidgets import QApplication

from linker.entity_index import EntityIndex
from linker.index_maintainer import IndexMaintainer
from linker.match_config import MatchConfig
from vault.vault_loader import document_id_for, display_name_for, iter_markdown_paths, load_document, load_vault
from vault.vault_watcher import VaultWatcher


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_load_vault_reads_markdown_only(tmp_path):
    _write(tmp_path / "Alpha.md", "---\nauthor: Alice\n---\n# Intro\n#draft\n")
    _write(tmp_path / "sub" / "Beta Notes.md", "plain text")
    _write(tmp_path / "ignore.txt", "# Not markdown")
    _write(tmp_path / ".obsidian" / "Hidden.md", "# Hidden")

    documents = load_vault(str(tmp_path))
    by_id = {doc.document_id: doc for doc in documents}
    assert sorted(by_id) == ["Alpha.md", "sub/Beta Notes.md"]
    alpha = by_id["Alpha.md"]
    assert alpha.display_name == "Alpha"
    assert alpha.metadata.properties == {"author": "Alice"}
    assert [h.text for h in alpha.metadata.headings] == ["Intro"]
    assert [t.tag for t in alpha.metadata.tags] == ["#draft"]
    assert by_id["sub/Beta Notes.md"].display_name == "Beta Notes"


def test_missing_vault_is_empty(tmp_path):
    assert load_vault(str(tmp_path / "missing")) == []


def test_unreadable_file_keeps_title(tmp_path):
    path = tmp_path / "Broken.md"
    path.write_bytes(b"\xff\xfe\xfa invalid utf-8")
    document = load_document(str(tmp_path), str(path))
    assert document.display_name == "Broken"
    assert document.metadata is None


def test_path_helpers(tmp_path):
    path = tmp_path / "a" / "Note.md"
    assert document_id_for(str(tmp_path), str(path)) == "a/Note.md"
    assert display_name_for(str(path)) == "Note"
    _write(path, "x")
    assert list(iter_markdown_paths(str(tmp_path))) == [path]


def test_watcher_rescan_dispatches_changes(tmp_path):
    app = QApplication.instance() or QApplication([])
    _write(tmp_path / "Alpha.md", "# Intro\n")
    _write(tmp_path / "Beta.md", "#draft\n")

    index = EntityIndex(MatchConfig())
    maintainer = IndexMaintainer(index, lambda: load_vault(str(tmp_path)))
    maintainer.rebuild()
    watcher = VaultWatcher(str(tmp_path), maintainer)
    watcher.start()
    assert watcher.rescan() == 0

    _write(tmp_path / "Gamma.md", "# Outro\n")
    os.remove(tmp_path / "Beta.md")
    _write(tmp_path / "Alpha.md", "# Summary section\n")

    assert watcher.rescan() == 3
    assert index.has_title("gamma")
    assert index.has_heading("outro")
    assert not index.has_title("beta")
    assert not index.has_tag("draft")
    assert index.has_heading("summary section")
    assert not index.has_heading("intro")
    watcher.stop()
