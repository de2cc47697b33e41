from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, List, Union

from linker.entity_index import Document
from vault.markdown_metadata import parse_markdown

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSION = ".md"

PathLike = Union[str, "os.PathLike[str]"]


def document_id_for(root: PathLike, path: PathLike) -> str:
    """Vault-relative POSIX path, the stable identity of a document."""
    return Path(os.path.relpath(path, root)).as_posix()


def display_name_for(path: PathLike) -> str:
    return Path(path).stem


def iter_markdown_paths(root: PathLike) -> Iterator[Path]:
    """Yield Markdown files under ``root``, skipping hidden directories."""

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
        for filename in sorted(filenames):
            if filename.lower().endswith(MARKDOWN_EXTENSION):
                yield Path(dirpath) / filename


def load_document(root: PathLike, path: PathLike) -> Document:
    """Read and parse one file.

    A file that cannot be read still yields a document (its title stays
    linkable) with ``metadata=None``.
    """

    document_id = document_id_for(root, path)
    name = display_name_for(path)
    try:
        with open(path, "r", encoding="utf-8") as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return Document(document_id=document_id, display_name=name, metadata=None)
    return Document(document_id=document_id, display_name=name, metadata=parse_markdown(text))


def load_vault(root: PathLike) -> List[Document]:
    if not os.path.isdir(root):
        logger.warning("Vault directory %s does not exist", root)
        return []
    documents = [load_document(root, path) for path in iter_markdown_paths(root)]
    logger.debug("Loaded %d documents from %s", len(documents), root)
    return documents
