from linker.entity_index import Document, DocumentMetadata, EntityIndex, Heading, TagOccurrence
from linker.match_config import MatchConfig


def make_doc(doc_id, name, headings=(), tags=(), properties=None, metadata=True):
    meta = None
    if metadata:
        meta = DocumentMetadata(
            headings=[Heading(text, line) for text, line in headings],
            tags=[TagOccurrence(tag, line) for tag, line in tags],
            properties=dict(properties or {}),
        )
    return Document(document_id=doc_id, display_name=name, metadata=meta)


def build_index(*documents, config=None):
    index = EntityIndex(config or MatchConfig())
    for doc in documents:
        index.index_document(doc)
    return index
