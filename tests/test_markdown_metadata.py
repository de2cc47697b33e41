from linker.entity_index import Document, EntityIndex, Heading, TagOccurrence
from linker.match_config import MatchConfig
from vault.markdown_metadata import parse_markdown, split_frontmatter

NOTE = """---
author: Alice
aliases:
  - Deep Nets
  - DN
rating: 5
---
# Neural Networks
Some text about #ml and #project-x here.

## Training Loop ##
Not a tag: issue#42 or #123 or `#code` inline.
```
# not a heading
#nottag
```
#### Results
Nested #area/sub tag.
"""


def test_frontmatter_properties():
    meta = parse_markdown(NOTE)
    assert meta.properties == {"author": "Alice", "aliases": ["Deep Nets", "DN"], "rating": 5}


def test_headings_with_file_line_numbers():
    meta = parse_markdown(NOTE)
    assert meta.headings == [
        Heading("Neural Networks", 7),
        Heading("Training Loop", 10),
        Heading("Results", 16),
    ]


def test_inline_tags_skip_code_and_numbers():
    meta = parse_markdown(NOTE)
    assert meta.tags == [
        TagOccurrence("#ml", 8),
        TagOccurrence("#project-x", 8),
        TagOccurrence("#area/sub", 17),
    ]


def test_no_frontmatter():
    properties, body_start = split_frontmatter("# Title\ntext")
    assert properties == {}
    assert body_start == 0
    assert parse_markdown("# Title\ntext").headings == [Heading("Title", 0)]


def test_malformed_frontmatter_is_ignored():
    text = "---\nauthor: [unclosed\n---\n# Heading\n"
    meta = parse_markdown(text)
    assert meta.properties == {}
    assert meta.headings == [Heading("Heading", 3)]


def test_unterminated_frontmatter_is_body():
    meta = parse_markdown("---\ntitle: x\n# Heading")
    assert meta.properties == {}
    assert meta.headings == [Heading("Heading", 2)]


def test_non_mapping_frontmatter():
    properties, body_start = split_frontmatter("---\n- a\n- b\n---\nbody")
    assert properties == {}
    assert body_start == 4


def test_empty_text():
    meta = parse_markdown("")
    assert meta.headings == [] and meta.tags == [] and meta.properties == {}


def test_dates_and_yes_no_stay_strings():
    meta = parse_markdown("---\ncreated: 2024-01-15\nreviewed: yes\nstatus: off\ndraft: true\n---\nbody\n")
    assert meta.properties == {"created": "2024-01-15", "reviewed": "yes", "status": "off", "draft": True}

    index = EntityIndex(MatchConfig())
    index.index_document(Document("d.md", "D", meta))
    assert index.has_property("2024-01-15")
    assert index.has_property("yes")
    assert not index.has_property("true")


def test_tags_in_heading_text():
    meta = parse_markdown("# Sprint plan #active\nbody\n")
    assert meta.headings == [Heading("Sprint plan #active", 0)]
    assert meta.tags == [TagOccurrence("#active", 0)]
