from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Tuple

import yaml

from linker.entity_index import DocumentMetadata, Heading, TagOccurrence

logger = logging.getLogger(__name__)

_FRONTMATTER_FENCE = "---"
_HEADING_RE = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t]*$")
_CLOSING_HASHES_RE = re.compile(r"[ \t]+#+$")
_CODE_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_INLINE_CODE_RE = re.compile(r"`[^`]*`")
_BOOL_TAG = "tag:yaml.org,2002:bool"
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
# A tag needs at least one non-digit and cannot follow a word character ("a#b").
_TAG_RE = re.compile(r"(?<![\w#/&])#([\w/-]*[^\W\d][\w/-]*)")


# Frontmatter values stay strings: only true/false become booleans and dates are
# left as text, the way the editor hands them over.
class FrontmatterLoader(yaml.SafeLoader):
    pass


FrontmatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in (_BOOL_TAG, _TIMESTAMP_TAG)]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
FrontmatterLoader.add_implicit_resolver(
    _BOOL_TAG, re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"), list("tTfF")
)


def split_frontmatter(text: str) -> Tuple[Dict[str, Any], int]:
    """Parse a leading ``---`` YAML block.

    Returns the property mapping and the index of the first body line. Malformed
    or non-mapping YAML yields no properties.
    """

    lines = text.splitlines()
    if not lines or lines[0].strip() != _FRONTMATTER_FENCE:
        return {}, 0
    for end in range(1, len(lines)):
        if lines[end].strip() == _FRONTMATTER_FENCE:
            break
    else:
        return {}, 0

    block = "\n".join(lines[1:end])
    try:
        data = yaml.load(block, Loader=FrontmatterLoader) if block.strip() else {}
    except yaml.YAMLError as exc:
        logger.warning("Ignoring malformed frontmatter: %s", exc)
        return {}, end + 1
    if not isinstance(data, dict):
        return {}, end + 1
    return {str(key): value for key, value in data.items()}, end + 1


def parse_markdown(text: str) -> DocumentMetadata:
    """Extract headings, inline tags and frontmatter properties from Markdown.

    Line numbers are 0-based positions in the whole file, frontmatter included.
    Code fences and inline code spans are skipped.
    """

    properties, body_start = split_frontmatter(text or "")
    headings: List[Heading] = []
    tags: List[TagOccurrence] = []
    in_fence = False

    for line_number, line in enumerate((text or "").splitlines()):
        if line_number < body_start:
            continue
        if _CODE_FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue

        visible = _INLINE_CODE_RE.sub(lambda m: " " * len(m.group(0)), line)
        heading = _HEADING_RE.match(line)
        if heading:
            title = _CLOSING_HASHES_RE.sub("", heading.group(2)).strip()
            if title:
                headings.append(Heading(text=title, line=line_number))
            # Scan the heading text only, so the "#" markers are not read as tags.
            visible = visible[heading.start(2):]

        for match in _TAG_RE.finditer(visible):
            tags.append(TagOccurrence(tag="#" + match.group(1), line=line_number))

    return DocumentMetadata(headings=headings, tags=tags, properties=properties)
