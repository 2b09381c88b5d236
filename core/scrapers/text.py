"""Render a parsed element to text the way a browser's innerText does."""

import re
from typing import List, Union

from bs4 import NavigableString, Tag
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "caption", "dd", "details",
    "dialog", "div", "dl", "dt", "fieldset", "figcaption", "figure", "footer",
    "form", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li", "main",
    "nav", "ol", "pre", "section", "summary", "table", "tbody", "tfoot",
    "thead", "tr", "ul",
})
SKIPPED_TAGS = frozenset({"script", "style", "noscript", "template", "head", "iframe", "svg"})
CELL_TAGS = frozenset({"td", "th"})
NON_TEXT = (Comment, Declaration, Doctype, ProcessingInstruction)


def _collect(node: Tag, items: List[Union[str, int]]):
    for child in node.children:
        if isinstance(child, NON_TEXT):
            continue
        if isinstance(child, NavigableString):
            items.append(re.sub(r"\s+", " ", str(child)))
            continue
        if not isinstance(child, Tag) or child.name in SKIPPED_TAGS:
            continue
        if child.name == "br":
            items.append("\n")
            continue

        # Paragraphs are separated by a blank line, other blocks by a newline
        breaks = 2 if child.name == "p" else 1 if child.name in BLOCK_TAGS else 0
        if breaks:
            items.append(breaks)
        _collect(child, items)
        if breaks:
            items.append(breaks)
        elif child.name in CELL_TAGS:
            items.append(" ")


def inner_text(element: Tag) -> str:
    """Text of ``element`` with block boundaries turned into line breaks.

    Adjacent block boundaries collapse to the largest break they ask for, so
    nested divs do not produce runs of empty lines.
    """
    if element is None:
        return ""

    items: List[Union[str, int]] = []
    _collect(element, items)

    parts: List[str] = []
    pending = 0
    for item in items:
        if isinstance(item, int):
            pending = max(pending, item)
            continue
        if not item.strip() and item != "\n":
            # Inter-element whitespace only matters between inline content
            if pending or not parts or parts[-1].endswith((" ", "\n")):
                continue
        if pending and parts:
            parts.append("\n" * pending)
        pending = 0
        parts.append(item)

    lines = [" ".join(line.split()) for line in "".join(parts).split("\n")]
    return "\n".join(lines).strip()
