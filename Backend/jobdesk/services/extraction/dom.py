# =============================================================================
# HTML Parsing Helpers
# =============================================================================
"""
Thin wrapper around BeautifulSoup used by every extraction strategy.

Strategies only depend on ``parse_html`` returning a queryable tree, which
keeps them testable against small synthetic documents.
"""

from typing import Union

from bs4 import BeautifulSoup, Tag
from bs4.element import (
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
)


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
NON_CONTENT_TAGS = ("script", "style", "noscript", "template")

BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3",
    "h4", "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre",
    "section", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
})

_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)
_BLOCK_END = object()


def parse_html(html: str) -> BeautifulSoup:
    """
    Parse an HTML document or fragment.

    Args:
        html: Markup to parse.

    Returns:
        BeautifulSoup tree built with the lxml parser.
    """
    return BeautifulSoup(html or "", "lxml")


def drop_non_content(soup: Union[BeautifulSoup, Tag]) -> None:
    """Remove script, style and similar elements in place."""
    for tag in soup(list(NON_CONTENT_TAGS)):
        tag.decompose()


def html_to_text(node: Union[BeautifulSoup, Tag, NavigableString]) -> str:
    """
    Render a tree as text with line breaks at block boundaries.

    Inline markup is joined without separators so ``Build <b>things</b>``
    stays on one line, while paragraphs and list items get their own lines.
    Walks the tree iteratively, so deeply nested pages cannot exhaust the
    recursion limit.

    Args:
        node: Tree, element or string to render.

    Returns:
        Raw (unnormalized) text.
    """
    if not isinstance(node, Tag):
        return "" if isinstance(node, _SKIPPED_STRINGS) else str(node)

    parts: list[str] = []
    stack: list = list(reversed(node.contents))
    while stack:
        item = stack.pop()
        if item is _BLOCK_END:
            parts.append("\n")
        elif isinstance(item, Tag):
            if item.name == "br":
                parts.append("\n")
                continue
            if item.name in BLOCK_TAGS:
                parts.append("\n")
                stack.append(_BLOCK_END)
            stack.extend(reversed(item.contents))
        elif isinstance(item, NavigableString) and not isinstance(item, _SKIPPED_STRINGS):
            parts.append(str(item))
    return "".join(parts)
