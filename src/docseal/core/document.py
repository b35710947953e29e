"""HTML codec: text to a BeautifulSoup tree and back.

The stdlib ``html.parser`` backend is used so the tree keeps the structure the
author wrote; it does not synthesize missing ``<head>`` or ``<body>`` elements.
Rendering keeps attributes in source order and only escapes ``&``, ``<`` and
``>`` in text, so untouched markup comes back as it went in.
"""

from __future__ import annotations

from typing import Optional, Union

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.dammit import EntitySubstitution
from bs4.element import Doctype, NavigableString, PageElement, Tag
from bs4.formatter import HTMLFormatter

from .exceptions import InvalidContentError, ParseError

PARSER = "html.parser"


class SourceOrderFormatter(HTMLFormatter):
    """Minimal entity substitution, attributes in the order they were parsed."""

    def attributes(self, tag):
        if not tag.attrs:
            return []
        return list(tag.attrs.items())


FORMATTER = SourceOrderFormatter(entity_substitution=EntitySubstitution.substitute_xml)


def parse_document(html: Union[str, bytes]) -> BeautifulSoup:
    if not isinstance(html, (str, bytes)):
        raise ParseError(f"Document must be str or bytes, got {type(html)!r}")
    if isinstance(html, bytes):
        # no encoding sniffing: bytes must already be UTF-8
        try:
            html = html.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidContentError(f"Document is not valid UTF-8: {exc}") from exc
    try:
        return BeautifulSoup(html, PARSER)
    except ParserRejectedMarkup as exc:
        raise ParseError(f"Unparsable HTML: {exc}") from exc


def render_document(document: BeautifulSoup) -> str:
    return "".join(render_node(child) for child in document.contents)


def render_node(node: PageElement) -> str:
    """Render a single node (element, text or comment) back to markup."""
    if isinstance(node, Tag):
        return node.decode(formatter=FORMATTER)
    if isinstance(node, Doctype):
        # bs4 appends a newline after the doctype; the source's own whitespace follows as text
        return node.output_ready(formatter=FORMATTER).rstrip("\n")
    if isinstance(node, NavigableString):
        return node.output_ready(formatter=FORMATTER)
    return str(node)


def find_html_root(document: BeautifulSoup) -> Optional[Tag]:
    # Only a top-level <html> counts; nested ones are content.
    return document.find("html", recursive=False)


def find_root_child(document: BeautifulSoup, name: str) -> Optional[Tag]:
    """Return the ``<head>``/``<body>`` child of the top-level ``<html>`` element, if any."""
    root = find_html_root(document)
    if root is None:
        return None
    return root.find(name, recursive=False)
