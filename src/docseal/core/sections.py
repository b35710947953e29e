"""Locate protected content sections in a parsed document.

A protected section looks like::

    <section subscriptions-section="content" encrypted> ... </section>

The ``encrypted`` attribute only has to be present; its value is ignored.
"""

from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup
from bs4.element import PageElement, Tag

from .document import find_root_child

SECTION_TAG = "section"
CONTENT_SECTION_ATTR = "subscriptions-section"
CONTENT_SECTION_VALUE = "content"
ENCRYPTED_ATTR = "encrypted"


def has_content_section_marker(element: Tag) -> bool:
    return element.get(CONTENT_SECTION_ATTR) == CONTENT_SECTION_VALUE


def has_encrypted_marker(element: Tag) -> bool:
    return ENCRYPTED_ATTR in element.attrs


def is_protected_region(element: PageElement) -> bool:
    """True for a ``<section>`` carrying both the content marker and the encrypted flag."""
    if not isinstance(element, Tag) or element.name != SECTION_TAG:
        return False
    return has_content_section_marker(element) and has_encrypted_marker(element)


def find_protected_sections(document: BeautifulSoup) -> List[Tag]:
    """Return protected sections under ``<body>`` in document order.

    Returns an empty list when nothing matches or the document has no
    ``<html>``/``<body>``; deciding whether that is an error is up to the caller.
    """
    body = find_root_child(document, "body")
    if body is None:
        return []
    return list(body.find_all(is_protected_region))
