"""Rewrite the document tree to carry ciphertexts.

Two kinds of nodes are written:

- inside each protected section, its only child becomes
  ``<script type="application/octet-stream" ciphertext="">BASE64</script>``
- in ``<head>``, a key manifest
  ``<script type="application/json" cryptokeys="">{"domain": "BASE64", ...}</script>``
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Iterable, Mapping

from bs4 import BeautifulSoup
from bs4.element import Tag

from docseal.security.crypto import ContentCipher

from .document import find_root_child, render_node
from .exceptions import InvalidContentError, MissingHeadError

logger = logging.getLogger(__name__)

OCTET_STREAM_TYPE = "application/octet-stream"
JSON_TYPE = "application/json"
CIPHERTEXT_ATTR = "ciphertext"
CRYPTOKEYS_ATTR = "cryptokeys"

# Characters that may not appear literally inside a <script> element's JSON.
_SCRIPT_UNSAFE = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def script_safe_json(value) -> str:
    """Compact, key-sorted JSON that cannot close or break out of a <script> element."""
    text = json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    for char, escaped in _SCRIPT_UNSAFE.items():
        text = text.replace(char, escaped)
    return text


def _script(document: BeautifulSoup, script_type: str, marker: str, text: str) -> Tag:
    node = document.new_tag("script", attrs={"type": script_type, marker: ""})
    node.string = text
    return node


def encrypt_section(document: BeautifulSoup, section: Tag, cipher: ContentCipher) -> None:
    """Replace the children of ``section`` with one ciphertext script."""
    plaintext = "".join(render_node(child) for child in section.contents)
    section.clear()
    try:
        data = plaintext.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidContentError(f"Section content contains invalid UTF-8: {exc}") from exc
    encoded = base64.b64encode(cipher.encrypt(data)).decode("ascii")
    section.append(_script(document, OCTET_STREAM_TYPE, CIPHERTEXT_ATTR, encoded))


def encrypt_all_sections(document: BeautifulSoup, sections: Iterable[Tag], cipher: ContentCipher) -> int:
    count = 0
    for section in sections:
        encrypt_section(document, section, cipher)
        count += 1
    logger.info("Encrypted %d protected section(s)", count)
    return count


def add_crypto_keys_to_head(document: BeautifulSoup, sealed_keys: Mapping[str, str]) -> None:
    """Append the sealed-key manifest to the document head.

    Raises MissingHeadError when the top-level ``<html>`` has no ``<head>``.
    """
    head = find_root_child(document, "head")
    if head is None:
        raise MissingHeadError("Could not add cryptokeys to head: document has no <head>")
    manifest = script_safe_json(dict(sealed_keys))
    head.append(_script(document, JSON_TYPE, CRYPTOKEYS_ATTR, manifest))
    logger.info("Added cryptokeys for %d recipient(s)", len(sealed_keys))
