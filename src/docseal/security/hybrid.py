"""Seal the document content key once per recipient with Tink hybrid encryption.

Each recipient's public keyset decides the scheme (ECIES-AEAD-HKDF or HPKE)
and the output prefix (TINK, CRUNCHY, LEGACY or RAW). The sealed ciphertext is
whatever Tink's HybridEncrypt primitive produces for that keyset; the matching
HybridDecrypt opens it with the recipient's private keyset.

The sealed plaintext is the JSON payload built by :func:`build_sealed_payload`.
Each call uses a new ephemeral key, so sealing is not deterministic.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Dict, Mapping

import tink
from tink import hybrid as tink_hybrid

from docseal.core.exceptions import KeySealError
from docseal.core.models import CipherConfig, DEFAULT_CIPHER_CONFIG, normalize_recipient_id

from .keyset import KeysetMaterial, load_public_keyset

logger = logging.getLogger(__name__)

tink_hybrid.register()

PublicKeyMaterial = KeysetMaterial


def build_sealed_payload(encoded_keyset: str, access_requirement: str) -> bytes:
    payload = {"accessRequirements": [access_requirement], "key": encoded_keyset}
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


class HybridEncrypt:
    """Encrypt to the primary key of a recipient's public keyset."""

    def __init__(self, public_key: PublicKeyMaterial, config: CipherConfig = DEFAULT_CIPHER_CONFIG):
        self.config = config
        try:
            handle = load_public_keyset(public_key)
        except ValueError as exc:
            raise KeySealError(f"Invalid recipient public key: {exc}") from exc
        try:
            self._primitive = handle.primitive(tink_hybrid.HybridEncrypt)
        except tink.TinkError as exc:
            raise KeySealError(f"Unsupported recipient public key: {exc}") from exc

    def encrypt(self, plaintext: bytes) -> bytes:
        try:
            return self._primitive.encrypt(plaintext, self.config.context_info)
        except tink.TinkError as exc:
            raise KeySealError(f"Hybrid encryption failed: {exc}") from exc


def seal_document_key(
    encoded_keyset: str,
    access_requirement: str,
    public_key: PublicKeyMaterial,
    config: CipherConfig = DEFAULT_CIPHER_CONFIG,
) -> str:
    """Seal ``{"accessRequirements": [...], "key": ...}`` for one recipient; returns base64."""
    sealed = HybridEncrypt(public_key, config).encrypt(build_sealed_payload(encoded_keyset, access_requirement))
    return base64.b64encode(sealed).decode("ascii")


def normalize_recipients(recipients: Mapping[str, PublicKeyMaterial]) -> Dict[str, PublicKeyMaterial]:
    """Normalize recipient identifiers; reject an empty set, blanks and duplicates."""
    if not recipients:
        raise KeySealError("At least one recipient is required")
    normalized: Dict[str, PublicKeyMaterial] = {}
    for identifier, material in recipients.items():
        try:
            domain = normalize_recipient_id(identifier)
        except TypeError as exc:
            raise KeySealError(str(exc)) from exc
        if not domain:
            raise KeySealError("Recipient identifier must not be empty")
        if domain in normalized:
            raise KeySealError(f"Duplicate recipient {domain!r}")
        normalized[domain] = material
    return normalized


def seal_for_recipients(
    encoded_keyset: str,
    access_requirement: str,
    recipients: Mapping[str, PublicKeyMaterial],
    config: CipherConfig = DEFAULT_CIPHER_CONFIG,
) -> Dict[str, str]:
    """Seal the content keyset independently for every recipient.

    Any recipient failing aborts the whole call; recipients are never skipped.
    """
    sealed: Dict[str, str] = {}
    for domain, material in normalize_recipients(recipients).items():
        try:
            sealed[domain] = seal_document_key(encoded_keyset, access_requirement, material, config)
        except KeySealError as exc:
            raise KeySealError(f"Could not seal key for {domain}: {exc}") from exc
        logger.debug("Sealed content key for %s", domain)
    return sealed
