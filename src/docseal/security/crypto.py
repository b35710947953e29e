"""Per-document content key and the AEAD cipher used on section content.

The content key is a Tink AES-GCM keyset with a TINK output prefix, so each
section ciphertext is laid out as::

    0x01 || keyId (4 bytes, big-endian) || IV (12 bytes) || AES-GCM ciphertext+tag

Every call draws a fresh random IV, so two sections (or two documents) never
share one under the same key.
"""
import base64
import logging
from dataclasses import dataclass

import tink
from tink import aead

from docseal.core.exceptions import ContentEncryptionError, KeyGenerationError
from docseal.core.models import CipherConfig, DEFAULT_CIPHER_CONFIG

from .keyset import serialize_keyset

logger = logging.getLogger(__name__)

aead.register()

KEY_TEMPLATES = {
    16: aead.aead_key_templates.AES128_GCM,
    32: aead.aead_key_templates.AES256_GCM,
}


@dataclass(frozen=True)
class ContentKey:
    handle: tink.KeysetHandle
    serialized_keyset: bytes

    @property
    def key_id(self) -> int:
        return self.handle.keyset_info().primary_key_id

    @property
    def encoded_keyset(self) -> str:
        return base64.b64encode(self.serialized_keyset).decode("ascii")

    def __repr__(self) -> str:
        # keep key material out of logs and tracebacks
        return f"ContentKey(key_id={self.key_id})"


def generate_content_key(config: CipherConfig = DEFAULT_CIPHER_CONFIG) -> ContentKey:
    """Generate a fresh AES-GCM content keyset and its serialized form.

    Raises KeyGenerationError if the key size is unsupported or Tink cannot
    create or serialize the keyset; there is no weaker fallback.
    """
    template = KEY_TEMPLATES.get(config.key_size)
    if template is None:
        raise KeyGenerationError(f"Unsupported AES-GCM key size: {config.key_size}")
    try:
        handle = tink.new_keyset_handle(template)
        serialized = serialize_keyset(handle)
    except tink.TinkError as exc:
        raise KeyGenerationError(f"Could not generate content key: {exc}") from exc

    content_key = ContentKey(handle=handle, serialized_keyset=serialized)
    logger.debug("Generated %d-bit content key (key id %d)", config.key_size * 8, content_key.key_id)
    return content_key


class ContentCipher:
    """AES-GCM over section plaintext, keyed by a document's ContentKey."""

    def __init__(self, content_key: ContentKey, config: CipherConfig = DEFAULT_CIPHER_CONFIG):
        self.config = config
        try:
            self._aead = content_key.handle.primitive(aead.Aead)
        except tink.TinkError as exc:
            raise ContentEncryptionError(f"Invalid content key: {exc}") from exc

    def encrypt(self, plaintext: bytes) -> bytes:
        try:
            return self._aead.encrypt(plaintext, self.config.associated_data)
        except tink.TinkError as exc:
            raise ContentEncryptionError(f"Section encryption failed: {exc}") from exc
