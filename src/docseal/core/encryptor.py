"""
Encrypt protected sections of an HTML document for a set of recipients.

Flow (one forward step per state)::

    NEW -> PARSED -> LOCATED -> KEY_GENERATED -> SECTIONS_ENCRYPTED
        -> KEYS_SEALED -> INJECTED -> SERIALIZED

Any exception moves the encryptor to FAILED and is re-raised. The mutated tree
is only rendered in the last step, so a failure never yields partial output.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Union

from docseal.security.crypto import ContentCipher, generate_content_key
from docseal.security.hybrid import PublicKeyMaterial, seal_for_recipients

from .document import parse_document, render_document
from .envelope import add_crypto_keys_to_head, encrypt_all_sections
from .exceptions import NoProtectedRegionsError
from .models import CipherConfig, DEFAULT_CIPHER_CONFIG, EncryptionState
from .sections import find_protected_sections

logger = logging.getLogger(__name__)

_ORDER = (
    EncryptionState.NEW,
    EncryptionState.PARSED,
    EncryptionState.LOCATED,
    EncryptionState.KEY_GENERATED,
    EncryptionState.SECTIONS_ENCRYPTED,
    EncryptionState.KEYS_SEALED,
    EncryptionState.INJECTED,
    EncryptionState.SERIALIZED,
)


class DocumentEncryptor:
    """Runs the encryption transform; one document per :meth:`encrypt` call."""

    def __init__(self, config: CipherConfig = DEFAULT_CIPHER_CONFIG):
        self.config = config
        self.state = EncryptionState.NEW

    def _advance(self, state: EncryptionState) -> None:
        current = _ORDER.index(self.state)
        if _ORDER.index(state) != current + 1:
            raise RuntimeError(f"Illegal transition {self.state.value} -> {state.value}")
        self.state = state

    def encrypt(
        self,
        html: Union[str, bytes],
        access_requirement: str,
        recipients: Mapping[str, PublicKeyMaterial],
    ) -> str:
        """Return the encrypted document text or raise a DocSealError."""
        self.state = EncryptionState.NEW
        try:
            return self._run(html, access_requirement, recipients)
        except Exception:
            logger.debug("Encryption aborted after state %s", self.state.value)
            self.state = EncryptionState.FAILED
            raise

    def _run(self, html, access_requirement, recipients) -> str:
        document = parse_document(html)
        self._advance(EncryptionState.PARSED)

        sections = find_protected_sections(document)
        if not sections:
            raise NoProtectedRegionsError("No encrypted sections found")
        self._advance(EncryptionState.LOCATED)

        content_key = generate_content_key(self.config)
        self._advance(EncryptionState.KEY_GENERATED)

        encrypt_all_sections(document, sections, ContentCipher(content_key, self.config))
        self._advance(EncryptionState.SECTIONS_ENCRYPTED)

        sealed = seal_for_recipients(content_key.encoded_keyset, access_requirement, recipients, self.config)
        self._advance(EncryptionState.KEYS_SEALED)

        add_crypto_keys_to_head(document, sealed)
        self._advance(EncryptionState.INJECTED)

        output = render_document(document)
        self._advance(EncryptionState.SERIALIZED)
        return output


def generate_encrypted_document(
    html: Union[str, bytes],
    access_requirement: str,
    recipients: Mapping[str, PublicKeyMaterial],
    config: Optional[CipherConfig] = None,
) -> str:
    """Encrypt every protected section and seal the content key for each recipient."""
    return DocumentEncryptor(config or DEFAULT_CIPHER_CONFIG).encrypt(html, access_requirement, recipients)
