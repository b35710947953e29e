"""
Base data models shared by the encryption transform
"""

from dataclasses import dataclass
from enum import Enum


CONTENT_KEY_TYPE_URL = "type.googleapis.com/google.crypto.tink.AesGcmKey"


@dataclass(frozen=True)
class CipherConfig:
    """Content key size and the context bytes bound into each ciphertext.

    Passed explicitly to every component that needs it; ``DEFAULT_CIPHER_CONFIG``
    is the 128-bit AES-GCM profile documents are normally encrypted with.
    Readers pass the same ``associated_data``/``context_info`` when decrypting.
    """

    key_size: int = 16
    associated_data: bytes = b""
    context_info: bytes = b""


DEFAULT_CIPHER_CONFIG = CipherConfig()


class EncryptionState(Enum):
    # Forward-only states of one document transform
    NEW = "new"
    PARSED = "parsed"
    LOCATED = "located"
    KEY_GENERATED = "key_generated"
    SECTIONS_ENCRYPTED = "sections_encrypted"
    KEYS_SEALED = "keys_sealed"
    INJECTED = "injected"
    SERIALIZED = "serialized"
    FAILED = "failed"


def normalize_recipient_id(identifier: str) -> str:
    """Return the canonical (stripped, lowercased) form of a recipient domain."""
    if not isinstance(identifier, str):
        raise TypeError(f"Recipient identifier must be a string, got {type(identifier)!r}")
    return identifier.strip().lower()
