"""Security helpers: content key, section AEAD and per-recipient key sealing.

This package provides:
- Loading and exporting Tink keysets
- Per-document content key generation and AES-GCM section encryption
- Tink hybrid sealing of the content key for each recipient
"""

from .keyset import load_public_keyset, public_keyset_json, serialize_keyset
from .crypto import ContentCipher, ContentKey, generate_content_key
from .hybrid import HybridEncrypt, build_sealed_payload, seal_document_key, seal_for_recipients

__all__ = [
    "load_public_keyset",
    "public_keyset_json",
    "serialize_keyset",
    "ContentCipher",
    "ContentKey",
    "generate_content_key",
    "HybridEncrypt",
    "build_sealed_payload",
    "seal_document_key",
    "seal_for_recipients",
]
