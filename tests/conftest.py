"""Shared fixtures: recipient keysets and the decryption side of the envelope.

docseal itself never decrypts; these helpers open sealed keys and section
ciphertexts with Tink so tests can check round-trips.
"""

import base64
import json
from pathlib import Path

import pytest
import tink
from tink import aead, cleartext_keyset_handle, hybrid

from docseal.core.models import DEFAULT_CIPHER_CONFIG

hybrid.register()

TESTDATA = Path(__file__).resolve().parent / "testdata"

RECIPIENT_TEMPLATE = hybrid.hybrid_key_templates.ECIES_P256_HKDF_HMAC_SHA256_AES128_GCM

# A public keyset as published by a real reader service (ECIES P-256, CRUNCHY prefix).
PUBLISHED_KEY_ID = 3962548922
PUBLISHED_PUBLIC_KEYSET = """{"key":[
    {
        "keyData":{
            "keyMaterialType":"ASYMMETRIC_PUBLIC",
            "typeUrl":"type.googleapis.com/google.crypto.tink.EciesAeadHkdfPublicKey",
            "value":"EkQKBAgCEAMSOhI4CjB0eXBlLmdvb2dsZWFwaXMuY29tL2dvb2dsZS5jcnlwdG8udGluay5BZXNHY21LZXkSAhAQGAEYAxogIxtaOU5H2AVnQAYW5nIPWrMX1ORU9qQFfKTUMNyV0gEiIICIK5ak8rNbREV8i1RHMJQaWs5I8bqeGHukmRZls8pK"
        },
        "keyId":3962548922,
        "outputPrefixType":"CRUNCHY",
        "status":"ENABLED"
    }
    ],
    "primaryKeyId":3962548922
}"""


# ==============================================================================
# Fixtures
# ==============================================================================

@pytest.fixture
def sample_html():
    """The sample article with two protected sections."""
    return (TESTDATA / "sample_encryption.html").read_text(encoding="utf-8")


@pytest.fixture
def recipient_key():
    """A fresh private hybrid keyset standing in for a recipient's secret."""
    return tink.new_keyset_handle(RECIPIENT_TEMPLATE)


@pytest.fixture
def public_keyset(recipient_key):
    return recipient_key.public_keyset_handle()


@pytest.fixture
def make_recipient():
    """Factory returning (private_keyset, public_keyset) pairs."""
    def _make():
        private = tink.new_keyset_handle(RECIPIENT_TEMPLATE)
        return private, private.public_keyset_handle()
    return _make


@pytest.fixture
def unseal():
    """Open a base64 sealed key with a recipient private keyset and return the JSON payload."""
    def _unseal(sealed_b64, private_keyset, config=DEFAULT_CIPHER_CONFIG):
        opener = private_keyset.primitive(hybrid.HybridDecrypt)
        return json.loads(opener.decrypt(base64.b64decode(sealed_b64), config.context_info))
    return _unseal


@pytest.fixture
def decrypt_section():
    """Decrypt a base64 section ciphertext with a base64 serialized content keyset."""
    def _decrypt(ciphertext_b64, encoded_keyset, config=DEFAULT_CIPHER_CONFIG):
        handle = cleartext_keyset_handle.read(tink.BinaryKeysetReader(base64.b64decode(encoded_keyset)))
        cipher = handle.primitive(aead.Aead)
        return cipher.decrypt(base64.b64decode(ciphertext_b64), config.associated_data).decode("utf-8")
    return _decrypt


@pytest.fixture
def published_keyset_json():
    """Tink JSON for a recipient whose private key is held elsewhere."""
    return PUBLISHED_PUBLIC_KEYSET
