"""Tink keysets in and out of docseal.

Recipients publish their public keyset in Tink's JSON form, for example::

    {
      "primaryKeyId": 3962548922,
      "key": [{
        "keyData": {
          "typeUrl": "type.googleapis.com/google.crypto.tink.EciesAeadHkdfPublicKey",
          "value": "<base64 EciesAeadHkdfPublicKey proto>",
          "keyMaterialType": "ASYMMETRIC_PUBLIC"
        },
        "status": "ENABLED",
        "keyId": 3962548922,
        "outputPrefixType": "CRUNCHY"
      }]
    }

The per-document content keyset travels the other way: it is written in
Tink's binary (protobuf) form, base64-encoded, inside each sealed payload.
"""

from __future__ import annotations

import io
import json
from typing import Any, Mapping, Union

import tink
from tink import cleartext_keyset_handle

KeysetMaterial = Union[tink.KeysetHandle, str, bytes, Mapping[str, Any]]


def load_public_keyset(material: KeysetMaterial) -> tink.KeysetHandle:
    """Return a handle for a public keyset given as a handle, JSON text/bytes or a parsed mapping.

    Keysets holding secret key material are refused. Raises ValueError on any problem.
    """
    if isinstance(material, tink.KeysetHandle):
        return material
    if isinstance(material, bytes):
        try:
            material = material.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError(f"Keyset is not valid UTF-8 JSON: {exc}") from exc
    if isinstance(material, Mapping):
        try:
            material = json.dumps(dict(material))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Keyset is not JSON-serializable: {exc}") from exc
    if not isinstance(material, str):
        raise ValueError(f"Unsupported key material type {type(material)!r}")

    try:
        handle = tink.read_no_secret_keyset_handle(tink.JsonKeysetReader(material))
    except tink.TinkError as exc:
        raise ValueError(f"Invalid public keyset: {exc}") from exc

    info = handle.keyset_info()
    if not info.key_info:
        raise ValueError("Keyset contains no keys")
    if info.primary_key_id not in {key.key_id for key in info.key_info}:
        raise ValueError(f"Keyset has no primary key (primaryKeyId={info.primary_key_id})")
    return handle


def public_keyset_json(handle: tink.KeysetHandle) -> str:
    """Tink JSON for a keyset without secret material, as a recipient would publish it."""
    stream = io.StringIO()
    try:
        handle.write_no_secret(tink.JsonKeysetWriter(stream))
    except tink.TinkError as exc:
        raise ValueError(f"Keyset cannot be exported as a public keyset: {exc}") from exc
    return stream.getvalue()


def serialize_keyset(handle: tink.KeysetHandle) -> bytes:
    # cleartext on purpose: the result is only ever stored inside sealed payloads
    stream = io.BytesIO()
    cleartext_keyset_handle.write(tink.BinaryKeysetWriter(stream), handle)
    return stream.getvalue()
