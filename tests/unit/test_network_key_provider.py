"""Unit tests for recipient public key providers."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from docseal.core.exceptions import KeyProviderError
from docseal.network.key_provider import (
    FileKeyProvider,
    HttpKeyProvider,
    StaticKeyProvider,
    resolve_recipients,
)
from docseal.security.keyset import public_keyset_json


def _response(json_data=None, status_error=None, json_error=None):
    resp = MagicMock()
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = json_data
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


# ==============================================================================
# Tests: HttpKeyProvider
# ==============================================================================

def test_http_fetch_success(session, public_keyset):
    session.get.return_value = _response(json.loads(public_keyset_json(public_keyset)))
    provider = HttpKeyProvider({"Acme.Example": "https://acme.example/key"}, timeout=3.5, session=session)

    ks = provider.fetch_public_key("acme.example")

    assert ks.keyset_info() == public_keyset.keyset_info()
    session.get.assert_called_once_with("https://acme.example/key", timeout=3.5)


def test_http_fetch_server_error(session):
    session.get.return_value = _response(status_error=requests.HTTPError("500 Server Error"))
    provider = HttpKeyProvider({"acme.example": "https://acme.example/key"}, session=session)

    with pytest.raises(KeyProviderError, match="Could not fetch public key for acme.example"):
        provider.fetch_public_key("acme.example")


def test_http_fetch_connection_error(session):
    session.get.side_effect = requests.ConnectionError("refused")
    provider = HttpKeyProvider({"acme.example": "https://acme.example/key"}, session=session)

    with pytest.raises(KeyProviderError, match="refused"):
        provider.fetch_public_key("acme.example")


def test_http_fetch_non_json_body(session):
    session.get.return_value = _response(json_error=ValueError("Expecting value"))
    provider = HttpKeyProvider({"acme.example": "https://acme.example/key"}, session=session)

    with pytest.raises(KeyProviderError, match="not JSON"):
        provider.fetch_public_key("acme.example")


def test_http_fetch_invalid_keyset(session):
    session.get.return_value = _response({"key": []})
    provider = HttpKeyProvider({"acme.example": "https://acme.example/key"}, session=session)

    with pytest.raises(KeyProviderError, match="Invalid public key for acme.example"):
        provider.fetch_public_key("acme.example")


def test_http_unknown_recipient(session):
    provider = HttpKeyProvider({}, session=session)
    with pytest.raises(KeyProviderError, match="No public key URL"):
        provider.fetch_public_key("acme.example")
    session.get.assert_not_called()


def test_http_fetch_published_keyset(session, published_keyset_json):
    session.get.return_value = _response(json.loads(published_keyset_json))
    provider = HttpKeyProvider({"google.com": "https://news.google.com/swg/encryption/keys/prod/tink/public_key"},
                               session=session)

    assert provider.fetch_public_key("google.com").keyset_info().primary_key_id == 3962548922


def test_http_provider_closes_its_own_session(monkeypatch):
    created = MagicMock(spec=requests.Session)
    monkeypatch.setattr(requests, "Session", lambda: created)

    with HttpKeyProvider({"acme.example": "https://acme.example/key"}) as provider:
        assert provider.session is created
        created.close.assert_not_called()
    created.close.assert_called_once_with()


def test_http_provider_leaves_injected_session_open(session):
    with HttpKeyProvider({}, session=session):
        pass
    session.close.assert_not_called()


# ==============================================================================
# Tests: FileKeyProvider / StaticKeyProvider
# ==============================================================================

def test_file_provider_reads_keyset(tmp_path, public_keyset):
    path = tmp_path / "acme.json"
    path.write_text(public_keyset_json(public_keyset), encoding="utf-8")

    ks = FileKeyProvider({"acme.example": str(path)}).fetch_public_key("ACME.example")
    assert ks.keyset_info() == public_keyset.keyset_info()


def test_file_provider_missing_file(tmp_path):
    provider = FileKeyProvider({"acme.example": tmp_path / "nope.json"})
    with pytest.raises(KeyProviderError, match="Could not read public key file"):
        provider.fetch_public_key("acme.example")


def test_file_provider_bad_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(KeyProviderError, match="Invalid public key file"):
        FileKeyProvider({"acme.example": path}).fetch_public_key("acme.example")


def test_file_provider_unknown_recipient():
    with pytest.raises(KeyProviderError, match="No public key file"):
        FileKeyProvider({}).fetch_public_key("acme.example")


def test_static_provider(public_keyset):
    provider = StaticKeyProvider({"acme.example": public_keyset, "news.example": public_keyset_json(public_keyset)})
    assert provider.fetch_public_key("acme.example") is public_keyset
    assert provider.fetch_public_key("news.example").keyset_info() == public_keyset.keyset_info()

    with pytest.raises(KeyProviderError, match="No public key configured"):
        provider.fetch_public_key("other.example")


def test_static_provider_invalid_material():
    with pytest.raises(KeyProviderError, match="Invalid public key"):
        StaticKeyProvider({"acme.example": "{}"}).fetch_public_key("acme.example")


# ==============================================================================
# Tests: resolve_recipients
# ==============================================================================

def test_resolve_recipients(public_keyset):
    provider = StaticKeyProvider({"acme.example": public_keyset, "news.example": public_keyset})
    resolved = resolve_recipients(provider, ["ACME.example", "news.example"])
    assert resolved == {"acme.example": public_keyset, "news.example": public_keyset}


def test_resolve_recipients_rejects_duplicates(public_keyset):
    provider = StaticKeyProvider({"acme.example": public_keyset})
    with pytest.raises(KeyProviderError, match="Duplicate recipient"):
        resolve_recipients(provider, ["acme.example", "Acme.Example"])


def test_resolve_recipients_rejects_blank(public_keyset):
    with pytest.raises(KeyProviderError, match="must not be empty"):
        resolve_recipients(StaticKeyProvider({}), [" "])


def test_resolve_recipients_propagates_provider_errors():
    provider = MagicMock()
    provider.fetch_public_key.side_effect = KeyProviderError("offline")
    with pytest.raises(KeyProviderError, match="offline"):
        resolve_recipients(provider, ["acme.example"])
