"""
Resolve recipient identifiers to Tink public keysets.

The encryption core only takes an already-resolved ``{domain: keyset}``
mapping; providers are how callers build that mapping:

  StaticKeyProvider  -> keysets held in memory
  FileKeyProvider    -> Tink JSON keyset files on disk
  HttpKeyProvider    -> Tink JSON keysets served over HTTP(S)

Timeouts and retries belong here, never in the core.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import requests
import tink

from docseal.core.exceptions import KeyProviderError
from docseal.core.models import normalize_recipient_id
from docseal.security.keyset import KeysetMaterial, load_public_keyset

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class KeyProvider(ABC):
    @abstractmethod
    def fetch_public_key(self, identifier: str) -> tink.KeysetHandle:
        """Return the public keyset for ``identifier`` or raise KeyProviderError."""


def _normalized_map(entries: Mapping[str, Any]) -> Dict[str, Any]:
    return {normalize_recipient_id(domain): value for domain, value in entries.items()}


class StaticKeyProvider(KeyProvider):
    def __init__(self, keys: Mapping[str, KeysetMaterial]):
        self._keys = _normalized_map(keys)

    def fetch_public_key(self, identifier: str) -> tink.KeysetHandle:
        domain = normalize_recipient_id(identifier)
        if domain not in self._keys:
            raise KeyProviderError(f"No public key configured for {domain}")
        try:
            return load_public_keyset(self._keys[domain])
        except ValueError as exc:
            raise KeyProviderError(f"Invalid public key for {domain}: {exc}") from exc


class FileKeyProvider(KeyProvider):
    """Load Tink JSON public keysets from local files, one path per recipient."""

    def __init__(self, paths: Mapping[str, Union[str, Path]]):
        self._paths = {domain: Path(p).expanduser() for domain, p in _normalized_map(paths).items()}

    def fetch_public_key(self, identifier: str) -> tink.KeysetHandle:
        domain = normalize_recipient_id(identifier)
        path = self._paths.get(domain)
        if path is None:
            raise KeyProviderError(f"No public key file configured for {domain}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise KeyProviderError(f"Could not read public key file {path}: {exc}") from exc
        try:
            return load_public_keyset(text)
        except ValueError as exc:
            raise KeyProviderError(f"Invalid public key file {path}: {exc}") from exc


class HttpKeyProvider(KeyProvider):
    """Fetch Tink JSON public keysets with a GET request per recipient.

    A session created here is closed by :meth:`close` (or on leaving a
    ``with`` block); a session passed in stays open for its owner.
    """

    def __init__(
        self,
        urls: Mapping[str, str],
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self._urls = _normalized_map(urls)
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()

    def __enter__(self) -> "HttpKeyProvider":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def fetch_public_key(self, identifier: str) -> tink.KeysetHandle:
        domain = normalize_recipient_id(identifier)
        url = self._urls.get(domain)
        if url is None:
            raise KeyProviderError(f"No public key URL configured for {domain}")
        logger.info("Fetching public key for %s from %s", domain, url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise KeyProviderError(f"Could not fetch public key for {domain}: {exc}") from exc
        try:
            data = resp.json()
        except ValueError as exc:
            # resp.json() raises a ValueError subclass on a non-JSON body
            raise KeyProviderError(f"Public key for {domain} is not JSON: {exc}") from exc
        try:
            return load_public_keyset(data)
        except ValueError as exc:
            raise KeyProviderError(f"Invalid public key for {domain}: {exc}") from exc


def resolve_recipients(provider: KeyProvider, identifiers: Iterable[str]) -> Dict[str, tink.KeysetHandle]:
    """Fetch a keyset for every identifier, keyed by normalized domain."""
    resolved: Dict[str, tink.KeysetHandle] = {}
    for identifier in identifiers:
        domain = normalize_recipient_id(identifier)
        if not domain:
            raise KeyProviderError("Recipient identifier must not be empty")
        if domain in resolved:
            raise KeyProviderError(f"Duplicate recipient {domain!r}")
        resolved[domain] = provider.fetch_public_key(domain)
    return resolved
