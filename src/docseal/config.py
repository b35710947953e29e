"""Runtime settings for the docseal command line, read from the environment.

Variables:

- ``DOCSEAL_LOG_LEVEL``: logging level name (default ``INFO``)
- ``DOCSEAL_HTTP_TIMEOUT``: seconds to wait for a public key download (default ``10``)
- ``DOCSEAL_DEFAULT_RECIPIENT`` / ``DOCSEAL_DEFAULT_RECIPIENT_KEY_URL``: a recipient
  that is always added to the recipient set when both are set
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from docseal.core.exceptions import ConfigurationError
from docseal.core.models import normalize_recipient_id

ENV_PREFIX = "DOCSEAL_"


@dataclass
class Settings:
    log_level: int = logging.INFO
    http_timeout: float = 10.0
    default_recipient: Optional[str] = None
    default_recipient_key_url: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        level_name = env.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").strip().upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ConfigurationError(f"Unknown log level: {level_name}")

        raw_timeout = env.get(f"{ENV_PREFIX}HTTP_TIMEOUT", "10")
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid HTTP timeout: {raw_timeout!r}") from exc
        if timeout <= 0:
            raise ConfigurationError("HTTP timeout must be positive")

        recipient = env.get(f"{ENV_PREFIX}DEFAULT_RECIPIENT") or None
        key_url = env.get(f"{ENV_PREFIX}DEFAULT_RECIPIENT_KEY_URL") or None
        if bool(recipient) != bool(key_url):
            raise ConfigurationError(
                f"{ENV_PREFIX}DEFAULT_RECIPIENT and {ENV_PREFIX}DEFAULT_RECIPIENT_KEY_URL must be set together"
            )

        return cls(
            log_level=level,
            http_timeout=timeout,
            default_recipient=normalize_recipient_id(recipient) if recipient else None,
            default_recipient_key_url=key_url,
        )
