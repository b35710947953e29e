"""
Command line for encrypting protected sections of an HTML file.

Takes an input HTML document and encrypts everything inside
<section subscriptions-section="content" encrypted> with a fresh AES-GCM key.
The key is sealed for every recipient and written into the output document's
head inside <script type="application/json" cryptokeys>.

Usage:
  docseal-encrypt \
      --input-html-file article.html \
      --output-file article.enc.html \
      --access-requirement norcal.com:premium \
      --publisher-public-key-url norcal.com,https://norcal.com/keys/public_key \
      --public-key-file partner.example,./keys/partner.json

Exit codes: 0 on success, 1 when encryption or key retrieval fails, 2 on usage errors.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import tink

from docseal.config import Settings
from docseal.core.encryptor import generate_encrypted_document
from docseal.core.exceptions import DocSealError, KeyProviderError
from docseal.core.models import normalize_recipient_id
from docseal.network.key_provider import FileKeyProvider, HttpKeyProvider, resolve_recipients

from .logging_config import configure_logging

logger = logging.getLogger("docseal.cli")


def _domain_value_pair(value: str) -> Tuple[str, str]:
    # "<domain>,<url-or-path>"
    parts = value.split(",", 1)
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        raise argparse.ArgumentTypeError(f"expected '<domain>,<value>', got {value!r}")
    return normalize_recipient_id(parts[0]), parts[1].strip()


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docseal-encrypt",
        description="Encrypt protected sections of an HTML document for a set of recipients.",
    )
    parser.add_argument("--input-html-file", required=True, type=Path, help="Input HTML file to encrypt.")
    parser.add_argument("--output-file", required=True, type=Path, help="Path to write the encrypted HTML file.")
    parser.add_argument(
        "--access-requirement",
        required=True,
        help="The access requirement granted upon decryption, e.g. 'norcal.com:premium'.",
    )
    parser.add_argument(
        "--publisher-public-key-url",
        action="append",
        default=[],
        type=_domain_value_pair,
        metavar="DOMAIN,URL",
        help="Recipient domain and the URL of its hosted public keyset (repeatable).",
    )
    parser.add_argument(
        "--public-key-file",
        action="append",
        default=[],
        type=_domain_value_pair,
        metavar="DOMAIN,PATH",
        help="Recipient domain and a local JSON public keyset file (repeatable).",
    )
    parser.add_argument("--default-recipient", default=None, help="Overrides DOCSEAL_DEFAULT_RECIPIENT.")
    parser.add_argument(
        "--default-recipient-key-url", default=None, help="Overrides DOCSEAL_DEFAULT_RECIPIENT_KEY_URL."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def _collect_sources(
    args: argparse.Namespace, settings: Settings, parser: argparse.ArgumentParser
) -> Tuple[Dict[str, str], Dict[str, str]]:
    urls: Dict[str, str] = {}
    files: Dict[str, str] = {}

    default_recipient = args.default_recipient or settings.default_recipient
    default_url = args.default_recipient_key_url or settings.default_recipient_key_url
    if bool(default_recipient) != bool(default_url):
        parser.error("--default-recipient and --default-recipient-key-url must be given together")
    if default_recipient:
        urls[normalize_recipient_id(default_recipient)] = default_url

    for source, pairs in ((urls, args.publisher_public_key_url), (files, args.public_key_file)):
        for domain, value in pairs:
            if domain in urls or domain in files:
                parser.error(f"recipient {domain} given more than once")
            source[domain] = value

    if not urls and not files:
        parser.error("at least one recipient public key is required")
    return urls, files


def _resolve_public_keys(
    urls: Dict[str, str], files: Dict[str, str], timeout: float
) -> Dict[str, tink.KeysetHandle]:
    keys: Dict[str, tink.KeysetHandle] = {}
    if urls:
        with HttpKeyProvider(urls, timeout=timeout) as provider:
            keys.update(resolve_recipients(provider, urls))
    if files:
        keys.update(resolve_recipients(FileKeyProvider(files), files))
    return keys


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    if not args.access_requirement.strip():
        parser.error("--access-requirement must not be empty")

    try:
        settings = Settings.from_env()
    except DocSealError as exc:
        parser.error(str(exc))

    configure_logging(logging.DEBUG if args.verbose else settings.log_level)
    urls, files = _collect_sources(args, settings, parser)

    try:
        html = args.input_html_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Could not read %s: %s", args.input_html_file, exc)
        return 1

    try:
        public_keys = _resolve_public_keys(urls, files, settings.http_timeout)
        encrypted = generate_encrypted_document(html, args.access_requirement, public_keys)
    except KeyProviderError as exc:
        logger.error("Public key retrieval failed: %s", exc)
        return 1
    except DocSealError as exc:
        logger.error("Encryption failed (%s): %s", type(exc).__name__, exc)
        return 1

    try:
        args.output_file.write_text(encrypted, encoding="utf-8")
    except OSError as exc:
        logger.error("Could not write %s: %s", args.output_file, exc)
        return 1

    logger.info("Encrypted HTML file generated successfully: %s", args.output_file)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
