"""Logging for the docseal-encrypt command."""

import logging
import sys

PLAIN_FORMAT = "%(levelname)s: %(message)s"
DEBUG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

# Third-party loggers that chatter at INFO (HTTP connection pool, Tink's absl)
NOISY_LOGGERS = ("urllib3", "absl")


def configure_logging(level: int = logging.INFO) -> None:
    # stderr only; the encrypted document is written to a file, never to stdout.
    logging.basicConfig(
        level=level,
        format=DEBUG_FORMAT if level <= logging.DEBUG else PLAIN_FORMAT,
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
