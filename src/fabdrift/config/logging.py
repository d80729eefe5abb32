"""Logging setup for the command line."""

from __future__ import annotations

import logging

# Third-party loggers that echo every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "httpx_retries")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with a terse CLI format.

    Transport chatter from the HTTP stack is only shown at DEBUG. Pass
    ``force=True`` to reconfigure during tests.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    transport_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
