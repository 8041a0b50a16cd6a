"""Logging setup for the provcat command line."""

from __future__ import annotations

import logging

# Chatty third-party loggers that stay at WARNING unless ``--verbose`` is given.
NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "hishel", "aiosqlite", "sqlalchemy.engine")


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Log catalog operations to stderr; ``verbose`` adds debug output from every library.

    Command results go to stdout, so log lines never mix into the JSON a
    command prints.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)-7s %(name)s: %(message)s",
        force=force,
    )
    library_level = logging.DEBUG if verbose else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
