"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def configure_logging(verbosity: int = 0) -> None:
    """Route package logs to stderr through Rich.

    0 shows warnings, 1 (``-v``) adds lifecycle progress, 2+ (``-vv``) adds
    every poll iteration and HTTP request.
    """
    level = _LEVELS.get(verbosity, logging.DEBUG)
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger = logging.getLogger("pinecone_lifecycle")
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False
    if verbosity >= 3:
        logging.getLogger("httpx").setLevel(logging.DEBUG)
        logging.getLogger("httpx").addHandler(handler)
