"""Logging configuration for the CLI.

stdout carries exactly one envelope per invocation, so diagnostics always
go to stderr.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_NOISY_LOGGERS = ("asyncio", "playwright")


def configure_logging(level: str = "WARNING", verbose: bool = False, stream: Optional[TextIO] = None) -> None:
    """Install a single stderr handler on the root logger."""
    resolved = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        stream=stream or sys.stderr,
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
