"""Centralized logging configuration for the ``household_bills`` package.

Two public helpers:

- ``configure_logging(...)``: attach one ``StreamHandler`` to the package root
  logger (``"household_bills"``). Entry points (the CLI) call it at startup;
  later calls only adjust the level.
- ``get_logger(name)``: acquire a module logger. Until logging is configured
  the package root carries a ``NullHandler`` so library use stays silent.

Library modules never attach handlers; they call
``get_logger("household_bills.<module>")`` and leave output to the host.
"""

from __future__ import annotations

import logging
import os
from typing import IO

_PKG_LOGGER_NAME = "household_bills"
_ENV_LEVEL = "HOUSEHOLD_BILLS_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = os.getenv(_ENV_LEVEL)
        if not level:
            return logging.INFO
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    if isinstance(numeric, int):
        return numeric
    raise ValueError(f"unknown log level: {level!r}")


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Configure the package root logger and return it.

    Parameters
    ----------
    level:
        ``int`` or level name (``"DEBUG"``). ``None`` reads
        ``HOUSEHOLD_BILLS_LOG_LEVEL`` and defaults to ``INFO``.
    fmt:
        Format string for the handler; only honored on the first call.
    stream:
        Output stream for the handler (default: the current ``sys.stderr``);
        only honored on the first call.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    numeric = _parse_level(level)

    if _handler is None:
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        _handler = logging.StreamHandler(stream)
        _handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
        logger.addHandler(_handler)
        # Avoid double emission via the root logger.
        logger.propagate = False

    _handler.setLevel(numeric)
    logger.setLevel(numeric)
    return logger


def reset_logging() -> None:
    """Detach the handler installed by :func:`configure_logging`."""

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "reset_logging"]
