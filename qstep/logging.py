"""Logging helpers for qstep.

Every module obtains its logger through :func:`get_logger` so that all
output lives under the ``qstep.`` namespace and shares one format.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
_DEFAULT_LEVEL = logging.WARNING

_loggers: dict[str, logging.Logger] = {}


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return int(level)


def _attach_handler(
    logger: logging.Logger,
    level: int,
    stream: Optional[TextIO] = None,
    format_string: str = _DEFAULT_FORMAT,
) -> None:
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string))
    logger.addHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the cached logger for ``name``.

    Args:
        name: Usually ``__name__`` of the calling module. Names outside the
            ``qstep`` namespace are prefixed with ``qstep.``.

    Returns:
        A logger writing ``[LEVEL] name: message`` lines to stderr.

    Example:
        >>> from qstep.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("applied H to qubit 0")
    """
    if name is None:
        name = "qstep"
    if name != "qstep" and not name.startswith("qstep."):
        name = f"qstep.{name}"

    cached = _loggers.get(name)
    if cached is not None:
        return cached

    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        _attach_handler(logger, _DEFAULT_LEVEL)
        logger.propagate = False

    _loggers[name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Change the level of every qstep logger (existing and future).

    Args:
        level: A ``logging`` constant or its name, e.g. ``"DEBUG"``.
    """
    global _DEFAULT_LEVEL
    level = _coerce_level(level)
    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Replace the handlers of every qstep logger.

    Meant to be called once by an application embedding the engine.

    Args:
        level: Logging level (default WARNING).
        format_string: Record format. Defaults to ``[LEVEL] name: message``.
        stream: Destination stream. Defaults to stderr.
    """
    global _DEFAULT_LEVEL
    level = _coerce_level(level)
    fmt = format_string or _DEFAULT_FORMAT
    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        _attach_handler(logger, level, stream=stream, format_string=fmt)
    _DEFAULT_LEVEL = level


__all__ = ["configure_logging", "get_logger", "set_log_level"]
