"""Debug mode switch.

When enabled, the engine checks normalization after every gate application.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator

_DEBUG_ENV_VAR = "QSTEP_DEBUG"
_TRUTHY = ("1", "true", "yes", "on")

_debug_enabled: bool = os.getenv(_DEBUG_ENV_VAR, "0").lower() in _TRUTHY


def is_debug_enabled() -> bool:
    """Return whether debug mode is on (``QSTEP_DEBUG`` or :func:`set_debug_enabled`)."""
    return _debug_enabled


def set_debug_enabled(enabled: bool) -> None:
    """Globally switch debug mode on or off."""
    global _debug_enabled
    _debug_enabled = bool(enabled)


@contextmanager
def debug_context(enabled: bool = True) -> Iterator[None]:
    """
    Temporarily set debug mode inside a ``with`` block.

    >>> with debug_context(True):
    ...     pass
    """
    global _debug_enabled
    previous = _debug_enabled
    _debug_enabled = bool(enabled)
    try:
        yield
    finally:
        _debug_enabled = previous
