"""Diagnostics and debugging utilities for qstep."""

from .core import (
    assert_normalized,
    bloch_from_density,
    bloch_vector,
    fidelity,
    reduced_density_matrix,
    state_norm,
)
from .debug_mode import (
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
)

__all__ = [
    "state_norm",
    "assert_normalized",
    "fidelity",
    "reduced_density_matrix",
    "bloch_from_density",
    "bloch_vector",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
]
