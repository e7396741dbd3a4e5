"""Gate matrices and name-based gate lookup."""

from .library import (
    GateName,
    gate_arity,
    is_parameterized,
    matrix_for,
    resolve_gate_name,
)
from .standard import (
    CCX,
    CCZ,
    CNOT,
    CZ,
    RX,
    RY,
    RZ,
    SWAP,
    H,
    I,
    S,
    T,
    X,
    Y,
    Z,
    controlled_phase,
    is_unitary,
)

__all__ = [
    "I",
    "X",
    "Y",
    "Z",
    "H",
    "S",
    "T",
    "RX",
    "RY",
    "RZ",
    "CNOT",
    "CZ",
    "SWAP",
    "CCX",
    "CCZ",
    "controlled_phase",
    "is_unitary",
    "GateName",
    "gate_arity",
    "is_parameterized",
    "matrix_for",
    "resolve_gate_name",
]
