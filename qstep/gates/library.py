"""Name-based gate lookup.

Gate identifiers form a closed set (:class:`GateName`); each one maps to a
constructor in :mod:`qstep.gates.standard`. Lookup is case-insensitive and
accepts a few common aliases (``CX``, ``TOFFOLI``, ``CPHASE``).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Mapping, Optional

import torch

from ..errors import UnknownGateError
from . import standard


class GateName(str, Enum):
    """Every gate the library can build."""

    I = "I"  # noqa: E741
    X = "X"
    Y = "Y"
    Z = "Z"
    H = "H"
    S = "S"
    T = "T"
    RX = "RX"
    RY = "RY"
    RZ = "RZ"
    CNOT = "CNOT"
    CZ = "CZ"
    SWAP = "SWAP"
    CCX = "CCX"
    CCZ = "CCZ"
    CP = "CP"


_ALIASES = {
    "CX": GateName.CNOT,
    "TOFFOLI": GateName.CCX,
    "CPHASE": GateName.CP,
    "CONTROLLED-PHASE": GateName.CP,
}

_PARAMETERIZED = frozenset({GateName.RX, GateName.RY, GateName.RZ, GateName.CP})

_ARITY = {
    GateName.CNOT: 2,
    GateName.CZ: 2,
    GateName.SWAP: 2,
    GateName.CP: 2,
    GateName.CCX: 3,
    GateName.CCZ: 3,
}

_FIXED: dict[GateName, Callable[..., torch.Tensor]] = {
    GateName.I: standard.I,
    GateName.X: standard.X,
    GateName.Y: standard.Y,
    GateName.Z: standard.Z,
    GateName.H: standard.H,
    GateName.S: standard.S,
    GateName.T: standard.T,
    GateName.CNOT: standard.CNOT,
    GateName.CZ: standard.CZ,
    GateName.SWAP: standard.SWAP,
    GateName.CCX: standard.CCX,
    GateName.CCZ: standard.CCZ,
}

_ROTATIONS: dict[GateName, Callable[..., torch.Tensor]] = {
    GateName.RX: standard.RX,
    GateName.RY: standard.RY,
    GateName.RZ: standard.RZ,
    GateName.CP: standard.controlled_phase,
}


def resolve_gate_name(name: str | GateName) -> GateName:
    """Map a user supplied gate name to its :class:`GateName`.

    Raises:
        UnknownGateError: If the name is not recognised.
    """
    if isinstance(name, GateName):
        return name
    if not isinstance(name, str):
        raise UnknownGateError(name)
    key = name.strip().upper()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return GateName(key)
    except ValueError:
        raise UnknownGateError(name) from None


def gate_arity(name: str | GateName) -> int:
    """Number of qubits the named gate acts on."""
    return _ARITY.get(resolve_gate_name(name), 1)


def is_parameterized(name: str | GateName) -> bool:
    """Whether the gate takes an ``angle`` parameter."""
    return resolve_gate_name(name) in _PARAMETERIZED


def matrix_for(
    name: str | GateName,
    parameters: Optional[Mapping[str, Any]] = None,
    dtype: torch.dtype | None = None,
    device: torch.device | str | None = None,
) -> torch.Tensor:
    """
    Build the unitary for a named gate.

    Parameters
    ----------
    name:
        Gate identifier, e.g. ``"H"``, ``"RX"``, ``"CNOT"``, ``"CCZ"``.
    parameters:
        Optional mapping; rotation gates and ``CP`` read ``angle`` (radians,
        default 0).
    dtype, device:
        Tensor placement of the returned matrix.

    Returns
    -------
    torch.Tensor
        A fresh ``2^k x 2^k`` complex matrix.

    Raises
    ------
    UnknownGateError
        If ``name`` is not a known gate.
    """
    gate = resolve_gate_name(name)
    if gate in _ROTATIONS:
        angle = float((parameters or {}).get("angle", 0.0) or 0.0)
        return _ROTATIONS[gate](angle, dtype=dtype, device=device)
    return _FIXED[gate](dtype=dtype, device=device)


__all__ = [
    "GateName",
    "gate_arity",
    "is_parameterized",
    "matrix_for",
    "resolve_gate_name",
]
