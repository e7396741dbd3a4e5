"""Standard gate matrices as complex torch tensors.

Multi-qubit matrices are written in the basis ordering of their target list:
for a gate on ``[q0, q1]`` the row/column index is ``2*b(q0) + b(q1)``, so the
first listed qubit is the most significant bit (``|control, target⟩``).
"""

from __future__ import annotations

import math
from typing import Sequence

import torch

from .. import complexmath as cm

_DEFAULT_DTYPE = torch.complex128


def _matrix(
    rows: Sequence[Sequence[complex]],
    dtype: torch.dtype | None,
    device: torch.device | str | None,
) -> torch.Tensor:
    return torch.tensor(
        rows,
        dtype=dtype if dtype is not None else _DEFAULT_DTYPE,
        device=device if device is not None else torch.device("cpu"),
    )


def _diagonal(
    entries: Sequence[complex],
    dtype: torch.dtype | None,
    device: torch.device | str | None,
) -> torch.Tensor:
    size = len(entries)
    rows = [[entries[i] if i == j else 0.0 for j in range(size)] for i in range(size)]
    return _matrix(rows, dtype, device)


def _permutation(
    mapping: dict[int, int],
    size: int,
    dtype: torch.dtype | None,
    device: torch.device | str | None,
) -> torch.Tensor:
    """Identity matrix with the columns in ``mapping`` sent to new rows."""
    rows = [[0.0] * size for _ in range(size)]
    for col in range(size):
        rows[mapping.get(col, col)][col] = 1.0
    return _matrix(rows, dtype, device)


def I(dtype: torch.dtype | None = None, device: torch.device | str | None = None) -> torch.Tensor:  # noqa: E743, N802
    """Identity gate."""
    return _diagonal([1.0, 1.0], dtype, device)


def X(dtype: torch.dtype | None = None, device: torch.device | str | None = None) -> torch.Tensor:  # noqa: N802
    """Pauli-X (NOT) gate."""
    return _matrix([[0.0, 1.0], [1.0, 0.0]], dtype, device)


def Y(dtype: torch.dtype | None = None, device: torch.device | str | None = None) -> torch.Tensor:  # noqa: N802
    """Pauli-Y gate."""
    return _matrix([[0.0, -1.0j], [1.0j, 0.0]], dtype, device)


def Z(dtype: torch.dtype | None = None, device: torch.device | str | None = None) -> torch.Tensor:  # noqa: N802
    """Pauli-Z (phase-flip) gate."""
    return _diagonal([1.0, -1.0], dtype, device)


def H(dtype: torch.dtype | None = None, device: torch.device | str | None = None) -> torch.Tensor:  # noqa: N802
    """Hadamard gate."""
    s = 1.0 / math.sqrt(2.0)
    return _matrix([[s, s], [s, -s]], dtype, device)


def S(dtype: torch.dtype | None = None, device: torch.device | str | None = None) -> torch.Tensor:  # noqa: N802
    """S gate (√Z)."""
    return _diagonal([1.0, 1.0j], dtype, device)


def T(dtype: torch.dtype | None = None, device: torch.device | str | None = None) -> torch.Tensor:  # noqa: N802
    """T gate (π/8 gate, √S)."""
    return _diagonal([1.0, cm.from_polar(1.0, math.pi / 4.0)], dtype, device)


def RX(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | str | None = None,
) -> torch.Tensor:
    """
    Rotation about the X axis.

    Matrix form:
        [[cos(θ/2), -i sin(θ/2)],
         [-i sin(θ/2), cos(θ/2)]]
    """
    c = math.cos(float(theta) / 2.0)
    s = math.sin(float(theta) / 2.0)
    return _matrix([[c, -1.0j * s], [-1.0j * s, c]], dtype, device)


def RY(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | str | None = None,
) -> torch.Tensor:
    """
    Rotation about the Y axis.

    Matrix form:
        [[cos(θ/2), -sin(θ/2)],
         [sin(θ/2), cos(θ/2)]]
    """
    c = math.cos(float(theta) / 2.0)
    s = math.sin(float(theta) / 2.0)
    return _matrix([[c, -s], [s, c]], dtype, device)


def RZ(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | str | None = None,
) -> torch.Tensor:
    """
    Rotation about the Z axis.

    Matrix form:
        [[e^{-iθ/2}, 0],
         [0, e^{iθ/2}]]
    """
    half = float(theta) / 2.0
    return _diagonal([cm.from_polar(1.0, -half), cm.from_polar(1.0, half)], dtype, device)


def CNOT(dtype: torch.dtype | None = None, device: torch.device | str | None = None) -> torch.Tensor:  # noqa: N802
    """Controlled-NOT; first target is the control: |10⟩ ↔ |11⟩."""
    return _permutation({2: 3, 3: 2}, 4, dtype, device)


def CZ(dtype: torch.dtype | None = None, device: torch.device | str | None = None) -> torch.Tensor:  # noqa: N802
    """Controlled-Z: phase flip on |11⟩."""
    return _diagonal([1.0, 1.0, 1.0, -1.0], dtype, device)


def SWAP(dtype: torch.dtype | None = None, device: torch.device | str | None = None) -> torch.Tensor:  # noqa: N802
    """SWAP: |01⟩ ↔ |10⟩."""
    return _permutation({1: 2, 2: 1}, 4, dtype, device)


def CCX(dtype: torch.dtype | None = None, device: torch.device | str | None = None) -> torch.Tensor:  # noqa: N802
    """Toffoli: the first two targets control a NOT on the third, |110⟩ ↔ |111⟩."""
    return _permutation({6: 7, 7: 6}, 8, dtype, device)


def CCZ(dtype: torch.dtype | None = None, device: torch.device | str | None = None) -> torch.Tensor:  # noqa: N802
    """Doubly-controlled Z: phase flip on |111⟩."""
    return _diagonal([1.0] * 7 + [-1.0], dtype, device)


def controlled_phase(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | str | None = None,
) -> torch.Tensor:
    """Controlled phase: identity except ``[3][3] = (cos θ, sin θ)``."""
    return _diagonal([1.0, 1.0, 1.0, cm.from_polar(1.0, float(theta))], dtype, device)


def is_unitary(matrix: torch.Tensor, atol: float = 1e-9) -> bool:
    """
    Check ``U†U = I`` within ``atol``.

    Args:
        matrix: Square tensor of shape (n, n).
        atol: Absolute tolerance on every entry of ``U†U - I``.

    Returns:
        True if the matrix is unitary within tolerance.
    """
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    product = matrix.conj().transpose(-1, -2) @ matrix
    identity = torch.eye(matrix.shape[0], dtype=matrix.dtype, device=matrix.device)
    return bool(torch.all(torch.abs(product - identity) < atol).item())


__all__ = [
    "CCX",
    "CCZ",
    "CNOT",
    "CZ",
    "H",
    "I",
    "RX",
    "RY",
    "RZ",
    "S",
    "SWAP",
    "T",
    "X",
    "Y",
    "Z",
    "controlled_phase",
    "is_unitary",
]
