"""Statevector kernels for pure states.

Conventions
-----------
A state on ``n`` qubits is a 1D complex tensor of length ``2**n``. Qubit ``q``
is stored at bit position ``n - 1 - q`` of the basis index (qubit 0 is the
most significant bit), so ``state.reshape([2] * n)`` puts qubit ``q`` on axis
``q``.

Every kernel returns a new tensor and leaves its input untouched; callers
swap the result in only once the computation has succeeded.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

import torch

from ..errors import DimensionMismatchError, IndexOutOfRangeError, UnsupportedArityError

MAX_GATE_ARITY = 3


def num_qubits_of(state: torch.Tensor) -> int:
    """
    Infer ``n`` from a statevector of length ``2**n``.

    Raises
    ------
    ValueError
        If the state is not 1D or its length is not a power of 2.
    """
    if state.dim() != 1:
        raise ValueError("Statevector must be a 1D tensor.")
    dim = state.shape[0]
    if dim <= 0 or dim & (dim - 1) != 0:
        raise ValueError(f"Statevector length must be a power of 2, got {dim}.")
    return dim.bit_length() - 1


def zero_state(
    n_qubits: int,
    dtype: torch.dtype = torch.complex128,
    device: torch.device | str = "cpu",
) -> torch.Tensor:
    """Return ``|0...0⟩`` on ``n_qubits`` qubits."""
    if n_qubits < 1:
        raise ValueError(f"n_qubits must be >= 1, got {n_qubits}")
    return basis_state(0, n_qubits, dtype=dtype, device=device)


def basis_state(
    index: int,
    n_qubits: int,
    dtype: torch.dtype = torch.complex128,
    device: torch.device | str = "cpu",
) -> torch.Tensor:
    """Return the computational basis state ``|index⟩``."""
    dim = 1 << n_qubits
    if not 0 <= index < dim:
        raise IndexOutOfRangeError(f"Basis index {index} outside [0, {dim}).")
    state = torch.zeros(dim, dtype=dtype, device=device)
    state[index] = 1.0 + 0.0j
    return state


def check_qubits(qubits: Sequence[int], n_qubits: int) -> list[int]:
    """Validate target qubit indices and return them as a list of ints."""
    targets = [int(q) for q in qubits]
    for q in targets:
        if q < 0 or q >= n_qubits:
            raise IndexOutOfRangeError(
                f"qubit index {q} out of range [0, {n_qubits})"
            )
    if len(set(targets)) != len(targets):
        raise ValueError(f"Target qubits must be distinct, got {targets}")
    return targets


def apply_matrix(
    state: torch.Tensor,
    matrix: torch.Tensor,
    qubits: Sequence[int],
) -> torch.Tensor:
    """
    Apply a ``2^k x 2^k`` matrix to ``k`` target qubits.

    For every basis index the bits on the target positions select a matrix
    column; the matrix row selects the bits written back, while all other
    bits are unchanged. The first listed qubit is the most significant bit of
    the row/column index. This is computed as a contraction: target axes are
    permuted to the front, the state is viewed as ``(2^k, 2^(n-k))`` and
    multiplied by the matrix.

    Raises
    ------
    UnsupportedArityError
        If ``qubits`` is empty or longer than three.
    DimensionMismatchError
        If the matrix is not ``2^k x 2^k``.
    IndexOutOfRangeError
        If a target is outside the register.
    """
    k = len(qubits)
    if k < 1 or k > MAX_GATE_ARITY:
        raise UnsupportedArityError(k, MAX_GATE_ARITY)
    expected = 1 << k
    if matrix.dim() != 2 or tuple(matrix.shape) != (expected, expected):
        raise DimensionMismatchError(expected, tuple(matrix.shape))

    n_qubits = num_qubits_of(state)
    targets = check_qubits(qubits, n_qubits)

    perm = targets + [q for q in range(n_qubits) if q not in targets]
    inverse = [perm.index(axis) for axis in range(n_qubits)]

    gate = matrix.to(dtype=state.dtype, device=state.device)
    moved = state.reshape([2] * n_qubits).permute(perm).reshape(expected, -1)
    updated = gate @ moved
    return updated.reshape([2] * n_qubits).permute(inverse).reshape(-1).contiguous()


def total_probability(state: torch.Tensor) -> float:
    """Return ``sum |a_i|^2``."""
    return float((state.abs() ** 2).sum())


def normalize(state: torch.Tensor) -> torch.Tensor:
    """Divide every amplitude by ``sqrt(total probability)``; zero states pass through."""
    total = total_probability(state)
    if total <= 0.0:
        return state.clone()
    return state / math.sqrt(total)


def probabilities(state: torch.Tensor) -> torch.Tensor:
    """Born-rule probabilities ``|a_i|^2`` as a float64 tensor."""
    return (state.abs() ** 2).to(torch.float64)


def phase_flip(state: torch.Tensor, indices: Iterable[int]) -> torch.Tensor:
    """Negate the amplitude of each listed basis index."""
    flipped = state.clone()
    dim = state.shape[0]
    for index in indices:
        index = int(index)
        if not 0 <= index < dim:
            raise IndexOutOfRangeError(f"Basis index {index} outside [0, {dim}).")
        flipped[index] = -flipped[index]
    return flipped


def flip_all_ones(state: torch.Tensor, qubits: Sequence[int]) -> torch.Tensor:
    """Negate every amplitude whose bits on ``qubits`` are all 1."""
    n_qubits = num_qubits_of(state)
    targets = check_qubits(qubits, n_qubits)
    mask = 0
    for q in targets:
        mask |= 1 << (n_qubits - 1 - q)
    indices = [i for i in range(state.shape[0]) if i & mask == mask]
    return phase_flip(state, indices)


def collapse(state: torch.Tensor, index: int) -> torch.Tensor:
    """Return the basis state ``|index⟩`` shaped like ``state``."""
    return basis_state(
        index, num_qubits_of(state), dtype=state.dtype, device=state.device
    )


def bit_of(index: int, qubit: int, n_qubits: int) -> int:
    """Value of ``qubit`` in basis index ``index``."""
    return (index >> (n_qubits - 1 - qubit)) & 1


def basis_label(index: int, n_qubits: int) -> str:
    """Binary label of a basis index, qubit 0 first, e.g. ``"011"``."""
    return format(index, f"0{n_qubits}b")


def marginal_probability(state: torch.Tensor, qubit: int, value: int) -> float:
    """Probability that measuring ``qubit`` yields ``value``."""
    n_qubits = num_qubits_of(state)
    (qubit,) = check_qubits([qubit], n_qubits)
    probs = probabilities(state).reshape([2] * n_qubits).movedim(qubit, 0)
    return float(probs[int(value)].sum())


__all__ = [
    "MAX_GATE_ARITY",
    "apply_matrix",
    "basis_label",
    "basis_state",
    "bit_of",
    "check_qubits",
    "collapse",
    "flip_all_ones",
    "marginal_probability",
    "normalize",
    "num_qubits_of",
    "phase_flip",
    "probabilities",
    "total_probability",
    "zero_state",
]
