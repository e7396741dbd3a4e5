"""Diagnostic functions for statevectors."""

from __future__ import annotations

import math

import torch

from ..errors import IndexOutOfRangeError


def state_norm(state: torch.Tensor) -> float:
    """
    Return the L2 norm ``sqrt(<psi|psi>)`` of a 1D statevector.

    Raises
    ------
    ValueError
        If ``state`` is not one-dimensional.
    """
    if state.dim() != 1:
        raise ValueError("state_norm expects a 1D statevector.")
    norm_sq = (state.conj() * state).sum().real
    return float(torch.sqrt(norm_sq))


def assert_normalized(state: torch.Tensor, atol: float = 1e-9) -> None:
    """
    Assert that ``sum |a_i|^2`` equals one within ``atol``.

    Raises
    ------
    ValueError
        If the norm is non-finite or differs from one by more than ``atol``.
    """
    total = float((state.abs() ** 2).sum())
    if not math.isfinite(total):
        raise ValueError("State norm contains non-finite values.")
    if abs(total - 1.0) > atol:
        raise ValueError(
            f"State is not normalized within tolerance {atol}: "
            f"total probability {total!r}"
        )


def fidelity(state_a: torch.Tensor, state_b: torch.Tensor) -> float:
    """Return ``|<a|b>|^2`` for two pure statevectors of equal length."""
    if state_a.shape != state_b.shape:
        raise ValueError("fidelity expects states with the same shape.")
    inner = (state_a.conj() * state_b).sum()
    return float(inner.abs() ** 2)


def reduced_density_matrix(state: torch.Tensor, qubit: int) -> torch.Tensor:
    """
    Partial trace of a pure state onto one qubit.

    Entry ``rho[r][c]`` sums ``a_i * conj(a_j)`` over every index pair ``(i, j)``
    whose bits agree on all qubits except ``qubit``, where ``qubit`` reads
    ``r`` in ``i`` and ``c`` in ``j``. Qubit 0 is the most significant bit.

    Returns
    -------
    torch.Tensor
        A (2, 2) Hermitian matrix with unit trace for a normalized input.
    """
    dim = state.shape[-1]
    n_qubits = dim.bit_length() - 1
    if state.dim() != 1 or (1 << n_qubits) != dim:
        raise ValueError("Statevector length must be a power of 2.")
    if qubit < 0 or qubit >= n_qubits:
        raise IndexOutOfRangeError(
            f"qubit index {qubit} out of range [0, {n_qubits})"
        )
    blocks = state.reshape([2] * n_qubits).movedim(qubit, 0).reshape(2, -1)
    return blocks @ blocks.conj().transpose(0, 1)


def bloch_from_density(rho: torch.Tensor) -> tuple[float, float, float]:
    """``(2 Re rho01, 2 Im rho01, rho00 - rho11)`` for a 2x2 density matrix."""
    rho01 = rho[0, 1]
    x = 2.0 * float(rho01.real)
    y = 2.0 * float(rho01.imag)
    z = float(rho[0, 0].real) - float(rho[1, 1].real)
    return x, y, z


def bloch_vector(state: torch.Tensor) -> tuple[float, float, float]:
    """
    Bloch components of a single-qubit state ``[a, b]``.

        x = 2 Re(a * conj(b))
        y = 2 Im(a * conj(b)) = 2 (a_im b_re - a_re b_im)
        z = |a|^2 - |b|^2

    Raises
    ------
    ValueError
        If ``state`` does not have exactly two amplitudes.
    """
    if state.shape != (2,):
        raise ValueError("bloch_vector requires a single-qubit state of length 2.")
    a, b = complex(state[0]), complex(state[1])
    x = 2.0 * (a.real * b.real + a.imag * b.imag)
    y = 2.0 * (a.imag * b.real - a.real * b.imag)
    z = (a.real ** 2 + a.imag ** 2) - (b.real ** 2 + b.imag ** 2)
    return x, y, z
