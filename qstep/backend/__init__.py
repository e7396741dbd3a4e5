"""Pure statevector kernels used by the engine."""

from .statevector import (
    MAX_GATE_ARITY,
    apply_matrix,
    basis_label,
    basis_state,
    bit_of,
    check_qubits,
    collapse,
    flip_all_ones,
    marginal_probability,
    normalize,
    num_qubits_of,
    phase_flip,
    probabilities,
    total_probability,
    zero_state,
)

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
