"""Algorithm step lists and their registry."""

from .library import (
    Algorithm,
    bell_state,
    deutsch,
    get_algorithm,
    grover,
    list_algorithms,
    optimal_grover_iterations,
    phase_estimation,
    qft,
    single_qubit_gates,
    superdense_coding,
    teleportation,
    two_qubit_gates,
    validate_algorithm,
)

__all__ = [
    "Algorithm",
    "bell_state",
    "deutsch",
    "get_algorithm",
    "grover",
    "list_algorithms",
    "optimal_grover_iterations",
    "phase_estimation",
    "qft",
    "single_qubit_gates",
    "superdense_coding",
    "teleportation",
    "two_qubit_gates",
    "validate_algorithm",
]
