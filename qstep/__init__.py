"""qstep - a PyTorch statevector simulator with step-by-step, replayable execution."""

__version__ = "0.1.0"

# Algorithms
from .algorithms import (
    Algorithm,
    get_algorithm,
    list_algorithms,
    optimal_grover_iterations,
    validate_algorithm,
)

# Backend operations
from .backend import apply_matrix, basis_state, normalize, probabilities, zero_state

# Diagnostics
from .diagnostics import (
    assert_normalized,
    bloch_vector,
    debug_context,
    fidelity,
    is_debug_enabled,
    reduced_density_matrix,
    set_debug_enabled,
    state_norm,
)

# Engine
from .engine import (
    QUBIT_CEILING,
    Amplitude,
    BlochVector,
    EngineConfig,
    HistoryLedger,
    QuantumEngine,
    Snapshot,
)

# Errors
from .errors import (
    ComplexDivisionError,
    DimensionMismatchError,
    IndexOutOfRangeError,
    InvalidAlgorithmError,
    QStepError,
    StepExecutionError,
    UnknownGateError,
    UnsupportedArityError,
)

# Gates
from .gates import GateName, gate_arity, is_unitary, matrix_for, resolve_gate_name

# Interpreter
from .interpreter import AlgorithmStepInterpreter, Step, StepType, parse_step, parse_steps

# Logging
from .logging import configure_logging, get_logger, set_log_level

# Measurement
from .measurement import MeasurementResult, MeasurementSampler

__all__ = [
    "__version__",
    # Algorithms
    "Algorithm",
    "get_algorithm",
    "list_algorithms",
    "optimal_grover_iterations",
    "validate_algorithm",
    # Backend
    "apply_matrix",
    "basis_state",
    "normalize",
    "probabilities",
    "zero_state",
    # Diagnostics
    "assert_normalized",
    "bloch_vector",
    "debug_context",
    "fidelity",
    "is_debug_enabled",
    "reduced_density_matrix",
    "set_debug_enabled",
    "state_norm",
    # Engine
    "QUBIT_CEILING",
    "Amplitude",
    "BlochVector",
    "EngineConfig",
    "HistoryLedger",
    "QuantumEngine",
    "Snapshot",
    # Errors
    "ComplexDivisionError",
    "DimensionMismatchError",
    "IndexOutOfRangeError",
    "InvalidAlgorithmError",
    "QStepError",
    "StepExecutionError",
    "UnknownGateError",
    "UnsupportedArityError",
    # Gates
    "GateName",
    "gate_arity",
    "is_unitary",
    "matrix_for",
    "resolve_gate_name",
    # Interpreter
    "AlgorithmStepInterpreter",
    "Step",
    "StepType",
    "parse_step",
    "parse_steps",
    # Logging
    "configure_logging",
    "get_logger",
    "set_log_level",
    # Measurement
    "MeasurementResult",
    "MeasurementSampler",
]
