"""Exception types raised by qstep.

Each error also derives from the built-in exception a caller would naturally
catch (``ValueError``, ``IndexError``, ...), so generic handlers keep working.
"""

from __future__ import annotations

from typing import Any, Optional


class QStepError(Exception):
    """Base class for all qstep errors."""


class UnknownGateError(QStepError, ValueError):
    """Raised when a gate name is not in the gate library."""

    def __init__(self, name: Any) -> None:
        self.name = name
        super().__init__(f"Unknown gate: {name!r}")


class DimensionMismatchError(QStepError, ValueError):
    """Raised when a gate matrix does not fit the number of target qubits."""

    def __init__(self, expected: int, actual: tuple[int, ...]) -> None:
        self.expected = expected
        self.actual = tuple(actual)
        super().__init__(
            f"Gate matrix of shape {self.actual} does not match "
            f"{expected}x{expected} required by the target qubits"
        )


class UnsupportedArityError(QStepError, ValueError):
    """Raised for gate applications on zero or more than three qubits."""

    def __init__(self, arity: int, max_arity: int = 3) -> None:
        self.arity = arity
        super().__init__(
            f"Gates act on 1 to {max_arity} qubits, got {arity} target qubits"
        )


class ComplexDivisionError(QStepError, ZeroDivisionError):
    """Raised when dividing a complex number by zero."""


class IndexOutOfRangeError(QStepError, IndexError):
    """Raised for qubit, basis-state or history indices outside their range."""


class InvalidAlgorithmError(QStepError, ValueError):
    """Raised for malformed steps or algorithm definitions."""


class StepExecutionError(QStepError, RuntimeError):
    """Raised by the interpreter when a step fails under the ``halt`` policy."""

    def __init__(self, step_index: int, step: Optional[Any], cause: BaseException) -> None:
        self.step_index = step_index
        self.step = step
        super().__init__(f"Step {step_index} failed: {cause}")


__all__ = [
    "ComplexDivisionError",
    "DimensionMismatchError",
    "IndexOutOfRangeError",
    "InvalidAlgorithmError",
    "QStepError",
    "StepExecutionError",
    "UnknownGateError",
    "UnsupportedArityError",
]
