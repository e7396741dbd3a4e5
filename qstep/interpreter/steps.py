"""Algorithm step descriptors.

A step is pure data: which operation to perform on which qubits, with which
parameters. Steps are immutable; the interpreter only reads them.

Plain mappings (for example decoded JSON) are turned into step objects with
:func:`parse_step`. Field names are accepted in snake_case or camelCase, and
step-specific fields may also sit inside a nested ``parameters`` mapping::

    {"type": "grover-oracle", "qubits": [0, 1, 2],
     "parameters": {"markedStates": [5]}}
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Tuple

from ..errors import InvalidAlgorithmError


class StepType(str, Enum):
    GATE = "gate"
    ORACLE = "oracle"
    GROVER_ORACLE = "grover-oracle"
    DEUTSCH_ORACLE = "deutsch-oracle"
    DIFFUSION = "diffusion"
    CONTROLLED_PHASE = "controlled-phase"
    CONDITIONAL_GATE = "conditional-gate"
    QFT = "qft"
    QFT_INVERSE = "qft-inverse"
    MEASURE = "measure"


@dataclass(frozen=True, kw_only=True)
class Step:
    """
    Base class of every step.

    Attributes
    ----------
    qubits:
        Qubit indices the step acts on.
    explanation:
        Optional one-line caption; carried along, never interpreted.
    """

    type: ClassVar[StepType]

    qubits: Tuple[int, ...]
    explanation: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "qubits", tuple(int(q) for q in self.qubits))

    def max_qubit(self) -> int:
        """Highest qubit index the step touches, or -1 if it touches none."""
        return max(self.qubits, default=-1)


@dataclass(frozen=True, kw_only=True)
class GateStep(Step):
    """One named gate. A single-qubit gate listed with several qubits is applied to each."""

    type: ClassVar[StepType] = StepType.GATE

    gate: str
    parameters: Optional[Dict[str, float]] = None


@dataclass(frozen=True, kw_only=True)
class OracleStep(Step):
    """Phase flip of ``marked_states`` (default: the all-ones index of ``qubits``)."""

    type: ClassVar[StepType] = StepType.ORACLE

    marked_states: Optional[Tuple[int, ...]] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.marked_states is not None:
            object.__setattr__(
                self, "marked_states", tuple(int(m) for m in self.marked_states)
            )


@dataclass(frozen=True, kw_only=True)
class DeutschOracleStep(Step):
    """
    ``U_f |x, y⟩ = |x, y XOR f(x)⟩`` on ``qubits = (input, ancilla)``.

    A ``constant`` function returns ``function_value`` for every input; a
    ``balanced`` one returns ``x`` (value 0) or ``NOT x`` (value 1).
    """

    type: ClassVar[StepType] = StepType.DEUTSCH_ORACLE

    function_type: str = "constant"
    function_value: int = 0

    def __post_init__(self) -> None:
        super().__post_init__()
        if len(self.qubits) != 2:
            raise InvalidAlgorithmError(
                f"deutsch-oracle needs (input, ancilla) qubits, got {self.qubits}"
            )
        if self.function_type not in ("constant", "balanced"):
            raise InvalidAlgorithmError(
                f"function_type must be 'constant' or 'balanced', got {self.function_type!r}"
            )
        if self.function_value not in (0, 1):
            raise InvalidAlgorithmError(
                f"function_value must be 0 or 1, got {self.function_value!r}"
            )


@dataclass(frozen=True, kw_only=True)
class DiffusionStep(Step):
    type: ClassVar[StepType] = StepType.DIFFUSION


@dataclass(frozen=True, kw_only=True)
class ControlledPhaseStep(Step):
    """``CP(angle)`` with ``qubits = (control, target)``."""

    type: ClassVar[StepType] = StepType.CONTROLLED_PHASE

    angle: float = 0.0

    def __post_init__(self) -> None:
        super().__post_init__()
        if len(self.qubits) != 2:
            raise InvalidAlgorithmError(
                f"controlled-phase needs (control, target) qubits, got {self.qubits}"
            )


@dataclass(frozen=True, kw_only=True)
class ConditionalGateStep(Step):
    """
    A gate applied only when classical bits match.

    The gate fires when ``classical_bits[condition_qubits[i]] ==
    condition_values[i]`` for every ``i``. With no conditions it always fires.
    """

    type: ClassVar[StepType] = StepType.CONDITIONAL_GATE

    gate: str
    condition_qubits: Tuple[int, ...] = ()
    condition_values: Tuple[int, ...] = ()
    parameters: Optional[Dict[str, float]] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(
            self, "condition_qubits", tuple(int(q) for q in self.condition_qubits)
        )
        object.__setattr__(
            self, "condition_values", tuple(int(v) for v in self.condition_values)
        )
        if len(self.condition_qubits) != len(self.condition_values):
            raise InvalidAlgorithmError(
                "condition_qubits and condition_values must have the same length"
            )

    def max_qubit(self) -> int:
        return max(self.qubits + self.condition_qubits, default=-1)


@dataclass(frozen=True, kw_only=True)
class QFTStep(Step):
    """Quantum Fourier transform on ``qubits``; ``inverse`` selects its adjoint."""

    type: ClassVar[StepType] = StepType.QFT

    inverse: bool = False


@dataclass(frozen=True, kw_only=True)
class MeasureStep(Step):
    """
    Marks the point where the caller may measure.

    Executing it does not sample; measurement is a separate request made
    through the interpreter or engine.
    """

    type: ClassVar[StepType] = StepType.MEASURE

    store_classical: bool = False


_MISSING = object()


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _field(data: Mapping[str, Any], name: str, default: Any = _MISSING) -> Any:
    """Look ``name`` up in snake_case or camelCase, top level first, then ``parameters``."""
    nested = data.get("parameters")
    scopes = [data] + ([nested] if isinstance(nested, Mapping) else [])
    for scope in scopes:
        for key in (name, _camel(name)):
            if key in scope:
                return scope[key]
    if default is _MISSING:
        raise InvalidAlgorithmError(
            f"{data.get('type', 'step')!r} step is missing field {name!r}"
        )
    return default


def _gate_parameters(data: Mapping[str, Any]) -> Optional[Dict[str, float]]:
    params = data.get("parameters")
    angle = data.get("angle")
    if isinstance(params, Mapping):
        numeric = {k: float(v) for k, v in params.items() if isinstance(v, (int, float))}
    else:
        numeric = {}
    if angle is not None:
        numeric.setdefault("angle", float(angle))
    return numeric or None


def parse_step(data: Mapping[str, Any] | Step) -> Step:
    """
    Build a step object from a mapping.

    Step objects are returned unchanged.

    Raises:
        InvalidAlgorithmError: For an unknown ``type`` or a missing field.
    """
    if isinstance(data, Step):
        return data
    if not isinstance(data, Mapping):
        raise InvalidAlgorithmError(f"Step must be a mapping, got {type(data).__name__}")

    raw_type = data.get("type")
    try:
        step_type = StepType(str(raw_type).strip().lower())
    except ValueError:
        raise InvalidAlgorithmError(f"Unknown step type: {raw_type!r}") from None

    qubits = tuple(_field(data, "qubits", ()))
    explanation = str(data.get("explanation", ""))
    common = {"qubits": qubits, "explanation": explanation}

    if step_type is StepType.GATE:
        return GateStep(gate=str(_field(data, "gate")), parameters=_gate_parameters(data), **common)
    if step_type in (StepType.ORACLE, StepType.GROVER_ORACLE):
        marked = _field(data, "marked_states", None)
        if isinstance(marked, int):
            marked = (marked,)
        return OracleStep(marked_states=marked, **common)
    if step_type is StepType.DEUTSCH_ORACLE:
        return DeutschOracleStep(
            function_type=str(_field(data, "function_type", "constant")),
            function_value=int(_field(data, "function_value", 0)),
            **common,
        )
    if step_type is StepType.DIFFUSION:
        return DiffusionStep(**common)
    if step_type is StepType.CONTROLLED_PHASE:
        return ControlledPhaseStep(angle=float(_field(data, "angle", 0.0)), **common)
    if step_type is StepType.CONDITIONAL_GATE:
        return ConditionalGateStep(
            gate=str(_field(data, "gate")),
            condition_qubits=tuple(_field(data, "condition_qubits", ())),
            condition_values=tuple(_field(data, "condition_values", ())),
            parameters=_gate_parameters(data),
            **common,
        )
    if step_type in (StepType.QFT, StepType.QFT_INVERSE):
        return QFTStep(inverse=step_type is StepType.QFT_INVERSE, **common)
    return MeasureStep(store_classical=bool(_field(data, "store_classical", False)), **common)


def parse_steps(steps: Iterable[Mapping[str, Any] | Step]) -> List[Step]:
    """Parse every entry of ``steps``; the error names the offending position."""
    parsed = []
    for index, entry in enumerate(steps):
        try:
            parsed.append(parse_step(entry))
        except InvalidAlgorithmError as exc:
            raise InvalidAlgorithmError(f"Step {index}: {exc}") from exc
    return parsed


__all__ = [
    "ConditionalGateStep",
    "ControlledPhaseStep",
    "DeutschOracleStep",
    "DiffusionStep",
    "GateStep",
    "MeasureStep",
    "OracleStep",
    "QFTStep",
    "Step",
    "StepType",
    "parse_step",
    "parse_steps",
]
