"""
Textbook quantum algorithms expressed as step lists.

Each builder returns an :class:`Algorithm` whose steps can be played on a
:class:`~qstep.engine.QuantumEngine` with
:class:`~qstep.interpreter.AlgorithmStepInterpreter`. Qubit 0 is the most
significant bit of every basis label.

Reference: M. A. Nielsen and I. L. Chuang, *Quantum Computation and Quantum
Information*, Cambridge University Press.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..engine.config import QUBIT_CEILING
from ..errors import InvalidAlgorithmError, UnknownGateError
from ..gates import resolve_gate_name
from ..interpreter.steps import (
    ConditionalGateStep,
    ControlledPhaseStep,
    DeutschOracleStep,
    DiffusionStep,
    GateStep,
    MeasureStep,
    OracleStep,
    QFTStep,
    Step,
)


@dataclass(frozen=True)
class Algorithm:
    """
    A named, ordered list of steps on a fixed register size.

    Attributes
    ----------
    key:
        Registry identifier, e.g. ``"bell-states"``.
    name:
        Display name.
    num_qubits:
        Register size the steps are written for.
    steps:
        The steps, in execution order.
    description:
        One-paragraph summary.
    """

    key: str
    name: str
    num_qubits: int
    steps: Tuple[Step, ...]
    description: str = ""

    def __len__(self) -> int:
        return len(self.steps)


def optimal_grover_iterations(num_qubits: int) -> int:
    """``floor(pi * sqrt(2**n) / 4)`` Grover iterations for one marked state."""
    return int(math.floor(math.pi * math.sqrt(1 << num_qubits) / 4))


def _qft_steps(qubits: Sequence[int]) -> List[Step]:
    n = len(qubits)
    steps: List[Step] = []
    for i in range(n):
        steps.append(GateStep(gate="H", qubits=(qubits[i],), explanation=f"Hadamard on qubit {qubits[i]}"))
        for j in range(i + 1, n):
            steps.append(
                ControlledPhaseStep(
                    qubits=(qubits[j], qubits[i]),
                    angle=math.pi / (1 << (j - i)),
                    explanation=f"Controlled-R{j - i + 1} gate",
                )
            )
    for i in range(n // 2):
        steps.append(
            GateStep(gate="SWAP", qubits=(qubits[i], qubits[n - 1 - i]), explanation="Reverse qubit order")
        )
    return steps


def single_qubit_gates() -> Algorithm:
    return Algorithm(
        key="single-qubit",
        name="Single Qubit Gates",
        num_qubits=1,
        steps=(
            GateStep(gate="X", qubits=(0,), explanation="Apply Pauli-X gate (NOT gate)"),
            GateStep(gate="H", qubits=(0,), explanation="Apply Hadamard gate (superposition)"),
            GateStep(gate="Z", qubits=(0,), explanation="Apply Pauli-Z gate (phase flip)"),
            MeasureStep(qubits=(0,), explanation="Measure the qubit state"),
        ),
        description="Pauli-X, Hadamard and Pauli-Z acting on one qubit.",
    )


def two_qubit_gates() -> Algorithm:
    return Algorithm(
        key="two-qubit",
        name="Two Qubit Gates",
        num_qubits=2,
        steps=(
            GateStep(gate="H", qubits=(0,), explanation="Hadamard on control qubit"),
            GateStep(gate="CNOT", qubits=(0, 1), explanation="Entangle with CNOT"),
            MeasureStep(qubits=(0, 1), explanation="Measure both qubits"),
        ),
        description="Hadamard followed by CNOT produces an entangled pair.",
    )


def bell_state() -> Algorithm:
    return Algorithm(
        key="bell-states",
        name="Bell States",
        num_qubits=2,
        steps=(
            GateStep(gate="H", qubits=(0,), explanation="Create superposition"),
            GateStep(gate="CNOT", qubits=(0, 1), explanation="Entangle qubits"),
            MeasureStep(qubits=(0, 1), explanation="Measure Bell state"),
        ),
        description="Prepares (|00⟩ + |11⟩)/√2.",
    )


def deutsch(function_type: str = "balanced", function_value: int = 0) -> Algorithm:
    """
    Deutsch's algorithm for ``f: {0, 1} -> {0, 1}``.

    Qubit 0 reads ``0`` with certainty for a constant ``f`` and ``1`` for a
    balanced one.
    """
    return Algorithm(
        key="deutsch",
        name="Deutsch Algorithm",
        num_qubits=2,
        steps=(
            GateStep(gate="X", qubits=(1,), explanation="Initialize ancilla qubit to |1⟩"),
            GateStep(gate="H", qubits=(0, 1), explanation="Create superposition"),
            DeutschOracleStep(
                qubits=(0, 1),
                function_type=function_type,
                function_value=function_value,
                explanation="Apply function oracle",
            ),
            GateStep(gate="H", qubits=(0,), explanation="Interfere"),
            MeasureStep(qubits=(0,), explanation="Measure control qubit"),
        ),
        description=f"Decides whether a {function_type} f is constant or balanced with one query.",
    )


def grover(
    num_qubits: int = 3,
    marked_states: Optional[Sequence[int]] = None,
    iterations: Optional[int] = None,
) -> Algorithm:
    """
    Grover search over ``2**num_qubits`` basis states.

    Parameters
    ----------
    num_qubits:
        Register size.
    marked_states:
        Basis indices to amplify. Defaults to the all-ones state.
    iterations:
        Oracle + diffusion rounds. Defaults to
        :func:`optimal_grover_iterations`.
    """
    if not 1 <= num_qubits <= QUBIT_CEILING:
        raise InvalidAlgorithmError(
            f"num_qubits must be in [1, {QUBIT_CEILING}], got {num_qubits}"
        )
    marked = tuple(marked_states) if marked_states else ((1 << num_qubits) - 1,)
    rounds = optimal_grover_iterations(num_qubits) if iterations is None else int(iterations)
    if rounds < 0:
        raise InvalidAlgorithmError(f"iterations must be >= 0, got {iterations}")

    qubits = tuple(range(num_qubits))
    labels = ", ".join(f"|{m:0{num_qubits}b}⟩" for m in marked)
    steps: List[Step] = [
        GateStep(gate="H", qubits=qubits, explanation="Initialize uniform superposition")
    ]
    for i in range(rounds):
        steps.append(
            OracleStep(
                qubits=qubits,
                marked_states=marked,
                explanation=f"Mark target state {labels} (Iteration {i + 1})",
            )
        )
        steps.append(
            DiffusionStep(qubits=qubits, explanation=f"Apply diffusion operator (Iteration {i + 1})")
        )
    steps.append(MeasureStep(qubits=qubits, explanation="Measure to find marked state"))
    return Algorithm(
        key="grovers",
        name="Grover's Search Algorithm",
        num_qubits=num_qubits,
        steps=tuple(steps),
        description=f"Amplifies {labels} in {rounds} iteration(s).",
    )


def qft(num_qubits: int = 3) -> Algorithm:
    """Quantum Fourier transform written out as H, controlled-phase and SWAP steps."""
    qubits = tuple(range(num_qubits))
    steps = _qft_steps(qubits)
    steps.append(MeasureStep(qubits=qubits, explanation="Measure frequency domain state"))
    return Algorithm(
        key="qft",
        name="Quantum Fourier Transform",
        num_qubits=num_qubits,
        steps=tuple(steps),
        description="Discrete Fourier transform of the amplitude vector.",
    )


def teleportation() -> Algorithm:
    """
    Teleport qubit 0's state onto qubit 2.

    Qubit 0 is prepared in ``|+⟩``; the Bell measurement stores its outcome
    in classical bits 0 and 1, which drive the Z and X corrections on qubit 2.
    """
    return Algorithm(
        key="teleportation",
        name="Quantum Teleportation",
        num_qubits=3,
        steps=(
            GateStep(gate="H", qubits=(0,), explanation="Prepare state to teleport"),
            GateStep(gate="H", qubits=(1,), explanation="Start Bell pair"),
            GateStep(gate="CNOT", qubits=(1, 2), explanation="Entangle qubits 1 and 2"),
            GateStep(gate="CNOT", qubits=(0, 1), explanation="Bell measurement basis change"),
            GateStep(gate="H", qubits=(0,), explanation="Complete basis change"),
            MeasureStep(qubits=(0, 1), store_classical=True, explanation="Alice measures"),
            ConditionalGateStep(
                gate="Z",
                qubits=(2,),
                condition_qubits=(0,),
                condition_values=(1,),
                explanation="Bob applies Z correction (conditional)",
            ),
            ConditionalGateStep(
                gate="X",
                qubits=(2,),
                condition_qubits=(1,),
                condition_values=(1,),
                explanation="Bob applies X correction (conditional)",
            ),
            MeasureStep(qubits=(2,), explanation="Verify teleportation success"),
        ),
        description="Moves a qubit state using entanglement and two classical bits.",
    )


def superdense_coding(message: Sequence[int] = (0, 0)) -> Algorithm:
    """
    Send two classical bits with one qubit of a Bell pair.

    Decoding yields the basis state whose label equals ``message``.
    """
    bits = tuple(int(b) for b in message)
    if len(bits) != 2 or any(b not in (0, 1) for b in bits):
        raise InvalidAlgorithmError(f"message must be two bits, got {tuple(message)}")

    steps: List[Step] = [
        GateStep(gate="H", qubits=(0,), explanation="Create Bell pair"),
        GateStep(gate="CNOT", qubits=(0, 1), explanation="Entangle"),
    ]
    if bits[0]:
        steps.append(GateStep(gate="Z", qubits=(0,), explanation="Encode first bit"))
    if bits[1]:
        steps.append(GateStep(gate="X", qubits=(0,), explanation="Encode second bit"))
    steps += [
        GateStep(gate="CNOT", qubits=(0, 1), explanation="Begin Bell measurement"),
        GateStep(gate="H", qubits=(0,), explanation="Complete Bell measurement"),
        MeasureStep(qubits=(0, 1), explanation="Read the message"),
    ]
    return Algorithm(
        key="superdense-coding",
        name="Superdense Coding",
        num_qubits=2,
        steps=tuple(steps),
        description=f"Encodes message {bits[0]}{bits[1]} in one qubit.",
    )


def phase_estimation(phase: float = 0.25, counting_qubits: int = 3) -> Algorithm:
    """
    Estimate the eigenphase of a phase gate acting on ``|1⟩``.

    Counting qubit ``j`` controls ``P(2 pi phase)^(2^(n-1-j))`` on the target
    (the last qubit). For ``phase = k / 2^n`` the counting register ends in
    ``|k⟩`` exactly.
    """
    n = int(counting_qubits)
    if not 1 <= n <= QUBIT_CEILING - 1:
        raise InvalidAlgorithmError(
            f"counting_qubits must be in [1, {QUBIT_CEILING - 1}], got {counting_qubits}"
        )
    counting = tuple(range(n))
    target = n
    steps: List[Step] = [
        GateStep(gate="H", qubits=counting, explanation="Superposition on counting register"),
        GateStep(gate="X", qubits=(target,), explanation="Prepare eigenstate |1⟩"),
    ]
    for j in counting:
        power = 1 << (n - 1 - j)
        steps.append(
            ControlledPhaseStep(
                qubits=(j, target),
                angle=2 * math.pi * phase * power,
                explanation=f"Controlled-U^{power}",
            )
        )
    steps += [
        QFTStep(qubits=counting, inverse=True, explanation="Inverse QFT on counting register"),
        MeasureStep(qubits=counting, explanation="Measure phase estimate"),
    ]
    return Algorithm(
        key="phase-estimation",
        name="Quantum Phase Estimation",
        num_qubits=n + 1,
        steps=tuple(steps),
        description=f"Estimates phase {phase} with {n} counting qubits.",
    )


_REGISTRY: Dict[str, Callable[..., Algorithm]] = {
    "single-qubit": single_qubit_gates,
    "two-qubit": two_qubit_gates,
    "bell-states": bell_state,
    "deutsch": deutsch,
    "grovers": grover,
    "qft": qft,
    "teleportation": teleportation,
    "superdense-coding": superdense_coding,
    "phase-estimation": phase_estimation,
}


def list_algorithms() -> List[str]:
    """Registry keys in presentation order."""
    return list(_REGISTRY)


def get_algorithm(key: str, **kwargs) -> Algorithm:
    """
    Build a registered algorithm by key, forwarding ``kwargs`` to its builder.

    Raises:
        InvalidAlgorithmError: If ``key`` is not registered.
    """
    try:
        builder = _REGISTRY[key]
    except KeyError:
        raise InvalidAlgorithmError(
            f"Unknown algorithm {key!r}; available: {', '.join(_REGISTRY)}"
        ) from None
    return builder(**kwargs)


def validate_algorithm(algorithm: Algorithm) -> None:
    """
    Check an algorithm before running it.

    Raises:
        InvalidAlgorithmError: If there are no steps, the register size is
            outside ``[1, QUBIT_CEILING]``, a step touches a qubit beyond the
            register, names an unknown gate or marks a basis state that does
            not exist.
    """
    if not algorithm.steps:
        raise InvalidAlgorithmError(f"Algorithm {algorithm.key!r} has no steps")
    n = algorithm.num_qubits
    if not 1 <= n <= QUBIT_CEILING:
        raise InvalidAlgorithmError(
            f"Algorithm {algorithm.key!r} needs {n} qubits; supported range is [1, {QUBIT_CEILING}]"
        )
    for index, step in enumerate(algorithm.steps):
        if any(q < 0 for q in step.qubits) or step.max_qubit() >= n:
            raise InvalidAlgorithmError(
                f"Step {index} ({step.type.value}) uses qubits {step.qubits} outside [0, {n})"
            )
        gate = getattr(step, "gate", None)
        if gate is not None:
            try:
                resolve_gate_name(gate)
            except UnknownGateError as exc:
                raise InvalidAlgorithmError(f"Step {index}: {exc}") from exc
        if isinstance(step, OracleStep) and step.marked_states:
            for m in step.marked_states:
                if not 0 <= m < (1 << n):
                    raise InvalidAlgorithmError(
                        f"Step {index} marks basis state {m} outside [0, {1 << n})"
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
