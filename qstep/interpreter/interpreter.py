"""Step-by-step execution of an algorithm on a :class:`QuantumEngine`."""

from __future__ import annotations

import math
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from ..engine import QuantumEngine
from ..errors import InvalidAlgorithmError, QStepError, StepExecutionError
from ..gates import GateName, gate_arity
from ..logging import get_logger
from ..measurement import MeasurementResult
from .steps import (
    ConditionalGateStep,
    ControlledPhaseStep,
    DeutschOracleStep,
    DiffusionStep,
    GateStep,
    MeasureStep,
    OracleStep,
    QFTStep,
    Step,
    parse_steps,
)

logger = get_logger(__name__)

_ERROR_POLICIES = ("skip", "halt")


class AlgorithmStepInterpreter:
    """
    Drive an engine through an ordered list of steps.

    ``current_step`` counts executed steps and ranges over
    ``[0, total_steps]``. Each step is recorded as a single history snapshot
    (or none, if it leaves the state unchanged).

    Parameters
    ----------
    algorithm_or_steps:
        Either an object with ``steps`` and ``num_qubits`` attributes (such
        as :class:`qstep.algorithms.Algorithm`) or a sequence of steps or
        step mappings.
    engine:
        Engine to drive. A new one is created when omitted.
    num_qubits:
        Register size. Defaults to the algorithm's, then the engine's, then
        the smallest size that fits every step.
    on_error:
        ``"skip"`` logs a failing step and counts it as executed without
        changing the state; ``"halt"`` raises :class:`StepExecutionError` and
        leaves ``current_step`` where it was.
    use_history:
        Navigate through the engine's history ledger where possible. With
        ``False``, stepping backward always resets and replays the prefix.
    """

    def __init__(
        self,
        algorithm_or_steps: Any,
        engine: Optional[QuantumEngine] = None,
        num_qubits: Optional[int] = None,
        on_error: str = "skip",
        use_history: bool = True,
    ) -> None:
        if on_error not in _ERROR_POLICIES:
            raise ValueError(f"on_error must be one of {_ERROR_POLICIES}, got {on_error!r}")

        if hasattr(algorithm_or_steps, "steps") and hasattr(algorithm_or_steps, "num_qubits"):
            self._algorithm = algorithm_or_steps
            raw_steps = algorithm_or_steps.steps
            if num_qubits is None:
                num_qubits = algorithm_or_steps.num_qubits
        else:
            self._algorithm = None
            raw_steps = algorithm_or_steps
        self._steps: Tuple[Step, ...] = tuple(parse_steps(raw_steps))

        if num_qubits is None:
            if engine is not None:
                num_qubits = engine.num_qubits
            else:
                num_qubits = max(1, max((s.max_qubit() for s in self._steps), default=0) + 1)

        self.engine = engine if engine is not None else QuantumEngine(num_qubits)
        self._num_qubits = int(num_qubits)
        self.on_error = on_error
        self.use_history = use_history
        self._current = 0
        # _marks[k] = (ledger index, snapshot serial) holding the state after k steps;
        # _origins[k] = the mark step k-1 was executed from.
        self._marks: List[Tuple[int, Optional[int]]] = []
        self._origins: List[Optional[Tuple[int, Optional[int]]]] = []
        self.reset()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def algorithm(self) -> Any:
        """The algorithm object this interpreter was built from, if any."""
        return self._algorithm

    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._steps

    @property
    def current_step(self) -> int:
        return self._current

    @property
    def total_steps(self) -> int:
        return len(self._steps)

    @property
    def is_finished(self) -> bool:
        return self._current >= len(self._steps)

    def __repr__(self) -> str:
        name = getattr(self._algorithm, "key", None) or "steps"
        return (
            f"AlgorithmStepInterpreter({name!r}, step={self._current}/{self.total_steps}, "
            f"on_error={self.on_error!r})"
        )

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Back to step 0 with a fresh ``|0...0⟩`` register."""
        self.engine.reset(self._num_qubits)
        self._current = 0
        self._marks = [self._mark()]
        self._origins = [None]

    def step_forward(self) -> bool:
        """
        Execute (or revisit) the next step.

        Returns False when every step has already been executed.

        Raises
        ------
        StepExecutionError
            Under ``on_error="halt"``, if the step fails.
        """
        if self._current >= len(self._steps):
            return False
        k = self._current
        if self.use_history and self._can_revisit(k + 1):
            self.engine.step_to(self._marks[k + 1][0])
            logger.debug("Revisited step %d from history", k)
            self._current = k + 1
        else:
            self._run_step(k)
        return True

    def step_backward(self) -> bool:
        """Undo the last executed step; False at step 0."""
        if self._current <= 0:
            return False
        self._move_back(self._current - 1)
        return True

    def step_to(self, index: int) -> bool:
        """
        Move to the state after ``index`` steps.

        Returns False (and stays put) when ``index`` is outside
        ``[0, total_steps]``.
        """
        if not 0 <= index <= len(self._steps):
            return False
        if index < self._current:
            self._move_back(index)
        while self._current < index:
            self.step_forward()
        return True

    def run(self) -> Iterator[int]:
        """Execute the remaining steps, yielding each step's index once it is done."""
        while not self.is_finished:
            index = self._current
            self.step_forward()
            yield index

    def measure(
        self,
        qubits: Optional[Sequence[int]] = None,
        store_classical: Optional[bool] = None,
    ) -> MeasurementResult:
        """
        Measure the engine's register.

        Omitted arguments come from the most recently executed measure step;
        without one, every qubit is measured and nothing is stored.
        """
        last = self.last_measure_step()
        if qubits is None:
            qubits = list(last.qubits) if last is not None and last.qubits else None
        if store_classical is None:
            store_classical = last.store_classical if last is not None else False
        return self.engine.measure(qubits, store_classical)

    def last_measure_step(self) -> Optional[MeasureStep]:
        for step in reversed(self._steps[: self._current]):
            if isinstance(step, MeasureStep):
                return step
        return None

    # ------------------------------------------------------------------
    # History marks
    # ------------------------------------------------------------------

    def _mark(self) -> Tuple[int, Optional[int]]:
        cursor = self.engine.history.cursor
        return cursor, self.engine.history.serial_at(cursor)

    def _mark_valid(self, k: int) -> bool:
        if k >= len(self._marks):
            return False
        index, serial = self._marks[k]
        return self.engine.history.serial_at(index) == serial

    def _can_revisit(self, k: int) -> bool:
        # Step k-1 must have been executed from the live entry.
        return self._mark_valid(k) and self._origins[k] == self._mark()

    def _move_back(self, target: int) -> None:
        if self.use_history and self._mark_valid(target):
            self.engine.step_to(self._marks[target][0])
            self._current = target
            logger.debug("Moved back to step %d through history", target)
            return
        logger.debug("Replaying %d steps", target)
        self.engine.reset(self._num_qubits)
        self._current = 0
        self._marks = [self._mark()]
        self._origins = [None]
        while self._current < target:
            self._run_step(self._current)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _run_step(self, index: int) -> None:
        step = self._steps[index]
        origin = self._mark()
        try:
            self.execute(step)
        except (QStepError, ValueError) as exc:
            if self.on_error == "halt":
                raise StepExecutionError(index, step, exc) from exc
            logger.warning("Skipping step %d (%s): %s", index, step.type.value, exc)
        del self._marks[index + 1:]
        del self._origins[index + 1:]
        self._marks.append(self._mark())
        self._origins.append(origin)
        self._current = index + 1

    def execute(self, step: Step) -> None:
        """
        Apply one step to the engine as a single history entry.

        If the step fails part way, the engine is left as it was before the
        step and the error propagates.
        """
        engine = self.engine
        with engine.grouped():
            if isinstance(step, GateStep):
                self._apply_gate(step.gate, step.qubits, step.parameters)
            elif isinstance(step, OracleStep):
                engine.apply_oracle(step.qubits or None, step.marked_states)
            elif isinstance(step, DeutschOracleStep):
                self._apply_deutsch_oracle(step)
            elif isinstance(step, DiffusionStep):
                engine.apply_diffusion(step.qubits or None)
            elif isinstance(step, ControlledPhaseStep):
                engine.apply_gate(GateName.CP, step.qubits, {"angle": step.angle})
            elif isinstance(step, ConditionalGateStep):
                bits = engine.get_classical_bits()
                for q, value in zip(step.condition_qubits, step.condition_values):
                    if q >= len(bits):
                        raise InvalidAlgorithmError(f"No classical bit for qubit {q}")
                if all(bits[q] == v for q, v in zip(step.condition_qubits, step.condition_values)):
                    self._apply_gate(step.gate, step.qubits, step.parameters)
                else:
                    logger.debug("Condition not met, %s gate skipped", step.gate)
            elif isinstance(step, QFTStep):
                self._apply_qft(step.qubits, step.inverse)
            elif isinstance(step, MeasureStep):
                # Sampling happens only on an explicit measure() request.
                pass
            else:
                raise InvalidAlgorithmError(f"Cannot execute step {step!r}")

    def _apply_gate(self, gate: str, qubits: Sequence[int], parameters: Any = None) -> None:
        if gate_arity(gate) == 1 and len(qubits) > 1:
            for q in qubits:
                self.engine.apply_gate(gate, [q], parameters)
        else:
            self.engine.apply_gate(gate, qubits, parameters)

    def _apply_deutsch_oracle(self, step: DeutschOracleStep) -> None:
        x, y = step.qubits
        if step.function_type == "balanced":
            self.engine.apply_gate(GateName.CNOT, [x, y])
        if step.function_value == 1:
            self.engine.apply_gate(GateName.X, [y])

    def _apply_qft(self, qubits: Sequence[int], inverse: bool) -> None:
        qubits = list(qubits) or list(range(self.engine.num_qubits))
        n = len(qubits)
        engine = self.engine

        def reverse() -> None:
            for i in range(n // 2):
                engine.apply_gate(GateName.SWAP, [qubits[i], qubits[n - 1 - i]])

        if inverse:
            reverse()
            for target in reversed(range(n)):
                for control in reversed(range(target + 1, n)):
                    angle = -math.pi / (1 << (control - target))
                    engine.apply_gate(
                        GateName.CP, [qubits[control], qubits[target]], {"angle": angle}
                    )
                engine.apply_gate(GateName.H, [qubits[target]])
            return

        for target in range(n):
            engine.apply_gate(GateName.H, [qubits[target]])
            for control in range(target + 1, n):
                angle = math.pi / (1 << (control - target))
                engine.apply_gate(
                    GateName.CP, [qubits[control], qubits[target]], {"angle": angle}
                )
        reverse()


__all__ = ["AlgorithmStepInterpreter"]
