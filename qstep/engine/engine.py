"""Stateful quantum engine.

:class:`QuantumEngine` owns one amplitude vector, a classical register and a
:class:`~qstep.engine.history.HistoryLedger`. All mutation goes through
``apply_gate``/``apply_matrix``, ``apply_oracle``, ``apply_diffusion`` and
``measure``; each of them computes a new tensor and swaps it in only on
success, then records a snapshot. Read accessors hand out copies.

The engine is a single-owner, non-reentrant object: callers must not run two
mutating calls on it concurrently.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, NamedTuple, Optional, Sequence

import torch

from .. import complexmath as cm
from ..backend import statevector as sv
from ..diagnostics import (
    assert_normalized,
    bloch_from_density,
    bloch_vector,
    is_debug_enabled,
    reduced_density_matrix,
)
from ..errors import IndexOutOfRangeError, QStepError, UnsupportedArityError
from ..gates import GateName, matrix_for
from ..logging import get_logger
from ..measurement import MeasurementResult, MeasurementSampler
from .config import EngineConfig
from .history import HistoryLedger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Amplitude:
    """One amplitude with its polar form."""

    real: float
    imag: float
    magnitude: float
    phase: float


class BlochVector(NamedTuple):
    x: float
    y: float
    z: float


class QuantumEngine:
    """
    Statevector simulator with replayable history.

    Parameters
    ----------
    num_qubits:
        Initial register size; clamped to ``config.max_qubits``.
    config:
        Engine settings. Defaults to ``EngineConfig()``.
    sampler:
        Measurement sampler. Defaults to one seeded from ``config.seed``.

    Examples
    --------
    >>> engine = QuantumEngine(2)
    >>> engine.apply_gate("H", [0])
    >>> engine.apply_gate("CNOT", [0, 1])
    >>> engine.format_state()
    '0.707|00⟩ + 0.707|11⟩'
    """

    def __init__(
        self,
        num_qubits: int = 3,
        config: Optional[EngineConfig] = None,
        sampler: Optional[MeasurementSampler] = None,
    ) -> None:
        self.config = config if config is not None else EngineConfig()
        self.sampler = (
            sampler if sampler is not None
            else MeasurementSampler(self.config.make_generator())
        )
        self.history = HistoryLedger()
        self._group_depth = 0
        self._group_dirty = False
        self.reset(num_qubits)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def max_qubits(self) -> int:
        return self.config.max_qubits

    def reset(self, num_qubits: Optional[int] = None) -> None:
        """Return to ``|0...0⟩`` on ``num_qubits`` qubits (default: current size)."""
        if self._group_depth:
            raise RuntimeError("Cannot reset the engine inside grouped().")
        if num_qubits is None:
            num_qubits = self._num_qubits
        if num_qubits < 1:
            raise ValueError(f"num_qubits must be >= 1, got {num_qubits}")
        if num_qubits > self.config.max_qubits:
            logger.warning(
                "Requested %d qubits, clamping to %d", num_qubits, self.config.max_qubits
            )
        self._num_qubits = min(int(num_qubits), self.config.max_qubits)
        self._state = sv.zero_state(
            self._num_qubits, dtype=self.config.dtype, device=self.config.device
        )
        self._classical_bits = [0] * self._num_qubits
        self.history.reset(self._state)
        logger.info("Quantum engine reset with %d qubits", self._num_qubits)

    # ------------------------------------------------------------------
    # History bookkeeping
    # ------------------------------------------------------------------

    def _commit(self, new_state: torch.Tensor) -> None:
        self._state = new_state
        if self._group_depth:
            self._group_dirty = True
        else:
            self.history.save(self._state)

    @contextmanager
    def grouped(self) -> Iterator["QuantumEngine"]:
        """
        Record everything done inside the block as one history snapshot.

        If the block raises, the statevector is restored to its value on entry,
        no snapshot is recorded and the exception propagates.
        """
        outermost = self._group_depth == 0
        saved = self._state
        if outermost:
            self._group_dirty = False
        self._group_depth += 1
        try:
            yield self
        except BaseException:
            self._state = saved
            if outermost:
                self._group_dirty = False
            raise
        finally:
            self._group_depth -= 1
        if outermost and self._group_dirty:
            self._group_dirty = False
            self.history.save(self._state)

    # ------------------------------------------------------------------
    # State evolution
    # ------------------------------------------------------------------

    def apply_gate(
        self,
        name: str | GateName,
        qubits: Sequence[int],
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Apply a named gate to ``qubits`` and renormalize.

        Raises
        ------
        UnknownGateError, UnsupportedArityError, DimensionMismatchError,
        IndexOutOfRangeError
            The state and history are left as they were.
        ValueError
            If a qubit is listed twice.
        """
        logger.debug("Applying %s gate to qubits %s", name, list(qubits))
        try:
            if not 1 <= len(qubits) <= sv.MAX_GATE_ARITY:
                raise UnsupportedArityError(len(qubits), sv.MAX_GATE_ARITY)
            matrix = matrix_for(
                name, parameters, dtype=self.config.dtype, device=self.config.device
            )
            self.apply_matrix(matrix, qubits)
        except (QStepError, ValueError) as exc:
            logger.error("Error applying %s gate to %s: %s", name, list(qubits), exc)
            raise

    def apply_matrix(self, matrix: torch.Tensor, qubits: Sequence[int]) -> None:
        """Apply an explicit ``2^k x 2^k`` matrix to ``k`` qubits, then renormalize."""
        updated = sv.normalize(sv.apply_matrix(self._state, matrix, qubits))
        if is_debug_enabled():
            assert_normalized(updated, atol=self.config.norm_tolerance)
        self._commit(updated)

    def apply_oracle(
        self,
        qubits: Optional[Sequence[int]] = None,
        marked_states: Optional[int | Sequence[int]] = None,
    ) -> None:
        """
        Phase-flip marked basis states.

        ``marked_states`` is a basis index or a list of them; it defaults to
        the all-ones index for ``len(qubits)`` qubits. No renormalization is
        needed since the flip preserves total probability.

        Raises
        ------
        IndexOutOfRangeError
            If a qubit is not in the register or a marked index is outside
            the statevector.
        """
        if qubits is None:
            qubits = list(range(self._num_qubits))
        else:
            qubits = sv.check_qubits(qubits, self._num_qubits)
        if marked_states is None:
            marked = [(1 << len(qubits)) - 1]
        elif isinstance(marked_states, int):
            marked = [marked_states]
        else:
            marked = [int(m) for m in marked_states]
        self._commit(sv.phase_flip(self._state, marked))
        logger.debug(
            "Oracle applied, marked states: %s",
            ", ".join(f"|{sv.basis_label(m, len(qubits))}⟩" for m in marked),
        )

    apply_grover_oracle = apply_oracle

    def apply_diffusion(self, qubits: Optional[Sequence[int]] = None) -> None:
        """Grover inversion about the mean on ``qubits``, recorded as one snapshot."""
        qubits = list(range(self._num_qubits)) if qubits is None else list(qubits)
        with self.grouped():
            for q in qubits:
                self.apply_gate(GateName.H, [q])
            for q in qubits:
                self.apply_gate(GateName.X, [q])
            if len(qubits) == 1:
                self.apply_gate(GateName.Z, qubits)
            elif len(qubits) == 2:
                self.apply_gate(GateName.CZ, qubits)
            elif len(qubits) == 3:
                self.apply_gate(GateName.CCZ, qubits)
            else:
                self._commit(sv.flip_all_ones(self._state, qubits))
            for q in qubits:
                self.apply_gate(GateName.X, [q])
            for q in qubits:
                self.apply_gate(GateName.H, [q])
        logger.debug("Diffusion operator applied to qubits %s", qubits)

    def measure(
        self,
        qubits: Optional[Sequence[int]] = None,
        store_classical: bool = False,
    ) -> MeasurementResult:
        """
        Sample a basis state, collapse onto it and record a snapshot.

        With ``store_classical`` the measured qubits' bits are written into the
        classical register at their qubit positions.
        """
        collapsed, result = self.sampler.measure(
            self._state, self._classical_bits, qubits, store_classical
        )
        if collapsed is not None:
            self._classical_bits = list(result.classical_bits)
            self._commit(collapsed)
        return result

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_state(self) -> torch.Tensor:
        """Copy of the raw amplitude vector."""
        return self._state.clone()

    def get_state_vector(self) -> List[Amplitude]:
        """Amplitudes with magnitude and phase."""
        amplitudes = []
        for value in self._state.tolist():
            amplitudes.append(
                Amplitude(
                    real=value.real,
                    imag=value.imag,
                    magnitude=cm.magnitude(value),
                    phase=cm.phase(value),
                )
            )
        return amplitudes

    def get_probabilities(self) -> torch.Tensor:
        """``|a_i|^2`` for every basis index."""
        return sv.probabilities(self._state)

    def get_qubit_probability(self, qubit: int, value: int) -> float:
        """Probability that measuring ``qubit`` reads ``value``."""
        return sv.marginal_probability(self._state, qubit, value)

    def get_bloch_vector(self, qubit_index: int = 0) -> BlochVector:
        """
        Bloch vector of one qubit.

        A single-qubit register is read directly from its two amplitudes;
        larger registers go through the reduced density matrix.

        Raises
        ------
        IndexOutOfRangeError
            If ``qubit_index`` is not a qubit of the register.
        """
        if not 0 <= qubit_index < self._num_qubits:
            raise IndexOutOfRangeError(
                f"qubit index {qubit_index} out of range [0, {self._num_qubits})"
            )
        if self._num_qubits == 1:
            return BlochVector(*bloch_vector(self._state))
        rho = reduced_density_matrix(self._state, qubit_index)
        return BlochVector(*bloch_from_density(rho))

    def get_current_state_name(self) -> str:
        """Binary label of the most probable basis state (lowest index on ties)."""
        probs = self.get_probabilities().tolist()
        best = 0
        for index, p in enumerate(probs):
            if p > probs[best]:
                best = index
        return sv.basis_label(best, self._num_qubits)

    def get_classical_bits(self) -> List[int]:
        return list(self._classical_bits)

    def get_history(self) -> List[torch.Tensor]:
        """Copies of every recorded snapshot, oldest first."""
        return self.history.states()

    def get_current_step(self) -> int:
        return self.history.cursor

    def format_state(self, threshold: float = 1e-3) -> str:
        """Readable superposition, e.g. ``0.707|00⟩ + 0.707|11⟩``."""
        terms = []
        for index, value in enumerate(self._state.tolist()):
            if cm.magnitude(value) ** 2 <= threshold:
                continue
            if abs(value.imag) < 5e-4:
                coefficient = f"{value.real:.3f}"
            else:
                coefficient = f"({value.real:.3f}{value.imag:+.3f}i)"
            terms.append(f"{coefficient}|{sv.basis_label(index, self._num_qubits)}⟩")
        return " + ".join(terms) if terms else "0"

    # ------------------------------------------------------------------
    # History navigation
    # ------------------------------------------------------------------

    def _restore(self) -> None:
        self._state = self.history.current()

    def step_backward(self) -> bool:
        """Restore the previous snapshot; False at the first one."""
        moved = self.history.step_backward()
        if moved:
            self._restore()
        return moved

    def step_forward(self) -> bool:
        """Restore the next snapshot; False at the last one."""
        moved = self.history.step_forward()
        if moved:
            self._restore()
        return moved

    def step_to(self, index: int) -> bool:
        """Restore snapshot ``index``; False if it does not exist."""
        moved = self.history.step_to(index)
        if moved:
            self._restore()
        return moved

    def __repr__(self) -> str:
        return (
            f"QuantumEngine(num_qubits={self._num_qubits}, "
            f"step={self.history.cursor}/{len(self.history) - 1})"
        )


__all__ = ["Amplitude", "BlochVector", "QuantumEngine"]
