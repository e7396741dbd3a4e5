"""Projective measurement in the computational basis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import torch

from ..backend import statevector as sv
from ..logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MeasurementResult:
    """
    Outcome of one measurement.

    Attributes
    ----------
    state:
        Binary label of the sampled basis state, qubit 0 first.
    state_index:
        Integer basis index of the outcome.
    probability:
        Probability of the outcome immediately before collapse.
    qubits:
        Qubits the caller asked to measure.
    classical_bits:
        Copy of the classical register after the measurement.
    """

    state: str
    state_index: int
    probability: float
    qubits: Tuple[int, ...]
    classical_bits: Tuple[int, ...]


class MeasurementSampler:
    """
    Inverse-CDF sampler over basis-state probabilities.

    Parameters
    ----------
    generator:
        Optional ``torch.Generator`` for reproducible draws. Without one,
        draws come from torch's global generator.
    """

    def __init__(self, generator: Optional[torch.Generator] = None) -> None:
        self.generator = generator

    def draw(self) -> float:
        """Uniform sample from ``[0, 1)``."""
        return float(torch.rand((), generator=self.generator, dtype=torch.float64))

    @staticmethod
    def select(probabilities: Sequence[float], r: float) -> Optional[int]:
        """
        First index whose cumulative probability reaches ``r``.

        Returns ``None`` if rounding keeps the cumulative sum below ``r``.
        """
        cumulative = 0.0
        for index, p in enumerate(probabilities):
            cumulative += float(p)
            if r <= cumulative:
                return index
        return None

    def measure(
        self,
        state: torch.Tensor,
        classical_bits: Sequence[int],
        qubits: Optional[Sequence[int]] = None,
        store_classical: bool = False,
    ) -> Tuple[Optional[torch.Tensor], MeasurementResult]:
        """
        Sample an outcome and collapse.

        Parameters
        ----------
        state:
            Current statevector; not modified.
        classical_bits:
            Current classical register; not modified.
        qubits:
            Qubits being measured. Defaults to every qubit.
        store_classical:
            Write the measured qubits' bits into the returned register. Bits of
            qubits not being measured keep their old values.

        Returns
        -------
        (collapsed_state, result)
            ``collapsed_state`` is the basis state of the outcome, or ``None``
            in the degenerate case where no index was selected; then the result
            reports the all-zero state with index 0 and nothing collapses.
        """
        n_qubits = sv.num_qubits_of(state)
        measured = (
            tuple(range(n_qubits)) if qubits is None
            else tuple(sv.check_qubits(qubits, n_qubits))
        )
        probs = sv.probabilities(state).tolist()
        bits: List[int] = [int(b) for b in classical_bits]

        r = self.draw()
        index = self.select(probs, r)
        if index is None:
            logger.warning(
                "Cumulative probability %.17g never reached r=%.17g; "
                "reporting |%s⟩ without collapse",
                sum(probs), r, "0" * n_qubits,
            )
            result = MeasurementResult(
                state="0" * n_qubits,
                state_index=0,
                probability=probs[0] if probs[0] > 0 else 1.0,
                qubits=measured,
                classical_bits=tuple(bits),
            )
            return None, result

        if store_classical:
            for q in measured:
                bits[q] = sv.bit_of(index, q, n_qubits)

        label = sv.basis_label(index, n_qubits)
        logger.debug("Measured qubits %s -> |%s⟩ (p=%.6f)", list(measured), label, probs[index])
        result = MeasurementResult(
            state=label,
            state_index=index,
            probability=probs[index],
            qubits=measured,
            classical_bits=tuple(bits),
        )
        return sv.collapse(state, index), result


__all__ = ["MeasurementResult", "MeasurementSampler"]
