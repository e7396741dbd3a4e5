"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

import torch

# Hard ceiling on register size: 2**5 amplitudes, gate matrices at most 8x8.
QUBIT_CEILING = 5

_MAX_QUBITS_ENV_VAR = "QSTEP_MAX_QUBITS"
_SEED_ENV_VAR = "QSTEP_SEED"


@dataclass(frozen=True)
class EngineConfig:
    """
    Settings for a :class:`~qstep.engine.QuantumEngine`.

    Attributes
    ----------
    max_qubits:
        Register sizes above this are clamped on reset. Cannot exceed
        ``QUBIT_CEILING``.
    dtype:
        Complex dtype of the amplitude vector and gate matrices.
    device:
        Torch device holding the amplitude vector.
    atol:
        Tolerance for normalization checks in debug mode. Widened to what
        ``dtype`` can resolve, see :attr:`norm_tolerance`.
    seed:
        Optional seed for the measurement sampler's generator. ``None`` draws
        from torch's global generator.
    """

    max_qubits: int = QUBIT_CEILING
    dtype: torch.dtype = torch.complex128
    device: str = "cpu"
    atol: float = 1e-9
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if not 1 <= self.max_qubits <= QUBIT_CEILING:
            raise ValueError(
                f"max_qubits must be in [1, {QUBIT_CEILING}], got {self.max_qubits}"
            )
        if not self.dtype.is_complex:
            raise ValueError(f"dtype must be complex, got {self.dtype}")
        if self.atol <= 0:
            raise ValueError(f"atol must be positive, got {self.atol}")

    @property
    def norm_tolerance(self) -> float:
        """``atol``, or a few dozen ulps of the real dtype if that is coarser."""
        return max(self.atol, 64 * torch.finfo(self.dtype).eps)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "EngineConfig":
        """Build a config from ``QSTEP_MAX_QUBITS`` / ``QSTEP_SEED``; keyword overrides win."""
        env = os.environ if environ is None else environ
        values: dict = {}
        if env.get(_MAX_QUBITS_ENV_VAR):
            values["max_qubits"] = int(env[_MAX_QUBITS_ENV_VAR])
        if env.get(_SEED_ENV_VAR):
            values["seed"] = int(env[_SEED_ENV_VAR])
        values.update(overrides)
        return cls(**values)

    def make_generator(self) -> Optional[torch.Generator]:
        """Seeded CPU generator for sampling, or ``None`` when unseeded."""
        if self.seed is None:
            return None
        generator = torch.Generator(device="cpu")
        generator.manual_seed(int(self.seed))
        return generator


__all__ = ["EngineConfig", "QUBIT_CEILING"]
