"""Stateful quantum engine with snapshot history."""

from .config import QUBIT_CEILING, EngineConfig
from .engine import Amplitude, BlochVector, QuantumEngine
from .history import HistoryLedger, Snapshot

__all__ = [
    "QuantumEngine",
    "Amplitude",
    "BlochVector",
    "EngineConfig",
    "QUBIT_CEILING",
    "HistoryLedger",
    "Snapshot",
]
