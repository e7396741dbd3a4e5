"""Tests for the stateful QuantumEngine."""

from __future__ import annotations

import logging
import math
from io import StringIO

import pytest
import torch

from qstep.diagnostics import debug_context
from qstep.engine import Amplitude, BlochVector, EngineConfig, QuantumEngine
from qstep.errors import (
    DimensionMismatchError,
    IndexOutOfRangeError,
    UnknownGateError,
    UnsupportedArityError,
)
from qstep.logging import configure_logging

SQRT_HALF = 1.0 / math.sqrt(2.0)


def test_reset_initializes_zero_state() -> None:
    engine = QuantumEngine(3)
    assert engine.num_qubits == 3
    assert engine.get_probabilities().tolist() == [1.0] + [0.0] * 7
    assert engine.get_classical_bits() == [0, 0, 0]
    assert len(engine.get_history()) == 1
    assert engine.get_current_step() == 0


def test_reset_clamps_to_max_qubits() -> None:
    engine = QuantumEngine(7)
    assert engine.num_qubits == 5
    small = QuantumEngine(4, config=EngineConfig(max_qubits=2))
    assert small.num_qubits == 2
    with pytest.raises(ValueError):
        engine.reset(0)


def test_reset_keeps_size_by_default() -> None:
    engine = QuantumEngine(2)
    engine.apply_gate("X", [0])
    engine.reset()
    assert engine.num_qubits == 2
    assert engine.get_current_state_name() == "00"
    assert len(engine.get_history()) == 1


def test_bell_state(engine: QuantumEngine) -> None:
    engine.apply_gate("H", [0])
    engine.apply_gate("CNOT", [0, 1])
    probs = engine.get_probabilities()
    assert probs[0].item() == pytest.approx(0.5)
    assert probs[3].item() == pytest.approx(0.5)
    assert probs[1].item() == pytest.approx(0.0)
    assert probs[2].item() == pytest.approx(0.0)
    assert engine.format_state() == "0.707|00⟩ + 0.707|11⟩"


def test_hadamard_is_self_inverse() -> None:
    engine = QuantumEngine(1)
    engine.apply_gate("H", [0])
    engine.apply_gate("H", [0])
    amps = engine.get_state_vector()
    assert amps[0].real == pytest.approx(1.0)
    assert amps[0].imag == pytest.approx(0.0)
    assert amps[1].magnitude == pytest.approx(0.0, abs=1e-12)


def test_swap_moves_excitation() -> None:
    engine = QuantumEngine(2)
    engine.apply_gate("X", [0])
    engine.apply_gate("SWAP", [0, 1])
    assert engine.get_probabilities()[1].item() == pytest.approx(1.0)


def test_toffoli_truth_table() -> None:
    engine = QuantumEngine(3)
    engine.apply_gate("X", [0])
    engine.apply_gate("X", [1])
    engine.apply_gate("CCX", [0, 1, 2])
    assert engine.get_probabilities()[7].item() == pytest.approx(1.0)

    engine.reset(3)
    engine.apply_gate("X", [0])
    engine.apply_gate("CCX", [0, 1, 2])
    assert engine.get_probabilities()[4].item() == pytest.approx(1.0)


def test_x_twice_restores_exact_state() -> None:
    engine = QuantumEngine(3)
    initial = engine.get_state()
    engine.apply_gate("X", [0])
    engine.apply_gate("X", [0])
    assert torch.equal(engine.get_state(), initial)

    engine.apply_gate("X", [2])
    excited = engine.get_state()
    engine.apply_gate("X", [0])
    engine.apply_gate("X", [0])
    assert torch.equal(engine.get_state(), excited)


def test_normalization_after_every_gate() -> None:
    engine = QuantumEngine(3)
    for name, qubits, params in [
        ("H", [0], None),
        ("RY", [1], {"angle": 0.37}),
        ("CNOT", [0, 2], None),
        ("T", [2], None),
        ("CP", [1, 2], {"angle": 1.1}),
        ("CCZ", [0, 1, 2], None),
        ("RX", [0], {"angle": -2.3}),
    ]:
        engine.apply_gate(name, qubits, params)
        assert float(engine.get_probabilities().sum()) == pytest.approx(1.0, abs=1e-10)


def test_gate_errors_leave_state_untouched() -> None:
    engine = QuantumEngine(2)
    engine.apply_gate("H", [0])
    before = engine.get_state()
    history_len = len(engine.get_history())

    with pytest.raises(UnknownGateError):
        engine.apply_gate("FOO", [0])
    with pytest.raises(UnsupportedArityError):
        engine.apply_gate("H", [])
    with pytest.raises(UnsupportedArityError):
        engine.apply_gate("H", [0, 1, 0, 1])
    with pytest.raises(DimensionMismatchError):
        engine.apply_gate("CNOT", [0])
    with pytest.raises(IndexOutOfRangeError):
        engine.apply_gate("X", [5])

    assert torch.equal(engine.get_state(), before)
    assert len(engine.get_history()) == history_len


def test_duplicate_targets_are_logged_and_raised() -> None:
    stream = StringIO()
    configure_logging(level=logging.ERROR, stream=stream)
    try:
        engine = QuantumEngine(2)
        before = engine.get_state()
        with pytest.raises(ValueError, match="distinct"):
            engine.apply_gate("CNOT", [0, 0])
        assert torch.equal(engine.get_state(), before)
        assert "Error applying CNOT gate to [0, 0]" in stream.getvalue()
    finally:
        configure_logging(level=logging.WARNING)


def test_apply_matrix_with_custom_unitary() -> None:
    engine = QuantumEngine(1)
    sqrt_x = 0.5 * torch.tensor([[1 + 1j, 1 - 1j], [1 - 1j, 1 + 1j]], dtype=torch.complex128)
    engine.apply_matrix(sqrt_x, [0])
    engine.apply_matrix(sqrt_x, [0])
    assert engine.get_probabilities()[1].item() == pytest.approx(1.0)


def test_oracle_phase_flip_defaults_to_all_ones() -> None:
    engine = QuantumEngine(2)
    engine.apply_gate("H", [0])
    engine.apply_gate("H", [1])
    engine.apply_oracle([0, 1])
    amps = engine.get_state_vector()
    assert amps[3].real == pytest.approx(-0.5)
    assert all(a.real == pytest.approx(0.5) for a in amps[:3])
    assert float(engine.get_probabilities().sum()) == pytest.approx(1.0)


def test_grover_oracle_alias_and_marked_list() -> None:
    engine = QuantumEngine(3)
    for q in range(3):
        engine.apply_gate("H", [q])
    engine.apply_grover_oracle([0, 1, 2], [1, 6])
    amps = [a.real for a in engine.get_state_vector()]
    assert [i for i, a in enumerate(amps) if a < 0] == [1, 6]


def test_oracle_flips_only_given_indices_of_full_vector() -> None:
    engine = QuantumEngine(3)
    for q in range(3):
        engine.apply_gate("H", [q])
    engine.apply_oracle([0, 1], 2)
    amps = [a.real for a in engine.get_state_vector()]
    assert [i for i, a in enumerate(amps) if a < 0] == [2]


def test_oracle_rejects_qubits_outside_register() -> None:
    engine = QuantumEngine(2)
    engine.apply_gate("H", [0])
    before = engine.get_state()
    history_len = len(engine.get_history())
    with pytest.raises(IndexOutOfRangeError):
        engine.apply_oracle([7])
    with pytest.raises(IndexOutOfRangeError):
        engine.apply_oracle([0, 1], [4])
    assert torch.equal(engine.get_state(), before)
    assert len(engine.get_history()) == history_len


def test_diffusion_amplifies_marked_state() -> None:
    engine = QuantumEngine(2)
    engine.apply_gate("H", [0])
    engine.apply_gate("H", [1])
    engine.apply_oracle([0, 1], [2])
    steps_before = len(engine.get_history())
    engine.apply_diffusion([0, 1])
    # One Grover iteration on four items finds the marked one exactly.
    assert engine.get_probabilities()[2].item() == pytest.approx(1.0)
    assert len(engine.get_history()) == steps_before + 1


def test_one_grover_cycle_on_three_qubits_amplifies_marked_state() -> None:
    engine = QuantumEngine(3)
    for q in range(3):
        engine.apply_gate("H", [q])
    prior = engine.get_probabilities()[7].item()
    assert prior == pytest.approx(0.125)
    engine.apply_oracle([0, 1, 2], [7])
    engine.apply_diffusion([0, 1, 2])
    probs = engine.get_probabilities()
    assert probs[7].item() > prior
    assert probs[7].item() == pytest.approx(25 / 32)


def test_diffusion_on_four_qubits_uses_direct_phase_flip() -> None:
    engine = QuantumEngine(4)
    for q in range(4):
        engine.apply_gate("H", [q])
    engine.apply_oracle(None, [9])
    engine.apply_diffusion()
    probs = engine.get_probabilities()
    assert int(torch.argmax(probs)) == 9
    assert float(probs.sum()) == pytest.approx(1.0)


def test_bloch_vectors() -> None:
    engine = QuantumEngine(1)
    assert engine.get_bloch_vector(0) == pytest.approx((0.0, 0.0, 1.0))
    engine.apply_gate("H", [0])
    bloch = engine.get_bloch_vector()
    assert isinstance(bloch, BlochVector)
    assert bloch.x == pytest.approx(1.0)
    assert bloch.z == pytest.approx(0.0, abs=1e-12)
    engine.apply_gate("S", [0])
    # a = 1/sqrt2, b = i/sqrt2: y = 2 Im(a * conj(b)) = -1
    assert engine.get_bloch_vector().y == pytest.approx(-1.0)


def test_bloch_vector_of_entangled_qubit_is_zero() -> None:
    engine = QuantumEngine(2)
    engine.apply_gate("H", [0])
    engine.apply_gate("CNOT", [0, 1])
    for q in (0, 1):
        assert engine.get_bloch_vector(q) == pytest.approx((0.0, 0.0, 0.0), abs=1e-12)


def test_bloch_vector_of_product_state_qubit() -> None:
    engine = QuantumEngine(3)
    engine.apply_gate("X", [2])
    engine.apply_gate("H", [1])
    assert engine.get_bloch_vector(2) == pytest.approx((0.0, 0.0, -1.0), abs=1e-12)
    assert engine.get_bloch_vector(1) == pytest.approx((1.0, 0.0, 0.0), abs=1e-12)
    with pytest.raises(IndexOutOfRangeError):
        engine.get_bloch_vector(3)
    with pytest.raises(IndexOutOfRangeError):
        engine.get_bloch_vector(-1)


def test_current_state_name_and_qubit_probability() -> None:
    engine = QuantumEngine(3)
    engine.apply_gate("X", [1])
    assert engine.get_current_state_name() == "010"
    assert engine.get_qubit_probability(1, 1) == pytest.approx(1.0)
    assert engine.get_qubit_probability(0, 1) == pytest.approx(0.0)
    engine.apply_gate("H", [0])
    # Tie between |010⟩ and |110⟩ goes to the lower index.
    assert engine.get_current_state_name() == "010"


def test_accessors_return_copies() -> None:
    engine = QuantumEngine(1)
    state = engine.get_state()
    state[0] = 0
    history = engine.get_history()
    history[0][0] = 0
    bits = engine.get_classical_bits()
    bits[0] = 1
    assert engine.get_probabilities()[0].item() == 1.0
    assert engine.get_history()[0][0] == 1
    assert engine.get_classical_bits() == [0]


def test_state_vector_amplitudes() -> None:
    engine = QuantumEngine(1)
    engine.apply_gate("H", [0])
    engine.apply_gate("S", [0])
    amps = engine.get_state_vector()
    assert isinstance(amps[1], Amplitude)
    assert amps[1].magnitude == pytest.approx(SQRT_HALF)
    assert amps[1].phase == pytest.approx(math.pi / 2)


def test_format_state_threshold() -> None:
    engine = QuantumEngine(1)
    engine.apply_gate("RY", [0], {"angle": 0.02})
    assert engine.format_state() == "1.000|0⟩"
    assert "|1⟩" in engine.format_state(threshold=0.0)


def test_grouped_records_one_snapshot() -> None:
    engine = QuantumEngine(2)
    with engine.grouped():
        engine.apply_gate("H", [0])
        engine.apply_gate("CNOT", [0, 1])
        with engine.grouped():
            engine.apply_gate("Z", [1])
    assert len(engine.get_history()) == 2
    assert torch.equal(engine.get_history()[-1], engine.get_state())


def test_grouped_without_changes_records_nothing() -> None:
    engine = QuantumEngine(2)
    with engine.grouped():
        pass
    assert len(engine.get_history()) == 1


def test_grouped_rolls_back_on_error() -> None:
    engine = QuantumEngine(2)
    engine.apply_gate("H", [0])
    before = engine.get_state()
    with pytest.raises(UnknownGateError):
        with engine.grouped():
            engine.apply_gate("X", [1])
            engine.apply_gate("NOPE", [0])
    assert torch.equal(engine.get_state(), before)
    assert len(engine.get_history()) == 2


def test_debug_mode_checks_normalization() -> None:
    engine = QuantumEngine(1)
    with debug_context(True):
        engine.apply_gate("H", [0])
    assert engine.get_bloch_vector().x == pytest.approx(1.0)


def test_debug_mode_with_single_precision() -> None:
    engine = QuantumEngine(3, config=EngineConfig(dtype=torch.complex64))
    with debug_context(True):
        engine.apply_gate("H", [0])
        engine.apply_gate("CNOT", [0, 1])
        engine.apply_gate("RY", [2], {"angle": 0.3})
    assert engine.get_state().dtype == torch.complex64
    assert float(engine.get_probabilities().sum()) == pytest.approx(1.0, abs=1e-5)


def test_seeded_engines_measure_identically() -> None:
    outcomes = []
    for _ in range(2):
        engine = QuantumEngine(3, config=EngineConfig(seed=123))
        results = []
        for _ in range(5):
            for q in range(3):
                engine.apply_gate("H", [q])
            results.append(engine.measure().state)
            engine.reset()
        outcomes.append(results)
    assert outcomes[0] == outcomes[1]


def test_repr_mentions_size() -> None:
    assert "num_qubits=2" in repr(QuantumEngine(2))
