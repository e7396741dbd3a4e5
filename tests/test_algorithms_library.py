"""End-to-end tests for the algorithm step lists."""

from __future__ import annotations

import math

import pytest
import torch

from qstep.algorithms import (
    Algorithm,
    bell_state,
    deutsch,
    get_algorithm,
    grover,
    list_algorithms,
    optimal_grover_iterations,
    phase_estimation,
    qft,
    single_qubit_gates,
    superdense_coding,
    teleportation,
    two_qubit_gates,
    validate_algorithm,
)
from qstep.errors import InvalidAlgorithmError
from qstep.interpreter import AlgorithmStepInterpreter, GateStep, MeasureStep, OracleStep


def _run(algorithm: Algorithm) -> AlgorithmStepInterpreter:
    interp = AlgorithmStepInterpreter(algorithm, on_error="halt")
    list(interp.run())
    return interp


@pytest.mark.parametrize("key", list_algorithms())
def test_registered_algorithms_validate_and_run(key: str) -> None:
    algorithm = get_algorithm(key)
    validate_algorithm(algorithm)
    interp = _run(algorithm)
    assert interp.is_finished
    assert float(interp.engine.get_probabilities().sum()) == pytest.approx(1.0, abs=1e-10)
    assert isinstance(algorithm.steps[-1], MeasureStep)


def test_single_qubit_gates_end_in_plus_state() -> None:
    # X, H, Z: |0⟩ -> |1⟩ -> |-⟩ -> |+⟩
    interp = _run(single_qubit_gates())
    assert interp.engine.get_bloch_vector(0).x == pytest.approx(1.0)


def test_two_qubit_and_bell_states_entangle() -> None:
    for algorithm in (two_qubit_gates(), bell_state()):
        probs = _run(algorithm).engine.get_probabilities()
        assert probs[0].item() == pytest.approx(0.5)
        assert probs[3].item() == pytest.approx(0.5)


@pytest.mark.parametrize(
    "function_type, function_value, expected",
    [("constant", 0, 0), ("constant", 1, 0), ("balanced", 0, 1), ("balanced", 1, 1)],
)
def test_deutsch_is_deterministic(function_type: str, function_value: int, expected: int) -> None:
    interp = _run(deutsch(function_type, function_value))
    assert interp.engine.get_qubit_probability(0, expected) == pytest.approx(1.0, abs=1e-10)
    result = interp.measure()
    assert result.state[0] == str(expected)


def test_optimal_grover_iterations() -> None:
    assert optimal_grover_iterations(1) == 1
    assert optimal_grover_iterations(2) == 1
    assert optimal_grover_iterations(3) == 2
    assert optimal_grover_iterations(4) == 3


def test_grover_marked_state_is_most_probable() -> None:
    algorithm = grover(3, [7])
    oracles = [s for s in algorithm.steps if isinstance(s, OracleStep)]
    assert len(oracles) == 2
    probs = _run(algorithm).engine.get_probabilities()
    assert int(torch.argmax(probs)) == 7
    assert probs[7].item() > 0.9


def test_grover_defaults_to_all_ones() -> None:
    algorithm = grover(2)
    probs = _run(algorithm).engine.get_probabilities()
    assert probs[3].item() == pytest.approx(1.0)


def test_grover_rejects_bad_arguments() -> None:
    with pytest.raises(InvalidAlgorithmError):
        grover(6)
    with pytest.raises(InvalidAlgorithmError):
        grover(2, [1], -1)
    with pytest.raises(InvalidAlgorithmError):
        validate_algorithm(grover(2, [9]))


def test_qft_of_zero_is_uniform() -> None:
    probs = _run(qft(3)).engine.get_probabilities()
    assert torch.allclose(probs, torch.full((8,), 0.125, dtype=torch.float64))


def test_qft_steps_layout() -> None:
    steps = qft(3).steps
    names = [s.gate if isinstance(s, GateStep) else s.type.value for s in steps]
    assert names == [
        "H", "controlled-phase", "controlled-phase", "H", "controlled-phase", "H", "SWAP", "measure",
    ]
    assert steps[1].angle == pytest.approx(math.pi / 2)
    assert steps[2].angle == pytest.approx(math.pi / 4)


def test_teleportation_applies_corrections_from_bits() -> None:
    interp = AlgorithmStepInterpreter(teleportation(), on_error="halt")
    interp.step_to(6)
    result = interp.measure()
    assert result.qubits == (0, 1)
    bits = interp.engine.get_classical_bits()
    assert bits[:2] == [int(result.state[0]), int(result.state[1])]
    list(interp.run())
    assert interp.is_finished
    assert float(interp.engine.get_probabilities().sum()) == pytest.approx(1.0)


@pytest.mark.parametrize("message", [(0, 0), (0, 1), (1, 0), (1, 1)])
def test_superdense_coding_decodes_message(message) -> None:
    interp = _run(superdense_coding(message))
    label = "".join(str(b) for b in message)
    assert interp.engine.get_current_state_name() == label
    assert interp.engine.get_probabilities()[int(label, 2)].item() == pytest.approx(1.0)


def test_superdense_coding_rejects_bad_message() -> None:
    with pytest.raises(InvalidAlgorithmError):
        superdense_coding((1, 2))


def test_phase_estimation_reads_exact_phase() -> None:
    interp = _run(phase_estimation(0.25, 3))
    # Counting register |010⟩ (= 2 = 0.25 * 2**3), target qubit stays |1⟩.
    assert interp.engine.get_current_state_name() == "0101"
    assert interp.engine.get_probabilities()[0b0101].item() == pytest.approx(1.0, abs=1e-10)


def test_phase_estimation_other_phase() -> None:
    interp = _run(phase_estimation(0.625, 3))
    assert interp.engine.get_current_state_name() == "1011"


def test_get_algorithm_forwards_kwargs_and_rejects_unknown() -> None:
    algorithm = get_algorithm("grovers", num_qubits=2, marked_states=[1])
    assert algorithm.num_qubits == 2
    with pytest.raises(InvalidAlgorithmError, match="Unknown algorithm"):
        get_algorithm("shor")


def test_validate_algorithm_failures() -> None:
    with pytest.raises(InvalidAlgorithmError, match="no steps"):
        validate_algorithm(Algorithm("empty", "Empty", 1, ()))
    with pytest.raises(InvalidAlgorithmError, match="outside"):
        validate_algorithm(Algorithm("wide", "Wide", 1, (GateStep(gate="X", qubits=(1,)),)))
    with pytest.raises(InvalidAlgorithmError, match="supported range"):
        validate_algorithm(Algorithm("big", "Big", 6, (GateStep(gate="X", qubits=(0,)),)))
    with pytest.raises(InvalidAlgorithmError, match="Unknown gate"):
        validate_algorithm(Algorithm("bad", "Bad", 1, (GateStep(gate="Q", qubits=(0,)),)))
