"""Tests for logging utilities."""

import logging
from io import StringIO

from qstep.engine import QuantumEngine
from qstep.logging import (
    configure_logging,
    get_logger,
    set_log_level,
)


def test_get_logger_returns_namespaced_logger():
    """Test that get_logger returns a logger under the qstep namespace."""
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "qstep.test_module"
    assert not logger.propagate
    assert get_logger("qstep.engine").name == "qstep.engine"


def test_get_logger_caching():
    """Test that get_logger caches loggers."""
    assert get_logger("test_module") is get_logger("test_module")
    assert get_logger("module1") is not get_logger("module2")


def test_logger_output_format():
    """Test that configure_logging redirects output and keeps the format."""
    captured = StringIO()
    try:
        configure_logging(level=logging.INFO, stream=captured)
        get_logger("test_module").info("Test message")
        assert "[INFO] qstep.test_module: Test message" in captured.getvalue()
    finally:
        configure_logging(level=logging.WARNING)


def test_engine_reset_logs_at_info():
    captured = StringIO()
    try:
        configure_logging(level=logging.INFO, stream=captured)
        QuantumEngine(2)
        assert "Quantum engine reset with 2 qubits" in captured.getvalue()
    finally:
        configure_logging(level=logging.WARNING)


def test_failed_gate_logs_error():
    captured = StringIO()
    engine = QuantumEngine(1)
    try:
        configure_logging(level=logging.WARNING, stream=captured)
        try:
            engine.apply_gate("NOPE", [0])
        except ValueError:
            pass
        assert "[ERROR]" in captured.getvalue()
        assert "NOPE" in captured.getvalue()
    finally:
        configure_logging(level=logging.WARNING)


def test_set_log_level_accepts_ints_and_strings():
    """Test that set_log_level updates existing loggers."""
    logger = get_logger("test_module")
    try:
        set_log_level(logging.INFO)
        assert logger.level == logging.INFO
        set_log_level("DEBUG")
        assert logger.level == logging.DEBUG
    finally:
        set_log_level(logging.WARNING)
    assert logger.level == logging.WARNING
