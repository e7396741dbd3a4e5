"""Algorithm steps and the interpreter that plays them on an engine."""

from .interpreter import AlgorithmStepInterpreter
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
    StepType,
    parse_step,
    parse_steps,
)

__all__ = [
    "AlgorithmStepInterpreter",
    "Step",
    "StepType",
    "GateStep",
    "OracleStep",
    "DeutschOracleStep",
    "DiffusionStep",
    "ControlledPhaseStep",
    "ConditionalGateStep",
    "QFTStep",
    "MeasureStep",
    "parse_step",
    "parse_steps",
]
