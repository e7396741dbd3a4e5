"""Scalar complex-number arithmetic."""

from .core import (
    Number,
    add,
    conjugate,
    divide,
    exp,
    from_polar,
    log,
    magnitude,
    multiply,
    phase,
    power,
    subtract,
)

__all__ = [
    "Number",
    "add",
    "subtract",
    "multiply",
    "divide",
    "conjugate",
    "magnitude",
    "phase",
    "from_polar",
    "exp",
    "log",
    "power",
]
