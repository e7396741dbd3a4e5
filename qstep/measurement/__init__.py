"""Computational-basis measurement."""

from .sampling import MeasurementResult, MeasurementSampler

__all__ = ["MeasurementResult", "MeasurementSampler"]
