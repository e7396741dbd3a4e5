"""Scalar complex arithmetic.

Amplitudes and matrix entries are plain Python ``complex`` values here. The
functions are pure and mirror the textbook identities, e.g.

    (a + bi)(c + di) = (ac - bd) + (ad + bc)i
"""

from __future__ import annotations

import cmath
import math

from ..errors import ComplexDivisionError

Number = complex | float | int


def add(a: Number, b: Number) -> complex:
    """Return ``a + b``."""
    a, b = complex(a), complex(b)
    return complex(a.real + b.real, a.imag + b.imag)


def subtract(a: Number, b: Number) -> complex:
    """Return ``a - b``."""
    a, b = complex(a), complex(b)
    return complex(a.real - b.real, a.imag - b.imag)


def multiply(a: Number, b: Number) -> complex:
    """Return ``a * b`` expanded component-wise."""
    a, b = complex(a), complex(b)
    return complex(
        a.real * b.real - a.imag * b.imag,
        a.real * b.imag + a.imag * b.real,
    )


def divide(a: Number, b: Number) -> complex:
    """
    Return ``a / b``.

    Raises
    ------
    ComplexDivisionError
        If ``b`` has zero magnitude.
    """
    a, b = complex(a), complex(b)
    denominator = b.real * b.real + b.imag * b.imag
    if denominator == 0:
        raise ComplexDivisionError("Division by zero in complex numbers")
    return complex(
        (a.real * b.real + a.imag * b.imag) / denominator,
        (a.imag * b.real - a.real * b.imag) / denominator,
    )


def conjugate(a: Number) -> complex:
    """Return the complex conjugate of ``a``."""
    a = complex(a)
    return complex(a.real, -a.imag)


def magnitude(a: Number) -> float:
    """Return ``sqrt(re^2 + im^2)``."""
    a = complex(a)
    return math.sqrt(a.real * a.real + a.imag * a.imag)


def phase(a: Number) -> float:
    """Return ``atan2(im, re)`` in ``(-pi, pi]``."""
    a = complex(a)
    return math.atan2(a.imag, a.real)


def from_polar(radius: float, angle: float) -> complex:
    """Build ``radius * e^{i angle}`` in rectangular form."""
    return complex(radius * math.cos(angle), radius * math.sin(angle))


def exp(a: Number) -> complex:
    """Return ``e^a``."""
    return cmath.exp(complex(a))


def log(a: Number) -> complex:
    """Return the principal natural logarithm of ``a``.

    ``log(0)`` is undefined and raises ``ValueError``.
    """
    a = complex(a)
    if a == 0:
        raise ValueError("Logarithm of zero is undefined")
    return complex(math.log(magnitude(a)), phase(a))


def power(base: Number, exponent: Number) -> complex:
    """Return ``base ** exponent`` as ``exp(exponent * log(base))``.

    A zero base yields ``1`` for a zero exponent and ``0`` otherwise.
    """
    base, exponent = complex(base), complex(exponent)
    if base == 0:
        return complex(1.0, 0.0) if exponent == 0 else complex(0.0, 0.0)
    return exp(multiply(exponent, log(base)))


__all__ = [
    "Number",
    "add",
    "conjugate",
    "divide",
    "exp",
    "from_polar",
    "log",
    "magnitude",
    "multiply",
    "phase",
    "power",
    "subtract",
]
