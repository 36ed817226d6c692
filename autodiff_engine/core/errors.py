# autodiff_engine/core/errors.py
"""
Error kinds raised by the AD engine.

All errors are raised synchronously at the point of failure and are never
recovered internally: a failing operator or traversal returns no result.
"""


class ADError(Exception):
    """Base class for every error raised by autodiff_engine."""


class DivisionByZero(ADError, ZeroDivisionError):
    """A divisor's value is exactly zero (strict division policy)."""


class DimensionMismatch(ADError, ValueError):
    """VectorDual operands carry gradients of different length."""


class UnsupportedOperator(ADError, TypeError):
    """Exponent or operator outside the supported set (e.g. x ** -2, x ** 0.5)."""


class CyclicGraphDetected(ADError, RuntimeError):
    """A node was found reachable from itself during traversal."""


class TapeMismatch(ADError, ValueError):
    """Operands were recorded on different tapes."""
