# autodiff_engine/core/config.py
"""
Runtime configuration for the AD engine.

Two policy switches are exposed:

    strict_division       : True  -> dividing by an exact zero raises DivisionByZero
                            False -> IEEE semantics (inf / nan in value and derivative)
    allow_negative_powers : False -> x ** -n raises UnsupportedOperator
                            True  -> x ** -n is evaluated as 1 / x ** n

The active config is per thread. Use `use_config(...)` to override it
temporarily, the same way `use_tape()` switches the active tape.
"""
from __future__ import annotations

import numbers
import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Optional

from .errors import DivisionByZero, UnsupportedOperator

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be one of {_TRUE + _FALSE}, got {raw!r}")


@dataclass(frozen=True)
class ADConfig:
    """Policy switches shared by the dual types and the reverse-mode operators."""
    strict_division: bool = True
    allow_negative_powers: bool = False

    @classmethod
    def from_env(cls) -> "ADConfig":
        """
        Build a config from environment variables:
            AUTODIFF_STRICT_DIVISION       (default "1")
            AUTODIFF_ALLOW_NEGATIVE_POWERS (default "0")
        """
        return cls(
            strict_division=_env_flag("AUTODIFF_STRICT_DIVISION", True),
            allow_negative_powers=_env_flag("AUTODIFF_ALLOW_NEGATIVE_POWERS", False),
        )


# Process-wide default; threads without an override read this one.
default_config = ADConfig.from_env()

_local = threading.local()


def get_config() -> ADConfig:
    """Return the config active on the calling thread."""
    return getattr(_local, "config", None) or default_config


@contextmanager
def use_config(config: Optional[ADConfig] = None, **overrides):
    """
    Temporarily switch the active config on the calling thread:

        with use_config(strict_division=False):
            y = x / 0.0        # -> inf instead of DivisionByZero
    """
    prev = getattr(_local, "config", None)
    base = config or get_config()
    try:
        _local.config = replace(base, **overrides) if overrides else base
        yield _local.config
    finally:
        _local.config = prev


# ---------------- policy helpers shared by dual and graph operators ---------------- #
def check_divisor(divisor, op_tag: str = "div") -> None:
    """Raise DivisionByZero for an exact-zero divisor under the strict policy."""
    if divisor == 0 and get_config().strict_division:
        raise DivisionByZero(f"{op_tag}: division by a value of exactly zero")


def resolve_exponent(n, op_tag: str = "pow") -> int:
    """
    Validate a power exponent and return it as an int.

    Integers (and integral floats such as 3.0) are accepted. Negative
    exponents need `allow_negative_powers`; anything else is unsupported.
    """
    if isinstance(n, numbers.Integral):
        p = int(n)
    elif isinstance(n, numbers.Real) and float(n).is_integer():
        p = int(n)
    else:
        raise UnsupportedOperator(f"{op_tag}: exponent must be an integer, got {n!r}")
    if p < 0 and not get_config().allow_negative_powers:
        raise UnsupportedOperator(
            f"{op_tag}: negative exponent {p} needs ADConfig.allow_negative_powers"
        )
    return p
