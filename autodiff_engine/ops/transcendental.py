# autodiff_engine/ops/transcendental.py
import numpy as np
from ..core.var import Variable
from ..core.node import LocalRule
from ..core.config import check_divisor, get_config
from .arithmetic import _operand, _record


def _unary(tag, x, f, rule_kind):
    """Record tag(x) with a single local rule referring back to x."""
    x = _operand(x)
    with np.errstate(divide="ignore", invalid="ignore"):
        if not isinstance(x, Variable):
            return f(x)
        return _record(tag, f(x.value), [(x, LocalRule(rule_kind, (x.index,)))])


def sin(x):
    # ∂sin(a)/∂a = cos(a)
    return _unary("sin", x, np.sin, "cos")


def cos(x):
    # ∂cos(a)/∂a = -sin(a)
    return _unary("cos", x, np.cos, "neg_sin")


def exp(x):
    return _unary("exp", x, np.exp, "exp")


def log(x):
    v = x.value if isinstance(x, Variable) else x
    if v <= 0 and get_config().strict_division:
        raise ValueError(f"log: argument must be positive, got {v!r}")
    return _unary("log", x, np.log, "log")


def sqrt(x):
    v = x.value if isinstance(x, Variable) else x
    if get_config().strict_division:
        if v < 0:
            raise ValueError(f"sqrt: argument must be non-negative, got {v!r}")
        if isinstance(x, Variable):
            # the local rule divides by sqrt(x)
            check_divisor(v, "sqrt")
    return _unary("sqrt", x, np.sqrt, "sqrt")
