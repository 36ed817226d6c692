# autodiff_engine/ops/arithmetic.py
import numbers
import numpy as np
from ..core.var import Variable
from ..core.node import LocalRule
from ..core.config import check_divisor, resolve_exponent
from ..core.errors import UnsupportedOperator
from ..core.logger import get_logger

logger = get_logger(__name__)


def _operand(x):
    """Pass Variables through; turn plain numbers into float64 constants."""
    if isinstance(x, Variable):
        return x
    if isinstance(x, numbers.Real):
        return np.float64(x)
    raise TypeError(f"unsupported operand type for graph op: {type(x).__name__}")


def _val(x):
    return x.value if isinstance(x, Variable) else x


def _record(tag, value, pairs):
    """
    Record a node whose parents/local rules are given as (Variable, LocalRule)
    pairs. Plain-number operands never appear in `pairs`.
    """
    if not pairs:
        raise TypeError(f"{tag}: at least one operand must be a Variable")
    tape = pairs[0][0].tape
    return tape.push_node(
        op_tag=tag, value=np.float64(value),
        parents=[p for p, _ in pairs], rules=[r for _, r in pairs],
    )


def _divide(a, b, tag):
    check_divisor(b, tag)
    if b == 0:
        logger.debug("%s: IEEE division by zero (%r / %r)", tag, a, b)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.float64(a) / np.float64(b)


def add(x, y):
    x, y = _operand(x), _operand(y)
    pairs = []
    if isinstance(x, Variable):
        pairs.append((x, LocalRule("identity")))
    if isinstance(y, Variable):
        pairs.append((y, LocalRule("identity")))
    return _record("add", _val(x) + _val(y), pairs)


def sub(x, y):
    x, y = _operand(x), _operand(y)
    pairs = []
    if isinstance(x, Variable):
        pairs.append((x, LocalRule("identity")))
    if isinstance(y, Variable):
        pairs.append((y, LocalRule("scale", constant=-1.0)))
    return _record("sub", _val(x) - _val(y), pairs)


def mul(x, y):
    """
    Product. Two graph operands give the product rule (each parent's partial
    is the other operand); a plain-number factor c gives a scalar multiply
    whose only partial is c.
    """
    x, y = _operand(x), _operand(y)
    xv, yv = _val(x), _val(y)
    if isinstance(x, Variable) and isinstance(y, Variable):
        return _record("mul", xv * yv, [(x, LocalRule("mul", (y.index,))),
                                        (y, LocalRule("mul", (x.index,)))])
    if isinstance(x, Variable):
        return _record("smul", xv * yv, [(x, LocalRule("scale", constant=float(yv)))])
    return _record("smul", xv * yv, [(y, LocalRule("scale", constant=float(xv)))])


def div(x, y):
    """
    Quotient x / y:
      ∂/∂x = 1/y
      ∂/∂y = -x / y^2
    A divisor of exactly zero raises DivisionByZero unless the config asks for
    IEEE semantics.
    """
    x, y = _operand(x), _operand(y)
    xv, yv = _val(x), _val(y)
    out = _divide(xv, yv, "div")
    if isinstance(x, Variable) and isinstance(y, Variable):
        return _record("div", out, [(x, LocalRule("div_num", (y.index,))),
                                    (y, LocalRule("div_den", (x.index, y.index)))])
    if isinstance(x, Variable):
        return _record("div", out, [(x, LocalRule("scale", constant=float(_divide(1.0, yv, "div"))))])
    return _record("div", out, [(y, LocalRule("rdiv", (y.index,), constant=float(xv)))])


def neg(x):
    x = _operand(x)
    if not isinstance(x, Variable):
        return -x
    return _record("neg", -x.value, [(x, LocalRule("scale", constant=-1.0))])


def pow(x, p):
    """
    Integer power x ** p, differentiated by the product rule:
      ∂/∂x = p * x^(p-1)
    p == 0 gives a constant node; p < 0 is 1 / x^|p| when negative powers are
    enabled. Graph-valued exponents are not supported.
    """
    if isinstance(p, Variable) or not isinstance(x, Variable):
        raise UnsupportedOperator("pow: only Variable ** integer is supported")
    n = resolve_exponent(p)
    if n < 0:
        return div(1.0, pow(x, -n))
    if n == 0:
        return x.tape.push_node(op_tag="const", value=np.float64(1.0))
    return _record("pow", x.value ** n, [(x, LocalRule("pow", (x.index,), constant=float(n)))])
