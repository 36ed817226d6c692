# autodiff_engine/core/seeds.py

#-----------------------------------------------------------------------------
# Leaves are where gradients end up: we create the inputs here, "plant" a seed
# (dy/dy = 1) at the scalar output and let gradients grow backwards.
#-----------------------------------------------------------------------------
from __future__ import annotations
import numbers
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from .var import Variable
from .tape import Tape, current_tape, use_tape
from .engine import differentiate


def leaf(value, name: Optional[str] = None, *, tape: Optional[Tape] = None) -> Variable:
    """Independent input variable on `tape` (default: the active tape)."""
    if not isinstance(value, numbers.Real):
        raise TypeError(f"leaf only accepts real numbers, but got {type(value)}")
    tape = tape if tape is not None else current_tape()
    return tape.push_node(op_tag="leaf", value=np.float64(value), name=name)


def constant(value, *, tape: Optional[Tape] = None) -> Variable:
    """Materialised constant node; differentiating through it yields nothing."""
    if not isinstance(value, numbers.Real):
        raise TypeError(f"constant only accepts real numbers, but got {type(value)}")
    tape = tape if tape is not None else current_tape()
    return tape.push_node(op_tag="const", value=np.float64(value))


def value(x: Any) -> Any:
    """Return the numeric value of a Variable; pass through plain numbers unchanged."""
    return x.value if isinstance(x, Variable) else x


def _partials(y: Any, xs: Sequence[Variable]) -> List[float]:
    if not isinstance(y, Variable):
        # f did not touch its inputs: every partial is zero
        return [0.0 for _ in xs]
    grads = differentiate(y)
    return [float(grads[x].value) if x in grads else 0.0 for x in xs]


# ----------------------------- single-input grad ----------------------------- #
def grad(f: Callable[[Variable], Any], x0: float) -> float:
    """
    Derivative of a scalar function y=f(x) at x0 (single input).
    Runs one reverse pass within a fresh, isolated tape.
    """
    with use_tape():
        x = leaf(x0, name="x")
        return _partials(f(x), [x])[0]


# ----------------------------- multi-input grads ----------------------------- #
def grads(f: Callable[[Dict[str, Variable]], Any],
          inputs: Dict[str, float]) -> Dict[str, float]:
    """
    Gradient of a scalar-output function y=f(vars) w.r.t. ALL inputs (dict form).
    Performs ONE reverse pass to obtain all ∂y/∂var simultaneously.

    Parameters
    ----------
    f       : function taking a dict {name: Variable} and returning a Variable
    inputs  : dict {name: numeric}

    Returns
    -------
    dict {name: float}  # gradients in the same key order as `inputs`
    """
    with use_tape():
        vars_ad = {k: leaf(v, name=k) for k, v in inputs.items()}
        partials = _partials(f(vars_ad), list(vars_ad.values()))
        return dict(zip(inputs.keys(), partials))


def grads_list(f: Callable[[List[Variable]], Any],
               x0_list: Sequence[float]) -> List[float]:
    """
    Same as grads(), but the inputs are provided as a list and the result is a list
    of partials in the same order.

    Example
    -------
    f = lambda xs: xs[0]*xs[0] + 3*xs[1]
    grads_list(f, [2.0, 4.0]) -> [4.0, 3.0]
    """
    with use_tape():
        xs = [leaf(v, name=f"x{i}") for i, v in enumerate(x0_list)]
        return _partials(f(xs), xs)


# ----------------------------- forward mode ----------------------------- #
def derivative(f: Callable, x0: float) -> float:
    """df/dx at x0 from one ScalarDual evaluation."""
    from ..dual import ScalarDual, seed_scalar
    y = f(seed_scalar(x0))
    return y.derivative if isinstance(y, ScalarDual) else 0.0


def forward_jacobian(funcs: Sequence[Callable], point: Sequence[float]) -> np.ndarray:
    """
    Jacobian of the functions `funcs` (each taking a list of inputs) at `point`.

    Each row comes from one VectorDual evaluation seeded with one-hot
    gradients, so the cost is len(funcs) passes regardless of len(point).
    """
    from ..dual import VectorDual, seed_vectors
    n = len(point)
    rows = []
    for fn in funcs:
        y = fn(seed_vectors(point))
        rows.append(y.gradient if isinstance(y, VectorDual) else np.zeros(n))
    return np.array(rows, dtype=np.float64).reshape(len(funcs), n)
