# autodiff_engine/core/__init__.py

"""
Core public API for the reverse-mode engine.

Exports:
    Variable        : Computation-graph node handle with overloaded operators.
    Tape            : Arena recording nodes in creation order.
    global_tape     : The default tape used when no other tape is active.
    use_tape        : Context manager to temporarily switch the active tape.
    current_tape    : The tape new leaves are recorded on.
    GradientTape    : Single reverse sweep with visit counters.
    differentiate   : Gradient map of an output w.r.t. every ancestor.
    leaf, constant  : Create input / constant nodes.
    grad, grads     : Convenience: gradients of plain Python functions.
    value           : Convenience: extract the primal value from a Variable.
"""

from .var import Variable
from .tape import Tape, global_tape, use_tape, current_tape
from .engine import GradientTape, differentiate
from .seeds import (
    leaf, constant, value, grad, grads, grads_list, derivative, forward_jacobian,
)
from .config import ADConfig, get_config, use_config
from .errors import (
    ADError, DivisionByZero, DimensionMismatch, UnsupportedOperator,
    CyclicGraphDetected, TapeMismatch,
)

__all__ = [
    "Variable",
    "Tape", "global_tape", "use_tape", "current_tape",
    "GradientTape", "differentiate",
    "leaf", "constant", "value", "grad", "grads", "grads_list",
    "derivative", "forward_jacobian",
    "ADConfig", "get_config", "use_config",
    "ADError", "DivisionByZero", "DimensionMismatch", "UnsupportedOperator",
    "CyclicGraphDetected", "TapeMismatch",
]
