# autodiff_engine/ops/__init__.py

# Convenience re-exports so users can do: from autodiff_engine.ops import mul, sin, ...
from .arithmetic import add, sub, mul, div, neg, pow
from .transcendental import sin, cos, exp, log, sqrt
from .special import erf, norm_cdf

__all__ = [
    "add", "sub", "mul", "div", "neg", "pow",
    "sin", "cos", "exp", "log", "sqrt",
    "erf", "norm_cdf",
]
