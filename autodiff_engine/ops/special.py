# autodiff_engine/ops/special.py
import numpy as np
from scipy.special import erf as scipy_erf
from ..core.var import Variable
from ..core.node import LocalRule
from .arithmetic import _operand, _record

TWO_OVER_SQRT_PI = 2.0 / np.sqrt(np.pi)
SQRT_TWO = np.sqrt(2.0)


def erf(x):
    """
    Error function: erf(x) = (2/√π) ∫₀ˣ e^(-t²) dt

    Derivative: d/dx erf(x) = (2/√π) * e^(-x²)
    """
    x = _operand(x)
    if not isinstance(x, Variable):
        return scipy_erf(x)
    return _record("erf", scipy_erf(x.value),
                   [(x, LocalRule("erf", (x.index,), constant=float(TWO_OVER_SQRT_PI)))])


def norm_cdf(x):
    """Standard normal CDF, N(x) = 0.5 * (1 + erf(x / √2)), composed from recorded ops."""
    return 0.5 * (1.0 + erf(x / SQRT_TWO))
