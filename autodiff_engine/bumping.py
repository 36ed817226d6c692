"""
Finite-difference (bumping) estimates used to cross-check the AD results.

Formulas:
    f'(x)      ≈ [f(x+ε) - f(x-ε)] / (2ε)
    ∂f/∂x_i    ≈ [f(x + ε e_i) - f(x - ε e_i)] / (2ε)

Each derivative costs two function evaluations; the truncation error is O(ε²).
"""

import numpy as np
from typing import Callable, Sequence


def central_difference(f: Callable[[float], float], x: float, eps: float = 1e-5) -> float:
    """Central-difference estimate of f'(x)."""
    if eps <= 0:
        raise ValueError(f"eps must be positive, got {eps}")
    return (f(x + eps) - f(x - eps)) / (2 * eps)


def central_gradient(f: Callable[[np.ndarray], float], point: Sequence[float],
                     eps: float = 1e-5) -> np.ndarray:
    """Central-difference gradient of a scalar function of a vector argument."""
    if eps <= 0:
        raise ValueError(f"eps must be positive, got {eps}")
    x = np.asarray(point, dtype=np.float64)
    grad = np.zeros_like(x)
    for i in range(x.size):
        bump = np.zeros_like(x)
        bump[i] = eps
        grad[i] = (f(x + bump) - f(x - bump)) / (2 * eps)
    return grad


def max_abs_error(ad_value, fd_value) -> float:
    """Largest absolute deviation between an AD result and its bumped estimate."""
    return float(np.max(np.abs(np.asarray(ad_value, dtype=np.float64)
                               - np.asarray(fd_value, dtype=np.float64))))
