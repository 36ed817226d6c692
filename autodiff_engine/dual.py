# autodiff_engine/dual.py
# Forward-mode dual numbers (independent from the tape / reverse engine)

import numbers
import numpy as np
from typing import List, Sequence

from .core.config import check_divisor, get_config, resolve_exponent
from .core.errors import DimensionMismatch, UnsupportedOperator


class DualNumber:
    """
    Value paired with a derivative channel:
        d = value + tangent * eps,   eps^2 = 0

    Subclasses pick the tangent type (a float for ScalarDual, an N-vector for
    VectorDual). All arithmetic is written once here against the tangent, so
    the same product / quotient / power rules serve both kinds.
    Instances are immutable.
    """
    __slots__ = ("value", "_tangent")

    # Make numpy scalars on the left defer to our reflected operators
    __array_ufunc__ = None

    def __setattr__(self, name, val):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def _init(self, value, tangent):
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "_tangent", tangent)

    # --- hooks implemented by the concrete kinds ---
    def _new(self, value, tangent):
        raise NotImplementedError

    def _lift(self, c):
        """Treat a bare scalar as a dual with zero derivative."""
        raise NotImplementedError

    def _check_compatible(self, other):
        pass

    def _coerce(self, other):
        if isinstance(other, DualNumber):
            if type(other) is not type(self):
                raise TypeError(
                    f"cannot combine {type(self).__name__} with {type(other).__name__}"
                )
            self._check_compatible(other)
            return other
        if isinstance(other, numbers.Real):
            return self._lift(other)
        return None

    # --- arithmetic rules ---
    @staticmethod
    def _add(f, g):
        return f._new(f.value + g.value, f._tangent + g._tangent)

    @staticmethod
    def _sub(f, g):
        return f._new(f.value - g.value, f._tangent - g._tangent)

    @staticmethod
    def _mul(f, g):
        # product rule
        return f._new(f.value * g.value, f.value * g._tangent + f._tangent * g.value)

    @staticmethod
    def _div(f, g):
        check_divisor(g.value)
        with np.errstate(divide="ignore", invalid="ignore"):
            gv = np.float64(g.value)
            value = np.float64(f.value) / gv
            tangent = (f._tangent * gv - f.value * g._tangent) / (gv * gv)
        return f._new(value, tangent)

    def __add__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._add(self, o)

    def __radd__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._add(o, self)

    def __sub__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._sub(self, o)

    def __rsub__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._sub(o, self)

    def __mul__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._mul(self, o)

    def __rmul__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._mul(o, self)

    def __truediv__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._div(self, o)

    def __rtruediv__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._div(o, self)

    def __pow__(self, n):
        """
        f ** n for integer n, straight from the product rule:
            (f^n)' = n * f^(n-1) * f'
        """
        if isinstance(n, DualNumber):
            raise UnsupportedOperator("pow: dual-valued exponents are not supported")
        p = resolve_exponent(n)
        if p < 0:
            return self._div(self._lift(1.0), self ** (-p))
        if p == 0:
            return self._lift(1.0)
        return self._new(self.value ** p, p * self.value ** (p - 1) * self._tangent)

    def __rpow__(self, other):
        raise UnsupportedOperator("pow: dual-valued exponents are not supported")

    def __neg__(self):
        return self._new(-self.value, -self._tangent)

    def __pos__(self):
        return self


class ScalarDual(DualNumber):
    """
    Forward-mode value + single directional derivative.

    Example
    -------
    x = seed_scalar(2.0)
    y = x * x + 2 * x         # ScalarDual(8.0, 6.0)
    """
    __slots__ = ()

    def __init__(self, value, derivative=0.0):
        self._init(float(value), float(derivative))

    @property
    def derivative(self) -> float:
        return self._tangent

    def _new(self, value, tangent):
        return ScalarDual(value, tangent)

    def _lift(self, c):
        return ScalarDual(c, 0.0)

    def __eq__(self, other):
        if not isinstance(other, ScalarDual):
            return NotImplemented
        return self.value == other.value and self._tangent == other._tangent

    def __hash__(self):
        return hash((ScalarDual, self.value, self._tangent))

    def __repr__(self):
        return f"ScalarDual({self.value!r}, {self._tangent!r})"


class VectorDual(DualNumber):
    """
    Forward-mode value + gradient w.r.t. N independent variables.

    Seeding variable i of N with a one-hot gradient and evaluating an
    expression once yields the full row of partials of that expression in
    `.gradient`. All operands of one expression must share N.
    """
    __slots__ = ()

    def __init__(self, value, gradient):
        g = np.array(gradient, dtype=np.float64)
        if g.ndim != 1:
            raise ValueError(f"VectorDual gradient must be 1-D, got shape {g.shape}")
        if g.size == 0:
            raise ValueError("VectorDual gradient needs at least one partial")
        g.setflags(write=False)
        self._init(float(value), g)

    @property
    def gradient(self) -> np.ndarray:
        return self._tangent

    @property
    def n(self) -> int:
        return self._tangent.shape[0]

    def _new(self, value, tangent):
        return VectorDual(value, tangent)

    def _lift(self, c):
        return VectorDual(c, np.zeros(self.n))

    def _check_compatible(self, other):
        if other.n != self.n:
            raise DimensionMismatch(
                f"VectorDual operands carry {self.n} and {other.n} partials"
            )

    def __eq__(self, other):
        if not isinstance(other, VectorDual):
            return NotImplemented
        return self.value == other.value and np.array_equal(self._tangent, other._tangent)

    def __hash__(self):
        return hash((VectorDual, self.value, tuple(self._tangent.tolist())))

    def __repr__(self):
        return f"VectorDual({self.value!r}, {self._tangent.tolist()!r})"


# ----- Seeding -----
def seed_scalar(value, active: bool = True) -> ScalarDual:
    """Dual for an input: derivative 1 for the differentiated variable, 0 otherwise."""
    return ScalarDual(value, 1.0 if active else 0.0)


def seed_vector(value, index: int, n: int) -> VectorDual:
    """Dual for independent variable `index` out of `n`, with a one-hot gradient."""
    if n < 1:
        raise ValueError(f"seed_vector: n must be positive, got {n}")
    if not 0 <= index < n:
        raise ValueError(f"seed_vector: index {index} out of range for n={n}")
    g = np.zeros(n)
    g[index] = 1.0
    return VectorDual(value, g)


def seed_vectors(values: Sequence[float]) -> List[VectorDual]:
    """Seed every entry of `values` as its own independent variable."""
    n = len(values)
    return [seed_vector(v, i, n) for i, v in enumerate(values)]


# ----- Elementary functions -----
def _apply(x, f, df):
    if isinstance(x, DualNumber):
        with np.errstate(divide="ignore", invalid="ignore"):
            return x._new(float(f(x.value)), float(df(x.value)) * x._tangent)
    return f(x)


def dsin(x):
    """Sine: (sin f)' = cos(f) * f'."""
    return _apply(x, np.sin, np.cos)


def dcos(x):
    """Cosine: (cos f)' = -sin(f) * f'."""
    return _apply(x, np.cos, lambda v: -np.sin(v))


def dexp(x):
    """Exponential: (exp f)' = exp(f) * f'."""
    return _apply(x, np.exp, np.exp)


def dlog(x):
    """Natural logarithm: (log f)' = f' / f."""
    v = x.value if isinstance(x, DualNumber) else x
    if v <= 0 and get_config().strict_division:
        raise ValueError(f"log: argument must be positive, got {v!r}")
    return _apply(x, np.log, lambda u: 1.0 / np.float64(u))


def dsqrt(x):
    """Square root: (sqrt f)' = f' / (2 sqrt(f))."""
    v = x.value if isinstance(x, DualNumber) else x
    if get_config().strict_division:
        if v < 0:
            raise ValueError(f"sqrt: argument must be non-negative, got {v!r}")
        if isinstance(x, DualNumber):
            check_divisor(v, "sqrt")
    return _apply(x, np.sqrt, lambda u: 0.5 / np.sqrt(np.float64(u)))


# Alias names for convenience
sin = dsin
cos = dcos
exp = dexp
log = dlog
sqrt = dsqrt
