# autodiff_engine/core/var.py
from __future__ import annotations
from typing import Optional, Tuple

from .errors import TapeMismatch


class Variable:
    """
    Reverse-mode computation node ("Variable"): a handle onto one arena slot
    of a Tape.

    Attributes
    ----------
    tape  : Tape
        The arena holding this node's record.
    index : int
        Position of the record on the tape.
    generation : int
        Tape generation the handle belongs to; a `Tape.reset()` makes the
        handle stale.

    The record itself (value, parents, local rules) is immutable, so a node
    can be shared as a parent by any number of children. Hashing and equality
    are by identity: there is one handle per slot, and two nodes carrying
    equal values are different nodes.
    """
    __slots__ = ("tape", "index", "generation")

    # Make numpy scalars on the left defer to our reflected operators
    __array_ufunc__ = None

    def __init__(self, tape, index: int, generation: int = 0):
        self.tape = tape
        self.index = index
        self.generation = generation

    @property
    def _node(self):
        if self.generation != self.tape.generation:
            raise TapeMismatch(f"node {self.index} was recorded before its tape was reset")
        return self.tape.node(self.index)

    @property
    def value(self) -> float:
        """Forward (primal) value."""
        return self._node.value

    @property
    def op_tag(self) -> str:
        return self._node.op_tag

    @property
    def name(self) -> Optional[str]:
        return self._node.name

    @property
    def parents(self) -> Tuple["Variable", ...]:
        return tuple(self.tape.variable(i) for i in self._node.parents)

    @property
    def rules(self):
        return self._node.rules

    @property
    def is_leaf(self) -> bool:
        return self._node.is_leaf

    def __repr__(self):
        node = self._node
        label = f", name={node.name!r}" if node.name else ""
        return f"Variable({node.value!r}, op={node.op_tag!r}, index={self.index}{label})"

    def __float__(self):
        return float(self.value)

    # Operator overloading for arithmetic operations
    def __add__(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    def __radd__(self, other):
        from ..ops.arithmetic import add
        return add(other, self)

    def __sub__(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    def __rsub__(self, other):
        from ..ops.arithmetic import sub
        return sub(other, self)

    def __mul__(self, other):
        from ..ops.arithmetic import mul
        return mul(self, other)

    def __rmul__(self, other):
        from ..ops.arithmetic import mul
        return mul(other, self)

    def __truediv__(self, other):
        from ..ops.arithmetic import div
        return div(self, other)

    def __rtruediv__(self, other):
        from ..ops.arithmetic import div
        return div(other, self)

    def __neg__(self):
        from ..ops.arithmetic import neg
        return neg(self)

    def __pos__(self):
        return self

    def __pow__(self, other):
        from ..ops.arithmetic import pow
        return pow(self, other)

    def __rpow__(self, other):
        from ..ops.arithmetic import pow
        return pow(other, self)
