# autodiff_engine/core/node.py
from dataclasses import dataclass
from typing import Optional, Tuple

# Rule kinds understood by engine._apply_local_rule
RULE_KINDS = (
    "identity",   # upstream
    "scale",      # upstream * constant
    "mul",        # upstream * operands[0]
    "pow",        # upstream * constant * operands[0] ** (constant - 1)
    "cos",        # upstream * cos(operands[0])
    "neg_sin",    # upstream * (-1) * sin(operands[0])
    "div_num",    # upstream / operands[0]
    "div_den",    # -(upstream * operands[0]) / (operands[1] * operands[1])
    "rdiv",       # upstream * (-constant) / (operands[0] * operands[0])
    "exp",        # upstream * exp(operands[0])
    "log",        # upstream / operands[0]
    "sqrt",       # upstream * 0.5 / sqrt(operands[0])
    "erf",        # upstream * constant * exp(-(operands[0] * operands[0]))
)


@dataclass(frozen=True)
class LocalRule:
    """
    Partial derivative of a node with respect to one of its parents, kept as
    a tagged record instead of a closure so the graph stays inspectable.

    Attributes
    ----------
    kind     : str
        One of RULE_KINDS.
    operands : Tuple[int, ...]
        Tape indices of the nodes the rule refers to (e.g. the other factor of
        a product).
    constant : float
        Numeric factor used by "scale", "pow", "rdiv" and "erf".
    """
    kind: str
    operands: Tuple[int, ...] = ()
    constant: float = 1.0

    def __post_init__(self):
        if self.kind not in RULE_KINDS:
            raise ValueError(f"unknown local rule kind {self.kind!r}")


@dataclass(frozen=True)
class Node:
    """
    One arena slot on the tape, produced by a leaf or a primitive operation.

    Attributes
    ----------
    op_tag  : str
        Debug tag ("leaf", "const", "add", "mul", ...).
    value   : float
        Forward (primal) value.
    parents : Tuple[int, ...]
        Tape indices of the operand nodes, in operand order.
    rules   : Tuple[LocalRule, ...]
        rules[i] is d(this node)/d(parents[i]).
    name    : Optional[str]
        Optional debug name.
    strict_division : bool
        Division policy active when the node was recorded; its division,
        log and sqrt rules are applied under the same policy.
    """
    op_tag: str
    value: float
    parents: Tuple[int, ...] = ()
    rules: Tuple[LocalRule, ...] = ()
    name: Optional[str] = None
    strict_division: bool = True

    def __post_init__(self):
        if len(self.parents) != len(self.rules):
            raise ValueError(
                f"node {self.op_tag!r} has {len(self.parents)} parents "
                f"but {len(self.rules)} local rules"
            )

    @property
    def is_leaf(self) -> bool:
        return not self.parents
