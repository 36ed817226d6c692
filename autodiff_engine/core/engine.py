# autodiff_engine/core/engine.py
from __future__ import annotations
from contextlib import nullcontext
from typing import Callable, Dict, List, Optional

from .config import get_config, use_config
from .errors import CyclicGraphDetected
from .logger import get_logger
from .node import LocalRule
from .tape import Tape
from .var import Variable

logger = get_logger(__name__)

_VISITING = 1
_DONE = 2


def _topological_order(output: Variable) -> List[int]:
    """
    Tape indices of every node reachable from `output` through parent edges,
    parents before children (output last).

    Iterative depth-first search with an explicit stack, so the depth of the
    graph is not limited by the interpreter's recursion limit. A parent found
    while still on the current search path means the graph has a cycle.
    """
    tape = output.tape
    state = {output.index: _VISITING}
    stack = [(output.index, iter(output._node.parents))]
    order: List[int] = []
    while stack:
        idx, pending = stack[-1]
        for p in pending:
            s = state.get(p)
            if s is None:
                state[p] = _VISITING
                stack.append((p, iter(tape.node(p).parents)))
                break
            if s == _VISITING:
                raise CyclicGraphDetected(
                    f"node {p} ({tape.node(p).op_tag}) is reachable from itself"
                )
        else:
            stack.pop()
            state[idx] = _DONE
            order.append(idx)
    return order


def _apply_local_rule(rule: LocalRule, upstream: Variable,
                      operand: Callable[[int], Variable]) -> Variable:
    """
    Contribution flowing into a parent: upstream * (∂node/∂parent), built out of
    graph operations so the result is itself a node on the tape of `upstream`.
    `operand(k)` maps a rule operand index to a node on that same tape.

    Supported kinds
    ---------------
    identity, scale, mul, pow, cos, neg_sin, div_num, div_den, rdiv,
    exp, log, sqrt, erf
    """
    from ..ops.transcendental import cos, exp, sin, sqrt

    kind = rule.kind
    operands = [operand(k) for k in rule.operands]

    # ---------- Linear ops ----------
    if kind == "identity":
        return upstream
    if kind == "scale":
        return upstream * rule.constant

    # ---------- Product ----------
    if kind == "mul":
        # y = a * b,  ∂y/∂a = b
        return upstream * operands[0]

    # ---------- Integer power ----------
    if kind == "pow":
        # y = a^p,  ∂y/∂a = p * a^(p-1)
        p = int(rule.constant)
        if p == 1:
            return upstream * rule.constant
        return upstream * rule.constant * operands[0] ** (p - 1)

    # ---------- Trigonometric ----------
    if kind == "cos":
        return upstream * cos(operands[0])
    if kind == "neg_sin":
        return upstream * (-1.0) * sin(operands[0])

    # ---------- Division ----------
    if kind == "div_num":
        # y = a / b,  ∂y/∂a = 1/b
        return upstream / operands[0]
    if kind == "div_den":
        # y = a / b,  ∂y/∂b = -a / b^2
        a, b = operands
        return -(upstream * a) / (b * b)
    if kind == "rdiv":
        # y = c / b,  ∂y/∂b = -c / b^2
        b = operands[0]
        return upstream * (-rule.constant) / (b * b)

    # ---------- Exponential / logarithm / root ----------
    if kind == "exp":
        return upstream * exp(operands[0])
    if kind == "log":
        return upstream / operands[0]
    if kind == "sqrt":
        return upstream * 0.5 / sqrt(operands[0])

    # ---------- Error function ----------
    if kind == "erf":
        a = operands[0]
        return upstream * rule.constant * exp(-(a * a))

    raise ValueError(f"no derivative rule for kind {kind!r}")


class GradientTape:
    """
    Reverse sweep over the graph rooted at one output node.

    Every reachable node is visited exactly once, in reverse topological
    order, and only after all contributions from its children have been
    summed into its entry. Work is therefore linear in nodes + edges, even
    when a subexpression is shared by many children.

    Gradient nodes are recorded on a scratch tape owned by the traversal
    (`tape` after the call), never on the output's tape: the graph being
    differentiated is only read, and dropping the returned map releases
    everything the sweep built. Rule operands are mirrored onto the scratch
    tape as constants, once per traversal.

    Attributes
    ----------
    nodes_visited : int
        Nodes processed by the last `differentiate` call.
    edges_visited : int
        (parent, rule) pairs processed by the last `differentiate` call.
    tape : Tape or None
        Scratch tape holding the gradient nodes of the last call.

    The accumulation map is private to each call, so several traversals can
    run concurrently over shared nodes.
    """

    def __init__(self):
        self.nodes_visited = 0
        self.edges_visited = 0
        self.tape: Optional[Tape] = None

    def differentiate(self, output: Variable, tape: Optional[Tape] = None) -> Dict[Variable, Variable]:
        """
        Gradients of `output` with respect to every node it depends on.

        Parameters
        ----------
        output : Variable
        tape : Tape, optional
            Where gradient nodes are recorded. A fresh Tape by default; it
            must not be the tape `output` lives on.

        Returns
        -------
        dict {Variable: Variable}
            Keyed by node identity; read `.value` of an entry for the numeric
            partial derivative. `output` itself maps to the seed node (value 1).
        """
        if not isinstance(output, Variable):
            raise TypeError(f"differentiate expects a Variable, got {type(output).__name__}")
        source = output.tape
        scratch = Tape() if tape is None else tape
        if scratch is source:
            raise ValueError("differentiate: gradient nodes need a tape other than the output's")

        self.nodes_visited = 0
        self.edges_visited = 0
        self.tape = scratch
        order = _topological_order(output)

        mirrors: Dict[int, Variable] = {}

        def operand(k: int) -> Variable:
            if k not in mirrors:
                mirrors[k] = scratch.push_node(op_tag="const", value=source.node(k).value)
            return mirrors[k]

        # Seed dT/dT = 1
        accumulated: Dict[Variable, Variable] = {
            output: scratch.push_node(op_tag="const", value=1.0, name="seed")
        }

        # Backward sweep: children before parents
        strict = get_config().strict_division
        for idx in reversed(order):
            self.nodes_visited += 1
            node = source.node(idx)
            if node.is_leaf:
                continue
            upstream = accumulated[source.variable(idx)]
            # rules run under the division policy the node was recorded with
            policy = (nullcontext() if node.strict_division == strict
                      else use_config(strict_division=node.strict_division))
            with policy:
                for p_idx, rule in zip(node.parents, node.rules):
                    self.edges_visited += 1
                    parent = source.variable(p_idx)
                    contribution = _apply_local_rule(rule, upstream, operand)
                    if parent in accumulated:
                        # sum, never overwrite
                        accumulated[parent] = accumulated[parent] + contribution
                    else:
                        accumulated[parent] = contribution

        logger.debug("differentiate: %d nodes, %d edges from node %d",
                     self.nodes_visited, self.edges_visited, output.index)
        return accumulated


def differentiate(output: Variable, tape: Optional[Tape] = None) -> Dict[Variable, Variable]:
    """Reverse-mode entry point: gradient map of `output` w.r.t. all its ancestors."""
    return GradientTape().differentiate(output, tape=tape)
