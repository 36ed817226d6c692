# autodiff_engine/core/tape.py
from __future__ import annotations
import threading
from typing import List, Optional, Sequence
from contextlib import contextmanager

from .config import get_config
from .errors import TapeMismatch
from .node import LocalRule, Node
from .var import Variable


class Tape:
    """
    Arena of Nodes recorded in creation order.

    Nodes refer to their parents by arena index, so a parent index is always
    smaller than the index of any node built on top of it. Each slot has
    exactly one Variable handle; node identity is handle identity.
    Recording is serialised by a lock; recorded nodes are never mutated.
    `generation` is bumped by `reset()`; handles from an earlier generation
    are stale and refuse to resolve.
    """
    def __init__(self):
        self._nodes: List[Node] = []
        self._handles: List[Variable] = []
        self._lock = threading.Lock()
        self.generation = 0

    def __len__(self):
        return len(self._nodes)

    def __repr__(self):
        return f"Tape(nodes={len(self._nodes)})"

    @property
    def nodes(self):
        return tuple(self._nodes)

    def reset(self):
        """Drop every recorded node. Variables from before the reset become stale."""
        with self._lock:
            self.generation += 1
            self._nodes.clear()
            self._handles.clear()

    def node(self, index: int) -> Node:
        return self._nodes[index]

    def variable(self, index: int) -> Variable:
        return self._handles[index]

    def push_node(self, *, op_tag: str, value, parents: Sequence[Variable] = (),
                  rules: Sequence[LocalRule] = (), name: Optional[str] = None) -> Variable:
        """
        Append Node(op_tag, value, parents, rules) to the tape and return its handle.
        `parents` are Variables on this tape; rule operands are their tape indices.
        """
        for p in parents:
            if p.tape is not self:
                raise TapeMismatch(f"{op_tag}: operand at index {p.index} was recorded on another tape")
            if p.generation != self.generation:
                raise TapeMismatch(f"{op_tag}: operand at index {p.index} predates a tape reset")
        strict = get_config().strict_division
        with self._lock:
            index = len(self._nodes)
            for rule in rules:
                for k in rule.operands:
                    if not 0 <= k < index:
                        raise ValueError(f"{op_tag}: rule operand index {k} is not on the tape")
            node = Node(op_tag=op_tag, value=value,
                        parents=tuple(p.index for p in parents),
                        rules=tuple(rules), name=name, strict_division=strict)
            handle = Variable(self, index, self.generation)
            self._nodes.append(node)
            self._handles.append(handle)
        return handle


# Default tape used when no other tape is active on the calling thread
global_tape = Tape()

_local = threading.local()


def current_tape() -> Tape:
    """Return the tape that new leaves are recorded on for the calling thread."""
    tape = getattr(_local, "tape", None)
    return global_tape if tape is None else tape


@contextmanager
def use_tape(tape: Optional[Tape] = None):
    """
    Context manager to temporarily use a fresh tape on the calling thread:
        with use_tape():
            ... build computation ...
            differentiate(y)
    """
    prev = getattr(_local, "tape", None)
    try:
        _local.tape = tape if tape is not None else Tape()
        yield _local.tape
    finally:
        _local.tape = prev
