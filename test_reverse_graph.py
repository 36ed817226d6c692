"""Tests for reverse-mode graph construction (Variable / Tape / local rules)."""

import dataclasses
import math

import numpy as np
import pytest
from scipy.special import erf as scipy_erf

from autodiff_engine import (
    Tape,
    Variable,
    leaf,
    constant,
    differentiate,
    use_tape,
    use_config,
    current_tape,
    global_tape,
    DivisionByZero,
    UnsupportedOperator,
    TapeMismatch,
)
from autodiff_engine import ops
from autodiff_engine.core.node import LocalRule, Node


@pytest.fixture
def tape():
    with use_tape() as t:
        yield t


def test_h_value_and_gradient(tape):
    """h(x) = x² + 2x at x=2 -> value 8, dh/dx 6."""
    x = leaf(2.0, name="x")
    y = x ** 2 + 2 * x
    assert y.value == 8.0
    assert differentiate(y)[x].value == 6.0


class TestConstruction:

    def test_leaf(self, tape):
        x = leaf(3.0, name="x")
        assert x.is_leaf
        assert x.parents == () and x.rules == ()
        assert x.op_tag == "leaf"
        assert x.name == "x"
        assert x.tape is tape
        assert float(x) == 3.0

    def test_leaf_rejects_non_numbers(self, tape):
        with pytest.raises(TypeError):
            leaf("3")

    def test_binary_parents_and_rules(self, tape):
        a, b = leaf(2.0), leaf(5.0)
        s = a + b
        assert s.parents == (a, b)
        assert [r.kind for r in s.rules] == ["identity", "identity"]

        p = a * b
        assert p.value == 10.0
        assert p.rules == (LocalRule("mul", (b.index,)), LocalRule("mul", (a.index,)))

    def test_scalar_operand_is_not_a_parent(self, tape):
        a = leaf(2.0)
        assert (a + 3).parents == (a,)
        assert (3 + a).parents == (a,)
        m = 3 * a
        assert m.parents == (a,)
        assert m.rules == (LocalRule("scale", constant=3.0),)

    def test_same_node_used_twice(self, tape):
        x = leaf(2.0)
        y = x * x
        assert y.parents == (x, x)

    def test_pow_and_trig_rules(self, tape):
        a = leaf(0.5)
        assert (a ** 3).rules == (LocalRule("pow", (a.index,), constant=3.0),)
        assert ops.sin(a).rules == (LocalRule("cos", (a.index,)),)
        assert ops.cos(a).rules == (LocalRule("neg_sin", (a.index,)),)
        assert ops.sin(a).value == np.sin(0.5)

    def test_nodes_are_recorded_in_order(self, tape):
        a = leaf(1.0)
        b = a + 1
        c = b * a
        assert len(tape) == 3
        assert [a.index, b.index, c.index] == [0, 1, 2]
        assert tape.variable(2) is c
        assert tape.node(2).parents == (1, 0)

    def test_records_are_immutable(self, tape):
        a = leaf(1.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            tape.node(a.index).value = 2.0

    def test_parent_rule_count_invariant(self):
        with pytest.raises(ValueError):
            Node(op_tag="add", value=1.0, parents=(0, 1), rules=(LocalRule("identity"),))

    def test_unknown_rule_kind(self):
        with pytest.raises(ValueError):
            LocalRule("tan")

    def test_rule_operands_must_exist(self, tape):
        a = leaf(1.0)
        with pytest.raises(ValueError):
            tape.push_node(op_tag="bad", value=1.0, parents=[a], rules=[LocalRule("mul", (5,))])


class TestTapes:

    def test_use_tape_switches_and_restores(self):
        outer = current_tape()
        with use_tape() as t:
            assert current_tape() is t
            assert leaf(1.0).tape is t
        assert current_tape() is outer

    def test_explicit_tape(self):
        t = Tape()
        x = leaf(1.0, tape=t)
        assert x.tape is t
        assert len(t) == 1

    def test_empty_tape_is_still_used(self):
        t = Tape()
        with use_tape(t):
            assert current_tape() is t
            assert current_tape() is not global_tape

    def test_operands_on_different_tapes(self):
        a = leaf(1.0, tape=Tape())
        b = leaf(2.0, tape=Tape())
        with pytest.raises(TapeMismatch):
            a + b

    def test_reset(self):
        t = Tape()
        leaf(1.0, tape=t)
        t.reset()
        assert len(t) == 0

    def test_handles_from_before_a_reset_are_stale(self):
        t = Tape()
        old = leaf(1.0, tape=t)
        t.reset()
        fresh = leaf(7.0, tape=t)
        assert fresh.index == old.index
        with pytest.raises(TapeMismatch):
            old.value
        with pytest.raises(TapeMismatch):
            old + fresh
        with pytest.raises(TapeMismatch):
            differentiate(old)
        assert fresh.value == 7.0


class TestDivision:

    def test_quotient_gradients(self, tape):
        a, b = leaf(6.0), leaf(2.0)
        q = a / b
        g = differentiate(q)
        assert q.value == 3.0
        assert g[a].value == 0.5
        assert g[b].value == -1.5

    def test_scalar_numerator_and_denominator(self, tape):
        b = leaf(2.0)
        assert differentiate(6.0 / b)[b].value == -1.5
        assert differentiate(b / 4.0)[b].value == 0.25

    def test_strict_division_by_zero(self, tape):
        x = leaf(1.0)
        with pytest.raises(DivisionByZero):
            x / 0.0
        with pytest.raises(DivisionByZero):
            x / (x - x)
        with pytest.raises(DivisionByZero):
            1.0 / (x - 1.0)

    def test_ieee_division_by_zero(self, tape):
        x = leaf(1.0)
        with use_config(strict_division=False):
            z = x - x
            q = x / z
            assert np.isinf(q.value)
            g = differentiate(q)
            # ∂q/∂x through the numerator is 1/0
            assert np.isinf(g[z].value) or np.isnan(g[z].value)

    def test_policy_is_the_one_active_when_recorded(self, tape):
        x = leaf(1.0)
        with use_config(strict_division=False):
            q = x / (x - x)
        g = differentiate(q)
        assert np.isinf(q.value)
        assert not np.isfinite(g[x].value)
        assert tape.node(q.index).strict_division is False

    def test_strict_graph_differentiated_under_ieee_policy(self, tape):
        a, b = leaf(6.0), leaf(2.0)
        q = a / b
        with use_config(strict_division=False):
            g = differentiate(q)
        assert g[b].value == -1.5
        assert tape.node(q.index).strict_division is True


class TestPow:

    def test_pow_gradient(self, tape):
        x = leaf(3.0)
        assert differentiate(x ** 4)[x].value == 108.0
        assert differentiate(x ** 1)[x].value == 1.0

    def test_pow_zero_is_constant(self, tape):
        x = leaf(3.0)
        y = x ** 0
        assert y.value == 1.0
        assert y.is_leaf
        assert x not in differentiate(y)

    def test_unsupported_powers(self, tape):
        x = leaf(2.0)
        with pytest.raises(UnsupportedOperator):
            x ** -1
        with pytest.raises(UnsupportedOperator):
            x ** 1.5
        with pytest.raises(UnsupportedOperator):
            x ** x
        with pytest.raises(UnsupportedOperator):
            2 ** x

    def test_negative_power_extension(self, tape):
        x = leaf(2.0)
        with use_config(allow_negative_powers=True):
            y = x ** -1
            assert y.value == 0.5
            assert differentiate(y)[x].value == -0.25


class TestTranscendental:

    def test_sin_cos(self, tape):
        x = leaf(0.7)
        assert differentiate(ops.sin(x))[x].value == np.cos(0.7)
        assert differentiate(ops.cos(x))[x].value == -np.sin(0.7)

    def test_exp_log_sqrt(self, tape):
        x = leaf(1.5)
        assert differentiate(ops.exp(x))[x].value == pytest.approx(math.exp(1.5))
        assert differentiate(ops.log(x))[x].value == pytest.approx(1 / 1.5)
        assert differentiate(ops.sqrt(x))[x].value == pytest.approx(0.5 / math.sqrt(1.5))

    def test_erf_and_norm_cdf(self, tape):
        x = leaf(0.4)
        assert ops.erf(x).value == pytest.approx(scipy_erf(0.4))
        assert differentiate(ops.erf(x))[x].value == pytest.approx(
            2 / math.sqrt(math.pi) * math.exp(-0.16))
        pdf = math.exp(-0.08) / math.sqrt(2 * math.pi)
        assert differentiate(ops.norm_cdf(x))[x].value == pytest.approx(pdf)

    def test_domain_errors(self, tape):
        with pytest.raises(ValueError):
            ops.log(leaf(0.0))
        with pytest.raises(ValueError):
            ops.sqrt(leaf(-1.0))

    def test_sqrt_of_zero_node(self, tape):
        x = leaf(0.0)
        with pytest.raises(DivisionByZero):
            ops.sqrt(x)
        assert len(tape) == 1
        assert ops.sqrt(0.0) == 0.0
        with use_config(strict_division=False):
            y = ops.sqrt(x)
            assert y.value == 0.0
            assert np.isinf(differentiate(y)[x].value)

    def test_plain_numbers(self):
        assert ops.sin(0.0) == 0.0
        assert ops.neg(2.0) == -2.0


def test_constant_node(tape):
    x = leaf(2.0)
    c = constant(5.0)
    y = c * x
    g = differentiate(y)
    assert g[x].value == 5.0
    assert g[c].value == 2.0
    assert c.op_tag == "const"


def test_repr(tape):
    x = leaf(2.0, name="x")
    assert "leaf" in repr(x) and "'x'" in repr(x)
    assert isinstance(x * x, Variable)
