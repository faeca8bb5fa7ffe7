"""Tests for the Arithmetic, Comparison, Reduce and Expression nodes."""

import math

import pytest

from nodal.engine.errors import ComputeFailure
from nodal.engine.graph import new_node
from nodal.nodes.base import Multiple, NodeData, Single
from nodal.nodes.compute.arithmetic import ArithmeticNode
from nodal.nodes.compute.comparison import APPROX_TOLERANCE, ComparisonNode
from nodal.nodes.compute.expression import (
    ExpressionNode,
    evaluate_expression,
    expression_variables,
)
from nodal.nodes.compute.reduce import ReduceNode


def _binary(left, right, op):
    return NodeData(inputs={"left": Single(left), "right": Single(right)},
                    controls={"op": op}, outputs={"result": None})


# ---------------------------------------------------------------------------
# ArithmeticNode
# ---------------------------------------------------------------------------

class TestArithmeticNode:
    @pytest.mark.parametrize("op, expected", [
        ("+", 9), ("-", 3), ("*", 18), ("/", 2),
    ])
    def test_ops(self, op, expected):
        assert ArithmeticNode().compute(_binary(6, 3, op)) == {"result": expected}

    def test_divide_by_zero(self):
        with pytest.raises(ValueError, match="Division by zero"):
            ArithmeticNode().compute(_binary(1, 0, "/"))

    def test_unknown_op(self):
        with pytest.raises(ValueError, match="Unknown operator"):
            ArithmeticNode().compute(_binary(1, 2, "%"))

    def test_rejects_multiple_values(self):
        data = NodeData(inputs={"left": Multiple((1, 2)), "right": Single(1)},
                        controls={"op": "+"})
        with pytest.raises(TypeError):
            ArithmeticNode().compute(data)


# ---------------------------------------------------------------------------
# ComparisonNode
# ---------------------------------------------------------------------------

class TestComparisonNode:
    @pytest.mark.parametrize("op, left, right, expected", [
        ("eq", 2, 2, True),
        ("eq", 2, 3, False),
        ("neq", 2, 3, True),
        ("gt", 3, 2, True),
        ("gt", 2, 2, False),
        ("geq", 2, 2, True),
        ("lt", 1, 2, True),
        ("leq", 3, 2, False),
        ("aeq", 1.0, 1.05, True),
        ("aeq", 1.0, 1.0 + APPROX_TOLERANCE, False),
    ])
    def test_ops(self, op, left, right, expected):
        result = ComparisonNode().compute(_binary(left, right, op))
        assert result["result"] is expected

    def test_operator_labels(self):
        options = {o.value: o.label for o in ComparisonNode.meta.controls["op"].options}
        assert options["aeq"] == "~="
        assert options["leq"] == "<="
        assert ComparisonNode.meta.controls["op"].value == "eq"


# ---------------------------------------------------------------------------
# ReduceNode
# ---------------------------------------------------------------------------

class TestReduceNode:
    def _data(self, values, op):
        return NodeData(inputs={"number": Multiple(tuple(values))}, controls={"op": op})

    def test_sum(self):
        assert ReduceNode().compute(self._data([2, 5, 10], "sum")) == {"result": 17}

    def test_prod(self):
        assert ReduceNode().compute(self._data([2, 5, 10], "prod")) == {"result": 100}

    def test_empty(self):
        assert ReduceNode().compute(self._data([], "sum")) == {"result": 0}
        assert ReduceNode().compute(self._data([], "prod")) == {"result": 1}

    def test_missing_value(self):
        with pytest.raises(ValueError, match="missing"):
            ReduceNode().compute(self._data([1, None], "sum"))


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

class TestEvaluateExpression:
    def test_variables_in_first_occurrence_order(self):
        assert expression_variables("{b} + {a} * {b}") == ["b", "a"]
        assert expression_variables("1+1") == []
        # Braces need a name inside
        assert expression_variables("{} + {a-b}") == []

    def test_precedence(self):
        assert evaluate_expression("{a}+{b}*2", {"a": 1, "b": 3}) == 7

    def test_caret_is_power(self):
        assert evaluate_expression("2^3", {}) == 8

    def test_unary_and_parens(self):
        assert evaluate_expression("-({x} - 4) % 3", {"x": 2}) == 2

    @pytest.mark.parametrize("expression, message", [
        ("", "empty"),
        ("   ", "empty"),
        ("(1 + 2", "Invalid expression"),
        ("x + 1", "Unknown name"),
        ("__import__('os')", "Unsupported function"),
        ("math.sqrt(4)", "Unsupported function"),
        ("sqrt", "Unknown name"),
        ("(1).real", "Unsupported expression element"),
        ("round(2.5, ndigits=1)", "Keyword arguments"),
        ("'a' * 3", "numeric literals"),
        ("True + 1", "numeric literals"),
        ("7 // 2", "Unsupported operator"),
        ("not 1", "Unsupported unary"),
    ])
    def test_rejects(self, expression, message):
        with pytest.raises(ValueError, match=message):
            evaluate_expression(expression, {})

    def test_missing_variable(self):
        with pytest.raises(ValueError, match="No value for variable 'a'"):
            evaluate_expression("{a} + 1", {})

    def test_non_numeric_variable(self):
        with pytest.raises(ValueError, match="not a number"):
            evaluate_expression("{a} + 1", {"a": "x"})

    def test_results_are_floats(self):
        assert isinstance(evaluate_expression("2^3", {}), float)
        assert isinstance(evaluate_expression("floor({a})", {"a": 2.7}), float)

    @pytest.mark.parametrize("expression, expected", [
        ("sqrt({a})", 4),
        ("abs(-3)", 3),
        ("floor(2.7) + ceil(2.1)", 5),
        ("round(2.4)", 2),
        ("round(3.14159, 2)", 3.14),
        ("min(3, 1, 2)", 1),
        ("max({a}, 10)", 16),
        ("log(e)", 1),
        ("exp(0) + cos(0)", 2),
        ("sin(0) + tan(0)", 0),
    ])
    def test_math_functions(self, expression, expected):
        assert evaluate_expression(expression, {"a": 16}) == pytest.approx(expected)

    def test_constants(self):
        assert evaluate_expression("2 * pi", {}) == pytest.approx(2 * math.pi)
        # A variable may share a constant's name
        assert evaluate_expression("{pi} + pi", {"pi": 1}) == pytest.approx(1 + math.pi)

    @pytest.mark.parametrize("expression", ["9^9^9", "10^400", "exp(1000)"])
    def test_overflow_raises(self, expression):
        with pytest.raises(OverflowError):
            evaluate_expression(expression, {})

    def test_domain_errors(self):
        with pytest.raises(ValueError, match="math domain error"):
            evaluate_expression("sqrt(-1)", {})
        with pytest.raises(ValueError, match="not a real number"):
            evaluate_expression("(-8)^(1/3)", {})


class TestExpressionNode:
    def test_compute_uses_enabled_inputs(self):
        data = NodeData(inputs={"a": Single(4)}, controls={"expression": "{a} / 2"})
        assert ExpressionNode().compute(data) == {"result": 2}

    def test_overflow_fails_the_node(self, executor, make_node):
        graph = {}
        expr = make_node(graph, "expression", controls={"expression": "9^9^9"})
        with pytest.raises(ComputeFailure) as excinfo:
            executor.compute(graph)
        assert excinfo.value.node_id == expr.id
        assert expr.outputs["result"].last_value is None

    def test_on_change_adds_number_inputs(self, registry):
        node = new_node(registry, "expression")
        node.controls["expression"] = "{a} * {a} + {b}"
        node = ExpressionNode().on_change(node)
        assert list(node.inputs) == ["a", "b"]
        assert node.inputs["a"].label == "a"
        assert node.inputs["a"].value == 0
