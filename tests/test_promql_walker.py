"""Tests for metric name extraction from expression trees."""

import sys

import pytest

from rulegraph.promql.ast import (
    METRIC_NAME_LABEL,
    Function,
    Matcher,
    Negation,
    Operator,
    Scalar,
    String,
    Vector,
)
from rulegraph.promql.walker import extract_metric_names


def metric(name, **labels):
    matchers = [Matcher(METRIC_NAME_LABEL, name)]
    matchers.extend(Matcher(label, value) for label, value in labels.items())
    return Vector(matchers=tuple(matchers))


class TestLeaves:
    def test_scalar_only(self):
        assert extract_metric_names(Scalar(1.0)) == []

    def test_string_only(self):
        assert extract_metric_names(String("hello")) == []

    def test_literal_only_tree(self):
        tree = Operator(
            left=Negation(Scalar(2.0)),
            op="+",
            right=Function(name="vector", args=(Scalar(1.0), String("x"))),
        )
        assert extract_metric_names(tree) == []

    def test_vector_with_name(self):
        assert extract_metric_names(metric("up", job="api")) == ["up"]

    def test_vector_without_name_matcher(self):
        vector = Vector(matchers=(Matcher("job", "api"), Matcher("env", "prod")))
        assert extract_metric_names(vector) == []

    def test_empty_vector(self):
        assert extract_metric_names(Vector()) == []

    def test_each_name_matcher_emitted(self):
        vector = Vector(
            matchers=(
                Matcher(METRIC_NAME_LABEL, "a"),
                Matcher("job", "api"),
                Matcher(METRIC_NAME_LABEL, "b", op="=~"),
            )
        )
        assert extract_metric_names(vector) == ["a", "b"]


class TestTraversal:
    def test_operator_reference_order(self):
        tree = Operator(left=metric("left"), op="/", right=metric("right"))
        # LIFO: the right operand is pushed last and popped first
        assert extract_metric_names(tree) == ["right", "left"]

    def test_function_args_reverse_order(self):
        tree = Function(name="f", args=(metric("a"), metric("b"), metric("c")))
        assert extract_metric_names(tree) == ["c", "b", "a"]

    def test_negation(self):
        assert extract_metric_names(Negation(metric("errors"))) == ["errors"]

    def test_duplicates_preserved(self):
        tree = Operator(left=metric("metric_a"), op="+", right=metric("metric_a"))
        assert extract_metric_names(tree) == ["metric_a", "metric_a"]

    def test_nested_combination_complete(self):
        tree = Function(
            name="sum",
            aggregation=True,
            args=(
                Operator(
                    left=Negation(Function(name="rate", args=(metric("a"),))),
                    op="*",
                    right=Operator(
                        left=Scalar(100.0),
                        op="-",
                        right=Function(
                            name="clamp_min",
                            args=(Negation(metric("b")), Scalar(0.0)),
                        ),
                    ),
                ),
                metric("c"),
            ),
        )

        names = extract_metric_names(tree)

        assert sorted(names) == ["a", "b", "c"]

    def test_reference_example_order(self):
        # sum(1 - used / total) and sum(rate(queries[5m])) > 100
        left = Function(
            name="sum",
            aggregation=True,
            args=(
                Operator(
                    left=Scalar(1.0),
                    op="-",
                    right=Operator(left=metric("used", env="production"), op="/", right=metric("total")),
                ),
            ),
        )
        right = Operator(
            left=Function(
                name="sum",
                aggregation=True,
                args=(Function(name="rate", args=(metric("queries"),)),),
            ),
            op=">",
            right=Scalar(100.0),
        )
        tree = Operator(left=left, op="and", right=right)

        assert extract_metric_names(tree) == ["queries", "total", "used"]

    def test_deterministic(self):
        tree = Operator(
            left=Function(name="f", args=(metric("x"), metric("y"))),
            op="+",
            right=Negation(metric("z")),
        )
        assert extract_metric_names(tree) == extract_metric_names(tree)

    def test_deep_chain_beyond_recursion_limit(self):
        depth = sys.getrecursionlimit() * 3
        tree = metric("leaf")
        for _ in range(depth):
            tree = Negation(tree)

        assert extract_metric_names(tree) == ["leaf"]

    def test_long_operator_chain(self):
        tree = metric("m0")
        for i in range(1, 5000):
            tree = Operator(left=tree, op="+", right=metric(f"m{i}"))

        names = extract_metric_names(tree)

        assert len(names) == 5000
        assert set(names) == {f"m{i}" for i in range(5000)}

    def test_does_not_mutate_input(self):
        args = (metric("a"), metric("b"))
        tree = Function(name="f", args=args)

        extract_metric_names(tree)

        assert tree.args is args
        assert tree.args == (metric("a"), metric("b"))

    def test_unknown_node_rejected(self):
        with pytest.raises(TypeError):
            extract_metric_names(Function(name="f", args=("not-a-node",)))  # type: ignore[arg-type]
