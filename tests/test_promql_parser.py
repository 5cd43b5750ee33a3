"""Tests for the PromQL parser adapter."""

import pytest

from rulegraph.core.errors import QueryParseError
from rulegraph.promql.ast import METRIC_NAME_LABEL, Function, Negation, Operator, Scalar, Vector
from rulegraph.promql.parser import parse_query
from rulegraph.promql.walker import extract_metric_names

REFERENCE_QUERY = r"""
sum(1 - used{env="production"} / total) by (instance)
and ignoring (instance)
sum(rate(queries{instance=~"localhost\\d+"} [5m])) > 100
"""


class TestParseQuery:
    def test_reference_query(self):
        tree = parse_query(REFERENCE_QUERY)
        assert extract_metric_names(tree) == ["queries", "total", "used"]

    def test_plain_selector(self):
        tree = parse_query('http_requests_total{code="200", job="api"}')

        assert isinstance(tree, Vector)
        assert tree.metric_names == ["http_requests_total"]
        labels = {m.name: m.value for m in tree.matchers if m.name != METRIC_NAME_LABEL}
        assert labels == {"code": "200", "job": "api"}

    def test_name_only_in_braces(self):
        tree = parse_query('{__name__="up", job="node"}')
        assert extract_metric_names(tree) == ["up"]

    def test_or_matchers_keep_every_name(self):
        tree = parse_query('{__name__="foo" or __name__="bar"}')
        assert extract_metric_names(tree) == ["foo", "bar"]

    def test_or_matchers_mixed_labels(self):
        tree = parse_query('{job="a" or __name__="bar"}')
        assert extract_metric_names(tree) == ["bar"]

    def test_metric_name_not_duplicated(self):
        tree = parse_query("up")
        assert extract_metric_names(tree) == ["up"]

    def test_binary_operator(self):
        tree = parse_query("errors / requests")

        assert isinstance(tree, Operator)
        assert extract_metric_names(tree) == ["requests", "errors"]

    def test_same_metric_twice(self):
        assert extract_metric_names(parse_query("metric_a + metric_a")) == ["metric_a", "metric_a"]

    def test_unary_minus(self):
        tree = parse_query("-node_load1")

        assert isinstance(tree, Negation)
        assert extract_metric_names(tree) == ["node_load1"]

    def test_parentheses_unwrapped(self):
        tree = parse_query("((up))")
        assert isinstance(tree, Vector)

    def test_function_call(self):
        tree = parse_query("rate(http_requests_total[5m])")

        assert isinstance(tree, Function)
        assert tree.aggregation is False
        assert tree.name == "rate"
        (arg,) = tree.args
        assert isinstance(arg, Vector)
        assert arg.range is not None
        assert arg.metric_names == ["http_requests_total"]

    def test_aggregation_with_parameter(self):
        tree = parse_query("topk(5, node_cpu_seconds_total)")

        assert isinstance(tree, Function)
        assert tree.aggregation is True
        assert isinstance(tree.args[0], Scalar)
        assert tree.args[0].value == 5.0
        assert extract_metric_names(tree) == ["node_cpu_seconds_total"]

    def test_subquery(self):
        tree = parse_query("max_over_time(rate(errors_total[5m])[1h:1m])")
        assert extract_metric_names(tree) == ["errors_total"]

    def test_scalar_only(self):
        assert extract_metric_names(parse_query("1 + 2 * 3")) == []

    def test_recording_rule_names_with_colons(self):
        tree = parse_query("sum by (job) (job:http_requests:rate5m)")
        assert extract_metric_names(tree) == ["job:http_requests:rate5m"]

    def test_invalid_query(self):
        with pytest.raises(QueryParseError) as exc_info:
            parse_query("sum(rate(foo[5m])")

        assert exc_info.value.details["query"] == "sum(rate(foo[5m])"
        assert "Invalid PromQL" in exc_info.value.message

    def test_empty_query(self):
        with pytest.raises(QueryParseError):
            parse_query("")

    def test_deeply_nested_parentheses(self):
        depth = 200
        query = "(" * depth + "deep_metric" + ")" * depth
        assert extract_metric_names(parse_query(query)) == ["deep_metric"]
