"""
PromQL expression handling.

Parses query text with the external parser and extracts the metric names
an expression reads.
"""

from rulegraph.promql.ast import (
    METRIC_NAME_LABEL,
    Function,
    Matcher,
    Negation,
    Node,
    Operator,
    Scalar,
    String,
    Vector,
)
from rulegraph.promql.walker import extract_metric_names

__all__ = [
    "METRIC_NAME_LABEL",
    "Function",
    "Matcher",
    "Negation",
    "Node",
    "Operator",
    "Scalar",
    "String",
    "Vector",
    "extract_metric_names",
]
