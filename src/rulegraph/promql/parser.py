"""
Adapter around the external PromQL parser.

``promql_parser`` (Rust-backed) turns query text into its own expression
classes. This module converts that tree into ``rulegraph.promql.ast`` nodes
so the rest of the package never depends on the parser's object model.
Conversion is iterative, mirroring the walker.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Callable, List, Sequence

import promql_parser
import structlog

from rulegraph.core.errors import QueryParseError
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

logger = structlog.get_logger()

Builder = Callable[[Sequence[Node]], Node]


def parse_query(query: str) -> Node:
    """
    Parse PromQL text into an expression tree.

    Args:
        query: PromQL query text

    Returns:
        Root node of the converted tree

    Raises:
        QueryParseError: If the parser rejects the query or produces a
            node type with no equivalent in the expression model
    """
    try:
        expr = promql_parser.parse(query)
    except ValueError as exc:
        raise QueryParseError(f"Invalid PromQL: {exc}", details={"query": query}) from exc

    return convert_expr(expr, query=query)


def convert_expr(root: Any, *, query: str = "") -> Node:
    """Convert a ``promql_parser`` expression into expression-model nodes.

    Children are converted before their parent using an explicit work-list;
    finished nodes are collected on a result stack and popped by arity.
    """
    work: List[tuple[Any, Builder | None, int]] = [(root, None, 0)]
    results: List[Node] = []

    while work:
        expr, build, arity = work.pop()

        if build is not None:
            start = len(results) - arity
            children = results[start:]
            del results[start:]
            results.append(build(children))
            continue

        kids, build = _decompose(expr, query)
        work.append((expr, build, len(kids)))
        work.extend((kid, None, 0) for kid in reversed(kids))

    return results[0]


def _decompose(expr: Any, query: str) -> tuple[list[Any], Builder]:
    """Split a parser node into its children and a constructor for ours."""
    if isinstance(expr, promql_parser.BinaryExpr):
        op = str(expr.op)
        return [expr.lhs, expr.rhs], lambda c: Operator(left=c[0], op=op, right=c[1])

    if isinstance(expr, promql_parser.UnaryExpr):
        return [expr.expr], lambda c: Negation(child=c[0])

    if isinstance(expr, promql_parser.AggregateExpr):
        name = str(expr.op)
        kids = [expr.expr] if expr.param is None else [expr.param, expr.expr]
        return kids, lambda c: Function(name=name, aggregation=True, args=tuple(c))

    if isinstance(expr, promql_parser.Call):
        name = expr.func.name
        return list(expr.args), lambda c: Function(name=name, aggregation=False, args=tuple(c))

    if isinstance(expr, (promql_parser.ParenExpr, promql_parser.SubqueryExpr)):
        return [expr.expr], lambda c: c[0]

    if isinstance(expr, promql_parser.NumberLiteral):
        value = float(expr.val)
        return [], lambda c: Scalar(value=value)

    if isinstance(expr, promql_parser.StringLiteral):
        text = expr.val
        return [], lambda c: String(value=text)

    if isinstance(expr, promql_parser.VectorSelector):
        vector = _vector(expr)
        return [], lambda c: vector

    if isinstance(expr, promql_parser.MatrixSelector):
        vector = _vector(expr.vector_selector, _format_duration(expr.range))
        return [], lambda c: vector

    logger.warning("unsupported_promql_node", node_type=type(expr).__name__, query=query)
    raise QueryParseError(
        f"Unsupported PromQL expression: {type(expr).__name__}",
        details={"query": query},
    )


def _vector(selector: Any, range_: str | None = None) -> Vector:
    """Build a Vector, folding the selector's metric name into a matcher.

    Matchers from every ``or`` group are kept alongside the plain ones, so
    each alternative metric name reaches the walker.
    """
    groups = [selector.matchers.matchers]
    groups.extend(getattr(selector.matchers, "or_matchers", None) or [])
    matchers = [
        Matcher(name=m.name, value=m.value, op=str(m.op)) for group in groups for m in group
    ]

    name = selector.name
    if name and not any(m.name == METRIC_NAME_LABEL and m.value == name for m in matchers):
        matchers.insert(0, Matcher(name=METRIC_NAME_LABEL, value=name))

    return Vector(matchers=tuple(matchers), range=range_)


def _format_duration(value: Any) -> str | None:
    """Render a range duration the way PromQL writes it (5m, 1h, 30s)."""
    if value is None:
        return None
    if not isinstance(value, timedelta):
        return str(value)

    millis = int(value.total_seconds() * 1000)
    for unit, size in (("d", 86_400_000), ("h", 3_600_000), ("m", 60_000), ("s", 1000)):
        if millis and millis % size == 0:
            return f"{millis // size}{unit}"
    return f"{millis}ms"
