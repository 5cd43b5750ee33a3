"""
Extract the metric names a PromQL expression reads.
"""

from __future__ import annotations

from typing import List

from rulegraph.promql.ast import Function, Negation, Node, Operator, Scalar, String, Vector


def extract_metric_names(root: Node) -> List[str]:
    """
    Collect metric names referenced by an expression tree.

    Traversal uses an explicit LIFO work-list instead of recursion, so
    arbitrarily deep expressions are walked without hitting the
    interpreter's recursion limit. Names are returned in discovery order
    and duplicates are kept: ``a + a`` yields ``["a", "a"]``.

    Args:
        root: Root node of a parsed expression

    Returns:
        Metric names in traversal order
    """
    stack: List[Node] = [root]
    metrics: List[str] = []

    while stack:
        node = stack.pop()

        if isinstance(node, Operator):
            stack.append(node.left)
            stack.append(node.right)
        elif isinstance(node, Vector):
            metrics.extend(node.metric_names)
        elif isinstance(node, (Scalar, String)):
            continue
        elif isinstance(node, Function):
            stack.extend(node.args)
        elif isinstance(node, Negation):
            stack.append(node.child)
        else:
            raise TypeError(f"Unsupported expression node: {type(node).__name__}")

    return metrics
