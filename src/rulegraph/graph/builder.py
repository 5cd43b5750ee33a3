"""
Build the metric dependency graph from a set of rules.
"""

from __future__ import annotations

from typing import Callable, Iterable

import structlog

from rulegraph.core.errors import DuplicateRuleNameError, QueryParseError
from rulegraph.graph.models import DependencyGraph, SkippedRule
from rulegraph.promql.ast import Node
from rulegraph.promql.parser import parse_query
from rulegraph.promql.walker import extract_metric_names
from rulegraph.rules.models import Rule

logger = structlog.get_logger()


def build_dependency_graph(
    rules: Iterable[Rule],
    *,
    skip_invalid: bool = False,
    strict_names: bool = False,
    parse: Callable[[str], Node] = parse_query,
) -> DependencyGraph:
    """
    Aggregate per-rule metric reads into a dependency multigraph.

    Rules are processed in the order given. For each rule the evaluation
    time is recorded under its name (a later rule with the same name
    overwrites it), the query is parsed and walked, and one
    ``metric -> rule`` edge is appended per metric occurrence.

    Args:
        rules: Rules in snapshot order
        skip_invalid: Skip rules whose query fails to parse instead of
            aborting; skipped rules are listed on the returned graph
        strict_names: Reject rule names that occur more than once
        parse: Query parser, ``parse_query`` unless overridden

    Returns:
        DependencyGraph with edges and evaluation times

    Raises:
        QueryParseError: If a query fails to parse and skip_invalid is False
        DuplicateRuleNameError: If strict_names is set and a name repeats
    """
    graph = DependencyGraph()
    rule_count = 0

    for rule in rules:
        rule_count += 1

        if strict_names and rule.name in graph.evaluation_times:
            raise DuplicateRuleNameError(
                f"Rule name '{rule.name}' is defined more than once",
                details={"rule": rule.name, "group": rule.group},
            )
        graph.evaluation_times[rule.name] = rule.evaluation_time

        try:
            tree = parse(rule.query)
        except QueryParseError as exc:
            if not skip_invalid:
                raise QueryParseError(
                    f"Rule '{rule.name}' has an invalid query: {exc.message}",
                    details={"rule": rule.name, "group": rule.group, "query": rule.query},
                ) from exc

            logger.warning(
                "rule_parse_failed",
                rule=rule.name,
                group=rule.group,
                error=exc.message,
            )
            graph.skipped.append(
                SkippedRule(name=rule.name, group=rule.group, query=rule.query, reason=exc.message)
            )
            continue

        for metric in extract_metric_names(tree):
            graph.add_edge(metric, rule.name)

    logger.info(
        "dependency_graph_built",
        rules=rule_count,
        metrics=len(graph.edges),
        edges=graph.edge_count,
        skipped=len(graph.skipped),
    )
    return graph
