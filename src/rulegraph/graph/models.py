"""
Dependency multigraph between metrics and the rules that read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator


@dataclass
class SkippedRule:
    """A rule left out of the graph because its query did not parse."""

    name: str
    group: str
    query: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "group": self.group,
            "query": self.query,
            "reason": self.reason,
        }


@dataclass
class DependencyGraph:
    """
    Metric to dependent-rule multigraph.

    ``edges`` maps a metric name to the rules reading it. Values are lists,
    not sets: a rule that reads a metric twice is recorded twice. Keys and
    values keep insertion order, which makes rendering reproducible.
    """

    edges: dict[str, list[str]] = field(default_factory=dict)
    evaluation_times: dict[str, float] = field(default_factory=dict)
    skipped: list[SkippedRule] = field(default_factory=list)

    def add_edge(self, metric: str, rule: str) -> None:
        """Record that ``rule`` reads ``metric``."""
        self.edges.setdefault(metric, []).append(rule)

    def iter_edges(self) -> Iterator[tuple[str, str]]:
        """Yield ``(metric, rule)`` pairs, one per recorded edge."""
        for metric, rules in self.edges.items():
            for rule in rules:
                yield metric, rule

    @property
    def edge_count(self) -> int:
        return sum(len(rules) for rules in self.edges.values())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        result: dict[str, Any] = {
            "edges": [{"source": m, "target": r} for m, r in self.iter_edges()],
            "evaluation_times": dict(self.evaluation_times),
        }
        if self.skipped:
            result["skipped"] = [s.to_dict() for s in self.skipped]
        return result
