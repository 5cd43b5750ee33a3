"""Metric dependency graph: aggregation and serialization."""

from rulegraph.graph.builder import build_dependency_graph
from rulegraph.graph.models import DependencyGraph, SkippedRule
from rulegraph.graph.serializers import (
    SERIALIZERS,
    serialize_dot,
    serialize_json,
    serialize_mermaid,
)

__all__ = [
    "DependencyGraph",
    "SkippedRule",
    "build_dependency_graph",
    "SERIALIZERS",
    "serialize_dot",
    "serialize_json",
    "serialize_mermaid",
]
