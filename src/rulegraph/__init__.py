"""Metric dependency graphs for Prometheus recording rules."""

__version__ = "0.1.0"
