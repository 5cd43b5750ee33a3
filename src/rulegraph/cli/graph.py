"""
CLI command for rendering the rule dependency graph.

Reads rules from a Prometheus server (or a rule file), extracts the metrics
each rule reads, and writes a ``metric -> rule`` graph.

Commands:
    rulegraph                                   - DOT graph from localhost:9090
    rulegraph -p http://prom:9090               - DOT graph from another server
    rulegraph --rules-file rules.yaml           - Graph from a rule file
    rulegraph --format mermaid -o deps.mmd      - Mermaid output to a file
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Optional

from rulegraph.cli.ux import console, info, print_table, warning
from rulegraph.config import get_settings
from rulegraph.core.errors import ConfigurationError, ExitCode, main_with_error_handling
from rulegraph.graph.builder import build_dependency_graph
from rulegraph.graph.models import DependencyGraph
from rulegraph.graph.serializers import SERIALIZERS
from rulegraph.logging import bind_context
from rulegraph.providers.prometheus import RULE_TYPES, PrometheusRulesProvider
from rulegraph.rules.loader import load_rules_file
from rulegraph.rules.models import RulesSnapshot


@main_with_error_handling()
def graph_command(
    prom_endpoint: Optional[str] = None,
    rules_file: Optional[str] = None,
    output_format: str = "dot",
    output_file: Optional[str] = None,
    rule_type: Optional[str] = None,
    skip_invalid: Optional[bool] = None,
    strict_names: Optional[bool] = None,
    timeout: Optional[float] = None,
) -> int:
    """
    Render the metric dependency graph.

    Args:
        prom_endpoint: Prometheus server URL (defaults to settings)
        rules_file: Read rules from this file instead of a server
        output_format: Output format (dot, mermaid, json)
        output_file: Optional file path for output
        rule_type: Only include "record" or "alert" rules
        skip_invalid: Skip rules with invalid queries instead of failing
        strict_names: Fail when a rule name is defined more than once
        timeout: HTTP timeout in seconds

    Returns:
        Exit code (0 on success, 1 if rules were skipped)
    """
    settings = get_settings()

    serializer = SERIALIZERS.get(output_format)
    if serializer is None:
        raise ConfigurationError(f"Unknown format: {output_format}")
    if rule_type is not None and rule_type not in RULE_TYPES:
        raise ConfigurationError(f"Unknown rule type: {rule_type}")
    if prom_endpoint and rules_file:
        raise ConfigurationError("Use either --prom-endpoint or --rules-file, not both")

    if skip_invalid is None:
        skip_invalid = settings.skip_invalid_queries
    if strict_names is None:
        strict_names = settings.strict_rule_names

    if rules_file:
        log = bind_context(source=rules_file)
        snapshot = load_rules_file(rules_file)
        if rule_type is not None:
            snapshot = snapshot.filter_type(rule_type)
    else:
        url = prom_endpoint or settings.prometheus_url
        log = bind_context(source=url)
        if timeout is None:
            timeout = settings.http_timeout
        snapshot = _fetch_snapshot(url, rule_type, timeout)

    log.debug("building_dependency_graph", groups=len(snapshot.groups), rules=snapshot.rule_count)
    graph = build_dependency_graph(
        snapshot.iter_rules(),
        skip_invalid=skip_invalid,
        strict_names=strict_names,
    )

    _write_output(serializer(graph), output_format, output_file)

    if graph.skipped:
        _report_skipped(graph)
        return ExitCode.WARNING

    return ExitCode.SUCCESS


def _fetch_snapshot(url: str, rule_type: Optional[str], timeout: float) -> RulesSnapshot:
    settings = get_settings()
    provider = PrometheusRulesProvider(
        url,
        username=settings.prometheus_username,
        password=settings.prometheus_password,
        timeout=timeout,
        max_retries=settings.http_max_retries,
        backoff_factor=settings.http_retry_backoff_factor,
    )
    return asyncio.run(provider.fetch_rules(rule_type))


def _write_output(output: str, output_format: str, output_file: Optional[str]) -> None:
    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(output)
            f.write("\n")
        info(f"Wrote {output_format} output to {output_file}")
    else:
        # Use print() not console.print(): output is machine-readable
        # and may contain brackets that rich would interpret as markup
        print(output)


def _report_skipped(graph: DependencyGraph) -> None:
    console.print()
    print_table(
        title="Skipped rules",
        columns=["Group", "Rule", "Reason"],
        rows=[[s.group, s.name, s.reason] for s in graph.skipped],
    )
    warning(f"{len(graph.skipped)} rule(s) skipped because their query did not parse")


def register_graph_arguments(parser: argparse.ArgumentParser) -> None:
    """Add graph command options to ``parser``."""
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--prom-endpoint",
        "-p",
        help="Prometheus server endpoint (or set RULEGRAPH_PROMETHEUS_URL; "
        "default: http://localhost:9090)",
    )
    source.add_argument(
        "--rules-file",
        "-r",
        help="Read rules from a Prometheus rule file or saved /api/v1/rules response",
    )
    parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=sorted(SERIALIZERS),
        default="dot",
        help="Output format (default: dot)",
    )
    parser.add_argument(
        "--output",
        "-o",
        dest="output_file",
        help="Write output to file instead of stdout",
    )
    parser.add_argument(
        "--rule-type",
        choices=RULE_TYPES,
        help="Only include recording (record) or alerting (alert) rules",
    )
    parser.add_argument(
        "--skip-invalid",
        action="store_true",
        default=None,
        help="Skip rules whose query fails to parse and report them at the end",
    )
    parser.add_argument(
        "--strict-names",
        action="store_true",
        default=None,
        help="Fail if the same rule name appears more than once",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="HTTP timeout in seconds",
    )


def handle_graph_command(args: argparse.Namespace) -> int:
    """Handle graph command from CLI args."""
    return graph_command(
        prom_endpoint=getattr(args, "prom_endpoint", None),
        rules_file=getattr(args, "rules_file", None),
        output_format=getattr(args, "output_format", "dot"),
        output_file=getattr(args, "output_file", None),
        rule_type=getattr(args, "rule_type", None),
        skip_invalid=getattr(args, "skip_invalid", None),
        strict_names=getattr(args, "strict_names", None),
        timeout=getattr(args, "timeout", None),
    )
