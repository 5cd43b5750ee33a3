"""
Load rule snapshots from disk.

Accepts either a Prometheus rule file (``groups:`` YAML) or a saved
``/api/v1/rules`` response (JSON or YAML).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from rulegraph.core.errors import MalformedSnapshotError, SourceUnavailableError
from rulegraph.rules.models import RulesSnapshot

logger = structlog.get_logger()


def load_rules_file(path: str | Path) -> RulesSnapshot:
    """
    Load a rule snapshot from a file.

    Args:
        path: Path to a rule file or saved rules API response

    Returns:
        Parsed RulesSnapshot

    Raises:
        SourceUnavailableError: If the file cannot be read
        MalformedSnapshotError: If the content is not a rule document
    """
    file_path = Path(path)

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceUnavailableError(
            f"Cannot read rules file: {exc.strerror or exc}",
            details={"path": str(file_path)},
        ) from exc

    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise MalformedSnapshotError(
            f"Rules file is not valid YAML/JSON: {exc}",
            details={"path": str(file_path)},
        ) from exc

    snapshot = parse_rules_document(document)
    logger.info(
        "rules_loaded",
        path=str(file_path),
        groups=len(snapshot.groups),
        rules=snapshot.rule_count,
    )
    return snapshot


def parse_rules_document(document: Any) -> RulesSnapshot:
    """Detect the document flavour and build a snapshot from it."""
    if isinstance(document, dict) and ("status" in document or "data" in document):
        return RulesSnapshot.from_api_response(document)
    if isinstance(document, dict) and "groups" in document:
        return RulesSnapshot.from_rule_file(document)

    raise MalformedSnapshotError(
        "Document is neither a rules API response nor a rule file",
        details={"received": type(document).__name__},
    )
