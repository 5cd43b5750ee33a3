"""Data models for Prometheus rule snapshots."""

from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from rulegraph.core.errors import MalformedSnapshotError

RULE_TYPE_RECORDING = "recording"
RULE_TYPE_ALERTING = "alerting"

# API filter value -> rule ``type`` field
RULE_TYPE_ALIASES = {"record": RULE_TYPE_RECORDING, "alert": RULE_TYPE_ALERTING}


class Rule(BaseModel):
    """A single rule as reported by the Prometheus rules API."""

    name: str = Field(..., description="Recorded series or alert name")
    query: str = Field(..., description="PromQL expression the rule evaluates")
    type: str = Field(RULE_TYPE_RECORDING, description="recording or alerting")
    health: str = Field("unknown", description="Last evaluation health")
    evaluation_time: float = Field(
        0.0, alias="evaluationTime", description="Seconds spent on the last evaluation"
    )
    last_evaluation: Optional[str] = Field(None, alias="lastEvaluation")
    group: str = Field("", description="Name of the enclosing rule group")

    class Config:
        populate_by_name = True


class RuleGroup(BaseModel):
    """A group of rules evaluated together."""

    name: str
    file: str = ""
    interval: Union[float, str, None] = None
    limit: int = 0
    evaluation_time: float = Field(0.0, alias="evaluationTime")
    last_evaluation: Optional[str] = Field(None, alias="lastEvaluation")
    rules: List[Rule] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def _tag_rules(self) -> "RuleGroup":
        for rule in self.rules:
            rule.group = self.name
        return self


class RulesSnapshot(BaseModel):
    """Every rule group known to a Prometheus server at one point in time."""

    groups: List[RuleGroup]

    def iter_rules(self) -> Iterator[Rule]:
        """Yield rules in group order, then rule order within each group."""
        for group in self.groups:
            yield from group.rules

    @property
    def rule_count(self) -> int:
        return sum(len(group.rules) for group in self.groups)

    def filter_type(self, rule_type: str) -> "RulesSnapshot":
        """Return a copy keeping only rules of ``rule_type`` ("record" or "alert").

        Mirrors the ``type`` query parameter of the rules API for snapshots
        that were not fetched from a live server.
        """
        wanted = RULE_TYPE_ALIASES.get(rule_type)
        if wanted is None:
            raise ValueError(f"Unknown rule type: {rule_type!r}")

        groups = [
            group.model_copy(update={"rules": [r for r in group.rules if r.type == wanted]})
            for group in self.groups
        ]
        return RulesSnapshot(groups=[g for g in groups if g.rules])

    @classmethod
    def from_api_response(cls, payload: Any) -> "RulesSnapshot":
        """Build a snapshot from a ``/api/v1/rules`` response body.

        Raises:
            MalformedSnapshotError: If the body is not a successful
                rules response
        """
        if not isinstance(payload, dict):
            raise MalformedSnapshotError(
                "Rules response must be a JSON object",
                details={"received": type(payload).__name__},
            )

        status = payload.get("status")
        if status != "success":
            raise MalformedSnapshotError(
                "Rules response is not successful",
                details={"status": status, "error": payload.get("error")},
            )

        return cls._validate(payload.get("data"))

    @classmethod
    def from_rule_file(cls, document: Any) -> "RulesSnapshot":
        """Build a snapshot from a Prometheus rule file (``groups:`` YAML).

        Rule files carry no evaluation statistics, so every rule gets an
        evaluation time of zero.
        """
        if not isinstance(document, dict) or not isinstance(document.get("groups"), list):
            raise MalformedSnapshotError("Rule file must contain a 'groups' list")

        groups = [_rule_file_group(group, index) for index, group in enumerate(document["groups"])]
        return cls._validate({"groups": groups})

    @classmethod
    def _validate(cls, data: Any) -> "RulesSnapshot":
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise MalformedSnapshotError(
                "Rule snapshot does not match the rule-group shape",
                details={"errors": exc.error_count(), "first_error": _first_error(exc)},
            ) from exc


def _rule_file_group(group: Any, index: int) -> Dict[str, Any]:
    """Translate one rule-file group into the API group shape."""
    if not isinstance(group, dict):
        raise MalformedSnapshotError("Rule group must be a mapping", details={"group_index": index})

    rules = group.get("rules") or []
    if not isinstance(rules, list):
        raise MalformedSnapshotError(
            "Rule group 'rules' must be a list", details={"group": group.get("name")}
        )

    translated = []
    for rule in rules:
        if not isinstance(rule, dict):
            raise MalformedSnapshotError(
                "Rule must be a mapping", details={"group": group.get("name")}
            )
        is_alert = "alert" in rule
        expr = rule.get("expr")
        translated.append(
            {
                "name": rule.get("alert") if is_alert else rule.get("record"),
                "query": str(expr) if expr is not None else None,
                "type": RULE_TYPE_ALERTING if is_alert else RULE_TYPE_RECORDING,
            }
        )

    return {
        "name": group.get("name"),
        "interval": group.get("interval"),
        "limit": group.get("limit", 0),
        "rules": translated,
    }


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}"
