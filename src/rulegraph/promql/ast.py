"""
Expression tree for parsed PromQL queries.

The parser adapter converts whatever tree the underlying PromQL library
produces into these node variants, so dependency extraction only ever
sees this model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

METRIC_NAME_LABEL = "__name__"


@dataclass(frozen=True)
class Matcher:
    """A label matcher inside a vector selector."""

    name: str
    value: str
    op: str = "="


@dataclass(frozen=True)
class Operator:
    """Binary operation between two sub-expressions."""

    left: Node
    op: str
    right: Node


@dataclass(frozen=True)
class Vector:
    """Instant or range vector selector."""

    matchers: tuple[Matcher, ...] = field(default_factory=tuple)
    range: str | None = None  # e.g. "5m" for range vectors

    @property
    def metric_names(self) -> list[str]:
        """Values of every ``__name__`` matcher, in matcher order."""
        return [m.value for m in self.matchers if m.name == METRIC_NAME_LABEL]


@dataclass(frozen=True)
class Scalar:
    """Numeric literal."""

    value: float


@dataclass(frozen=True)
class String:
    """String literal."""

    value: str


@dataclass(frozen=True)
class Function:
    """Function call or aggregation."""

    name: str
    aggregation: bool = False
    args: tuple[Node, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Negation:
    """Unary minus applied to a sub-expression."""

    child: Node


Node = Union[Operator, Vector, Scalar, String, Function, Negation]
