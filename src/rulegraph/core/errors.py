"""
Unified error handling for rulegraph.

This module provides the exception hierarchy, exit codes, and the
error-handling decorator used by the CLI entry point.

Exit Codes:
- 0: Success
- 1: Warning (graph rendered, but some rules were skipped)
- 10: Configuration error
- 11: Rule source unavailable (HTTP/network/file failure)
- 12: Validation error (malformed snapshot, invalid query, duplicate names)
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for the CLI."""

    SUCCESS = 0
    WARNING = 1
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    VALIDATION_ERROR = 12
    UNKNOWN_ERROR = 127


class RuleGraphError(Exception):
    """Base exception for rulegraph errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(RuleGraphError):
    """Raised for invalid settings or conflicting CLI options."""

    exit_code = ExitCode.CONFIG_ERROR


class SourceUnavailableError(RuleGraphError):
    """Raised when the rule snapshot cannot be retrieved."""

    exit_code = ExitCode.PROVIDER_ERROR


class MalformedSnapshotError(RuleGraphError):
    """Raised when a rule document does not have the rule-group shape."""

    exit_code = ExitCode.VALIDATION_ERROR


class QueryParseError(RuleGraphError):
    """Raised when a rule's query is not valid PromQL."""

    exit_code = ExitCode.VALIDATION_ERROR


class DuplicateRuleNameError(RuleGraphError):
    """Raised in strict mode when two rules share a name."""

    exit_code = ExitCode.VALIDATION_ERROR


class RenderError(RuleGraphError):
    """Raised when a dependency graph cannot be serialized."""

    exit_code = ExitCode.UNKNOWN_ERROR
    show_traceback = True


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI main functions that provides unified error handling.

    Catches exceptions and converts them to exit codes, logging each
    failure and printing a human-readable message to stderr.

    Exit codes:
        - RuleGraphError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except RuleGraphError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=int(e.exit_code),
                        **e.details,
                    )
                _print_error(format_error_message(e))
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130  # Standard exit code for SIGINT
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=int(ExitCode.UNKNOWN_ERROR),
                    )
                _print_error(f"Unexpected error: {e}")
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: RuleGraphError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v!r}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg


def _print_error(message: str) -> None:
    from rulegraph.cli.ux import error as print_error

    print_error(message)
