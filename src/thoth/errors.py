"""Failure contracts.

Operations return plain values on success and raise ThothError on expected
validation, dependency, or I/O failures. Wrapped git/dvc/docker commands do
not raise when the tool itself fails; they warn and return ``False``.
Programmer bugs raise normal exceptions.
"""

from __future__ import annotations

from typing import Literal

FailureCode = Literal[
    "validation_failed",
    "dependency_missing",
    "io_failed",
]


class ThothError(Exception):
    """Expected failure: validation, missing dependency, or I/O error.

    Use ``raise ThothError(...) from exc`` to chain a causing exception; it is
    available as ``__cause__``. The CLI catches ThothError and exits with the
    message and recovery hint.
    """

    def __init__(
        self,
        code: FailureCode,
        message: str,
        *,
        recovery_hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.recovery_hint = recovery_hint


class ValidationFailedError(ThothError):
    """Validation failed (invalid input, constraint violation)."""

    def __init__(self, message: str, *, recovery_hint: str | None = None) -> None:
        super().__init__("validation_failed", message, recovery_hint=recovery_hint)


class ToolMissingError(ThothError):
    """A required external tool is not installed."""

    def __init__(
        self, tool: str, message: str, *, recovery_hint: str | None = None
    ) -> None:
        super().__init__("dependency_missing", message, recovery_hint=recovery_hint)
        self.tool = tool


class DecisionLogError(ThothError):
    """Decision tree file is missing, unreadable, or malformed."""

    def __init__(self, message: str, *, recovery_hint: str | None = None) -> None:
        super().__init__("io_failed", message, recovery_hint=recovery_hint)
