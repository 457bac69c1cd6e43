# src/logging/context.py — v2
"""Contextual logging support — attach request_id, operation and pipeline stage.

Values live in context variables so concurrent requests running on the same
event loop each see their own context.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Snapshot of the current logging context."""

    request_id: str | None = None
    operation: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        operation=_operation.get(),
        stage=_stage.get(),
    )


def set_request_context(request_id: str, operation: str | None = None) -> None:
    """Set request-level context (called once per pipeline invocation)."""
    _request_id.set(request_id)
    _operation.set(operation)


def set_stage(stage: str | None) -> None:
    """Record the pipeline stage currently executing."""
    _stage.set(stage)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _operation.set(None)
    _stage.set(None)
