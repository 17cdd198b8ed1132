# src/logging/context.py - v2
"""Contextual logging support: attach surface, generation and operation to records.

The orchestrator sets the surface once per instance and the generation/operation
pair for every request it issues, so stale-response drops can be traced back
to the keystroke or submission that superseded them.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_surface: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "surface", default=None
)
_generation: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "generation", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    surface: str | None = None
    generation: int | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        surface=_surface.get(),
        generation=_generation.get(),
        operation=_operation.get(),
    )


def set_surface_context(surface: str) -> None:
    """Set the search surface identifier (one per orchestrator)."""
    _surface.set(surface)


def set_operation_context(operation: str, generation: int | None = None) -> None:
    """Set the request being processed (suggest, submit, sweep...)."""
    _operation.set(operation)
    _generation.set(generation)


def clear_context() -> None:
    """Reset all context variables."""
    _surface.set(None)
    _generation.set(None)
    _operation.set(None)
