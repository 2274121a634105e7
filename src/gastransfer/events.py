"""Structured solver events and the sinks that receive them."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

_WARN_KINDS = {"boundary_rejected", "residual_rejected", "cache_fallback", "retry"}


@dataclass(frozen=True)
class SolverEvent:
    kind: str
    fields: dict = field(default_factory=dict)


EventSink = Callable[[SolverEvent], None]


def null_sink(event: SolverEvent) -> None:
    return None


class LoggingSink:
    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("gastransfer.solver")

    def __call__(self, event: SolverEvent) -> None:
        level = logging.WARNING if event.kind in _WARN_KINDS else logging.DEBUG
        if not self.logger.isEnabledFor(level):
            return
        detail = "  ".join(f"{k}={v!r}" for k, v in sorted(event.fields.items()))
        self.logger.log(level, "%s  %s", event.kind, detail)


class RecordingSink:
    def __init__(self):
        self.events: list[SolverEvent] = []

    def __call__(self, event: SolverEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [e.kind for e in self.events]

    def of_kind(self, kind: str) -> list[SolverEvent]:
        return [e for e in self.events if e.kind == kind]
