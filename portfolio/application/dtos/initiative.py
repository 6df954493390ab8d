"""DTOs for initiative edits and the workflows they trigger."""

from __future__ import annotations

from dataclasses import dataclass, field

from portfolio.domain.entities import ExecutionLog, Initiative


@dataclass(frozen=True)
class TriggeredRun:
    """One workflow dispatched by a field change, with its run log."""

    workflow_id: str
    workflow_name: str
    log: ExecutionLog


@dataclass(frozen=True)
class FieldChangeResult:
    """Initiative after a field edit and any workflows that edit triggered."""

    initiative: Initiative
    changed: bool
    triggered: list[TriggeredRun] = field(default_factory=list)
