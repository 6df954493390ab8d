"""Workflow domain entity.

A workflow is a rule: trigger + optional scope + optional condition tree +
action tree. Custom workflows are persisted and editable; system workflows
are generated in code on every catalog read, always enabled and read-only.
Each custom workflow keeps the last EXECUTION_LOG_LIMIT run logs.
"""

from dataclasses import dataclass, field, replace
from typing import Any

from portfolio.domain.exceptions import SystemRuleReadOnlyException
from portfolio.domain.value_objects.actions import ActionNode
from portfolio.domain.value_objects.conditions import ConditionNode
from portfolio.domain.value_objects.notification import NotificationRequest

EXECUTION_LOG_LIMIT = 10

SYSTEM_ACTOR = "system"


@dataclass(frozen=True)
class WorkflowScope:
    """Pre-filter narrowing which initiatives a workflow considers.

    Each present filter is a collection of allowed values; absent (None)
    filters are ignored. All present filters must match.
    """

    asset_classes: list[str] | None = None
    work_types: list[str] | None = None
    owners: list[str] | None = None


@dataclass(frozen=True)
class ExecutionLog:
    """Result of one run: affected initiative ids, action descriptions, and errors."""

    id: str
    workflow_id: str
    timestamp: str
    initiatives_affected: tuple[str, ...] = ()
    actions_taken: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    notifications: tuple[NotificationRequest, ...] = field(default=(), compare=False)

    def without_notifications(self) -> "ExecutionLog":
        """Copy suitable for persistence (pending notifications are not stored)."""
        return replace(self, notifications=())


@dataclass
class WorkflowEntity:
    """Domain entity for a workflow definition and its run history."""

    id: str
    name: str
    trigger: str
    action: ActionNode
    description: str | None = None
    trigger_config: dict[str, Any] = field(default_factory=dict)
    scope: WorkflowScope | None = None
    condition: ConditionNode | None = None
    enabled: bool = True
    system: bool = False
    read_only: bool = False
    created_by: str = SYSTEM_ACTOR
    created_at: str = ""
    last_run: str | None = None
    run_count: int = 0
    execution_log: list[ExecutionLog] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.system:
            self.enabled = True
            self.read_only = True

    @property
    def is_mutable(self) -> bool:
        """False for system rules (and anything flagged read-only)."""
        return not (self.system or self.read_only)

    def ensure_mutable(self, operation: str) -> None:
        """Raise SystemRuleReadOnlyException if this workflow cannot be changed."""
        if not self.is_mutable:
            raise SystemRuleReadOnlyException(self.id, operation)

    def can_trigger_on(self, trigger: str) -> bool:
        """Return whether this workflow is enabled and listens on the given trigger."""
        return self.enabled and self.trigger == trigger

    def record_run(
        self,
        log: ExecutionLog,
        ran_at: str,
        limit: int = EXECUTION_LOG_LIMIT,
    ) -> None:
        """Append a run log (keeping the newest ``limit``), bump run_count and last_run.

        Raises:
            SystemRuleReadOnlyException: System rules have no storage slot.
        """
        self.ensure_mutable("record_run")
        self.execution_log = [*self.execution_log, log.without_notifications()][-limit:]
        self.run_count += 1
        self.last_run = ran_at

    def record_triggered_run(self, ran_at: str) -> None:
        """Bump run_count and last_run for an event-dispatched run (log not kept)."""
        self.ensure_mutable("record_run")
        self.run_count += 1
        self.last_run = ran_at
