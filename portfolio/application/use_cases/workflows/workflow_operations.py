"""Workflow operations: catalog CRUD and manual ("test") runs."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from portfolio.application.services.change_recorder import history_recorder
from portfolio.application.services.notification_delivery import deliver_notifications
from portfolio.application.services.rule_catalog import (
    ensure_mutable,
    get_system_rules,
    merge_catalog,
)
from portfolio.application.services.workflow_runner import WorkflowRunner
from portfolio.domain.entities import EXECUTION_LOG_LIMIT, WorkflowEntity
from portfolio.domain.enums import WorkflowTrigger
from portfolio.domain.exceptions import ResourceNotFoundException, ValidationException
from portfolio.domain.value_objects import validate_action, validate_condition
from portfolio.shared.telemetry.logging import get_logger
from portfolio.shared.telemetry.tracing import traced
from portfolio.shared.utils.datetime import utc_now, utc_timestamp
from portfolio.shared.utils.generators import generate_prefixed_id

if TYPE_CHECKING:
    from portfolio.application.interfaces.repositories import (
        IInitiativeRepository,
        IWorkflowRepository,
    )
    from portfolio.application.interfaces.services import INotificationService
    from portfolio.domain.entities import ExecutionLog, WorkflowScope
    from portfolio.domain.value_objects import ActionNode, ConditionNode

logger = get_logger(__name__)

# Fields a custom workflow may change through update_workflow.
UPDATABLE_FIELDS = frozenset({
    "name",
    "description",
    "trigger",
    "trigger_config",
    "scope",
    "condition",
    "action",
    "enabled",
})


def _validate_definition(
    name: str | None,
    trigger: str | None,
    action: ActionNode | None,
    condition: ConditionNode | None,
) -> None:
    if name is not None and not name.strip():
        raise ValidationException("Workflow name must not be blank", field="name")
    if trigger is not None and trigger not in WorkflowTrigger.values():
        raise ValidationException(
            f"Unknown trigger {trigger!r}; expected one of {WorkflowTrigger.values()}",
            field="trigger",
        )
    if action is not None:
        try:
            validate_action(action)
        except ValueError as e:
            raise ValidationException(str(e), field="action") from e
    if condition is not None:
        try:
            validate_condition(condition)
        except ValueError as e:
            raise ValidationException(str(e), field="condition") from e


class WorkflowService:
    """Manage the workflow catalog (system rules + custom workflows) and run workflows on demand.

    Custom workflows are loaded and saved as a whole collection; every
    read-modify-write holds ``lock`` so concurrent requests do not interleave.
    """

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        initiative_repo: IInitiativeRepository,
        runner: WorkflowRunner | None = None,
        notification_service: INotificationService | None = None,
        *,
        lock: asyncio.Lock | None = None,
        execution_log_limit: int = EXECUTION_LOG_LIMIT,
    ) -> None:
        self.workflow_repo = workflow_repo
        self.initiative_repo = initiative_repo
        self.runner = runner or WorkflowRunner()
        self.notification_service = notification_service
        self.lock = lock or asyncio.Lock()
        self.execution_log_limit = execution_log_limit

    async def _catalog(self) -> list[WorkflowEntity]:
        custom = await self.workflow_repo.list_workflows()
        return merge_catalog(get_system_rules(), custom)

    async def _find(self, workflow_id: str) -> WorkflowEntity:
        for workflow in await self._catalog():
            if workflow.id == workflow_id:
                return workflow
        raise ResourceNotFoundException("workflow", workflow_id)

    @staticmethod
    def _index_of(custom: list[WorkflowEntity], workflow_id: str) -> int:
        for i, workflow in enumerate(custom):
            if workflow.id == workflow_id:
                return i
        raise ResourceNotFoundException("workflow", workflow_id)

    async def _mutable_custom(
        self, workflow_id: str, operation: str
    ) -> tuple[list[WorkflowEntity], int]:
        """Load custom workflows and locate ``workflow_id``; system rules are rejected."""
        for rule in get_system_rules():
            if rule.id == workflow_id:
                ensure_mutable(rule, operation)
        custom = await self.workflow_repo.list_workflows()
        index = self._index_of(custom, workflow_id)
        ensure_mutable(custom[index], operation)
        return custom, index

    async def list_workflows(self, search: str | None = None) -> list[WorkflowEntity]:
        """Return the merged catalog, optionally filtered by name/description (case-insensitive)."""
        catalog = await self._catalog()
        if not search or not search.strip():
            return catalog
        needle = search.strip().lower()
        return [
            w
            for w in catalog
            if needle in w.name.lower() or needle in (w.description or "").lower()
        ]

    async def get_workflow(self, workflow_id: str) -> WorkflowEntity:
        """Return a system rule or custom workflow; raise ResourceNotFoundException if absent."""
        return await self._find(workflow_id)

    @traced("workflow.create")
    async def create_workflow(
        self,
        name: str,
        trigger: str,
        action: ActionNode,
        actor_id: str,
        *,
        description: str | None = None,
        trigger_config: dict[str, Any] | None = None,
        scope: WorkflowScope | None = None,
        condition: ConditionNode | None = None,
        enabled: bool = True,
    ) -> WorkflowEntity:
        _validate_definition(name, trigger, action, condition)
        workflow = WorkflowEntity(
            id=generate_prefixed_id("wf"),
            name=name.strip(),
            description=description,
            trigger=trigger,
            trigger_config=dict(trigger_config or {}),
            scope=scope,
            condition=condition,
            action=action,
            enabled=enabled,
            created_by=actor_id,
            created_at=utc_timestamp(),
        )
        async with self.lock:
            custom = await self.workflow_repo.list_workflows()
            custom.append(workflow)
            await self.workflow_repo.save_workflows(custom)
        logger.info("Workflow %s (%s) created by %s", workflow.id, workflow.name, actor_id)
        return workflow

    @traced("workflow.update")
    async def update_workflow(
        self, workflow_id: str, changes: dict[str, Any]
    ) -> WorkflowEntity:
        """Apply ``changes`` (subset of UPDATABLE_FIELDS) to a custom workflow."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        if "action" in changes and changes["action"] is None:
            raise ValidationException("Workflow action is required", field="action")
        _validate_definition(
            changes.get("name"),
            changes.get("trigger"),
            changes.get("action"),
            changes.get("condition"),
        )
        async with self.lock:
            custom, index = await self._mutable_custom(workflow_id, "edit")
            workflow = custom[index]
            for key, value in changes.items():
                if key == "name":
                    value = value.strip()
                elif key == "trigger_config":
                    value = dict(value or {})
                setattr(workflow, key, value)
            await self.workflow_repo.save_workflows(custom)
        logger.info("Workflow %s updated (%s)", workflow_id, ", ".join(sorted(changes)))
        return workflow

    async def toggle_workflow(self, workflow_id: str) -> WorkflowEntity:
        """Flip ``enabled`` on a custom workflow."""
        async with self.lock:
            custom, index = await self._mutable_custom(workflow_id, "toggle")
            workflow = custom[index]
            workflow.enabled = not workflow.enabled
            await self.workflow_repo.save_workflows(custom)
        logger.info("Workflow %s %s", workflow_id, "enabled" if workflow.enabled else "disabled")
        return workflow

    async def delete_workflow(self, workflow_id: str) -> None:
        async with self.lock:
            custom, index = await self._mutable_custom(workflow_id, "delete")
            del custom[index]
            await self.workflow_repo.save_workflows(custom)
        logger.info("Workflow %s deleted", workflow_id)

    async def duplicate_workflow(self, workflow_id: str, actor_id: str) -> WorkflowEntity:
        """Copy a custom workflow as "<name> (Copy)" with a fresh id and empty run history."""
        async with self.lock:
            custom, index = await self._mutable_custom(workflow_id, "duplicate")
            source = custom[index]
            copy = replace(
                source,
                id=generate_prefixed_id("wf"),
                name=f"{source.name} (Copy)",
                trigger_config=dict(source.trigger_config),
                created_by=actor_id,
                created_at=utc_timestamp(),
                last_run=None,
                run_count=0,
                execution_log=[],
            )
            custom.append(copy)
            await self.workflow_repo.save_workflows(custom)
        logger.info("Workflow %s duplicated as %s", workflow_id, copy.id)
        return copy

    async def get_executions(self, workflow_id: str) -> list[ExecutionLog]:
        """Return the stored run logs, newest last (always empty for system rules)."""
        workflow = await self._find(workflow_id)
        return list(workflow.execution_log)

    @traced("workflow.run")
    async def run_workflow(self, workflow_id: str, actor_id: str) -> ExecutionLog:
        """Run a workflow over every initiative now.

        The engine works on copies. Initiatives are saved back only when at
        least one was affected. Custom workflows get the run appended to
        their execution log; system rules keep no history. Notifications are
        delivered after the lock is released.
        """
        now = utc_now()
        async with self.lock:
            workflow = await self._find(workflow_id)
            stored = await self.initiative_repo.list_initiatives()
            working = [initiative.snapshot() for initiative in stored]
            log = await self.runner.execute(
                workflow, working, history_recorder(actor_id, now), now=now
            )
            if log.initiatives_affected:
                await self.initiative_repo.save_initiatives(working)
            if not workflow.system:
                custom = await self.workflow_repo.list_workflows()
                index = self._index_of(custom, workflow_id)
                custom[index].record_run(
                    log, utc_timestamp(now), limit=self.execution_log_limit
                )
                await self.workflow_repo.save_workflows(custom)

        delivered = await deliver_notifications(self.notification_service, log.notifications)
        logger.info(
            "Workflow %s run by %s: %d affected, %d errors, %d notifications sent",
            workflow_id,
            actor_id,
            len(log.initiatives_affected),
            len(log.errors),
            delivered,
        )
        return log
