"""Workflow runner: scope, filter and execute one workflow over a batch of initiatives."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from portfolio.application.services.action_executor import apply_action
from portfolio.application.services.condition_evaluator import evaluate_condition
from portfolio.application.services.scope_filter import filter_by_scope
from portfolio.domain.entities import ExecutionLog
from portfolio.domain.value_objects import NotificationRequest, action_type_name
from portfolio.shared.telemetry.logging import get_logger
from portfolio.shared.telemetry.tracing import add_span_attributes, add_span_event, traced
from portfolio.shared.utils.datetime import utc_now, utc_timestamp
from portfolio.shared.utils.generators import generate_prefixed_id

if TYPE_CHECKING:
    from portfolio.application.interfaces.services import RecordChange
    from portfolio.domain.entities import Initiative, WorkflowEntity

logger = get_logger(__name__)


class WorkflowRunner:
    """Runs a workflow against initiatives and reports what happened as an ExecutionLog.

    Initiatives are mutated in place; callers that need to discard changes
    pass copies. A failure on one initiative is recorded and the batch
    continues. A failure while scoping or filtering aborts the run with a
    single error entry and no affected initiatives.
    """

    @traced("workflow.execute")
    async def execute(
        self,
        workflow: WorkflowEntity,
        initiatives: Sequence[Initiative],
        record_change: RecordChange,
        *,
        now: datetime | None = None,
    ) -> ExecutionLog:
        reference = now or utc_now()
        affected: list[str] = []
        actions_taken: list[str] = []
        errors: list[str] = []
        notifications: list[NotificationRequest] = []

        add_span_attributes(
            workflow_id=workflow.id,
            workflow_trigger=workflow.trigger,
            initiatives_total=len(initiatives),
        )
        logger.info(
            "Running workflow %s (%s) over %d initiatives",
            workflow.id,
            workflow.name,
            len(initiatives),
        )

        try:
            scoped = filter_by_scope(initiatives, workflow.scope)
            if workflow.condition is None:
                targets = list(scoped)
            else:
                targets = [
                    initiative
                    for initiative in scoped
                    if evaluate_condition(workflow.condition, initiative, now=reference)
                ]

            action_name = action_type_name(workflow.action)
            for initiative in targets:
                pending: list[NotificationRequest] = []
                try:
                    apply_action(
                        workflow.action,
                        initiative,
                        record_change,
                        notify=pending.append,
                        now=reference,
                    )
                except Exception as e:
                    # Notifications from a failed initiative are dropped.
                    logger.warning(
                        "Workflow %s failed on initiative %s: %s",
                        workflow.id,
                        initiative.id,
                        e,
                    )
                    add_span_event(
                        "workflow.initiative_failed",
                        {"initiative_id": initiative.id, "error": type(e).__name__},
                    )
                    errors.append(f"Error processing {initiative.title}: {e}")
                else:
                    affected.append(initiative.id)
                    actions_taken.append(f'Applied {action_name} to "{initiative.title}"')
                    actions_taken.extend(request.describe() for request in pending)
                    notifications.extend(pending)
                await asyncio.sleep(0)
        except Exception as e:
            logger.exception("Workflow %s aborted", workflow.id)
            affected = []
            actions_taken = []
            notifications = []
            errors = [f"Workflow execution error: {e}"]

        add_span_attributes(
            initiatives_affected=len(affected),
            workflow_errors=len(errors),
        )
        logger.info(
            "Workflow %s finished: %d affected, %d errors",
            workflow.id,
            len(affected),
            len(errors),
        )
        return ExecutionLog(
            id=generate_prefixed_id("log"),
            workflow_id=workflow.id,
            timestamp=utc_timestamp(reference),
            initiatives_affected=tuple(affected),
            actions_taken=tuple(actions_taken),
            errors=tuple(errors),
            notifications=tuple(notifications),
        )
