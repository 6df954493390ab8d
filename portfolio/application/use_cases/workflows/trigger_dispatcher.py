"""Trigger dispatcher: run field-change workflows when an initiative is edited.

Only field-change style triggers are dispatched here. Schedule,
condition-met and on-create triggers have no dispatcher.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

from portfolio.application.dtos import TriggeredRun
from portfolio.application.services.workflow_runner import WorkflowRunner
from portfolio.domain.enums import WorkflowTrigger
from portfolio.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from portfolio.application.interfaces.services import RecordChange
    from portfolio.domain.entities import Initiative, WorkflowEntity

logger = get_logger(__name__)

# Dedicated triggers and the initiative fields that fire them.
FIELD_TRIGGERS: dict[str, frozenset[str]] = {
    WorkflowTrigger.ON_STATUS_CHANGE.value: frozenset({"status"}),
    WorkflowTrigger.ON_ETA_CHANGE.value: frozenset({"eta"}),
    WorkflowTrigger.ON_EFFORT_CHANGE.value: frozenset({"actual_effort", "estimated_effort"}),
}


def listens_to_field(workflow: WorkflowEntity, field: str) -> bool:
    """True if an enabled workflow fires when ``field`` changes."""
    if workflow.can_trigger_on(WorkflowTrigger.ON_FIELD_CHANGE.value):
        fields = workflow.trigger_config.get("fields") or ()
        return isinstance(fields, (list, tuple, set, frozenset)) and field in fields
    return any(
        workflow.can_trigger_on(trigger)
        for trigger, fields in FIELD_TRIGGERS.items()
        if field in fields
    )


class TriggerDispatcher:
    """Select and run the workflows that listen on a changed initiative field."""

    def __init__(self, runner: WorkflowRunner | None = None) -> None:
        self.runner = runner or WorkflowRunner()

    def workflows_for_field_change(
        self, workflows: Iterable[WorkflowEntity], field: str
    ) -> list[WorkflowEntity]:
        return [w for w in workflows if listens_to_field(w, field)]

    async def dispatch_field_change(
        self,
        initiative: Initiative,
        field: str,
        workflows: Iterable[WorkflowEntity],
        record_change: RecordChange,
        *,
        now: datetime | None = None,
    ) -> list[TriggeredRun]:
        """Run each selected workflow, in catalog order, against ``initiative`` alone.

        Each workflow sees the changes made by the ones before it.
        """
        runs: list[TriggeredRun] = []
        for workflow in self.workflows_for_field_change(workflows, field):
            log = await self.runner.execute(workflow, [initiative], record_change, now=now)
            logger.info(
                "Field change %s on initiative %s triggered workflow %s",
                field,
                initiative.id,
                workflow.id,
            )
            runs.append(TriggeredRun(workflow_id=workflow.id, workflow_name=workflow.name, log=log))
        return runs
