"""Rule catalog: built-in system rules and merging them with custom workflows.

System rules live in code. They are rebuilt on every read, never stored,
and never carry a persisted run history.
"""

from collections.abc import Iterable
from datetime import datetime

from portfolio.domain.entities import SYSTEM_ACTOR, WorkflowEntity
from portfolio.domain.enums import Status, WorkflowTrigger
from portfolio.domain.value_objects.actions import NotifyOwner, SetStatus
from portfolio.domain.value_objects.conditions import (
    ActualEffortGreaterThan,
    And,
    DueDatePassed,
    LastUpdatedOlderThan,
    StatusEquals,
    StatusNotEquals,
)
from portfolio.shared.utils.datetime import utc_timestamp

AUTO_AT_RISK_ID = "system-auto-at-risk"
EFFORT_TRANSITION_ID = "system-effort-transition"
WEEKLY_REMINDER_ID = "system-weekly-reminder"

WEEKLY_REMINDER_MESSAGE = (
    "Please update your initiative status, effort, and ETA by Thursday EoD "
    "as part of the weekly update routine."
)


def get_system_rules(now: datetime | None = None) -> list[WorkflowEntity]:
    """Build the system rules. Each call returns new, independent objects."""
    created_at = utc_timestamp(now)
    return [
        WorkflowEntity(
            id=AUTO_AT_RISK_ID,
            name="Auto At-Risk Detection",
            description="Automatically mark initiatives as at risk when due date has passed",
            trigger=WorkflowTrigger.ON_SCHEDULE.value,
            trigger_config={"schedule": "daily", "time": "09:00"},
            condition=And(
                children=(
                    DueDatePassed(),
                    StatusNotEquals(value=Status.DONE.value),
                    StatusNotEquals(value=Status.AT_RISK.value),
                )
            ),
            action=SetStatus(value=Status.AT_RISK.value),
            system=True,
            created_by=SYSTEM_ACTOR,
            created_at=created_at,
        ),
        WorkflowEntity(
            id=EFFORT_TRANSITION_ID,
            name="Effort-Based Status Transition",
            description="Transition to In Progress when actual effort is logged",
            trigger=WorkflowTrigger.ON_EFFORT_CHANGE.value,
            condition=And(
                children=(
                    ActualEffortGreaterThan(value=0),
                    StatusEquals(value=Status.NOT_STARTED.value),
                )
            ),
            action=SetStatus(value=Status.IN_PROGRESS.value),
            system=True,
            created_by=SYSTEM_ACTOR,
            created_at=created_at,
        ),
        WorkflowEntity(
            id=WEEKLY_REMINDER_ID,
            name="Weekly Update Reminder",
            description="Remind team leads to update their initiatives by Thursday EoD",
            trigger=WorkflowTrigger.ON_SCHEDULE.value,
            trigger_config={"schedule": "weekly", "time": "17:00"},
            condition=And(
                children=(
                    LastUpdatedOlderThan(days=7),
                    StatusNotEquals(value=Status.DONE.value),
                )
            ),
            action=NotifyOwner(message=WEEKLY_REMINDER_MESSAGE),
            system=True,
            created_by=SYSTEM_ACTOR,
            created_at=created_at,
        ),
    ]


def merge_catalog(
    system_rules: Iterable[WorkflowEntity],
    custom_workflows: Iterable[WorkflowEntity],
) -> list[WorkflowEntity]:
    """System rules first, then custom workflows; relative order kept within each group."""
    combined = [*system_rules, *custom_workflows]
    return sorted(combined, key=lambda workflow: 0 if workflow.system else 1)


def ensure_mutable(workflow: WorkflowEntity, operation: str) -> None:
    """Raise SystemRuleReadOnlyException when ``operation`` targets a system rule."""
    workflow.ensure_mutable(operation)
