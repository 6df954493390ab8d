"""Tests for field-change trigger selection and dispatch."""

from datetime import UTC, datetime

import pytest

from portfolio.application.use_cases.workflows import TriggerDispatcher
from portfolio.application.use_cases.workflows.trigger_dispatcher import listens_to_field
from portfolio.domain.entities import WorkflowEntity
from portfolio.domain.enums import WorkflowTrigger
from portfolio.domain.value_objects.actions import CreateComment, SetPriority
from portfolio.domain.value_objects.conditions import PriorityEquals

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=UTC)


def _workflow(workflow_id: str, trigger: str, action=None, **overrides) -> WorkflowEntity:
    return WorkflowEntity(
        id=workflow_id,
        name=workflow_id,
        trigger=trigger,
        action=action or CreateComment(message="changed"),
        **overrides,
    )


@pytest.mark.parametrize(
    ("trigger", "field", "expected"),
    [
        (WorkflowTrigger.ON_STATUS_CHANGE.value, "status", True),
        (WorkflowTrigger.ON_STATUS_CHANGE.value, "eta", False),
        (WorkflowTrigger.ON_ETA_CHANGE.value, "eta", True),
        (WorkflowTrigger.ON_EFFORT_CHANGE.value, "actual_effort", True),
        (WorkflowTrigger.ON_EFFORT_CHANGE.value, "estimated_effort", True),
        (WorkflowTrigger.ON_SCHEDULE.value, "status", False),
        (WorkflowTrigger.ON_CREATE.value, "status", False),
    ],
)
def test_listens_to_field(trigger, field, expected) -> None:
    assert listens_to_field(_workflow("wf", trigger), field) is expected


def test_generic_field_change_uses_configured_fields() -> None:
    workflow = _workflow(
        "wf",
        WorkflowTrigger.ON_FIELD_CHANGE.value,
        trigger_config={"fields": ["owner_id", "priority"]},
    )
    assert listens_to_field(workflow, "owner_id") is True
    assert listens_to_field(workflow, "status") is False
    misconfigured = _workflow(
        "wf", WorkflowTrigger.ON_FIELD_CHANGE.value, trigger_config={"fields": "owner_id"}
    )
    assert listens_to_field(misconfigured, "owner_id") is False


def test_disabled_workflow_does_not_listen() -> None:
    workflow = _workflow("wf", WorkflowTrigger.ON_STATUS_CHANGE.value, enabled=False)
    assert listens_to_field(workflow, "status") is False
    generic = _workflow(
        "wf",
        WorkflowTrigger.ON_FIELD_CHANGE.value,
        trigger_config={"fields": ["status"]},
        enabled=False,
    )
    assert listens_to_field(generic, "status") is False


async def test_dispatch_runs_in_catalog_order_and_chains_changes(make_initiative) -> None:
    escalate = _workflow(
        "wf_escalate", WorkflowTrigger.ON_STATUS_CHANGE.value, action=SetPriority(value="P0")
    )
    announce = _workflow(
        "wf_announce",
        WorkflowTrigger.ON_STATUS_CHANGE.value,
        action=CreateComment(message="Escalated to P0"),
        condition=PriorityEquals(value="P0"),
    )
    unrelated = _workflow("wf_eta", WorkflowTrigger.ON_ETA_CHANGE.value)
    initiative = make_initiative(priority="P1")
    changes = []

    runs = await TriggerDispatcher().dispatch_field_change(
        initiative,
        "status",
        [escalate, unrelated, announce],
        lambda *args: changes.append(args[1:]),
        now=NOW,
    )

    assert [run.workflow_id for run in runs] == ["wf_escalate", "wf_announce"]
    assert runs[1].log.initiatives_affected == (initiative.id,)
    assert initiative.priority == "P0"
    assert [c.text for c in initiative.comments] == ["[Automated] Escalated to P0"]
    assert changes == [("Priority", "P1", "P0")]


async def test_dispatch_without_listeners(make_initiative) -> None:
    workflow = _workflow("wf", WorkflowTrigger.ON_SCHEDULE.value)
    runs = await TriggerDispatcher().dispatch_field_change(
        make_initiative(), "status", [workflow], lambda *args: None, now=NOW
    )
    assert runs == []
