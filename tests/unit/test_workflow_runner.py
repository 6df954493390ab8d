"""Tests for WorkflowRunner.execute: phases, per-initiative isolation, run-level errors."""

from datetime import UTC, datetime

import pytest

from portfolio.application.services.rule_catalog import get_system_rules
from portfolio.application.services.workflow_runner import WorkflowRunner
from portfolio.domain.entities import WorkflowEntity, WorkflowScope
from portfolio.domain.enums import Status, WorkflowTrigger
from portfolio.domain.value_objects.actions import (
    ExecuteMultiple,
    NotifyOwner,
    SetStatus,
    TransitionStatus,
    UnknownAction,
)
from portfolio.domain.value_objects.conditions import StatusEquals

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=UTC)


def _workflow(action, condition=None, scope=None) -> WorkflowEntity:
    return WorkflowEntity(
        id="wf_test",
        name="Test workflow",
        trigger=WorkflowTrigger.ON_SCHEDULE.value,
        action=action,
        condition=condition,
        scope=scope,
    )


@pytest.fixture
def runner() -> WorkflowRunner:
    return WorkflowRunner()


@pytest.fixture
def changes() -> list:
    return []


@pytest.fixture
def record_change(changes):
    def _record(initiative, field, old_value, new_value) -> None:
        changes.append((initiative.id, field, old_value, new_value))

    return _record


async def test_auto_at_risk_marks_only_overdue_open_work(
    runner, record_change, changes, make_initiative
) -> None:
    auto_at_risk = get_system_rules(NOW)[0]
    overdue = make_initiative(title="A", eta="2025-06-10", status=Status.IN_PROGRESS.value)
    done = make_initiative(title="B", eta="2025-06-10", status=Status.DONE.value)
    future = make_initiative(title="C", eta="2025-07-01", status=Status.IN_PROGRESS.value)

    log = await runner.execute(auto_at_risk, [overdue, done, future], record_change, now=NOW)

    assert log.initiatives_affected == (overdue.id,)
    assert log.actions_taken == ('Applied set_status to "A"',)
    assert log.errors == ()
    assert overdue.status == Status.AT_RISK.value
    assert done.status == Status.DONE.value
    assert changes == [(overdue.id, "Status", "In Progress", "At Risk")]


async def test_transition_only_in_progress_work(runner, record_change, make_initiative) -> None:
    in_progress = make_initiative(status=Status.IN_PROGRESS.value)
    done = make_initiative(status=Status.DONE.value)
    workflow = _workflow(TransitionStatus(), condition=StatusEquals(value="In Progress"))

    log = await runner.execute(workflow, [in_progress, done], record_change, now=NOW)

    assert log.initiatives_affected == (in_progress.id,)
    assert in_progress.status == Status.AT_RISK.value
    assert done.status == Status.DONE.value


async def test_one_failing_initiative_does_not_stop_the_batch(
    runner, record_change, make_initiative
) -> None:
    first = make_initiative(title="A", status=Status.NOT_STARTED.value)
    broken = make_initiative(title="B", status="Paused")
    last = make_initiative(title="C", status=Status.IN_PROGRESS.value)

    log = await runner.execute(_workflow(TransitionStatus()), [first, broken, last], record_change, now=NOW)

    assert log.initiatives_affected == (first.id, last.id)
    assert len(log.errors) == 1
    assert log.errors[0].startswith("Error processing B: transition_status:")
    assert first.status == Status.IN_PROGRESS.value
    assert last.status == Status.AT_RISK.value


async def test_malformed_scope_aborts_run_without_changes(
    runner, record_change, changes, make_initiative
) -> None:
    initiative = make_initiative(status=Status.IN_PROGRESS.value)
    workflow = _workflow(SetStatus(value="Done"), scope=WorkflowScope(owners="u_owner"))

    log = await runner.execute(workflow, [initiative], record_change, now=NOW)

    assert log.initiatives_affected == ()
    assert log.actions_taken == ()
    assert len(log.errors) == 1
    assert log.errors[0].startswith("Workflow execution error: ")
    assert initiative.status == Status.IN_PROGRESS.value
    assert changes == []


async def test_no_condition_targets_whole_scope(runner, record_change, make_initiative) -> None:
    initiatives = [make_initiative(owner_id="u_dana"), make_initiative(owner_id="u_lee")]
    workflow = _workflow(SetStatus(value="Done"), scope=WorkflowScope(owners=["u_lee"]))

    log = await runner.execute(workflow, initiatives, record_change, now=NOW)

    assert log.initiatives_affected == (initiatives[1].id,)
    assert initiatives[0].status == Status.NOT_STARTED.value


async def test_notifications_are_described_and_collected(runner, record_change, make_initiative) -> None:
    initiative = make_initiative(title="A", owner_id="u_dana")

    log = await runner.execute(_workflow(NotifyOwner(message="Update please")), [initiative], record_change, now=NOW)

    assert log.actions_taken == (
        'Applied notify_owner to "A"',
        'Notified owner u_dana about "A"',
    )
    assert [n.target for n in log.notifications] == ["u_dana"]


async def test_notifications_from_failed_initiative_are_dropped(
    runner, record_change, make_initiative
) -> None:
    initiative = make_initiative(title="A")
    action = ExecuteMultiple(actions=(NotifyOwner(), UnknownAction(raw_type="set_asset_class")))

    log = await runner.execute(_workflow(action), [initiative], record_change, now=NOW)

    assert log.initiatives_affected == ()
    assert log.notifications == ()
    assert log.errors == ("Error processing A: set_asset_class: unsupported action type",)


async def test_log_identity_and_timestamp(runner, record_change, make_initiative) -> None:
    workflow = _workflow(SetStatus(value="Done"), condition=StatusEquals(value="Obsolete"))

    log = await runner.execute(workflow, [make_initiative()], record_change, now=NOW)

    assert log.id.startswith("log_")
    assert log.workflow_id == "wf_test"
    assert log.timestamp == NOW.isoformat()
    assert log.initiatives_affected == ()
    assert log.errors == ()


async def test_empty_batch(runner, record_change) -> None:
    log = await runner.execute(_workflow(SetStatus(value="Done")), [], record_change, now=NOW)
    assert (log.initiatives_affected, log.actions_taken, log.errors) == ((), (), ())
