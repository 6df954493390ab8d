"""Tests for apply_action: change recording, idempotence, notify and multi-step actions."""

from datetime import UTC, datetime

import pytest

from portfolio.application.services.action_executor import STATUS_TRANSITIONS, apply_action
from portfolio.domain.enums import NotificationKind, Priority, Status
from portfolio.domain.exceptions import ActionExecutionError
from portfolio.domain.value_objects.actions import (
    CreateComment,
    ExecuteMultiple,
    NotifyOwner,
    NotifySlackChannel,
    RequireRiskActionLog,
    SetAtRisk,
    SetPriority,
    SetStatus,
    TransitionStatus,
    UnknownAction,
    UpdateEffort,
    UpdateEta,
)

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=UTC)


class Recorder:
    """record_change test double that keeps (initiative_id, field, old, new)."""

    def __init__(self) -> None:
        self.changes: list[tuple] = []

    def __call__(self, initiative, field, old_value, new_value) -> None:
        self.changes.append((initiative.id, field, old_value, new_value))


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


class TestSetStatus:
    def test_records_then_applies(self, make_initiative, recorder) -> None:
        initiative = make_initiative(status=Status.IN_PROGRESS.value)
        apply_action(SetStatus(value="At Risk"), initiative, recorder)
        assert initiative.status == "At Risk"
        assert recorder.changes == [(initiative.id, "Status", "In Progress", "At Risk")]

    def test_is_idempotent(self, make_initiative, recorder) -> None:
        initiative = make_initiative(status=Status.IN_PROGRESS.value)
        apply_action(SetStatus(value="At Risk"), initiative, recorder)
        apply_action(SetStatus(value="At Risk"), initiative, recorder)
        assert len(recorder.changes) == 1

    def test_missing_value_is_noop(self, make_initiative, recorder) -> None:
        initiative = make_initiative()
        apply_action(SetStatus(value=None), initiative, recorder)
        assert initiative.status == Status.NOT_STARTED.value
        assert recorder.changes == []

    def test_invalid_value_raises(self, make_initiative, recorder) -> None:
        with pytest.raises(ActionExecutionError) as exc_info:
            apply_action(SetStatus(value="Paused"), make_initiative(), recorder)
        assert exc_info.value.details["action_type"] == "set_status"


class TestTransitionStatus:
    @pytest.mark.parametrize(("current", "expected"), list(STATUS_TRANSITIONS.items()))
    def test_table(self, make_initiative, recorder, current, expected) -> None:
        initiative = make_initiative(status=current)
        apply_action(TransitionStatus(), initiative, recorder)
        assert initiative.status == expected
        assert len(recorder.changes) == (0 if current == expected else 1)

    def test_unknown_status_raises(self, make_initiative, recorder) -> None:
        with pytest.raises(ActionExecutionError):
            apply_action(TransitionStatus(), make_initiative(status="Paused"), recorder)


class TestRiskActions:
    @pytest.mark.parametrize("node", [RequireRiskActionLog(), SetAtRisk()])
    def test_blank_log_moves_to_at_risk(self, make_initiative, recorder, node) -> None:
        initiative = make_initiative(status=Status.IN_PROGRESS.value, risk_action_log=" ")
        apply_action(node, initiative, recorder)
        assert initiative.status == Status.AT_RISK.value

    def test_filled_log_leaves_status(self, make_initiative, recorder) -> None:
        initiative = make_initiative(status=Status.IN_PROGRESS.value, risk_action_log="Mitigation agreed")
        apply_action(RequireRiskActionLog(), initiative, recorder)
        assert initiative.status == Status.IN_PROGRESS.value
        assert recorder.changes == []

    def test_already_at_risk_records_nothing(self, make_initiative, recorder) -> None:
        initiative = make_initiative(status=Status.AT_RISK.value)
        apply_action(RequireRiskActionLog(), initiative, recorder)
        assert recorder.changes == []


class TestNotify:
    def test_notify_owner_emits_request_without_mutation(self, make_initiative, recorder) -> None:
        initiative = make_initiative(owner_id="u_dana", title="Pricing refresh")
        sent = []
        apply_action(NotifyOwner(message="Please update"), initiative, recorder, notify=sent.append)
        assert len(sent) == 1
        assert sent[0].kind == NotificationKind.OWNER
        assert sent[0].target == "u_dana"
        assert sent[0].message == "Please update"
        assert sent[0].describe() == 'Notified owner u_dana about "Pricing refresh"'
        assert recorder.changes == []

    def test_notify_channel_targets_channel(self, make_initiative, recorder) -> None:
        sent = []
        apply_action(
            NotifySlackChannel(channel="#portfolio", message=None),
            make_initiative(title="Pricing refresh"),
            recorder,
            notify=sent.append,
        )
        assert sent[0].kind == NotificationKind.CHANNEL
        assert sent[0].target == "#portfolio"
        assert "Pricing refresh" in sent[0].message

    def test_notify_without_callback_is_noop(self, make_initiative, recorder) -> None:
        apply_action(NotifyOwner(), make_initiative(), recorder)

    def test_notify_owner_without_owner_raises(self, make_initiative, recorder) -> None:
        with pytest.raises(ActionExecutionError):
            apply_action(NotifyOwner(), make_initiative(owner_id=""), recorder, notify=lambda r: None)


class TestCommentsAndFields:
    def test_comments_are_not_deduplicated(self, make_initiative, recorder) -> None:
        initiative = make_initiative()
        apply_action(CreateComment(message="Check ETA"), initiative, recorder, now=NOW)
        apply_action(CreateComment(message="Check ETA"), initiative, recorder, now=NOW)
        assert [c.text for c in initiative.comments] == ["[Automated] Check ETA"] * 2
        assert initiative.comments[0].author_id == "system"
        assert initiative.comments[0].timestamp == NOW.isoformat()
        assert initiative.comments[0].id != initiative.comments[1].id

    def test_comment_without_message_is_noop(self, make_initiative, recorder) -> None:
        initiative = make_initiative()
        apply_action(CreateComment(message=None), initiative, recorder)
        assert initiative.comments == []

    def test_update_eta_records_blank_old_value(self, make_initiative, recorder) -> None:
        initiative = make_initiative(eta=None)
        apply_action(UpdateEta(value="2025-07-01"), initiative, recorder)
        assert initiative.eta == "2025-07-01"
        assert recorder.changes == [(initiative.id, "ETA", "", "2025-07-01")]

    def test_update_effort_to_zero(self, make_initiative, recorder) -> None:
        initiative = make_initiative(estimated_effort=5)
        apply_action(UpdateEffort(value=0), initiative, recorder)
        assert initiative.estimated_effort == 0
        assert recorder.changes == [(initiative.id, "Effort", 5, 0)]


class TestExecuteMultiple:
    def test_escalation_records_priority_before_comment(self, make_initiative) -> None:
        initiative = make_initiative(priority=Priority.P1.value)
        seen_comments_at_record_time = []

        def record_change(target, field, old_value, new_value) -> None:
            seen_comments_at_record_time.append(len(target.comments))

        node = ExecuteMultiple(
            actions=(SetPriority(value="P0"), CreateComment(message="Escalated"))
        )
        apply_action(node, initiative, record_change, now=NOW)

        assert initiative.priority == "P0"
        assert [c.text for c in initiative.comments] == ["[Automated] Escalated"]
        assert seen_comments_at_record_time == [0]

    def test_failing_child_aborts_rest_keeps_earlier(self, make_initiative, recorder) -> None:
        initiative = make_initiative(priority=Priority.P1.value)
        node = ExecuteMultiple(
            actions=(
                SetPriority(value="P0"),
                UnknownAction(raw_type="set_asset_class"),
                SetStatus(value="Done"),
            )
        )
        with pytest.raises(ActionExecutionError) as exc_info:
            apply_action(node, initiative, recorder)
        assert exc_info.value.message == "set_asset_class: unsupported action type"
        assert initiative.priority == "P0"
        assert initiative.status == Status.NOT_STARTED.value

    def test_record_change_error_propagates_before_mutation(self, make_initiative) -> None:
        initiative = make_initiative()

        def record_change(*args) -> None:
            raise RuntimeError("history unavailable")

        with pytest.raises(RuntimeError):
            apply_action(SetStatus(value="Done"), initiative, record_change)
        assert initiative.status == Status.NOT_STARTED.value
