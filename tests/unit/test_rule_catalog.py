"""Tests for system rules, catalog ordering and read-only enforcement."""

from datetime import UTC, datetime

import pytest

from portfolio.application.services.condition_evaluator import evaluate_condition
from portfolio.application.services.rule_catalog import (
    AUTO_AT_RISK_ID,
    EFFORT_TRANSITION_ID,
    WEEKLY_REMINDER_ID,
    ensure_mutable,
    get_system_rules,
    merge_catalog,
)
from portfolio.domain.entities import WorkflowEntity
from portfolio.domain.enums import Status, WorkflowTrigger
from portfolio.domain.exceptions import SystemRuleReadOnlyException
from portfolio.domain.value_objects.actions import NotifyOwner, SetStatus

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=UTC)


def _custom(workflow_id: str) -> WorkflowEntity:
    return WorkflowEntity(
        id=workflow_id,
        name=workflow_id,
        trigger=WorkflowTrigger.ON_STATUS_CHANGE.value,
        action=SetStatus(value="Done"),
    )


class TestSystemRules:
    def test_rule_set(self) -> None:
        rules = get_system_rules(NOW)
        assert [r.id for r in rules] == [AUTO_AT_RISK_ID, EFFORT_TRANSITION_ID, WEEKLY_REMINDER_ID]
        for rule in rules:
            assert rule.system is True
            assert rule.read_only is True
            assert rule.enabled is True
            assert rule.created_by == "system"
            assert rule.execution_log == []

    def test_each_call_builds_new_objects(self) -> None:
        first = get_system_rules(NOW)
        first[0].name = "changed"
        second = get_system_rules(NOW)
        assert second[0].name == "Auto At-Risk Detection"
        assert first[0] is not second[0]

    def test_effort_transition_rule(self, make_initiative) -> None:
        rule = get_system_rules(NOW)[1]
        assert rule.trigger == WorkflowTrigger.ON_EFFORT_CHANGE.value
        assert rule.action == SetStatus(value=Status.IN_PROGRESS.value)
        started = make_initiative(actual_effort=1, status=Status.NOT_STARTED.value)
        untouched = make_initiative(actual_effort=0, status=Status.NOT_STARTED.value)
        assert evaluate_condition(rule.condition, started, now=NOW) is True
        assert evaluate_condition(rule.condition, untouched, now=NOW) is False

    def test_weekly_reminder_rule(self, make_initiative) -> None:
        rule = get_system_rules(NOW)[2]
        assert isinstance(rule.action, NotifyOwner)
        stale = make_initiative(last_updated="2025-06-01", status=Status.IN_PROGRESS.value)
        stale_done = make_initiative(last_updated="2025-06-01", status=Status.DONE.value)
        assert evaluate_condition(rule.condition, stale, now=NOW) is True
        assert evaluate_condition(rule.condition, stale_done, now=NOW) is False


class TestMergeCatalog:
    def test_system_first_relative_order_kept(self) -> None:
        system = get_system_rules(NOW)
        merged = merge_catalog([system[1]], [_custom("c1"), _custom("c2")])
        assert [w.id for w in merged] == [EFFORT_TRANSITION_ID, "c1", "c2"]

    def test_stable_for_interleaved_input(self) -> None:
        system = get_system_rules(NOW)
        merged = merge_catalog([], [_custom("c1"), system[2], _custom("c2"), system[0]])
        assert [w.id for w in merged] == [WEEKLY_REMINDER_ID, AUTO_AT_RISK_ID, "c1", "c2"]


class TestEnsureMutable:
    @pytest.mark.parametrize("operation", ["edit", "delete", "toggle", "duplicate", "record_run"])
    def test_system_rule_rejected(self, operation) -> None:
        rule = get_system_rules(NOW)[0]
        with pytest.raises(SystemRuleReadOnlyException) as exc_info:
            ensure_mutable(rule, operation)
        assert exc_info.value.error_code == "SYSTEM_RULE_READ_ONLY"
        assert exc_info.value.details == {"workflow_id": AUTO_AT_RISK_ID, "operation": operation}

    def test_custom_allowed(self) -> None:
        ensure_mutable(_custom("c1"), "edit")
