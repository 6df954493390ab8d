"""Tests for evaluate_condition (date, effort and equality leaves; combinators; fail-closed)."""

from datetime import UTC, datetime

import pytest

from portfolio.application.services.condition_evaluator import evaluate_condition
from portfolio.domain.enums import AssetClass, Priority, Status
from portfolio.domain.value_objects.conditions import (
    ActualEffortGreaterThan,
    ActualEffortPercentageOfEstimated,
    And,
    AssetClassEquals,
    DueDatePassed,
    DueDateWithinDays,
    EffortVarianceExceeds,
    LastUpdatedOlderThan,
    Or,
    OwnerEquals,
    PriorityEquals,
    RiskActionLogEmpty,
    StatusEquals,
    StatusNotEquals,
    UnknownCondition,
)

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=UTC)


def _eval(node, initiative) -> bool:
    return evaluate_condition(node, initiative, now=NOW)


class TestCombinators:
    def test_empty_or_is_false_and_empty_and_is_true(self, make_initiative) -> None:
        initiative = make_initiative()
        assert _eval(Or(children=()), initiative) is False
        assert _eval(And(children=()), initiative) is True

    def test_overdue_and_not_done(self, make_initiative) -> None:
        node = And(children=(DueDatePassed(), StatusNotEquals(value=Status.DONE.value)))
        overdue = make_initiative(eta="2025-06-10", status=Status.IN_PROGRESS.value)
        done = make_initiative(eta="2025-06-10", status=Status.DONE.value)
        assert _eval(node, overdue) is True
        assert _eval(node, done) is False

    def test_unknown_child_in_or_does_not_hide_true_sibling(self, make_initiative) -> None:
        node = Or(children=(UnknownCondition(raw_type="is_at_risk"), StatusEquals(value="Not Started")))
        assert _eval(node, make_initiative()) is True

    def test_unknown_child_in_and_makes_it_false(self, make_initiative) -> None:
        node = And(children=(UnknownCondition(raw_type="is_at_risk"), StatusEquals(value="Not Started")))
        assert _eval(node, make_initiative()) is False


class TestDateLeaves:
    def test_due_date_passed(self, make_initiative) -> None:
        assert _eval(DueDatePassed(), make_initiative(eta="2025-06-14")) is True
        assert _eval(DueDatePassed(), make_initiative(eta="2025-06-15")) is False
        assert _eval(DueDatePassed(), make_initiative(eta="2025-06-16")) is False

    def test_missing_eta_counts_as_overdue(self, make_initiative) -> None:
        assert _eval(DueDatePassed(), make_initiative(eta=None)) is True
        assert _eval(DueDatePassed(), make_initiative(eta="")) is True

    def test_missing_eta_is_never_due_soon(self, make_initiative) -> None:
        assert _eval(DueDateWithinDays(days=7), make_initiative(eta=None)) is False

    @pytest.mark.parametrize(
        ("eta", "expected"),
        [
            ("2025-06-14", False),
            ("2025-06-15", True),
            ("2025-06-22", True),
            ("2025-06-23", False),
            (None, False),
        ],
    )
    def test_due_date_within_days_is_inclusive(self, make_initiative, eta, expected) -> None:
        assert _eval(DueDateWithinDays(days=7), make_initiative(eta=eta)) is expected

    def test_due_date_within_zero_or_missing_days_is_false(self, make_initiative) -> None:
        initiative = make_initiative(eta="2025-06-15")
        assert _eval(DueDateWithinDays(days=0), initiative) is False
        assert _eval(DueDateWithinDays(days=None), initiative) is False

    @pytest.mark.parametrize(
        ("last_updated", "expected"),
        [
            ("2025-06-07", True),
            ("2025-06-08", False),
            ("2025-06-01T10:00:00+00:00", True),
            ("", True),
        ],
    )
    def test_last_updated_older_than(self, make_initiative, last_updated, expected) -> None:
        node = LastUpdatedOlderThan(days=7)
        assert _eval(node, make_initiative(last_updated=last_updated)) is expected

    def test_last_updated_without_days_is_false(self, make_initiative) -> None:
        assert _eval(LastUpdatedOlderThan(days=None), make_initiative(last_updated="")) is False


class TestEffortLeaves:
    def test_percentage_with_zero_estimate_is_false(self, make_initiative) -> None:
        node = ActualEffortPercentageOfEstimated(percentage=80)
        assert _eval(node, make_initiative(estimated_effort=0, actual_effort=5)) is False
        assert _eval(node, make_initiative(estimated_effort=None, actual_effort=5)) is False

    def test_percentage_threshold_is_inclusive(self, make_initiative) -> None:
        node = ActualEffortPercentageOfEstimated(percentage=80)
        assert _eval(node, make_initiative(estimated_effort=10, actual_effort=8)) is True
        assert _eval(node, make_initiative(estimated_effort=10, actual_effort=7)) is False

    def test_variance_is_absolute_difference(self, make_initiative) -> None:
        initiative = make_initiative(estimated_effort=10, actual_effort=4)
        assert _eval(EffortVarianceExceeds(value=5), initiative) is True
        assert _eval(EffortVarianceExceeds(value=6), initiative) is False
        assert _eval(EffortVarianceExceeds(value=0), initiative) is False

    def test_missing_actual_effort_counts_as_zero(self, make_initiative) -> None:
        assert _eval(ActualEffortGreaterThan(value=0), make_initiative(actual_effort=None)) is False
        assert _eval(ActualEffortGreaterThan(value=0), make_initiative(actual_effort=0.5)) is True


class TestEqualityLeaves:
    def test_field_equality(self, make_initiative) -> None:
        initiative = make_initiative(
            priority=Priority.P0.value,
            owner_id="u_dana",
            asset_class=AssetClass.POS.value,
        )
        assert _eval(PriorityEquals(value="P0"), initiative) is True
        assert _eval(OwnerEquals(value="u_dana"), initiative) is True
        assert _eval(OwnerEquals(value="u_lee"), initiative) is False
        assert _eval(AssetClassEquals(value="POS"), initiative) is True

    def test_risk_action_log_empty_ignores_whitespace(self, make_initiative) -> None:
        assert _eval(RiskActionLogEmpty(), make_initiative(risk_action_log="   ")) is True
        assert _eval(RiskActionLogEmpty(), make_initiative(risk_action_log=None)) is True
        assert _eval(RiskActionLogEmpty(), make_initiative(risk_action_log="Vendor delay")) is False


class TestFailClosed:
    def test_unknown_condition_is_false(self, make_initiative) -> None:
        assert _eval(UnknownCondition(raw_type="is_at_risk"), make_initiative()) is False

    def test_leaf_error_is_false_not_raised(self, make_initiative) -> None:
        # eta of the wrong type makes the comparison raise TypeError.
        initiative = make_initiative(eta=20250610)
        assert _eval(DueDatePassed(), initiative) is False

    def test_defaults_to_current_time(self, make_initiative) -> None:
        assert evaluate_condition(DueDatePassed(), make_initiative(eta="2000-01-01")) is True
