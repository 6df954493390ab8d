"""Condition evaluator: decide whether an initiative matches a workflow's condition tree.

Pure and total. Unknown node kinds and any error raised while evaluating a
leaf resolve to False (fail closed); nothing propagates to the caller.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from portfolio.domain.exceptions import ConditionEvaluationError
from portfolio.domain.value_objects.conditions import (
    ActualEffortGreaterThan,
    ActualEffortPercentageOfEstimated,
    And,
    AssetClassEquals,
    ConditionNode,
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
    condition_type_name,
)
from portfolio.shared.telemetry.logging import get_logger
from portfolio.shared.utils.datetime import add_days_iso, today_iso, utc_now

if TYPE_CHECKING:
    from portfolio.domain.entities import Initiative

logger = get_logger(__name__)


@dataclass(frozen=True)
class _Clock:
    """Evaluation-time reference so every leaf in one tree sees the same 'today'."""

    now: datetime
    today: str


def _effort(value: float | None) -> float:
    return value or 0


def _due_date_passed(node: DueDatePassed, initiative: Initiative, clock: _Clock) -> bool:
    # A missing ETA compares as the empty string, which sorts before any date.
    return (initiative.eta or "") < clock.today


def _due_date_within_days(
    node: DueDateWithinDays, initiative: Initiative, clock: _Clock
) -> bool:
    if not node.days or not initiative.eta:
        return False
    horizon = add_days_iso(node.days, clock.now)
    return clock.today <= initiative.eta <= horizon


def _last_updated_older_than(
    node: LastUpdatedOlderThan, initiative: Initiative, clock: _Clock
) -> bool:
    if not node.days:
        return False
    cutoff = add_days_iso(-node.days, clock.now)
    return (initiative.last_updated or "")[:10] < cutoff


def _actual_effort_greater_than(
    node: ActualEffortGreaterThan, initiative: Initiative, clock: _Clock
) -> bool:
    return _effort(initiative.actual_effort) > (node.value or 0)


def _actual_effort_percentage(
    node: ActualEffortPercentageOfEstimated, initiative: Initiative, clock: _Clock
) -> bool:
    estimated = _effort(initiative.estimated_effort)
    if not node.percentage or estimated == 0:
        return False
    return (_effort(initiative.actual_effort) / estimated) * 100 >= node.percentage


def _effort_variance_exceeds(
    node: EffortVarianceExceeds, initiative: Initiative, clock: _Clock
) -> bool:
    if not node.value:
        return False
    variance = abs(_effort(initiative.estimated_effort) - _effort(initiative.actual_effort))
    return variance > node.value


def _risk_action_log_empty(
    node: RiskActionLogEmpty, initiative: Initiative, clock: _Clock
) -> bool:
    return not initiative.has_risk_action_log


_LEAF_HANDLERS: dict[type, Callable[[Any, Initiative, _Clock], bool]] = {
    DueDatePassed: _due_date_passed,
    DueDateWithinDays: _due_date_within_days,
    LastUpdatedOlderThan: _last_updated_older_than,
    StatusEquals: lambda node, i, _: i.status == node.value,
    StatusNotEquals: lambda node, i, _: i.status != node.value,
    PriorityEquals: lambda node, i, _: i.priority == node.value,
    OwnerEquals: lambda node, i, _: i.owner_id == node.value,
    AssetClassEquals: lambda node, i, _: i.asset_class == node.value,
    ActualEffortGreaterThan: _actual_effort_greater_than,
    ActualEffortPercentageOfEstimated: _actual_effort_percentage,
    EffortVarianceExceeds: _effort_variance_exceeds,
    RiskActionLogEmpty: _risk_action_log_empty,
}


def _evaluate(node: ConditionNode, initiative: Initiative, clock: _Clock) -> bool:
    if isinstance(node, And):
        return all(_evaluate(child, initiative, clock) for child in node.children)
    if isinstance(node, Or):
        return any(_evaluate(child, initiative, clock) for child in node.children)

    handler = _LEAF_HANDLERS.get(type(node))
    if handler is None:
        logger.warning(
            "Unknown condition type %r on initiative %s; failing closed",
            condition_type_name(node),
            initiative.id,
        )
        return False
    try:
        return bool(handler(node, initiative, clock))
    except Exception as e:
        error = ConditionEvaluationError(condition_type_name(node), str(e))
        logger.warning(
            "Condition evaluation failed on initiative %s (%s); failing closed",
            initiative.id,
            error.message,
        )
        return False


def evaluate_condition(
    node: ConditionNode,
    initiative: Initiative,
    *,
    now: datetime | None = None,
) -> bool:
    """Evaluate a condition tree against one initiative.

    Args:
        node: Root of the condition tree.
        initiative: Record to test.
        now: Reference time (defaults to the current UTC time).

    Returns:
        True if the initiative matches. ``and`` with no children is True,
        ``or`` with no children is False.
    """
    reference = now or utc_now()
    return _evaluate(node, initiative, _Clock(now=reference, today=today_iso(reference)))
