"""Domain value objects: condition and action trees, notification requests."""

from portfolio.domain.value_objects.actions import (
    ActionNode,
    action_to_dict,
    action_type_name,
    parse_action,
    validate_action,
)
from portfolio.domain.value_objects.conditions import (
    ConditionNode,
    condition_to_dict,
    condition_type_name,
    parse_condition,
    validate_condition,
)
from portfolio.domain.value_objects.notification import NotificationRequest

__all__ = [
    "ActionNode",
    "ConditionNode",
    "NotificationRequest",
    "action_to_dict",
    "action_type_name",
    "condition_to_dict",
    "condition_type_name",
    "parse_action",
    "parse_condition",
    "validate_action",
    "validate_condition",
]
