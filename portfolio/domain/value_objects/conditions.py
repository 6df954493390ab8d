"""Condition tree value objects.

A condition is a recursive boolean expression over an initiative: leaf
predicates combined with ``and`` / ``or``. Each node kind is a frozen
dataclass; ``ConditionNode`` is the closed union of them. Stored JSON uses
``{"type": <tag>, ...arguments}`` and is converted with ``parse_condition``
and ``condition_to_dict``.

Unrecognized tags parse to ``UnknownCondition`` instead of failing, so a
workflow persisted by a newer or older build still loads; the evaluator
treats it as ``False``. Authoring paths call ``validate_condition`` to reject
such trees up front.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from numbers import Real
from typing import Any, ClassVar, Union

from portfolio.domain.enums import ConditionType


@dataclass(frozen=True)
class DueDatePassed:
    type: ClassVar[ConditionType] = ConditionType.DUE_DATE_PASSED


@dataclass(frozen=True)
class DueDateWithinDays:
    type: ClassVar[ConditionType] = ConditionType.DUE_DATE_WITHIN_DAYS

    days: int | None = None


@dataclass(frozen=True)
class LastUpdatedOlderThan:
    type: ClassVar[ConditionType] = ConditionType.LAST_UPDATED_OLDER_THAN

    days: int | None = None


@dataclass(frozen=True)
class StatusEquals:
    type: ClassVar[ConditionType] = ConditionType.STATUS_EQUALS

    value: str | None = None


@dataclass(frozen=True)
class StatusNotEquals:
    type: ClassVar[ConditionType] = ConditionType.STATUS_NOT_EQUALS

    value: str | None = None


@dataclass(frozen=True)
class ActualEffortGreaterThan:
    type: ClassVar[ConditionType] = ConditionType.ACTUAL_EFFORT_GREATER_THAN

    value: float | None = None


@dataclass(frozen=True)
class ActualEffortPercentageOfEstimated:
    type: ClassVar[ConditionType] = ConditionType.ACTUAL_EFFORT_PERCENTAGE_OF_ESTIMATED

    percentage: float | None = None


@dataclass(frozen=True)
class EffortVarianceExceeds:
    type: ClassVar[ConditionType] = ConditionType.EFFORT_VARIANCE_EXCEEDS

    value: float | None = None


@dataclass(frozen=True)
class PriorityEquals:
    type: ClassVar[ConditionType] = ConditionType.PRIORITY_EQUALS

    value: str | None = None


@dataclass(frozen=True)
class RiskActionLogEmpty:
    type: ClassVar[ConditionType] = ConditionType.RISK_ACTION_LOG_EMPTY


@dataclass(frozen=True)
class OwnerEquals:
    type: ClassVar[ConditionType] = ConditionType.OWNER_EQUALS

    value: str | None = None


@dataclass(frozen=True)
class AssetClassEquals:
    type: ClassVar[ConditionType] = ConditionType.ASSET_CLASS_EQUALS

    value: str | None = None


@dataclass(frozen=True)
class And:
    """True when every child is true; vacuously true with no children."""

    type: ClassVar[ConditionType] = ConditionType.AND

    children: tuple["ConditionNode", ...] = ()


@dataclass(frozen=True)
class Or:
    """True when any child is true; vacuously false with no children."""

    type: ClassVar[ConditionType] = ConditionType.OR

    children: tuple["ConditionNode", ...] = ()


@dataclass(frozen=True)
class UnknownCondition:
    """Placeholder for a stored tag outside the closed set. Always evaluates to False."""

    raw_type: str
    payload: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


ConditionNode = Union[
    DueDatePassed,
    DueDateWithinDays,
    LastUpdatedOlderThan,
    StatusEquals,
    StatusNotEquals,
    ActualEffortGreaterThan,
    ActualEffortPercentageOfEstimated,
    EffortVarianceExceeds,
    PriorityEquals,
    RiskActionLogEmpty,
    OwnerEquals,
    AssetClassEquals,
    And,
    Or,
    UnknownCondition,
]

COMBINATOR_TYPES = (And, Or)

_NODE_CLASSES: dict[ConditionType, type] = {
    cls.type: cls
    for cls in (
        DueDatePassed,
        DueDateWithinDays,
        LastUpdatedOlderThan,
        StatusEquals,
        StatusNotEquals,
        ActualEffortGreaterThan,
        ActualEffortPercentageOfEstimated,
        EffortVarianceExceeds,
        PriorityEquals,
        RiskActionLogEmpty,
        OwnerEquals,
        AssetClassEquals,
        And,
        Or,
    )
}


def condition_type_name(node: ConditionNode) -> str:
    """Return the stored tag for a node (the raw tag for unknown nodes)."""
    if isinstance(node, UnknownCondition):
        return node.raw_type
    return node.type.value


def parse_condition(data: Mapping[str, Any] | ConditionNode) -> ConditionNode:
    """Build a condition tree from its stored JSON form.

    Args:
        data: Mapping with a ``type`` tag and the node's arguments, or an
            already-built node (returned unchanged).

    Returns:
        The root node. Unknown tags become ``UnknownCondition``.
    """
    if not isinstance(data, Mapping):
        if isinstance(data, (*_NODE_CLASSES.values(), UnknownCondition)):
            return data
        return UnknownCondition(raw_type=type(data).__name__)

    tag = data.get("type")
    try:
        kind = ConditionType(tag)
    except ValueError:
        return UnknownCondition(raw_type=str(tag), payload=dict(data))

    cls = _NODE_CLASSES[kind]
    if cls in COMBINATOR_TYPES:
        children = data.get("children") or ()
        if not isinstance(children, (list, tuple)):
            return UnknownCondition(raw_type=str(tag), payload=dict(data))
        return cls(children=tuple(parse_condition(child) for child in children))
    kwargs = {f.name: data.get(f.name) for f in fields(cls)}
    return cls(**kwargs)


def condition_to_dict(node: ConditionNode) -> dict[str, Any]:
    """Serialize a condition tree to its stored JSON form (None arguments omitted)."""
    if isinstance(node, UnknownCondition):
        return {**node.payload, "type": node.raw_type}
    out: dict[str, Any] = {"type": node.type.value}
    if isinstance(node, COMBINATOR_TYPES):
        out["children"] = [condition_to_dict(child) for child in node.children]
        return out
    for f in fields(node):
        value = getattr(node, f.name)
        if value is not None:
            out[f.name] = value
    return out


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _require_text(node: Any) -> str | None:
    if not isinstance(node.value, str) or not node.value:
        return "requires a non-empty 'value'"
    return None


def _require_positive_days(node: Any) -> str | None:
    if not isinstance(node.days, int) or isinstance(node.days, bool) or node.days <= 0:
        return "requires a positive integer 'days'"
    return None


def _require_number(node: Any) -> str | None:
    if not _is_number(node.value) or node.value < 0:
        return "requires a non-negative numeric 'value'"
    return None


def _require_percentage(node: Any) -> str | None:
    if not _is_number(node.percentage) or node.percentage <= 0:
        return "requires a positive numeric 'percentage'"
    return None


_LEAF_RULES: dict[type, Callable[[Any], str | None]] = {
    DueDateWithinDays: _require_positive_days,
    LastUpdatedOlderThan: _require_positive_days,
    StatusEquals: _require_text,
    StatusNotEquals: _require_text,
    PriorityEquals: _require_text,
    OwnerEquals: _require_text,
    AssetClassEquals: _require_text,
    ActualEffortGreaterThan: _require_number,
    EffortVarianceExceeds: _require_number,
    ActualEffortPercentageOfEstimated: _require_percentage,
}


def validate_condition(node: ConditionNode, path: str = "condition") -> None:
    """Reject trees that cannot be authored: unknown tags or missing arguments.

    Raises:
        ValueError: With the dotted path of the first offending node.
    """
    if isinstance(node, UnknownCondition):
        raise ValueError(f"{path}: unknown condition type {node.raw_type!r}")
    if isinstance(node, COMBINATOR_TYPES):
        for i, child in enumerate(node.children):
            validate_condition(child, f"{path}.children[{i}]")
        return
    rule = _LEAF_RULES.get(type(node))
    if rule:
        problem = rule(node)
        if problem:
            raise ValueError(f"{path}: {node.type.value} {problem}")
