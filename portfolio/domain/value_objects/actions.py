"""Action tree value objects.

An action is a mutation program applied to one initiative: leaf mutators and
the ordered ``execute_multiple`` combinator. Same conventions as
``conditions``: frozen dataclass per kind, stored as ``{"type": <tag>, ...}``.
An unrecognized tag parses to ``UnknownAction``, which the executor refuses
to apply (recorded as a per-initiative error).
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from numbers import Real
from typing import Any, ClassVar, Union

from portfolio.domain.enums import ActionType, Priority, Status


@dataclass(frozen=True)
class SetStatus:
    type: ClassVar[ActionType] = ActionType.SET_STATUS

    value: str | None = None


@dataclass(frozen=True)
class TransitionStatus:
    """Advance one step along Not Started → In Progress → At Risk → Done."""

    type: ClassVar[ActionType] = ActionType.TRANSITION_STATUS


@dataclass(frozen=True)
class SetPriority:
    type: ClassVar[ActionType] = ActionType.SET_PRIORITY

    value: str | None = None


@dataclass(frozen=True)
class RequireRiskActionLog:
    """Move to At Risk when the risk/action log is blank."""

    type: ClassVar[ActionType] = ActionType.REQUIRE_RISK_ACTION_LOG


@dataclass(frozen=True)
class SetAtRisk:
    """Same behavior as RequireRiskActionLog; separate tag kept for stored workflows."""

    type: ClassVar[ActionType] = ActionType.SET_AT_RISK


@dataclass(frozen=True)
class NotifyOwner:
    type: ClassVar[ActionType] = ActionType.NOTIFY_OWNER

    message: str | None = None


@dataclass(frozen=True)
class NotifySlackChannel:
    type: ClassVar[ActionType] = ActionType.NOTIFY_SLACK_CHANNEL

    channel: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class CreateComment:
    type: ClassVar[ActionType] = ActionType.CREATE_COMMENT

    message: str | None = None


@dataclass(frozen=True)
class UpdateEta:
    type: ClassVar[ActionType] = ActionType.UPDATE_ETA

    value: str | None = None


@dataclass(frozen=True)
class UpdateEffort:
    type: ClassVar[ActionType] = ActionType.UPDATE_EFFORT

    value: float | None = None


@dataclass(frozen=True)
class ExecuteMultiple:
    """Apply each sub-action in order to the same initiative."""

    type: ClassVar[ActionType] = ActionType.EXECUTE_MULTIPLE

    actions: tuple["ActionNode", ...] = ()


@dataclass(frozen=True)
class UnknownAction:
    raw_type: str
    payload: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


ActionNode = Union[
    SetStatus,
    TransitionStatus,
    SetPriority,
    RequireRiskActionLog,
    SetAtRisk,
    NotifyOwner,
    NotifySlackChannel,
    CreateComment,
    UpdateEta,
    UpdateEffort,
    ExecuteMultiple,
    UnknownAction,
]

_NODE_CLASSES: dict[ActionType, type] = {
    cls.type: cls
    for cls in (
        SetStatus,
        TransitionStatus,
        SetPriority,
        RequireRiskActionLog,
        SetAtRisk,
        NotifyOwner,
        NotifySlackChannel,
        CreateComment,
        UpdateEta,
        UpdateEffort,
        ExecuteMultiple,
    )
}


def action_type_name(node: ActionNode) -> str:
    """Return the stored tag for a node (the raw tag for unknown nodes)."""
    if isinstance(node, UnknownAction):
        return node.raw_type
    return node.type.value


def parse_action(data: Mapping[str, Any] | ActionNode) -> ActionNode:
    """Build an action tree from its stored JSON form.

    Args:
        data: Mapping with a ``type`` tag and the node's arguments, or an
            already-built node (returned unchanged).

    Returns:
        The root node. Unknown tags become ``UnknownAction``.
    """
    if not isinstance(data, Mapping):
        if isinstance(data, (*_NODE_CLASSES.values(), UnknownAction)):
            return data
        return UnknownAction(raw_type=type(data).__name__)

    tag = data.get("type")
    try:
        kind = ActionType(tag)
    except ValueError:
        return UnknownAction(raw_type=str(tag), payload=dict(data))

    cls = _NODE_CLASSES[kind]
    if cls is ExecuteMultiple:
        actions = data.get("actions") or ()
        if not isinstance(actions, (list, tuple)):
            return UnknownAction(raw_type=str(tag), payload=dict(data))
        return ExecuteMultiple(actions=tuple(parse_action(a) for a in actions))
    return cls(**{f.name: data.get(f.name) for f in fields(cls)})


def action_to_dict(node: ActionNode) -> dict[str, Any]:
    """Serialize an action tree to its stored JSON form (None arguments omitted)."""
    if isinstance(node, UnknownAction):
        return {**node.payload, "type": node.raw_type}
    out: dict[str, Any] = {"type": node.type.value}
    if isinstance(node, ExecuteMultiple):
        out["actions"] = [action_to_dict(a) for a in node.actions]
        return out
    for f in fields(node):
        value = getattr(node, f.name)
        if value is not None:
            out[f.name] = value
    return out


def validate_action(node: ActionNode, path: str = "action") -> None:
    """Reject trees that cannot be authored: unknown tags, bad or missing arguments.

    Raises:
        ValueError: With the dotted path of the first offending node.
    """
    if isinstance(node, UnknownAction):
        raise ValueError(f"{path}: unknown action type {node.raw_type!r}")
    if isinstance(node, ExecuteMultiple):
        if not node.actions:
            raise ValueError(f"{path}: execute_multiple requires at least one action")
        for i, child in enumerate(node.actions):
            validate_action(child, f"{path}.actions[{i}]")
        return
    if isinstance(node, SetStatus) and node.value not in Status.values():
        raise ValueError(f"{path}: set_status 'value' must be one of {Status.values()}")
    if isinstance(node, SetPriority) and node.value not in Priority.values():
        raise ValueError(f"{path}: set_priority 'value' must be one of {Priority.values()}")
    if isinstance(node, NotifySlackChannel) and not node.channel:
        raise ValueError(f"{path}: notify_slack requires 'channel'")
    if isinstance(node, CreateComment) and not node.message:
        raise ValueError(f"{path}: create_comment requires 'message'")
    if isinstance(node, UpdateEta) and not node.value:
        raise ValueError(f"{path}: update_eta requires 'value' (YYYY-MM-DD)")
    if isinstance(node, UpdateEffort) and (
        not isinstance(node.value, Real) or isinstance(node.value, bool) or node.value < 0
    ):
        raise ValueError(f"{path}: update_effort requires a non-negative numeric 'value'")
