"""Action executor: apply a workflow's action tree to one initiative.

Mutates the initiative in place. For every field that actually changes,
``record_change(initiative, label, old, new)`` is called before the write;
re-applying an action to an already-matching initiative changes nothing and
records nothing. Notify actions do no I/O: they hand a NotificationRequest to
the optional ``notify`` callback and leave delivery to the caller.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from portfolio.domain.entities import SYSTEM_ACTOR, Comment
from portfolio.domain.enums import NotificationKind, Priority, Status
from portfolio.domain.exceptions import ActionExecutionError
from portfolio.domain.value_objects.actions import (
    ActionNode,
    CreateComment,
    ExecuteMultiple,
    NotifyOwner,
    NotifySlackChannel,
    RequireRiskActionLog,
    SetAtRisk,
    SetPriority,
    SetStatus,
    TransitionStatus,
    UpdateEffort,
    UpdateEta,
    action_type_name,
)
from portfolio.domain.value_objects.notification import NotificationRequest
from portfolio.shared.utils.generators import generate_prefixed_id
from portfolio.shared.utils.datetime import utc_timestamp

if TYPE_CHECKING:
    from portfolio.application.interfaces.services import NotifyCallback, RecordChange
    from portfolio.domain.entities import Initiative

# Terminal states map to themselves.
STATUS_TRANSITIONS: dict[str, str] = {
    Status.NOT_STARTED.value: Status.IN_PROGRESS.value,
    Status.IN_PROGRESS.value: Status.AT_RISK.value,
    Status.AT_RISK.value: Status.DONE.value,
    Status.DONE.value: Status.DONE.value,
    Status.OBSOLETE.value: Status.OBSOLETE.value,
}

AUTOMATED_COMMENT_PREFIX = "[Automated] "

# Labels passed to record_change (shown in the initiative's history).
FIELD_LABELS: dict[str, str] = {
    "status": "Status",
    "priority": "Priority",
    "eta": "ETA",
    "estimated_effort": "Effort",
}


@dataclass(frozen=True)
class _ActionContext:
    record_change: RecordChange
    notify: NotifyCallback | None
    now: datetime | None


def _set_field(
    initiative: Initiative,
    attr: str,
    new_value: Any,
    ctx: _ActionContext,
    *,
    old_value: Any = None,
) -> None:
    current = getattr(initiative, attr)
    if current == new_value:
        return
    ctx.record_change(
        initiative,
        FIELD_LABELS[attr],
        current if old_value is None else old_value,
        new_value,
    )
    setattr(initiative, attr, new_value)


def _set_status(node: SetStatus, initiative: Initiative, ctx: _ActionContext) -> None:
    if not node.value:
        return
    if node.value not in Status.values():
        raise ActionExecutionError(node.type.value, f"invalid status {node.value!r}")
    _set_field(initiative, "status", node.value, ctx)


def _transition_status(
    node: TransitionStatus, initiative: Initiative, ctx: _ActionContext
) -> None:
    next_status = STATUS_TRANSITIONS.get(initiative.status)
    if next_status is None:
        raise ActionExecutionError(
            node.type.value, f"no transition from status {initiative.status!r}"
        )
    _set_field(initiative, "status", next_status, ctx)


def _set_priority(node: SetPriority, initiative: Initiative, ctx: _ActionContext) -> None:
    if not node.value:
        return
    if node.value not in Priority.values():
        raise ActionExecutionError(node.type.value, f"invalid priority {node.value!r}")
    _set_field(initiative, "priority", node.value, ctx)


def _require_risk_action_log(
    node: RequireRiskActionLog | SetAtRisk, initiative: Initiative, ctx: _ActionContext
) -> None:
    if initiative.has_risk_action_log:
        return
    _set_field(initiative, "status", Status.AT_RISK.value, ctx)


def _notify_owner(node: NotifyOwner, initiative: Initiative, ctx: _ActionContext) -> None:
    if not initiative.owner_id:
        raise ActionExecutionError(node.type.value, "initiative has no owner")
    if ctx.notify is None:
        return
    ctx.notify(
        NotificationRequest(
            kind=NotificationKind.OWNER,
            target=initiative.owner_id,
            initiative_id=initiative.id,
            initiative_title=initiative.title,
            message=node.message or f'Workflow update for "{initiative.title}"',
        )
    )


def _notify_channel(
    node: NotifySlackChannel, initiative: Initiative, ctx: _ActionContext
) -> None:
    if not node.channel:
        raise ActionExecutionError(node.type.value, "no channel configured")
    if ctx.notify is None:
        return
    ctx.notify(
        NotificationRequest(
            kind=NotificationKind.CHANNEL,
            target=node.channel,
            initiative_id=initiative.id,
            initiative_title=initiative.title,
            message=node.message or f'Workflow update for "{initiative.title}"',
        )
    )


def _create_comment(node: CreateComment, initiative: Initiative, ctx: _ActionContext) -> None:
    # Not deduplicated: every run appends a new comment.
    if not node.message:
        return
    initiative.add_comment(
        Comment(
            id=generate_prefixed_id("cmt"),
            text=f"{AUTOMATED_COMMENT_PREFIX}{node.message}",
            author_id=SYSTEM_ACTOR,
            timestamp=utc_timestamp(ctx.now),
        )
    )


def _update_eta(node: UpdateEta, initiative: Initiative, ctx: _ActionContext) -> None:
    if not node.value:
        return
    _set_field(initiative, "eta", node.value, ctx, old_value=initiative.eta or "")


def _update_effort(node: UpdateEffort, initiative: Initiative, ctx: _ActionContext) -> None:
    if node.value is None:
        return
    _set_field(initiative, "estimated_effort", node.value, ctx)


_HANDLERS: dict[type, Callable[[Any, Initiative, _ActionContext], None]] = {
    SetStatus: _set_status,
    TransitionStatus: _transition_status,
    SetPriority: _set_priority,
    RequireRiskActionLog: _require_risk_action_log,
    SetAtRisk: _require_risk_action_log,
    NotifyOwner: _notify_owner,
    NotifySlackChannel: _notify_channel,
    CreateComment: _create_comment,
    UpdateEta: _update_eta,
    UpdateEffort: _update_effort,
}


def _apply(node: ActionNode, initiative: Initiative, ctx: _ActionContext) -> None:
    if isinstance(node, ExecuteMultiple):
        # A raising child aborts its remaining siblings; earlier changes stay applied.
        for child in node.actions:
            _apply(child, initiative, ctx)
        return
    handler = _HANDLERS.get(type(node))
    if handler is None:
        raise ActionExecutionError(action_type_name(node), "unsupported action type")
    handler(node, initiative, ctx)


def apply_action(
    node: ActionNode,
    initiative: Initiative,
    record_change: RecordChange,
    *,
    notify: NotifyCallback | None = None,
    now: datetime | None = None,
) -> None:
    """Apply an action tree to one initiative, in place.

    Args:
        node: Root of the action tree.
        initiative: Record to mutate.
        record_change: Audit callback, called before each actual field change.
        notify: Receives NotificationRequests from notify actions (optional).
        now: Timestamp reference for automated comments.

    Raises:
        ActionExecutionError: Unsupported action type, invalid argument, or a
            status with no transition. Any exception from ``record_change``
            propagates unchanged.
    """
    _apply(node, initiative, _ActionContext(record_change=record_change, notify=notify, now=now))
