"""Encode/decode domain entities to/from stored JSON documents.

Condition and action trees are stored in their tagged ``{"type": ...}``
form. Scope filters are stored as given; a malformed scope is surfaced by
the scope filter at run time, not here.
"""

from typing import Any

from portfolio.domain.entities import (
    ChangeRecord,
    Comment,
    ExecutionLog,
    Initiative,
    WorkflowEntity,
    WorkflowScope,
)
from portfolio.domain.value_objects import (
    action_to_dict,
    condition_to_dict,
    parse_action,
    parse_condition,
)
from portfolio.infrastructure.exceptions import DocumentDecodeError

_SCOPE_KEYS = ("asset_classes", "work_types", "owners")


def _require(doc: dict[str, Any], key: str, collection: str) -> Any:
    if not isinstance(doc, dict):
        raise DocumentDecodeError(collection, f"expected an object, got {type(doc).__name__}")
    value = doc.get(key)
    if value in (None, ""):
        raise DocumentDecodeError(collection, f"missing '{key}'")
    return value


def scope_to_document(scope: WorkflowScope | None) -> dict[str, Any] | None:
    if scope is None:
        return None
    return {key: getattr(scope, key) for key in _SCOPE_KEYS if getattr(scope, key) is not None}


def scope_from_document(doc: Any) -> WorkflowScope | None:
    if doc is None:
        return None
    if not isinstance(doc, dict):
        # Kept so the run fails with a scope error instead of the load failing.
        return WorkflowScope(asset_classes=doc)
    return WorkflowScope(**{key: doc.get(key) for key in _SCOPE_KEYS})


def execution_log_to_document(log: ExecutionLog) -> dict[str, Any]:
    return {
        "id": log.id,
        "workflow_id": log.workflow_id,
        "timestamp": log.timestamp,
        "initiatives_affected": list(log.initiatives_affected),
        "actions_taken": list(log.actions_taken),
        "errors": list(log.errors),
    }


def execution_log_from_document(doc: dict[str, Any]) -> ExecutionLog:
    return ExecutionLog(
        id=_require(doc, "id", "execution_log"),
        workflow_id=doc.get("workflow_id", ""),
        timestamp=doc.get("timestamp", ""),
        initiatives_affected=tuple(doc.get("initiatives_affected") or ()),
        actions_taken=tuple(doc.get("actions_taken") or ()),
        errors=tuple(doc.get("errors") or ()),
    )


def workflow_to_document(workflow: WorkflowEntity) -> dict[str, Any]:
    return {
        "id": workflow.id,
        "name": workflow.name,
        "description": workflow.description,
        "trigger": workflow.trigger,
        "trigger_config": dict(workflow.trigger_config),
        "scope": scope_to_document(workflow.scope),
        "condition": condition_to_dict(workflow.condition) if workflow.condition else None,
        "action": action_to_dict(workflow.action),
        "enabled": workflow.enabled,
        "system": workflow.system,
        "read_only": workflow.read_only,
        "created_by": workflow.created_by,
        "created_at": workflow.created_at,
        "last_run": workflow.last_run,
        "run_count": workflow.run_count,
        "execution_log": [execution_log_to_document(log) for log in workflow.execution_log],
    }


def workflow_from_document(doc: dict[str, Any]) -> WorkflowEntity:
    condition = doc.get("condition") if isinstance(doc, dict) else None
    return WorkflowEntity(
        id=_require(doc, "id", "workflows"),
        name=_require(doc, "name", "workflows"),
        description=doc.get("description"),
        trigger=doc.get("trigger", ""),
        trigger_config=dict(doc.get("trigger_config") or {}),
        scope=scope_from_document(doc.get("scope")),
        condition=parse_condition(condition) if condition is not None else None,
        action=parse_action(doc.get("action") or {}),
        enabled=bool(doc.get("enabled", True)),
        system=bool(doc.get("system", False)),
        read_only=bool(doc.get("read_only", False)),
        created_by=doc.get("created_by", ""),
        created_at=doc.get("created_at", ""),
        last_run=doc.get("last_run"),
        run_count=int(doc.get("run_count") or 0),
        execution_log=[execution_log_from_document(d) for d in doc.get("execution_log") or []],
    )


def _comment_to_document(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "text": comment.text,
        "author_id": comment.author_id,
        "timestamp": comment.timestamp,
    }


def _change_to_document(change: ChangeRecord) -> dict[str, Any]:
    return {
        "id": change.id,
        "initiative_id": change.initiative_id,
        "initiative_title": change.initiative_title,
        "field": change.field,
        "old_value": change.old_value,
        "new_value": change.new_value,
        "changed_by": change.changed_by,
        "timestamp": change.timestamp,
    }


def initiative_to_document(initiative: Initiative) -> dict[str, Any]:
    return {
        "id": initiative.id,
        "title": initiative.title,
        "owner_id": initiative.owner_id,
        "status": initiative.status,
        "priority": initiative.priority,
        "work_type": initiative.work_type,
        "asset_class": initiative.asset_class,
        "initiative_type": initiative.initiative_type,
        "estimated_effort": initiative.estimated_effort,
        "actual_effort": initiative.actual_effort,
        "eta": initiative.eta,
        "last_updated": initiative.last_updated,
        "risk_action_log": initiative.risk_action_log,
        "quarter": initiative.quarter,
        "l2_pillar": initiative.l2_pillar,
        "secondary_owner": initiative.secondary_owner,
        "definition_of_done": initiative.definition_of_done,
        "comments": [_comment_to_document(c) for c in initiative.comments],
        "history": [_change_to_document(h) for h in initiative.history],
    }


def initiative_from_document(doc: dict[str, Any]) -> Initiative:
    defaults = Initiative(id="", title="", owner_id="")
    return Initiative(
        id=_require(doc, "id", "initiatives"),
        title=doc.get("title", ""),
        owner_id=doc.get("owner_id", ""),
        status=doc.get("status") or defaults.status,
        priority=doc.get("priority") or defaults.priority,
        work_type=doc.get("work_type") or defaults.work_type,
        asset_class=doc.get("asset_class") or defaults.asset_class,
        initiative_type=doc.get("initiative_type") or defaults.initiative_type,
        estimated_effort=doc.get("estimated_effort"),
        actual_effort=doc.get("actual_effort"),
        eta=doc.get("eta"),
        last_updated=doc.get("last_updated") or "",
        risk_action_log=doc.get("risk_action_log"),
        quarter=doc.get("quarter"),
        l2_pillar=doc.get("l2_pillar"),
        secondary_owner=doc.get("secondary_owner"),
        definition_of_done=doc.get("definition_of_done"),
        comments=[Comment(**c) for c in doc.get("comments") or []],
        history=[ChangeRecord(**h) for h in doc.get("history") or []],
    )
