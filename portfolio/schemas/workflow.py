"""Workflow API schemas.

Condition and action trees travel as their tagged JSON form
(``{"type": ..., ...}``) and are validated here on the way in.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portfolio.domain.entities import ExecutionLog, WorkflowEntity, WorkflowScope
from portfolio.domain.enums import AssetClass, WorkflowTrigger, WorkType
from portfolio.domain.value_objects import (
    action_to_dict,
    condition_to_dict,
    parse_action,
    parse_condition,
    validate_action,
    validate_condition,
)


def _normalize_action(value: dict[str, Any]) -> dict[str, Any]:
    node = parse_action(value)
    validate_action(node)
    return action_to_dict(node)


def _normalize_condition(value: dict[str, Any] | None) -> dict[str, Any] | None:
    if value is None:
        return None
    node = parse_condition(value)
    validate_condition(node)
    return condition_to_dict(node)


def _check_trigger(value: str | None) -> str | None:
    if value is not None and value not in WorkflowTrigger.values():
        raise ValueError(f"trigger must be one of {WorkflowTrigger.values()}")
    return value


class WorkflowScopeSchema(BaseModel):
    """Optional pre-filter; each present list restricts the initiatives considered."""

    asset_classes: list[str] | None = None
    work_types: list[str] | None = None
    owners: list[str] | None = None

    @field_validator("asset_classes")
    @classmethod
    def check_asset_classes(cls, v: list[str] | None) -> list[str] | None:
        if v is not None:
            unknown = [a for a in v if a not in AssetClass.values()]
            if unknown:
                raise ValueError(f"unknown asset classes: {unknown}")
        return v

    @field_validator("work_types")
    @classmethod
    def check_work_types(cls, v: list[str] | None) -> list[str] | None:
        if v is not None:
            unknown = [w for w in v if w not in WorkType.values()]
            if unknown:
                raise ValueError(f"unknown work types: {unknown}")
        return v

    def to_domain(self) -> WorkflowScope:
        return WorkflowScope(
            asset_classes=self.asset_classes,
            work_types=self.work_types,
            owners=self.owners,
        )


class WorkflowCreateRequest(BaseModel):
    """Request body for creating a custom workflow."""

    name: str = Field(..., min_length=1, max_length=255)
    trigger: str = Field(..., description="One of the workflow trigger values")
    action: dict[str, Any] = Field(..., description='Action tree, e.g. {"type": "set_status", "value": "At Risk"}')
    condition: dict[str, Any] | None = None
    description: str | None = None
    trigger_config: dict[str, Any] | None = None
    scope: WorkflowScopeSchema | None = None
    enabled: bool = True

    @field_validator("trigger")
    @classmethod
    def check_trigger(cls, v: str | None) -> str | None:
        return _check_trigger(v)

    @field_validator("action")
    @classmethod
    def check_action(cls, v: dict[str, Any]) -> dict[str, Any]:
        return _normalize_action(v)

    @field_validator("condition")
    @classmethod
    def check_condition(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        return _normalize_condition(v)


class WorkflowUpdate(BaseModel):
    """Request body for updating a custom workflow (partial; only sent fields change)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    trigger: str | None = None
    trigger_config: dict[str, Any] | None = None
    scope: WorkflowScopeSchema | None = None
    condition: dict[str, Any] | None = None
    action: dict[str, Any] | None = None
    enabled: bool | None = None

    @field_validator("trigger")
    @classmethod
    def check_trigger(cls, v: str | None) -> str | None:
        return _check_trigger(v)

    @field_validator("action")
    @classmethod
    def check_action(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        return _normalize_action(v) if v is not None else None

    @field_validator("condition")
    @classmethod
    def check_condition(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        return _normalize_condition(v)

    def to_changes(self) -> dict[str, Any]:
        """Domain-level changes for the fields present in the request."""
        changes: dict[str, Any] = {}
        for key in self.model_fields_set:
            value = getattr(self, key)
            if value is None and key in ("name", "trigger", "enabled"):
                continue
            if key == "scope":
                value = value.to_domain() if value is not None else None
            elif key == "condition":
                value = parse_condition(value) if value is not None else None
            elif key == "action":
                value = parse_action(value) if value is not None else None
            changes[key] = value
        return changes


class ExecutionLogResponse(BaseModel):
    """One stored or just-produced workflow run."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    workflow_id: str
    timestamp: str
    initiatives_affected: list[str]
    actions_taken: list[str]
    errors: list[str]

    @classmethod
    def from_log(cls, log: ExecutionLog) -> "ExecutionLogResponse":
        return cls(
            id=log.id,
            workflow_id=log.workflow_id,
            timestamp=log.timestamp,
            initiatives_affected=list(log.initiatives_affected),
            actions_taken=list(log.actions_taken),
            errors=list(log.errors),
        )


class WorkflowResponse(BaseModel):
    """Workflow response (system rules and custom workflows)."""

    id: str
    name: str
    description: str | None
    trigger: str
    trigger_config: dict[str, Any]
    scope: dict[str, Any] | None
    condition: dict[str, Any] | None
    action: dict[str, Any]
    enabled: bool
    system: bool
    read_only: bool
    created_by: str
    created_at: str
    last_run: str | None
    run_count: int
    execution_log: list[ExecutionLogResponse]

    @classmethod
    def from_entity(cls, workflow: WorkflowEntity) -> "WorkflowResponse":
        scope = None
        if workflow.scope is not None:
            scope = {
                key: value
                for key, value in (
                    ("asset_classes", workflow.scope.asset_classes),
                    ("work_types", workflow.scope.work_types),
                    ("owners", workflow.scope.owners),
                )
                if value is not None
            }
        return cls(
            id=workflow.id,
            name=workflow.name,
            description=workflow.description,
            trigger=workflow.trigger,
            trigger_config=dict(workflow.trigger_config),
            scope=scope,
            condition=condition_to_dict(workflow.condition) if workflow.condition else None,
            action=action_to_dict(workflow.action),
            enabled=workflow.enabled,
            system=workflow.system,
            read_only=workflow.read_only,
            created_by=workflow.created_by,
            created_at=workflow.created_at,
            last_run=workflow.last_run,
            run_count=workflow.run_count,
            execution_log=[ExecutionLogResponse.from_log(log) for log in workflow.execution_log],
        )
