"""Initiative API schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from portfolio.application.dtos import FieldChangeResult
from portfolio.schemas.workflow import ExecutionLogResponse


class InitiativeCreateRequest(BaseModel):
    """Request body for creating an initiative."""

    title: str = Field(..., min_length=1, max_length=255)
    owner_id: str = Field(..., min_length=1, max_length=128)
    status: str | None = None
    priority: str | None = None
    work_type: str | None = None
    asset_class: str | None = None
    initiative_type: str | None = None
    estimated_effort: float | None = Field(default=None, ge=0)
    actual_effort: float | None = Field(default=None, ge=0)
    eta: str | None = Field(default=None, description="YYYY-MM-DD")
    risk_action_log: str | None = None
    quarter: str | None = None
    l2_pillar: str | None = None
    secondary_owner: str | None = None
    definition_of_done: str | None = None

    def attributes(self) -> dict[str, Any]:
        """Optional fields that were sent (title and owner_id excluded)."""
        return self.model_dump(exclude_unset=True, exclude={"title", "owner_id"})


class InitiativeFieldUpdate(BaseModel):
    """Request body for a single-field edit (PATCH)."""

    field: str = Field(..., min_length=1, description="Editable field name, e.g. status or eta")
    value: Any = None


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    text: str
    author_id: str
    timestamp: str


class ChangeRecordResponse(BaseModel):
    """Audit-trail entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    initiative_id: str
    initiative_title: str
    field: str
    old_value: Any
    new_value: Any
    changed_by: str
    timestamp: str


class InitiativeResponse(BaseModel):
    """Initiative response (history is served by GET /initiatives/{id}/history)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    owner_id: str
    status: str
    priority: str
    work_type: str
    asset_class: str
    initiative_type: str
    estimated_effort: float | None
    actual_effort: float | None
    eta: str | None
    last_updated: str
    risk_action_log: str | None
    quarter: str | None
    l2_pillar: str | None
    secondary_owner: str | None
    definition_of_done: str | None
    comments: list[CommentResponse]


class TriggeredRunResponse(BaseModel):
    workflow_id: str
    workflow_name: str
    log: ExecutionLogResponse


class FieldChangeResponse(BaseModel):
    """Initiative after the edit plus the workflows the edit triggered."""

    initiative: InitiativeResponse
    changed: bool
    triggered: list[TriggeredRunResponse]

    @classmethod
    def from_result(cls, result: FieldChangeResult) -> "FieldChangeResponse":
        return cls(
            initiative=InitiativeResponse.model_validate(result.initiative),
            changed=result.changed,
            triggered=[
                TriggeredRunResponse(
                    workflow_id=run.workflow_id,
                    workflow_name=run.workflow_name,
                    log=ExecutionLogResponse.from_log(run.log),
                )
                for run in result.triggered
            ],
        )
