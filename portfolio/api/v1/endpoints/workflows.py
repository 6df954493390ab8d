"""Workflow API: thin routes delegating to WorkflowService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from portfolio.api.v1.dependencies import get_actor_id, get_workflow_service
from portfolio.application.use_cases.workflows import WorkflowService
from portfolio.core.limiter import limit_runs, limit_writes
from portfolio.domain.value_objects import parse_action, parse_condition
from portfolio.schemas.workflow import (
    ExecutionLogResponse,
    WorkflowCreateRequest,
    WorkflowResponse,
    WorkflowUpdate,
)

router = APIRouter()


@router.get("", response_model=list[WorkflowResponse])
async def list_workflows(
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
    search: str | None = Query(default=None, max_length=255),
):
    """System rules first, then custom workflows; optional name/description search."""
    workflows = await service.list_workflows(search=search)
    return [WorkflowResponse.from_entity(w) for w in workflows]


@router.post("", response_model=WorkflowResponse, status_code=201)
@limit_writes
async def create_workflow(
    request: Request,
    body: WorkflowCreateRequest,
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
    actor_id: Annotated[str, Depends(get_actor_id)],
):
    workflow = await service.create_workflow(
        name=body.name,
        trigger=body.trigger,
        action=parse_action(body.action),
        actor_id=actor_id,
        description=body.description,
        trigger_config=body.trigger_config,
        scope=body.scope.to_domain() if body.scope else None,
        condition=parse_condition(body.condition) if body.condition else None,
        enabled=body.enabled,
    )
    return WorkflowResponse.from_entity(workflow)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str,
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
):
    return WorkflowResponse.from_entity(await service.get_workflow(workflow_id))


@router.put("/{workflow_id}", response_model=WorkflowResponse)
@limit_writes
async def update_workflow(
    request: Request,
    workflow_id: str,
    body: WorkflowUpdate,
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
):
    """Partial update of a custom workflow. System rules return 409."""
    workflow = await service.update_workflow(workflow_id, body.to_changes())
    return WorkflowResponse.from_entity(workflow)


@router.delete("/{workflow_id}", status_code=204)
@limit_writes
async def delete_workflow(
    request: Request,
    workflow_id: str,
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
):
    await service.delete_workflow(workflow_id)
    return Response(status_code=204)


@router.post("/{workflow_id}/toggle", response_model=WorkflowResponse)
@limit_writes
async def toggle_workflow(
    request: Request,
    workflow_id: str,
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
):
    return WorkflowResponse.from_entity(await service.toggle_workflow(workflow_id))


@router.post("/{workflow_id}/duplicate", response_model=WorkflowResponse, status_code=201)
@limit_writes
async def duplicate_workflow(
    request: Request,
    workflow_id: str,
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
    actor_id: Annotated[str, Depends(get_actor_id)],
):
    return WorkflowResponse.from_entity(await service.duplicate_workflow(workflow_id, actor_id))


@router.post("/{workflow_id}/run", response_model=ExecutionLogResponse)
@limit_runs
async def run_workflow(
    request: Request,
    workflow_id: str,
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
    actor_id: Annotated[str, Depends(get_actor_id)],
):
    """Run the workflow over all initiatives now and return the run log."""
    log = await service.run_workflow(workflow_id, actor_id)
    return ExecutionLogResponse.from_log(log)


@router.get("/{workflow_id}/executions", response_model=list[ExecutionLogResponse])
async def get_workflow_executions(
    workflow_id: str,
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
):
    """Stored run logs (last 10, oldest first). Always empty for system rules."""
    logs = await service.get_executions(workflow_id)
    return [ExecutionLogResponse.from_log(log) for log in logs]
