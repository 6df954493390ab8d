"""Initiative API: thin routes delegating to InitiativeService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from portfolio.api.v1.dependencies import get_actor_id, get_initiative_service
from portfolio.application.use_cases.initiatives import InitiativeService
from portfolio.core.limiter import limit_writes
from portfolio.schemas.initiative import (
    ChangeRecordResponse,
    FieldChangeResponse,
    InitiativeCreateRequest,
    InitiativeFieldUpdate,
    InitiativeResponse,
)

router = APIRouter()


@router.get("", response_model=list[InitiativeResponse])
async def list_initiatives(
    service: Annotated[InitiativeService, Depends(get_initiative_service)],
):
    initiatives = await service.list_initiatives()
    return [InitiativeResponse.model_validate(i) for i in initiatives]


@router.post("", response_model=InitiativeResponse, status_code=201)
@limit_writes
async def create_initiative(
    request: Request,
    body: InitiativeCreateRequest,
    service: Annotated[InitiativeService, Depends(get_initiative_service)],
    actor_id: Annotated[str, Depends(get_actor_id)],
):
    initiative = await service.create_initiative(
        body.title, body.owner_id, actor_id, **body.attributes()
    )
    return InitiativeResponse.model_validate(initiative)


@router.get("/{initiative_id}", response_model=InitiativeResponse)
async def get_initiative(
    initiative_id: str,
    service: Annotated[InitiativeService, Depends(get_initiative_service)],
):
    return InitiativeResponse.model_validate(await service.get_initiative(initiative_id))


@router.get("/{initiative_id}/history", response_model=list[ChangeRecordResponse])
async def get_initiative_history(
    initiative_id: str,
    service: Annotated[InitiativeService, Depends(get_initiative_service)],
):
    """Change records, oldest first (user edits and workflow changes)."""
    history = await service.get_history(initiative_id)
    return [ChangeRecordResponse.model_validate(h) for h in history]


@router.patch("/{initiative_id}", response_model=FieldChangeResponse)
@limit_writes
async def update_initiative_field(
    request: Request,
    initiative_id: str,
    body: InitiativeFieldUpdate,
    service: Annotated[InitiativeService, Depends(get_initiative_service)],
    actor_id: Annotated[str, Depends(get_actor_id)],
):
    """Edit one field; workflows listening on that field run against this initiative."""
    result = await service.update_field(initiative_id, body.field, body.value, actor_id)
    return FieldChangeResponse.from_result(result)
