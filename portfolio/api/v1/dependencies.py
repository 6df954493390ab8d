"""API dependency injection (composition root).

Builds repositories and use cases from the document store, lock and
notification sender attached to app.state. Routes depend only on these.
"""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import Depends, Request

from portfolio.application.use_cases.initiatives import InitiativeService
from portfolio.application.use_cases.workflows import TriggerDispatcher, WorkflowService
from portfolio.core.config import get_settings
from portfolio.infrastructure.persistence.document_store import IDocumentStore
from portfolio.infrastructure.persistence.repositories import (
    InitiativeRepository,
    WorkflowRepository,
)

ANONYMOUS_ACTOR = "anonymous"


def get_document_store(request: Request) -> IDocumentStore:
    return request.app.state.document_store


def get_store_lock(request: Request) -> asyncio.Lock:
    return request.app.state.store_lock


def get_notification_service(request: Request):
    return request.app.state.notification_service


def get_actor_id(request: Request) -> str:
    """Caller identity from the configured actor header (permission checks are upstream)."""
    value = request.headers.get(get_settings().actor_header_name, "").strip()
    return value or ANONYMOUS_ACTOR


def get_workflow_repo(
    store: Annotated[IDocumentStore, Depends(get_document_store)],
) -> WorkflowRepository:
    return WorkflowRepository(store)


def get_initiative_repo(
    store: Annotated[IDocumentStore, Depends(get_document_store)],
) -> InitiativeRepository:
    return InitiativeRepository(store)


def get_workflow_service(
    workflow_repo: Annotated[WorkflowRepository, Depends(get_workflow_repo)],
    initiative_repo: Annotated[InitiativeRepository, Depends(get_initiative_repo)],
    lock: Annotated[asyncio.Lock, Depends(get_store_lock)],
    notification_service=Depends(get_notification_service),
) -> WorkflowService:
    return WorkflowService(
        workflow_repo,
        initiative_repo,
        notification_service=notification_service,
        lock=lock,
        execution_log_limit=get_settings().execution_log_limit,
    )


def get_initiative_service(
    initiative_repo: Annotated[InitiativeRepository, Depends(get_initiative_repo)],
    workflow_repo: Annotated[WorkflowRepository, Depends(get_workflow_repo)],
    lock: Annotated[asyncio.Lock, Depends(get_store_lock)],
    notification_service=Depends(get_notification_service),
) -> InitiativeService:
    return InitiativeService(
        initiative_repo,
        workflow_repo,
        TriggerDispatcher(),
        notification_service,
        lock=lock,
    )
