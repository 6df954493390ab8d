"""Custom workflow repository over a document store (implements IWorkflowRepository)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from portfolio.infrastructure.exceptions import DocumentDecodeError, StorageException
from portfolio.infrastructure.persistence.codec import (
    workflow_from_document,
    workflow_to_document,
)
from portfolio.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from portfolio.domain.entities import WorkflowEntity
    from portfolio.infrastructure.persistence.document_store import IDocumentStore

logger = get_logger(__name__)

WORKFLOWS_KEY = "workflows"


class WorkflowRepository:
    """Stores custom workflows as one JSON list. System rules are filtered out on save."""

    def __init__(self, store: IDocumentStore) -> None:
        self.store = store

    async def list_workflows(self) -> list[WorkflowEntity]:
        docs = await self.store.load(WORKFLOWS_KEY)
        if docs is None:
            return []
        if not isinstance(docs, list):
            raise DocumentDecodeError(WORKFLOWS_KEY, "expected a list of workflows")
        try:
            return [workflow_from_document(doc) for doc in docs]
        except StorageException:
            raise
        except (TypeError, ValueError, AttributeError) as e:
            raise DocumentDecodeError(WORKFLOWS_KEY, str(e)) from e

    async def save_workflows(self, workflows: list[WorkflowEntity]) -> None:
        custom = [w for w in workflows if not w.system]
        if len(custom) != len(workflows):
            logger.warning("Dropped %d system rules from workflow save", len(workflows) - len(custom))
        await self.store.save(WORKFLOWS_KEY, [workflow_to_document(w) for w in custom])
