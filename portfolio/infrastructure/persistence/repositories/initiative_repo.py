"""Initiative repository over a document store (implements IInitiativeRepository)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from portfolio.infrastructure.exceptions import DocumentDecodeError, StorageException
from portfolio.infrastructure.persistence.codec import (
    initiative_from_document,
    initiative_to_document,
)

if TYPE_CHECKING:
    from portfolio.domain.entities import Initiative
    from portfolio.infrastructure.persistence.document_store import IDocumentStore

INITIATIVES_KEY = "initiatives"


class InitiativeRepository:
    """Stores all initiatives as one JSON list, in order."""

    def __init__(self, store: IDocumentStore) -> None:
        self.store = store

    async def list_initiatives(self) -> list[Initiative]:
        docs = await self.store.load(INITIATIVES_KEY)
        if docs is None:
            return []
        if not isinstance(docs, list):
            raise DocumentDecodeError(INITIATIVES_KEY, "expected a list of initiatives")
        try:
            return [initiative_from_document(doc) for doc in docs]
        except StorageException:
            raise
        except (TypeError, ValueError, AttributeError) as e:
            raise DocumentDecodeError(INITIATIVES_KEY, str(e)) from e

    async def save_initiatives(self, initiatives: list[Initiative]) -> None:
        await self.store.save(INITIATIVES_KEY, [initiative_to_document(i) for i in initiatives])
