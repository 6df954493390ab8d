"""Repository interfaces (ports) for the application layer.

Persistence is a whole-collection load/save contract over a document store:
use cases load the list, mutate it, and save it back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from portfolio.domain.entities import Initiative, WorkflowEntity


class IWorkflowRepository(Protocol):
    """Protocol for custom (user-authored) workflow persistence. System rules are never stored."""

    async def list_workflows(self) -> list[WorkflowEntity]:
        """Return all custom workflows in their stored order."""

    async def save_workflows(self, workflows: list[WorkflowEntity]) -> None:
        """Replace the stored custom workflows."""


class IInitiativeRepository(Protocol):
    """Protocol for initiative persistence."""

    async def list_initiatives(self) -> list[Initiative]:
        """Return all initiatives in their stored order."""

    async def save_initiatives(self, initiatives: list[Initiative]) -> None:
        """Replace the stored initiatives."""
