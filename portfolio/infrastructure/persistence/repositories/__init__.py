"""Document-store backed repositories."""

from portfolio.infrastructure.persistence.repositories.initiative_repo import (
    INITIATIVES_KEY,
    InitiativeRepository,
)
from portfolio.infrastructure.persistence.repositories.workflow_repo import (
    WORKFLOWS_KEY,
    WorkflowRepository,
)

__all__ = [
    "INITIATIVES_KEY",
    "InitiativeRepository",
    "WORKFLOWS_KEY",
    "WorkflowRepository",
]
