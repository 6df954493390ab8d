"""Application ports: repository and service Protocols."""

from portfolio.application.interfaces.repositories import (
    IInitiativeRepository,
    IWorkflowRepository,
)
from portfolio.application.interfaces.services import (
    INotificationService,
    NotifyCallback,
    RecordChange,
)

__all__ = [
    "IInitiativeRepository",
    "INotificationService",
    "IWorkflowRepository",
    "NotifyCallback",
    "RecordChange",
]
