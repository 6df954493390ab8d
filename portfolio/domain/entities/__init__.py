"""Domain entities: initiatives and workflows."""

from portfolio.domain.entities.initiative import ChangeRecord, Comment, Initiative
from portfolio.domain.entities.workflow import (
    EXECUTION_LOG_LIMIT,
    SYSTEM_ACTOR,
    ExecutionLog,
    WorkflowEntity,
    WorkflowScope,
)

__all__ = [
    "ChangeRecord",
    "Comment",
    "EXECUTION_LOG_LIMIT",
    "ExecutionLog",
    "Initiative",
    "SYSTEM_ACTOR",
    "WorkflowEntity",
    "WorkflowScope",
]
