"""Workflow use cases."""

from portfolio.application.use_cases.workflows.trigger_dispatcher import TriggerDispatcher
from portfolio.application.use_cases.workflows.workflow_operations import WorkflowService

__all__ = ["TriggerDispatcher", "WorkflowService"]
