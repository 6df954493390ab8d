"""Workflow engine services: scope filter, condition evaluator, action executor, runner, catalog."""

from portfolio.application.services.action_executor import apply_action
from portfolio.application.services.condition_evaluator import evaluate_condition
from portfolio.application.services.rule_catalog import (
    ensure_mutable,
    get_system_rules,
    merge_catalog,
)
from portfolio.application.services.scope_filter import filter_by_scope
from portfolio.application.services.workflow_runner import WorkflowRunner

__all__ = [
    "WorkflowRunner",
    "apply_action",
    "ensure_mutable",
    "evaluate_condition",
    "filter_by_scope",
    "get_system_rules",
    "merge_catalog",
]
