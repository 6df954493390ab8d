"""Scope filter: narrow the initiatives a workflow considers before conditions run."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import TYPE_CHECKING, Any

from portfolio.domain.exceptions import ScopeFilterError

if TYPE_CHECKING:
    from portfolio.domain.entities import Initiative, WorkflowScope

# scope attribute -> initiative attribute
_SCOPE_FIELDS: tuple[tuple[str, str], ...] = (
    ("asset_classes", "asset_class"),
    ("work_types", "work_type"),
    ("owners", "owner_id"),
)


def _allowed_values(scope: WorkflowScope, scope_field: str) -> Collection[Any] | None:
    allowed = getattr(scope, scope_field, None)
    if allowed is None:
        return None
    if isinstance(allowed, (str, bytes)) or not isinstance(allowed, Collection):
        raise ScopeFilterError(
            f"Scope filter '{scope_field}' must be a list of values, got {type(allowed).__name__}",
            scope_field=scope_field,
        )
    return allowed


def filter_by_scope(
    initiatives: Sequence[Initiative],
    scope: WorkflowScope | None,
) -> Sequence[Initiative]:
    """Return the initiatives that satisfy every present scope filter, in input order.

    With no scope the input is returned unchanged (same object).

    Raises:
        ScopeFilterError: If a present filter is not a collection of values.
    """
    if scope is None:
        return initiatives

    checks: list[tuple[str, Collection[Any]]] = []
    for scope_field, record_field in _SCOPE_FIELDS:
        allowed = _allowed_values(scope, scope_field)
        if allowed is not None:
            checks.append((record_field, allowed))
    return [
        initiative
        for initiative in initiatives
        if all(getattr(initiative, record_field) in allowed for record_field, allowed in checks)
    ]
