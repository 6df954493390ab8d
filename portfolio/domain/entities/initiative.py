"""Initiative domain entity.

An initiative is the tracked work item the workflow engine reads and
mutates. Dates (eta, last_updated) are ISO ``YYYY-MM-DD`` strings; effort is
in staff weeks and a missing value counts as 0.
"""

import copy
from dataclasses import dataclass, field
from typing import Any

from portfolio.domain.enums import AssetClass, InitiativeType, Priority, Status, WorkType


@dataclass
class Comment:
    """Comment on an initiative (user-authored or posted by automation)."""

    id: str
    text: str
    author_id: str
    timestamp: str


@dataclass
class ChangeRecord:
    """Audit-trail entry for one field change on an initiative."""

    id: str
    initiative_id: str
    initiative_title: str
    field: str
    old_value: Any
    new_value: Any
    changed_by: str
    timestamp: str


@dataclass
class Initiative:
    """Domain entity for a tracked initiative (mutable; the engine edits it in place)."""

    id: str
    title: str
    owner_id: str
    status: str = Status.NOT_STARTED.value
    priority: str = Priority.P1.value
    work_type: str = WorkType.PLANNED.value
    asset_class: str = AssetClass.PL.value
    initiative_type: str = InitiativeType.WP.value
    estimated_effort: float | None = 0
    actual_effort: float | None = 0
    eta: str | None = None
    last_updated: str = ""
    risk_action_log: str | None = None
    quarter: str | None = None
    l2_pillar: str | None = None
    secondary_owner: str | None = None
    definition_of_done: str | None = None
    comments: list[Comment] = field(default_factory=list)
    history: list[ChangeRecord] = field(default_factory=list)

    @property
    def has_risk_action_log(self) -> bool:
        """True when the risk/action log has non-whitespace text."""
        return bool(self.risk_action_log and self.risk_action_log.strip())

    def add_comment(self, comment: Comment) -> None:
        self.comments.append(comment)

    def add_change(self, change: ChangeRecord) -> None:
        self.history.append(change)

    def snapshot(self) -> "Initiative":
        """Deep copy, used to run workflows without touching the stored record."""
        return copy.deepcopy(self)
