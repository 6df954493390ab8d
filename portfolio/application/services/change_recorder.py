"""Audit trail: turn engine field changes into ChangeRecords on the initiative's history."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from portfolio.domain.entities import ChangeRecord
from portfolio.shared.utils.datetime import utc_timestamp
from portfolio.shared.utils.generators import generate_prefixed_id

if TYPE_CHECKING:
    from portfolio.application.interfaces.services import RecordChange
    from portfolio.domain.entities import Initiative


def build_change_record(
    initiative: Initiative,
    field: str,
    old_value: Any,
    new_value: Any,
    changed_by: str,
    now: datetime | None = None,
) -> ChangeRecord:
    return ChangeRecord(
        id=generate_prefixed_id("chg"),
        initiative_id=initiative.id,
        initiative_title=initiative.title,
        field=field,
        old_value=old_value,
        new_value=new_value,
        changed_by=changed_by,
        timestamp=utc_timestamp(now),
    )


def history_recorder(changed_by: str, now: datetime | None = None) -> RecordChange:
    """Return a record_change callback that appends to ``initiative.history``."""

    def record_change(initiative: Initiative, field: str, old_value: Any, new_value: Any) -> None:
        initiative.add_change(
            build_change_record(initiative, field, old_value, new_value, changed_by, now)
        )

    return record_change
