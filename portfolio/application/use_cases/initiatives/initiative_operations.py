"""Initiative operations: list, get, create, history, and single-field edits."""

from __future__ import annotations

import asyncio
from datetime import date
from numbers import Real
from typing import TYPE_CHECKING, Any

from portfolio.application.dtos import FieldChangeResult
from portfolio.application.services.change_recorder import history_recorder
from portfolio.application.services.notification_delivery import deliver_notifications
from portfolio.application.services.rule_catalog import get_system_rules, merge_catalog
from portfolio.application.use_cases.workflows.trigger_dispatcher import TriggerDispatcher
from portfolio.domain.entities import Initiative
from portfolio.domain.enums import AssetClass, InitiativeType, Priority, Status, WorkType
from portfolio.domain.exceptions import ResourceNotFoundException, ValidationException
from portfolio.shared.telemetry.logging import get_logger
from portfolio.shared.telemetry.tracing import traced
from portfolio.shared.utils.datetime import today_iso, utc_now, utc_timestamp
from portfolio.shared.utils.generators import generate_prefixed_id

if TYPE_CHECKING:
    from portfolio.application.interfaces.repositories import (
        IInitiativeRepository,
        IWorkflowRepository,
    )
    from portfolio.application.interfaces.services import INotificationService
    from portfolio.domain.entities import ChangeRecord

logger = get_logger(__name__)

# Editable field -> label written to the change history.
EDITABLE_FIELDS: dict[str, str] = {
    "status": "Status",
    "priority": "Priority",
    "eta": "ETA",
    "estimated_effort": "Effort",
    "actual_effort": "Actual Effort",
    "risk_action_log": "Risk Action Log",
    "owner_id": "Owner",
}

# Optional fields accepted by create_initiative (besides title and owner_id).
CREATE_FIELDS = frozenset({
    "status",
    "priority",
    "work_type",
    "asset_class",
    "initiative_type",
    "estimated_effort",
    "actual_effort",
    "eta",
    "risk_action_log",
    "quarter",
    "l2_pillar",
    "secondary_owner",
    "definition_of_done",
})

_ENUM_FIELDS: dict[str, list[str]] = {
    "status": Status.values(),
    "priority": Priority.values(),
    "work_type": WorkType.values(),
    "asset_class": AssetClass.values(),
    "initiative_type": InitiativeType.values(),
}


def _check_iso_date(field: str, value: Any) -> None:
    if not isinstance(value, str):
        raise ValidationException(f"{field} must be a YYYY-MM-DD date", field=field)
    try:
        date.fromisoformat(value)
    except ValueError as e:
        raise ValidationException(f"{field} must be a YYYY-MM-DD date", field=field) from e


def _validate_value(field: str, value: Any) -> Any:
    """Return the normalized value for ``field`` or raise ValidationException."""
    if field in _ENUM_FIELDS:
        if value not in _ENUM_FIELDS[field]:
            raise ValidationException(
                f"{field} must be one of {_ENUM_FIELDS[field]}", field=field
            )
        return value
    if field == "eta":
        if value in (None, ""):
            return None
        _check_iso_date(field, value)
        return value
    if field in ("estimated_effort", "actual_effort"):
        if value is None:
            return 0
        if not isinstance(value, Real) or isinstance(value, bool) or value < 0:
            raise ValidationException(f"{field} must be a non-negative number", field=field)
        return value
    if field == "owner_id":
        if not isinstance(value, str) or not value.strip():
            raise ValidationException("owner_id must not be blank", field=field)
        return value.strip()
    if field == "risk_action_log":
        if value is not None and not isinstance(value, str):
            raise ValidationException("risk_action_log must be text", field=field)
        return value
    return value


class InitiativeService:
    """Query and edit initiatives. Edits run the workflows listening on the edited field."""

    def __init__(
        self,
        initiative_repo: IInitiativeRepository,
        workflow_repo: IWorkflowRepository,
        dispatcher: TriggerDispatcher | None = None,
        notification_service: INotificationService | None = None,
        *,
        lock: asyncio.Lock | None = None,
    ) -> None:
        self.initiative_repo = initiative_repo
        self.workflow_repo = workflow_repo
        self.dispatcher = dispatcher or TriggerDispatcher()
        self.notification_service = notification_service
        self.lock = lock or asyncio.Lock()

    @staticmethod
    def _index_of(initiatives: list[Initiative], initiative_id: str) -> int:
        for i, initiative in enumerate(initiatives):
            if initiative.id == initiative_id:
                return i
        raise ResourceNotFoundException("initiative", initiative_id)

    async def list_initiatives(self) -> list[Initiative]:
        return await self.initiative_repo.list_initiatives()

    async def get_initiative(self, initiative_id: str) -> Initiative:
        initiatives = await self.initiative_repo.list_initiatives()
        return initiatives[self._index_of(initiatives, initiative_id)]

    async def get_history(self, initiative_id: str) -> list[ChangeRecord]:
        """Return the initiative's change records, oldest first."""
        initiative = await self.get_initiative(initiative_id)
        return list(initiative.history)

    async def create_initiative(
        self,
        title: str,
        owner_id: str,
        actor_id: str,
        **attributes: Any,
    ) -> Initiative:
        """Create an initiative; ``attributes`` are optional Initiative fields."""
        if not title or not title.strip():
            raise ValidationException("title must not be blank", field="title")
        owner = _validate_value("owner_id", owner_id)
        values: dict[str, Any] = {}
        for key, value in attributes.items():
            if key not in CREATE_FIELDS:
                raise ValidationException(f"{key} cannot be set on create", field=key)
            if value is None and key in _ENUM_FIELDS:
                continue
            values[key] = _validate_value(key, value)
        initiative = Initiative(
            id=generate_prefixed_id("ini"),
            title=title.strip(),
            owner_id=owner,
            last_updated=today_iso(),
            **values,
        )
        async with self.lock:
            initiatives = await self.initiative_repo.list_initiatives()
            initiatives.append(initiative)
            await self.initiative_repo.save_initiatives(initiatives)
        logger.info("Initiative %s created by %s", initiative.id, actor_id)
        return initiative

    @traced("initiative.update_field")
    async def update_field(
        self,
        initiative_id: str,
        field: str,
        value: Any,
        actor_id: str,
    ) -> FieldChangeResult:
        """Set one field, record it, and run the workflows that listen on that field.

        An edit that does not change the value records nothing and triggers
        nothing. Custom workflows that ran get run_count/last_run bumped
        (their execution log is left as is).
        """
        if field not in EDITABLE_FIELDS:
            raise ValidationException(
                f"Field {field!r} is not editable; expected one of {sorted(EDITABLE_FIELDS)}",
                field=field,
            )
        new_value = _validate_value(field, value)
        now = utc_now()
        record_change = history_recorder(actor_id, now)

        async with self.lock:
            initiatives = await self.initiative_repo.list_initiatives()
            initiative = initiatives[self._index_of(initiatives, initiative_id)]
            old_value = getattr(initiative, field)
            if old_value == new_value:
                return FieldChangeResult(initiative=initiative, changed=False)

            record_change(initiative, EDITABLE_FIELDS[field], old_value, new_value)
            setattr(initiative, field, new_value)
            initiative.last_updated = today_iso(now)

            custom = await self.workflow_repo.list_workflows()
            runs = await self.dispatcher.dispatch_field_change(
                initiative,
                field,
                merge_catalog(get_system_rules(now), custom),
                record_change,
                now=now,
            )
            await self.initiative_repo.save_initiatives(initiatives)

            ran_custom = {run.workflow_id for run in runs}
            touched = False
            for workflow in custom:
                if workflow.id in ran_custom and workflow.is_mutable:
                    workflow.record_triggered_run(utc_timestamp(now))
                    touched = True
            if touched:
                await self.workflow_repo.save_workflows(custom)

        for run in runs:
            await deliver_notifications(self.notification_service, run.log.notifications)
        logger.info(
            "Initiative %s field %s changed by %s; %d workflows triggered",
            initiative_id,
            field,
            actor_id,
            len(runs),
        )
        return FieldChangeResult(initiative=initiative, changed=True, triggered=runs)
