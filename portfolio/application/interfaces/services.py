"""Service interfaces (ports) for the application layer.

Protocols define contracts for collaborators injected into the workflow
engine and use cases (change recording, notification delivery).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from portfolio.domain.entities import Initiative
    from portfolio.domain.value_objects import NotificationRequest


# Called once per actually-changed field, before the mutation is applied:
# record_change(initiative, field_label, old_value, new_value)
RecordChange = Callable[["Initiative", str, Any, Any], None]

# Receives notification requests emitted by notify actions while a record is processed.
NotifyCallback = Callable[["NotificationRequest"], None]


class INotificationService(Protocol):
    """Protocol for delivering notifications decided by workflow runs."""

    async def send(self, request: NotificationRequest) -> None:
        """Deliver one notification. Raises NotificationDeliveryError on failure."""
