"""Deliver notifications collected from workflow runs."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from portfolio.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from portfolio.application.interfaces.services import INotificationService
    from portfolio.domain.value_objects import NotificationRequest

logger = get_logger(__name__)


async def deliver_notifications(
    notification_service: INotificationService | None,
    requests: Iterable[NotificationRequest],
) -> int:
    """Send each request; failures are logged and never interrupt the caller.

    Returns:
        Number of notifications delivered.
    """
    if notification_service is None:
        return 0
    delivered = 0
    for request in requests:
        try:
            await notification_service.send(request)
            delivered += 1
        except Exception as e:
            logger.warning(
                "Notification to %s %s about initiative %s failed: %s",
                request.kind.value,
                request.target,
                request.initiative_id,
                e,
            )
    return delivered
