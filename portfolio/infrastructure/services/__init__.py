"""Infrastructure services."""

from portfolio.infrastructure.services.notification_service import (
    ChatWebhookNotificationService,
    LogOnlyNotificationService,
)

__all__ = ["ChatWebhookNotificationService", "LogOnlyNotificationService"]
