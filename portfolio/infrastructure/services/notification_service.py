"""Notification senders: log-only and chat webhook (implement INotificationService)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from portfolio.domain.enums import NotificationKind
from portfolio.domain.exceptions import NotificationDeliveryError
from portfolio.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from portfolio.domain.value_objects import NotificationRequest

logger = get_logger(__name__)


class LogOnlyNotificationService:
    """Logs notifications instead of sending them.

    Default sender when no webhook is configured.
    """

    def __init__(self) -> None:
        self.sent: int = 0

    async def send(self, request: NotificationRequest) -> None:
        logger.info(
            "Workflow notify: would send to %s %s about initiative %s",
            request.kind.value,
            request.target,
            request.initiative_id,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Workflow notify message (first 500 chars): %s", request.message[:500])
        self.sent += 1


def format_webhook_text(request: NotificationRequest) -> str:
    """Message body posted to the chat webhook."""
    if request.kind == NotificationKind.CHANNEL:
        prefix = f"[{request.target}]"
    else:
        prefix = f"@{request.target}"
    return f'{prefix} {request.message} (initiative: "{request.initiative_title}")'


class ChatWebhookNotificationService:
    """Posts ``{"text": ...}`` to an incoming chat webhook.

    Owner notifications mention the owner; channel notifications carry the
    channel name in the text (one webhook serves every channel).
    """

    def __init__(
        self,
        webhook_url: str,
        *,
        timeout_seconds: float = 5.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.webhook_url = webhook_url
        self._http = (
            http_client if http_client is not None else httpx.AsyncClient(timeout=timeout_seconds)
        )
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it."""
        if self._owns_http:
            await self._http.aclose()

    async def send(self, request: NotificationRequest) -> None:
        try:
            response = await self._http.post(
                self.webhook_url, json={"text": format_webhook_text(request)}
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(request.target, str(e)) from e
        logger.info(
            "Workflow notify: posted to webhook for %s %s (initiative %s)",
            request.kind.value,
            request.target,
            request.initiative_id,
        )
