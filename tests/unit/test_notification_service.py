"""Tests for notification senders and delivery."""

import json

import httpx
import pytest

from portfolio.application.services.notification_delivery import deliver_notifications
from portfolio.domain.enums import NotificationKind
from portfolio.domain.exceptions import NotificationDeliveryError
from portfolio.domain.value_objects import NotificationRequest
from portfolio.infrastructure.services import (
    ChatWebhookNotificationService,
    LogOnlyNotificationService,
)
from portfolio.infrastructure.services.notification_service import format_webhook_text

WEBHOOK_URL = "https://chat.example.com/hooks/abc"


def _request(kind=NotificationKind.OWNER, target="u_dana") -> NotificationRequest:
    return NotificationRequest(
        kind=kind,
        target=target,
        initiative_id="ini_1",
        initiative_title="Pricing refresh",
        message="Please update",
    )


def test_format_webhook_text() -> None:
    assert format_webhook_text(_request()) == '@u_dana Please update (initiative: "Pricing refresh")'
    channel = _request(NotificationKind.CHANNEL, "#portfolio")
    assert format_webhook_text(channel) == '[#portfolio] Please update (initiative: "Pricing refresh")'


async def test_log_only_counts_sends() -> None:
    service = LogOnlyNotificationService()
    await service.send(_request())
    await service.send(_request())
    assert service.sent == 2


async def test_webhook_posts_text() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        service = ChatWebhookNotificationService(WEBHOOK_URL, http_client=client)
        await service.send(_request())
        await service.aclose()
        assert not client.is_closed

    assert str(seen[0].url) == WEBHOOK_URL
    assert json.loads(seen[0].content) == {
        "text": '@u_dana Please update (initiative: "Pricing refresh")'
    }


async def test_webhook_error_status_raises_delivery_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    async with httpx.AsyncClient(transport=transport) as client:
        service = ChatWebhookNotificationService(WEBHOOK_URL, http_client=client)
        with pytest.raises(NotificationDeliveryError) as exc_info:
            await service.send(_request())
    assert exc_info.value.details["target"] == "u_dana"


async def test_delivery_continues_after_failure() -> None:
    calls = []

    class Flaky:
        async def send(self, request: NotificationRequest) -> None:
            calls.append(request.target)
            if request.target == "u_bad":
                raise NotificationDeliveryError(request.target, "down")

    delivered = await deliver_notifications(
        Flaky(), [_request(target="u_bad"), _request(target="u_good")]
    )
    assert delivered == 1
    assert calls == ["u_bad", "u_good"]


async def test_delivery_without_service() -> None:
    assert await deliver_notifications(None, [_request()]) == 0
