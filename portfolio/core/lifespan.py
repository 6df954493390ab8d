"""Application state wiring and lifespan (startup/shutdown).

init_app_state() runs when the app is created so request handlers always
find a store, lock and notifier on app.state (ASGI test transports do not
run lifespan). create_lifespan() handles logging, optional seeding and
shutdown of outbound clients and telemetry.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from portfolio.core.config import Settings, get_settings
from portfolio.infrastructure.persistence.document_store import (
    IDocumentStore,
    InMemoryDocumentStore,
    LocalFileDocumentStore,
)
from portfolio.infrastructure.services.notification_service import (
    ChatWebhookNotificationService,
    LogOnlyNotificationService,
)
from portfolio.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


def build_document_store(settings: Settings) -> IDocumentStore:
    if settings.storage_backend == "local":
        return LocalFileDocumentStore(settings.storage_root)
    return InMemoryDocumentStore()


def build_notification_service(
    settings: Settings,
) -> LogOnlyNotificationService | ChatWebhookNotificationService:
    if settings.notification_backend == "webhook" and settings.notification_webhook_url:
        return ChatWebhookNotificationService(
            settings.notification_webhook_url,
            timeout_seconds=settings.notification_timeout_seconds,
        )
    return LogOnlyNotificationService()


def init_app_state(app: FastAPI, settings: Settings) -> None:
    """Attach the document store, its lock and the notification sender to app.state."""
    app.state.document_store = build_document_store(settings)
    # One lock per store: use cases hold it for every read-modify-write.
    app.state.store_lock = asyncio.Lock()
    app.state.notification_service = build_notification_service(settings)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, sample data (if enabled). Shutdown: webhook HTTP
    client close, telemetry shutdown.
    """
    settings = get_settings()

    # ---- Startup ----
    setup_logging()
    logger.info(
        "Starting %s %s (storage=%s, notifications=%s)",
        settings.app_name,
        settings.app_version,
        settings.storage_backend,
        settings.notification_backend,
    )
    if settings.seed_sample_data:
        from portfolio.infrastructure.persistence.seed import seed_sample_data

        await seed_sample_data(app.state.document_store)

    yield

    # ---- Shutdown ----
    notifier = getattr(app.state, "notification_service", None)
    if isinstance(notifier, ChatWebhookNotificationService):
        await notifier.aclose()
        logger.info("Notification HTTP client closed")

    from portfolio.shared.telemetry.telemetry import get_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        logger.info("Telemetry shutdown complete")
