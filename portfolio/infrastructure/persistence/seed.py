"""Sample initiatives for local development (SEED_SAMPLE_DATA=true)."""

from datetime import datetime

from portfolio.domain.entities import Initiative
from portfolio.domain.enums import AssetClass, InitiativeType, Priority, Status, WorkType
from portfolio.infrastructure.persistence.codec import initiative_to_document
from portfolio.infrastructure.persistence.document_store import IDocumentStore
from portfolio.infrastructure.persistence.repositories import INITIATIVES_KEY
from portfolio.shared.telemetry.logging import get_logger
from portfolio.shared.utils.datetime import add_days_iso

logger = get_logger(__name__)


def sample_initiatives(now: datetime | None = None) -> list[Initiative]:
    """A small portfolio that exercises each system rule."""
    return [
        Initiative(
            id="ini_sample_overdue",
            title="Claims pricing model refresh",
            owner_id="u_dana",
            status=Status.IN_PROGRESS.value,
            priority=Priority.P0.value,
            asset_class=AssetClass.PL.value,
            estimated_effort=8,
            actual_effort=6,
            eta=add_days_iso(-3, now),
            last_updated=add_days_iso(-2, now),
            quarter="Q3",
        ),
        Initiative(
            id="ini_sample_stale",
            title="Dealer portal onboarding",
            owner_id="u_lee",
            status=Status.IN_PROGRESS.value,
            asset_class=AssetClass.AUTO.value,
            estimated_effort=5,
            actual_effort=2,
            eta=add_days_iso(30, now),
            last_updated=add_days_iso(-14, now),
        ),
        Initiative(
            id="ini_sample_not_started",
            title="POS terminal reconciliation",
            owner_id="u_sam",
            asset_class=AssetClass.POS.value,
            work_type=WorkType.UNPLANNED.value,
            initiative_type=InitiativeType.BAU.value,
            estimated_effort=3,
            actual_effort=0,
            eta=add_days_iso(10, now),
            last_updated=add_days_iso(-1, now),
        ),
        Initiative(
            id="ini_sample_done",
            title="Advisory fee disclosure update",
            owner_id="u_dana",
            status=Status.DONE.value,
            priority=Priority.P2.value,
            asset_class=AssetClass.ADVISORY.value,
            estimated_effort=2,
            actual_effort=2,
            eta=add_days_iso(-20, now),
            last_updated=add_days_iso(-20, now),
        ),
    ]


async def seed_sample_data(store: IDocumentStore) -> bool:
    """Write sample initiatives if none are stored. Returns True if seeded."""
    if await store.load(INITIATIVES_KEY) is not None:
        return False
    initiatives = sample_initiatives()
    await store.save(INITIATIVES_KEY, [initiative_to_document(i) for i in initiatives])
    logger.info("Seeded %d sample initiatives", len(initiatives))
    return True
