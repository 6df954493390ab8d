"""Shared utilities: datetime helpers and id generators."""

from portfolio.shared.utils.datetime import (
    add_days_iso,
    ensure_utc,
    iso_date,
    today_iso,
    utc_now,
    utc_timestamp,
)
from portfolio.shared.utils.generators import generate_cuid, generate_prefixed_id

__all__ = [
    "generate_cuid",
    "generate_prefixed_id",
    "utc_now",
    "ensure_utc",
    "iso_date",
    "today_iso",
    "add_days_iso",
    "utc_timestamp",
]
