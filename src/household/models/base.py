"""Timestamp helpers shared by master and tenant models.

Master and tenant databases may be SQLite (timestamps stored as text) or
PostgreSQL (TIMESTAMP WITHOUT TIME ZONE). Neither keeps an offset, so every
timestamp is a naive datetime in UTC.
"""

from datetime import UTC, datetime
from typing import Protocol


class Timestamped(Protocol):
    updated_at: datetime


def utc_now() -> datetime:
    """Current UTC time, without tzinfo."""
    return datetime.now(UTC).replace(tzinfo=None)


def mark_updated(entity: Timestamped) -> None:
    """Stamp ``updated_at`` before an edited row is committed."""
    entity.updated_at = utc_now()
