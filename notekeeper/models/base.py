"""
SQLAlchemy Base Model.

Base class for all database models and the shared timestamp column type.
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import BigInteger
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Return current UTC time, truncated to the millisecond stored in the database."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class EpochMillis(TypeDecorator):
    """
    Timestamp stored as integer milliseconds since the Unix epoch.

    Naive datetimes are taken to be UTC. Values are loaded back as
    timezone-aware UTC datetimes.
    """

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> int | None:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (value - EPOCH) // timedelta(milliseconds=1)

    def process_result_value(self, value: int | None, dialect) -> datetime | None:
        if value is None:
            return None
        return EPOCH + timedelta(milliseconds=value)
