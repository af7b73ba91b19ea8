"""UTC timestamps for table columns"""
from datetime import datetime, timezone

from sqlalchemy import DateTime

# Stored as timestamptz; values are always timezone-aware UTC
UTC_DATETIME = DateTime(timezone=True)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
