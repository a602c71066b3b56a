# blogwebapp/utils/datetime_utils.py
"""
Centralized date/time helpers used across the backend.

- Every timestamp is produced and stored as a timezone-aware UTC datetime.
- Documents are normalized with `for_firestore` before they are written.
"""

import logging
from datetime import datetime, date, timezone, time, timedelta
from typing import Any, Optional

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """Date/time helpers shared by services and models."""

    @staticmethod
    def now() -> datetime:
        """Current time as a UTC timezone-aware datetime."""
        return datetime.now(timezone.utc)

    @staticmethod
    def in_minutes(minutes: int) -> datetime:
        """UTC datetime `minutes` from now."""
        return DateTimeUtils.now() + timedelta(minutes=minutes)

    @staticmethod
    def to_utc(dt: datetime) -> datetime:
        """Naive datetimes are assumed to be UTC; aware ones are converted."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def is_expired(expires_at: Optional[datetime], reference: Optional[datetime] = None) -> bool:
        """True when `expires_at` is missing or not after `reference` (default: now)."""
        if expires_at is None:
            return True
        reference = reference or DateTimeUtils.now()
        return DateTimeUtils.to_utc(expires_at) <= DateTimeUtils.to_utc(reference)

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Normalize date/time values before a Firestore write.

        - date -> datetime (00:00:00 UTC)
        - naive datetime -> UTC-aware datetime
        - dict/list values are converted recursively
        """
        try:
            if isinstance(obj, date) and not isinstance(obj, datetime):
                return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)

            elif isinstance(obj, datetime):
                return DateTimeUtils.to_utc(obj)

            elif isinstance(obj, dict):
                return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}

            elif isinstance(obj, list):
                return [DateTimeUtils.for_firestore(item) for item in obj]

            else:
                return obj

        except Exception as e:
            logger.error(f"Firestore conversion failed: {obj} ({type(obj)}) - {e}")
            raise ValueError(f"Value cannot be converted for Firestore: {obj}")
