"""Calendar-month period keys for usage metering.

Periods are UTC calendar months so the quota boundary does not move with
the server's deployment region.
"""

from datetime import datetime, timezone

from paywall.constants import PERIOD_KEY_FORMAT


def to_utc(now: datetime) -> datetime:
    """Normalize a timestamp to UTC. Naive datetimes are taken as UTC."""
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def period_key(now: datetime) -> str:
    """
    Derive the usage period key for a timestamp.

    Args:
        now: Timestamp of the access attempt

    Returns:
        Key in ``YYYY-MM`` form, e.g. ``"2025-01"``

    Example:
        >>> period_key(datetime(2025, 1, 31, 23, 30, tzinfo=timezone.utc))
        '2025-01'
    """
    return to_utc(now).strftime(PERIOD_KEY_FORMAT)
