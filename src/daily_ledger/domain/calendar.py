"""Local calendar day arithmetic.

Every day key in the ledger is an ISO date (``YYYY-MM-DD``) in the owner's
local timezone. A day runs from local midnight to the next local midnight, so
a day may be 23 or 25 hours long around DST transitions.
"""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo


def day_key(day: date) -> str:
    """Return the canonical key for a calendar date."""
    return day.isoformat()


def parse_day_key(key: str) -> date:
    """Return the calendar date for a day key."""
    return date.fromisoformat(key)


def day_key_for_timestamp(timestamp_ms: int, tz: ZoneInfo) -> str:
    """Return the local day key containing an epoch-millisecond timestamp."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)
    return day_key(moment.date())


def today_key(now: datetime, tz: ZoneInfo) -> str:
    """Return the local day key for an aware ``now``."""
    return day_key(now.astimezone(tz).date())


def shift_day_key(key: str, delta_days: int) -> str:
    """Return the key ``delta_days`` calendar days away from ``key``."""
    return day_key(parse_day_key(key) + timedelta(days=delta_days))


def compose_timestamp(key: str, now: datetime, tz: ZoneInfo) -> int:
    """Combine a day key with the local time-of-day of ``now``."""
    local_now = now.astimezone(tz)
    moment = datetime.combine(
        parse_day_key(key),
        local_now.time().replace(
            microsecond=local_now.microsecond // 1000 * 1000, tzinfo=None
        ),
        tzinfo=tz,
    )
    return to_epoch_ms(moment)


def to_epoch_ms(moment: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return round(moment.timestamp() * 1000)


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)
