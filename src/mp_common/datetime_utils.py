"""UTC datetime utilities."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(UTC)


def compact_timestamp(moment: datetime) -> str:
    """Second-precision UTC stamp used in order numbers: 20261018124501."""
    return moment.astimezone(UTC).strftime("%Y%m%d%H%M%S")
