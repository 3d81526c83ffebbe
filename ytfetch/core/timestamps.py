import isodate
from datetime import datetime, timezone


def as_utc(dt: datetime) -> datetime:
    """Treats naive datetimes as UTC and converts aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_rfc3339(dt) -> str | None:
    """Convert datetime or unix timestamp to RFC 3339 / ISO 8601 format."""
    if dt is None:
        return None
    if isinstance(dt, (int, float)):
        dt = datetime.fromtimestamp(dt, tz=timezone.utc)
    return as_utc(dt).isoformat().replace("+00:00", "Z")


def parse_rfc3339(value: str) -> datetime:
    """
    Parses an RFC 3339 timestamp into an aware UTC datetime.
    Raises ValueError on anything that is not a full date-time,
    including values that leave the datetime range once shifted to UTC.
    """
    if not isinstance(value, str) or "T" not in value:
        raise ValueError(f"not an RFC 3339 timestamp: {value!r}")
    try:
        return as_utc(isodate.parse_datetime(value.strip()))
    except OverflowError as e:
        raise ValueError(f"timestamp out of range: {value!r}") from e
