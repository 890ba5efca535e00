"""Date parsing, storage encoding and display formatting."""

from datetime import datetime, timezone
from typing import Any

# Fixed-width UTC form; lexical order equals chronological order, so
# range filters can compare the stored text directly.
STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# e.g. "Mon Jan 01 2024"
DISPLAY_FORMAT = "%a %b %d %Y"

# strftime does not zero-pad %Y below 1000 on every platform.
MIN_YEAR = 1000


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_date(value: Any) -> datetime:
    """Parse an ISO 8601 date or datetime into an aware UTC datetime.

    Naive values are taken to be UTC.  Raises ``ValueError`` when the
    value cannot be parsed or falls before year 1000, since the storage
    and display formats need a four-digit year.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("empty date")
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"unsupported date value {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    else:
        try:
            parsed = parsed.astimezone(timezone.utc)
        except OverflowError:
            raise ValueError(f"date out of range {value!r}") from None
    if parsed.year < MIN_YEAR:
        raise ValueError(f"date out of range {value!r}")
    return parsed


def to_storage(value: datetime) -> str:
    return parse_date(value).strftime(STORAGE_FORMAT)


def from_storage(value: str) -> datetime:
    return datetime.strptime(value, STORAGE_FORMAT).replace(tzinfo=timezone.utc)


def format_display(value: datetime) -> str:
    return value.strftime(DISPLAY_FORMAT)
