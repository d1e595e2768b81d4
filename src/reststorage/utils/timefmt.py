"""RFC 3339 timestamp helpers."""

from __future__ import annotations

import datetime as dt
import re

from reststorage.core.errors import EncodingError


_RFC3339 = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt]"
    r"(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)


def parse_rfc3339(text: str, *, operation: str = "stat") -> dt.datetime:
    """Parse an RFC 3339 timestamp into a timezone-aware datetime.

    A time zone designator is mandatory. Fractional seconds beyond
    microsecond precision are truncated.
    """
    match = _RFC3339.match(text or "")
    if match is None:
        raise EncodingError(operation, f"cannot parse {text!r} as RFC 3339 timestamp")

    fraction = (match.group("fraction") or "")[:6].ljust(6, "0")
    offset = match.group("offset").upper()
    if offset == "Z":
        offset = "+00:00"
    else:
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            raise EncodingError(operation, f"invalid time zone offset in {text!r}")

    try:
        return dt.datetime.fromisoformat(
            f"{match.group('date')}T{match.group('time')}.{fraction}{offset}"
        )
    except ValueError as exc:
        raise EncodingError(operation, f"cannot parse {text!r} as RFC 3339 timestamp: {exc}") from exc


def format_rfc3339(value: dt.datetime) -> str:
    """Render an aware datetime the way the remote store does (``Z`` for UTC)."""
    if value.tzinfo is None:
        raise ValueError("naive datetimes cannot be rendered as RFC 3339")
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text
