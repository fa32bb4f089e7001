from __future__ import annotations

from datetime import datetime, timezone


def parse_server_date(value: str) -> datetime:
    """
    Parse a server timestamp into a tz-aware UTC datetime.

    The REST API returns ISO 8601 with a "Z" suffix and up to 7 fractional
    digits, e.g. "2021-03-04T10:11:12.1234567Z". Fractions are truncated to
    microseconds.
    """
    if not isinstance(value, str) or not value:
        raise ValueError("Server date must be a non-empty string")

    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    # fromisoformat accepts at most 6 fractional digits
    if "." in s:
        head, _, rest = s.partition(".")
        digits = ""
        while rest and rest[0].isdigit():
            digits += rest[0]
            rest = rest[1:]
        s = f"{head}.{digits[:6].ljust(6, '0')}{rest}"

    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
