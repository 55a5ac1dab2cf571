from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Optional


def ledger_now() -> int:
    """Environment clock: integer UNIX seconds (UTC)."""
    return int(time.time())


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to UTC-naive datetime.

    - None / "" -> None
    - "YYYY-MM-DDTHH:MM" (naive) is interpreted as UTC
    - "...Z" or "...+/-HH:MM" is converted to UTC and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)

    if dt.tzinfo is None:
        return dt.replace(tzinfo=None)

    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: Optional[str]) -> Optional[int]:
    """
    Parse a query-string timestamp into UNIX seconds.

    Accepts plain integers ("1700000000") or ISO-8601 datetimes.
    Returns None for missing/blank input; raises ValueError otherwise.
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    if s.isdigit():
        return int(s)
    dt = parse_iso_datetime(s)
    return int(dt.replace(tzinfo=timezone.utc).timestamp())


def to_utc_z(ts: Optional[int]) -> Optional[str]:
    """
    Serializes UNIX seconds to ISO-8601 with trailing 'Z'.
    """
    if ts is None:
        return None
    dt_utc = datetime.fromtimestamp(ts, tz=timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")
