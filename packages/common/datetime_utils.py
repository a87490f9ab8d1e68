from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

LEDGER_DATETIME_FORMAT = "%d.%m.%Y %H:%M:%S"
DAY_MS: int = 86_400_000


def parse_iso_date(s: str) -> date:
    """
    Strict calendar date parser, accepts only "YYYY-MM-DD".
    Raises ValueError for anything else (including 2023-02-30).
    """
    ss = s.strip()
    if not _ISO_DATE_RE.match(ss):
        raise ValueError(f"Invalid date {s!r} (expected YYYY-MM-DD)")
    return date.fromisoformat(ss)


def day_start_ms(d: date) -> int:
    """00:00:00.000 UTC of the given day as epoch ms."""
    dt = datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def day_end_ms(d: date) -> int:
    """23:59:59.999 UTC of the given day as epoch ms (inclusive end)."""
    return day_start_ms(d) + DAY_MS - 1


def ms_to_iso8601_z(ts_ms: int) -> str:
    """
    Epoch ms -> ISO8601 Zulu string, e.g. 1700000000000 -> "2023-11-14T22:13:20.000Z"
    """
    dt = datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_ledger_datetime(ts_ms: int, tz: str = "UTC") -> str:
    """Epoch ms -> "DD.MM.YYYY HH:mm:ss" in the given IANA timezone."""
    dt = datetime.fromtimestamp(ts_ms / 1000, tz=ZoneInfo(tz))
    return dt.strftime(LEDGER_DATETIME_FORMAT)


def today_iso(today: date | None = None) -> str:
    return (today or date.today()).isoformat()


def today_minus_one_month_iso(today: date | None = None) -> str:
    d = today or date.today()
    year, month = (d.year, d.month - 1) if d.month > 1 else (d.year - 1, 12)
    # clamp e.g. 31 March -> 28/29 February
    first_of_next = date(year + (month == 12), month % 12 + 1, 1)
    last_day = (first_of_next - timedelta(days=1)).day
    return date(year, month, min(d.day, last_day)).isoformat()
