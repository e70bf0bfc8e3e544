from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context


DEFAULT_LEDGER_TIMEZONE = "Asia/Bangkok"


def ledger_timezone() -> ZoneInfo:
    """Configured ledger timezone (falls back to the default outside an app context)."""
    name = DEFAULT_LEDGER_TIMEZONE
    if has_app_context():
        name = current_app.config.get("LEDGER_TIMEZONE") or DEFAULT_LEDGER_TIMEZONE
    return ZoneInfo(name)


def ledger_now() -> datetime:
    """
    Ledger-local wall clock, naive, truncated to the second.

    Log timestamps are stored in this form so history reads back in local time.
    """
    return datetime.now(ledger_timezone()).replace(tzinfo=None, microsecond=0)


def ledger_today() -> date:
    """Calendar date at midnight in the ledger timezone."""
    return datetime.now(ledger_timezone()).date()


def parse_iso_date(value) -> Optional[date]:
    """
    Parse a calendar date.

    - None / "" -> None
    - date -> returned as-is (datetime is truncated to its date)
    - "YYYY-MM-DD" -> date
    - full ISO datetimes are accepted and truncated to the date part
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    s = str(value).strip()
    if not s:
        return None
    if len(s) > 10:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    return date.fromisoformat(s)


def add_days(start: date, days: int) -> date:
    return start + timedelta(days=days)


def to_iso_date(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def to_ledger_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Serialize a ledger-local datetime as 'YYYY-MM-DD HH:MM:SS'."""
    if dt is None:
        return None
    return dt.replace(microsecond=0).isoformat(sep=" ")
