# Overview: Expiry classification of a batch relative to a reference "today". Pure functions.

from __future__ import annotations

import enum
from datetime import date

from flask import current_app, has_app_context

"""
Expiry Policy (authoritative)

days_remaining = expiry_date - today, in whole calendar days. "today" is the
date in the ledger timezone, never UTC.

- days_remaining < 0        -> EXPIRED
- days_remaining == 0       -> DUE_TODAY (still sellable, still active stock)
- 1 <= days_remaining <= N  -> NEAR      (N = EXPIRY_WARNING_DAYS)
- otherwise                 -> NORMAL
- no expiry_date            -> NORMAL    (shelf life unknown; never purged)

Every expiry-dependent branch (inventory view, purge selection) goes through
classify(); nothing else compares expiry dates.
"""

DEFAULT_WARNING_DAYS = 3


class ExpiryStatus(str, enum.Enum):
    EXPIRED = "EXPIRED"
    DUE_TODAY = "DUE_TODAY"
    NEAR = "NEAR"
    NORMAL = "NORMAL"


def warning_window() -> int:
    if has_app_context():
        return int(current_app.config.get("EXPIRY_WARNING_DAYS", DEFAULT_WARNING_DAYS))
    return DEFAULT_WARNING_DAYS


def days_remaining(expiry_date: date | None, today: date) -> int | None:
    if expiry_date is None:
        return None
    return (expiry_date - today).days


def classify(expiry_date: date | None, today: date, warning_days: int | None = None) -> ExpiryStatus:
    remaining = days_remaining(expiry_date, today)
    if remaining is None:
        return ExpiryStatus.NORMAL

    if warning_days is None:
        warning_days = warning_window()

    if remaining < 0:
        return ExpiryStatus.EXPIRED
    if remaining == 0:
        return ExpiryStatus.DUE_TODAY
    if remaining <= warning_days:
        return ExpiryStatus.NEAR
    return ExpiryStatus.NORMAL


def is_expired(expiry_date: date | None, today: date) -> bool:
    return classify(expiry_date, today) is ExpiryStatus.EXPIRED
