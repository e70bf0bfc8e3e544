from datetime import date, timedelta

import pytest

from stockledger.services.expiry import ExpiryStatus, classify, days_remaining, is_expired

TODAY = date(2024, 1, 5)


@pytest.mark.parametrize("offset, expected", [
    (-30, ExpiryStatus.EXPIRED),
    (-1, ExpiryStatus.EXPIRED),
    (0, ExpiryStatus.DUE_TODAY),
    (1, ExpiryStatus.NEAR),
    (3, ExpiryStatus.NEAR),
    (4, ExpiryStatus.NORMAL),
    (60, ExpiryStatus.NORMAL),
])
def test_classify_boundaries(offset, expected):
    assert classify(TODAY + timedelta(days=offset), TODAY, warning_days=3) is expected


def test_due_today_is_not_expired():
    assert classify(TODAY, TODAY) is ExpiryStatus.DUE_TODAY
    assert not is_expired(TODAY, TODAY)
    assert is_expired(TODAY - timedelta(days=1), TODAY)


def test_missing_expiry_is_always_normal():
    assert classify(None, TODAY) is ExpiryStatus.NORMAL
    assert days_remaining(None, TODAY) is None
    assert not is_expired(None, TODAY)


def test_warning_window_is_configurable():
    expiry = TODAY + timedelta(days=5)
    assert classify(expiry, TODAY, warning_days=3) is ExpiryStatus.NORMAL
    assert classify(expiry, TODAY, warning_days=7) is ExpiryStatus.NEAR


def test_zero_window_has_no_near_band():
    assert classify(TODAY + timedelta(days=1), TODAY, warning_days=0) is ExpiryStatus.NORMAL


def test_window_read_from_app_config(app):
    expiry = TODAY + timedelta(days=3)
    with app.app_context():
        assert classify(expiry, TODAY) is ExpiryStatus.NEAR
        app.config["EXPIRY_WARNING_DAYS"] = 2
        try:
            assert classify(expiry, TODAY) is ExpiryStatus.NORMAL
        finally:
            app.config["EXPIRY_WARNING_DAYS"] = 3


def test_days_remaining_across_month_boundary():
    assert days_remaining(date(2024, 3, 1), date(2024, 2, 28)) == 2  # leap year
