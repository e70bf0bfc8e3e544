# backend/stockledger/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/stockledger.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///stockledger.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "Today" and log timestamps are taken in this zone, not UTC
    LEDGER_TIMEZONE = os.environ.get("LEDGER_TIMEZONE", "Asia/Bangkok")

    # Batches expiring within this many days classify as NEAR
    EXPIRY_WARNING_DAYS = int(os.environ.get("EXPIRY_WARNING_DAYS", "3"))

    DEFAULT_SHELF_LIFE_DAYS = int(os.environ.get("DEFAULT_SHELF_LIFE_DAYS", "7"))
    DEFAULT_CATEGORY = os.environ.get("DEFAULT_CATEGORY", "General")

    HISTORY_LIMIT = int(os.environ.get("HISTORY_LIMIT", "500"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
