# backend/stockledger/routes/system.py
"""
System health endpoint.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Product, StockBatch, TransactionLogEntry
from ..time_utils import ledger_now, to_ledger_timestamp

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity by counting the ledger tables.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        product_count = db.session.query(Product).count()
        batch_count = db.session.query(StockBatch).count()
        log_count = db.session.query(TransactionLogEntry).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "products": product_count,
                "batches": batch_count,
                "log_entries": log_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: database reachable
    - 503: database unhealthy
    """
    database_health = check_database_health()
    http_status = 200 if database_health["status"] == "healthy" else 503

    return {
        "status": database_health["status"],
        "timestamp": to_ledger_timestamp(ledger_now()),
        "ledger_timezone": current_app.config.get("LEDGER_TIMEZONE"),
        "checks": {
            "database": database_health,
        }
    }, http_status
