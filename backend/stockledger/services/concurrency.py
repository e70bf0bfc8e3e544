# Overview: Transaction scoping and row locking shared by every ledger-mutating service.

from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import ConflictError, LedgerError, StorageFailureError
from ..extensions import db

logger = logging.getLogger(__name__)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    On SQLite the StockBatch version_id check catches writes based on a stale
    read instead; see ledger_transaction().
    """
    return query.with_for_update()


@contextmanager
def ledger_transaction():
    """
    Scope one ledger mutation to a single DB transaction.

    Yields the session. Commits on normal exit; rolls back on every other exit
    path, so a failed operation leaves no batch change and no log row behind.

    - StaleDataError (a batch changed after it was read) -> ConflictError
    - any other SQLAlchemy error, including a failing commit -> StorageFailureError

    No retries: callers decide whether to repeat.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except LedgerError:
        session.rollback()
        raise
    except StaleDataError as exc:
        session.rollback()
        logger.warning("Ledger transaction rolled back: stock changed concurrently")
        raise ConflictError("Stock changed concurrently, no changes were applied") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Ledger transaction rolled back after storage error")
        raise StorageFailureError() from exc
    except Exception:
        session.rollback()
        raise
