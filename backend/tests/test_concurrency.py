"""
Concurrent withdrawals must never jointly overdraw a product.

SQLite ignores SELECT ... FOR UPDATE, so two withdrawals can read the same
batch. The batch version_id makes the second writer fail instead of
overwriting the first.
"""

import threading
from datetime import date

import pytest
from sqlalchemy import func, text

from stockledger import create_app
from stockledger.errors import ConflictError, LedgerError
from stockledger.extensions import db
from stockledger.models import ActionType, Product, StockBatch, TransactionLogEntry
from stockledger.services import withdrawal_service


@pytest.fixture
def file_app(tmp_path):
    """App on a file-backed SQLite database, shared by several threads."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'ledger.sqlite3'}",
    })
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


def _seed_batch(app, quantity):
    with app.app_context():
        product = Product(name="Milk", shelf_life_days=7, category_name="Dairy")
        db.session.add(product)
        db.session.flush()
        db.session.add(StockBatch(
            product_id=product.id,
            receive_date=date(2024, 1, 1),
            expiry_date=date(2024, 1, 8),
            quantity=quantity,
        ))
        db.session.commit()
        return product.id


def test_stale_batch_write_is_rejected(db_session, make_product, receive, monkeypatch):
    p = make_product("Milk")
    batch_id = receive(p, "2024-01-01", 10).id
    real_allocate = withdrawal_service.allocate_fifo

    def allocate_then_other_writer(batches, quantity, **kwargs):
        plan = real_allocate(batches, quantity, **kwargs)
        # Another withdrawal commits between our read and our write
        db_session.execute(
            text("UPDATE stock SET quantity = quantity - 7, version_id = version_id + 1 WHERE id = :id"),
            {"id": batch_id},
        )
        return plan

    monkeypatch.setattr(withdrawal_service, "allocate_fifo", allocate_then_other_writer)

    with pytest.raises(ConflictError):
        withdrawal_service.withdraw(product_id=p.id, quantity=7, actor_name="bob")

    assert db_session.get(StockBatch, batch_id).quantity == 10
    assert db_session.query(TransactionLogEntry).filter_by(action_type=ActionType.WITHDRAW.value).count() == 0


def test_two_threads_cannot_overdraw_one_batch(file_app, monkeypatch):
    product_id = _seed_batch(file_app, 10)

    # Both threads finish their FIFO read before either one writes
    barrier = threading.Barrier(2, timeout=10)
    real_allocate = withdrawal_service.allocate_fifo

    def allocate_then_wait(batches, quantity, **kwargs):
        plan = real_allocate(batches, quantity, **kwargs)
        barrier.wait()
        return plan

    monkeypatch.setattr(withdrawal_service, "allocate_fifo", allocate_then_wait)

    outcomes = []

    def worker(actor):
        with file_app.app_context():
            try:
                withdrawal_service.withdraw(product_id=product_id, quantity=7, actor_name=actor)
                outcomes.append("ok")
            except LedgerError as exc:
                outcomes.append(exc.code)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=worker, args=(name,)) for name in ("clerk_a", "clerk_b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert len(outcomes) == 2
    assert outcomes.count("ok") == 1
    assert set(outcomes) - {"ok"} <= {"conflict", "storage_failure"}

    with file_app.app_context():
        remaining = [b.quantity for b in db.session.query(StockBatch).all()]
        withdrawn = db.session.query(
            func.coalesce(func.sum(TransactionLogEntry.quantity), 0)
        ).filter(TransactionLogEntry.action_type == ActionType.WITHDRAW.value).scalar()

    assert remaining == [3]
    assert withdrawn == 7
