"""
Pytest fixtures for the stock ledger tests.

Provides the app on in-memory SQLite, a per-test table wipe, catalog
factories and the Flask test client.
"""

from datetime import date

import pytest

from stockledger import create_app
from stockledger.extensions import db
from stockledger.models import Product
from stockledger.services import receive_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LEDGER_TIMEZONE': 'Asia/Bangkok',
        'EXPIRY_WARNING_DAYS': 3,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh tables for each test."""
    with app.app_context():
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        db.session.rollback()


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: make_product("Milk", shelf_life_days=3, category_name="Dairy")."""
    def _make(name, *, shelf_life_days=7, category_name="General", price_cents=1000):
        product = Product(
            name=name,
            shelf_life_days=shelf_life_days,
            category_name=category_name,
            price_cents=price_cents,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def receive(db_session):
    """Factory: receive(product, "2024-01-01", 5) -> StockBatch via the receipt engine."""
    def _receive(product, receive_date, quantity, actor_name="tester"):
        if isinstance(receive_date, str):
            receive_date = date.fromisoformat(receive_date)
        return receive_service.receive(
            product_id=product.id,
            receive_date=receive_date,
            quantity=quantity,
            actor_name=actor_name,
        )
    return _receive


def actor_headers(actor: str = "alice") -> dict:
    """Helper to create the actor identity header."""
    return {'X-Actor': actor}
