import pytest

from stockledger.errors import StorageFailureError
from stockledger.models import StockBatch, TransactionLogEntry
from stockledger.services import withdrawal_service

from conftest import actor_headers


@pytest.fixture
def milk(make_product):
    return make_product("Milk", shelf_life_days=3, category_name="Dairy")


def test_add_stock(client, db_session, milk):
    response = client.post("/api/stock/add", json={
        "product_id": milk.id, "receive_date": "2024-01-01", "quantity": 10,
    }, headers=actor_headers("alice"))

    assert response.status_code == 201
    body = response.get_json()
    assert body["batch"]["expiry_date"] == "2024-01-04"
    assert db_session.get(StockBatch, body["stock_id"]).quantity == 10
    assert db_session.query(TransactionLogEntry).one().actor_name == "alice"


def test_add_stock_unknown_product(client, db_session):
    response = client.post("/api/stock/add", json={
        "product_id": 999, "receive_date": "2024-01-01", "quantity": 1,
    }, headers=actor_headers())

    assert response.status_code == 404
    assert response.get_json()["code"] == "not_found"


def test_add_stock_invalid_quantity(client, db_session, milk):
    response = client.post("/api/stock/add", json={
        "product_id": milk.id, "receive_date": "2024-01-01", "quantity": 0,
    }, headers=actor_headers())

    assert response.status_code == 400
    assert response.get_json()["code"] == "invalid_argument"


def test_mutations_require_actor(client, db_session, milk):
    response = client.post("/api/stock/add", json={
        "product_id": milk.id, "receive_date": "2024-01-01", "quantity": 1,
    })

    assert response.status_code == 401
    assert db_session.query(StockBatch).count() == 0


def test_actor_name_in_body_is_accepted(client, db_session, milk, receive):
    receive(milk, "2024-01-01", 5)

    response = client.post("/api/stock/withdraw", json={
        "product_id": milk.id, "quantity": 2, "actor_name": "bob",
    })

    assert response.status_code == 200
    assert response.get_json()["batches_affected"][0]["remaining"] == 3


def test_withdraw_insufficient_stock(client, db_session, milk, receive):
    receive(milk, "2024-01-01", 5)

    response = client.post("/api/stock/withdraw", json={
        "product_id": milk.id, "quantity": 6,
    }, headers=actor_headers())

    assert response.status_code == 409
    body = response.get_json()
    assert body["code"] == "insufficient_stock"
    assert body["available"] == 5
    assert body["requested"] == 6


def test_storage_failure_is_opaque(client, db_session, milk, receive, monkeypatch):
    receive(milk, "2024-01-01", 5)

    def broken_withdraw(**kwargs):
        raise StorageFailureError()

    monkeypatch.setattr(withdrawal_service, "withdraw", broken_withdraw)

    response = client.post("/api/stock/withdraw", json={
        "product_id": milk.id, "quantity": 1,
    }, headers=actor_headers())

    assert response.status_code == 500
    assert response.get_json()["code"] == "storage_failure"


def test_inventory_and_expired_purge_round(client, db_session, milk, receive):
    receive(milk, "2024-01-01", 10)

    inventory = client.get("/api/inventory?today=2024-01-05").get_json()
    assert inventory["items"][0]["expired_quantity"] == 10
    assert inventory["items"][0]["total_quantity"] == 0

    expired = client.get("/api/inventory/expired?today=2024-01-05").get_json()
    assert expired["count"] == 1

    response = client.post("/api/stock/delete-expired", json={
        "expired_batches": expired["expired_batches"],
    }, headers=actor_headers("manager"))

    assert response.status_code == 200
    assert response.get_json()["count"] == 1
    assert db_session.query(StockBatch).count() == 0

    history = client.get("/api/history").get_json()["items"]
    assert history[0]["action_type"] == "EXPIRED"
    assert history[0]["extra_info"] == "Milk | expired: 2024-01-04"


def test_delete_expired_requires_selection(client, db_session):
    response = client.post("/api/stock/delete-expired", json={"expired_batches": []},
                           headers=actor_headers())

    assert response.status_code == 400


def test_inventory_rejects_bad_today(client, db_session):
    response = client.get("/api/inventory?today=yesterday")

    assert response.status_code == 400


def test_history_filter_by_action(client, db_session, milk, receive):
    receive(milk, "2024-01-01", 5)
    client.post("/api/stock/withdraw", json={"product_id": milk.id, "quantity": 1},
                headers=actor_headers())

    items = client.get("/api/history?action=withdraw").get_json()["items"]
    assert [row["action_type"] for row in items] == ["WITHDRAW"]

    assert client.get("/api/history?action=bogus").status_code == 400


def test_product_create_and_delete(client, db_session):
    created = client.post("/api/products", json={
        "name": "Bread", "shelf_life_days": 2, "category_name": "Bakery",
    }, headers=actor_headers("manager"))
    assert created.status_code == 201
    product_id = created.get_json()["id"]

    duplicate = client.post("/api/products", json={"name": "Bread"}, headers=actor_headers())
    assert duplicate.status_code == 409

    negative = client.post("/api/products", json={"name": "Cake", "shelf_life_days": -1},
                           headers=actor_headers())
    assert negative.status_code == 400

    deleted = client.delete(f"/api/products/{product_id}", headers=actor_headers("manager"))
    assert deleted.status_code == 200
    assert client.get(f"/api/products/{product_id}").status_code == 404


def test_available_products(client, db_session, milk, make_product, receive):
    make_product("Empty")
    receive(milk, "2024-01-01", 1)

    items = client.get("/api/products/available").get_json()["items"]

    assert items == [{"id": milk.id, "product_name": "Milk"}]


def test_health(client, db_session):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json()["checks"]["database"]["status"] == "healthy"
