from stockledger.cli import ledger_group
from stockledger.models import StockBatch, TransactionLogEntry


def test_snapshot_command(app, db_session, make_product, receive):
    milk = make_product("Milk", shelf_life_days=3)
    receive(milk, "2024-01-01", 10)

    result = app.test_cli_runner().invoke(ledger_group, ["snapshot", "--today", "2024-01-05"])

    assert result.exit_code == 0
    assert "active=0" in result.output
    assert "expired=10" in result.output


def test_purge_expired_command(app, db_session, make_product, receive):
    milk = make_product("Milk", shelf_life_days=3)
    receive(milk, "2024-01-01", 10)
    receive(milk, "2024-01-04", 2)

    result = app.test_cli_runner().invoke(
        ledger_group, ["purge-expired", "--today", "2024-01-05", "--actor", "cron", "--yes"],
    )

    assert result.exit_code == 0
    assert "Purged 1 batch(es)." in result.output
    assert db_session.query(StockBatch).count() == 1
    entry = db_session.query(TransactionLogEntry).filter_by(action_type="EXPIRED").one()
    assert entry.actor_name == "cron"


def test_purge_expired_nothing_to_do(app, db_session):
    result = app.test_cli_runner().invoke(ledger_group, ["purge-expired", "--yes"])

    assert result.exit_code == 0
    assert "Nothing to purge." in result.output


def test_bad_today_is_rejected(app, db_session):
    result = app.test_cli_runner().invoke(ledger_group, ["snapshot", "--today", "nope"])

    assert result.exit_code != 0
