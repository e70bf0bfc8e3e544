# Overview: Flask CLI command group for ledger maintenance and expiry purge.

# backend/stockledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask ledger <command> [options]
#
# - python -m flask ledger init-db
#   Create all tables (use `flask db upgrade` for migrated deployments).
# - python -m flask ledger snapshot [--today 2024-01-05] [--category Dairy]
#   Print per-product active/expired totals.
# - python -m flask ledger purge-expired --actor "System/Purge" [--category Dairy] [--today ...] [--yes]
#   Purge every batch currently classified as expired, one log entry per batch.
# - python -m flask ledger history [--limit 50]
#   Print the most recent transaction log entries.

import click
from flask.cli import AppGroup

from .errors import LedgerError
from .extensions import db
from .services import inventory_service, purge_service
from .services.transaction_log_service import get_history
from .validation import require_date


def _parse_today(value):
    if not value:
        return None
    try:
        return require_date(value, "today")
    except LedgerError as exc:
        raise click.BadParameter(str(exc))


@click.group('ledger', cls=AppGroup)
def ledger_group():
    """Batch ledger maintenance commands."""


@ledger_group.command('init-db')
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("Ledger tables created.")


@ledger_group.command('snapshot')
@click.option('--today', help='Reference date (YYYY-MM-DD); defaults to ledger today')
@click.option('--category', help='Only this category')
def snapshot_command(today, category):
    """Print per-product active/expired totals."""
    items = inventory_service.snapshot(today=_parse_today(today), category=category)
    if not items:
        click.echo("No products.")
        return

    for item in items:
        click.echo(
            f"{item.product.id:>5}  {item.product.name:<40} "
            f"active={item.total_active_quantity:<6} expired={item.total_expired_quantity:<6} "
            f"batches={len(item.batches)}"
        )


@ledger_group.command('purge-expired')
@click.option('--actor', 'actor_name', default='System/Purge', show_default=True, help='Actor recorded in the log')
@click.option('--category', help='Only purge this category')
@click.option('--today', help='Reference date (YYYY-MM-DD); defaults to ledger today')
@click.option('--yes', is_flag=True, help='Skip confirmation')
def purge_expired_command(actor_name, category, today, yes):
    """Purge every batch classified as expired."""
    descriptors = purge_service.collect_expired(today=_parse_today(today), category=category)
    if not descriptors:
        click.echo("Nothing to purge.")
        return

    for d in descriptors:
        click.echo(f"  batch {d.batch_id:>6}  {d.product_name:<40} qty={d.quantity:<6} expired {d.expiry_date}")

    if not yes:
        click.confirm(f"Purge {len(descriptors)} expired batch(es)?", abort=True)

    try:
        result = purge_service.purge_expired(descriptors, actor_name=actor_name)
    except LedgerError as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Purged {result.count} batch(es).")
    for d in result.skipped:
        click.echo(f"  skipped batch {d.batch_id}: batch changed since selection")


@ledger_group.command('history')
@click.option('--limit', type=int, default=50, show_default=True)
def history_command(limit):
    """Print the most recent transaction log entries."""
    for row in get_history(limit=limit):
        quantity = row["quantity"] if row["quantity"] is not None else "-"
        click.echo(
            f"{row['action_date']}  {row['action_type']:<15} {str(row['product_name'] or '-'):<30} "
            f"qty={quantity:<6} by {row['actor_name']}"
            + (f"  ({row['extra_info']})" if row["extra_info"] else "")
        )


def register_commands(app):
    app.cli.add_command(ledger_group)
