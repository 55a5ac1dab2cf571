# Overview: Flask CLI command group for bootstrap, inspection, and index verification.

# backend/provenance/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to provenance (PowerShell: $env:FLASK_APP="provenance").
# - Use: python -m flask ledger <command> [options]
#
# - python -m flask ledger init-db
#   Create the kv_entries table if missing (use migrations in production).
# - python -m flask ledger reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask ledger show-product COFFEE-ETH-001
#   Print a product record as JSON.
# - python -m flask ledger events COFFEE-ETH-001 --type HARVEST --offset 0 --limit 20
#   Print a page of events for a product.
# - python -m flask ledger verify-indexes COFFEE-ETH-001
#   Recount events by type and compare with the type index (exit 1 on mismatch).
# - python -m flask ledger notifications --after 0 --limit 50
#   Print outbox notifications after a sequence number.

import json
import sys

import click
from flask.cli import with_appcontext

from .errors import LedgerError
from .extensions import db
from .services import ledger_service, products_service, query_service
from .services.index_service import recount_types, type_count
from .services.kv_store import ledger_transaction


@click.group('ledger')
def ledger_group():
    """Provenance ledger maintenance commands."""


@ledger_group.command('init-db')
@with_appcontext
def init_db():
    """Create tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Tables created.")


@ledger_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@ledger_group.command('show-product')
@click.argument('product_id')
@with_appcontext
def show_product(product_id):
    """Print a product record."""
    try:
        product = products_service.get_product(product_id)
    except LedgerError as e:
        click.echo(f"FAIL {e.message}", err=True)
        sys.exit(1)
    click.echo(json.dumps(product.to_api_dict(), indent=2))


@ledger_group.command('events')
@click.argument('product_id')
@click.option('--type', 'event_type', default="", help='Filter by event type')
@click.option('--offset', default=0, type=int)
@click.option('--limit', default=20, type=int)
@with_appcontext
def list_events(product_id, event_type, offset, limit):
    """Print a page of events for a product."""
    try:
        page = query_service.get_events_by_type(product_id, event_type, offset, limit)
    except LedgerError as e:
        click.echo(f"FAIL {e.message}", err=True)
        sys.exit(1)

    for ev in page.items:
        click.echo(f"{ev.event_id:>8}  {ev.event_type:<16} {ev.actor:<24} {ev.location}")
    click.echo(f"-- {len(page.items)} of {page.total_count} (has_more={page.has_more})")


@ledger_group.command('verify-indexes')
@click.argument('product_id')
@with_appcontext
def verify_indexes(product_id):
    """Compare the type index with a full recount of the product's events."""
    with ledger_transaction(read_only=True) as txn:
        try:
            products_service.read_product(txn, product_id)
        except LedgerError as e:
            click.echo(f"FAIL {e.message}", err=True)
            sys.exit(1)

        counts = recount_types(txn, product_id)
        mismatches = []
        for event_type, actual in sorted(counts.items()):
            indexed = type_count(txn, product_id, event_type)
            status = "OK" if indexed == actual else "MISMATCH"
            click.echo(f"{status:<9} {event_type:<16} indexed={indexed} actual={actual}")
            if indexed != actual:
                mismatches.append(event_type)

    if mismatches:
        click.echo(f"FAIL {len(mismatches)} type index mismatch(es)", err=True)
        sys.exit(1)
    click.echo("PASS Type indexes consistent.")


@ledger_group.command('notifications')
@click.option('--after', default=0, type=int, help='Only notifications after this sequence number')
@click.option('--limit', default=50, type=int)
@with_appcontext
def list_notifications(after, limit):
    """Print outbox notifications."""
    for note in ledger_service.list_notifications(after_seq=after, limit=limit):
        click.echo(f"{note.seq:>8}  {note.topic:<24} {note.subject}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(ledger_group)
