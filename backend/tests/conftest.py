"""
Pytest fixtures for provenance backend tests.

Provides an in-memory database, a per-test clean ledger, a test client,
and helpers for building product and event inputs.
"""

import pytest
from provenance import create_app
from provenance.extensions import db
from provenance.models import KvEntry
from provenance.records import EventInput, ProductInput
from provenance.services import products_service


HASH_A = bytes(range(32))
HASH_B = bytes([0xAB] * 32)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LEDGER_MAX_BATCH_SIZE': 5,
        'LEDGER_COMMIT_ATTEMPTS': 1,
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
    """Empty ledger for each test."""
    with app.app_context():
        db.session.query(KvEntry).delete()
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def product_input(product_id: str = "COFFEE-ETH-001", **overrides) -> ProductInput:
    fields = {
        "id": product_id,
        "name": "Organic Coffee Beans",
        "description": "Premium single-origin coffee",
        "origin": "Yirgacheffe, Ethiopia",
        "category": "Coffee",
    }
    fields.update(overrides)
    return ProductInput(**fields)


def event_input(product_id: str = "COFFEE-ETH-001", event_type: str = "HARVEST", **overrides) -> EventInput:
    fields = {
        "product_id": product_id,
        "event_type": event_type,
        "data_hash": HASH_A,
        "location": "",
        "note": "",
    }
    fields.update(overrides)
    return EventInput(**fields)


@pytest.fixture(scope='function')
def owner():
    return "GOWNER"


@pytest.fixture(scope='function')
def product(db_session, owner):
    """Registered product COFFEE-ETH-001 owned by GOWNER."""
    return products_service.register_product(owner, product_input(), timestamp=1_000)


def principal_headers(principal: str) -> dict:
    """Helper to create caller identity headers."""
    return {'X-Principal': principal}
