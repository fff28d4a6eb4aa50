"""
Pytest fixtures for stockledger backend tests.

Provides test database setup, catalog fixtures, and test client.
"""

import pytest

from stockledger import create_app
from stockledger.extensions import db
from stockledger.models import Product
from stockledger.services import draft_service
from stockledger.services.auth_service import seed_default_users


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'AUTO_CREATE_SCHEMA': True,
    'SEED_DEFAULT_USERS': False,
    'PASSWORD_SCHEME': 'plaintext',
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

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
    """Create fresh database and an empty draft slot for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        draft_service.get_slot().clear()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def product(db_session):
    """100 g product, 10 in stock."""
    p = Product(grams=100, price=5.0, quantity=10)
    db_session.add(p)
    db_session.commit()
    return p


@pytest.fixture(scope='function')
def default_users(db_session):
    """Seed admin/teofilo/daxton/faith."""
    seed_default_users()
    return db_session


def purchase_payload(**overrides) -> dict:
    """Helper to build a valid purchase body for the 100 g product."""
    payload = {
        'grams': 100,
        'quantity': 3,
        'totalCost': 15.0,
        'purchaseDate': '2024-01-01',
    }
    payload.update(overrides)
    return payload
