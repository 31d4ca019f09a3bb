"""
Pytest configuration and shared fixtures for the lot ledger tests.
"""
from datetime import date

import pytest

from app import create_app, init_db
from models import db

TEST_MARKUPS = {
    'store': 2.0,
    'grab_food': 3.0,
}


@pytest.fixture(scope='function')
def app():
    """Create and configure a new app instance on in-memory SQLite for each test."""
    app = create_app('testing', {
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'PLATFORM_MARKUPS': dict(TEST_MARKUPS),
        'DEFAULT_PLATFORM': 'store',
        'DEFAULT_MIN_STOCK': 5.0,
        'TARGET_GP': 60.0,
    })
    init_db(app)

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def services(app):
    """Ledger services with an application context pushed."""
    with app.app_context():
        yield app.extensions['ledger']
        db.session.remove()


@pytest.fixture
def ing1(services):
    """Ingredient stocked in grams and bought in kilograms."""
    return services.catalog.upsert('ING1', name='Chicken', stock_unit='g', buy_unit='kg', buy_to_stock_ratio=1000)


def add_lots(services, ingredient_id, *lots):
    """Append (qty, unit_cost, purchase_date) lots and refresh the catalog."""
    lot_ids = []
    for qty, unit_cost, purchase_date in lots:
        lot_ids.append(services.ledger.append_lot(ingredient_id, qty, unit_cost, purchase_date))
    services.catalog.refresh(ingredient_id)
    return lot_ids


def remaining_by_lot(services, ingredient_id):
    return [lot.remaining_qty for lot in services.ledger.lots(ingredient_id)]


D1 = date(2024, 1, 1)
D2 = date(2024, 1, 2)
D3 = date(2024, 1, 3)
