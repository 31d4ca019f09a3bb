"""
Lot Ledger Application

Flask app factory. Wires the database, migrations and logging, then builds
the ledger services once per app around a single TableStore and CatalogCache
so every request shares the same lookup cache and write lock.
"""

import logging
import sqlite3
from dataclasses import dataclass

from flask import Flask
from flask_migrate import Migrate
from sqlalchemy import event
from sqlalchemy.engine import Engine

from config import get_config
from logging_config import configure_logging
from models import db
from services import (
    CatalogCache,
    IngredientCatalog,
    LotLedger,
    RecipeBook,
    TableStore,
    TransactionRecorder,
)

logger = logging.getLogger(__name__)

migrate = Migrate()


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    # Enable SQLite foreign key enforcement
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@dataclass
class LedgerServices:
    store: TableStore
    cache: CatalogCache
    catalog: IngredientCatalog
    ledger: LotLedger
    recipes: RecipeBook
    recorder: TransactionRecorder


def build_services(session, settings):
    """Construct the service graph around one store and one catalog cache."""
    cache = CatalogCache()
    store = TableStore(session, listeners=[cache.invalidate])
    catalog = IngredientCatalog(store, cache, default_min_stock=settings['DEFAULT_MIN_STOCK'])
    ledger = LotLedger(store)
    recipes = RecipeBook(store, catalog)
    recorder = TransactionRecorder(
        store, catalog, ledger, recipes,
        markups=settings['PLATFORM_MARKUPS'],
        default_platform=settings['DEFAULT_PLATFORM'],
        target_gp=settings['TARGET_GP'],
    )
    return LedgerServices(store, cache, catalog, ledger, recipes, recorder)


def create_app(env=None, overrides=None):
    app = Flask(__name__)
    app.config.from_object(get_config(env))
    if overrides:
        app.config.update(overrides)

    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)

    app.extensions['ledger'] = build_services(db.session, app.config)

    from routes import api
    app.register_blueprint(api)

    logger.debug(f"APP: Created app for {app.config['SQLALCHEMY_DATABASE_URI']}")
    return app


# ============================================
# INITIALIZE DATABASE
# ============================================

def init_db(app):
    """Create any missing tables. Schema changes go through Flask-Migrate."""
    with app.app_context():
        db.create_all()


if __name__ == '__main__':
    app = create_app()
    init_db(app)
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=True, host='0.0.0.0', port=5000, use_reloader=False)
