"""
Table Store

Table-oriented access to the ledger: full-table reads with simple equality
filters, row appends and single-cell updates. Every service reads and writes
through this class, never through the models directly.

Mutations that must be all-or-nothing run inside ``transaction()``, which
holds a process-wide lock for the whole read-modify-write cycle. The lock
only covers one process; writes that must not race another worker sharing
the database go through ``update_cell_if``, a conditional UPDATE that
reports whether the stored value was still the one the caller read.
"""

import logging
import threading
from contextlib import contextmanager

from models import Expense, Ingredient, Lot, Menu, MenuRecipe, Sale, SaleConsumption, Waste
from .errors import NotFoundError

logger = logging.getLogger(__name__)

# Logical table name -> model
TABLES = {
    'ingredients': Ingredient,
    'lots': Lot,
    'menus': Menu,
    'menu_recipes': MenuRecipe,
    'sales': Sale,
    'sale_consumptions': SaleConsumption,
    'waste': Waste,
    'expenses': Expense,
}

# Insertion order for full reads
DEFAULT_ORDERING = {
    'ingredients': ('created_at', 'id'),
    'lots': ('seq',),
    'menus': ('created_at', 'id'),
}


class TableStore:
    """
    SQLAlchemy-backed table store.

    Args:
        session: SQLAlchemy session (the Flask-SQLAlchemy scoped session)
        listeners: callables invoked as ``listener(table, columns)`` after every
            write; ``table`` is None after a commit or a rollback, ``columns``
            is None when a whole row was added
    """

    def __init__(self, session, listeners=None):
        self.session = session
        self._listeners = list(listeners or [])
        self._lock = threading.RLock()
        self._depth = 0

    def subscribe(self, listener):
        self._listeners.append(listener)

    def model(self, table):
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    # ---- reads ----------------------------------------------------------

    def read_all(self, table, order_by=None, **filters):
        """Return every row of ``table`` matching the equality filters."""
        model = self.model(table)
        columns = order_by or DEFAULT_ORDERING.get(table, ('id',))
        query = self.session.query(model).filter_by(**filters)
        return query.order_by(*(getattr(model, c) for c in columns)).all()

    def get(self, table, row_ref):
        if row_ref is None:
            return None
        return self.session.get(self.model(table), row_ref)

    # ---- writes ---------------------------------------------------------

    def append_row(self, table, row):
        """Insert ``row`` (a dict of column values) and return the new instance."""
        instance = self.model(table)(**row)
        self.session.add(instance)
        self.session.flush()
        self._notify(table, None)
        return instance

    def update_cell(self, table, row_ref, column, value):
        instance = self.get(table, row_ref)
        if instance is None:
            raise NotFoundError(table, row_ref)
        if column not in self.model(table).__table__.columns:
            raise ValueError(f"Unknown column {table}.{column}")
        setattr(instance, column, value)
        self._notify(table, {column})
        return instance

    def update_cell_if(self, table, row_ref, column, expected, value):
        """
        Set ``column`` to ``value`` only while it still holds ``expected``.

        Runs as a single UPDATE ... WHERE pk = :ref AND column = :expected, so
        a change committed by another connection since ``expected`` was read
        makes it a no-op. Returns True when the row was written.
        """
        model = self.model(table)
        if column not in model.__table__.columns:
            raise ValueError(f"Unknown column {table}.{column}")
        pk = model.__mapper__.primary_key[0]
        written = self.session.query(model).filter(
            pk == row_ref,
            getattr(model, column) == expected,
        ).update({column: value}, synchronize_session='fetch')
        if written:
            self._notify(table, {column})
        return written == 1

    @contextmanager
    def transaction(self):
        """
        Serialize a unit of work and commit it atomically.

        Re-entrant: only the outermost block commits, and any exception
        raised anywhere inside rolls the whole unit back.
        """
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                # Rows cached by this session may predate another writer's commit
                self.session.expire_all()
            self._depth += 1
            try:
                yield self
                if outermost:
                    self.session.commit()
                    # Other workers may have committed too; drop derived state
                    self._notify(None, None)
            except Exception:
                if outermost:
                    self.session.rollback()
                    self._notify(None, None)
                raise
            finally:
                self._depth -= 1

    def _notify(self, table, columns):
        for listener in self._listeners:
            listener(table, columns)
