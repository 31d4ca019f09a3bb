"""
Ingredient Catalog Service

Lookup and upsert of ingredients, and the cached stock/cost fields that are
recomputed from the lot ledger after every mutation.

Lookups go through CatalogCache, an id/name index built from a full table
read and dropped whenever the store reports a write that could change it.
"""

import logging
from collections import namedtuple

from constants import DEFAULT_UNIT, INGREDIENT_PATCH_FIELDS, MAX_LENGTHS
from models import utc_now
from .costing import weighted_average_cost
from .errors import NotFoundError, ValidationError
from .validation import as_float, check_new_id, clean_identifier

logger = logging.getLogger(__name__)

LookupIndex = namedtuple('LookupIndex', ['ids', 'names'])

# Columns whose change invalidates a lookup index
_INDEXED_COLUMNS = {'id', 'name'}


def lookup_key(value):
    """Normalized key for case-insensitive id/name matching."""
    if value is None:
        return ''
    return str(value).strip().lower()


class CatalogCache:
    """
    Case-insensitive id/name -> primary key index per table.

    Resolution rule: an exact id match wins over any name match; among rows
    sharing a name, the one created first wins.

    Register ``invalidate`` with the TableStore so the index is rebuilt after
    any write touching ids or names, and after every commit or rollback. A
    miss against an index that was not just built rebuilds it once before
    reporting None.
    """

    def __init__(self):
        self._indexes = {}

    def invalidate(self, table=None, columns=None):
        if table is None:
            self._indexes.clear()
        elif columns is None or columns & _INDEXED_COLUMNS:
            self._indexes.pop(table, None)

    def resolve(self, table, key, load_rows):
        """Primary key for ``key`` in ``table``, or None."""
        key = lookup_key(key)
        index = self._indexes.get(table)
        fresh = index is None
        if fresh:
            index = self._indexes[table] = self._build(load_rows())
        pk = index.ids.get(key) or index.names.get(key)
        if pk is None and not fresh:
            logger.debug(f"CATALOG: {table} miss for '{key}', rebuilding index")
            index = self._indexes[table] = self._build(load_rows())
            pk = index.ids.get(key) or index.names.get(key)
        return pk

    @staticmethod
    def _build(rows):
        ids = {}
        names = {}
        for row in rows:
            ids[lookup_key(row.id)] = row.id
            names.setdefault(lookup_key(row.name), row.id)
        return LookupIndex(ids, names)


def _validate_ingredient_patch(values):
    if 'buy_to_stock_ratio' in values:
        ratio = as_float(values['buy_to_stock_ratio'], 'buy_to_stock_ratio')
        if ratio <= 0:
            raise ValidationError(f"buy_to_stock_ratio must be positive, got {ratio:g}")
        values['buy_to_stock_ratio'] = ratio
    if 'min_stock' in values:
        min_stock = as_float(values['min_stock'], 'min_stock')
        if min_stock < 0:
            raise ValidationError(f"min_stock cannot be negative, got {min_stock:g}")
        values['min_stock'] = min_stock
    if 'name' in values:
        values['name'] = str(values['name']).strip()
        if not values['name']:
            raise ValidationError("Ingredient name cannot be empty")
        if len(values['name']) > MAX_LENGTHS['name']:
            raise ValidationError(f"Ingredient name is too long: {values['name'][:20]}...")
    for unit_field in ('stock_unit', 'buy_unit'):
        if unit_field in values:
            values[unit_field] = str(values[unit_field]).strip() or DEFAULT_UNIT
    return values


class IngredientCatalog:
    """Read-mostly ingredient lookup plus the derived stock/cost cache."""

    def __init__(self, store, cache, default_min_stock=0.0):
        self.store = store
        self.cache = cache
        self.default_min_stock = default_min_stock

    def all(self):
        return self.store.read_all('ingredients')

    def find_or_none(self, id_or_name):
        if not lookup_key(id_or_name):
            return None
        pk = self.cache.resolve('ingredients', id_or_name, lambda: self.store.read_all('ingredients'))
        return self.store.get('ingredients', pk)

    def find(self, id_or_name):
        """Resolve an ingredient by id or name (case-insensitive)."""
        clean_identifier(id_or_name, 'ingredient')
        ingredient = self.find_or_none(id_or_name)
        if ingredient is None:
            raise NotFoundError('ingredient', id_or_name)
        return ingredient

    def upsert(self, id_or_name, **patch):
        """
        Create an ingredient, or merge the non-null fields of ``patch`` into it.

        A new ingredient takes its id from the lookup key. buy_unit defaults to
        the stock unit and the ratio to 1. updated_at is stamped either way.
        """
        key = clean_identifier(id_or_name, 'ingredient')
        unknown = set(patch) - INGREDIENT_PATCH_FIELDS
        if unknown:
            raise ValidationError(f"Cannot set ingredient fields: {', '.join(sorted(unknown))}")
        values = _validate_ingredient_patch({k: v for k, v in patch.items() if v is not None})

        with self.store.transaction():
            ingredient = self.find_or_none(key)
            now = utc_now()
            if ingredient is None:
                check_new_id(key, 'ingredient')
                stock_unit = values.get('stock_unit', DEFAULT_UNIT)
                ingredient = self.store.append_row('ingredients', {
                    'id': key,
                    'name': str(values.get('name', key)).strip(),
                    'stock_unit': stock_unit,
                    'buy_unit': values.get('buy_unit', stock_unit),
                    'buy_to_stock_ratio': values.get('buy_to_stock_ratio', 1.0),
                    'min_stock': values.get('min_stock', self.default_min_stock),
                    'current_stock': 0.0,
                    'current_cost_per_unit': 0.0,
                    'created_at': now,
                    'updated_at': now,
                })
                logger.info(f"CATALOG: Created ingredient {key}")
            else:
                for column, value in values.items():
                    self.store.update_cell('ingredients', ingredient.id, column, value)
                self.store.update_cell('ingredients', ingredient.id, 'updated_at', now)
                logger.info(f"CATALOG: Updated ingredient {ingredient.id} ({', '.join(sorted(values)) or 'touch'})")
        return ingredient

    def refresh(self, ingredient_id):
        """Recompute current_stock and current_cost_per_unit from the ledger."""
        with self.store.transaction():
            lots = self.store.read_all('lots', ingredient_id=ingredient_id)
            stock = sum(lot.remaining_qty for lot in lots)
            cost = weighted_average_cost(lots)
            self.store.update_cell('ingredients', ingredient_id, 'current_stock', stock)
            self.store.update_cell('ingredients', ingredient_id, 'current_cost_per_unit', cost)
            self.store.update_cell('ingredients', ingredient_id, 'updated_at', utc_now())
        return self.store.get('ingredients', ingredient_id)

    def low_stock(self):
        """Ingredients whose ledger stock is below min_stock, emptiest first."""
        stock = {}
        for lot in self.store.read_all('lots'):
            stock[lot.ingredient_id] = stock.get(lot.ingredient_id, 0.0) + lot.remaining_qty

        low = []
        for ingredient in self.all():
            remaining = stock.get(ingredient.id, 0.0)
            minimum = ingredient.min_stock or 0.0
            if remaining < minimum:
                low.append({
                    'id': ingredient.id,
                    'name': ingredient.name,
                    'remaining': remaining,
                    'minimum': minimum,
                    'unit': ingredient.stock_unit,
                })
        low.sort(key=lambda item: item['remaining'])
        return low
