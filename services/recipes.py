"""
Recipe Service

Menus, their recipe lines, and the expansion of a menu sale into the stock
quantity needed per ingredient.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from constants import MAX_LENGTHS, MENU_PATCH_FIELDS
from models import utc_now
from .catalog import lookup_key
from .costing import current_cost, fifo_cost, suggested_price
from .errors import NoRecipeError, NotFoundError, ValidationError
from .units import to_stock_units
from .validation import as_float, check_new_id, clean_identifier, require_positive

logger = logging.getLogger(__name__)

COST_METHODS = {
    'average': current_cost,
    'fifo': fifo_cost,
}


@dataclass
class RecipeExpansion:
    """Stock quantity per ingredient for a number of servings of a menu."""
    menu_id: str
    servings: float
    quantities: Dict[str, float] = field(default_factory=dict)
    lines: List[dict] = field(default_factory=list)
    warnings: list = field(default_factory=list)

    def to_dict(self):
        return {
            'menu_id': self.menu_id,
            'servings': self.servings,
            'quantities': dict(self.quantities),
            'lines': list(self.lines),
            'warnings': [w.to_dict() for w in self.warnings],
        }


class RecipeBook:
    """Menus and recipe lines, resolved through the shared catalog cache."""

    def __init__(self, store, catalog):
        self.store = store
        self.catalog = catalog

    # ---- menus ----------------------------------------------------------

    def all_menus(self):
        return self.store.read_all('menus')

    def find_menu_or_none(self, id_or_name):
        if not lookup_key(id_or_name):
            return None
        pk = self.catalog.cache.resolve('menus', id_or_name, lambda: self.store.read_all('menus'))
        return self.store.get('menus', pk)

    def find_menu(self, id_or_name):
        clean_identifier(id_or_name, 'menu')
        menu = self.find_menu_or_none(id_or_name)
        if menu is None:
            raise NotFoundError('menu', id_or_name)
        return menu

    def upsert_menu(self, id_or_name, **patch):
        key = clean_identifier(id_or_name, 'menu')
        unknown = set(patch) - MENU_PATCH_FIELDS
        if unknown:
            raise ValidationError(f"Cannot set menu fields: {', '.join(sorted(unknown))}")
        values = {k: v for k, v in patch.items() if v is not None}
        if 'price' in values:
            values['price'] = require_positive(values['price'], 'price')
        if 'name' in values:
            values['name'] = str(values['name']).strip()
            if not values['name']:
                raise ValidationError("Menu name cannot be empty")
            if len(values['name']) > MAX_LENGTHS['name']:
                raise ValidationError(f"Menu name is too long: {values['name'][:20]}...")

        with self.store.transaction():
            menu = self.find_menu_or_none(key)
            now = utc_now()
            if menu is None:
                check_new_id(key, 'menu')
                menu = self.store.append_row('menus', {
                    'id': key,
                    'name': str(values.get('name', key)).strip() or key,
                    'price': values.get('price'),
                    'created_at': now,
                    'updated_at': now,
                })
                logger.info(f"RECIPES: Created menu {key}")
            else:
                for column, value in values.items():
                    self.store.update_cell('menus', menu.id, column, value)
                self.store.update_cell('menus', menu.id, 'updated_at', now)
        return menu

    # ---- recipe lines ---------------------------------------------------

    def recipe_lines(self, menu_id):
        return self.store.read_all('menu_recipes', menu_id=menu_id)

    def add_recipe_line(self, menu, ingredient, qty_per_serving, unit=None, note=None):
        """Append a recipe line; the same ingredient may be added more than once."""
        qty_per_serving = require_positive(qty_per_serving, 'qty_per_serving')

        with self.store.transaction():
            menu_row = self.find_menu(menu)
            ingredient_row = self.catalog.find(ingredient)
            line = self.store.append_row('menu_recipes', {
                'menu_id': menu_row.id,
                'ingredient_id': ingredient_row.id,
                'qty_per_serving': qty_per_serving,
                'unit': (unit or '').strip() or ingredient_row.stock_unit,
                'note': note or '',
            })
        return line

    def _resolved_lines(self, menu_row):
        lines = self.recipe_lines(menu_row.id)
        if not lines:
            raise NoRecipeError(menu_row.id)
        for line in lines:
            ingredient = self.store.get('ingredients', line.ingredient_id)
            if ingredient is None:
                raise NotFoundError('ingredient', line.ingredient_id)
            yield line, ingredient

    # ---- expansion ------------------------------------------------------

    def expand_sale(self, menu, servings):
        """
        Stock quantity needed per ingredient to serve ``servings`` of ``menu``.

        Lines naming the same ingredient are summed into a single entry.

        Raises:
            ValidationError: servings is not positive
            NotFoundError: unknown menu, or a line pointing at a missing ingredient
            NoRecipeError: the menu has no recipe lines
        """
        servings = require_positive(servings, 'servings')

        menu_row = self.find_menu(menu)
        expansion = RecipeExpansion(menu_id=menu_row.id, servings=servings)
        for line, ingredient in self._resolved_lines(menu_row):
            need_qty = line.qty_per_serving * servings
            converted = to_stock_units(need_qty, line.unit, ingredient)
            if converted.assumption is not None:
                expansion.warnings.append(converted.assumption)
            expansion.quantities[ingredient.id] = expansion.quantities.get(ingredient.id, 0.0) + converted.qty
            expansion.lines.append({
                'ingredient_id': ingredient.id,
                'need_qty': need_qty,
                'unit': line.unit,
                'stock_qty': converted.qty,
                'note': converted.note,
            })
        return expansion

    def estimate_cost(self, menu, target_gp=60.0, method='average', overhead_per_serving=None):
        """
        Cost of one serving at current ledger costs, and the price that would
        leave ``target_gp`` percent gross profit.

        With ``overhead_per_serving`` the estimate also carries the cost and
        suggested price with that overhead added to each serving.
        """
        if method not in COST_METHODS:
            raise ValidationError(f"Unknown cost method: {method}")
        unit_cost_of = COST_METHODS[method]

        menu_row = self.find_menu(menu)
        breakdown = []
        warnings = []
        no_cost_data = []
        total = 0.0
        for line, ingredient in self._resolved_lines(menu_row):
            converted = to_stock_units(line.qty_per_serving, line.unit, ingredient)
            if converted.assumption is not None:
                warnings.append(converted.assumption)
            unit_cost = unit_cost_of(self.store, ingredient.id)
            if not self.store.read_all('lots', ingredient_id=ingredient.id):
                no_cost_data.append(ingredient.id)
            cost = converted.qty * unit_cost
            total += cost
            breakdown.append({
                'ingredient_id': ingredient.id,
                'name': ingredient.name,
                'qty_per_serving': line.qty_per_serving,
                'unit': line.unit,
                'stock_qty': converted.qty,
                'stock_unit': ingredient.stock_unit,
                'cost_per_stock_unit': unit_cost,
                'cost': cost,
                'note': line.note,
            })

        estimate = {
            'menu_id': menu_row.id,
            'method': method,
            'ingredients': breakdown,
            'cost_per_serving': total,
            'target_gp': target_gp,
            'suggested_price': suggested_price(total, target_gp),
            'no_cost_data': no_cost_data,
            'warnings': [w.to_dict() for w in warnings],
        }
        if overhead_per_serving is not None:
            overhead = as_float(overhead_per_serving, 'overhead_per_serving')
            if overhead < 0:
                raise ValidationError(f"overhead_per_serving cannot be negative, got {overhead:g}")
            with_overhead = total + overhead
            estimate.update({
                'overhead_per_serving': overhead,
                'cost_with_overhead': with_overhead,
                'suggested_price_with_overhead': suggested_price(with_overhead, target_gp),
                'overhead_pct': overhead / total * 100 if total > 0 else 0.0,
            })
        return estimate
