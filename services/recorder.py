"""
Transaction Recorder

Entry points that change the ledger: purchases, sales (of an ingredient or
of a menu), waste and overhead expenses. Each one runs inside a single
store transaction, plans every lot deduction before writing any of them,
and refreshes the cached stock and cost of every ingredient it touched.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from constants import (
    DEFAULT_PLATFORM,
    DEFAULT_PLATFORM_MARKUPS,
    MAX_LENGTHS,
    QTY_EPSILON,
    SALE_KIND_INGREDIENT,
    VALID_SALE_KINDS,
)
from models import utc_now
from .costing import current_cost
from .errors import ValidationError
from .ledger import DeductionResult
from .units import to_stock_units
from .validation import parse_date, require_positive

logger = logging.getLogger(__name__)


@dataclass
class PurchaseResult:
    lot_id: str
    ingredient_id: str
    qty_stock: float
    unit_cost: float
    total_price: float
    note: str
    warnings: list = field(default_factory=list)

    def to_dict(self):
        return {
            'lot_id': self.lot_id,
            'ingredient_id': self.ingredient_id,
            'qty_stock': self.qty_stock,
            'unit_cost': self.unit_cost,
            'total_price': self.total_price,
            'note': self.note,
            'warnings': [w.to_dict() for w in self.warnings],
        }


@dataclass
class SaleResult:
    sale: object
    deductions: List[DeductionResult] = field(default_factory=list)
    warnings: list = field(default_factory=list)

    @property
    def cogs(self):
        return self.sale.cogs

    def to_dict(self):
        data = self.sale.to_dict()
        data['deductions'] = [d.to_dict() for d in self.deductions]
        data['warnings'] = [w.to_dict() for w in self.warnings]
        return data


@dataclass
class WasteResult:
    ingredient_id: str
    qty_stock: float
    deduction: Optional[DeductionResult] = None
    warnings: list = field(default_factory=list)

    @property
    def waste_cost(self):
        return self.deduction.total_cost

    def to_dict(self):
        return {
            'ingredient_id': self.ingredient_id,
            'qty_stock': self.qty_stock,
            'waste_cost': self.waste_cost,
            'deduction': self.deduction.to_dict(),
            'warnings': [w.to_dict() for w in self.warnings],
        }


def _clean_text(value, field_name):
    text = (value or '').strip()
    return text[:MAX_LENGTHS[field_name]]


class TransactionRecorder:
    """
    Records purchases, sales and waste against the lot ledger.

    Args:
        store: TableStore shared by every service
        catalog: IngredientCatalog
        ledger: LotLedger
        recipes: RecipeBook
        markups: platform -> multiplier on weighted-average cost, used when
            a sale comes in without a price
        default_platform: platform recorded when a sale names none
        target_gp: gross profit % used to price menus that have no price
    """

    def __init__(self, store, catalog, ledger, recipes, markups=None,
                 default_platform=DEFAULT_PLATFORM, target_gp=60.0):
        self.store = store
        self.catalog = catalog
        self.ledger = ledger
        self.recipes = recipes
        self.markups = dict(DEFAULT_PLATFORM_MARKUPS if markups is None else markups)
        self.default_platform = default_platform
        self.target_gp = target_gp

    def markup_for(self, platform):
        try:
            return self.markups[platform]
        except KeyError:
            raise ValidationError(f"No markup configured for platform '{platform}'") from None

    # ---- purchases ------------------------------------------------------

    def record_purchase(self, ingredient, qty, unit=None, total_price=None, unit_price=None,
                        purchase_date=None, actual_yield=None, supplier_note=None):
        """
        Record a purchase as a new cost lot.

        ``qty`` is in ``unit`` (the ingredient's buy unit when omitted).
        Either ``total_price`` or ``unit_price`` (per purchase unit) is
        required. ``actual_yield``, when given, is the counted quantity in
        stock units and replaces the ratio conversion (e.g. 43 prawns from 1 kg).
        """
        qty = require_positive(qty, 'qty')
        if total_price is not None:
            total = require_positive(total_price, 'total_price')
        elif unit_price is not None:
            total = require_positive(unit_price, 'unit_price') * qty
        else:
            raise ValidationError("total_price or unit_price is required")
        purchase_date = parse_date(purchase_date, 'purchase_date') or utc_now().date()

        with self.store.transaction():
            ing = self.catalog.find(ingredient)
            unit = (unit or '').strip() or ing.buy_unit
            warnings = []
            if actual_yield is not None:
                qty_stock = require_positive(actual_yield, 'actual_yield')
                note = f"actual yield {qty_stock:g} {ing.stock_unit}"
            else:
                converted = to_stock_units(qty, unit, ing)
                qty_stock, note = converted.qty, converted.note
                if converted.assumption is not None:
                    warnings.append(converted.assumption)

            unit_cost = total / qty_stock
            lot_id = self.ledger.append_lot(
                ing.id, qty_stock, unit_cost, purchase_date,
                qty_buy=qty,
                unit=unit,
                total_price=total,
                supplier_note=_clean_text(supplier_note, 'note'),
                conversion_note=note,
            )
            self.catalog.refresh(ing.id)

        logger.info(f"PURCHASE: {ing.id} +{qty_stock:g} {ing.stock_unit} @ {unit_cost:g} ({lot_id})")
        return PurchaseResult(lot_id, ing.id, qty_stock, unit_cost, total, note, warnings)

    # ---- sales ----------------------------------------------------------

    def record_sale(self, kind, subject, qty, unit_price=None, platform=None, sale_date=None, unit=None):
        """
        Record a sale of an ingredient or of a menu.

        For an ingredient sale ``qty`` is in ``unit`` (stock unit when
        omitted); for a menu sale it is the number of servings. Without a
        ``unit_price`` an ingredient is priced at weighted-average cost times
        the platform markup, and a menu at its own price, falling back to its
        estimated recipe cost times the markup.

        Either every ingredient is deducted or none is.
        """
        if kind not in VALID_SALE_KINDS:
            raise ValidationError(f"Sale kind must be one of {sorted(VALID_SALE_KINDS)}, got {kind!r}")
        qty = require_positive(qty, 'qty')
        if unit_price is not None:
            unit_price = require_positive(unit_price, 'unit_price')
        platform = _clean_text(platform, 'platform') or self.default_platform
        markup = self.markup_for(platform) if unit_price is None else None
        sale_date = parse_date(sale_date, 'sale_date') or utc_now().date()

        with self.store.transaction():
            warnings = []
            if kind == SALE_KIND_INGREDIENT:
                ing = self.catalog.find(subject)
                subject_id = ing.id
                converted = to_stock_units(qty, unit, ing)
                if converted.assumption is not None:
                    warnings.append(converted.assumption)
                plans = [self.ledger.plan(ing.id, converted.qty)]
                if unit_price is None:
                    unit_price = current_cost(self.store, ing.id) * markup * converted.qty / qty
            else:
                expansion = self.recipes.expand_sale(subject, qty)
                subject_id = expansion.menu_id
                warnings.extend(expansion.warnings)
                plans = [self.ledger.plan(ingredient_id, need)
                         for ingredient_id, need in expansion.quantities.items()
                         if need > QTY_EPSILON]
                if unit_price is None:
                    unit_price = self._menu_price(subject_id, markup)

            # Every plan is satisfiable; only now touch the lots
            for plan in plans:
                self.ledger.apply(plan)

            revenue = unit_price * qty
            cogs = sum(plan.total_cost for plan in plans)
            sale = self.store.append_row('sales', {
                'date': sale_date,
                'platform': platform,
                'kind': kind,
                'subject_id': subject_id,
                'qty': qty,
                'unit_price': unit_price,
                'revenue': revenue,
                'cogs': cogs,
                'profit': revenue - cogs,
            })
            for plan in plans:
                for consumed in plan.consumed_lots:
                    self.store.append_row('sale_consumptions', {
                        'sale_id': sale.id,
                        'ingredient_id': plan.ingredient_id,
                        'lot_id': consumed.lot_id,
                        'qty': consumed.take,
                        'unit_cost': consumed.unit_cost,
                        'cost': consumed.cost,
                    })
            for plan in plans:
                self.catalog.refresh(plan.ingredient_id)

        logger.info(
            f"SALE: {kind} {subject_id} x{qty:g} on {platform}: "
            f"revenue {revenue:g}, cogs {cogs:g}, profit {revenue - cogs:g}"
        )
        return SaleResult(sale=sale, deductions=plans, warnings=warnings)

    def _menu_price(self, menu_id, markup):
        menu = self.store.get('menus', menu_id)
        if menu.price:
            return menu.price
        estimate = self.recipes.estimate_cost(menu_id, target_gp=self.target_gp)
        price = estimate['cost_per_serving'] * markup
        if price <= 0:
            raise ValidationError(f"Cannot derive a price for menu '{menu_id}'; pass unit_price")
        return price

    # ---- waste ----------------------------------------------------------

    def record_waste(self, ingredient, qty, unit=None, waste_date=None, note=None):
        """Write off spoiled stock, oldest lots first, at each lot's cost."""
        qty = require_positive(qty, 'qty')
        waste_date = parse_date(waste_date, 'waste_date') or utc_now().date()
        note = _clean_text(note, 'note')

        with self.store.transaction():
            ing = self.catalog.find(ingredient)
            converted = to_stock_units(qty, unit, ing)
            warnings = [converted.assumption] if converted.assumption is not None else []
            plan = self.ledger.apply(self.ledger.plan(ing.id, converted.qty))
            for consumed in plan.consumed_lots:
                self.store.append_row('waste', {
                    'date': waste_date,
                    'ingredient_id': ing.id,
                    'lot_id': consumed.lot_id,
                    'qty': consumed.take,
                    'unit_cost': consumed.unit_cost,
                    'cost': consumed.cost,
                    'note': note,
                })
            self.catalog.refresh(ing.id)

        logger.info(f"WASTE: {ing.id} -{converted.qty:g} {ing.stock_unit}, cost {plan.total_cost:g}")
        return WasteResult(ing.id, converted.qty, plan, warnings)

    def record_expense(self, category, amount, description, expense_date=None, note=None):
        """Record an overhead expense; it touches no lot."""
        category = _clean_text(category, 'category')
        if not category:
            raise ValidationError("Expense category is required")
        amount = require_positive(amount, 'amount')
        description = _clean_text(description, 'description')
        if not description:
            raise ValidationError("Expense description is required")
        expense_date = parse_date(expense_date, 'expense_date') or utc_now().date()

        with self.store.transaction():
            expense = self.store.append_row('expenses', {
                'date': expense_date,
                'category': category,
                'amount': amount,
                'description': description,
                'note': _clean_text(note, 'note'),
            })

        logger.info(f"EXPENSE: {category} {amount:g} on {expense_date}")
        return expense
