"""
Lot Ledger and FIFO Deduction Engine

Purchases are appended as dated cost lots; deductions drain the oldest lots
first. A deduction is split into a pure planning step, which walks a snapshot
of the open lots and either produces the full consumption or fails, and an
apply step that writes the planned remaining quantities. Nothing is written
unless the whole plan is satisfiable.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import List

from constants import QTY_EPSILON
from models import utc_now
from .errors import InsufficientStockError, StaleLotError, ValidationError
from .validation import as_float, require_positive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConsumedLot:
    """Portion of one lot taken by a deduction."""
    lot_id: str
    purchase_date: date
    take: float
    unit_cost: float
    remaining_before: float

    @property
    def cost(self):
        return self.take * self.unit_cost

    @property
    def remaining_after(self):
        left = self.remaining_before - self.take
        return 0.0 if left <= QTY_EPSILON else left

    def to_dict(self):
        return {
            'lot_id': self.lot_id,
            'purchase_date': self.purchase_date.isoformat(),
            'take': self.take,
            'unit_cost': self.unit_cost,
            'cost': self.cost,
        }


@dataclass
class DeductionResult:
    """Outcome of a FIFO deduction (planned or applied) for one ingredient."""
    ingredient_id: str
    required_qty: float
    consumed_lots: List[ConsumedLot] = field(default_factory=list)

    @property
    def total_cost(self):
        return sum(c.cost for c in self.consumed_lots)

    @property
    def avg_cost(self):
        return self.total_cost / self.required_qty

    def to_dict(self):
        return {
            'ingredient_id': self.ingredient_id,
            'required_qty': self.required_qty,
            'total_cost': self.total_cost,
            'avg_cost': self.avg_cost,
            'consumed_lots': [c.to_dict() for c in self.consumed_lots],
        }


def fifo_order(lots):
    """Oldest purchase first; same-day lots in the order they were recorded."""
    return sorted(lots, key=lambda lot: (lot.purchase_date, lot.seq))


def generate_lot_id(purchase_date):
    return f"LOT{purchase_date:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


class LotLedger:
    """Append-only purchase lots per ingredient, drained in FIFO order."""

    def __init__(self, store):
        self.store = store

    def lots(self, ingredient_id):
        """Every lot of an ingredient, drained ones included, in FIFO order."""
        return fifo_order(self.store.read_all('lots', ingredient_id=ingredient_id))

    def open_lots(self, ingredient_id):
        return [lot for lot in self.lots(ingredient_id) if lot.remaining_qty > QTY_EPSILON]

    def remaining(self, ingredient_id):
        return sum(lot.remaining_qty for lot in self.store.read_all('lots', ingredient_id=ingredient_id))

    def append_lot(self, ingredient_id, initial_qty_stock, unit_cost, purchase_date=None, **details):
        """
        Record a purchase lot and return its lot_id.

        ``details`` may carry the purchase as entered (qty_buy, unit,
        total_price, supplier_note, conversion_note).
        """
        if not ingredient_id:
            raise ValidationError("ingredient_id is required")
        initial_qty_stock = require_positive(initial_qty_stock, 'initial_qty_stock')
        unit_cost = as_float(unit_cost, 'unit_cost')
        if unit_cost < 0:
            raise ValidationError(f"Lot unit cost cannot be negative, got {unit_cost:g}")

        purchase_date = purchase_date or utc_now().date()
        lot_id = generate_lot_id(purchase_date)
        with self.store.transaction():
            self.store.append_row('lots', {
                'lot_id': lot_id,
                'ingredient_id': ingredient_id,
                'purchase_date': purchase_date,
                'initial_qty_stock': initial_qty_stock,
                'unit_cost': unit_cost,
                'remaining_qty': initial_qty_stock,
                **details,
            })

        logger.info(f"LOT: Created lot {lot_id} with {initial_qty_stock:g} @ {unit_cost:g} for {ingredient_id}")
        return lot_id

    def plan(self, ingredient_id, required_qty):
        """
        Work out which lots a deduction would drain, without touching them.

        Raises:
            ValidationError: required_qty is not positive
            InsufficientStockError: open lots hold less than required_qty
        """
        required_qty = require_positive(required_qty, 'required_qty')

        result = DeductionResult(ingredient_id=ingredient_id, required_qty=required_qty)
        still_needed = required_qty
        for lot in self.open_lots(ingredient_id):
            if still_needed <= QTY_EPSILON:
                break
            take = min(still_needed, lot.remaining_qty)
            result.consumed_lots.append(ConsumedLot(
                lot_id=lot.lot_id,
                purchase_date=lot.purchase_date,
                take=take,
                unit_cost=lot.unit_cost,
                remaining_before=lot.remaining_qty,
            ))
            still_needed -= take

        if still_needed > QTY_EPSILON:
            available = required_qty - still_needed
            logger.warning(f"FIFO: {ingredient_id} short by {still_needed:g} (need {required_qty:g})")
            raise InsufficientStockError(ingredient_id, required_qty, available)
        return result

    def apply(self, plan):
        """
        Write a plan's remaining quantities back to the lots.

        Each lot is written only if it still holds the quantity the plan was
        built from, so a deduction committed by another worker in between
        cannot be overwritten.

        Raises:
            StaleLotError: a planned lot changed after planning; nothing is written
        """
        with self.store.transaction():
            for consumed in plan.consumed_lots:
                lot = self.store.read_all('lots', lot_id=consumed.lot_id)[0]
                written = self.store.update_cell_if(
                    'lots', lot.seq, 'remaining_qty',
                    consumed.remaining_before, consumed.remaining_after,
                )
                if not written:
                    logger.warning(f"FIFO: Lot {consumed.lot_id} changed since planning {plan.ingredient_id}")
                    raise StaleLotError(plan.ingredient_id, consumed.lot_id)
        logger.info(
            f"FIFO: Deducted {plan.required_qty:g} of {plan.ingredient_id} "
            f"from {len(plan.consumed_lots)} lots, cost {plan.total_cost:g}"
        )
        return plan

    def deduct(self, ingredient_id, required_qty):
        """Drain ``required_qty`` stock units, oldest lots first, atomically."""
        with self.store.transaction():
            return self.apply(self.plan(ingredient_id, required_qty))
