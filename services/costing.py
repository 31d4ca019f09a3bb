"""
Cost Calculation Service

Per-unit ingredient costs derived from the lot ledger. Nothing here is
cached: every call reads the lots again, so two calls with no mutation in
between always agree.
"""

from constants import QTY_EPSILON
from .errors import ValidationError


def weighted_average_cost(lots):
    """
    Stock-weighted mean unit cost of the lots that still hold stock.

    Falls back to the unit cost of the most recently dated lot when every lot
    is drained (recorded order breaks ties between same-day lots), and to 0
    when there are no lots at all.
    """
    total_qty = 0.0
    total_cost = 0.0
    for lot in lots:
        if lot.remaining_qty > QTY_EPSILON:
            total_qty += lot.remaining_qty
            total_cost += lot.remaining_qty * lot.unit_cost

    if total_qty > 0:
        return total_cost / total_qty

    if lots:
        latest = max(lots, key=lambda lot: (lot.purchase_date, lot.seq))
        return latest.unit_cost

    return 0.0


def current_cost(store, ingredient_id):
    """Weighted-average cost per stock unit for an ingredient."""
    return weighted_average_cost(store.read_all('lots', ingredient_id=ingredient_id))


def fifo_cost(store, ingredient_id):
    """Unit cost of the lot the next deduction would drain first (0 if none)."""
    open_lots = [lot for lot in store.read_all('lots', ingredient_id=ingredient_id)
                 if lot.remaining_qty > QTY_EPSILON]
    if not open_lots:
        return 0.0
    oldest = min(open_lots, key=lambda lot: (lot.purchase_date, lot.seq))
    return oldest.unit_cost


def suggested_price(cost, target_gp):
    """Selling price that leaves ``target_gp`` percent gross profit over ``cost``."""
    if target_gp >= 100:
        raise ValidationError(f"Target gross profit must be below 100%, got {target_gp}")
    return cost / (1 - target_gp / 100.0)
