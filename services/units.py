"""
Unit Conversion Service

Brings purchase and recipe quantities into an ingredient's stock unit.

Conversion is lenient on purpose: data entry is uncontrolled, so a unit that
is neither the stock unit nor the buy unit is taken 1:1 and the result carries
a UnitConversionAssumption so the caller can see and audit it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from constants import (
    UNIT_ALIASES,
    STOCK_UNIT_NOTE,
    BUY_UNIT_NOTE,
    UNRECOGNIZED_UNIT_NOTE,
    NON_POSITIVE_NOTE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnitConversionAssumption:
    """Warning attached to a result whose unit could not be resolved."""
    ingredient_id: str
    unit: str
    assumed_ratio: float = 1.0

    @property
    def message(self):
        return UNRECOGNIZED_UNIT_NOTE.format(unit=self.unit)

    def to_dict(self):
        return {
            'type': 'unit_conversion_assumption',
            'ingredient_id': self.ingredient_id,
            'unit': self.unit,
            'assumed_ratio': self.assumed_ratio,
            'message': self.message,
        }


@dataclass(frozen=True)
class ConversionResult:
    qty: float
    note: str
    assumption: Optional[UnitConversionAssumption] = None


def normalize_unit(unit):
    """Canonical lowercase token for a unit string ('' when empty)."""
    if unit is None:
        return ''
    token = str(unit).strip().lower()
    return UNIT_ALIASES.get(token, token)


def to_stock_units(qty, source_unit, ingredient):
    """
    Convert ``qty`` expressed in ``source_unit`` to the ingredient's stock unit.

    Args:
        qty: Quantity to convert
        source_unit: Unit the quantity is in (stock unit, buy unit, empty, or anything)
        ingredient: Object with id, stock_unit, buy_unit and buy_to_stock_ratio

    Returns:
        ConversionResult; never raises for bad quantities or units
    """
    if qty is None or qty <= 0:
        return ConversionResult(0.0, NON_POSITIVE_NOTE)

    unit = normalize_unit(source_unit)
    stock_unit = normalize_unit(ingredient.stock_unit)
    buy_unit = normalize_unit(ingredient.buy_unit)
    ratio = ingredient.buy_to_stock_ratio or 0

    if not unit or unit == stock_unit:
        return ConversionResult(float(qty), STOCK_UNIT_NOTE)

    if unit == buy_unit and ratio > 0:
        return ConversionResult(qty * ratio, BUY_UNIT_NOTE.format(ratio=ratio))

    assumption = UnitConversionAssumption(ingredient_id=ingredient.id, unit=str(source_unit).strip())
    logger.warning("UNITS: %s for ingredient %s", assumption.message, ingredient.id)
    return ConversionResult(float(qty), assumption.message, assumption)
