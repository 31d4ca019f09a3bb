"""
Constants Package

Unit tables, sales channels and validation whitelists shared by the
models, services and request layer.
"""

from .units import (
    UNIT_ALIASES,
    DEFAULT_UNIT,
    QTY_EPSILON,
    STOCK_UNIT_NOTE,
    BUY_UNIT_NOTE,
    UNRECOGNIZED_UNIT_NOTE,
    NON_POSITIVE_NOTE,
)

from .platforms import (
    DEFAULT_PLATFORM,
    DEFAULT_PLATFORM_MARKUPS,
)

from .validation import (
    SALE_KIND_INGREDIENT,
    SALE_KIND_MENU,
    VALID_SALE_KINDS,
    VALID_HISTORY_TYPES,
    VALID_GRANULARITIES,
    OVERHEAD_PERIOD_DAYS,
    OVERHEAD_DAILY_SERVES,
    INGREDIENT_PATCH_FIELDS,
    MENU_PATCH_FIELDS,
    MAX_LENGTHS,
)

__all__ = [
    # Units
    'UNIT_ALIASES',
    'DEFAULT_UNIT',
    'QTY_EPSILON',
    'STOCK_UNIT_NOTE',
    'BUY_UNIT_NOTE',
    'UNRECOGNIZED_UNIT_NOTE',
    'NON_POSITIVE_NOTE',
    # Platforms
    'DEFAULT_PLATFORM',
    'DEFAULT_PLATFORM_MARKUPS',
    # Validation
    'SALE_KIND_INGREDIENT',
    'SALE_KIND_MENU',
    'VALID_SALE_KINDS',
    'VALID_HISTORY_TYPES',
    'VALID_GRANULARITIES',
    'OVERHEAD_PERIOD_DAYS',
    'OVERHEAD_DAILY_SERVES',
    'INGREDIENT_PATCH_FIELDS',
    'MENU_PATCH_FIELDS',
    'MAX_LENGTHS',
]
