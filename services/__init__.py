"""
Services Package

Business logic for the lot ledger: storage access, unit conversion, the
ingredient catalog, FIFO deduction, costing, recipes, the transaction
recorder and reports.
"""

from .errors import (
    LedgerError,
    ValidationError,
    NotFoundError,
    NoRecipeError,
    InsufficientStockError,
    StaleLotError,
)

from .store import TableStore

from .units import (
    ConversionResult,
    UnitConversionAssumption,
    normalize_unit,
    to_stock_units,
)

from .catalog import (
    CatalogCache,
    IngredientCatalog,
    lookup_key,
)

from .ledger import (
    ConsumedLot,
    DeductionResult,
    LotLedger,
    fifo_order,
)

from .costing import (
    current_cost,
    fifo_cost,
    suggested_price,
    weighted_average_cost,
)

from .recipes import (
    RecipeBook,
    RecipeExpansion,
)

from .recorder import (
    PurchaseResult,
    SaleResult,
    TransactionRecorder,
    WasteResult,
)

from .reports import (
    history,
    history_csv,
    overhead_per_serving,
    sales_report,
)

__all__ = [
    # Errors
    'LedgerError',
    'ValidationError',
    'NotFoundError',
    'NoRecipeError',
    'InsufficientStockError',
    'StaleLotError',
    # Storage
    'TableStore',
    # Units
    'ConversionResult',
    'UnitConversionAssumption',
    'normalize_unit',
    'to_stock_units',
    # Catalog
    'CatalogCache',
    'IngredientCatalog',
    'lookup_key',
    # Ledger
    'ConsumedLot',
    'DeductionResult',
    'LotLedger',
    'fifo_order',
    # Costing
    'current_cost',
    'fifo_cost',
    'suggested_price',
    'weighted_average_cost',
    # Recipes
    'RecipeBook',
    'RecipeExpansion',
    # Recorder
    'PurchaseResult',
    'SaleResult',
    'TransactionRecorder',
    'WasteResult',
    # Reports
    'history',
    'history_csv',
    'overhead_per_serving',
    'sales_report',
]
