"""
Ledger Errors

Typed failures raised by the ledger services. Every one of them is raised
before any row is written, or inside a store transaction that is rolled back,
so a rejected operation never leaves partial changes behind.
"""


class LedgerError(Exception):
    """Base class for all ledger failures."""
    code = 'ledger_error'

    def to_dict(self):
        return {'code': self.code, 'error': str(self)}


class ValidationError(LedgerError):
    """Raised for non-positive quantities or prices and missing identifiers."""
    code = 'validation_error'


class NotFoundError(LedgerError):
    """Raised when an ingredient, menu or recipe reference cannot be resolved."""
    code = 'not_found'

    def __init__(self, kind, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} '{identifier}' not found")

    def to_dict(self):
        data = super().to_dict()
        data.update({'kind': self.kind, 'identifier': self.identifier})
        return data


class NoRecipeError(LedgerError):
    """Raised when a menu exists but has no recipe lines to deduct."""
    code = 'no_recipe'

    def __init__(self, menu_id):
        self.menu_id = menu_id
        super().__init__(f"menu '{menu_id}' has no recipe lines")


class InsufficientStockError(LedgerError):
    """Raised when FIFO deduction runs out of lots before the quantity is met."""
    code = 'insufficient_stock'

    def __init__(self, ingredient_id, required, available):
        self.ingredient_id = ingredient_id
        self.required = required
        self.available = available
        self.shortfall = required - available
        super().__init__(
            f"insufficient stock for '{ingredient_id}': "
            f"need {required:g}, have {available:g} (short {self.shortfall:g})"
        )

    def to_dict(self):
        data = super().to_dict()
        data.update({
            'ingredient_id': self.ingredient_id,
            'required': self.required,
            'available': self.available,
            'shortfall': self.shortfall,
        })
        return data


class StaleLotError(LedgerError):
    """Raised when a lot changed between planning a deduction and writing it."""
    code = 'stale_lot'

    def __init__(self, ingredient_id, lot_id):
        self.ingredient_id = ingredient_id
        self.lot_id = lot_id
        super().__init__(
            f"lot '{lot_id}' of '{ingredient_id}' was changed by another writer; retry the operation"
        )

    def to_dict(self):
        data = super().to_dict()
        data.update({'ingredient_id': self.ingredient_id, 'lot_id': self.lot_id})
        return data
