"""
Unit Constants

Unit aliases and conversion notes used when bringing purchase and recipe
quantities into an ingredient's stock unit.
"""

# Unit aliases (lowercase input -> canonical token)
UNIT_ALIASES = {
    'gram': 'g', 'grams': 'g', 'gr': 'g', 'g': 'g',
    'kilogram': 'kg', 'kilograms': 'kg', 'kilo': 'kg', 'kilos': 'kg', 'kg': 'kg',
    'milligram': 'mg', 'milligrams': 'mg', 'mg': 'mg',
    'milliliter': 'ml', 'milliliters': 'ml', 'millilitre': 'ml', 'ml': 'ml',
    'liter': 'l', 'liters': 'l', 'litre': 'l', 'litres': 'l', 'l': 'l',
    'pound': 'lb', 'pounds': 'lb', 'lbs': 'lb', 'lb': 'lb',
    'ounce': 'oz', 'ounces': 'oz', 'oz': 'oz',
    'piece': 'pc', 'pieces': 'pc', 'pcs': 'pc', 'pc': 'pc',
    'each': 'ea', 'ea': 'ea',
    'pack': 'pack', 'packs': 'pack', 'package': 'pack', 'packages': 'pack', 'pkg': 'pack',
    'bottle': 'bottle', 'bottles': 'bottle',
    'can': 'can', 'cans': 'can',
    'bag': 'bag', 'bags': 'bag',
    'box': 'box', 'boxes': 'box',
    'case': 'case', 'cases': 'case',
    'tray': 'tray', 'trays': 'tray',
    'serving': 'serving', 'servings': 'serving',
}

# Unit assigned to ingredients created without one
DEFAULT_UNIT = 'unit'

# Quantities at or below this are treated as zero in ledger math
QTY_EPSILON = 1e-9

# Conversion notes surfaced with every converted quantity
STOCK_UNIT_NOTE = 'stock-unit'
BUY_UNIT_NOTE = 'buy→stock x{ratio:g}'
UNRECOGNIZED_UNIT_NOTE = "unit '{unit}' unrecognized → assumed 1:1"
NON_POSITIVE_NOTE = 'non-positive quantity → 0'
