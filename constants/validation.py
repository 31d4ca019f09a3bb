"""
Validation Constants

Whitelist values for validating service and request input.
"""

# Sale kinds
SALE_KIND_INGREDIENT = 'ingredient'
SALE_KIND_MENU = 'menu'
VALID_SALE_KINDS = {SALE_KIND_INGREDIENT, SALE_KIND_MENU}

# History views
VALID_HISTORY_TYPES = {'sales', 'purchases', 'expenses'}

# Report buckets
VALID_GRANULARITIES = {'day', 'month'}

# Overhead spreading: look-back window, and servings per day assumed when
# no menu servings were sold in it
OVERHEAD_PERIOD_DAYS = 30
OVERHEAD_DAILY_SERVES = 50

# Fields a catalog upsert may patch (cached stock/cost fields are derived only)
INGREDIENT_PATCH_FIELDS = {'name', 'stock_unit', 'buy_unit', 'buy_to_stock_ratio', 'min_stock'}
MENU_PATCH_FIELDS = {'name', 'price'}

# Maximum field lengths
MAX_LENGTHS = {
    'identifier': 64,
    'name': 200,
    'unit': 20,
    'platform': 50,
    'category': 50,
    'note': 255,
    'description': 255,
}
