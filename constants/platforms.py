"""
Sales Channel Constants

Default markup per sales platform. Delivery apps take a commission, so their
markup over ingredient cost is higher than walk-in sales.
"""

DEFAULT_PLATFORM = 'store'

# Multiplier applied to weighted-average cost per stock unit
DEFAULT_PLATFORM_MARKUPS = {
    'store': 2.0,
    'line_man': 2.85,
    'grab_food': 2.85,
    'food_panda': 3.1,
    'shopee_food': 2.65,
}
