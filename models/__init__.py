"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db, utc_now

from .expense import Expense
from .ingredient import Ingredient
from .lot import Lot
from .menu import Menu, MenuRecipe
from .sale import Sale, SaleConsumption
from .waste import Waste

__all__ = [
    'db',
    'utc_now',
    'Expense',
    'Ingredient',
    'Lot',
    'Menu',
    'MenuRecipe',
    'Sale',
    'SaleConsumption',
    'Waste',
]
