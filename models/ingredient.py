"""
Ingredient Model

Catalog entry for a raw material, with its unit conversion settings and
the cached stock/cost fields derived from the lot ledger.
"""

from .base import db, utc_now


class Ingredient(db.Model):
    """
    Ingredient tracked by the lot ledger.

    Units:
    - stock_unit: canonical unit for all ledger quantities (g, ml, pc...)
    - buy_unit: unit purchases are usually entered in (kg, case, bag...)
    - buy_to_stock_ratio: one buy_unit equals this many stock_units

    current_stock and current_cost_per_unit are a cache of the ledger and are
    only ever written by IngredientCatalog.refresh().
    """
    __tablename__ = 'ingredients'

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)

    stock_unit = db.Column(db.String(20), default='unit')
    buy_unit = db.Column(db.String(20), default='unit')
    buy_to_stock_ratio = db.Column(db.Float, default=1.0)

    # Low-stock threshold in stock units (informational)
    min_stock = db.Column(db.Float, default=0.0)

    # Derived from lots
    current_stock = db.Column(db.Float, default=0.0)
    current_cost_per_unit = db.Column(db.Float, default=0.0)

    created_at = db.Column(db.DateTime, default=utc_now, index=True)
    updated_at = db.Column(db.DateTime, default=utc_now)

    lots = db.relationship('Lot', backref='ingredient', lazy=True, order_by='Lot.seq')

    @property
    def is_low_stock(self):
        return (self.current_stock or 0.0) < (self.min_stock or 0.0)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'stock_unit': self.stock_unit,
            'buy_unit': self.buy_unit,
            'buy_to_stock_ratio': self.buy_to_stock_ratio,
            'min_stock': self.min_stock,
            'current_stock': self.current_stock,
            'current_cost_per_unit': self.current_cost_per_unit,
            'is_low_stock': self.is_low_stock,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
