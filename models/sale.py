"""
Sale Models

Contains the Sale transaction and the per-lot SaleConsumption rows that
trace its cost of goods sold back to purchase lots.
"""

from .base import db, utc_now


class Sale(db.Model):
    """Immutable sale record: revenue, FIFO cost of goods sold and profit."""
    __tablename__ = 'sales'

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False, index=True)
    platform = db.Column(db.String(50), nullable=False, index=True)
    kind = db.Column(db.String(20), nullable=False)  # 'ingredient' or 'menu'
    subject_id = db.Column(db.String(64), nullable=False, index=True)
    qty = db.Column(db.Float, nullable=False)
    unit_price = db.Column(db.Float, nullable=False)
    revenue = db.Column(db.Float, nullable=False)
    cogs = db.Column(db.Float, nullable=False)
    profit = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now)

    consumptions = db.relationship('SaleConsumption', backref='sale', lazy=True, order_by='SaleConsumption.id')

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'platform': self.platform,
            'kind': self.kind,
            'subject_id': self.subject_id,
            'qty': self.qty,
            'unit_price': self.unit_price,
            'revenue': self.revenue,
            'cogs': self.cogs,
            'profit': self.profit,
        }


class SaleConsumption(db.Model):
    """Quantity a sale drained from one lot, at that lot's unit cost."""
    __tablename__ = 'sale_consumptions'

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey('sales.id'), nullable=False, index=True)
    ingredient_id = db.Column(db.String(64), db.ForeignKey('ingredients.id'), nullable=False, index=True)
    lot_id = db.Column(db.String(40), db.ForeignKey('lots.lot_id'), nullable=False)
    qty = db.Column(db.Float, nullable=False)
    unit_cost = db.Column(db.Float, nullable=False)
    cost = db.Column(db.Float, nullable=False)
