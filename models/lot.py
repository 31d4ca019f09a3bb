"""
Lot Model

One purchase event: a dated quantity of an ingredient with its own unit cost.
"""

from .base import db, utc_now


class Lot(db.Model):
    """
    Purchase lot in the ledger. Append-only: rows are never deleted, and the
    only column that changes after insert is remaining_qty, which only goes
    down (0 <= remaining_qty <= initial_qty_stock).
    """
    __tablename__ = 'lots'
    __table_args__ = (
        db.Index('ix_lots_fifo', 'ingredient_id', 'purchase_date', 'seq'),
    )

    # Insertion order; breaks FIFO ties between lots bought the same day
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    lot_id = db.Column(db.String(40), unique=True, nullable=False, index=True)
    ingredient_id = db.Column(db.String(64), db.ForeignKey('ingredients.id'), nullable=False, index=True)
    purchase_date = db.Column(db.Date, nullable=False)

    # Quantities in stock units, cost per stock unit
    initial_qty_stock = db.Column(db.Float, nullable=False)
    unit_cost = db.Column(db.Float, nullable=False)
    remaining_qty = db.Column(db.Float, nullable=False)

    # Purchase as entered
    qty_buy = db.Column(db.Float, nullable=True)
    unit = db.Column(db.String(20), nullable=True)
    total_price = db.Column(db.Float, nullable=True)
    supplier_note = db.Column(db.String(255), default='')
    conversion_note = db.Column(db.String(255), default='')

    created_at = db.Column(db.DateTime, default=utc_now)

    def to_dict(self):
        return {
            'lot_id': self.lot_id,
            'ingredient_id': self.ingredient_id,
            'purchase_date': self.purchase_date.isoformat(),
            'initial_qty_stock': self.initial_qty_stock,
            'unit_cost': self.unit_cost,
            'remaining_qty': self.remaining_qty,
            'qty_buy': self.qty_buy,
            'unit': self.unit,
            'total_price': self.total_price,
            'supplier_note': self.supplier_note,
            'conversion_note': self.conversion_note,
        }
