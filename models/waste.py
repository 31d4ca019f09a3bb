"""
Waste Model

Spoiled or discarded stock, written one row per lot drained.
"""

from .base import db, utc_now


class Waste(db.Model):
    __tablename__ = 'waste'

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False, index=True)
    ingredient_id = db.Column(db.String(64), db.ForeignKey('ingredients.id'), nullable=False, index=True)
    lot_id = db.Column(db.String(40), db.ForeignKey('lots.lot_id'), nullable=False)
    qty = db.Column(db.Float, nullable=False)
    unit_cost = db.Column(db.Float, nullable=False)
    cost = db.Column(db.Float, nullable=False)
    note = db.Column(db.String(255), default='')
    created_at = db.Column(db.DateTime, default=utc_now)
