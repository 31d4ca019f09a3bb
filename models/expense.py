"""
Expense Model

Overhead spending (rent, gas, staff meals) that is not tied to a lot.
Spread over menu servings for overhead-inclusive cost estimates.
"""

from .base import db, utc_now


class Expense(db.Model):
    __tablename__ = 'expenses'

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False, index=True)
    category = db.Column(db.String(50), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    description = db.Column(db.String(255), nullable=False)
    note = db.Column(db.String(255), default='')
    created_at = db.Column(db.DateTime, default=utc_now)

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'category': self.category,
            'amount': self.amount,
            'description': self.description,
            'note': self.note,
        }
