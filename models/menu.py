"""
Menu Models

Contains the Menu and MenuRecipe models. A recipe line joins a menu to an
ingredient with a per-serving quantity.
"""

from .base import db, utc_now


class Menu(db.Model):
    """Sellable menu item with an optional default price per serving."""
    __tablename__ = 'menus'

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    price = db.Column(db.Float, nullable=True)
    created_at = db.Column(db.DateTime, default=utc_now, index=True)
    updated_at = db.Column(db.DateTime, default=utc_now)

    recipe_lines = db.relationship('MenuRecipe', backref='menu', lazy=True, order_by='MenuRecipe.id')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'price': self.price,
        }


class MenuRecipe(db.Model):
    """
    Recipe line. The same ingredient may appear on several lines of one menu
    (e.g. sauce and garnish), so (menu_id, ingredient_id) is indexed but not
    unique.
    """
    __tablename__ = 'menu_recipes'
    __table_args__ = (
        db.Index('ix_menu_recipes_menu_ingredient', 'menu_id', 'ingredient_id'),
    )

    id = db.Column(db.Integer, primary_key=True)
    menu_id = db.Column(db.String(64), db.ForeignKey('menus.id'), nullable=False)
    ingredient_id = db.Column(db.String(64), db.ForeignKey('ingredients.id'), nullable=False)
    qty_per_serving = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(20), nullable=True)  # stock unit, buy unit, or anything else (assumed 1:1)
    note = db.Column(db.String(255), default='')

    def to_dict(self):
        return {
            'id': self.id,
            'menu_id': self.menu_id,
            'ingredient_id': self.ingredient_id,
            'qty_per_serving': self.qty_per_serving,
            'unit': self.unit,
            'note': self.note,
        }
