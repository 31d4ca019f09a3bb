"""Lot ledger schema

Revision ID: 3b7d2e91c4a0
Revises:
Create Date: 2026-10-19 09:12:41.518204

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b7d2e91c4a0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'ingredients',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('stock_unit', sa.String(length=20), nullable=True),
        sa.Column('buy_unit', sa.String(length=20), nullable=True),
        sa.Column('buy_to_stock_ratio', sa.Float(), nullable=True),
        sa.Column('min_stock', sa.Float(), nullable=True),
        sa.Column('current_stock', sa.Float(), nullable=True),
        sa.Column('current_cost_per_unit', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('ingredients', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_ingredients_name'), ['name'], unique=False)
        batch_op.create_index(batch_op.f('ix_ingredients_created_at'), ['created_at'], unique=False)

    op.create_table(
        'menus',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('price', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('menus', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_menus_name'), ['name'], unique=False)
        batch_op.create_index(batch_op.f('ix_menus_created_at'), ['created_at'], unique=False)

    op.create_table(
        'lots',
        sa.Column('seq', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('lot_id', sa.String(length=40), nullable=False),
        sa.Column('ingredient_id', sa.String(length=64), nullable=False),
        sa.Column('purchase_date', sa.Date(), nullable=False),
        sa.Column('initial_qty_stock', sa.Float(), nullable=False),
        sa.Column('unit_cost', sa.Float(), nullable=False),
        sa.Column('remaining_qty', sa.Float(), nullable=False),
        sa.Column('qty_buy', sa.Float(), nullable=True),
        sa.Column('unit', sa.String(length=20), nullable=True),
        sa.Column('total_price', sa.Float(), nullable=True),
        sa.Column('supplier_note', sa.String(length=255), nullable=True),
        sa.Column('conversion_note', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['ingredient_id'], ['ingredients.id']),
        sa.PrimaryKeyConstraint('seq'),
    )
    with op.batch_alter_table('lots', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_lots_lot_id'), ['lot_id'], unique=True)
        batch_op.create_index(batch_op.f('ix_lots_ingredient_id'), ['ingredient_id'], unique=False)
        batch_op.create_index('ix_lots_fifo', ['ingredient_id', 'purchase_date', 'seq'], unique=False)

    op.create_table(
        'menu_recipes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('menu_id', sa.String(length=64), nullable=False),
        sa.Column('ingredient_id', sa.String(length=64), nullable=False),
        sa.Column('qty_per_serving', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=20), nullable=True),
        sa.Column('note', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['ingredient_id'], ['ingredients.id']),
        sa.ForeignKeyConstraint(['menu_id'], ['menus.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('menu_recipes', schema=None) as batch_op:
        batch_op.create_index('ix_menu_recipes_menu_ingredient', ['menu_id', 'ingredient_id'], unique=False)

    op.create_table(
        'sales',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('platform', sa.String(length=50), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('subject_id', sa.String(length=64), nullable=False),
        sa.Column('qty', sa.Float(), nullable=False),
        sa.Column('unit_price', sa.Float(), nullable=False),
        sa.Column('revenue', sa.Float(), nullable=False),
        sa.Column('cogs', sa.Float(), nullable=False),
        sa.Column('profit', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('sales', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_sales_date'), ['date'], unique=False)
        batch_op.create_index(batch_op.f('ix_sales_platform'), ['platform'], unique=False)
        batch_op.create_index(batch_op.f('ix_sales_subject_id'), ['subject_id'], unique=False)

    op.create_table(
        'sale_consumptions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sale_id', sa.Integer(), nullable=False),
        sa.Column('ingredient_id', sa.String(length=64), nullable=False),
        sa.Column('lot_id', sa.String(length=40), nullable=False),
        sa.Column('qty', sa.Float(), nullable=False),
        sa.Column('unit_cost', sa.Float(), nullable=False),
        sa.Column('cost', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['ingredient_id'], ['ingredients.id']),
        sa.ForeignKeyConstraint(['lot_id'], ['lots.lot_id']),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('sale_consumptions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_sale_consumptions_sale_id'), ['sale_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_sale_consumptions_ingredient_id'), ['ingredient_id'], unique=False)

    op.create_table(
        'waste',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('ingredient_id', sa.String(length=64), nullable=False),
        sa.Column('lot_id', sa.String(length=40), nullable=False),
        sa.Column('qty', sa.Float(), nullable=False),
        sa.Column('unit_cost', sa.Float(), nullable=False),
        sa.Column('cost', sa.Float(), nullable=False),
        sa.Column('note', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['ingredient_id'], ['ingredients.id']),
        sa.ForeignKeyConstraint(['lot_id'], ['lots.lot_id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('waste', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_waste_date'), ['date'], unique=False)
        batch_op.create_index(batch_op.f('ix_waste_ingredient_id'), ['ingredient_id'], unique=False)


def downgrade():
    op.drop_table('waste')
    op.drop_table('sale_consumptions')
    op.drop_table('sales')
    op.drop_table('menu_recipes')
    op.drop_table('lots')
    op.drop_table('menus')
    op.drop_table('ingredients')
