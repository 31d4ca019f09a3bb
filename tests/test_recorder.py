"""Purchases, sales, waste and expenses recorded through the TransactionRecorder."""
import pytest

from conftest import D1, D2, add_lots, remaining_by_lot
from services import InsufficientStockError, NoRecipeError, NotFoundError, ValidationError


def conserved(services, ingredient_id):
    ingredient = services.catalog.find(ingredient_id)
    return ingredient.current_stock == pytest.approx(services.ledger.remaining(ingredient_id))


# ---- purchases ----------------------------------------------------------

def test_purchase_in_buy_units(services, ing1):
    result = services.recorder.record_purchase('ING1', 2, unit='kg', total_price=100, purchase_date=D1)

    assert result.qty_stock == 2000
    assert result.unit_cost == pytest.approx(0.05)
    assert result.note == 'buy→stock x1000'
    lot = services.ledger.lots('ING1')[0]
    assert (lot.qty_buy, lot.unit, lot.total_price) == (2, 'kg', 100)
    ingredient = services.catalog.find('ING1')
    assert ingredient.current_stock == 2000
    assert ingredient.current_cost_per_unit == pytest.approx(0.05)


def test_purchase_defaults_to_buy_unit_and_unit_price(services, ing1):
    result = services.recorder.record_purchase('Chicken', 2, unit_price=50)
    assert result.qty_stock == 2000
    assert result.total_price == 100


def test_purchase_with_actual_yield(services):
    services.catalog.upsert('PRAWN', stock_unit='pc', buy_unit='kg', buy_to_stock_ratio=40)
    result = services.recorder.record_purchase('PRAWN', 1, unit='kg', total_price=430, actual_yield=43)
    assert result.qty_stock == 43
    assert result.unit_cost == pytest.approx(10.0)


def test_purchase_in_unknown_unit_warns(services, ing1):
    result = services.recorder.record_purchase('ING1', 3, unit='bag', total_price=30)
    assert result.qty_stock == 3
    assert [w.unit for w in result.warnings] == ['bag']


@pytest.mark.parametrize('kwargs', [
    {'qty': 0, 'total_price': 10},
    {'qty': 1, 'total_price': 0},
    {'qty': 1, 'unit_price': -2},
    {'qty': 1},
])
def test_purchase_validation(services, ing1, kwargs):
    with pytest.raises(ValidationError):
        services.recorder.record_purchase('ING1', **kwargs)
    assert services.ledger.lots('ING1') == []


def test_purchase_of_unknown_ingredient(services):
    with pytest.raises(NotFoundError):
        services.recorder.record_purchase('Truffle', 1, total_price=1000)
    assert services.store.read_all('lots') == []


# ---- ingredient sales ---------------------------------------------------

def test_ingredient_sale_scenario(services, ing1):
    services.recorder.record_purchase('ING1', 2, unit='kg', total_price=100, purchase_date=D1)

    result = services.recorder.record_sale('ingredient', 'ING1', 500, unit='g', unit_price=0.2)

    assert result.cogs == pytest.approx(25)
    assert result.sale.revenue == pytest.approx(100)
    assert result.sale.profit == pytest.approx(75)
    assert services.ledger.remaining('ING1') == pytest.approx(1500)
    assert conserved(services, 'ING1')


def test_ingredient_sale_priced_from_markup(services, ing1):
    add_lots(services, 'ING1', (2000, 0.05, D1))
    result = services.recorder.record_sale('ingredient', 'ING1', 100)
    # weighted-average 0.05 x store markup 2.0
    assert result.sale.unit_price == pytest.approx(0.1)
    assert result.sale.platform == 'store'

    in_kg = services.recorder.record_sale('ingredient', 'ING1', 0.5, unit='kg', platform='grab_food')
    assert in_kg.sale.unit_price == pytest.approx(0.05 * 3.0 * 1000)
    assert in_kg.cogs == pytest.approx(25)


def test_unknown_platform_needs_price(services, ing1):
    add_lots(services, 'ING1', (2000, 0.05, D1))
    with pytest.raises(ValidationError):
        services.recorder.record_sale('ingredient', 'ING1', 100, platform='walk_in')
    result = services.recorder.record_sale('ingredient', 'ING1', 100, platform='walk_in', unit_price=0.3)
    assert result.sale.platform == 'walk_in'


def test_sale_traces_cost_to_lots(services, ing1):
    lot_ids = add_lots(services, 'ING1', (100, 0.05, D1), (100, 0.08, D2))
    result = services.recorder.record_sale('ingredient', 'ING1', 150, unit_price=1)

    rows = services.store.read_all('sale_consumptions', sale_id=result.sale.id)
    assert [(r.lot_id, r.qty) for r in rows] == [(lot_ids[0], 100), (lot_ids[1], 50)]
    assert sum(r.cost for r in rows) == pytest.approx(result.cogs)
    assert result.cogs == pytest.approx(100 * 0.05 + 50 * 0.08)


def test_insufficient_ingredient_sale(services, ing1):
    add_lots(services, 'ING1', (50, 1.0, D1))
    with pytest.raises(InsufficientStockError) as exc:
        services.recorder.record_sale('ingredient', 'ING1', 99999, unit_price=1)
    assert exc.value.shortfall == pytest.approx(99949)
    assert remaining_by_lot(services, 'ING1') == [50]
    assert services.store.read_all('sales') == []


def test_sale_kind_validation(services, ing1):
    with pytest.raises(ValidationError):
        services.recorder.record_sale('combo', 'ING1', 1, unit_price=1)


# ---- menu sales ---------------------------------------------------------

@pytest.fixture
def m1(services, ing1):
    services.recipes.upsert_menu('M1', name='Chicken Rice')
    services.recipes.add_recipe_line('M1', 'ING1', 100)
    services.recorder.record_purchase('ING1', 2, unit='kg', total_price=100, purchase_date=D1)


def test_menu_sale_scenario(services, m1):
    result = services.recorder.record_sale('menu', 'M1', 3, unit_price=50)

    assert services.ledger.remaining('ING1') == pytest.approx(1700)
    assert result.cogs == pytest.approx(15)
    assert result.sale.subject_id == 'M1'
    assert result.sale.revenue == 150
    assert conserved(services, 'ING1')


def test_menu_sale_uses_menu_price(services, m1):
    services.recipes.upsert_menu('M1', price=45)
    result = services.recorder.record_sale('menu', 'chicken rice', 2)
    assert result.sale.unit_price == 45


def test_menu_sale_without_price_uses_cost_markup(services, m1):
    result = services.recorder.record_sale('menu', 'M1', 1, platform='grab_food')
    # 100 g at 0.05 x grab_food markup 3.0
    assert result.sale.unit_price == pytest.approx(15.0)


def test_menu_sale_is_atomic(services, m1):
    services.catalog.upsert('RICE', stock_unit='g')
    add_lots(services, 'RICE', (50, 0.01, D1))
    services.recipes.add_recipe_line('M1', 'RICE', 200)

    with pytest.raises(InsufficientStockError) as exc:
        services.recorder.record_sale('menu', 'M1', 1, unit_price=50)

    assert exc.value.ingredient_id == 'RICE'
    assert services.ledger.remaining('ING1') == pytest.approx(2000)
    assert services.ledger.remaining('RICE') == pytest.approx(50)
    assert services.store.read_all('sales') == []
    assert services.store.read_all('sale_consumptions') == []


def test_menu_sale_deducts_repeated_ingredient_once(services, ing1):
    add_lots(services, 'ING1', (100, 0.05, D1))
    services.recipes.upsert_menu('M2')
    services.recipes.add_recipe_line('M2', 'ING1', 2)
    services.recipes.add_recipe_line('M2', 'ING1', 3)

    result = services.recorder.record_sale('menu', 'M2', 4, unit_price=10)

    assert len(result.deductions) == 1
    assert result.deductions[0].required_qty == 20
    assert services.ledger.remaining('ING1') == pytest.approx(80)


def test_menu_without_recipe(services, ing1):
    services.recipes.upsert_menu('EMPTY', price=10)
    with pytest.raises(NoRecipeError):
        services.recorder.record_sale('menu', 'EMPTY', 1)


# ---- waste --------------------------------------------------------------

def test_waste_drains_fifo_and_records_cost(services, ing1):
    lot_ids = add_lots(services, 'ING1', (100, 0.05, D1), (100, 0.08, D2))

    result = services.recorder.record_waste('ING1', 0.15, unit='kg', note='spoiled')

    assert result.qty_stock == pytest.approx(150)
    assert result.waste_cost == pytest.approx(100 * 0.05 + 50 * 0.08)
    rows = services.store.read_all('waste', ingredient_id='ING1')
    assert [(r.lot_id, r.note) for r in rows] == [(lot_ids[0], 'spoiled'), (lot_ids[1], 'spoiled')]
    assert conserved(services, 'ING1')


def test_waste_beyond_stock_is_rejected(services, ing1):
    add_lots(services, 'ING1', (10, 0.05, D1))
    with pytest.raises(InsufficientStockError):
        services.recorder.record_waste('ING1', 11)
    assert services.store.read_all('waste') == []
    assert remaining_by_lot(services, 'ING1') == [10]


def test_stock_is_conserved_across_operations(services, ing1):
    services.recorder.record_purchase('ING1', 1, total_price=60, purchase_date=D1)
    services.recorder.record_purchase('ING1', 0.5, total_price=35, purchase_date=D2)
    services.recorder.record_sale('ingredient', 'ING1', 700, unit_price=0.2)
    services.recorder.record_waste('ING1', 100)
    with pytest.raises(InsufficientStockError):
        services.recorder.record_sale('ingredient', 'ING1', 5000, unit_price=0.2)

    assert services.ledger.remaining('ING1') == pytest.approx(700)
    assert conserved(services, 'ING1')
    for lot in services.ledger.lots('ING1'):
        assert 0 <= lot.remaining_qty <= lot.initial_qty_stock


# ---- expenses -----------------------------------------------------------

def test_expense_recorded_without_touching_lots(services, ing1):
    add_lots(services, 'ING1', (100, 1.0, D1))
    expense = services.recorder.record_expense('rent', '1200', '  January rent ', expense_date='2024-01-31')

    assert expense.amount == 1200
    assert expense.description == 'January rent'
    assert expense.date.isoformat() == '2024-01-31'
    assert remaining_by_lot(services, 'ING1') == [100]
    assert [e.id for e in services.store.read_all('expenses')] == [expense.id]


@pytest.mark.parametrize('kwargs', [
    {'category': '', 'amount': 10, 'description': 'gas'},
    {'category': 'utilities', 'amount': 0, 'description': 'gas'},
    {'category': 'utilities', 'amount': float('nan'), 'description': 'gas'},
    {'category': 'utilities', 'amount': 10, 'description': '   '},
    {'category': 'utilities', 'amount': 10, 'description': 'gas', 'expense_date': 'last week'},
])
def test_expense_validation(services, kwargs):
    with pytest.raises(ValidationError):
        services.recorder.record_expense(**kwargs)
    assert services.store.read_all('expenses') == []
