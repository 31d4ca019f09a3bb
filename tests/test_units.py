"""Unit conversion into stock units."""
import logging
from types import SimpleNamespace

import pytest

from constants import NON_POSITIVE_NOTE, STOCK_UNIT_NOTE
from services.units import UnitConversionAssumption, normalize_unit, to_stock_units


@pytest.fixture
def chicken():
    return SimpleNamespace(id='ING1', stock_unit='g', buy_unit='kg', buy_to_stock_ratio=1000.0)


def test_stock_unit_passes_through(chicken):
    result = to_stock_units(250, 'g', chicken)
    assert result.qty == 250
    assert result.note == STOCK_UNIT_NOTE
    assert result.assumption is None


@pytest.mark.parametrize('unit', [None, '', '   '])
def test_empty_unit_is_stock_unit(chicken, unit):
    result = to_stock_units(3, unit, chicken)
    assert result.qty == 3
    assert result.note == STOCK_UNIT_NOTE


def test_buy_unit_uses_ratio(chicken):
    result = to_stock_units(2, 'kg', chicken)
    assert result.qty == 2000
    assert result.note == 'buy→stock x1000'
    assert result.assumption is None


def test_unit_aliases_and_case_are_normalized(chicken):
    assert normalize_unit('Kilograms') == 'kg'
    assert normalize_unit(' GRAMS ') == 'g'
    assert to_stock_units(1.5, 'KG', chicken).qty == 1500
    assert to_stock_units(10, 'Grams', chicken).note == STOCK_UNIT_NOTE


def test_unrecognized_unit_assumes_one_to_one(chicken, caplog):
    with caplog.at_level(logging.WARNING, logger='services.units'):
        result = to_stock_units(4, 'tbsp', chicken)

    assert result.qty == 4
    assert result.note == "unit 'tbsp' unrecognized → assumed 1:1"
    assert result.assumption == UnitConversionAssumption(ingredient_id='ING1', unit='tbsp')
    assert result.assumption.to_dict()['assumed_ratio'] == 1.0
    assert 'tbsp' in caplog.text


def test_buy_unit_with_bad_ratio_is_unrecognized():
    ingredient = SimpleNamespace(id='X', stock_unit='g', buy_unit='bag', buy_to_stock_ratio=0)
    result = to_stock_units(2, 'bag', ingredient)
    assert result.qty == 2
    assert result.assumption is not None


@pytest.mark.parametrize('qty', [0, -5, None])
def test_non_positive_quantity_converts_to_zero(chicken, qty):
    result = to_stock_units(qty, 'kg', chicken)
    assert result.qty == 0
    assert result.note == NON_POSITIVE_NOTE


@pytest.mark.parametrize('qty', [0.25, 1, 3.7])
def test_buy_unit_round_trip(chicken, qty):
    stock_qty = to_stock_units(qty, 'kg', chicken).qty
    assert stock_qty / chicken.buy_to_stock_ratio == pytest.approx(qty)
