"""Weighted-average and FIFO unit costs."""
from types import SimpleNamespace

import pytest

from conftest import D1, D2, D3, add_lots
from services import ValidationError, current_cost, fifo_cost, suggested_price, weighted_average_cost


def lot(remaining, unit_cost, purchase_date, seq):
    return SimpleNamespace(remaining_qty=remaining, unit_cost=unit_cost, purchase_date=purchase_date, seq=seq)


def test_weighted_average_over_lots_with_stock():
    lots = [lot(10, 1.0, D1, 1), lot(30, 2.0, D2, 2), lot(0, 99.0, D3, 3)]
    assert weighted_average_cost(lots) == pytest.approx(1.75)


def test_drained_lots_fall_back_to_latest_purchase():
    lots = [lot(0, 1.0, D2, 1), lot(0, 4.0, D1, 2), lot(0, 3.0, D2, 3)]
    # Latest date wins; same-day lots fall back to recorded order
    assert weighted_average_cost(lots) == 3.0


def test_no_lots_cost_zero():
    assert weighted_average_cost([]) == 0.0


def test_current_cost_is_idempotent(services, ing1):
    add_lots(services, 'ING1', (100, 0.05, D1), (300, 0.09, D2))
    first = current_cost(services.store, 'ING1')
    second = current_cost(services.store, 'ING1')
    assert first == second == pytest.approx((100 * 0.05 + 300 * 0.09) / 400)


def test_fifo_cost_is_oldest_open_lot(services, ing1):
    add_lots(services, 'ING1', (100, 0.07, D2), (100, 0.05, D1))
    assert fifo_cost(services.store, 'ING1') == 0.05
    services.ledger.deduct('ING1', 100)
    assert fifo_cost(services.store, 'ING1') == 0.07


def test_fifo_cost_without_stock(services, ing1):
    assert fifo_cost(services.store, 'ING1') == 0.0


def test_suggested_price():
    assert suggested_price(40, 60) == pytest.approx(100)
    assert suggested_price(40, 0) == 40
    with pytest.raises(ValidationError):
        suggested_price(40, 100)
