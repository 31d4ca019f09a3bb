"""Ingredient catalog lookups, upserts and the derived stock/cost cache."""
from collections import namedtuple

import pytest

from conftest import D1, D2, add_lots
from services import CatalogCache, NotFoundError, ValidationError

Row = namedtuple('Row', ['id', 'name'])


@pytest.fixture
def counted_rows():
    """Rows for a bare CatalogCache plus a loader that records each full read."""
    rows = [Row('ING1', 'Chicken')]
    loads = []

    def load():
        loads.append(len(rows))
        return list(rows)

    return rows, loads, load


def test_upsert_creates_with_defaults(services):
    ingredient = services.catalog.upsert('Rice', stock_unit='g')
    assert ingredient.id == 'Rice'
    assert ingredient.name == 'Rice'
    assert ingredient.buy_unit == 'g'
    assert ingredient.buy_to_stock_ratio == 1.0
    assert ingredient.min_stock == 5.0
    assert ingredient.current_stock == 0.0
    assert ingredient.updated_at is not None


def test_upsert_merges_non_null_fields(services, ing1):
    before = ing1.updated_at
    updated = services.catalog.upsert('chicken', min_stock=250, name=None, buy_unit=None)
    assert updated.id == 'ING1'
    assert updated.name == 'Chicken'
    assert updated.buy_unit == 'kg'
    assert updated.min_stock == 250
    assert updated.updated_at >= before


@pytest.mark.parametrize('patch', [
    {'buy_to_stock_ratio': 0},
    {'buy_to_stock_ratio': 'lots'},
    {'min_stock': -1},
    {'name': '  '},
    {'current_stock': 100},
])
def test_upsert_rejects_bad_patches(services, ing1, patch):
    with pytest.raises(ValidationError):
        services.catalog.upsert('ING1', **patch)
    assert services.catalog.find('ING1').buy_to_stock_ratio == 1000


def test_find_is_case_insensitive_on_id_and_name(services, ing1):
    assert services.catalog.find('ing1').id == 'ING1'
    assert services.catalog.find('  CHICKEN ').id == 'ING1'


def test_find_unknown_and_blank(services, ing1):
    with pytest.raises(NotFoundError) as exc:
        services.catalog.find('Beef')
    assert exc.value.identifier == 'Beef'
    with pytest.raises(ValidationError):
        services.catalog.find('')


def test_exact_id_beats_name_match(services):
    services.catalog.upsert('S2', name='salt')
    services.catalog.upsert('salt', name='Sea Salt')
    assert services.catalog.find('SALT').id == 'salt'


def test_earliest_created_name_match_wins(services):
    services.catalog.upsert('b-salt', name='Salt')
    services.catalog.upsert('a-salt', name='Salt')
    assert services.catalog.find('salt').id == 'b-salt'


def test_lookup_index_rebuilt_only_after_id_or_name_writes(counted_rows):
    rows, loads, load = counted_rows
    cache = CatalogCache()
    assert cache.resolve('ingredients', 'chicken', load) == 'ING1'
    assert cache.resolve('ingredients', 'ing1', load) == 'ING1'
    cache.invalidate('ingredients', {'min_stock'})
    cache.invalidate('menus', None)
    assert cache.resolve('ingredients', 'CHICKEN', load) == 'ING1'
    assert len(loads) == 1

    rows[0] = Row('ING1', 'Chicken Thigh')
    cache.invalidate('ingredients', {'name'})
    assert cache.resolve('ingredients', 'chicken thigh', load) == 'ING1'
    assert len(loads) == 2

    cache.invalidate()
    assert cache.resolve('ingredients', 'ING1', load) == 'ING1'
    assert len(loads) == 3


def test_lookup_miss_rebuilds_cached_index_once(counted_rows):
    rows, loads, load = counted_rows
    cache = CatalogCache()
    cache.resolve('ingredients', 'ING1', load)
    rows.append(Row('NEW', 'Beef'))

    assert cache.resolve('ingredients', 'beef', load) == 'NEW'
    assert loads == [1, 2]
    assert cache.resolve('ingredients', 'new', load) == 'NEW'
    assert loads == [1, 2]

    assert cache.resolve('ingredients', 'pork', load) is None
    assert loads == [1, 2, 2]

    cache.invalidate()
    assert cache.resolve('ingredients', 'pork', load) is None
    assert loads == [1, 2, 2, 2]


def test_rename_moves_name_lookup(services, ing1):
    services.catalog.find('Chicken')
    services.catalog.upsert('ING1', name='Chicken Thigh')
    assert services.catalog.find('chicken thigh').id == 'ING1'
    assert services.catalog.find_or_none('Chicken') is None


def test_long_names_are_found_but_not_minted_as_ids(services):
    long_name = 'N' * 70
    services.catalog.upsert('LONG', name=long_name)
    assert services.catalog.find(long_name).id == 'LONG'
    assert services.catalog.upsert(long_name, min_stock=3).id == 'LONG'

    with pytest.raises(ValidationError):
        services.catalog.upsert('X' * 70)
    assert services.catalog.find_or_none('X' * 70) is None
    with pytest.raises(ValidationError):
        services.catalog.find('N' * 201)


def test_rollback_invalidates_lookup_index(services):
    with pytest.raises(RuntimeError):
        with services.store.transaction():
            services.catalog.upsert('Ghost')
            assert services.catalog.find('ghost').id == 'Ghost'
            raise RuntimeError('abort')
    assert services.catalog.find_or_none('Ghost') is None


def test_refresh_matches_ledger(services, ing1):
    add_lots(services, 'ING1', (1000, 0.05, D1), (1000, 0.07, D2))
    services.ledger.deduct('ING1', 1500)
    ingredient = services.catalog.refresh('ING1')
    assert ingredient.current_stock == pytest.approx(500)
    assert ingredient.current_stock == pytest.approx(services.ledger.remaining('ING1'))
    assert ingredient.current_cost_per_unit == pytest.approx(0.07)


def test_low_stock_lists_emptiest_first(services, ing1):
    services.catalog.upsert('ING1', min_stock=500)
    services.catalog.upsert('Oil', stock_unit='ml', min_stock=100)
    services.catalog.upsert('Salt', stock_unit='g', min_stock=1)
    add_lots(services, 'ING1', (200, 0.05, D1))
    add_lots(services, 'Salt', (50, 0.01, D1))

    low = services.catalog.low_stock()
    assert [item['id'] for item in low] == ['Oil', 'ING1']
    assert low[1] == {'id': 'ING1', 'name': 'Chicken', 'remaining': 200, 'minimum': 500, 'unit': 'g'}
