"""
JSON API

Thin request layer over the ledger services, mounted under /api. Handlers
parse and sanitize the payload, call one service operation and wrap the
result; ledger errors are turned into JSON responses by the blueprint's
error handler.
"""

import logging

from flask import Blueprint, Response, current_app, jsonify, request

from constants import INGREDIENT_PATCH_FIELDS, MAX_LENGTHS, MENU_PATCH_FIELDS
from services import (
    InsufficientStockError,
    LedgerError,
    NoRecipeError,
    NotFoundError,
    StaleLotError,
    ValidationError,
    current_cost,
    fifo_cost,
    history,
    history_csv,
    overhead_per_serving,
    sales_report,
)
from services.validation import as_float, optional_float
from utils.sanitizer import sanitize_identifier, sanitize_text

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')

ERROR_STATUS = {
    ValidationError: 400,
    NotFoundError: 404,
    InsufficientStockError: 409,
    StaleLotError: 409,
    NoRecipeError: 422,
}


@api.errorhandler(LedgerError)
def handle_ledger_error(error):
    status = ERROR_STATUS.get(type(error), 400)
    logger.info(f"API: {request.method} {request.path} rejected ({status}): {error}")
    return jsonify({'success': False, **error.to_dict()}), status


def ledger_services():
    return current_app.extensions['ledger']


def _ok(data, status=200):
    return jsonify({'success': True, 'data': data}), status


def _payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _patch(data, allowed):
    """Keep the keys a service accepts; unknown keys are rejected by the service."""
    patch = {k: v for k, v in data.items() if k not in ('id', 'ingredient', 'menu')}
    if 'name' in patch and patch['name'] is not None:
        patch['name'] = sanitize_text(patch['name'], max_length=MAX_LENGTHS['name'])
    for unit_field in ('stock_unit', 'buy_unit'):
        if unit_field in patch and patch[unit_field] is not None and unit_field in allowed:
            patch[unit_field] = sanitize_text(patch[unit_field], max_length=MAX_LENGTHS['unit'])
    return patch


# ============================================
# INGREDIENTS
# ============================================

@api.route('/ingredients')
def ingredients_list():
    services = ledger_services()
    return _ok([ing.to_dict() for ing in services.catalog.all()])


@api.route('/ingredients/<ref>')
def ingredient_detail(ref):
    services = ledger_services()
    ingredient = services.catalog.find(sanitize_identifier(ref))
    return _ok(ingredient.to_dict())


@api.route('/ingredients/<ref>', methods=['PUT'])
def ingredient_upsert(ref):
    services = ledger_services()
    patch = _patch(_payload(), INGREDIENT_PATCH_FIELDS)
    ingredient = services.catalog.upsert(sanitize_identifier(ref), **patch)
    return _ok(ingredient.to_dict())


@api.route('/ingredients/<ref>/lots')
def ingredient_lots(ref):
    services = ledger_services()
    ingredient = services.catalog.find(sanitize_identifier(ref))
    open_only = request.args.get('open') in ('1', 'true')
    lots = services.ledger.open_lots(ingredient.id) if open_only else services.ledger.lots(ingredient.id)
    return _ok([lot.to_dict() for lot in lots])


@api.route('/ingredients/<ref>/cost')
def ingredient_cost(ref):
    services = ledger_services()
    ingredient = services.catalog.find(sanitize_identifier(ref))
    return _ok({
        'ingredient_id': ingredient.id,
        'stock': services.ledger.remaining(ingredient.id),
        'stock_unit': ingredient.stock_unit,
        'current_cost': current_cost(services.store, ingredient.id),
        'fifo_cost': fifo_cost(services.store, ingredient.id),
    })


@api.route('/low-stock')
def low_stock():
    services = ledger_services()
    return _ok(services.catalog.low_stock())


# ============================================
# TRANSACTIONS
# ============================================

@api.route('/purchases', methods=['POST'])
def purchase_add():
    services = ledger_services()
    data = _payload()
    result = services.recorder.record_purchase(
        sanitize_identifier(data.get('ingredient')),
        data.get('qty'),
        unit=sanitize_text(data.get('unit'), max_length=MAX_LENGTHS['unit']),
        total_price=optional_float(data.get('total_price'), 'total_price'),
        unit_price=optional_float(data.get('unit_price'), 'unit_price'),
        purchase_date=data.get('date'),
        actual_yield=optional_float(data.get('actual_yield'), 'actual_yield'),
        supplier_note=sanitize_text(data.get('note'), max_length=MAX_LENGTHS['note']),
    )
    return _ok(result.to_dict(), 201)


@api.route('/sales', methods=['POST'])
def sale_add():
    services = ledger_services()
    data = _payload()
    result = services.recorder.record_sale(
        data.get('kind'),
        sanitize_identifier(data.get('subject') or data.get('menu') or data.get('ingredient')),
        data.get('qty'),
        unit_price=optional_float(data.get('unit_price'), 'unit_price'),
        platform=sanitize_text(data.get('platform'), max_length=MAX_LENGTHS['platform']),
        sale_date=data.get('date'),
        unit=sanitize_text(data.get('unit'), max_length=MAX_LENGTHS['unit']),
    )
    return _ok(result.to_dict(), 201)


@api.route('/waste', methods=['POST'])
def waste_add():
    services = ledger_services()
    data = _payload()
    result = services.recorder.record_waste(
        sanitize_identifier(data.get('ingredient')),
        data.get('qty'),
        unit=sanitize_text(data.get('unit'), max_length=MAX_LENGTHS['unit']),
        waste_date=data.get('date'),
        note=sanitize_text(data.get('note'), max_length=MAX_LENGTHS['note']),
    )
    return _ok(result.to_dict(), 201)


@api.route('/expenses', methods=['POST'])
def expense_add():
    services = ledger_services()
    data = _payload()
    expense = services.recorder.record_expense(
        sanitize_text(data.get('category'), max_length=MAX_LENGTHS['category']),
        data.get('amount'),
        sanitize_text(data.get('description'), max_length=MAX_LENGTHS['description']),
        expense_date=data.get('date'),
        note=sanitize_text(data.get('note'), max_length=MAX_LENGTHS['note']),
    )
    return _ok(expense.to_dict(), 201)


# ============================================
# MENUS
# ============================================

@api.route('/menus')
def menus_list():
    services = ledger_services()
    return _ok([menu.to_dict() for menu in services.recipes.all_menus()])


@api.route('/menus/<ref>')
def menu_detail(ref):
    services = ledger_services()
    menu = services.recipes.find_menu(sanitize_identifier(ref))
    data = menu.to_dict()
    data['recipe'] = [line.to_dict() for line in services.recipes.recipe_lines(menu.id)]
    return _ok(data)


@api.route('/menus/<ref>', methods=['PUT'])
def menu_upsert(ref):
    services = ledger_services()
    patch = _patch(_payload(), MENU_PATCH_FIELDS)
    menu = services.recipes.upsert_menu(sanitize_identifier(ref), **patch)
    return _ok(menu.to_dict())


@api.route('/menus/<ref>/recipe', methods=['POST'])
def recipe_line_add(ref):
    services = ledger_services()
    data = _payload()
    line = services.recipes.add_recipe_line(
        sanitize_identifier(ref),
        sanitize_identifier(data.get('ingredient')),
        data.get('qty_per_serving'),
        unit=sanitize_text(data.get('unit'), max_length=MAX_LENGTHS['unit']),
        note=sanitize_text(data.get('note'), max_length=MAX_LENGTHS['note']),
    )
    return _ok(line.to_dict(), 201)


@api.route('/menus/<ref>/expand')
def menu_expand(ref):
    services = ledger_services()
    expansion = services.recipes.expand_sale(
        sanitize_identifier(ref),
        request.args.get('servings', 1),
    )
    return _ok(expansion.to_dict())


@api.route('/menus/<ref>/cost')
def menu_cost(ref):
    services = ledger_services()
    target_gp = optional_float(request.args.get('target_gp'), 'target_gp')
    if target_gp is None:
        target_gp = services.recorder.target_gp
    overhead = None
    if request.args.get('overhead') in ('1', 'true'):
        overhead = overhead_per_serving(
            services.store,
            period_days=request.args.get('overhead_days') or current_app.config['OVERHEAD_PERIOD_DAYS'],
            daily_serves=current_app.config['OVERHEAD_DAILY_SERVES'],
        )
    estimate = services.recipes.estimate_cost(
        sanitize_identifier(ref),
        target_gp=target_gp,
        method=request.args.get('method', 'average'),
        overhead_per_serving=overhead['overhead_per_serving'] if overhead else None,
    )
    if overhead:
        estimate['overhead'] = overhead
    return _ok(estimate)


# ============================================
# REPORTS
# ============================================

@api.route('/reports/sales')
def report_sales():
    services = ledger_services()
    report = sales_report(
        services.store,
        date_from=request.args.get('from'),
        date_to=request.args.get('to'),
        granularity=request.args.get('granularity', 'day'),
    )
    return _ok(report)


@api.route('/history')
def history_list():
    services = ledger_services()
    limit = request.args.get('limit')
    records = history(
        services.store,
        kind=request.args.get('type', 'sales'),
        date_from=request.args.get('from'),
        date_to=request.args.get('to'),
        platform=request.args.get('platform') or None,
        subject_id=request.args.get('subject_id') or None,
        ingredient_id=request.args.get('ingredient_id') or None,
        limit=int(as_float(limit, 'limit')) if limit else 200,
        newest_first=request.args.get('order', 'desc') != 'asc',
    )
    return _ok(records)


@api.route('/history.csv')
def history_export():
    services = ledger_services()
    filename, text = history_csv(
        services.store,
        kind=request.args.get('type', 'sales'),
        date_from=request.args.get('from'),
        date_to=request.args.get('to'),
        platform=request.args.get('platform') or None,
        subject_id=request.args.get('subject_id') or None,
        ingredient_id=request.args.get('ingredient_id') or None,
    )
    logger.info(f"API: Exported {filename}")
    return Response(
        text,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )
