"""
Reports

Read-only summaries over the ledger: a bucketed sales report, the sales,
purchase and expense history used for table views and CSV exports, and the
overhead spread used for overhead-inclusive menu costs. Nothing here takes
the store lock.
"""

import csv
import io
from collections import defaultdict
from datetime import timedelta

from constants import (
    OVERHEAD_DAILY_SERVES,
    OVERHEAD_PERIOD_DAYS,
    SALE_KIND_MENU,
    VALID_GRANULARITIES,
    VALID_HISTORY_TYPES,
)
from models import utc_now
from .errors import ValidationError
from .validation import as_float, parse_date


def bucket_key(day, granularity):
    if granularity == 'month':
        return f"{day:%Y-%m}"
    return day.isoformat()


def _in_range(day, date_from, date_to):
    if date_from and day < date_from:
        return False
    if date_to and day > date_to:
        return False
    return True


def _margin(profit, revenue):
    return profit / revenue * 100 if revenue > 0 else 0.0


def sales_report(store, date_from=None, date_to=None, granularity='day'):
    """
    Sales aggregated into day or month buckets.

    Each bucket carries qty, revenue, cogs, profit, the waste cost written off
    in the same period, and a per-platform split of revenue and profit.
    """
    if granularity not in VALID_GRANULARITIES:
        raise ValidationError(f"granularity must be one of {sorted(VALID_GRANULARITIES)}")
    date_from = parse_date(date_from, 'date_from')
    date_to = parse_date(date_to, 'date_to')

    buckets = {}

    def bucket(key):
        if key not in buckets:
            buckets[key] = {
                'bucket': key,
                'qty': 0.0,
                'revenue': 0.0,
                'cogs': 0.0,
                'profit': 0.0,
                'waste': 0.0,
                'by_platform': defaultdict(lambda: {'qty': 0.0, 'revenue': 0.0, 'profit': 0.0}),
            }
        return buckets[key]

    for sale in store.read_all('sales'):
        if not _in_range(sale.date, date_from, date_to):
            continue
        row = bucket(bucket_key(sale.date, granularity))
        row['qty'] += sale.qty
        row['revenue'] += sale.revenue
        row['cogs'] += sale.cogs
        row['profit'] += sale.profit
        platform = row['by_platform'][sale.platform]
        platform['qty'] += sale.qty
        platform['revenue'] += sale.revenue
        platform['profit'] += sale.profit

    for waste in store.read_all('waste'):
        if _in_range(waste.date, date_from, date_to):
            bucket(bucket_key(waste.date, granularity))['waste'] += waste.cost

    rows = []
    for key in sorted(buckets):
        row = buckets[key]
        row['by_platform'] = dict(row['by_platform'])
        row['profit_after_waste'] = row['profit'] - row['waste']
        row['gm_pct'] = _margin(row['profit'], row['revenue'])
        rows.append(row)

    totals = {name: sum(r[name] for r in rows) for name in ('qty', 'revenue', 'cogs', 'profit', 'waste')}
    totals['profit_after_waste'] = totals['profit'] - totals['waste']
    totals['gm_pct'] = _margin(totals['profit'], totals['revenue'])

    return {
        'granularity': granularity,
        'from': date_from.isoformat() if date_from else None,
        'to': date_to.isoformat() if date_to else None,
        'totals': totals,
        'rows': rows,
    }


def history(store, kind='sales', date_from=None, date_to=None, platform=None,
            subject_id=None, ingredient_id=None, limit=200, newest_first=True):
    """Sales, purchase or expense records in a date range, newest first by default."""
    if kind not in VALID_HISTORY_TYPES:
        raise ValidationError(f"Unknown history type: {kind}")
    date_from = parse_date(date_from, 'date_from')
    date_to = parse_date(date_to, 'date_to')

    if kind == 'sales':
        records = [
            s.to_dict() for s in store.read_all('sales')
            if _in_range(s.date, date_from, date_to)
            and (not platform or s.platform == platform)
            and (not subject_id or s.subject_id == subject_id)
        ]
    elif kind == 'purchases':
        records = [
            dict(lot.to_dict(), date=lot.purchase_date.isoformat()) for lot in store.read_all('lots')
            if _in_range(lot.purchase_date, date_from, date_to)
            and (not ingredient_id or lot.ingredient_id == ingredient_id)
        ]
    else:
        records = [
            e.to_dict() for e in store.read_all('expenses')
            if _in_range(e.date, date_from, date_to)
        ]

    # Stable sort keeps insertion order within a day
    records.sort(key=lambda r: r['date'], reverse=newest_first)
    return records[:limit]


# Cap on rows in one export
EXPORT_LIMIT = 5000


def history_csv(store, kind='sales', date_from=None, date_to=None, platform=None,
                subject_id=None, ingredient_id=None):
    """
    History records as CSV, oldest first.

    Returns ``(filename, text)``. Columns follow the record fields; the text
    is empty when nothing matches.
    """
    records = history(
        store, kind, date_from, date_to,
        platform=platform, subject_id=subject_id, ingredient_id=ingredient_id,
        limit=EXPORT_LIMIT, newest_first=False,
    )
    start = parse_date(date_from, 'date_from')
    end = parse_date(date_to, 'date_to')
    filename = f"{kind}_{start or ''}_{end or ''}.csv"

    output = io.StringIO()
    if records:
        writer = csv.DictWriter(output, fieldnames=list(records[0]), lineterminator='\n')
        writer.writeheader()
        writer.writerows(records)
    return filename, output.getvalue()


def overhead_per_serving(store, period_days=OVERHEAD_PERIOD_DAYS, as_of=None,
                         daily_serves=OVERHEAD_DAILY_SERVES):
    """
    Expenses of the ``period_days`` days ending ``as_of`` spread over the menu
    servings sold in the same window.

    When no menu serving was sold in the window, ``daily_serves`` per day
    stands in and ``servings_estimated`` is set.
    """
    days = as_float(period_days, 'period_days')
    if days < 1 or days != int(days):
        raise ValidationError(f"period_days must be a whole number of days, got {period_days!r}")
    days = int(days)
    as_of = parse_date(as_of, 'as_of') or utc_now().date()
    start = as_of - timedelta(days=days - 1)

    total = sum(e.amount for e in store.read_all('expenses') if _in_range(e.date, start, as_of))
    servings = sum(
        s.qty for s in store.read_all('sales')
        if s.kind == SALE_KIND_MENU and _in_range(s.date, start, as_of)
    )
    estimated = servings <= 0
    if estimated:
        servings = as_float(daily_serves, 'daily_serves') * days

    return {
        'from': start.isoformat(),
        'to': as_of.isoformat(),
        'total_expenses': total,
        'servings': servings,
        'servings_estimated': estimated,
        'overhead_per_serving': total / servings if servings > 0 else 0.0,
    }
