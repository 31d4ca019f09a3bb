"""
Input Validation Helpers

Coercion of caller-supplied values into the types the ledger works with.
Every failure is a ValidationError raised before anything is written.
"""

import math
from datetime import date, datetime

from constants import MAX_LENGTHS
from .errors import ValidationError


def as_float(value, field):
    """Parse a number, rejecting blanks and non-numeric strings."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ValidationError(f"{field} must be a finite number, got {value!r}")
    return number


def require_positive(value, field):
    number = as_float(value, field)
    if number <= 0:
        raise ValidationError(f"{field} must be positive, got {number:g}")
    return number


def optional_float(value, field):
    if value is None or value == '':
        return None
    return as_float(value, field)


def clean_identifier(value, kind):
    """Stripped lookup key; required, and no longer than a name may be."""
    key = str(value).strip() if value is not None else ''
    if not key:
        raise ValidationError(f"{kind} id or name is required")
    if len(key) > MAX_LENGTHS['name']:
        raise ValidationError(f"{kind} id or name is too long: {key[:20]}...")
    return key


def check_new_id(key, kind):
    """A key about to become a primary key must fit the id column."""
    if len(key) > MAX_LENGTHS['identifier']:
        raise ValidationError(
            f"{kind} id is too long ({len(key)} > {MAX_LENGTHS['identifier']}): {key[:20]}...; "
            f"create it with a shorter id and set name"
        )
    return key


def parse_date(value, field='date'):
    """Accept a date, a datetime or an ISO 'YYYY-MM-DD' string; None passes through."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD), got {value!r}") from None
