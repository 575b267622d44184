"""
utils/validators.py — Input coercion helpers for form submissions.

Each helper returns the cleaned value, or None when the input is unusable.
Callers treat None as "reject the submission" and leave state unchanged.
"""

import math
from datetime import date

from models import UNITS


def clean_text(value):
    """Strip a free-text field; None becomes an empty string."""
    if value is None:
        return ''
    return str(value).strip()


def clean_date(value):
    """Return value as an ISO date string (YYYY-MM-DD), or None."""
    if isinstance(value, date):
        return value.isoformat()
    text = clean_text(value)
    if not text:
        return None
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        return None


def clean_int(value):
    """Coerce to int. Accepts numeric strings and integral floats."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not number.is_integer():
        return None
    return int(number)


def clean_amount(value):
    """Coerce a harvest amount; must be a number greater than zero."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
        if number.is_integer():
            number = int(number)
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def clean_unit(value):
    """Return value if it is a known unit, else None."""
    unit = clean_text(value)
    return unit if unit in UNITS else None
