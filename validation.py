"""
Request validation that runs before any query is executed.
"""

from datetime import date

from calendar_utils import parse_date
from errors import RangeInFuture, RangeReversed, RangeTooLarge, ValidationError

DEFAULT_MAX_DAYS = 365


def validate_range(start, end, max_days=DEFAULT_MAX_DAYS, today=None):
    """Check a [start, end] range and return it as a pair of dates.

    Raises InvalidDateFormat, RangeReversed, RangeTooLarge or RangeInFuture,
    checked in that order.
    """
    start_date = parse_date(start)
    end_date = parse_date(end)

    if start_date > end_date:
        raise RangeReversed()

    if (end_date - start_date).days > max_days:
        raise RangeTooLarge(f"Date range cannot exceed {max_days} days")

    today = today or date.today()
    if start_date > today:
        raise RangeInFuture()

    return start_date, end_date


def parse_int_arg(args, name, default=None, min_value=None, max_value=None):
    """Read an optional integer query parameter with bounds."""
    raw = args.get(name)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(errors=[{'field': name, 'message': f"{name} must be an integer"}]) from None

    if min_value is not None and value < min_value:
        raise ValidationError(errors=[{'field': name, 'message': f"{name} must be at least {min_value}"}])
    if max_value is not None and value > max_value:
        raise ValidationError(errors=[{'field': name, 'message': f"{name} must be at most {max_value}"}])
    return value


def require_arg(args, name):
    value = (args.get(name) or '').strip()
    if not value:
        raise ValidationError(errors=[{'field': name, 'message': f"{name} is required"}])
    return value
