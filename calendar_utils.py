"""
Calendar helpers used by the reports.

Weeks run Monday to Sunday. Dates are serialized from their own calendar
fields, never through a timezone conversion.
"""

import calendar
import re
from collections import namedtuple
from datetime import date, datetime, timedelta

from errors import InvalidDateFormat

DATE_RE = re.compile(r'^[0-9]{4}-[0-9]{2}-[0-9]{2}$')
MONTH_RE = re.compile(r'^[0-9]{4}-[0-9]{2}$')

WeekBounds = namedtuple('WeekBounds', ['start', 'end', 'days'])
MonthBounds = namedtuple('MonthBounds', ['start', 'end'])


def format_date(value):
    if isinstance(value, datetime):
        value = value.date()
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_date(value):
    """Parse a strict YYYY-MM-DD string. Dates pass through unchanged."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise InvalidDateFormat()
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise InvalidDateFormat() from None


def parse_month(value):
    """Parse YYYY-MM into the first day of that month."""
    if not isinstance(value, str) or not MONTH_RE.match(value):
        raise InvalidDateFormat('Invalid month format. Use YYYY-MM')
    year, month = (int(part) for part in value.split('-'))
    if not 1 <= month <= 12 or year < 1:
        raise InvalidDateFormat('Invalid month format. Use YYYY-MM')
    return date(year, month, 1)


def week_bounds(anchor):
    anchor = parse_date(anchor)
    start = anchor - timedelta(days=anchor.weekday())
    end = start + timedelta(days=6)
    days = [format_date(start + timedelta(days=i)) for i in range(7)]
    return WeekBounds(start, end, days)


def month_bounds(anchor):
    anchor = parse_date(anchor)
    last_day = calendar.monthrange(anchor.year, anchor.month)[1]
    return MonthBounds(anchor.replace(day=1), anchor.replace(day=last_day))


def shift_weeks(anchor, offset):
    return parse_date(anchor) + timedelta(weeks=offset)
