"""
Expense reports: weekly view, range statistics, monthly report and the
dashboard summary.

Reports are read-only compositions of ExpenseStore calls and are recomputed
on every request. Amounts are summed at full precision and rounded once,
half-up to cents, when the report is assembled.

The overall aggregate and the per-category breakdown come from two separate
queries with no shared snapshot, so a write landing between them can make
them disagree.
"""

import logging
import time
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP

from calendar_utils import format_date, month_bounds, parse_date, parse_month, shift_weeks, week_bounds
from errors import ReportTimeout

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def money(value):
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class Deadline:
    """Time budget shared by every query of one report."""

    def __init__(self, seconds=None, clock=time.monotonic):
        self.clock = clock
        self.expires_at = None if seconds is None else clock() + seconds

    def check(self, step):
        if self.expires_at is not None and self.clock() > self.expires_at:
            logger.warning("Report deadline exceeded after %s", step)
            raise ReportTimeout(f"Report timed out while reading {step}")


class ReportService:

    def __init__(self, store, today=date.today, timeout=None, recent_days=30, recent_limit=5):
        self.store = store
        self.today = today
        self.timeout = timeout
        self.recent_days = recent_days
        self.recent_limit = recent_limit

    def _deadline(self, deadline):
        return deadline if deadline is not None else Deadline(self.timeout)

    def weekly_report(self, anchor=None, deadline=None):
        """Expenses of the Monday-Sunday week containing `anchor`, bucketed per day."""
        deadline = self._deadline(deadline)
        bounds = week_bounds(anchor if anchor is not None else self.today())

        expenses = self.store.find_in_range(bounds.start, bounds.end)
        deadline.check('weekly expenses')

        per_day = {day: [] for day in bounds.days}
        for expense in expenses:
            bucket = per_day.get(format_date(expense['date']))
            if bucket is not None:
                bucket.append(expense)

        week_total = sum((expense['amount'] for expense in expenses), Decimal('0'))

        return {
            'week_start': format_date(bounds.start),
            'week_end': format_date(bounds.end),
            'days': bounds.days,
            'per_day': per_day,
            'week_total': money(week_total),
            'total_expenses': len(expenses),
        }

    def weekly_report_by_offset(self, offset=0, deadline=None):
        anchor = shift_weeks(self.today(), offset)
        return self.weekly_report(anchor, deadline=deadline)

    def range_statistics(self, start, end, category_id=None, deadline=None):
        deadline = self._deadline(deadline)
        start, end = parse_date(start), parse_date(end)

        stats = self.store.aggregate_in_range(start, end, category_id=category_id)
        deadline.check('range aggregate')
        breakdown = self.store.aggregate_by_category(start, end)
        deadline.check('category breakdown')

        return {
            'date_range': {'start_date': format_date(start), 'end_date': format_date(end)},
            'category_id': category_id,
            'total_expenses': stats['count'],
            'total_amount': money(stats['sum']),
            'average_amount': money(stats['avg']),
            'min_amount': money(stats['min']),
            'max_amount': money(stats['max']),
            'categories_used': stats['distinct_categories'],
            'expense_names_used': stats['distinct_names'],
            'category_breakdown': [
                {
                    'category': row['category'],
                    'expense_count': row['count'],
                    'total_amount': money(row['sum']),
                    'average_amount': money(row['avg']),
                }
                for row in breakdown
            ],
        }

    def monthly_report(self, month=None, deadline=None):
        """Range statistics for a calendar month.

        `month` may be a YYYY-MM label, any date inside the month, or None
        for the current month.
        """
        if month is None:
            anchor = self.today()
        elif isinstance(month, str):
            anchor = parse_month(month)
        else:
            anchor = parse_date(month)

        bounds = month_bounds(anchor)
        report = self.range_statistics(bounds.start, bounds.end, deadline=deadline)
        report['month'] = f"{anchor.year:04d}-{anchor.month:02d}"
        return report

    def recent_expenses(self, limit=None, deadline=None):
        deadline = self._deadline(deadline)
        end = self.today()
        start = end - timedelta(days=self.recent_days)
        expenses = self.store.find_in_range(start, end, limit=limit or self.recent_limit)
        deadline.check('recent expenses')
        return expenses

    def dashboard_summary(self, deadline=None):
        """Current week, current month and recent activity in one read.

        Any failing sub-report fails the whole summary.
        """
        deadline = self._deadline(deadline)
        today = self.today()

        week = self.weekly_report(today, deadline=deadline)
        month = self.monthly_report(today, deadline=deadline)
        recent = self.recent_expenses(self.recent_limit, deadline=deadline)

        return {
            'week': week,
            'month': month,
            'recent': recent,
            'generated_at': datetime.now(timezone.utc).isoformat(),
        }
