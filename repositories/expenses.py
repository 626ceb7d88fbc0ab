"""
Expense store: bounded reads and aggregates over the expenses table.

Callers hand in ranges that already went through validation.validate_range;
a reversed range here is a programming error and raises InvalidRange.
All ranges are inclusive on both ends.
"""

from decimal import Decimal

from calendar_utils import parse_date
from errors import AggregationFailure, InvalidDateFormat, InvalidRange
from repositories.base import BaseRepository

ZERO = Decimal('0')

EXPENSE_SELECT = """
    SELECT e.id, e.amount, e.date, e.description, e.category_id, e.expense_name_id,
           e.created_at, e.updated_at,
           c.name AS category_name, c.color AS category_color,
           n.name AS expense_name
    FROM expenses e
    JOIN categories c ON e.category_id = c.id
    JOIN expense_names n ON e.expense_name_id = n.id
"""


def to_decimal(value):
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_expense(row):
    if not row:
        return None
    return {
        'id': row['id'],
        'amount': to_decimal(row['amount']),
        'date': parse_date(row['date']),
        'description': row['description'],
        'category_id': row['category_id'],
        'expense_name_id': row['expense_name_id'],
        'created_at': row['created_at'],
        'updated_at': row['updated_at'],
        'category': {
            'id': row['category_id'],
            'name': row['category_name'],
            'color': row['category_color'],
        },
        'expense_name': {
            'id': row['expense_name_id'],
            'name': row['expense_name'],
        },
    }


def _checked_range(start, end):
    try:
        start, end = parse_date(start), parse_date(end)
    except InvalidDateFormat:
        raise InvalidRange(f"Unparseable range {start!r}..{end!r}") from None
    if start > end:
        raise InvalidRange(f"Reversed range {start}..{end}")
    return start, end


class ExpenseStore(BaseRepository):
    table = 'expenses'
    columns = ('amount', 'date', 'category_id', 'expense_name_id', 'description')
    read_error = AggregationFailure

    def __init__(self, pool, timeout=None):
        super().__init__(pool)
        self.max_execution_ms = int(timeout * 1000) if timeout else None

    def _bounded(self, query):
        """Cap a report SELECT on the server with the MAX_EXECUTION_TIME hint."""
        if not self.max_execution_ms:
            return query
        return query.replace('SELECT', f"SELECT /*+ MAX_EXECUTION_TIME({self.max_execution_ms}) */", 1)

    def find_by_id_with_details(self, expense_id):
        row = self.fetch_one(EXPENSE_SELECT + " WHERE e.id = %s", (expense_id,))
        return format_expense(row)

    def find_in_range(self, start, end, category_id=None, limit=None, offset=None):
        """Expenses dated within [start, end], newest first."""
        start, end = _checked_range(start, end)
        query = EXPENSE_SELECT + " WHERE e.date >= %s AND e.date <= %s"
        params = [start, end]

        if category_id:
            query += " AND e.category_id = %s"
            params.append(category_id)

        query += " ORDER BY e.date DESC, e.created_at DESC, e.id DESC"

        if limit:
            query += " LIMIT %s OFFSET %s"
            params.extend([limit, offset or 0])

        return [format_expense(row) for row in self.fetch_all(self._bounded(query), tuple(params))]

    def aggregate_in_range(self, start, end, category_id=None):
        start, end = _checked_range(start, end)
        query = """
            SELECT COUNT(*) AS count,
                   COALESCE(SUM(amount), 0) AS sum,
                   COALESCE(AVG(amount), 0) AS avg,
                   COALESCE(MIN(amount), 0) AS min,
                   COALESCE(MAX(amount), 0) AS max,
                   COUNT(DISTINCT category_id) AS distinct_categories,
                   COUNT(DISTINCT expense_name_id) AS distinct_names
            FROM expenses
            WHERE date >= %s AND date <= %s
        """
        params = [start, end]
        if category_id:
            query += " AND category_id = %s"
            params.append(category_id)

        row = self.fetch_one(self._bounded(query), tuple(params)) or {}
        count = int(row.get('count') or 0)
        if count == 0:
            return {
                'count': 0, 'sum': ZERO, 'avg': ZERO, 'min': ZERO, 'max': ZERO,
                'distinct_categories': 0, 'distinct_names': 0,
            }
        return {
            'count': count,
            'sum': to_decimal(row.get('sum')),
            'avg': to_decimal(row.get('avg')),
            'min': to_decimal(row.get('min')),
            'max': to_decimal(row.get('max')),
            'distinct_categories': int(row.get('distinct_categories') or 0),
            'distinct_names': int(row.get('distinct_names') or 0),
        }

    def aggregate_by_category(self, start, end):
        """Totals per category for every known category, idle ones included.

        Categories and per-category totals are read separately and merged,
        so a category without expenses in range gets a zero row.
        """
        start, end = _checked_range(start, end)
        categories = self.fetch_all(self._bounded("SELECT id, name, color FROM categories"))
        totals = self.fetch_all(
            self._bounded("""
            SELECT category_id, COUNT(*) AS count, SUM(amount) AS sum, AVG(amount) AS avg
            FROM expenses
            WHERE date >= %s AND date <= %s
            GROUP BY category_id
            """),
            (start, end),
        )
        by_category = {row['category_id']: row for row in totals}

        breakdown = []
        for category in categories:
            found = by_category.get(category['id'], {})
            breakdown.append({
                'category': {
                    'id': category['id'],
                    'name': category['name'],
                    'color': category['color'],
                },
                'count': int(found.get('count') or 0),
                'sum': to_decimal(found.get('sum')),
                'avg': to_decimal(found.get('avg')),
            })

        breakdown.sort(key=lambda item: (-item['sum'], item['category']['name']))
        return breakdown
