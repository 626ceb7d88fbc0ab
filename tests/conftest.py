"""
Shared pytest fixtures for GastOn API tests.
"""

import pytest
import os
import sys
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

# Ensure the project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from calendar_utils import parse_date  # noqa: E402


class TestConfig:
    """Test configuration that bypasses MySQL."""
    TESTING = True
    REPORT_MAX_RANGE_DAYS = 365
    REPORT_TIMEOUT_SECONDS = None
    RECENT_EXPENSES_DAYS = 30
    DASHBOARD_RECENT_LIMIT = 5
    LOG_LEVEL = 'WARNING'

    @staticmethod
    def init_db(app):
        """Mock DB initialization - no real MySQL needed."""
        app.db_pool = MagicMock()


def make_mock_connection():
    """Create a mock MySQL connection with cursor context manager."""
    conn = MagicMock()
    cursor = MagicMock()
    cursor.__enter__ = MagicMock(return_value=cursor)
    cursor.__exit__ = MagicMock(return_value=False)
    cursor.rowcount = 1
    cursor.lastrowid = 1
    conn.cursor.return_value = cursor
    return conn, cursor


def expense_row(expense_id, day, amount, category_id=1, category_name='Comida',
                expense_name_id=1, expense_name='Almuerzo', description=None):
    """A joined expense row as the MySQL cursor returns it."""
    return {
        'id': expense_id,
        'amount': Decimal(str(amount)),
        'date': parse_date(day),
        'description': description,
        'category_id': category_id,
        'expense_name_id': expense_name_id,
        'created_at': datetime(2025, 1, 1, 12, 0, expense_id % 60),
        'updated_at': datetime(2025, 1, 1, 12, 0, expense_id % 60),
        'category_name': category_name,
        'category_color': '#EF4444',
        'expense_name': expense_name,
    }


def category_row(category_id, name, color='#6B7280'):
    return {
        'id': category_id,
        'name': name,
        'color': color,
        'created_at': datetime(2025, 1, 1),
        'updated_at': datetime(2025, 1, 1),
    }


class FakeExpenseStore:
    """In-memory stand-in for ExpenseStore with the same contract."""

    def __init__(self, expenses=(), categories=()):
        self.expenses = [dict(e, date=parse_date(e['date']), amount=Decimal(str(e['amount'])))
                         for e in expenses]
        self.categories = list(categories)
        self.calls = []

    def _in_range(self, start, end, category_id=None):
        start, end = parse_date(start), parse_date(end)
        return [
            e for e in self.expenses
            if start <= e['date'] <= end and (not category_id or e['category_id'] == category_id)
        ]

    def find_in_range(self, start, end, category_id=None, limit=None, offset=None):
        self.calls.append(('find_in_range', start, end))
        rows = sorted(self._in_range(start, end, category_id),
                      key=lambda e: (e['date'], e['id']), reverse=True)
        if limit:
            rows = rows[offset or 0:(offset or 0) + limit]
        return rows

    def aggregate_in_range(self, start, end, category_id=None):
        self.calls.append(('aggregate_in_range', start, end))
        rows = self._in_range(start, end, category_id)
        if not rows:
            zero = Decimal('0')
            return {'count': 0, 'sum': zero, 'avg': zero, 'min': zero, 'max': zero,
                    'distinct_categories': 0, 'distinct_names': 0}
        amounts = [e['amount'] for e in rows]
        return {
            'count': len(rows),
            'sum': sum(amounts),
            'avg': sum(amounts) / len(amounts),
            'min': min(amounts),
            'max': max(amounts),
            'distinct_categories': len({e['category_id'] for e in rows}),
            'distinct_names': len({e.get('expense_name_id') for e in rows}),
        }

    def aggregate_by_category(self, start, end):
        self.calls.append(('aggregate_by_category', start, end))
        rows = self._in_range(start, end)
        breakdown = []
        for category in self.categories:
            amounts = [e['amount'] for e in rows if e['category_id'] == category['id']]
            total = sum(amounts, Decimal('0'))
            breakdown.append({
                'category': category,
                'count': len(amounts),
                'sum': total,
                'avg': total / len(amounts) if amounts else Decimal('0'),
            })
        breakdown.sort(key=lambda item: (-item['sum'], item['category']['name']))
        return breakdown


def fixed_today(value):
    """A `today` callable pinned to a date."""
    day = parse_date(value) if not isinstance(value, date) else value
    return lambda: day


@pytest.fixture
def app():
    """Create application for testing."""
    from app import create_app
    application = create_app(config_class=TestConfig)
    yield application


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def mock_db(app):
    """Provide mock database connection and cursor."""
    conn, cursor = make_mock_connection()
    app.db_pool.get_connection.return_value = conn
    return conn, cursor
