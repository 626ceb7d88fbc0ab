"""
Test suite for expense CRUD.
Tests cover payload validation, business rules and the /api/expenses routes.
"""

import pytest
import os
import sys
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from errors import NotFound, ValidationError
from repositories.expenses import format_expense
from services.expenses import ExpenseService
from tests.conftest import expense_row, fixed_today

TODAY = date(2025, 1, 15)


def make_service(category_exists=True, name_exists=True):
    store = MagicMock()
    categories = MagicMock()
    expense_names = MagicMock()
    categories.exists.return_value = category_exists
    expense_names.exists.return_value = name_exists
    store.insert.return_value = 10
    store.find_by_id_with_details.return_value = format_expense(expense_row(10, '2025-01-14', '45.50'))
    service = ExpenseService(store, categories, expense_names, today=fixed_today(TODAY))
    return service, store


def valid_payload(**overrides):
    payload = {
        'amount': 45.5,
        'date': '2025-01-14',
        'category_id': 1,
        'expense_name_id': 2,
        'description': 'Lunch with the team',
    }
    payload.update(overrides)
    return payload


# ─────────────────────────────────────────────────────────────
#  1. CREATE
# ─────────────────────────────────────────────────────────────

class TestCreateExpense:
    """Test expense creation rules."""

    def test_create_valid_expense(self):
        service, store = make_service()

        expense = service.create_expense(valid_payload())

        data = store.insert.call_args[0][0]
        assert data == {
            'amount': Decimal('45.50'),
            'date': date(2025, 1, 14),
            'category_id': 1,
            'expense_name_id': 2,
            'description': 'Lunch with the team',
        }
        store.find_by_id_with_details.assert_called_once_with(10)
        assert expense['id'] == 10

    def test_amount_rounded_half_up(self):
        service, store = make_service()
        service.create_expense(valid_payload(amount='12.345'))
        assert store.insert.call_args[0][0]['amount'] == Decimal('12.35')

    def test_date_defaults_to_today(self):
        service, store = make_service()
        payload = valid_payload()
        del payload['date']

        service.create_expense(payload)

        assert store.insert.call_args[0][0]['date'] == TODAY

    def test_tomorrow_is_allowed(self):
        service, store = make_service()
        service.create_expense(valid_payload(date='2025-01-16'))
        store.insert.assert_called_once()

    def test_beyond_tomorrow_is_rejected(self):
        service, store = make_service()

        with pytest.raises(ValidationError) as exc_info:
            service.create_expense(valid_payload(date='2025-01-17'))

        assert exc_info.value.message == 'Expenses cannot be created for dates beyond tomorrow'
        store.insert.assert_not_called()

    def test_blank_description_becomes_null(self):
        service, store = make_service()
        service.create_expense(valid_payload(description='   '))
        assert store.insert.call_args[0][0]['description'] is None

    @pytest.mark.parametrize('amount', [0, -5, '100000000', 'abc', None])
    def test_invalid_amounts(self, amount):
        service, store = make_service()

        with pytest.raises(ValidationError) as exc_info:
            service.create_expense(valid_payload(amount=amount))

        assert exc_info.value.errors[0]['field'] == 'amount'
        store.insert.assert_not_called()

    def test_max_amount_is_allowed(self):
        service, store = make_service()
        service.create_expense(valid_payload(amount='99999999.99'))
        assert store.insert.call_args[0][0]['amount'] == Decimal('99999999.99')

    def test_invalid_date(self):
        service, store = make_service()

        with pytest.raises(ValidationError) as exc_info:
            service.create_expense(valid_payload(date='2025-02-30'))

        assert exc_info.value.errors[0]['field'] == 'date'

    def test_description_too_long(self):
        service, store = make_service()
        with pytest.raises(ValidationError):
            service.create_expense(valid_payload(description='x' * 501))

    def test_missing_required_fields(self):
        service, store = make_service()

        with pytest.raises(ValidationError) as exc_info:
            service.create_expense({'amount': 10})

        fields = {error['field'] for error in exc_info.value.errors}
        assert fields == {'category_id', 'expense_name_id'}

    def test_unknown_field_rejected(self):
        service, store = make_service()
        with pytest.raises(ValidationError) as exc_info:
            service.create_expense(valid_payload(note='not a column'))
        assert exc_info.value.errors[0]['field'] == 'note'

    def test_body_must_be_object(self):
        service, store = make_service()
        with pytest.raises(ValidationError) as exc_info:
            service.create_expense(None)
        assert exc_info.value.message == 'Request body must be a JSON object'

    @pytest.mark.parametrize('field', ['category_id', 'expense_name_id'])
    @pytest.mark.parametrize('value', [True, '2', 2.0])
    def test_ids_must_be_integers(self, field, value):
        """Booleans, numeric strings and floats are not record ids."""
        service, store = make_service()

        with pytest.raises(ValidationError) as exc_info:
            service.create_expense(valid_payload(**{field: value}))

        assert exc_info.value.errors[0]['field'] == field
        store.insert.assert_not_called()

    def test_missing_category(self):
        service, store = make_service(category_exists=False)
        with pytest.raises(ValidationError) as exc_info:
            service.create_expense(valid_payload())
        assert exc_info.value.message == 'Selected category does not exist'

    def test_missing_expense_name(self):
        service, store = make_service(name_exists=False)
        with pytest.raises(ValidationError) as exc_info:
            service.create_expense(valid_payload())
        assert exc_info.value.message == 'Selected expense name does not exist'


# ─────────────────────────────────────────────────────────────
#  2. UPDATE AND DELETE
# ─────────────────────────────────────────────────────────────

class TestUpdateExpense:
    """Test partial updates."""

    def test_partial_update(self):
        service, store = make_service()

        service.update_expense(10, {'amount': 99.999})

        store.update.assert_called_once_with(10, {'amount': Decimal('100.00')})

    def test_description_can_be_cleared(self):
        service, store = make_service()
        service.update_expense(10, {'description': None})
        store.update.assert_called_once_with(10, {'description': None})

    def test_null_amount_is_ignored(self):
        service, store = make_service()
        with pytest.raises(ValidationError) as exc_info:
            service.update_expense(10, {'amount': None})
        assert exc_info.value.message == 'No fields to update'

    def test_empty_update(self):
        service, store = make_service()
        with pytest.raises(ValidationError):
            service.update_expense(10, {})
        store.update.assert_not_called()

    def test_update_missing_expense(self):
        service, store = make_service()
        store.find_by_id_with_details.return_value = None
        with pytest.raises(NotFound) as exc_info:
            service.update_expense(99, {'amount': 5})
        assert exc_info.value.message == 'Expense not found'

    def test_update_checks_new_category(self):
        service, store = make_service(category_exists=False)
        with pytest.raises(ValidationError):
            service.update_expense(10, {'category_id': 7})
        store.update.assert_not_called()


class TestDeleteExpense:
    """Test single and bulk deletes."""

    def test_delete(self):
        service, store = make_service()
        store.delete.return_value = True
        assert service.delete_expense(10) is True
        store.delete.assert_called_once_with(10)

    def test_delete_missing(self):
        service, store = make_service()
        store.find_by_id_with_details.return_value = None
        with pytest.raises(NotFound):
            service.delete_expense(10)
        store.delete.assert_not_called()

    def test_bulk_delete_reports_each_id(self):
        service, store = make_service()
        found = format_expense(expense_row(1, '2025-01-14', 10))
        store.find_by_id_with_details.side_effect = lambda expense_id: found if expense_id == 1 else None
        store.delete.return_value = True

        results = service.bulk_delete_expenses({'ids': [1, 2]})

        assert results == {'deleted': [1], 'not_found': [2], 'errors': []}

    @pytest.mark.parametrize('payload', [
        {'ids': []}, {'ids': [0]}, {'ids': [True]}, {'ids': ['3']}, {'ids': list(range(1, 102))}, {},
    ])
    def test_bulk_delete_validation(self, payload):
        service, store = make_service()
        with pytest.raises(ValidationError):
            service.bulk_delete_expenses(payload)


class TestExpensesByRange:
    """Test paginated listing."""

    def test_pagination_and_summary(self):
        service, store = make_service()
        store.find_in_range.return_value = [{'id': i} for i in range(20)]
        store.aggregate_in_range.return_value = {
            'count': 45, 'sum': Decimal('1000.005'), 'avg': Decimal('22.2223'),
            'min': Decimal('1'), 'max': Decimal('99'), 'distinct_categories': 3, 'distinct_names': 5,
        }

        data = service.expenses_by_range(date(2025, 1, 1), date(2025, 1, 31), page=2, limit=20)

        store.find_in_range.assert_called_once_with(
            date(2025, 1, 1), date(2025, 1, 31), category_id=None, limit=20, offset=20)
        assert data['pagination'] == {'page': 2, 'limit': 20, 'total': 45, 'total_pages': 3, 'has_more': True}
        assert data['summary']['total_amount'] == Decimal('1000.01')
        assert data['summary']['average_amount'] == Decimal('22.22')
        assert data['summary']['date_range'] == {'start_date': '2025-01-01', 'end_date': '2025-01-31'}


# ─────────────────────────────────────────────────────────────
#  3. ROUTES
# ─────────────────────────────────────────────────────────────

class TestExpenseRoutes:
    """Test /api/expenses CRUD endpoints against a mocked database."""

    def test_create_expense(self, client, mock_db):
        conn, cursor = mock_db
        cursor.lastrowid = 10
        cursor.fetchone.side_effect = [
            {'count': 1},  # category exists
            {'count': 1},  # expense name exists
            expense_row(10, '2025-01-14', '45.50'),
        ]

        response = client.post('/api/expenses', json={
            'amount': 45.5, 'date': '2025-01-14', 'category_id': 1, 'expense_name_id': 1,
        })

        assert response.status_code == 201
        body = response.get_json()
        assert body['success'] is True
        assert body['statusCode'] == 201
        assert body['message'] == 'Expense created successfully'
        assert body['data']['amount'] == 45.5
        assert body['data']['date'] == '2025-01-14'
        conn.commit.assert_called_once()

    def test_create_invalid_payload(self, client, mock_db):
        conn, cursor = mock_db

        response = client.post('/api/expenses', json={'amount': -1, 'category_id': 1, 'expense_name_id': 1})

        assert response.status_code == 400
        body = response.get_json()
        assert body['success'] is False
        assert body['errors'][0]['field'] == 'amount'
        cursor.execute.assert_not_called()

    def test_create_without_json_body(self, client, mock_db):
        response = client.post('/api/expenses', data='amount=5')
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Request body must be a JSON object'

    def test_get_expense(self, client, mock_db):
        conn, cursor = mock_db
        cursor.fetchone.return_value = expense_row(3, '2025-01-10', '12.00')

        response = client.get('/api/expenses/3')

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['category']['name'] == 'Comida'
        assert data['expense_name']['name'] == 'Almuerzo'

    def test_get_missing_expense(self, client, mock_db):
        conn, cursor = mock_db
        cursor.fetchone.return_value = None

        response = client.get('/api/expenses/999')

        assert response.status_code == 404
        assert response.get_json()['message'] == 'Expense not found'

    def test_list_requires_range(self, client, mock_db):
        response = client.get('/api/expenses')
        assert response.status_code == 400
        assert response.get_json()['errors'][0]['field'] == 'start_date'

    def test_list_by_range(self, client, mock_db):
        conn, cursor = mock_db
        cursor.fetchall.return_value = [expense_row(1, '2025-01-14', '10.00')]
        cursor.fetchone.return_value = {
            'count': 1, 'sum': Decimal('10.00'), 'avg': Decimal('10.00'), 'min': Decimal('10.00'),
            'max': Decimal('10.00'), 'distinct_categories': 1, 'distinct_names': 1,
        }

        response = client.get('/api/expenses?start_date=2025-01-01&end_date=2025-01-31&limit=10')

        assert response.status_code == 200
        data = response.get_json()['data']
        assert len(data['expenses']) == 1
        assert data['pagination']['total'] == 1
        assert data['pagination']['has_more'] is False
        assert data['summary']['total_amount'] == 10.0

    def test_update_expense(self, client, mock_db):
        conn, cursor = mock_db
        cursor.fetchone.side_effect = [
            expense_row(4, '2025-01-14', '10.00'),
            expense_row(4, '2025-01-14', '10.00', description='Updated'),
        ]

        response = client.put('/api/expenses/4', json={'description': 'Updated'})

        assert response.status_code == 200
        assert response.get_json()['data']['description'] == 'Updated'
        update_query = cursor.execute.call_args_list[1][0][0]
        assert update_query.startswith('UPDATE expenses SET description = %s')

    def test_delete_expense(self, client, mock_db):
        conn, cursor = mock_db
        cursor.fetchone.return_value = expense_row(4, '2025-01-14', '10.00')

        response = client.delete('/api/expenses/4')

        assert response.status_code == 200
        body = response.get_json()
        assert body['data'] is None
        assert body['message'] == 'Expense deleted successfully'

    def test_bulk_delete(self, client, mock_db):
        conn, cursor = mock_db
        cursor.fetchone.side_effect = [expense_row(1, '2025-01-14', '10.00'), None]

        response = client.delete('/api/expenses/bulk', json={'ids': [1, 2]})

        assert response.status_code == 200
        body = response.get_json()
        assert body['data'] == {'deleted': [1], 'not_found': [2], 'errors': []}
        assert body['message'] == 'Deleted 1 expense(s)'
