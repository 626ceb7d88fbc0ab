import logging
import math
from datetime import date, timedelta
from decimal import Decimal

from calendar_utils import format_date
from errors import ApiError, NotFound, ValidationError
from schemas import BulkDelete, ExpenseCreate, ExpenseUpdate, changed_fields, load_payload
from services.reporting import money

logger = logging.getLogger(__name__)

LARGE_EXPENSE = Decimal('50000')


class ExpenseService:

    def __init__(self, store, categories, expense_names, today=date.today):
        self.store = store
        self.categories = categories
        self.expense_names = expense_names
        self.today = today

    def get_expense(self, expense_id):
        expense = self.store.find_by_id_with_details(expense_id)
        if not expense:
            raise NotFound('Expense')
        return expense

    def create_expense(self, payload):
        data = load_payload(ExpenseCreate, payload).model_dump()
        if data['date'] is None:
            data['date'] = self.today()
        self._check_rules(data)

        if data['amount'] > LARGE_EXPENSE:
            logger.info("Large expense created: %s on %s", data['amount'], data['date'])

        new_id = self.store.insert(data)
        return self.store.find_by_id_with_details(new_id)

    def update_expense(self, expense_id, payload):
        self.get_expense(expense_id)
        data = changed_fields(load_payload(ExpenseUpdate, payload), nullable=('description',))
        if not data:
            raise ValidationError('No fields to update')
        self._check_rules(data)
        self.store.update(expense_id, data)
        return self.store.find_by_id_with_details(expense_id)

    def delete_expense(self, expense_id):
        self.get_expense(expense_id)
        if not self.store.delete(expense_id):
            raise NotFound('Expense')
        return True

    def bulk_delete_expenses(self, payload):
        ids = load_payload(BulkDelete, payload).ids
        results = {'deleted': [], 'not_found': [], 'errors': []}
        for expense_id in ids:
            try:
                self.delete_expense(expense_id)
                results['deleted'].append(expense_id)
            except NotFound:
                results['not_found'].append(expense_id)
            except ApiError as exc:
                results['errors'].append({'id': expense_id, 'error': exc.message})
        return results

    def expenses_by_range(self, start, end, category_id=None, page=1, limit=50):
        """One page of expenses in [start, end] plus totals for the whole range."""
        offset = (page - 1) * limit
        expenses = self.store.find_in_range(start, end, category_id=category_id, limit=limit, offset=offset)
        stats = self.store.aggregate_in_range(start, end, category_id=category_id)
        total = stats['count']

        return {
            'expenses': expenses,
            'pagination': {
                'page': page,
                'limit': limit,
                'total': total,
                'total_pages': math.ceil(total / limit) if limit else 0,
                'has_more': offset + len(expenses) < total,
            },
            'summary': {
                'total_amount': money(stats['sum']),
                'average_amount': money(stats['avg']),
                'date_range': {'start_date': format_date(start), 'end_date': format_date(end)},
            },
        }

    def _check_rules(self, data):
        if 'date' in data and data['date'] > self.today() + timedelta(days=1):
            raise ValidationError('Expenses cannot be created for dates beyond tomorrow')
        if 'category_id' in data and not self.categories.exists(data['category_id']):
            raise ValidationError('Selected category does not exist')
        if 'expense_name_id' in data and not self.expense_names.exists(data['expense_name_id']):
            raise ValidationError('Selected expense name does not exist')
