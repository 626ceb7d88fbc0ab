from errors import Conflict, NotFound, ValidationError
from schemas import ExpenseNameCreate, ExpenseNameUpdate, changed_fields, load_payload
from services.categories import title_case


def _with_category(row):
    """Nest the joined suggested-category columns."""
    row = dict(row)
    name, color = row.pop('category_name', None), row.pop('category_color', None)
    category_id = row.get('suggested_category_id')
    row['suggested_category'] = (
        {'id': category_id, 'name': name, 'color': color} if category_id else None
    )
    return row


class ExpenseNameService:

    def __init__(self, expense_names, categories):
        self.expense_names = expense_names
        self.categories = categories

    def list_expense_names(self):
        return [_with_category(row) for row in self.expense_names.find_with_categories()]

    def get_expense_name(self, expense_name_id):
        expense_name = self.expense_names.find_by_id(expense_name_id)
        if not expense_name:
            raise NotFound('Expense name')
        return expense_name

    def expense_names_by_category(self, category_id):
        if not self.categories.exists(category_id):
            raise NotFound('Category')
        return self.expense_names.find_by_category(category_id)

    def create_expense_name(self, payload):
        data = load_payload(ExpenseNameCreate, payload).model_dump()
        data['name'] = title_case(data['name'])
        if self.expense_names.find_by_name(data['name']):
            raise Conflict(f"Expense name '{data['name']}' already exists")
        self._check_suggested_category(data.get('suggested_category_id'))
        new_id = self.expense_names.insert(data)
        return self.expense_names.find_by_id(new_id)

    def update_expense_name(self, expense_name_id, payload):
        self.get_expense_name(expense_name_id)
        data = changed_fields(load_payload(ExpenseNameUpdate, payload), nullable=('suggested_category_id',))
        if not data:
            raise ValidationError('No fields to update')
        if 'name' in data:
            data['name'] = title_case(data['name'])
            if self.expense_names.name_exists(data['name'], exclude_id=expense_name_id):
                raise Conflict(f"Expense name '{data['name']}' already exists")
        self._check_suggested_category(data.get('suggested_category_id'))
        self.expense_names.update(expense_name_id, data)
        return self.expense_names.find_by_id(expense_name_id)

    def delete_expense_name(self, expense_name_id):
        self.get_expense_name(expense_name_id)
        usage_count = self.expense_names.usage_count(expense_name_id)
        if usage_count > 0:
            raise ValidationError(
                f"Cannot delete expense name: it is used in {usage_count} expense(s). "
                "Please reassign or delete the expenses first."
            )
        if not self.expense_names.delete(expense_name_id):
            raise NotFound('Expense name')
        return True

    def expense_names_with_stats(self):
        return [_with_category(row) for row in self.expense_names.find_with_usage_count()]

    def search_expense_names(self, term, limit=10):
        term = (term or '').strip()
        if not term:
            return self.list_expense_names()[:limit]
        return [_with_category(row) for row in self.expense_names.search(term, limit)]

    def expense_name_usage(self, expense_name_id):
        expense_name = self.get_expense_name(expense_name_id)
        usage_count = self.expense_names.usage_count(expense_name_id)
        return {
            'expense_name': expense_name,
            'usage_count': usage_count,
            'can_delete': usage_count == 0,
        }

    def popular_expense_names(self, limit=10):
        used = [row for row in self.expense_names_with_stats() if row['usage_count'] > 0]
        used.sort(key=lambda row: row['usage_count'], reverse=True)
        return used[:limit]

    def recently_used_expense_names(self, limit=10):
        used = [row for row in self.expense_names_with_stats() if row['last_used']]
        used.sort(key=lambda row: row['last_used'], reverse=True)
        return used[:limit]

    def _check_suggested_category(self, category_id):
        if category_id and not self.categories.exists(category_id):
            raise ValidationError('Suggested category does not exist')
