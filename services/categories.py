import re

from errors import Conflict, NotFound, ValidationError
from schemas import CategoryCreate, CategoryUpdate, changed_fields, load_payload

WORD_RE = re.compile(r'\w\S*')

DEFAULT_COLORS = [
    '#EF4444',  # Comida
    '#3B82F6',  # Transporte
    '#8B5CF6',  # Entretenimiento
    '#10B981',  # Salud
    '#F59E0B',  # Hogar
    '#6B7280',  # Otros
    '#EC4899',
    '#06B6D4',
    '#84CC16',
    '#F97316',
]


def title_case(text):
    return WORD_RE.sub(lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), text)


class CategoryService:

    def __init__(self, categories):
        self.categories = categories

    def list_categories(self):
        return self.categories.find_all()

    def get_category(self, category_id):
        category = self.categories.find_by_id(category_id)
        if not category:
            raise NotFound('Category')
        return category

    def create_category(self, payload):
        data = load_payload(CategoryCreate, payload).model_dump()
        data = self._normalize(data)
        if self.categories.find_by_name(data['name']):
            raise Conflict(f"Category '{data['name']}' already exists")
        new_id = self.categories.insert(data)
        return self.categories.find_by_id(new_id)

    def update_category(self, category_id, payload):
        self.get_category(category_id)
        data = self._normalize(changed_fields(load_payload(CategoryUpdate, payload)))
        if not data:
            raise ValidationError('No fields to update')
        if 'name' in data and self.categories.name_exists(data['name'], exclude_id=category_id):
            raise Conflict(f"Category '{data['name']}' already exists")
        self.categories.update(category_id, data)
        return self.categories.find_by_id(category_id)

    def delete_category(self, category_id):
        self.get_category(category_id)
        expense_count = self.categories.expense_count(category_id)
        if expense_count > 0:
            raise ValidationError(
                f"Cannot delete category: it has {expense_count} associated expense(s). "
                "Please reassign or delete the expenses first."
            )
        if not self.categories.delete(category_id):
            raise NotFound('Category')
        return True

    def categories_with_stats(self):
        return self.categories.find_with_expense_count()

    def search_categories(self, term):
        term = (term or '').strip()
        if not term:
            return self.list_categories()
        return self.categories.search(term)

    def category_usage(self, category_id):
        category = self.get_category(category_id)
        expense_count = self.categories.expense_count(category_id)
        return {
            'category': category,
            'expense_count': expense_count,
            'expense_name_count': self.categories.expense_name_count(category_id),
            'can_delete': expense_count == 0,
        }

    @staticmethod
    def default_colors():
        return list(DEFAULT_COLORS)

    @staticmethod
    def _normalize(data):
        if data.get('name'):
            data['name'] = title_case(data['name'])
        if data.get('color'):
            data['color'] = data['color'].upper()
        return data
