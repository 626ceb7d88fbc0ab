from flask import Blueprint, request, current_app

from repositories.categories import CategoryRepository
from repositories.expense_names import ExpenseNameRepository
from responses import created, success
from services.expense_names import ExpenseNameService
from validation import parse_int_arg

expense_names_bp = Blueprint('expense_names', __name__, url_prefix='/api/expense-names')


def expense_name_service():
    pool = current_app.db_pool
    return ExpenseNameService(ExpenseNameRepository(pool), CategoryRepository(pool))


def _limit(default=10, max_value=50):
    return parse_int_arg(request.args, 'limit', default=default, min_value=1, max_value=max_value)


@expense_names_bp.route('')
def index():
    return success(expense_name_service().list_expense_names(), 'Expense names retrieved successfully')


@expense_names_bp.route('/stats')
def stats():
    data = expense_name_service().expense_names_with_stats()
    return success(data, 'Expense name statistics retrieved successfully')


@expense_names_bp.route('/search')
def search():
    results = expense_name_service().search_expense_names(request.args.get('q'), _limit())
    return success(results, 'Expense name search completed')


@expense_names_bp.route('/popular')
def popular():
    data = expense_name_service().popular_expense_names(_limit())
    return success(data, 'Popular expense names retrieved successfully')


@expense_names_bp.route('/recent')
def recent():
    data = expense_name_service().recently_used_expense_names(_limit())
    return success(data, 'Recently used expense names retrieved successfully')


@expense_names_bp.route('/by-category/<int:category_id>')
def by_category(category_id):
    data = expense_name_service().expense_names_by_category(category_id)
    return success(data, 'Expense names retrieved successfully')


@expense_names_bp.route('/<int:expense_name_id>')
def show(expense_name_id):
    data = expense_name_service().get_expense_name(expense_name_id)
    return success(data, 'Expense name retrieved successfully')


@expense_names_bp.route('/<int:expense_name_id>/usage')
def usage(expense_name_id):
    data = expense_name_service().expense_name_usage(expense_name_id)
    return success(data, 'Expense name usage retrieved successfully')


@expense_names_bp.route('', methods=['POST'])
def add_expense_name():
    expense_name = expense_name_service().create_expense_name(request.get_json(silent=True))
    return created(expense_name, 'Expense name created successfully')


@expense_names_bp.route('/<int:expense_name_id>', methods=['PUT'])
def edit_expense_name(expense_name_id):
    expense_name = expense_name_service().update_expense_name(expense_name_id, request.get_json(silent=True))
    return success(expense_name, 'Expense name updated successfully')


@expense_names_bp.route('/<int:expense_name_id>', methods=['DELETE'])
def delete(expense_name_id):
    expense_name_service().delete_expense_name(expense_name_id)
    return success(None, 'Expense name deleted successfully')
