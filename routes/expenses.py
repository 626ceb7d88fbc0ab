from flask import Blueprint, request, current_app

from repositories.categories import CategoryRepository
from repositories.expense_names import ExpenseNameRepository
from repositories.expenses import ExpenseStore
from responses import created, success
from services.expenses import ExpenseService
from services.reporting import ReportService
from validation import parse_int_arg, require_arg, validate_range

expenses_bp = Blueprint('expenses', __name__, url_prefix='/api/expenses')


def report_service():
    config = current_app.config
    timeout = config.get('REPORT_TIMEOUT_SECONDS')
    return ReportService(
        ExpenseStore(current_app.db_pool, timeout=timeout),
        timeout=timeout,
        recent_days=config.get('RECENT_EXPENSES_DAYS', 30),
        recent_limit=config.get('DASHBOARD_RECENT_LIMIT', 5),
    )


def expense_service():
    pool = current_app.db_pool
    return ExpenseService(ExpenseStore(pool), CategoryRepository(pool), ExpenseNameRepository(pool))


def _range_args():
    start, end = validate_range(
        require_arg(request.args, 'start_date'),
        require_arg(request.args, 'end_date'),
        max_days=current_app.config.get('REPORT_MAX_RANGE_DAYS', 365),
    )
    category_id = parse_int_arg(request.args, 'category_id', min_value=1)
    return start, end, category_id


# ---------- Reports ----------

@expenses_bp.route('/weekly')
def weekly_by_offset():
    offset = parse_int_arg(request.args, 'offset', default=0, min_value=-52, max_value=52)
    data = report_service().weekly_report_by_offset(offset)
    return success(data, 'Weekly expenses retrieved successfully')


@expenses_bp.route('/weekly/current')
def weekly_current():
    data = report_service().weekly_report()
    return success(data, 'Current week expenses retrieved successfully')


@expenses_bp.route('/weekly/<date_str>')
def weekly_for_date(date_str):
    data = report_service().weekly_report(date_str)
    return success(data, 'Weekly expenses retrieved successfully')


@expenses_bp.route('/stats')
def statistics():
    start, end, category_id = _range_args()
    data = report_service().range_statistics(start, end, category_id=category_id)
    return success(data, 'Expense statistics retrieved successfully')


@expenses_bp.route('/monthly')
def monthly():
    month = request.args.get('month') or None
    data = report_service().monthly_report(month)
    return success(data, 'Monthly expenses retrieved successfully')


@expenses_bp.route('/dashboard')
def dashboard():
    data = report_service().dashboard_summary()
    return success(data, 'Dashboard summary retrieved successfully')


@expenses_bp.route('/recent')
def recent():
    limit = parse_int_arg(request.args, 'limit', default=10, min_value=1, max_value=100)
    data = report_service().recent_expenses(limit)
    return success(data, 'Recent expenses retrieved successfully')


# ---------- CRUD ----------

@expenses_bp.route('')
def index():
    start, end, category_id = _range_args()
    page = parse_int_arg(request.args, 'page', default=1, min_value=1)
    limit = parse_int_arg(request.args, 'limit', default=50, min_value=1, max_value=100)
    data = expense_service().expenses_by_range(start, end, category_id=category_id, page=page, limit=limit)
    return success(data, 'Expenses retrieved successfully')


@expenses_bp.route('/<int:expense_id>')
def show(expense_id):
    return success(expense_service().get_expense(expense_id), 'Expense retrieved successfully')


@expenses_bp.route('', methods=['POST'])
def add_expense():
    expense = expense_service().create_expense(request.get_json(silent=True))
    return created(expense, 'Expense created successfully')


@expenses_bp.route('/<int:expense_id>', methods=['PUT'])
def edit_expense(expense_id):
    expense = expense_service().update_expense(expense_id, request.get_json(silent=True))
    return success(expense, 'Expense updated successfully')


@expenses_bp.route('/bulk', methods=['DELETE'])
def bulk_delete():
    results = expense_service().bulk_delete_expenses(request.get_json(silent=True))
    return success(results, f"Deleted {len(results['deleted'])} expense(s)")


@expenses_bp.route('/<int:expense_id>', methods=['DELETE'])
def delete_expense(expense_id):
    expense_service().delete_expense(expense_id)
    return success(None, 'Expense deleted successfully')
