"""
GastOn API Test Suite

- test_calendar_utils.py: Week and month bounds, date parsing
- test_validation.py: Range and query parameter validation
- test_expense_store.py: Expense store queries against a mocked cursor
- test_reporting.py: Weekly, range, monthly and dashboard reports
- test_report_routes.py: Report endpoints
- test_expenses.py: Expense CRUD
- test_categories.py: Category management
- test_expense_names.py: Expense name management
- test_app.py: Envelope, error mapping and security headers
- test_init_db.py: Schema creation and default data

Run all tests:
    pytest tests/

Run with verbose output:
    pytest tests/ -v
"""
