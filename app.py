import logging

from flask import Flask, current_app, request
from werkzeug.exceptions import HTTPException

from config import Config
from errors import ApiError
from responses import ApiJSONProvider, error, success
from routes.categories import categories_bp
from routes.expense_names import expense_names_bp
from routes.expenses import expenses_bp

API_VERSION = '1.0.0'


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.json = ApiJSONProvider(app)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    config_class.init_db(app)

    app.register_blueprint(categories_bp)
    app.register_blueprint(expense_names_bp)
    app.register_blueprint(expenses_bp)

    register_error_handlers(app)

    app.after_request(security_headers)
    app.add_url_rule('/api/health', 'health', health)
    app.add_url_rule('/api/', 'api_index', api_index)

    return app


def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(exc):
        if exc.status_code >= 500:
            app.logger.error("%s %s failed: %s", request.method, request.path, exc.message,
                             exc_info=exc.__cause__ or exc)
        else:
            app.logger.warning("%s %s rejected (%s): %s", request.method, request.path,
                               exc.status_code, exc.message)
        return error(exc.message, exc.status_code, exc.errors)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        if exc.code == 404:
            return error(f"Route {request.method} {request.path} not found", 404)
        return error(exc.description, exc.code)

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error('Internal Server Error', 500)


def security_headers(response):
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
    response.headers['Pragma'] = 'no-cache'
    response.headers['Expires'] = '0'
    return response


def health():
    return success({'status': 'healthy', 'testing': bool(current_app.testing)}, 'API is healthy')


def api_index():
    return success({
        'name': 'GastOn API',
        'version': API_VERSION,
        'endpoints': {
            'categories': '/api/categories',
            'expense_names': '/api/expense-names',
            'expenses': '/api/expenses',
            'health': '/api/health',
        },
    }, 'GastOn API')


if __name__ == '__main__':
    create_app().run()
