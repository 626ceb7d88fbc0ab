from flask import Blueprint, request, current_app

from repositories.categories import CategoryRepository
from responses import created, success
from services.categories import CategoryService

categories_bp = Blueprint('categories', __name__, url_prefix='/api/categories')


def category_service():
    return CategoryService(CategoryRepository(current_app.db_pool))


@categories_bp.route('')
def index():
    return success(category_service().list_categories(), 'Categories retrieved successfully')


@categories_bp.route('/stats')
def stats():
    return success(category_service().categories_with_stats(), 'Category statistics retrieved successfully')


@categories_bp.route('/search')
def search():
    results = category_service().search_categories(request.args.get('q'))
    return success(results, 'Category search completed')


@categories_bp.route('/colors')
def colors():
    return success(CategoryService.default_colors(), 'Default colors retrieved successfully')


@categories_bp.route('/<int:category_id>')
def show(category_id):
    return success(category_service().get_category(category_id), 'Category retrieved successfully')


@categories_bp.route('/<int:category_id>/usage')
def usage(category_id):
    return success(category_service().category_usage(category_id), 'Category usage retrieved successfully')


@categories_bp.route('', methods=['POST'])
def add_category():
    category = category_service().create_category(request.get_json(silent=True))
    return created(category, 'Category created successfully')


@categories_bp.route('/<int:category_id>', methods=['PUT'])
def edit_category(category_id):
    category = category_service().update_category(category_id, request.get_json(silent=True))
    return success(category, 'Category updated successfully')


@categories_bp.route('/<int:category_id>', methods=['DELETE'])
def delete(category_id):
    category_service().delete_category(category_id)
    return success(None, 'Category deleted successfully')
