from flask import Flask

from config import Config
from models import db, Category, ExpenseName

DEFAULT_CATEGORIES = [
    ('Comida', '#EF4444'),
    ('Transporte', '#3B82F6'),
    ('Entretenimiento', '#8B5CF6'),
    ('Salud', '#10B981'),
    ('Hogar', '#F59E0B'),
    ('Otros', '#6B7280'),
]

DEFAULT_EXPENSE_NAMES = {
    'Comida': ['Almuerzo', 'Supermercado', 'Cena', 'Desayuno', 'Cafe'],
    'Transporte': ['Uber', 'Colectivo', 'Taxi', 'Combustible', 'Estacionamiento'],
    'Entretenimiento': ['Cine', 'Teatro', 'Streaming', 'Salidas', 'Libros'],
    'Salud': ['Farmacia', 'Medico', 'Dentista', 'Gimnasio'],
    'Hogar': ['Limpieza', 'Servicios', 'Supermercado Casa', 'Reparaciones'],
    'Otros': ['Regalos', 'Donaciones', 'Varios'],
}


def seed_defaults():
    """Insert the default categories and expense names that are missing."""
    categories = {}
    for name, color in DEFAULT_CATEGORIES:
        category = Category.query.filter_by(name=name).first()
        if category is None:
            category = Category(name=name, color=color)
            db.session.add(category)
        categories[name] = category
    db.session.flush()

    for category_name, names in DEFAULT_EXPENSE_NAMES.items():
        for name in names:
            if ExpenseName.query.filter_by(name=name).first() is None:
                db.session.add(ExpenseName(name=name, suggested_category_id=categories[category_name].id))
    db.session.commit()


def init_db(config_class=Config, seed=True):
    app = Flask(__name__)
    app.config.from_object(config_class)
    db.init_app(app)
    with app.app_context():
        db.create_all()
        if seed:
            seed_defaults()
    return app


if __name__ == "__main__":
    init_db()
