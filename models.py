from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class Category(db.Model):
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    color = db.Column(db.String(7), nullable=False, server_default='#6B7280')
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.current_timestamp(),
                           onupdate=db.func.current_timestamp())


class ExpenseName(db.Model):
    __tablename__ = 'expense_names'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, unique=True)
    suggested_category_id = db.Column(db.Integer, db.ForeignKey('categories.id', ondelete='SET NULL'),
                                      nullable=True, index=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.current_timestamp(),
                           onupdate=db.func.current_timestamp())


class Expense(db.Model):
    __tablename__ = 'expenses'
    __table_args__ = (
        db.CheckConstraint('amount > 0', name='expenses_amount_positive'),
        db.Index('idx_expenses_date_category', 'date', 'category_id'),
    )

    id = db.Column(db.Integer, primary_key=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id', ondelete='RESTRICT'),
                            nullable=False, index=True)
    expense_name_id = db.Column(db.Integer, db.ForeignKey('expense_names.id', ondelete='RESTRICT'),
                                nullable=False, index=True)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.current_timestamp(),
                           index=True)
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.current_timestamp(),
                           onupdate=db.func.current_timestamp())
