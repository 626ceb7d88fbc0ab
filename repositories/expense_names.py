from repositories.base import BaseRepository

NAME_WITH_CATEGORY = """
    SELECT n.id, n.name, n.suggested_category_id, n.created_at, n.updated_at,
           c.name AS category_name, c.color AS category_color
    FROM expense_names n
    LEFT JOIN categories c ON n.suggested_category_id = c.id
"""


class ExpenseNameRepository(BaseRepository):
    table = 'expense_names'
    columns = ('name', 'suggested_category_id')
    order_by = 'name ASC'

    def find_with_categories(self):
        return self.fetch_all(NAME_WITH_CATEGORY + " ORDER BY n.name ASC")

    def find_by_category(self, category_id):
        return self.fetch_all(
            "SELECT * FROM expense_names WHERE suggested_category_id = %s ORDER BY name ASC",
            (category_id,),
        )

    def find_by_name(self, name):
        return self.fetch_one("SELECT * FROM expense_names WHERE LOWER(name) = LOWER(%s)", (name,))

    def name_exists(self, name, exclude_id=None):
        query = "SELECT COUNT(*) AS count FROM expense_names WHERE LOWER(name) = LOWER(%s)"
        params = [name]
        if exclude_id:
            query += " AND id != %s"
            params.append(exclude_id)
        row = self.fetch_one(query, tuple(params))
        return bool(row and row['count'])

    def search(self, term, limit=10):
        return self.fetch_all(
            NAME_WITH_CATEGORY + " WHERE LOWER(n.name) LIKE LOWER(%s) ORDER BY n.name ASC LIMIT %s",
            (f"%{term}%", limit),
        )

    def find_with_usage_count(self):
        return self.fetch_all("""
            SELECT n.id, n.name, n.suggested_category_id, n.created_at, n.updated_at,
                   c.name AS category_name, c.color AS category_color,
                   COUNT(e.id) AS usage_count,
                   MAX(e.date) AS last_used
            FROM expense_names n
            LEFT JOIN categories c ON n.suggested_category_id = c.id
            LEFT JOIN expenses e ON n.id = e.expense_name_id
            GROUP BY n.id, n.name, n.suggested_category_id, n.created_at, n.updated_at,
                     c.name, c.color
            ORDER BY n.name ASC
        """)

    def usage_count(self, expense_name_id):
        row = self.fetch_one(
            "SELECT COUNT(*) AS count FROM expenses WHERE expense_name_id = %s",
            (expense_name_id,),
        )
        return int(row['count']) if row else 0
