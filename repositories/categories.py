from repositories.base import BaseRepository


class CategoryRepository(BaseRepository):
    table = 'categories'
    columns = ('name', 'color')
    order_by = 'name ASC'

    def find_by_name(self, name):
        return self.fetch_one("SELECT * FROM categories WHERE LOWER(name) = LOWER(%s)", (name,))

    def name_exists(self, name, exclude_id=None):
        query = "SELECT COUNT(*) AS count FROM categories WHERE LOWER(name) = LOWER(%s)"
        params = [name]
        if exclude_id:
            query += " AND id != %s"
            params.append(exclude_id)
        row = self.fetch_one(query, tuple(params))
        return bool(row and row['count'])

    def search(self, term):
        return self.fetch_all(
            "SELECT * FROM categories WHERE LOWER(name) LIKE LOWER(%s) ORDER BY name ASC",
            (f"%{term}%",),
        )

    def find_with_expense_count(self):
        return self.fetch_all("""
            SELECT c.id, c.name, c.color, c.created_at, c.updated_at,
                   COUNT(e.id) AS expense_count
            FROM categories c
            LEFT JOIN expenses e ON c.id = e.category_id
            GROUP BY c.id, c.name, c.color, c.created_at, c.updated_at
            ORDER BY c.name ASC
        """)

    def expense_count(self, category_id):
        row = self.fetch_one("SELECT COUNT(*) AS count FROM expenses WHERE category_id = %s", (category_id,))
        return int(row['count']) if row else 0

    def expense_name_count(self, category_id):
        row = self.fetch_one(
            "SELECT COUNT(*) AS count FROM expense_names WHERE suggested_category_id = %s",
            (category_id,),
        )
        return int(row['count']) if row else 0
