"""
Shared data access for the MySQL tables.

Every repository borrows a connection from the application pool for a
single statement and hands it back straight away. Rows come back as
dictionaries.
"""

import logging

import mysql.connector
from mysql.connector import errorcode

from errors import Conflict, DatabaseError, ReportTimeout, ValidationError

logger = logging.getLogger(__name__)


def _shorten(query, size=100):
    query = ' '.join(query.split())
    return query if len(query) <= size else query[:size] + '...'


class BaseRepository:
    table = None
    columns = ()
    order_by = 'id ASC'
    read_error = DatabaseError

    def __init__(self, pool):
        self.pool = pool

    def fetch_all(self, query, params=()):
        return self._read(query, params, many=True)

    def fetch_one(self, query, params=()):
        return self._read(query, params, many=False)

    def _read(self, query, params, many):
        try:
            conn = self.pool.get_connection()
        except mysql.connector.Error as exc:
            logger.error("Could not get a database connection: %s", exc)
            raise self.read_error('Database connection failed') from exc
        try:
            with conn.cursor(dictionary=True) as cur:
                cur.execute(query, params)
                return cur.fetchall() if many else cur.fetchone()
        except mysql.connector.Error as exc:
            if exc.errno == errorcode.ER_QUERY_TIMEOUT:
                logger.warning("Query on %s hit the execution time limit: %s", self.table, _shorten(query))
                raise ReportTimeout(f"Report timed out while reading {self.table}") from exc
            logger.error("Query failed on %s: %s (%s)", self.table, _shorten(query), exc)
            raise self.read_error(f"Failed to read {self.table}") from exc
        finally:
            conn.close()

    def execute(self, query, params=()):
        """Run a write statement and commit. Returns (rowcount, lastrowid)."""
        try:
            conn = self.pool.get_connection()
        except mysql.connector.Error as exc:
            logger.error("Could not get a database connection: %s", exc)
            raise DatabaseError('Database connection failed') from exc
        try:
            with conn.cursor() as cur:
                cur.execute(query, params)
                conn.commit()
                return cur.rowcount, cur.lastrowid
        except mysql.connector.IntegrityError as exc:
            conn.rollback()
            raise self._integrity_error(exc) from exc
        except mysql.connector.Error as exc:
            conn.rollback()
            logger.error("Write failed on %s: %s (%s)", self.table, _shorten(query), exc)
            raise DatabaseError(f"Failed to write {self.table}") from exc
        finally:
            conn.close()

    def _integrity_error(self, exc):
        if exc.errno == errorcode.ER_DUP_ENTRY:
            return Conflict(f"{self.table} entry already exists")
        if exc.errno == errorcode.ER_ROW_IS_REFERENCED_2:
            return ValidationError('Cannot delete: resource is referenced by other records')
        if exc.errno == errorcode.ER_NO_REFERENCED_ROW_2:
            return ValidationError('Referenced resource does not exist')
        logger.error("Integrity error on %s: %s", self.table, exc)
        return DatabaseError(f"Failed to write {self.table}")

    def find_all(self, limit=None, offset=None):
        query = f"SELECT * FROM {self.table} ORDER BY {self.order_by}"
        params = []
        if limit:
            query += " LIMIT %s OFFSET %s"
            params.extend([limit, offset or 0])
        return self.fetch_all(query, tuple(params))

    def find_by_id(self, record_id):
        return self.fetch_one(f"SELECT * FROM {self.table} WHERE id = %s", (record_id,))

    def exists(self, record_id):
        row = self.fetch_one(f"SELECT COUNT(*) AS count FROM {self.table} WHERE id = %s", (record_id,))
        return bool(row and row['count'])

    def insert(self, data):
        fields = [f for f in self.columns if f in data]
        placeholders = ', '.join(['%s'] * len(fields))
        query = f"INSERT INTO {self.table} ({', '.join(fields)}) VALUES ({placeholders})"
        _, new_id = self.execute(query, tuple(data[f] for f in fields))
        return new_id

    def update(self, record_id, data):
        fields = [f for f in self.columns if f in data]
        assignments = [f"{f} = %s" for f in fields] + ['updated_at = CURRENT_TIMESTAMP']
        query = f"UPDATE {self.table} SET {', '.join(assignments)} WHERE id = %s"
        rowcount, _ = self.execute(query, tuple(data[f] for f in fields) + (record_id,))
        return rowcount > 0

    def delete(self, record_id):
        rowcount, _ = self.execute(f"DELETE FROM {self.table} WHERE id = %s", (record_id,))
        return rowcount > 0
