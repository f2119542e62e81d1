"""
SQLite3 backends.

.. autosummary::
    :toctree:

    sqlite3
"""

from pkgutil import extend_path

from sqlweave.backends.base import BaseDialect

__path__ = extend_path(__path__, __name__)

DEFAULT_CONNECTOR = "sqlite3"


class Sqlite3Dialect(BaseDialect):
    """
    The dialect for SQLite3.
    """

    @property
    def lastval_method(self):
        return "last_insert_rowid()"

    def get_window_sql(self, key_column, order_by, fields, sql_from, where, first, last):
        inner = " ".join(filter(None, [
            "SELECT ROW_NUMBER() OVER (ORDER BY {}) AS ROWINDEX, {} FROM {}".format(
                order_by, fields, sql_from
            ),
            where,
        ]))
        return "SELECT F.{} FROM ({}) F WHERE F.ROWINDEX BETWEEN {} AND {}".format(
            key_column, inner, first, last
        )

    def get_right_join_sql(self, left, right, on):
        # RIGHT JOIN only exists in SQLite 3.39+, so flip it into a LEFT JOIN
        return "{} LEFT JOIN {} ON {}".format(right, left, on)

    def get_column_ddl(self, name, column_type, *, primary_key=False, identity=False):
        if primary_key and identity:
            # only INTEGER PRIMARY KEY aliases the rowid
            return "{} INTEGER PRIMARY KEY AUTOINCREMENT".format(self.quote_name(name))

        return super().get_column_ddl(name, column_type, primary_key=primary_key)
