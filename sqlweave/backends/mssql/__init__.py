"""
Microsoft SQL Server (T-SQL) backends.

.. autosummary::
    :toctree:

    pymssql
"""

from pkgutil import extend_path

from sqlweave.backends.base import BaseDialect
from sqlweave.orm.schema import types as md_types

__path__ = extend_path(__path__, __name__)

DEFAULT_CONNECTOR = "pymssql"


class MssqlDialect(BaseDialect):
    """
    The dialect for Microsoft SQL Server.
    """

    type_names = {
        md_types.Integer: "INT",
        md_types.SmallInt: "SMALLINT",
        md_types.TinyInt: "TINYINT",
        md_types.BigInt: "BIGINT",
        md_types.Real: "REAL",
        md_types.Float: "FLOAT",
        md_types.Boolean: "BIT",
        md_types.String: "NVARCHAR",
        md_types.Binary: "VARBINARY",
        md_types.Timestamp: "DATETIME",
        md_types.Date: "DATE",
        md_types.Time: "TIME",
        md_types.Uuid: "UNIQUEIDENTIFIER",
    }

    @property
    def lastval_method(self):
        return "SCOPE_IDENTITY()"

    def get_identity_capture_sql(self, alias: str = "ID") -> str:
        # SCOPE_IDENTITY() is a NUMERIC(38, 0)
        return "SELECT CAST({} AS BIGINT) AS {}".format(self.lastval_method, alias)

    def get_window_sql(self, key_column, order_by, fields, sql_from, where, first, last):
        inner = " ".join(filter(None, [
            "SELECT TOP {} ROW_NUMBER() OVER (ORDER BY {}) ROWINDEX, {} FROM {}".format(
                last, order_by, fields, sql_from
            ),
            where,
            "ORDER BY {}".format(order_by),
        ]))
        return "SELECT F.{} FROM ({}) F WHERE F.ROWINDEX BETWEEN {} AND {}".format(
            key_column, inner, first, last
        )

    def quote_name(self, name: str) -> str:
        return "[{}]".format(name)

    def get_type_sql(self, column_type: 'md_types.ColumnType') -> str:
        sql = super().get_type_sql(column_type)
        if column_type.unbounded:
            sql += "(max)"

        return sql
