"""
Contains the DDL session object.
"""
import io
import logging

from sqlweave.orm import inspection as md_inspection
from sqlweave.orm.schema import table as md_table
from sqlweave.orm.session import Session
from sqlweave.utils import last_segment

logger = logging.getLogger(__name__)


class DDLSession(Session):
    """
    A session for executing DDL statements in.
    """

    def get_create_table_sql(self, table: 'md_table.TableMeta') -> str:
        """
        Gets the CREATE TABLE statement for a table.

        Only the columns stored directly in the table are created; the table name loses any schema
        qualifier.

        :param table: The :class:`.Table` to create.
        """
        md = md_inspection.resolve(table)
        dialect = self.bind.dialect

        column_fields = []
        for column in table.iter_columns():
            if not column.sealed:
                continue

            column_fields.append(dialect.get_column_ddl(
                column.column_name, column.sql_type,
                primary_key=column.primary_key, identity=column.identity
            ))

        sql = io.StringIO()
        sql.write("CREATE TABLE ")
        sql.write(dialect.quote_name(last_segment(md.table_name)))
        # this uses spacing to prettify the generated SQL a bit
        sql.write("(\n    ")
        sql.write(",\n    ".join(column_fields))
        sql.write("\n);")
        return sql.getvalue()

    def create_table(self, table: 'md_table.TableMeta') -> int:
        """
        Creates a table in this database.

        .. code-block:: python3

            db.get_ddl_session().create_table(User)

        :param table: The :class:`.Table` to create.
        """
        sql = self.get_create_table_sql(table)
        logger.debug("Creating table {}".format(table.__name__))
        return self.execute(sql)
