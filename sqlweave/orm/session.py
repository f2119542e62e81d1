import logging
import typing

from sqlweave import db as md_db
from sqlweave.backends.base import DictRow, Params
from sqlweave.orm import hydration as md_hydration, inspection as md_inspection, \
    pager as md_pager, query as md_query
from sqlweave.orm.schema import table as md_table

logger = logging.getLogger(__name__)


class Session(object):
    """
    Sessions are the window into the database. They are responsible for creating queries,
    inserting and updating rows, and reading rows back with their related rows attached.

    Sessions are bound to a :class:`.DatabaseInterface` instance which they use to get a
    transaction. Every operation runs in its own transaction, on its own connection: it is
    committed when the operation succeeds, rolled back when it fails, and the connection is always
    closed before the operation returns.

    .. code-block:: python3

        sess = db.get_session()
        user_id = sess.create(User(name="alice"))
        user = sess.read(User, "U_id = :id", {"id": user_id})

    A session holds no state of its own, so one session can be shared freely.
    """

    def __init__(self, bind: 'md_db.DatabaseInterface'):
        """
        :param bind: The :class:`.DatabaseInterface` instance we are bound to.
        """
        self.bind = bind

    def __repr__(self):
        return "<Session bind={!r}>".format(self.bind)

    # low-level
    def execute(self, sql: str, params: Params = None) -> int:
        """
        Executes SQL.

        :param sql: The SQL to execute. This may be a batch of statements.
        :param params: The parameters to use.
        :return: The number of rows affected.
        """
        with self.bind.get_transaction() as tr:
            return tr.execute(sql, params)

    def fetch(self, sql: str, params: Params = None) -> typing.Optional[DictRow]:
        """
        Fetches the first row of a query.

        :param sql: The SQL query to execute.
        :param params: The parameters to use.
        :return: The first row, or None if the query returned no rows.
        """
        with self.bind.get_transaction() as tr:
            with tr.cursor(sql, params) as cursor:
                return cursor.fetch_row()

    def fetch_scalar(self, sql: str, params: Params = None) -> typing.Any:
        """
        Fetches the first column of the first row of a query.

        :return: The value, or None if the query returned no rows.
        """
        row = self.fetch(sql, params)
        if row is None or not row:
            return None

        return row[0]

    def exists(self, sql: str, params: Params = None) -> bool:
        """
        Checks if a query returns any rows.
        """
        return self.fetch(sql, params) is not None

    def fetch_sets(self, sql: str, params: Params = None) -> typing.List[typing.List[DictRow]]:
        """
        Runs a batch of statements in one round trip, and fetches every result set it produced.

        :param sql: The batch to execute.
        :param params: The parameters to use.
        :return: A list of result sets, each a list of rows.
        """
        with self.bind.get_transaction() as tr:
            return tr.cursor_sets(sql, params)

    # query builders
    def select(self, table: 'md_table.TableMeta', where: str = None, params: Params = None, *,
               order_by: str = None) -> 'md_query.SelectQuery':
        """
        Creates a new cascading SELECT query that can be built upon.

        :param table: The :class:`.Table` to select.
        :return: A new :class:`.SelectQuery`.
        """
        return md_query.SelectQuery(self, table, where=where, params=params, order_by=order_by)

    # rows
    def create(self, row: 'md_table.Table') -> typing.Any:
        """
        Inserts a row into the database.

        :param row: The :class:`.Table` row to insert.
        :return: The primary key of the new row, or None if no row was written.
        """
        return md_query.InsertQuery(self, row).run()

    def update(self, row: 'md_table.Table') -> int:
        """
        Updates a row in the database, by primary key. Columns that are None are not updated.

        :param row: The :class:`.Table` row to update.
        :return: The number of rows affected.
        """
        return md_query.UpdateQuery(self, row).run()

    def read(self, table: 'md_table.TableMeta', where: str = None,
             params: Params = None) -> 'typing.Optional[md_table.Table]':
        """
        Reads the first row of a table matching a WHERE clause, with its related rows.

        .. code-block:: python3

            user = sess.read(User, "U_name = :name", {"name": "alice"})

        :param table: The :class:`.Table` to read.
        :param where: A SQL WHERE clause, without the ``WHERE``.
        :param params: The parameters used in the WHERE clause.
        :return: The row, or None if no rows matched.
        """
        return self.select(table, where, params).first()

    def read_list(self, table: 'md_table.TableMeta', where: str = None,
                  params: Params = None) -> 'typing.List[md_table.Table]':
        """
        Reads every row of a table matching a WHERE clause, with their related rows.
        """
        return self.select(table, where, params).all()

    def read_sql(self, table: 'md_table.TableMeta', sql: str, params: Params = None, *,
                 prefix: str = None) -> 'typing.List[md_table.Table]':
        """
        Reads rows using a hand-written batch.

        The first statement selects the main rows; any further statements select related rows
        and must select a ``MODELNAME`` column (the related class name) and a ``PK`` column (the
        primary key of the owning main row).

        :param table: The :class:`.Table` to read.
        :param sql: The batch to run.
        :param params: The parameters used in the batch.
        :param prefix: The column prefix of the main rows, if it differs from the table's.
        """
        md = md_inspection.resolve(table)
        sets = self.fetch_sets(sql, params)
        return md_hydration.hydrate(
            sets, table, md.column_prefix if prefix is None else prefix,
            md_inspection.foreign_keys(table)
        )

    def read_page(self, table: 'md_table.TableMeta', page_number: int, page_size: int, *,
                  sql_pre: str = None, fields: str = None, sql_from: str = None,
                  where: str = None, order_by: str = None,
                  params: Params = None) -> 'md_pager.Pager':
        """
        Reads a page of rows, with their related rows.

        .. code-block:: python3

            pager = sess.read_page(User, 2, 10, order_by="U_name")

        See :class:`.PageQuery` for the parameters.

        :return: A :class:`.Pager` for the page.
        """
        return md_query.PageQuery(
            self, table, page_number, page_size, sql_pre=sql_pre, fields=fields,
            sql_from=sql_from, where=where, order_by=order_by, params=params
        ).run()

    def read_page_sql(self, table: 'md_table.TableMeta', sql: str, params: Params = None, *,
                      prefix: str = None) -> 'md_pager.Pager':
        """
        Reads a page of rows using a hand-written batch.

        The first statement selects the total number of rows; the rest follow the same rules as
        :meth:`.Session.read_sql`. The page number and size of the pager are left at 0.
        """
        md = md_inspection.resolve(table)
        sets = self.fetch_sets(sql, params)
        return md_pager.Pager.from_result_sets(
            sets, table, md.column_prefix if prefix is None else prefix,
            md_inspection.foreign_keys(table)
        )
