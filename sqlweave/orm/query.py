"""
Classes for query objects.

Every query generates one batch of SQL (and its parameters), which is sent to the server in a
single round trip when the query is ran.
"""
import abc
import logging
import typing

from sqlweave.orm import hydration as md_hydration, inspection as md_inspection, \
    pager as md_pager, session as md_session
from sqlweave.orm.schema import relationship as md_relationship, table as md_table, \
    types as md_types

logger = logging.getLogger(__name__)


def _where(where: typing.Optional[str]) -> str:
    return " WHERE {}".format(where) if where else ""


class BaseQuery(abc.ABC):
    """
    A base query object.
    """

    def __init__(self, sess: 'md_session.Session'):
        """
        :param sess: The :class:`.Session` associated with this query.
        """
        self.session = sess

    @property
    def dialect(self):
        return self.session.bind.dialect

    @abc.abstractmethod
    def generate_sql(self) -> typing.Tuple[str, typing.Mapping[str, typing.Any]]:
        """
        Generates the SQL for this query.

        :return: A two item tuple, the SQL to use and a mapping of params to pass.
        """

    @abc.abstractmethod
    def run(self):
        """
        Runs this query.
        """


class InsertQuery(BaseQuery):
    """
    Represents an INSERT query for a single row.

    .. code-block:: python3

        query = InsertQuery(sess, User(name="alice"))
        new_id = query.run()

    Columns with a value type are always written (``None`` is written as the zero value, unless
    the column is ``Optional``). Reference-typed columns that are ``None`` are left out, so the
    database default applies.
    """

    def __init__(self, sess: 'md_session.Session', row: 'md_table.Table'):
        super().__init__(sess)

        #: The row being inserted.
        self.row = row

        #: The table of the row being inserted.
        self.table = type(row)  # type: md_table.TableMeta

    def iter_values(self) -> typing.Iterator[typing.Tuple[str, typing.Any]]:
        """
        :return: An iterator of (column name, value) pairs to be inserted.
        """
        for column in self.table.iter_columns():
            if not column.sealed or column.identity:
                continue

            value = md_inspection.get_field(self.row, column.name)
            if value is None:
                if not column.value_type:
                    continue

                if not column.nullable:
                    value = md_types.zero_value(column.type)

            yield column.column_name, value

    def generate_sql(self) -> typing.Tuple[str, typing.Mapping[str, typing.Any]]:
        md = md_inspection.resolve(self.table)
        params = {}
        names = []
        for column_name, value in self.iter_values():
            names.append(column_name)
            params[column_name] = value

        if names:
            fmt = "INSERT INTO {}({}) VALUES({});".format(
                md.table_name,
                ",".join(names),
                ",".join(self.session.bind.emit_param(name) for name in names)
            )
        else:
            # every column is generated or left to its default
            fmt = "INSERT INTO {} DEFAULT VALUES;".format(md.table_name)

        if self.table.primary_key.identity:
            fmt += " {};".format(self.dialect.get_identity_capture_sql("ID"))

        return fmt, params

    def run(self) -> typing.Any:
        """
        Runs this insert.

        :return: The primary key of the new row: the generated identity for ``int`` primary keys,
            else the key set on the row. None if no row was written.
        """
        sql, params = self.generate_sql()

        if self.table.primary_key.identity:
            sets = self.session.fetch_sets(sql, params)
            try:
                return sets[-1][0]["ID"]
            except (IndexError, KeyError):
                return None

        written = self.session.execute(sql, params)
        if written > 0:
            return md_inspection.get_pk(self.row)

        return None


class UpdateQuery(BaseQuery):
    """
    Represents an UPDATE query for a single row, by primary key.

    Only the columns of the row that are not ``None`` are updated. The primary key is never
    updated.
    """

    def __init__(self, sess: 'md_session.Session', row: 'md_table.Table'):
        super().__init__(sess)

        #: The row being updated.
        self.row = row

        #: The table of the row being updated.
        self.table = type(row)  # type: md_table.TableMeta

    def iter_values(self) -> typing.Iterator[typing.Tuple[str, typing.Any]]:
        """
        :return: An iterator of (column name, value) pairs to be updated.
        """
        for column in self.table.iter_columns():
            if not column.sealed or column.primary_key:
                continue

            value = md_inspection.get_field(self.row, column.name)
            if value is None:
                continue

            yield column.column_name, value

    @property
    def is_empty(self) -> bool:
        """
        :return: If this update has nothing to set.
        """
        return next(self.iter_values(), None) is None

    def generate_sql(self) -> typing.Tuple[str, typing.Mapping[str, typing.Any]]:
        md = md_inspection.resolve(self.table)
        pk_column = self.table.primary_key.column_name
        emit = self.session.bind.emit_param

        params = {}
        sets = []
        for column_name, value in self.iter_values():
            sets.append("{}={}".format(column_name, emit(column_name)))
            params[column_name] = value

        params[pk_column] = md_inspection.get_pk(self.row)
        if not sets:
            # still valid SQL, setting the key to itself
            sets.append("{}={}".format(pk_column, emit(pk_column)))

        fmt = "UPDATE {} SET {} WHERE {}={};".format(
            md.table_name, ",".join(sets), pk_column, emit(pk_column)
        )
        return fmt, params

    def run(self) -> int:
        """
        Runs this update.

        :return: The number of rows affected. An update with nothing to set is not sent, and
            affects 0 rows.
        """
        if self.is_empty:
            logger.debug("Skipping update of {!r} with nothing to set".format(self.row))
            return 0

        return self.session.execute(*self.generate_sql())


class SelectQuery(BaseQuery):
    """
    Represents a cascading SELECT query.

    The main rows and the rows of every :class:`.ForeignKey` of the table are selected in one
    batch. Every statement selects two extra columns, ``MODELNAME`` (the class name of the rows
    selected) and ``PK`` (the primary key of the main row each row belongs to), which are used to
    attach related rows to their owners.

    .. code-block:: python3

        query = SelectQuery(sess, User, where="U_name = :name", params={"name": "alice"})
        users = query.all()
    """

    def __init__(self, sess: 'md_session.Session', table: 'md_table.TableMeta', *,
                 where: str = None, params: typing.Mapping[str, typing.Any] = None,
                 order_by: str = None):
        """
        :param table: The :class:`.Table` to select.
        :param where: A SQL WHERE clause (without the ``WHERE``) filtering the main rows.
        :param params: The parameters used in the WHERE clause.
        :param order_by: A SQL ORDER BY clause (without the ``ORDER BY``) for the main rows.
        """
        super().__init__(sess)

        self.table = table
        self.where = where
        self.params = params or {}
        self.order_by = order_by

    def _main_sql(self, md: 'md_table.TableMetadata') -> str:
        sql = "SELECT '{}' AS MODELNAME, {}{} AS PK, * FROM {}{}".format(
            self.table.__name__, md.column_prefix, md.primary_key, md.table_name,
            _where(self.where)
        )
        if self.order_by:
            sql += " ORDER BY {}".format(self.order_by)

        return sql

    def _relation_sql(self, md: 'md_table.TableMetadata',
                      fk: 'md_relationship.ForeignKeyDescriptor') -> str:
        rel_md = md_inspection.resolve(fk.related_type)
        main_pk = md.column_prefix + md.primary_key
        where = _where(self.where)

        if fk.cardinality is md_relationship.Cardinality.ONE_TO_ONE \
                and self.table.get_column(fk.foreign_key) is not None:
            # the key column is on this table, pointing at the related primary key
            main_fk = md.column_prefix + fk.foreign_key
            rel_pk = rel_md.column_prefix + rel_md.primary_key
            join = self.dialect.get_right_join_sql(
                rel_md.table_name, md.table_name,
                "{}.{} = {}.{}".format(rel_md.table_name, rel_pk, md.table_name, main_fk)
            )
            return "SELECT '{}' AS MODELNAME, {}.{} AS PK, {}.* FROM {} " \
                   "WHERE {}.{} IN (SELECT {} FROM {}{})".format(
                       fk.related_type.__name__, md.table_name, main_pk, rel_md.table_name, join,
                       rel_md.table_name, rel_pk, main_fk, md.table_name, where
                   )

        # the key column is on the related table, pointing at our primary key
        rel_fk = rel_md.column_prefix + fk.foreign_key
        return "SELECT '{}' AS MODELNAME, {} AS PK, * FROM {} " \
               "WHERE {} IN (SELECT {} FROM {}{})".format(
                   fk.related_type.__name__, rel_fk, rel_md.table_name,
                   rel_fk, main_pk, md.table_name, where
               )

    def generate_sql(self) -> typing.Tuple[str, typing.Mapping[str, typing.Any]]:
        md = md_inspection.resolve(self.table)
        statements = [self._main_sql(md)]
        for fk in md_inspection.foreign_keys(self.table):
            statements.append(self._relation_sql(md, fk))

        return "; ".join(statements) + ";", self.params

    def run(self) -> 'typing.List[md_table.Table]':
        """
        Runs this query.

        :return: The main rows, with their related rows attached.
        """
        sets = self.session.fetch_sets(*self.generate_sql())
        md = md_inspection.resolve(self.table)
        return md_hydration.hydrate(sets, self.table, md.column_prefix,
                                    md_inspection.foreign_keys(self.table))

    def all(self) -> 'typing.List[md_table.Table]':
        """
        Gets every row this query selects.
        """
        return self.run()

    def first(self) -> 'typing.Optional[md_table.Table]':
        """
        Gets the first row this query selects, or None if no rows matched.
        """
        rows = self.run()
        return rows[0] if rows else None


class PageQuery(BaseQuery):
    """
    Represents a query for one page of rows.

    The batch counts every matching row, then runs a cascading select of the rows whose primary
    keys are ranked ``(page_number - 1) * page_size + 1`` to ``page_number * page_size``.

    .. code-block:: python3

        query = PageQuery(sess, User, 2, 10, order_by="U_name")
        pager = query.run()
        print(pager.record_count, len(pager.data))
    """

    def __init__(self, sess: 'md_session.Session', table: 'md_table.TableMeta',
                 page_number: int, page_size: int, *,
                 sql_pre: str = None, fields: str = None, sql_from: str = None,
                 where: str = None, order_by: str = None,
                 params: typing.Mapping[str, typing.Any] = None):
        """
        :param table: The :class:`.Table` to select.
        :param page_number: The page to get, starting at 1.
        :param page_size: The number of rows on a page.
        :param sql_pre: SQL sent before the count, e.g. variable declarations.
        :param fields: The fields selected when ranking rows. Defaults to ``*``.
        :param sql_from: The FROM clause used to count and rank rows. Defaults to the table.
        :param where: A SQL WHERE clause (without the ``WHERE``) used to count and rank rows.
        :param order_by: The ORDER BY clause rows are ranked by. Defaults to the primary key.
        :param params: The parameters used in any of the SQL above.
        """
        super().__init__(sess)

        if page_number < 1:
            raise ValueError("Page numbers start at 1, not {}".format(page_number))
        if page_size < 1:
            raise ValueError("Page size must be positive, not {}".format(page_size))

        self.table = table
        self.page_number = page_number
        self.page_size = page_size

        self.sql_pre = sql_pre
        self.fields = fields or "*"
        self.sql_from = sql_from
        self.where = where
        self.order_by = order_by
        self.params = params or {}

    def generate_sql(self) -> typing.Tuple[str, typing.Mapping[str, typing.Any]]:
        md = md_inspection.resolve(self.table)
        pk_column = md.column_prefix + md.primary_key
        sql_from = self.sql_from or md.table_name
        order_by = self.order_by or pk_column
        first = (self.page_number - 1) * self.page_size + 1
        last = self.page_number * self.page_size

        count = "SELECT COUNT(1) FROM {}{};".format(sql_from, _where(self.where))
        if self.sql_pre:
            count = "{} {}".format(self.sql_pre, count)

        window = self.dialect.get_window_sql(
            pk_column, order_by, self.fields, sql_from, _where(self.where).strip(), first, last
        )
        select = SelectQuery(
            self.session, self.table,
            where="{} IN ({})".format(pk_column, window),
            params=self.params,
            # the order only makes sense on the main table
            order_by=order_by if self.sql_from is None else None
        )
        sql, _ = select.generate_sql()
        return "{} {}".format(count, sql), self.params

    def run(self) -> 'md_pager.Pager':
        """
        Runs this query.

        :return: A :class:`.Pager` holding the page of rows and the total number of rows.
        """
        sets = self.session.fetch_sets(*self.generate_sql())
        md = md_inspection.resolve(self.table)
        pager = md_pager.Pager.from_result_sets(
            sets, self.table, md.column_prefix, md_inspection.foreign_keys(self.table)
        )
        pager.page_number = self.page_number
        pager.page_size = self.page_size
        return pager
