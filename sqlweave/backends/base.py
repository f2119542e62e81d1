"""
The base implementation of a backend. This provides some ABC classes.
"""
import abc
import collections.abc
import enum
import typing
from abc import abstractmethod
from collections import OrderedDict
from urllib.parse import ParseResult, parse_qs

from sqlweave.exc import UnsupportedOperationException
from sqlweave.orm.schema import types as md_types

#: The type of parameters passed to a transaction.
Params = typing.Optional[typing.Mapping[str, typing.Any]]


class BaseDialect:
    """
    The base class for a SQL dialect describer.

    This class holds every fragment of SQL that differs between servers, so that the query
    builders can stay dialect-agnostic: the identity capture after an INSERT, the windowing
    statement used for paging, the outer join form used by cascading reads, identifier quoting
    and the DDL for a column.

    Regular methods that have no sensible default will raise NotImplementedError, or
    :class:`.UnsupportedOperationException` if the server cannot do it at all.
    """

    #: A mapping of :class:`.ColumnType` class -> SQL type name for this dialect.
    type_names = {}  # type: typing.Dict[typing.Type[md_types.ColumnType], str]

    @property
    def lastval_method(self) -> str:
        """
        The last value method for a dialect. For example, in SQLite3 this is last_insert_rowid();
        """
        raise NotImplementedError

    def get_identity_capture_sql(self, alias: str = "ID") -> str:
        """
        Gets the statement appended to an INSERT that selects the generated identity.

        :param alias: The column alias to select the identity as.
        """
        return "SELECT {} AS {}".format(self.lastval_method, alias)

    def get_window_sql(self, key_column: str, order_by: str, fields: str, sql_from: str,
                       where: str, first: int, last: int) -> str:
        """
        Gets the statement that selects the keys of the rows ranked ``first`` to ``last``.

        :param key_column: The primary key column to select.
        :param order_by: The ORDER BY expression the rows are ranked by.
        :param fields: The fields selected in the ranked sub-query.
        :param sql_from: The FROM clause of the ranked sub-query.
        :param where: A ``WHERE ...`` clause, or an empty string.
        :param first: The first rank (inclusive).
        :param last: The last rank (inclusive).
        """
        raise UnsupportedOperationException("{} does not support paging".format(
            type(self).__name__
        ))

    def get_right_join_sql(self, left: str, right: str, on: str) -> str:
        """
        Gets the FROM clause of a right outer join between two tables.
        """
        return "{} RIGHT JOIN {} ON {}".format(left, right, on)

    def quote_name(self, name: str) -> str:
        """
        Quotes an identifier.
        """
        return '"{}"'.format(name)

    def get_type_sql(self, column_type: 'md_types.ColumnType') -> str:
        """
        Gets the SQL type name of a :class:`.ColumnType` in this dialect.
        """
        try:
            return self.type_names[type(column_type)]
        except KeyError:
            return column_type.sql()

    def get_column_ddl(self, name: str, column_type: 'md_types.ColumnType', *,
                       primary_key: bool = False, identity: bool = False) -> str:
        """
        Gets the column definition used inside a CREATE TABLE statement.

        :param name: The full column name (including any prefix).
        :param column_type: The :class:`.ColumnType` of the column.
        :param primary_key: If this column is the primary key.
        :param identity: If this column is generated by the database.
        """
        sql = "{} {}".format(self.quote_name(name), self.get_type_sql(column_type))
        if primary_key:
            sql += " PRIMARY KEY"
            if identity:
                sql += " IDENTITY"

        return sql


class BaseResultSet(collections.abc.Iterator, abc.ABC):
    """
    The base class for a result set. This represents the results from a database query, as an
    iterable.

    Children classes must implement:

        - :attr:`.BaseResultSet.keys`
        - :attr:`.BaseResultSet.fetch_row`
        - :attr:`.BaseResultSet.fetch_many`
        - :attr:`.BaseResultSet.close`
    """

    @property
    @abstractmethod
    def keys(self) -> typing.Iterable[str]:
        """
        :return: An iterable of keys that this query contained.
        """

    @abstractmethod
    def fetch_row(self) -> typing.Mapping[str, typing.Any]:
        """
        Fetches the **next row** in this query.

        This should return None if the row could not be fetched.
        """

    @abstractmethod
    def fetch_many(self, n: int) -> typing.List[typing.Mapping[str, typing.Any]]:
        """
        Fetches the **next N rows** in this query.

        :param n: The number of rows to fetch.
        """

    @abstractmethod
    def close(self):
        """
        Closes this result set.
        """

    def __next__(self):
        res = self.fetch_row()
        if res is None:
            raise StopIteration

        return res

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class BaseTransaction(abc.ABC):
    """
    The base class for a transaction. A transaction owns exactly one connection, opened by
    :meth:`.BaseTransaction.begin` and released by :meth:`.BaseTransaction.close`.

    Children classes must implement:

        - :meth:`.BaseTransaction.begin`
        - :meth:`.BaseTransaction.rollback`
        - :meth:`.BaseTransaction.commit`
        - :meth:`.BaseTransaction.execute`
        - :meth:`.BaseTransaction.cursor`
        - :meth:`.BaseTransaction.cursor_sets`
        - :meth:`.BaseTransaction.close`

    This class takes one parameter in the constructor: the :class:`.BaseConnector` used to connect
    to the DB server.

    .. code-block:: python3

        with db.get_transaction() as tr:
            sets = tr.cursor_sets("SELECT 1; SELECT 2;")

    The connection is released on every exit path of the ``with`` block; errors are re-raised
    unchanged after the rollback.
    """

    def __init__(self, connector: 'BaseConnector'):
        self.connector = connector

    def __enter__(self) -> 'BaseTransaction':
        self.begin()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is not None:
                self.rollback()
                return False

            self.commit()
            return False
        finally:
            self.close()

    @abstractmethod
    def begin(self):
        """
        Begins the transaction, opening the connection.
        """

    @abstractmethod
    def rollback(self):
        """
        Rolls back the transaction.
        """

    @abstractmethod
    def commit(self):
        """
        Commits the current transaction.
        """

    @abstractmethod
    def execute(self, sql: str, params: Params = None) -> int:
        """
        Executes SQL in the current transaction.

        :param sql: The SQL statement (or batch of statements) to execute.
        :param params: Any parameters to pass to the query.
        :return: The number of rows affected.
        """

    @abstractmethod
    def cursor(self, sql: str, params: Params = None) -> 'BaseResultSet':
        """
        Executes SQL and returns a database cursor for the rows.

        :param sql: The SQL statement to execute.
        :param params: Any parameters to pass to the query.
        :return: The :class:`.BaseResultSet` returned from the query, if applicable.
        """

    @abstractmethod
    def cursor_sets(self, sql: str, params: Params = None) \
            -> typing.List[typing.List['DictRow']]:
        """
        Executes a batch of statements in one round trip and returns every result set it produced.

        Statements that return no rows (``INSERT``, ``DECLARE``...) do not produce a result set;
        a ``SELECT`` that matches no rows produces an empty one.

        :param sql: The batch to execute.
        :param params: Any parameters to pass to the batch.
        """

    @abstractmethod
    def close(self):
        """
        Called at the end of a transaction to release the connection.
        """


class BaseConnector(abc.ABC):
    """
    The base class for a connector. This should be used for all connector classes as the parent
    class.

    Children classes must implement:

        - :meth:`.BaseConnector.connect`
        - :meth:`.BaseConnector.close`
        - :meth:`.BaseConnector.emit_param`
        - :meth:`.BaseConnector.get_transaction`
    """

    def __init__(self, dsn: ParseResult):
        """
        :param dsn: The :class:`urllib.parse.ParseResult` created from parsing a DSN.
        """
        self._parse_result = dsn
        self.dsn = dsn.geturl()
        self.host = dsn.hostname
        self.port = dsn.port
        self.username = dsn.username
        self.password = dsn.password
        self.db = dsn.path[1:]
        self.params = {k: v[0] for k, v in parse_qs(dsn.query).items()}

    @abstractmethod
    def connect(self) -> 'BaseConnector':
        """
        Prepares the current connector. This is called automatically by the
        :class:`.DatabaseInterface`.

        Connections themselves are opened per transaction.

        :return: The original BaseConnector instance.
        """

    @abstractmethod
    def close(self):
        """
        Closes the current Connector.
        """

    @abstractmethod
    def get_transaction(self) -> BaseTransaction:
        """
        Gets a new transaction object for this connector.

        :return: A new :class:`~.BaseTransaction` object attached to this connector.
        """

    @abstractmethod
    def emit_param(self, name: str) -> str:
        """
        Emits a parameter that can be used as a substitute during a query.

        :param name: The name of the parameter.
        :return: A string that represents the substitute to be placed in the query.
        """

    def adapt_param(self, value: typing.Any) -> typing.Any:
        """
        Converts a Python value into something the driver can bind.

        Enums are always bound by value.
        """
        if isinstance(value, enum.Enum):
            return value.value

        return value

    def adapt_params(self, params: Params) -> typing.Dict[str, typing.Any]:
        """
        Adapts every value of a parameter mapping with :meth:`.BaseConnector.adapt_param`.
        """
        if not params:
            return {}

        return {k: self.adapt_param(v) for k, v in params.items()}


# python 3.5 dicts are unordered
# so we inherit from OrderedDict instead of dict
class DictRow(OrderedDict):
    """
    Represents a row returned from a base result set, in dict form.

    This class allows for accessing both via key and index.
    """
    def __getitem__(self, item):
        if isinstance(item, int):
            try:
                return list(self.values())[item]
            except IndexError:
                raise KeyError(item)

        return super().__getitem__(item)

    def __setitem__(self, key, value, **kwargs):
        if isinstance(key, int):
            # find the actual string key at position ``key``
            # then set the item using said dict key
            d_key = list(self.keys())[key]
            return super().__setitem__(d_key, value, **kwargs)

        return super().__setitem__(key, value, **kwargs)

    @classmethod
    def from_cursor(cls, description, row) -> 'DictRow':
        """
        Creates a new row from a DB-API cursor description and a row tuple.
        """
        return cls(zip((col[0] for col in description), row))


class CursorResultSet(BaseResultSet):
    """
    A result set over any DB-API 2.0 cursor.
    """

    def __init__(self, cursor):
        self.cursor = cursor

    @property
    def keys(self) -> typing.Iterable[str]:
        if self.cursor.description is None:
            return []

        return [col[0] for col in self.cursor.description]

    def close(self):
        self.cursor.close()

    def fetch_many(self, n: int) -> typing.List[typing.Mapping[str, typing.Any]]:
        """
        Fetches many rows.
        """
        rows = self.cursor.fetchmany(n)
        return [DictRow.from_cursor(self.cursor.description, r) for r in rows if r is not None]

    def fetch_row(self) -> typing.Mapping[str, typing.Any]:
        """
        Fetches one row.
        """
        row = self.cursor.fetchone()
        return DictRow.from_cursor(self.cursor.description, row) if row is not None else None
