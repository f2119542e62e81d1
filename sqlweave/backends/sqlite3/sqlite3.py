"""
A backend using the stdlib sqlite3 driver.

.. code-block:: python3

    db = DatabaseInterface("sqlite3:///path/to/app.db?timeout=5")

Every transaction opens its own connection to the database file, so ``:memory:`` databases do
not outlive a single operation.
"""
import datetime
import decimal
import logging
import sqlite3
import typing
import uuid

from sqlweave.backends.base import BaseConnector, BaseTransaction, CursorResultSet, DictRow, \
    Params
from sqlweave.utils import separate_statements

logger = logging.getLogger(__name__)


class Sqlite3Connector(BaseConnector):
    """
    A connector powered by sqlite3.
    """

    def connect(self) -> 'BaseConnector':
        """
        Checks the connection options. Connections are opened by each transaction.
        """
        if "timeout" in self.params:
            self.params["timeout"] = float(self.params["timeout"])

        logger.debug("Using sqlite3 database {}".format(self.db))
        return self

    def close(self):
        """
        Closes this connector.
        """

    def new_connection(self) -> sqlite3.Connection:
        """
        Opens a new connection to the database file.
        """
        return sqlite3.connect(self.db, **self.params)

    def get_transaction(self) -> 'BaseTransaction':
        return Sqlite3Transaction(self)

    def emit_param(self, name: str) -> str:
        return ":{}".format(name)

    def adapt_param(self, value: typing.Any) -> typing.Any:
        value = super().adapt_param(value)

        # sqlite3 has no native storage for these, so they are stored as text
        if isinstance(value, (uuid.UUID, decimal.Decimal)):
            return str(value)
        if isinstance(value, datetime.datetime):
            return value.isoformat(sep=" ")
        if isinstance(value, (datetime.date, datetime.time)):
            return value.isoformat()

        return value


class Sqlite3Transaction(BaseTransaction):
    """
    Represents a sqlite3 transaction.

    The sqlite3 driver only runs one statement per call, so batches are split with
    :func:`.separate_statements` and run one after the other on the same connection.
    """

    def __init__(self, connector: 'Sqlite3Connector'):
        super().__init__(connector)

        #: The connection for this transaction.
        self.connection = None  # type: sqlite3.Connection

    def begin(self):
        """
        Begins the current transaction.
        """
        self.connection = self.connector.new_connection()

    def _run(self, sql: str, params: Params) -> typing.Iterator[sqlite3.Cursor]:
        params = self.connector.adapt_params(params)
        for stmt in separate_statements(sql):
            logger.debug("Executing {}".format(stmt))
            yield self.connection.execute(stmt, params)

    def execute(self, sql: str, params: Params = None) -> int:
        """
        Executes SQL in the current transaction.
        """
        affected = 0
        for cur in self._run(sql, params):
            if cur.rowcount > 0:
                affected += cur.rowcount

        return affected

    def cursor(self, sql: str, params: Params = None) -> 'CursorResultSet':
        """
        Gets a cursor for the specified SQL.
        """
        logger.debug("Executing {}".format(sql))
        cur = self.connection.cursor()
        cur.execute(sql, self.connector.adapt_params(params))
        return CursorResultSet(cur)

    def cursor_sets(self, sql: str, params: Params = None) -> typing.List[typing.List[DictRow]]:
        """
        Runs a batch and fetches every result set.
        """
        sets = []
        for cur in self._run(sql, params):
            if cur.description is None:
                continue

            sets.append([DictRow.from_cursor(cur.description, row) for row in cur.fetchall()])

        return sets

    def commit(self):
        """
        Commits the current transaction.
        """
        self.connection.commit()

    def rollback(self):
        """
        Rolls back the current transaction.
        """
        self.connection.rollback()

    def close(self):
        """
        Closes the current transaction.
        """
        self.connection.close()
        self.connection = None


CONNECTOR_TYPE = Sqlite3Connector
