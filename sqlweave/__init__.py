"""
Main package for sqlweave - a declaration-driven mapper between Python classes and SQL.

.. currentmodule:: sqlweave

.. autosummary::
    :toctree:

    db
    orm
    backends

    exc
    utils
"""

__licence__ = "MIT"
__status__ = "Development"

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version(__name__)
except PackageNotFoundError:
    # package is not installed
    pass

from sqlweave.backends.base import BaseConnector, BaseDialect, BaseResultSet, BaseTransaction, \
    DictRow
# import helpers
from sqlweave.db import DatabaseInterface
from sqlweave.exc import *
from sqlweave.orm.coercion import Coerced, coerce, register_converter
from sqlweave.orm.inspection import foreign_keys, get_pk, resolve
# orm
from sqlweave.orm.pager import Pager
from sqlweave.orm.schema.column import Column
from sqlweave.orm.schema.relationship import Cardinality, ForeignKey, ForeignKeyDescriptor
from sqlweave.orm.schema.table import Table, TableMetadata, table_base
from sqlweave.orm.schema.types import BigInt, Binary, Boolean, ColumnType, Date, Float, \
    Integer, Numeric, Real, SmallInt, String, Time, Timestamp, TinyInt, Uuid
from sqlweave.orm.session import Session
