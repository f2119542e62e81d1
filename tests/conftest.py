"""
py.test configuration
"""
import decimal
import enum
import types
import typing
import uuid

import pytest

from sqlweave import DatabaseInterface
from sqlweave.backends.mssql import MssqlDialect
from sqlweave.orm.schema.column import Column
from sqlweave.orm.schema.relationship import ForeignKey
from sqlweave.orm.schema.table import table_base
from sqlweave.orm.session import Session


class Status(enum.Enum):
    Inactive = 0
    Active = 1
    Banned = 2


def make_models() -> types.SimpleNamespace:
    Table = table_base()

    class Customer(Table, table_name="Customers", prefix="C_"):
        id = Column(int, primary_key=True)
        name = Column(str)
        age = Column(typing.Optional[int])
        status = Column(Status)
        balance = Column(decimal.Decimal)
        profile_id = Column(int)
        profile = ForeignKey("profile_id", "Profile")
        orders = ForeignKey("customer_id", typing.List["Order"])

    class Profile(Table, table_name="Profiles", prefix="P_"):
        id = Column(int, primary_key=True)
        bio = Column(str)

    class Order(Table, table_name="Orders", prefix="O_"):
        id = Column(int, primary_key=True)
        customer_id = Column(int)
        total = Column(float)

    class Tag(Table, table_name="Tags", prefix="T_"):
        id = Column(uuid.UUID, primary_key=True)
        label = Column(str)

    return types.SimpleNamespace(Table=Table, Customer=Customer, Profile=Profile, Order=Order,
                                 Tag=Tag, Status=Status)


class TextOnlyBind(object):
    """
    Stands in for a database interface when only the generated SQL is needed.
    """

    def __init__(self, dialect, param_format: str):
        self.dialect = dialect
        self.param_format = param_format

    def emit_param(self, name: str) -> str:
        return self.param_format.format(name)


@pytest.fixture()
def db(tmp_path) -> DatabaseInterface:
    iface = DatabaseInterface(dsn="sqlite3:///" + str(tmp_path / "test.db"))
    iface.connect()
    yield iface
    iface.close()


@pytest.fixture()
def models() -> types.SimpleNamespace:
    return make_models()


@pytest.fixture()
def tables(db: DatabaseInterface, models: types.SimpleNamespace) -> types.SimpleNamespace:
    db.bind_tables(models.Table)
    for table in (models.Customer, models.Profile, models.Order, models.Tag):
        table.create()
    return models


@pytest.fixture()
def mssql_session() -> Session:
    return Session(TextOnlyBind(MssqlDialect(), "%({})s"))
