"""
Tests table declarations, the registry and metadata resolution.
"""
import datetime
import decimal
import enum
import typing
import uuid

import pytest

from sqlweave.exc import ConfigurationError, NoSuchColumnError
from sqlweave.orm import inspection
from sqlweave.orm.schema import types as md_types
from sqlweave.orm.schema.column import Column
from sqlweave.orm.schema.relationship import Cardinality, ForeignKey
from sqlweave.orm.schema.table import Table, TableMetadata, table_base


def test_resolve(models):
    assert inspection.resolve(models.Customer) == TableMetadata("Customers", "id", "C_")
    # memoized
    assert inspection.resolve(models.Customer) is inspection.resolve(models.Customer)


def test_resolve_defaults():
    Base = table_base()

    class Widget(Base):
        key = Column(str, primary_key=True)

    assert inspection.resolve(Widget) == TableMetadata("Widget", "key", "")


def test_resolve_not_a_table():
    class Plain(object):
        pass

    with pytest.raises(ConfigurationError):
        inspection.resolve(Plain)

    with pytest.raises(ConfigurationError):
        inspection.resolve(Table)


def test_no_primary_key():
    Base = table_base()

    with pytest.raises(ConfigurationError):
        class NoKey(Base):
            name = Column(str)


def test_two_primary_keys():
    Base = table_base()

    with pytest.raises(ConfigurationError):
        class TwoKeys(Base):
            a = Column(int, primary_key=True)
            b = Column(int, primary_key=True)


def test_foreign_keys(models):
    fks = inspection.foreign_keys(models.Customer)
    assert [fk.field_name for fk in fks] == ["profile", "orders"]

    profile, orders = fks
    assert profile.foreign_key == "profile_id"
    assert profile.cardinality is Cardinality.ONE_TO_ONE
    assert profile.related_type is models.Profile

    assert orders.foreign_key == "customer_id"
    assert orders.cardinality is Cardinality.ONE_TO_MANY
    assert orders.related_type is models.Order

    assert inspection.foreign_keys(models.Order) == []


def test_foreign_key_class_reference():
    Base = table_base()

    class Child(Base, prefix="CH_"):
        id = Column(int, primary_key=True)
        parent_id = Column(int)

    class Parent(Base):
        id = Column(int, primary_key=True)
        children = ForeignKey("parent_id", typing.List[Child])
        favourite = ForeignKey("parent_id", Child)

    children, favourite = inspection.foreign_keys(Parent)
    assert children.related_type is Child
    assert children.cardinality is Cardinality.ONE_TO_MANY
    assert favourite.cardinality is Cardinality.ONE_TO_ONE


def test_foreign_key_unknown_table():
    Base = table_base()

    class Lonely(Base):
        id = Column(int, primary_key=True)
        friend = ForeignKey("friend_id", "Nobody")

    with pytest.raises(ConfigurationError):
        inspection.foreign_keys(Lonely)


def test_column_names(models):
    assert models.Customer.get_column("name").column_name == "C_name"
    assert models.Customer.get_column("C_name") is models.Customer.get_column("name")
    assert models.Customer.get_column("nope") is None
    assert [c.name for c in models.Customer.columns] == [
        "id", "name", "age", "status", "balance", "profile_id"
    ]


def test_column_properties(models):
    Customer = models.Customer
    assert Customer.primary_key is Customer.get_column("id")
    assert Customer.get_column("id").identity
    assert not models.Tag.get_column("id").identity
    assert Customer.get_column("age").nullable
    assert Customer.get_column("age").value_type
    assert not Customer.get_column("name").value_type


def test_row_values(models):
    customer = models.Customer(name="alice", id=3)
    assert customer.name == "alice"
    assert customer.age is None
    assert customer.orders is None
    assert customer.primary_key == 3
    assert inspection.get_pk(customer) == 3

    inspection.set_field(customer, "age", 30)
    assert inspection.get_field(customer, "age") == 30

    with pytest.raises(TypeError):
        models.Customer(nope=1)


def test_column_default():
    Base = table_base()

    class Counter(Base):
        id = Column(int, primary_key=True)
        count = Column(int, default=10)
        tags = Column(list, default=list)

    a, b = Counter(), Counter()
    assert a.count == 10
    assert a.tags == [] and a.tags is not b.tags


def test_registry(models):
    registry = models.Table.registry
    assert registry.get_table("Customer") is models.Customer
    assert registry.get_table("Customers") is models.Customer
    assert registry.get_table("Nope") is None


class Colour(enum.Enum):
    Red = "r"
    Green = "g"


class Level(enum.Enum):
    Low = 1
    Off = 0


def test_sealed_types():
    for type_ in (int, float, bool, decimal.Decimal, str, bytes, datetime.datetime,
                  datetime.date, datetime.time, uuid.UUID, Colour, typing.Optional[int]):
        assert md_types.is_sealed(type_), type_

    for type_ in (list, typing.List[int], object, typing.Union[int, str]):
        assert not md_types.is_sealed(type_), type_


def test_zero_values():
    assert md_types.zero_value(int) == 0
    assert md_types.zero_value(typing.Optional[float]) == 0.0
    assert md_types.zero_value(datetime.datetime) == datetime.datetime.min
    assert md_types.zero_value(uuid.UUID) == uuid.UUID(int=0)
    assert md_types.zero_value(str) is None
    assert md_types.zero_value(Level) is Level.Off
    assert md_types.zero_value(Colour) is Colour.Red


def test_column_types():
    assert isinstance(md_types.get_column_type(Level), md_types.Integer)
    assert isinstance(md_types.get_column_type(Colour), md_types.String)
    assert isinstance(md_types.get_column_type(typing.Optional[bool]), md_types.Boolean)
    assert isinstance(md_types.get_column_type(decimal.Decimal), md_types.Numeric)
    assert md_types.is_integral(int)
    assert not md_types.is_integral(bool)
    assert not md_types.is_integral(Level)

    with pytest.raises(TypeError):
        md_types.TYPE_MAP[list] = md_types.String


def test_no_such_field(models):
    customer = models.Customer()
    with pytest.raises(NoSuchColumnError):
        inspection.get_field(customer, "C_name")

    with pytest.raises(NoSuchColumnError):
        inspection.set_field(customer, "nope", 1)
