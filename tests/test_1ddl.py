"""
Tests for CREATE TABLE.
"""
import typing

import pytest

from sqlweave import DatabaseInterface
from sqlweave.orm.ddl.ddlsession import DDLSession
from sqlweave.orm.schema.column import Column
from sqlweave.orm.schema.table import table_base
from sqlweave.orm.schema.types import BigInt


def test_create_table_mssql(models, mssql_session):
    sess = DDLSession(mssql_session.bind)
    assert sess.get_create_table_sql(models.Customer) == (
        "CREATE TABLE [Customers](\n"
        "    [C_id] INT PRIMARY KEY IDENTITY,\n"
        "    [C_name] NVARCHAR(max),\n"
        "    [C_age] INT,\n"
        "    [C_status] INT,\n"
        "    [C_balance] DECIMAL(18, 4),\n"
        "    [C_profile_id] INT\n"
        ");"
    )


def test_create_table_guid_key(models, mssql_session):
    sess = DDLSession(mssql_session.bind)
    sql = sess.get_create_table_sql(models.Tag)
    # only int keys are identities
    assert "[T_id] UNIQUEIDENTIFIER PRIMARY KEY,\n" in sql
    assert "IDENTITY" not in sql


def test_create_table_strips_schema(mssql_session):
    Table = table_base()

    class Thing(Table, table_name="dbo.Things"):
        id = Column(int, primary_key=True, sql_type=BigInt)
        tags = Column(typing.List[str])

    sess = DDLSession(mssql_session.bind)
    # unsealed columns are not created
    assert sess.get_create_table_sql(Thing) == (
        "CREATE TABLE [Things](\n"
        "    [id] BIGINT PRIMARY KEY IDENTITY\n"
        ");"
    )


def test_create_table_sqlite(db: DatabaseInterface, models):
    db.bind_tables(models.Table)
    sql = db.get_ddl_session().get_create_table_sql(models.Customer)
    assert '"C_id" INTEGER PRIMARY KEY AUTOINCREMENT' in sql
    assert '"C_balance" DECIMAL(18, 4)' in sql

    models.Customer.create()
    row = db.get_session().fetch(
        "SELECT sql FROM sqlite_master WHERE type = 'table' AND name = 'Customers';"
    )
    assert row is not None


def test_create_unbound(models):
    with pytest.raises(RuntimeError):
        models.Customer.create()
