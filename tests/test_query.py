"""
Tests the SQL generated by queries.
"""
import decimal
import uuid

from sqlweave import DatabaseInterface
from sqlweave.orm.query import InsertQuery, PageQuery, SelectQuery, UpdateQuery


def test_insert_mssql(models, mssql_session):
    row = models.Customer(name="alice", status=models.Status.Active,
                          balance=decimal.Decimal("1.5"), profile_id=3)
    sql, params = InsertQuery(mssql_session, row).generate_sql()
    assert sql == (
        "INSERT INTO Customers(C_name,C_age,C_status,C_balance,C_profile_id) "
        "VALUES(%(C_name)s,%(C_age)s,%(C_status)s,%(C_balance)s,%(C_profile_id)s); "
        "SELECT CAST(SCOPE_IDENTITY() AS BIGINT) AS ID;"
    )
    assert params == {
        "C_name": "alice",
        # nullable value types are written as NULL
        "C_age": None,
        "C_status": models.Status.Active,
        "C_balance": decimal.Decimal("1.5"),
        "C_profile_id": 3,
    }


def test_insert_zero_values(models, mssql_session):
    sql, params = InsertQuery(mssql_session, models.Customer()).generate_sql()
    # reference types that are None are left out
    assert "C_name" not in sql
    assert params == {
        "C_age": None,
        "C_status": models.Status.Inactive,
        "C_balance": decimal.Decimal(0),
        "C_profile_id": 0,
    }


def test_insert_explicit_key(models, mssql_session):
    key = uuid.uuid4()
    row = models.Tag(id=key, label="red")
    sql, params = InsertQuery(mssql_session, row).generate_sql()
    # only identity keys are captured after the insert
    assert sql == "INSERT INTO Tags(T_id,T_label) VALUES(%(T_id)s,%(T_label)s);"
    assert params == {"T_id": key, "T_label": "red"}

    # UUIDs are value types, so a missing key is written as the zero UUID
    _, params = InsertQuery(mssql_session, models.Tag(label="red")).generate_sql()
    assert params["T_id"] == uuid.UUID(int=0)


def test_insert_default_values(models, mssql_session):
    # identity key and only reference columns left as None
    sql, params = InsertQuery(mssql_session, models.Profile()).generate_sql()
    assert sql == (
        "INSERT INTO Profiles DEFAULT VALUES; "
        "SELECT CAST(SCOPE_IDENTITY() AS BIGINT) AS ID;"
    )
    assert params == {}


def test_update_mssql(models, mssql_session):
    row = models.Customer(id=5, name="bob", age=40)
    sql, params = UpdateQuery(mssql_session, row).generate_sql()
    assert sql == "UPDATE Customers SET C_name=%(C_name)s,C_age=%(C_age)s WHERE C_id=%(C_id)s;"
    assert params == {"C_name": "bob", "C_age": 40, "C_id": 5}


def test_update_nothing_to_set(models, mssql_session):
    query = UpdateQuery(mssql_session, models.Customer(id=5))
    assert query.is_empty
    sql, params = query.generate_sql()
    assert sql == "UPDATE Customers SET C_id=%(C_id)s WHERE C_id=%(C_id)s;"
    assert params == {"C_id": 5}
    # nothing is sent to the server
    assert query.run() == 0


def test_select_mssql(models, mssql_session):
    query = SelectQuery(mssql_session, models.Customer, where="C_name = %(name)s",
                        params={"name": "alice"})
    sql, params = query.generate_sql()
    assert sql == (
        "SELECT 'Customer' AS MODELNAME, C_id AS PK, * FROM Customers WHERE C_name = %(name)s; "
        "SELECT 'Profile' AS MODELNAME, Customers.C_id AS PK, Profiles.* "
        "FROM Profiles RIGHT JOIN Customers ON Profiles.P_id = Customers.C_profile_id "
        "WHERE Profiles.P_id IN (SELECT C_profile_id FROM Customers WHERE C_name = %(name)s); "
        "SELECT 'Order' AS MODELNAME, O_customer_id AS PK, * FROM Orders "
        "WHERE O_customer_id IN (SELECT C_id FROM Customers WHERE C_name = %(name)s);"
    )
    assert params == {"name": "alice"}


def test_select_no_foreign_keys(models, mssql_session):
    sql, params = SelectQuery(mssql_session, models.Order, order_by="O_total DESC").generate_sql()
    assert sql == "SELECT 'Order' AS MODELNAME, O_id AS PK, * FROM Orders ORDER BY O_total DESC;"
    assert params == {}


def test_select_sqlite_join(db: DatabaseInterface, models):
    sql, _ = SelectQuery(db.get_session(), models.Customer).generate_sql()
    assert "FROM Customers LEFT JOIN Profiles ON Profiles.P_id = Customers.C_profile_id" in sql
    assert "RIGHT JOIN" not in sql


def test_page_mssql(models, mssql_session):
    query = PageQuery(mssql_session, models.Order, 2, 10, sql_pre="DECLARE @x INT;",
                      where="O_total > %(min)s", params={"min": 5})
    sql, params = query.generate_sql()
    window = ("SELECT F.O_id FROM (SELECT TOP 20 ROW_NUMBER() OVER (ORDER BY O_id) ROWINDEX, * "
              "FROM Orders WHERE O_total > %(min)s ORDER BY O_id) F "
              "WHERE F.ROWINDEX BETWEEN 11 AND 20")
    assert sql == (
        "DECLARE @x INT; SELECT COUNT(1) FROM Orders WHERE O_total > %(min)s; "
        "SELECT 'Order' AS MODELNAME, O_id AS PK, * FROM Orders "
        "WHERE O_id IN ({}) ORDER BY O_id;".format(window)
    )
    assert params == {"min": 5}


def test_page_sqlite(db: DatabaseInterface, models):
    query = PageQuery(db.get_session(), models.Order, 3, 5, fields="O_id",
                      order_by="O_total DESC")
    sql, _ = query.generate_sql()
    assert sql.startswith("SELECT COUNT(1) FROM Orders; ")
    assert ("SELECT F.O_id FROM (SELECT ROW_NUMBER() OVER (ORDER BY O_total DESC) AS ROWINDEX, "
            "O_id FROM Orders) F WHERE F.ROWINDEX BETWEEN 11 AND 15") in sql
    assert sql.endswith(" ORDER BY O_total DESC;")


def test_page_custom_from(models, mssql_session):
    query = PageQuery(mssql_session, models.Order, 1, 10,
                      sql_from="Orders JOIN Customers ON C_id = O_customer_id")
    sql, _ = query.generate_sql()
    assert sql.startswith(
        "SELECT COUNT(1) FROM Orders JOIN Customers ON C_id = O_customer_id;"
    )
    # the order of a custom FROM may not apply to the main table
    assert sql.endswith("BETWEEN 1 AND 10);")
