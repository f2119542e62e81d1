"""
Tests hydrating result sets into rows.
"""
import decimal
import logging
import typing

from sqlweave.orm import inspection
from sqlweave.orm.hydration import hydrate
from sqlweave.orm.pager import Pager
from sqlweave.orm.schema.column import Column
from sqlweave.orm.schema.relationship import ForeignKey
from sqlweave.orm.schema.table import table_base


def _customer(id_, name, **kwargs):
    row = {"MODELNAME": "Customer", "PK": id_, "C_id": id_, "C_name": name}
    row.update(kwargs)
    return row


def _hydrate(models, sets):
    return hydrate(sets, models.Customer, "C_", inspection.foreign_keys(models.Customer))


def test_main_rows(models):
    rows = _hydrate(models, [[
        _customer(1, "alice", C_age=None, C_status="1", C_balance="2.50"),
        _customer(2, "bob"),
    ]])

    assert [type(r) for r in rows] == [models.Customer, models.Customer]
    alice, bob = rows
    assert (alice.id, alice.name) == (1, "alice")
    assert alice.age == 0
    assert alice.status is models.Status.Active
    assert alice.balance == decimal.Decimal("2.50")
    # missing columns are left at their default
    assert bob.age is None
    assert bob.orders is None


def test_one_to_many(models):
    rows = _hydrate(models, [
        [_customer(1, "alice"), _customer(2, "bob")],
        [],
        [
            {"MODELNAME": "Order", "PK": 1, "O_id": 10, "O_customer_id": 1, "O_total": 1.0},
            {"MODELNAME": "Order", "PK": 2, "O_id": 11, "O_customer_id": 2, "O_total": 2.0},
            {"MODELNAME": "Order", "PK": 1, "O_id": 12, "O_customer_id": 1, "O_total": 3.0},
            {"MODELNAME": "Order", "PK": "1", "O_id": 13, "O_customer_id": 1, "O_total": 4.0},
        ],
    ])

    alice, bob = rows
    assert [o.id for o in alice.orders] == [10, 12, 13]
    assert [o.total for o in alice.orders] == [1.0, 3.0, 4.0]
    assert [o.id for o in bob.orders] == [11]
    assert alice.profile is None


def test_one_to_one(models):
    rows = _hydrate(models, [
        [_customer(1, "alice", C_profile_id=7), _customer(2, "bob")],
        [{"MODELNAME": "Profile", "PK": 1, "P_id": 7, "P_bio": "hello"}],
    ])

    alice, bob = rows
    assert isinstance(alice.profile, models.Profile)
    assert (alice.profile.id, alice.profile.bio) == (7, "hello")
    assert bob.profile is None


def test_unmatched_rows(models, caplog):
    with caplog.at_level(logging.WARNING):
        rows = _hydrate(models, [
            [_customer(1, "alice")],
            [
                {"MODELNAME": "Invoice", "PK": 1, "I_id": 1},
                {"MODELNAME": "Order", "PK": 99, "O_id": 10},
            ],
        ])

    assert rows[0].orders is None
    assert "Invoice" in caplog.text


def test_first_match_wins():
    Table = table_base()

    class Book(Table, prefix="B_"):
        id = Column(int, primary_key=True)
        author_id = Column(int)

    class Author(Table, prefix="A_"):
        id = Column(int, primary_key=True)
        books = ForeignKey("author_id", typing.List[Book])
        drafts = ForeignKey("author_id", typing.List[Book])

    rows = hydrate(
        [
            [{"A_id": 1}],
            [{"MODELNAME": "Book", "PK": 1, "B_id": 5, "B_author_id": 1}],
            [{"MODELNAME": "Book", "PK": 1, "B_id": 6, "B_author_id": 1}],
        ],
        Author, "A_", inspection.foreign_keys(Author)
    )

    # every Book row goes to the first relationship to Book
    assert [b.id for b in rows[0].books] == [5, 6]
    assert rows[0].drafts is None


def test_column_prefix_override(models):
    rows = hydrate([[{"X_id": 3, "X_name": "carol"}]], models.Customer, "X_")
    assert (rows[0].id, rows[0].name) == (3, "carol")


def test_empty():
    assert hydrate([], None, "") == []


def test_pager(models):
    pager = Pager.from_result_sets(
        [[{"COUNT(1)": 25}], [_customer(1, "alice")]],
        models.Customer, "C_", inspection.foreign_keys(models.Customer)
    )
    assert pager.record_count == 25
    assert [c.name for c in pager.data] == ["alice"]

    pager.page_size = 10
    assert pager.page_count == 3
    assert repr(pager) == "<Pager page_number=0 page_size=10 record_count=25 rows=1>"
