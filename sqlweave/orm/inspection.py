"""
Inspection module - contains utilities for inspecting Table objects and Row objects.

This is where the metadata of a table class is resolved, and where the fields of a row are read and
written by the rest of the ORM.
"""
import typing

from sqlweave.exc import ConfigurationError, NoSuchColumnError
from sqlweave.orm.schema import relationship as md_relationship, table as md_table


def _ensure_table(tbl) -> 'md_table.TableMeta':
    if not isinstance(tbl, md_table.TableMeta) or not hasattr(tbl, "_columns"):
        raise ConfigurationError("{!r} is not a mapped table class".format(tbl))

    return tbl


def resolve(tbl: 'typing.Type[md_table.Table]') -> 'md_table.TableMetadata':
    """
    Resolves the table name, primary key field and column prefix of a table class.

    .. code-block:: python3

        md = resolve(User)
        print(md.table_name, md.primary_key, md.column_prefix)  # Users id U_

    :param tbl: The :class:`.Table` class to inspect.
    :raises ConfigurationError: If the class is not a table with exactly one primary key.
    """
    return _ensure_table(tbl).registry.resolve(tbl)


def foreign_keys(tbl: 'typing.Type[md_table.Table]') \
        -> 'typing.List[md_relationship.ForeignKeyDescriptor]':
    """
    Gets the :class:`.ForeignKeyDescriptor` objects of a table class, in declaration order.

    :param tbl: The :class:`.Table` class to inspect.
    """
    return _ensure_table(tbl).registry.foreign_keys(tbl)


def _ensure_field(row: 'md_table.Table', name: str):
    tbl = type(row)
    if name not in tbl._columns and name not in tbl._foreign_keys:
        raise NoSuchColumnError("{} has no field {}".format(tbl.__name__, name))


def get_field(row: 'md_table.Table', name: str) -> typing.Any:
    """
    Gets the value of a field on a row.

    :raises NoSuchColumnError: If the row has no such column or foreign key.
    """
    _ensure_field(row, name)
    return getattr(row, name)


def set_field(row: 'md_table.Table', name: str, value: typing.Any):
    """
    Sets the value of a field on a row.

    :raises NoSuchColumnError: If the row has no such column or foreign key.
    """
    _ensure_field(row, name)
    setattr(row, name, value)


def get_pk(row: 'md_table.Table') -> typing.Any:
    """
    Gets the primary key for a Table row.

    :param row: The :class:`.Table` instance to extract the PK from.
    """
    return get_field(row, resolve(type(row)).primary_key)
