"""
Hydration of result sets into rows.

A cascading read returns one result set for the main table, then one for every foreign key of the
table. Every row carries a ``MODELNAME`` column naming the class it belongs to, and a ``PK``
column holding the primary key of the main row it is attached to.
"""
import logging
import typing

from sqlweave.orm import coercion as md_coercion, inspection as md_inspection
from sqlweave.orm.schema import relationship as md_relationship, table as md_table

logger = logging.getLogger(__name__)


def fill_row(row: 'md_table.Table', data: typing.Mapping[str, typing.Any], column_prefix: str):
    """
    Fills a row from a mapping of column name -> value.

    Columns missing from the mapping are left untouched. Values are coerced into the type of their
    column first.

    :param row: The :class:`.Table` instance to fill.
    :param data: The mapping to read column values from.
    :param column_prefix: The prefix of every column name in the mapping.
    """
    for column in type(row).iter_columns():
        if not column.sealed:
            continue

        try:
            value = data[column_prefix + column.name]
        except KeyError:
            continue

        coerced = md_coercion.coerce(value, column.type)
        try:
            md_inspection.set_field(row, column.name, coerced.value)
        except Exception:
            logger.debug("Failed to set {} on {}".format(column.name, type(row).__name__),
                         exc_info=True)


def _find_foreign_key(foreign_keys: 'typing.Sequence[md_relationship.ForeignKeyDescriptor]',
                      model_name: str) -> 'typing.Optional[md_relationship.ForeignKeyDescriptor]':
    # if two keys relate to the same class, the first one wins
    for fk in foreign_keys:
        if fk.related_type.__name__ == model_name:
            return fk

    return None


def hydrate(result_sets: typing.Sequence[typing.Sequence[typing.Mapping[str, typing.Any]]],
            table: 'md_table.TableMeta', column_prefix: str,
            foreign_keys: 'typing.Sequence[md_relationship.ForeignKeyDescriptor]' = ()) \
        -> 'typing.List[md_table.Table]':
    """
    Turns the result sets of a cascading read into rows.

    :param result_sets: The result sets of the read, the main rows first.
    :param table: The :class:`.Table` of the main rows.
    :param column_prefix: The column prefix of the main rows.
    :param foreign_keys: The :class:`.ForeignKeyDescriptor` objects of the table.
    :return: A list of the main rows, in the order they were selected.
    """
    if not result_sets:
        return []

    rows = []
    for data in result_sets[0]:
        row = table()
        fill_row(row, data, column_prefix)
        rows.append(row)

    if not foreign_keys or len(result_sets) < 2:
        return rows

    # str() so that int and str keys from different drivers still match
    by_pk = {}
    for row in rows:
        by_pk.setdefault(str(md_inspection.get_pk(row)), row)

    for result_set in result_sets[1:]:
        for data in result_set:
            model_name = data.get("MODELNAME")
            fk = _find_foreign_key(foreign_keys, model_name)
            if fk is None:
                logger.warning("Got a row of {} which does not match any foreign key of {}"
                               .format(model_name, table.__name__))
                continue

            try:
                owner = by_pk[str(data.get("PK"))]
            except KeyError:
                continue

            related = fk.related_type()
            fill_row(related, data, md_inspection.resolve(fk.related_type).column_prefix)

            if fk.cardinality is md_relationship.Cardinality.ONE_TO_MANY:
                items = md_inspection.get_field(owner, fk.field_name)
                if items is None:
                    items = []
                    md_inspection.set_field(owner, fk.field_name, items)
                items.append(related)
            else:
                md_inspection.set_field(owner, fk.field_name, related)

    return rows
