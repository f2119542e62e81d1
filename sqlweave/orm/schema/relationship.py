"""
Relationship helpers.
"""
import collections
import collections.abc
import enum
import typing

from cached_property import cached_property

from sqlweave.exc import ConfigurationError
from sqlweave.orm.schema import table as md_table

#: The origins of generic types that declare a one to many relationship.
_COLLECTION_ORIGINS = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)


class Cardinality(enum.Enum):
    #: The field holds a single related row.
    ONE_TO_ONE = 1

    #: The field holds a list of related rows.
    ONE_TO_MANY = 2


#: A resolved foreign key relationship.
ForeignKeyDescriptor = collections.namedtuple(
    "ForeignKeyDescriptor", "field_name foreign_key cardinality related_type"
)


def _type_name(type_) -> str:
    if isinstance(type_, str):
        return type_

    if isinstance(type_, typing.ForwardRef):
        return type_.__forward_arg__

    return type_.__name__


class ForeignKey(object):
    """
    Represents a foreign key relationship to another table. The field this is assigned to is filled
    with the related rows when reading.

    .. code-block:: python3

        class User(Table, table_name="Users", prefix="U_"):
            id = Column(int, primary_key=True)
            profile_id = Column(int)

            # the fk column is on this table, so this is one to one
            profile = ForeignKey("profile_id", "Profile")

            # the fk column is on the Orders table, and a list makes this one to many
            orders = ForeignKey("user_id", typing.List["Order"])

    The first argument names the foreign key *field*; the column name is derived using the prefix
    of the table the field lives on. If the owning table has a column with that name, the key
    references the related table's primary key. Otherwise, the column lives on the related table
    and references this table's primary key.

    Related tables can be named by string; they are looked up in the table registry when the
    relationship is first resolved.
    """

    def __init__(self, foreign_key: str, type_: typing.Any):
        """
        :param foreign_key: The name of the foreign key field.
        :param type_: The related table, or a list of it for one to many relationships.
        """
        #: The name of the foreign key field.
        self.foreign_key = foreign_key

        #: The declared type of this relationship.
        self.type = type_

        #: The owner table for this relationship.
        self.owner_table = None

        #: The name of this relationship.
        self.name = None  # type: str

    def __set_name__(self, owner, name):
        self.owner_table = owner
        self.name = name

    def __repr__(self):
        return "<ForeignKey '{}.{}' ({}) -> '{}'>".format(
            getattr(self.owner_table, "__name__", None), self.name, self.foreign_key,
            self.related_name
        )

    def __get__(self, instance, owner):
        if instance is None:
            return self

        return instance._values.get(self.name)

    def __set__(self, instance, value):
        instance._values[self.name] = value

    @cached_property
    def cardinality(self) -> Cardinality:
        """
        :return: The :class:`.Cardinality` of this relationship, derived from the declared type.
        """
        if typing.get_origin(self.type) in _COLLECTION_ORIGINS:
            return Cardinality.ONE_TO_MANY

        return Cardinality.ONE_TO_ONE

    @cached_property
    def related_name(self) -> str:
        """
        :return: The class name of the related table.
        """
        if self.cardinality is Cardinality.ONE_TO_MANY:
            return _type_name(typing.get_args(self.type)[0])

        return _type_name(self.type)

    def resolve(self) -> ForeignKeyDescriptor:
        """
        Resolves this relationship into a :class:`.ForeignKeyDescriptor`, looking up the related
        table in the registry of the owner table if it was named by string.
        """
        if self.cardinality is Cardinality.ONE_TO_MANY:
            related = typing.get_args(self.type)[0]
        else:
            related = self.type

        if not isinstance(related, md_table.TableMeta):
            related = self.owner_table.registry.get_table(self.related_name)
            if related is None:
                raise ConfigurationError("No such table '{}' exists (from {})"
                                         .format(self.related_name, self))

        return ForeignKeyDescriptor(self.name, self.foreign_key, self.cardinality, related)
