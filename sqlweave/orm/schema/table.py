"""
Table objects.
"""

import collections
import logging
import typing
from collections import OrderedDict

from sqlweave import db as md_db
from sqlweave.exc import ConfigurationError
from sqlweave.orm.schema import column as md_column, relationship as md_relationship
from sqlweave.orm.schema.decorators import enforce_bound

logger = logging.getLogger(__name__)

#: The resolved table shape of a model class.
TableMetadata = collections.namedtuple("TableMetadata", "table_name primary_key column_prefix")


class TableRegistry(object):
    """
    The registry of tables for one :func:`.table_base`.
    This stores every table class by name, and resolves (and remembers) their metadata and
    relationships.

    .. code-block:: python3

        registry = TableRegistry()
        Table = table_base(registry=registry)

    Tables are registered when their class is created, so the registry is complete once the
    modules declaring them are imported. After that it is only read.
    """

    def __init__(self):
        #: A registry of class name -> table object.
        self.tables = OrderedDict()

        #: The DB object bound to this registry.
        self.bind = None  # type: md_db.DatabaseInterface

        self._metadata = {}
        self._foreign_keys = {}

    def register_table(self, tbl: 'TableMeta') -> 'TableMeta':
        """
        Registers a new table object.

        :param tbl: The table to register.
        :raises ConfigurationError: If the table does not declare exactly one primary key.
        """
        pk_columns = [col for col in tbl.iter_columns() if col.primary_key]
        if not pk_columns:
            raise ConfigurationError("Table {} has no primary key - mark exactly one column with "
                                     "primary_key=True".format(tbl.__name__))
        if len(pk_columns) > 1:
            raise ConfigurationError("Table {} has more than one primary key ({})"
                                     .format(tbl.__name__, ", ".join(c.name for c in pk_columns)))

        tbl.registry = self
        self.tables[tbl.__name__] = tbl
        return tbl

    def get_table(self, table_name: str) -> 'typing.Type[Table]':
        """
        Gets a table from the current registry.

        :param table_name: The class name, or the table name, of the table to get.
        :return: A :class:`.Table` object, or None if no table was found.
        """
        try:
            return self.tables[table_name]
        except KeyError:
            # we can load this from the table name instead
            for table in self.tables.values():
                if table.__tablename__ == table_name:
                    return table
            else:
                return None

    def resolve(self, tbl: 'TableMeta') -> TableMetadata:
        """
        Resolves the :class:`.TableMetadata` of a table.
        """
        try:
            return self._metadata[tbl]
        except KeyError:
            pass

        if self.tables.get(tbl.__name__) is not tbl or tbl.primary_key is None:
            raise ConfigurationError("Table {} is not registered".format(tbl.__name__))

        md = TableMetadata(tbl.__tablename__, tbl.primary_key.name, tbl.__prefix__)
        self._metadata[tbl] = md
        return md

    def foreign_keys(self, tbl: 'TableMeta') \
            -> 'typing.List[md_relationship.ForeignKeyDescriptor]':
        """
        Resolves the foreign key relationships of a table, in declaration order.
        """
        try:
            return self._foreign_keys[tbl]
        except KeyError:
            pass

        fks = [fk.resolve() for fk in tbl.iter_foreign_keys()]
        logger.debug("Resolved foreign keys of {}: {}".format(tbl.__name__, fks))
        self._foreign_keys[tbl] = fks
        return fks


class TableMeta(type):
    """
    The metaclass for a table object. This represents the "type" of a table class.
    """

    def __prepare__(*args, **kwargs):
        # this is required so that columns are ordered.
        return OrderedDict()

    def __new__(mcs, name: str, bases: tuple, class_body: dict,
                register: bool = True, *args, **kwargs):
        # usually a cloned class
        # so we just skip it directly
        if register is False:
            return type.__new__(mcs, name, bases, class_body)

        columns = OrderedDict()
        foreign_keys = OrderedDict()
        for base in reversed(bases):
            columns.update(getattr(base, "_columns", {}))
            foreign_keys.update(getattr(base, "_foreign_keys", {}))

        for attr_name, value in class_body.items():
            if isinstance(value, md_column.Column):
                columns[attr_name] = value
            elif isinstance(value, md_relationship.ForeignKey):
                foreign_keys[attr_name] = value

        class_body["_columns"] = columns
        class_body["_foreign_keys"] = foreign_keys
        class_body["__tablename__"] = kwargs.get("table_name", name)
        class_body["__prefix__"] = kwargs.get("prefix", "")

        return type.__new__(mcs, name, bases, class_body)

    def __init__(self, tblname: str, tblbases: tuple, class_body: dict, register: bool = True,
                 *args, **kwargs):
        """
        Creates a new Table instance.

        :param register: Should this table be registered in the TableRegistry?
        :param table_name: The name for this table. Defaults to the class name.
        :param prefix: The prefix of every column name of this table. Defaults to no prefix.
        """
        super().__init__(tblname, tblbases, class_body)

        if register is False:
            return
        elif not hasattr(self, "registry"):
            raise TypeError("Table {} has been created but has no registry - did you subclass "
                            "Table directly instead of a clone?".format(tblname))

        #: The primary key column for this table.
        self._primary_key = next((col for col in self.iter_columns() if col.primary_key), None)

        logger.debug("Registered new table {}".format(tblname))
        self.registry.register_table(self)

    def __repr__(self):
        try:
            return "<Table object='{}' name='{}'>".format(self.__name__, self.__tablename__)
        except AttributeError:
            return super().__repr__()

    @property
    def primary_key(self) -> 'md_column.Column':
        """
        :return: The primary key :class:`.Column` of this table.
        """
        return self._primary_key

    @property
    def columns(self) -> 'typing.List[md_column.Column]':
        """
        :return: A list of :class:`.Column` this Table has.
        """
        return list(self.iter_columns())


class Table(metaclass=TableMeta, register=False):
    """
    The "base" class for all tables. This class is not actually directly used; instead
    :meth:`.table_base` should be called to get a fresh clone.
    """

    def __init__(self, **kwargs):
        #: A mapping of field name -> current value for this row.
        self._values = {}

        for name, value in kwargs.items():
            if name not in self._columns and name not in self._foreign_keys:
                raise TypeError("Unexpected row parameter: '{}'".format(name))

            setattr(self, name, value)

    # Class methods
    @classmethod
    @enforce_bound
    def create(cls) -> int:
        """
        Creates a table with this schema in the database.
        """
        return cls.registry.bind.get_ddl_session().create_table(cls)

    @classmethod
    def iter_columns(cls) -> 'typing.Generator[md_column.Column, None, None]':
        """
        :return: A generator that yields :class:`.Column` objects for this table.
        """
        for col in cls._columns.values():
            yield col

    @classmethod
    def iter_foreign_keys(cls) -> 'typing.Generator[md_relationship.ForeignKey, None, None]':
        """
        :return: A generator that yields :class:`.ForeignKey` objects for this table.
        """
        for fk in cls._foreign_keys.values():
            yield fk

    @classmethod
    def get_column(cls, column_name: str) -> 'typing.Union[md_column.Column, None]':
        """
        Gets a column by name.

        :param column_name: The column name to lookup.

            This can be one of the following:
                - The column's ``name``
                - The column's ``column_name``, i.e with the table prefix

        :return: The :class:`.Column` associated with that name, or None if no column was found.
        """
        try:
            return cls._columns[column_name]
        except KeyError:
            for column in cls._columns.values():
                if column.column_name == column_name:
                    return column

        return None

    @classmethod
    def get_foreign_key(cls, name: str) -> 'typing.Union[md_relationship.ForeignKey, None]':
        """
        Gets a foreign key relationship by field name.

        :param name: The name of the field to get.
        :return: The :class:`.ForeignKey` associated with that name, or None if it doesn't exist.
        """
        return cls._foreign_keys.get(name)

    def __repr__(self):
        gen = ("{}={!r}".format(col.name, getattr(self, col.name)) for col in self.iter_columns())
        return "<{} {}>".format(type(self).__name__, " ".join(gen))

    @property
    def primary_key(self) -> typing.Any:
        """
        Gets the primary key value for this row.
        """
        return getattr(self, type(self).primary_key.name)


def table_base(name: str = "Table", registry: 'TableRegistry' = None):
    """
    Gets a new base object to use for OO-style tables.
    This object is the parent of all tables created in the object-oriented style; it provides the
    registry that relationships are resolved through.

    To use this object, you call this function to create the new object, and subclass it in your
    table classes:

    .. code-block:: python3

        Table = table_base()

        class User(Table, table_name="Users", prefix="U_"):
            id = Column(int, primary_key=True)
            ...

    Binding the base object to the database object is needed for :meth:`.Table.create`:

    .. code-block:: python3

        db.bind_tables(Table.registry)
        User.create()

    :param name: The name of the new class to produce. By default, it is ``Table``.
    :param registry: The :class:`.TableRegistry` to use.
    :return: A new Table class that can be used for OO tables.
    """
    if registry is None:
        registry = TableRegistry()

    # This is the best way of cloning the Table object, instead of using `type()`.
    # It works on all Python versions, and is directly calling the metaclass.
    clone = TableMeta.__new__(TableMeta, name, (Table,), {"registry": registry}, register=False)
    return clone
