import logging
import typing

from cached_property import cached_property

from sqlweave.orm.schema import table as md_table, types as md_types
from sqlweave.sentinels import NO_DEFAULT

logger = logging.getLogger(__name__)


class Column(object):
    """
    Represents a column in a table in a database.

    .. code-block:: python3

        class User(Table, table_name="Users", prefix="U_"):
            id = Column(int, primary_key=True)
            name = Column(str)

    The ``id`` column is stored in the ``U_id`` column of the ``Users`` table, and mirrors the ID
    of records in the table when reading.

    .. code-block:: python3

        user = sess.read(User, "U_id = :id", {"id": 2})
        print(user.id)  # 2

    Columns are descriptors: on an instance they hold the row's value, on the class they return
    the Column itself.
    """

    def __init__(self, type_: typing.Any, *,
                 primary_key: bool = False,
                 default: typing.Any = NO_DEFAULT,
                 sql_type: 'typing.Union[md_types.ColumnType, typing.Type[md_types.ColumnType]]'
                 = None):
        """
        :param type_:
            The Python type of the values of this column, e.g. ``int`` or ``Optional[str]``.

        :param primary_key:
            Is this column the table's Primary Key (the unique identifier that identifies each row)?
            ``int`` primary keys are generated by the database.

        :param default:
            The value an instance starts with. This may be a callable, which is called for every
            new instance.

        :param sql_type:
            Overrides the :class:`.ColumnType` derived from ``type_``, e.g. ``BigInt`` for an
            ``int`` column.
        """
        #: The name of the column.
        #: This is automatically set when set on a table.
        self.name = None  # type: str

        #: The :class:`.Table` this Column is associated with.
        self.table = None

        #: The Python type of this column.
        self.type = type_

        #: The :class:`.ColumnType` that represents the SQL type of this column.
        self.sql_type = sql_type  # type: md_types.ColumnType
        if self.sql_type is None:
            if md_types.is_sealed(type_):
                self.sql_type = md_types.get_column_type(type_)
        elif not isinstance(self.sql_type, md_types.ColumnType):
            # assume we need to create the "default" type
            self.sql_type = self.sql_type.create_default()

        #: The default for this column.
        self.default = default

        #: If this Column is a primary key.
        self.primary_key = primary_key

    def __repr__(self):
        return "<Column table={} name={} type={}>".format(
            getattr(self.table, "__name__", None), self.name, self.type
        )

    def __set_name__(self, owner, name):
        """
        Called to update the table and the name of this Column.

        :param owner: The :class:`.Table` this Column is on.
        :param name: The str name of this column.
        """
        logger.debug("Column created with name {} on {}".format(name, owner))
        self.name = name
        self.table = owner

    def __get__(self, instance, owner):
        if instance is None:
            return self

        try:
            return instance._values[self.name]
        except KeyError:
            value = self.get_default()
            instance._values[self.name] = value
            return value

    def __set__(self, instance, value):
        instance._values[self.name] = value

    def get_default(self) -> typing.Any:
        """
        :return: The value a new row starts with.
        """
        if self.default is NO_DEFAULT:
            return None

        if callable(self.default):
            return self.default()

        return self.default

    @property
    def sealed(self) -> bool:
        """
        :return: If this column is mapped directly to a database column.
        """
        return md_types.is_sealed(self.type)

    @property
    def nullable(self) -> bool:
        """
        :return: If this column was declared as ``Optional``.
        """
        return md_types.unwrap_optional(self.type)[1]

    @property
    def value_type(self) -> bool:
        """
        :return: If this column holds a value type (which has a zero value).
        """
        return md_types.is_value_type(self.type)

    @property
    def identity(self) -> bool:
        """
        :return: If this column is a primary key generated by the database.
        """
        return self.primary_key and md_types.is_integral(self.type)

    @cached_property
    def column_name(self) -> str:
        """
        Gets the name of this column in the database, i.e the table prefix followed by the name.
        """
        table = self.table  # type: md_table.TableMeta
        return "{}{}".format(table.__prefix__, self.name)
