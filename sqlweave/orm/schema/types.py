"""
Column types, and the static map from Python field types to them.

Every column is declared with a plain Python type:

.. code-block:: python3

    class User(Table):
        id = Column(int, primary_key=True)
        name = Column(str)
        age = Column(typing.Optional[int])

The Python type decides three things:

    - whether the column is *sealed* (mapped directly to a database column at all)
    - whether it is a *value type* (has a zero value, like ``0`` for ``int``) or a reference type
    - which :class:`.ColumnType` is used in CREATE TABLE statements
"""
import abc
import datetime
import decimal
import enum
import types
import typing
import uuid

_UNION_TYPES = (typing.Union,)
if hasattr(types, "UnionType"):
    # PEP 604 unions, ``int | None``
    _UNION_TYPES += (types.UnionType,)


class ColumnType(abc.ABC):
    """
    Represents the SQL type of a column.

    The only method that is required to be implemented on children is :meth:`.ColumnType.sql` -
    which is the generic type name. Dialects may rename a type through their
    :attr:`.BaseDialect.type_names`.
    """

    #: If this type holds unbounded text or binary data.
    unbounded = False

    @abc.abstractmethod
    def sql(self) -> str:
        """
        :return: The str SQL name of this type.
        """

    @classmethod
    def create_default(cls) -> 'ColumnType':
        """
        Creates the default object for this type in the event that a type is passed to a column,
        instead of an instance.
        """
        return cls()

    def __repr__(self):
        return "<{} sql='{}'>".format(type(self).__name__, self.sql())


class Integer(ColumnType):
    """
    Represents an INTEGER type.

    .. warning::
        This represents a 32-bit integer (-2**31 to 2**31-1)
    """

    def sql(self):
        return "INTEGER"


class SmallInt(Integer):
    """
    Represents a SMALLINT type.
    """

    def sql(self):
        return "SMALLINT"


class TinyInt(Integer):
    """
    Represents a TINYINT type.
    """

    def sql(self):
        return "TINYINT"


class BigInt(Integer):
    """
    Represents a BIGINT type.
    """

    def sql(self):
        return "BIGINT"


class Real(ColumnType):
    """
    Represents a REAL type (single precision).
    """

    def sql(self):
        return "REAL"


class Float(ColumnType):
    """
    Represents a FLOAT type (double precision).
    """

    def sql(self):
        return "FLOAT"


class Numeric(ColumnType):
    """
    Represents a DECIMAL type.
    """

    def __init__(self, precision: int = 18, scale: int = 4):
        #: The total number of digits.
        self.precision = precision

        #: The number of digits after the decimal point.
        self.scale = scale

    def sql(self):
        return "DECIMAL({}, {})".format(self.precision, self.scale)


class Boolean(ColumnType):
    """
    Represents a BOOL type.
    """

    def sql(self):
        return "BOOLEAN"


class String(ColumnType):
    """
    Represents an unbounded character type.
    """
    unbounded = True

    def sql(self):
        return "TEXT"


class Binary(ColumnType):
    """
    Represents an unbounded binary type.
    """
    unbounded = True

    def sql(self):
        return "BLOB"


class Timestamp(ColumnType):
    """
    Represents a TIMESTAMP type.
    """

    def sql(self):
        return "TIMESTAMP"


class Date(ColumnType):
    """
    Represents a DATE type.
    """

    def sql(self):
        return "DATE"


class Time(ColumnType):
    """
    Represents a TIME type.
    """

    def sql(self):
        return "TIME"


class Uuid(ColumnType):
    """
    Represents a UUID type.
    """

    def sql(self):
        return "CHAR(36)"


#: The static map of Python value types to column types.
#: This is read-only; it is built once at import and never written to.
TYPE_MAP = types.MappingProxyType({
    int: Integer,
    bool: Boolean,
    float: Float,
    decimal.Decimal: Numeric,
    str: String,
    bytes: Binary,
    datetime.datetime: Timestamp,
    datetime.date: Date,
    datetime.time: Time,
    uuid.UUID: Uuid,
})

#: The zero value of every value type.
ZERO_VALUES = types.MappingProxyType({
    int: 0,
    bool: False,
    float: 0.0,
    decimal.Decimal: decimal.Decimal(0),
    datetime.datetime: datetime.datetime.min,
    datetime.date: datetime.date.min,
    datetime.time: datetime.time.min,
    uuid.UUID: uuid.UUID(int=0),
})


def unwrap_optional(type_) -> typing.Tuple[typing.Any, bool]:
    """
    Unwraps ``Optional[X]`` into ``X``.

    :return: A two item tuple, the underlying type and whether it was optional.
    """
    if typing.get_origin(type_) in _UNION_TYPES:
        args = [arg for arg in typing.get_args(type_) if arg is not type(None)]
        if len(args) == 1 and len(args) < len(typing.get_args(type_)):
            return args[0], True

    return type_, False


def is_enum(type_) -> bool:
    return isinstance(type_, type) and issubclass(type_, enum.Enum)


def _lookup(mapping: typing.Mapping, type_):
    for base in type_.__mro__:
        if base in mapping:
            return mapping[base]

    raise KeyError(type_)


def is_sealed(type_) -> bool:
    """
    Checks if a declared field type is sealed, i.e it is stored directly in one column.

    Sealed types are the scalar types of the type map, enums, and ``Optional`` of either.
    """
    inner, _ = unwrap_optional(type_)
    if not isinstance(inner, type):
        return False

    if is_enum(inner):
        return True

    try:
        _lookup(TYPE_MAP, inner)
    except KeyError:
        return False

    return True


def is_value_type(type_) -> bool:
    """
    Checks if a declared field type is a value type (including nullable value types).
    """
    inner, _ = unwrap_optional(type_)
    if not isinstance(inner, type):
        return False

    if is_enum(inner):
        return True

    try:
        _lookup(ZERO_VALUES, inner)
    except KeyError:
        return False

    return True


def is_integral(type_) -> bool:
    """
    Checks if a declared field type is a fixed-width integer (and therefore an identity when it is
    a primary key).
    """
    return isinstance(type_, type) and issubclass(type_, int) \
        and not issubclass(type_, (bool, enum.Enum))


def enum_zero(type_: typing.Type[enum.Enum]) -> typing.Optional[enum.Enum]:
    """
    Gets the zero value of an enum: the member whose value is ``0``, else the first member.
    """
    first = None
    for member in type_:
        if member.value == 0:
            return member
        if first is None:
            first = member

    return first


def zero_value(type_) -> typing.Any:
    """
    Gets the zero value of a declared field type.

    Value types (and nullable value types) return the zero value of the underlying type; reference
    types return None.
    """
    inner, _ = unwrap_optional(type_)
    if not isinstance(inner, type):
        return None

    if is_enum(inner):
        return enum_zero(inner)

    try:
        return _lookup(ZERO_VALUES, inner)
    except KeyError:
        return None


def get_column_type(type_) -> ColumnType:
    """
    Gets the :class:`.ColumnType` for a sealed Python type.

    Enums are stored by value, as integers if every value is an integer and as strings otherwise.
    """
    inner, _ = unwrap_optional(type_)
    if is_enum(inner):
        if all(isinstance(member.value, int) for member in inner):
            return Integer.create_default()
        return String.create_default()

    return _lookup(TYPE_MAP, inner).create_default()
