"""
Coercion of raw column values into the declared types of fields.

.. code-block:: python3

    coerce("Active", Status)      # Coerced(value=<Status.Active: 0>, degraded=False)
    coerce(None, int)             # Coerced(value=0, degraded=False)
    coerce("banana", int)         # Coerced(value=0, degraded=True)

Coercion never raises for a value it cannot convert; it degrades to the zero value of the target
type (or None for nullable and reference types) and sets ``degraded`` on the result instead.
"""
import collections
import collections.abc
import datetime
import decimal
import enum
import logging
import typing
import uuid

from sqlweave.orm.schema import table as md_table, types as md_types

logger = logging.getLogger(__name__)

#: The result of a coercion.
#: ``degraded`` is True if the value could not be converted, and a fallback was returned instead.
Coerced = collections.namedtuple("Coerced", "value degraded")

# target type -> list of (source types, converter)
_converters = {}  # type: typing.Dict[type, typing.List[typing.Tuple[tuple, typing.Callable]]]


def register_converter(target: type, func: typing.Callable[[typing.Any], typing.Any],
                       *sources: type):
    """
    Registers a converter that produces ``target`` from values of the ``sources`` types.

    Converters are consulted for targets that are not enums or scalar types, before falling back to
    copying fields.

    .. code-block:: python3

        register_converter(Point, Point.parse, str)

    :param target: The type the converter produces.
    :param func: A callable taking the value and returning the converted value.
    :param sources: The types of value the converter accepts. Defaults to any type.
    """
    _converters.setdefault(target, []).append((sources or (object,), func))


def _to_int(value):
    if isinstance(value, str):
        return int(value.strip())

    return int(value)


def _to_bool(value):
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "t", "yes", "y", "1"):
            return True
        if text in ("false", "f", "no", "n", "0"):
            return False
        raise ValueError("'{}' is not a boolean".format(value))

    return bool(value)


def _to_decimal(value):
    if isinstance(value, float):
        # go through str() so 0.1 stays 0.1
        value = str(value)

    return decimal.Decimal(value)


def _to_datetime(value):
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time.min)
    if isinstance(value, str):
        return datetime.datetime.fromisoformat(value.strip())

    raise TypeError("Cannot convert {!r} to a datetime".format(value))


def _to_date(value):
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.date.fromisoformat(text)
        except ValueError:
            return datetime.datetime.fromisoformat(text).date()

    raise TypeError("Cannot convert {!r} to a date".format(value))


def _to_time(value):
    if isinstance(value, datetime.datetime):
        return value.time()
    if isinstance(value, str):
        return datetime.time.fromisoformat(value.strip())

    raise TypeError("Cannot convert {!r} to a time".format(value))


#: Converters for the scalar types, which can convert between each other.
_SCALAR_CONVERTERS = {
    int: _to_int,
    bool: _to_bool,
    float: float,
    decimal.Decimal: _to_decimal,
    str: str,
    datetime.datetime: _to_datetime,
    datetime.date: _to_date,
    datetime.time: _to_time,
}


def _scalar_converter(type_):
    for base in type_.__mro__:
        if base in _SCALAR_CONVERTERS:
            return _SCALAR_CONVERTERS[base]

    return None


def _parse_enum(value, type_: typing.Type[enum.Enum]) -> enum.Enum:
    if isinstance(value, enum.Enum):
        value = value.value

    text = str(value).strip()
    try:
        return type_[text]
    except KeyError:
        pass

    try:
        return type_(value)
    except ValueError:
        pass

    return type_(int(text))


def _find_converter(type_, value):
    for sources, func in _converters.get(type_, ()):
        if isinstance(value, sources):
            return func

    return None


def _writable_fields(type_) -> typing.List[typing.Tuple[str, typing.Any]]:
    if isinstance(type_, md_table.TableMeta):
        return [(col.name, col.type) for col in type_.iter_columns()]

    try:
        hints = typing.get_type_hints(type_)
    except (NameError, TypeError):
        return []

    return [(name, hint) for name, hint in hints.items()
            if typing.get_origin(hint) is not typing.ClassVar]


def _read_field(value, name: str):
    if isinstance(value, collections.abc.Mapping):
        return value[name]

    return getattr(value, name)


def _has_field(value, name: str) -> bool:
    if isinstance(value, collections.abc.Mapping):
        return name in value

    return hasattr(value, name)


def _copy_fields(value, type_):
    obb = type_()
    fields = _writable_fields(type_)
    if not fields:
        # no declared fields, copy whatever the instance starts with
        fields = [(name, object) for name in vars(obb) if not name.startswith("_")]

    for name, field_type in fields:
        if not _has_field(value, name):
            continue

        setattr(obb, name, coerce(_read_field(value, name), field_type).value)

    return obb


def coerce(value: typing.Any, type_: typing.Any) -> Coerced:
    """
    Coerces a value into a type.

    In order:

        1. Empty values (None, or anything that stringifies to an empty string) become the zero
           value of value types, or None for reference types.
        2. Values that are already instances of the type are returned unchanged.
        3. Enum types are parsed by member name, then by value.
        4. Scalar types (numbers, bools, strings, dates and times) are converted directly.
        5. Registered converters are tried. Failing that, if the type can be constructed without
           arguments, a new instance has its fields copied from the same-named fields of the
           value, coercing each one.
        6. Otherwise, the value is returned unchanged.

    :param value: The value to coerce.
    :param type_: The type to coerce into. This may be ``Optional``.
    :return: A :class:`.Coerced` result.
    """
    inner, nullable = md_types.unwrap_optional(type_)

    if value is None or str(value) == "":
        return Coerced(md_types.zero_value(inner), False)

    if not isinstance(inner, type):
        return Coerced(value, False)

    if isinstance(value, inner):
        return Coerced(value, False)

    # the fallback for enum and scalar conversions that fail
    fallback = None if nullable else md_types.zero_value(inner)

    if md_types.is_enum(inner):
        try:
            return Coerced(_parse_enum(value, inner), False)
        except (ValueError, TypeError):
            logger.debug("Could not parse {!r} as {}".format(value, inner.__name__))
            return Coerced(fallback, True)

    converter = _scalar_converter(inner)
    if converter is not None:
        try:
            return Coerced(converter(value), False)
        except (ValueError, TypeError, ArithmeticError):
            logger.debug("Could not convert {!r} to {}".format(value, inner.__name__))
            return Coerced(fallback, True)

    converter = _find_converter(inner, value)
    if converter is not None:
        try:
            return Coerced(converter(value), False)
        except (ValueError, TypeError, ArithmeticError):
            logger.debug("Converter for {} failed on {!r}".format(inner.__name__, value))
            return Coerced(value, True)

    try:
        return Coerced(_copy_fields(value, inner), False)
    except TypeError:
        # no parameterless constructor
        pass
    except Exception:
        logger.debug("Could not copy the fields of {!r} into {}".format(value, inner.__name__),
                     exc_info=True)

    return Coerced(value, True)


def _to_uuid(value):
    if isinstance(value, (bytes, bytearray)):
        if len(value) == 16:
            return uuid.UUID(bytes=bytes(value))
        value = value.decode()

    return uuid.UUID(str(value).strip())


register_converter(uuid.UUID, _to_uuid, str, bytes, bytearray)
register_converter(bytes, bytes, bytearray, memoryview)
register_converter(bytes, str.encode, str)
