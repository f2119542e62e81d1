"""
Exceptions for sqlweave.
"""


class DatabaseException(Exception):
    """
    The base class for ALL exceptions.

    Catch this if you wish to catch any custom exception raised inside the lib.
    """


class SchemaError(DatabaseException):
    """
    Raised when there is an error in the database schema.
    """


class ConfigurationError(SchemaError):
    """
    Raised when a model class is declared or configured incorrectly, e.g. it has no primary key.
    """


class UnsupportedOperationException(DatabaseException):
    """
    Raised when a dialect or connector cannot perform an operation.
    """


class NoSuchColumnError(DatabaseException):
    """
    Raised when a non-existing column is requested.
    """
