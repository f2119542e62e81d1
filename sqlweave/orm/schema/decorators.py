"""
Decorator helpers for tables.
"""
import functools


def enforce_bound(func):
    """
    Enforces that a method on a :class:`.Table` cannot be used before the table
    is bound to database via :meth:`.DatabaseInterface.bind_tables`.
    """

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        if self.registry.bind is None:
            raise RuntimeError("Table must be bound first.")
        return func(self, *args, **kwargs)

    return wrapper
