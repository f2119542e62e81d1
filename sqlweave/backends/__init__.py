"""
SQL driver backends for sqlweave.

.. currentmodule:: sqlweave.backends

.. autosummary::
    :toctree:

    sqlite3
    mssql

"""
from pkgutil import extend_path

__path__ = extend_path(__path__, __name__)
