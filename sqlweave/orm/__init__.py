"""
The core code for the ORM.

.. currentmodule:: sqlweave.orm

.. autosummary::
    :toctree:

    schema
    ddl

    query
    hydration
    coercion
    pager
    session

    inspection

"""
