"""
Code for ORM schema objects.

.. currentmodule:: sqlweave.orm.schema

.. autosummary::
    :toctree:

    table
    column
    relationship

    types
    decorators

"""
