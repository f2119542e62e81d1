"""
DDL helpers.

.. currentmodule:: sqlweave.orm.ddl

.. autosummary::
    :toctree:

    ddlsession
"""
