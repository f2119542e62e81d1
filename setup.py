import sys
from pathlib import Path

from setuptools import setup

if sys.version_info[0:2] < (3, 8):
    raise RuntimeError("This package requires Python 3.8+.")

setup(
    name="sqlweave",
    version="0.1.0",
    packages=[
        "sqlweave",
        "sqlweave.orm",
        "sqlweave.orm.schema",
        "sqlweave.orm.ddl",
        # namespace packages yay
        "sqlweave.backends",
        # sqlite3 backend
        "sqlweave.backends.sqlite3",
        # sql server backend
        "sqlweave.backends.mssql",
    ],
    license="MIT",
    description="A declaration-driven mapper between Python classes and SQL",
    long_description=Path(__file__).with_name("README.rst").read_text(encoding="utf-8"),
    install_requires=[
        "cached_property>=1.3.0",
    ],
    extras_require={
        "mssql": [
            "pymssql>=2.2",
        ],
        "test": [
            "pytest",
            "pytest-cov",
        ],
    },
    python_requires=">=3.8",
)
