"""
Miscellaneous utilities used throughout the library.
"""
import typing


def separate_statements(sql: str) -> typing.Iterator[str]:
    """
    Separates a SQL script into individual statements.

    Semicolons inside single-quoted literals do not split a statement.
    """
    start = idx = 0
    quoted = False
    sql = " {} ".format(sql)  # padding to avoid IndexErrors
    while idx < len(sql):
        char = sql[idx]
        if not quoted:
            if char == ";":
                stmt = sql[start:idx].strip()
                if stmt:
                    yield stmt
                start = idx + 1
            quoted = char == "'"

        else:
            if char == "'":
                if sql[idx + 1] == "'":
                    idx += 1
                else:
                    quoted = False
        idx += 1

    stmt = sql[start:-1].strip()
    if stmt:
        yield stmt


def last_segment(name: str) -> str:
    """
    Strips any schema qualifier from a dotted table name.

    .. code-block:: python3

        last_segment("dbo.Users")  # "Users"
    """
    return name.split(".")[-1]
