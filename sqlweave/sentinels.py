"""
Sentinel objects used throughout the library.
"""


class _Sentinel(object):
    def __init__(self, name: str):
        self.name = name

    def __repr__(self):
        return "<{}>".format(self.name)

    def __bool__(self):
        return False


#: No default was passed to a column.
NO_DEFAULT = _Sentinel("NO_DEFAULT")
