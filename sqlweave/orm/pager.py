"""
Page envelopes.
"""
import typing

from sqlweave.orm import hydration as md_hydration
from sqlweave.orm.schema import relationship as md_relationship, table as md_table


class Pager(object):
    """
    Represents one page of rows.

    .. code-block:: python3

        pager = sess.read_page(User, 2, 10)
        print(pager.record_count)  # every matching row, not just this page
        for user in pager.data:
            ...
    """

    def __init__(self, page_number: int = 0, page_size: int = 0, record_count: int = 0,
                 data: 'typing.List[md_table.Table]' = None):
        #: The number of this page, starting at 1.
        self.page_number = page_number

        #: The number of rows on a full page.
        self.page_size = page_size

        #: The total number of rows across every page.
        self.record_count = record_count

        #: The rows on this page.
        self.data = data if data is not None else []

    def __repr__(self):
        return "<Pager page_number={} page_size={} record_count={} rows={}>".format(
            self.page_number, self.page_size, self.record_count, len(self.data)
        )

    @property
    def page_count(self) -> int:
        """
        :return: The number of pages needed for every row, or 0 if the page size is unknown.
        """
        if self.page_size <= 0:
            return 0

        return -(-self.record_count // self.page_size)

    @classmethod
    def from_result_sets(cls, result_sets: typing.Sequence[typing.Sequence[typing.Mapping]],
                         table: 'md_table.TableMeta', column_prefix: str,
                         foreign_keys: 'typing.Sequence[md_relationship.ForeignKeyDescriptor]'
                         = ()) -> 'Pager':
        """
        Creates a pager from the result sets of a paging batch: the count first, then the result
        sets of a cascading read.
        """
        pager = cls()
        if not result_sets:
            return pager

        if result_sets[0]:
            # the first column of the first row
            pager.record_count = int(next(iter(result_sets[0][0].values())))

        pager.data = md_hydration.hydrate(result_sets[1:], table, column_prefix, foreign_keys)
        return pager
