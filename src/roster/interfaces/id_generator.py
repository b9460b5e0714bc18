"""Port for the strategy that hands out `record_id` values."""

import abc

# pylint: disable=too-few-public-methods


class IdGenerator(abc.ABC):
    """Source of record identities.

    A persistence context calls `new_id` once per inserted record, at save
    time. Ids must be unique for the lifetime of the store and must fit the
    ``id`` columns (``roster.adapters.db.schema.ID_LENGTH`` characters).
    Generators whose ids sort in creation order give unordered fetches a
    stable oldest-first order.
    """

    @abc.abstractmethod
    def new_id(self) -> str:
        """Return an id that has never been returned before."""
