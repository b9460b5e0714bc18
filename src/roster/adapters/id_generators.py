"""`IdGenerator` implementations used by the persistence contexts."""

import itertools
import threading
import uuid

from ulid import monotonic

from roster.interfaces.id_generator import IdGenerator

# pylint: disable=too-few-public-methods


class ULIDGenerator(IdGenerator):
    """Monotonic ULIDs, the default for both persistence contexts.

    Two records saved within the same millisecond still get increasing ids,
    which keeps ``fetch`` without an ``order`` in insertion order.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def new_id(self) -> str:
        with self._lock:
            return str(monotonic.new())


class UUIDv4Generator(IdGenerator):
    """Random ids for stores that must not leak creation order."""

    def new_id(self) -> str:
        return str(uuid.uuid4())


class SimpleIdGenerator(IdGenerator):
    """Counter ids (``"000…001"``, ``"000…002"``) that are easy to read in tests.

    The padding keeps string order equal to numeric order.
    """

    def __init__(self, length: int = 26) -> None:
        self._length = length
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def new_id(self) -> str:
        with self._lock:
            return str(next(self._counter)).zfill(self._length)
