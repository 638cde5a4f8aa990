"""
Node id generation.

Ids are opaque strings that are unique within a tree and never reused by the
generator that produced them. Generators are passed explicitly to the node
model so tests can construct trees deterministically.
"""

import itertools
import threading
import uuid
from typing import Protocol


class IdGenerator(Protocol):
    """Callable returning a fresh node id."""

    def __call__(self) -> str: ...


class CounterIdGenerator:
    """
    Monotonic ``<prefix>-<n>`` ids.

    Example:
        >>> ids = CounterIdGenerator("cond")
        >>> ids(), ids()
        ('cond-1', 'cond-2')
    """

    def __init__(self, prefix: str = "node", start: int = 1) -> None:
        self.prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{self.prefix}-{n}"


class UuidIdGenerator:
    """Stateless random ids (uuid4 hex)."""

    def __call__(self) -> str:
        return uuid.uuid4().hex


default_id_generator: IdGenerator = UuidIdGenerator()
