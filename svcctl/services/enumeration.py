"""Accumulation of enumerated service names.

Backends hand over their raw listing as an iterable of records; only
names carrying the recognized suffix are kept. The result either holds
every match or nothing at all.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from svcctl.exceptions import AllocationFailedError, EnumerationFailedError

logger = logging.getLogger(__name__)

INITIAL_CAPACITY = 10


class ServiceNameCollection:
    """Owned, growable sequence of service names with an explicit count.

    Storage starts at ``INITIAL_CAPACITY`` slots and doubles whenever it
    fills up. ``release()`` drops every element and the storage together.

    Example:
        with collect_service_names(records, ".service") as names:
            for name in names:
                print(name)
    """

    def __init__(self, capacity: int = INITIAL_CAPACITY) -> None:
        """Initialize an empty collection.

        Args:
            capacity: Number of slots allocated up front.
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._slots: list[str | None] = [None] * capacity
        self._count = 0

    @property
    def count(self) -> int:
        """Number of owned names."""
        return self._count

    @property
    def capacity(self) -> int:
        """Number of allocated slots."""
        return len(self._slots)

    def append(self, name: str) -> None:
        """Take ownership of a name, growing storage when full.

        Raises:
            AllocationFailedError: If storage cannot grow or the name cannot be
                copied. The collection is released before raising.
        """
        try:
            if self._count >= len(self._slots):
                self._grow()
            self._slots[self._count] = self._own(name)
        except MemoryError as e:
            accumulated = self._count
            self.release()
            raise AllocationFailedError(
                f"Out of memory after {accumulated} service names", accumulated
            ) from e
        self._count += 1

    def release(self) -> None:
        """Release every name and the storage. No-op when already empty."""
        self._slots = []
        self._count = 0

    def to_list(self) -> list[str]:
        """Copy the owned names into a plain list."""
        return [name for name in self._slots[: self._count] if name is not None]

    def _grow(self) -> None:
        grown: list[str | None] = [None] * max(len(self._slots) * 2, INITIAL_CAPACITY)
        grown[: self._count] = self._slots[: self._count]
        self._slots = grown

    @staticmethod
    def _own(name: str) -> str:
        return str(name)

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[str]:
        return iter(self.to_list())

    def __contains__(self, name: object) -> bool:
        return name in self._slots[: self._count]

    def __enter__(self) -> "ServiceNameCollection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


def matches_suffix(name: str, suffix: str) -> bool:
    """Check a name against the recognized suffix.

    An empty suffix accepts every name.
    """
    return not suffix or name.endswith(suffix)


def collect_service_names(
    records: Iterable[Any],
    suffix: str,
    name_of: Callable[[Any], Any] = lambda record: record,
) -> ServiceNameCollection:
    """Accumulate the names of matching records into a new collection.

    Args:
        records: Backend listing, one record per service.
        suffix: Recognized service suffix; empty keeps everything.
        name_of: Extracts the name from a record.

    Returns:
        Collection holding every matching name in backend order.

    Raises:
        AllocationFailedError: If the collection could not grow.
        EnumerationFailedError: If a record carries no usable name.
    """
    names = ServiceNameCollection()
    for record in records:
        try:
            name = name_of(record)
        except (IndexError, KeyError, TypeError) as e:
            names.release()
            raise EnumerationFailedError(f"Malformed service record: {record!r}") from e
        if not isinstance(name, str):
            names.release()
            raise EnumerationFailedError(f"Malformed service name: {name!r}")
        if matches_suffix(name, suffix):
            names.append(name)

    logger.debug("Enumerated %d service names (capacity %d)", names.count, names.capacity)
    return names
