"""Bounded calendar day sequence.

Yields every day of an inclusive ``[start, end]`` range in ascending order.
The sequence has a fixed capacity; ranges longer than it are rejected up
front rather than truncated.
"""
import logging
from datetime import date, timedelta
from typing import Iterator

from models.errors import SpineCapacityError

logger = logging.getLogger(__name__)

# 12 binary-weighted columns, 2^0 .. 2^11
SEQUENCE_CAPACITY = 2 ** 12


def days_in_range(start: date, end: date) -> int:
    """Number of days in ``[start, end]``; zero when ``end < start``."""
    return max((end - start).days + 1, 0)


def check_capacity(start: date, end: date, capacity: int = SEQUENCE_CAPACITY) -> int:
    """Check that the range fits the sequence capacity.

    Args:
        start: First day, inclusive
        end: Last day, inclusive
        capacity: Maximum number of days the sequence may produce

    Returns:
        Number of days in the range

    Raises:
        SpineCapacityError: If the range holds more days than ``capacity``
    """
    requested = days_in_range(start, end)
    if requested > capacity:
        raise SpineCapacityError(requested, capacity)
    return requested


class DateSequence:
    """Restartable, finite sequence of consecutive dates.

    Iterating twice yields the same dates; nothing is cached between passes.
    """

    def __init__(self, start: date, end: date, capacity: int = SEQUENCE_CAPACITY):
        self.start = start
        self.end = end
        self.capacity = capacity
        self._length = check_capacity(start, end, capacity)
        if self._length == 0:
            logger.debug(f"Empty date range: {start} .. {end}")

    def __len__(self) -> int:
        return self._length

    def __iter__(self) -> Iterator[date]:
        for offset in range(self._length):
            yield self.start + timedelta(days=offset)

    def __repr__(self) -> str:
        return f"DateSequence({self.start.isoformat()}, {self.end.isoformat()}, days={self._length})"


def date_sequence(start: date, end: date, capacity: int = SEQUENCE_CAPACITY) -> DateSequence:
    """Build the day sequence for ``[start, end]``, checking capacity eagerly."""
    return DateSequence(start, end, capacity)
