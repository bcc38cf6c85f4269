"""Date spine builder.

Runs the two pipeline stages, day generation and calendar field
derivation, for a validated SpineConfig.
"""
import logging
from datetime import date
from typing import Any, Dict, Iterable, Iterator, List, Optional

from models.time_spine import DateSpineRow, SpineConfig, SpineRunReport
from .calendar_fields import Convention, derive_calendar_fields
from .sequence import SEQUENCE_CAPACITY, DateSequence, date_sequence

logger = logging.getLogger(__name__)


def attach_calendar_fields(days: Iterable[date], convention: Convention) -> Iterator[DateSpineRow]:
    """Map each day to its derived row."""
    for day in days:
        yield derive_calendar_fields(day, convention)


class DateSpineBuilder:
    """Builder for the calendar date spine."""

    def __init__(self, config: Optional[SpineConfig] = None, capacity: int = SEQUENCE_CAPACITY):
        """Initialize the builder.

        Args:
            config: Spine configuration; defaults to the reference 2020-2030 range
            capacity: Maximum number of days a build may produce
        """
        self.config = config or SpineConfig()
        self.capacity = capacity

    def validate(self) -> DateSequence:
        """Validate the configured range before generating anything.

        Returns:
            The day sequence for the configured range

        Raises:
            SpineCapacityError: If the range exceeds the capacity
        """
        sequence = date_sequence(self.config.start_date, self.config.end_date, self.capacity)
        logger.debug(f"Validated {sequence!r} against capacity {self.capacity}")
        return sequence

    def iter_rows(self) -> Iterator[DateSpineRow]:
        """Lazily yield spine rows in ascending ``date_day`` order.

        The range is validated when this is called, not on first iteration.
        """
        sequence = self.validate()
        return attach_calendar_fields(sequence, self.config.week_start_convention)

    def build(self) -> List[DateSpineRow]:
        """Build every spine row."""
        rows = list(self.iter_rows())
        logger.info(
            f"Built {len(rows)} spine rows for {self.config.model_name} "
            f"({self.config.start_date} .. {self.config.end_date})"
        )
        return rows

    def build_records(self) -> List[Dict[str, Any]]:
        """Build every spine row as a JSON-safe dictionary."""
        return [row.model_dump(mode="json") for row in self.iter_rows()]

    def report(self, row_count: Optional[int] = None) -> SpineRunReport:
        """Create a run report for this configuration."""
        return SpineRunReport(
            model_name=self.config.model_name,
            start_date=self.config.start_date,
            end_date=self.config.end_date,
            week_start_convention=self.config.week_start_convention,
            row_count=self.config.day_count if row_count is None else row_count,
        )
