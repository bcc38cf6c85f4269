"""Calendar date spine generation.

This package turns a configured date range into ordered spine rows:
a bounded day sequence followed by per-day calendar field derivation.
"""

from models.errors import SpineCapacityError, SpineConfigError
from .builder import DateSpineBuilder
from .calendar_fields import derive_calendar_fields, shift_years
from .sequence import SEQUENCE_CAPACITY, DateSequence, check_capacity, date_sequence

__all__ = [
    "DateSpineBuilder",
    "DateSequence",
    "SEQUENCE_CAPACITY",
    "SpineCapacityError",
    "SpineConfigError",
    "check_capacity",
    "date_sequence",
    "derive_calendar_fields",
    "shift_years",
]
