"""Configuration errors raised before any spine row is generated."""
from typing import Optional


class SpineConfigError(ValueError):
    """Invalid spine configuration (malformed dates, bad names, unreadable file)."""


class SpineCapacityError(SpineConfigError):
    """Requested date range exceeds the sequence generator's capacity."""

    def __init__(self, requested: int, capacity: int, message: Optional[str] = None):
        self.requested = requested
        self.capacity = capacity
        super().__init__(
            message or f"Date range of {requested} days exceeds spine capacity of {capacity} days"
        )
