"""
Common Value Objects

- TimeSlot: a half-open interval of time [start_at, end_at)
"""

from dataclasses import dataclass
from datetime import datetime

from shared.domain.base import ValueObject
from shared.domain.errors import InvalidInterval


@dataclass(frozen=True)
class TimeSlot(ValueObject):
    """
    Time slot value object

    Represents the interval from start_at (inclusive) to end_at (exclusive).
    Bookings are checked against each other as these intervals, so
    back-to-back sessions never overlap.
    """
    start_at: datetime
    end_at: datetime

    def __post_init__(self):
        if self.end_at <= self.start_at:
            raise InvalidInterval(
                f"End time ({self.end_at.isoformat()}) must be after "
                f"start time ({self.start_at.isoformat()})"
            )

    def __str__(self):
        return f"{self.start_at.isoformat()} - {self.end_at.isoformat()}"

    def __repr__(self):
        return f"TimeSlot({self.start_at!r}, {self.end_at!r})"
