"""
Common Value Objects

Value objects used across multiple domains:
- DateRange: Represents a range of dates (check-in to checkout)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from shared.domain.base import ValueObject
from shared.domain.exceptions import InvalidRangeError

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    Used for booking periods, availability checks, etc.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise InvalidRangeError(
                f"Start date ({self.start_date}) must be before end date ({self.end_date})"
            )

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Two ranges overlap if they share any dates.
        Note: end_date is exclusive, so adjacent ranges don't overlap.

        Examples:
            - DateRange(25, 28) overlaps with DateRange(27, 30) -> True
            - DateRange(25, 28) overlaps with DateRange(28, 31) -> False (adjacent)
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        # start1 < end2 AND end1 > start2
        return (self.start_date < other.end_date and
                self.end_date > other.start_date)

    def contains(self, check_date: date) -> bool:
        """
        Check if a date is within this range

        Note: start_date is inclusive, end_date is exclusive
        """
        return self.start_date <= check_date < self.end_date

    @property
    def last_night(self) -> date:
        """Last occupied date; the inclusive upper bound used by store range lookups"""
        return self.end_date - ONE_DAY

    def days(self) -> Iterator[date]:
        """Iterate over every occupied date in ascending order"""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += ONE_DAY

    def __len__(self) -> int:
        """
        Return the number of days (nights) in this range

        This is the number of nights for a booking.
        """
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
