"""
Pricing Calculator

Pure functions deriving the price of a stay from the listing's base price
per day and the calendar's per-date overrides. Amounts are integers in
minor currency units (cents); totals must fit a signed 64-bit column.
"""

from datetime import date
from typing import Iterable, List, Tuple

from shared.domain.exceptions import InvalidRangeError, PriceOverflowError
from shared.domain.value_objects import ONE_DAY

MAX_PRICE = 2 ** 63 - 1


def _override_map(overrides: Iterable) -> dict:
    return {
        entry.date: entry.price_override
        for entry in overrides
        if entry.price_override is not None
    }


def nightly_prices(listing, start: date, end: date, overrides: Iterable = ()) -> List[Tuple[date, int]]:
    """
    Effective price of every date in [start, end)

    An override with a price wins over listing.price_per_day for its date;
    overrides outside the range are ignored.

    Raises:
        InvalidRangeError: If end <= start
    """
    if end <= start:
        raise InvalidRangeError(f"End date ({end}) must be after start date ({start})")

    by_date = _override_map(overrides)
    prices = []
    current = start
    while current < end:
        prices.append((current, by_date.get(current, listing.price_per_day)))
        current += ONE_DAY
    return prices


def compute_price(listing, start: date, end: date, overrides: Iterable = ()) -> int:
    """
    Total price of a stay from start (inclusive) to end (exclusive)

    Raises:
        InvalidRangeError: If end <= start
        PriceOverflowError: If the total exceeds a signed 64-bit integer
    """
    total = 0
    for day, price in nightly_prices(listing, start, end, overrides):
        total += price
        if total > MAX_PRICE:
            raise PriceOverflowError(
                f"Price for stay {start} - {end} exceeds {MAX_PRICE} at {day.isoformat()}"
            )
    return total
