"""Tests for the DateRange value object."""

from __future__ import annotations

from datetime import date

from django.test import SimpleTestCase

from shared.domain.exceptions import InvalidInputError, InvalidRangeError
from shared.domain.value_objects import DateRange


class DateRangeTests(SimpleTestCase):

    def test_rejects_empty_and_inverted_ranges(self) -> None:
        with self.assertRaises(InvalidRangeError):
            DateRange(date(2025, 1, 10), date(2025, 1, 10))
        with self.assertRaises(InvalidRangeError):
            DateRange(date(2025, 1, 12), date(2025, 1, 10))

    def test_invalid_range_is_an_input_error(self) -> None:
        self.assertTrue(issubclass(InvalidRangeError, InvalidInputError))

    def test_length_is_number_of_nights(self) -> None:
        self.assertEqual(len(DateRange(date(2025, 1, 10), date(2025, 1, 12))), 2)

    def test_checkout_is_exclusive(self) -> None:
        stay = DateRange(date(2025, 1, 10), date(2025, 1, 12))
        self.assertTrue(stay.contains(date(2025, 1, 10)))
        self.assertTrue(stay.contains(date(2025, 1, 11)))
        self.assertFalse(stay.contains(date(2025, 1, 12)))
        self.assertEqual(stay.last_night, date(2025, 1, 11))
        self.assertEqual(list(stay.days()), [date(2025, 1, 10), date(2025, 1, 11)])

    def test_overlap_is_half_open(self) -> None:
        stay = DateRange(date(2025, 1, 10), date(2025, 1, 12))
        self.assertTrue(stay.overlaps_with(DateRange(date(2025, 1, 11), date(2025, 1, 13))))
        self.assertTrue(stay.overlaps_with(DateRange(date(2025, 1, 9), date(2025, 1, 15))))
        self.assertFalse(stay.overlaps_with(DateRange(date(2025, 1, 12), date(2025, 1, 14))))
        self.assertFalse(stay.overlaps_with(DateRange(date(2025, 1, 8), date(2025, 1, 10))))

    def test_overlap_requires_a_date_range(self) -> None:
        stay = DateRange(date(2025, 1, 10), date(2025, 1, 12))
        with self.assertRaises(TypeError):
            stay.overlaps_with((date(2025, 1, 10), date(2025, 1, 12)))

    def test_equal_by_value(self) -> None:
        self.assertEqual(
            DateRange(date(2025, 1, 10), date(2025, 1, 12)),
            DateRange(date(2025, 1, 10), date(2025, 1, 12)),
        )
        self.assertEqual(str(DateRange(date(2025, 1, 10), date(2025, 1, 12))), "2025-01-10 - 2025-01-12")
