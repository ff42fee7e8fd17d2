"""Tests for the line-total calculator."""

from collections import namedtuple

from orderdesk.services.pricing import calculate_total

Line = namedtuple("Line", "price qty")


class TestCalculateTotal:
    def test_empty_is_zero(self):
        assert calculate_total([]) == 0

    def test_sums_price_times_qty(self):
        assert calculate_total([Line(1000, 2), Line(2500, 1), Line(700, 3)]) == 6600

    def test_accepts_generators(self):
        assert calculate_total(Line(p, 1) for p in (1, 2, 3)) == 6
