from datetime import datetime, timedelta
from decimal import Decimal

from reservation_engine.intervals import Interval
from reservation_engine.pricing import price

START = datetime(2030, 1, 2, 10, 0)


def test_partial_hours_are_billed_as_full_hours():
    assert price(Interval(START, START + timedelta(hours=2, minutes=30)), Decimal("20")) == Decimal("60")


def test_sixty_one_minutes_costs_two_hours():
    assert price(Interval(START, START + timedelta(minutes=61)), Decimal("15.50")) == Decimal("31.00")


def test_accepts_float_and_int_rates():
    interval = Interval(START, START + timedelta(hours=2))
    assert price(interval, 20) == Decimal("40")
    assert price(interval, 12.5) == Decimal("25.0")


def test_price_never_decreases_with_length():
    rate = Decimal("17.25")
    previous = Decimal("0")
    for minutes in range(1, 24 * 60, 7):
        current = price(Interval(START, START + timedelta(minutes=minutes)), rate)
        assert current >= previous
        previous = current


def test_free_room():
    assert price(Interval(START, START + timedelta(hours=3)), Decimal("0")) == 0
