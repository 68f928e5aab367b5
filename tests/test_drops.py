from datetime import datetime, timedelta, timezone
from decimal import Decimal

from storefront.models.drop import Drop, DropState
from storefront.services.drops import (
    calculate_time_left,
    describe_drop,
    get_drop_state,
    get_stock_level,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_drop(**overrides) -> Drop:
    fields = dict(
        id="drop-1",
        title_en="Single Cask",
        title_nl="Enkel Vat",
        price=Decimal("89.00"),
        quantity_available=100,
        quantity_sold=10,
        starts_at=NOW - timedelta(days=1),
        ends_at=NOW + timedelta(days=2),
        is_active=True,
    )
    fields.update(overrides)
    return Drop(**fields)


def test_time_left_breakdown():
    target = NOW + timedelta(days=2, hours=3, minutes=4, seconds=5)

    left = calculate_time_left(target, NOW)

    assert (left.days, left.hours, left.minutes, left.seconds) == (2, 3, 4, 5)


def test_time_left_is_zero_after_target():
    assert calculate_time_left(NOW - timedelta(seconds=1), NOW).is_zero


def test_time_left_accepts_naive_target():
    left = calculate_time_left(datetime(2026, 3, 1, 13, 0), NOW)
    assert left.hours == 1


def test_stock_level_plenty():
    stock = get_stock_level(100, 10)

    assert stock.remaining == 90
    assert stock.percentage_sold == 10
    assert not stock.is_low_stock
    assert not stock.is_almost_gone
    assert not stock.sold_out


def test_stock_level_low_at_twenty_percent():
    stock = get_stock_level(100, 80)
    assert stock.is_low_stock
    assert not stock.is_almost_gone


def test_stock_level_almost_gone():
    stock = get_stock_level(100, 97)
    assert stock.remaining == 3
    assert stock.is_almost_gone


def test_stock_level_sold_out():
    stock = get_stock_level(12, 12)
    assert stock.sold_out
    assert stock.remaining == 0
    assert stock.percentage_sold == 100


def test_stock_level_nothing_available():
    stock = get_stock_level(0, 0)
    assert stock.sold_out
    assert stock.percentage_sold == 100


def test_drop_states():
    assert get_drop_state(make_drop(), NOW) == DropState.LIVE
    assert get_drop_state(make_drop(starts_at=NOW + timedelta(hours=1)), NOW) == DropState.UPCOMING
    assert get_drop_state(make_drop(ends_at=NOW - timedelta(minutes=1)), NOW) == DropState.ENDED
    assert get_drop_state(make_drop(quantity_sold=100), NOW) == DropState.SOLD_OUT
    assert get_drop_state(make_drop(is_active=False), NOW) == DropState.ENDED
    assert get_drop_state(make_drop(ends_at=None), NOW) == DropState.LIVE


def test_describe_upcoming_counts_down_to_start():
    starts = NOW + timedelta(hours=5)

    display = describe_drop(make_drop(starts_at=starts, ends_at=None), NOW)

    assert display.state == DropState.UPCOMING
    assert display.countdown_target == starts
    assert display.time_left.hours == 5


def test_describe_live_without_end_has_no_countdown():
    display = describe_drop(make_drop(ends_at=None), NOW)

    assert display.countdown_target is None
    assert display.time_left is None


def test_null_quantity_sold_from_database():
    assert make_drop(quantity_sold=None).quantity_sold == 0


def test_stock_percentage_rounds_halves_up():
    assert get_stock_level(8, 1).percentage_sold == 13
    assert get_stock_level(8, 3).percentage_sold == 38
