"""
Calendar helper tests: payment dates, month arithmetic, UWS Saturdays and
the RSVP cutoff.
"""
from datetime import date, datetime

import pytest

from app.utils.dates import (
    get_month_name,
    get_payment_date,
    get_previous_month,
    get_upcoming_saturday,
    is_rsvp_window_open,
    normalize_week_date,
    to_program_time,
)

NY = "America/New_York"


class TestPaymentDate:
    @pytest.mark.parametrize("year,month,expected", [
        (2024, 11, date(2025, 1, 1)),
        (2024, 12, date(2025, 2, 1)),
        (2024, 1, date(2024, 3, 1)),
        (2024, 10, date(2024, 12, 1)),
    ])
    def test_first_day_two_months_later(self, year, month, expected):
        assert get_payment_date(year, month) == expected


class TestMonthHelpers:
    def test_previous_month_rolls_back_year(self):
        assert get_previous_month(2025, 1) == (2024, 12)

    def test_previous_month_same_year(self):
        assert get_previous_month(2024, 11) == (2024, 10)

    def test_month_name(self):
        assert get_month_name(1) == "January"
        assert get_month_name(12) == "December"


class TestSaturdays:
    def test_saturday_is_its_own_week(self):
        assert get_upcoming_saturday(date(2024, 11, 16)) == date(2024, 11, 16)

    def test_weekday_moves_forward(self):
        # Wednesday
        assert get_upcoming_saturday(date(2024, 11, 13)) == date(2024, 11, 16)

    def test_sunday_moves_to_next_saturday(self):
        assert get_upcoming_saturday(date(2024, 11, 17)) == date(2024, 11, 23)

    def test_normalize_week_date_drops_time(self):
        assert normalize_week_date(datetime(2024, 11, 16, 18, 30)) == date(2024, 11, 16)
        assert normalize_week_date(date(2024, 11, 16)) == date(2024, 11, 16)


class TestRsvpWindow:
    def test_open_on_monday(self):
        # Monday 2024-11-11 15:00 UTC = 10:00 New York
        assert is_rsvp_window_open(datetime(2024, 11, 11, 15, 0), NY)

    def test_open_wednesday_evening_local(self):
        # Wednesday 23:30 New York = Thursday 04:30 UTC
        assert is_rsvp_window_open(datetime(2024, 11, 14, 4, 30), NY)

    def test_closed_at_wednesday_2359_local(self):
        # Wednesday 23:59 New York = Thursday 04:59 UTC
        assert not is_rsvp_window_open(datetime(2024, 11, 14, 4, 59), NY)

    def test_closed_thursday_through_saturday(self):
        assert not is_rsvp_window_open(datetime(2024, 11, 14, 17, 0), NY)
        assert not is_rsvp_window_open(datetime(2024, 11, 16, 17, 0), NY)

    def test_reopens_sunday(self):
        assert is_rsvp_window_open(datetime(2024, 11, 17, 17, 0), NY)

    def test_program_time_keeps_saturday_evening_local(self):
        # 02:00 UTC Sunday is still Saturday evening in New York
        local = to_program_time(datetime(2024, 11, 17, 2, 0), NY)
        assert local.date() == date(2024, 11, 16)
        assert get_upcoming_saturday(local.date()) == date(2024, 11, 16)
