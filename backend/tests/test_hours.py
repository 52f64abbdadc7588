"""Business-hours parsing and weekday resolution."""

from datetime import date

import pytest

from salonbook.services.scheduling.errors import HoursParseError, ValidationError
from salonbook.services.scheduling.hours import DayHours, parse_day_hours, resolve_day_hours

MONDAY = date(2024, 1, 1)
SUNDAY = date(2024, 1, 7)


class TestParseDayHours:

    def test_standard_business_day(self):
        assert parse_day_hours("9:00 AM - 5:00 PM") == DayHours(9, 17)

    @pytest.mark.parametrize("text", ["Closed", "closed", "CLOSED", "  Closed  "])
    def test_closed_any_case(self, text):
        assert parse_day_hours(text) is None

    def test_twelve_am_is_midnight(self):
        assert parse_day_hours("12:00 AM - 6:00 AM") == DayHours(0, 6)

    def test_twelve_pm_is_noon(self):
        assert parse_day_hours("12:00 PM - 8:00 PM") == DayHours(12, 20)

    def test_morning_to_noon(self):
        assert parse_day_hours("8:00 AM - 12:00 PM") == DayHours(8, 12)

    def test_meridiem_case_and_compact_forms(self):
        assert parse_day_hours("9 am - 5 pm") == DayHours(9, 17)
        assert parse_day_hours("9:00am-5:00pm") == DayHours(9, 17)
        assert parse_day_hours("10 AM – 6 PM") == DayHours(10, 18)

    def test_twenty_four_hour_clock(self):
        assert parse_day_hours("09:00 - 17:00") == DayHours(9, 17)
        assert parse_day_hours("00:00 - 24:00") == DayHours(0, 24)

    def test_close_equal_to_open_is_an_error(self):
        with pytest.raises(HoursParseError):
            parse_day_hours("9:00 AM - 9:00 AM")

    def test_close_before_open_is_an_error_not_clamped(self):
        with pytest.raises(HoursParseError) as exc:
            parse_day_hours("5:00 PM - 9:00 AM")
        assert "later than open" in exc.value.reason

    def test_midnight_close_in_twelve_hour_form_is_before_open(self):
        # 12 AM is hour 0, so it can never close a day that opened later
        with pytest.raises(HoursParseError):
            parse_day_hours("6:00 PM - 12:00 AM")

    @pytest.mark.parametrize("text", [
        "",
        "9:00 AM",
        "9:00 AM to 5:00 PM",
        "9:00 AM - 5:00 PM - 7:00 PM",
        "13:00 PM - 5:00 PM",
        "9:00 XM - 5:00 PM",
        "noon - 5:00 PM",
        "9:00 AM - ",
        "25:00 - 26:00",
        "24:00 - 24:00",
    ])
    def test_malformed(self, text):
        with pytest.raises(HoursParseError):
            parse_day_hours(text)

    def test_boundary_must_be_whole_hour(self):
        with pytest.raises(HoursParseError) as exc:
            parse_day_hours("9:30 AM - 5:00 PM")
        assert "whole hour" in exc.value.reason

    def test_non_string_input(self):
        with pytest.raises(HoursParseError):
            parse_day_hours(None)

    def test_parse_error_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc:
            parse_day_hours("whenever")
        assert exc.value.status_code == 422
        assert exc.value.details["hours"] == "whenever"


class TestResolveDayHours:

    def test_full_weekday_name(self):
        hours = {"monday": "9:00 AM - 5:00 PM"}
        assert resolve_day_hours(hours, MONDAY) == DayHours(9, 17)

    def test_keys_are_case_insensitive_and_abbreviations_accepted(self):
        assert resolve_day_hours({"Monday": "10 AM - 2 PM"}, MONDAY) == DayHours(10, 14)
        assert resolve_day_hours({"MON": "10 AM - 2 PM"}, MONDAY) == DayHours(10, 14)

    def test_missing_weekday_is_closed(self):
        assert resolve_day_hours({"monday": "9:00 AM - 5:00 PM"}, SUNDAY) is None

    def test_no_hours_at_all_is_closed(self):
        assert resolve_day_hours({}, MONDAY) is None
        assert resolve_day_hours(None, MONDAY) is None

    def test_null_entry_is_closed(self):
        assert resolve_day_hours({"monday": None}, MONDAY) is None

    def test_malformed_entry_propagates(self):
        with pytest.raises(HoursParseError):
            resolve_day_hours({"monday": "all day"}, MONDAY)
