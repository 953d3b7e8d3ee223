from datetime import date, time

import pytest

from portal.formatting import (
    DEFAULT_HOURS,
    event_subtitle,
    format_hours_range,
    format_time_24,
    format_week_range,
    full_address,
    hours_from_storage,
    hours_to_storage,
    parse_hours_range,
    parse_time_input,
    to_12_hour,
    to_24_hour,
)


class TestTimeConversion:
    def test_round_trip_every_minute_of_the_day(self):
        for hour in range(24):
            for minute in range(60):
                value = f"{hour:02d}:{minute:02d}"
                assert to_24_hour(to_12_hour(value)) == value

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("00:00", "12:00 AM"),
            ("00:30", "12:30 AM"),
            ("09:05", "9:05 AM"),
            ("12:00", "12:00 PM"),
            ("17:05", "5:05 PM"),
            ("23:59", "11:59 PM"),
        ],
    )
    def test_to_12_hour(self, value, expected):
        assert to_12_hour(value) == expected

    def test_to_12_hour_accepts_seconds_and_time(self):
        assert to_12_hour("18:00:00") == "6:00 PM"
        assert to_12_hour(time(7, 15)) == "7:15 AM"

    def test_to_24_hour_is_case_insensitive(self):
        assert to_24_hour("5:05 pm") == "17:05"
        assert to_24_hour("12:00 am") == "00:00"

    @pytest.mark.parametrize("value", ["", "25:00 PM", "13:00 PM", "5:75 AM", "noon"])
    def test_to_24_hour_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            to_24_hour(value)

    def test_parse_time_input(self):
        assert parse_time_input("6:30 PM") == time(18, 30)
        assert parse_time_input("18:30") == time(18, 30)
        assert parse_time_input("18:30:00") == time(18, 30)
        with pytest.raises(ValueError):
            parse_time_input("later")
        with pytest.raises(ValueError):
            parse_time_input(None)

    def test_format_time_24_drops_seconds(self):
        assert format_time_24("09:05:30") == "09:05"
        assert format_time_24(time(9, 5)) == "09:05"


class TestOperatingHours:
    def test_defaults_when_never_set(self):
        hours = hours_from_storage(None)
        assert hours == DEFAULT_HOURS
        hours["monday"]["open"] = "01:00"
        assert DEFAULT_HOURS["monday"]["open"] == "09:00"

    def test_storage_round_trip(self):
        stored = hours_to_storage(DEFAULT_HOURS)
        assert stored["Monday"] == "9:00 AM - 5:00 PM"
        assert stored["Saturday"] == "10:00 AM - 4:00 PM"
        assert stored["Sunday"] == "Closed"
        assert hours_from_storage(stored) == DEFAULT_HOURS

    def test_from_storage_overlays_known_days(self):
        hours = hours_from_storage(
            {"Friday": "11:00 AM - 9:30 PM", "Monday": "Closed", "Funday": "x"}
        )
        assert hours["friday"] == {"open": "11:00", "close": "21:30", "closed": False}
        assert hours["monday"]["closed"] is True
        assert "funday" not in hours

    def test_range_helpers(self):
        assert format_hours_range("09:00", "17:30") == "9:00 AM - 5:30 PM"
        assert parse_hours_range("9:00 AM - 5:30 PM") == ("09:00", "17:30")
        assert parse_hours_range("Closed") is None
        assert parse_hours_range(None) is None


class TestDisplayStrings:
    def test_event_subtitle(self):
        assert event_subtitle("Friday", "18:00", "21:00") == "Fridays, 6:00 PM - 9:00 PM"

    def test_full_address_skips_empty_parts(self):
        assert full_address("1 Main St", "", None, "Austin", " TX ") == "1 Main St, Austin, TX"

    def test_week_range(self):
        days = [date(2024, 3, 10), date(2024, 3, 16)]
        assert format_week_range(days) == "Mar 10 - Mar 16"
