"""
Unit tests for maintenance window parsing and resolution.
"""

import pytest
from datetime import datetime, timedelta

import pytz

from maintenance_calendar.error_handler import (
    MaintenanceWindowFormatError, UnsupportedMaintenanceWindowError
)
from maintenance_calendar.maintenance_window import (
    maintenance_time, next_maintenance_window, parse_maintenance_window, weekday_from_shortname
)
from maintenance_calendar.models import MaintenanceWindow


def utc(*args):
    return pytz.utc.localize(datetime(*args))


class TestParseMaintenanceWindow:
    """Test cases for parse_maintenance_window."""

    def test_parse_same_day_window(self):
        window = parse_maintenance_window('mon:02:00-mon:04:30')

        assert window == MaintenanceWindow(0, 2, 0, 0, 4, 30)
        assert not window.crosses_midnight

    def test_parse_window_crossing_midnight(self):
        window = parse_maintenance_window('sat:23:30-sun:01:00')

        assert window.start_weekday == 5
        assert window.end_weekday == 6
        assert window.crosses_midnight

    def test_parse_is_case_insensitive(self):
        assert parse_maintenance_window('Sun:05:00-Sun:05:30') == parse_maintenance_window('sun:05:00-sun:05:30')

    def test_weekday_from_shortname(self):
        assert [weekday_from_shortname(n) for n in ('mon', 'tue', 'wed', 'thu', 'fri', 'sat', 'sun')] == list(range(7))

    @pytest.mark.parametrize('text', [
        '',
        'mon:2:00-mon:04:00',
        'xyz:02:00-mon:04:00',
        'mon:24:00-mon:04:00',
        'mon:02:60-mon:04:00',
        'mon:02:00',
        'mon:02:00-mon:04:00-tue:01:00',
    ])
    def test_malformed_window_rejected(self, text):
        with pytest.raises(MaintenanceWindowFormatError):
            parse_maintenance_window(text)

    def test_non_string_window_rejected(self):
        with pytest.raises(MaintenanceWindowFormatError):
            parse_maintenance_window(None)

    @pytest.mark.parametrize('text', [
        'mon:02:00-wed:04:00',
        'fri:22:00-sun:02:00',
        'mon:04:00-mon:02:00',
    ])
    def test_window_longer_than_a_day_rejected(self, text):
        with pytest.raises(UnsupportedMaintenanceWindowError):
            parse_maintenance_window(text)

    def test_sunday_to_monday_is_one_day(self):
        window = parse_maintenance_window('sun:23:00-mon:01:00')
        assert window.crosses_midnight


class TestNextMaintenanceWindow:
    """Test cases for next_maintenance_window."""

    def test_window_later_in_the_week(self):
        # Wednesday 10:00 -> next Monday
        occurrence = maintenance_time(utc(2024, 1, 3, 10, 0), 'mon:02:00-mon:04:00')

        assert occurrence.start == utc(2024, 1, 8, 2, 0)
        assert occurrence.end == utc(2024, 1, 8, 4, 0)

    def test_window_later_the_same_day(self):
        # Monday 01:00, window not started yet
        occurrence = maintenance_time(utc(2024, 1, 1, 1, 0), 'mon:02:00-mon:04:00')

        assert occurrence.start == utc(2024, 1, 1, 2, 0)
        assert occurrence.end == utc(2024, 1, 1, 4, 0)

    def test_window_already_passed_today_rolls_to_next_week(self):
        occurrence = maintenance_time(utc(2024, 1, 1, 5, 45), 'mon:02:00-mon:04:00')

        assert occurrence.start == utc(2024, 1, 8, 2, 0)

    def test_window_crossing_weekend_boundary(self):
        occurrence = maintenance_time(utc(2024, 1, 3, 10, 0), 'sat:23:30-sun:01:00')

        assert occurrence.start == utc(2024, 1, 6, 23, 30)
        assert occurrence.end == utc(2024, 1, 7, 1, 0)
        assert occurrence.end.date() - occurrence.start.date() == timedelta(days=1)

    def test_window_crossing_week_boundary(self):
        # Saturday -> Sunday start, Monday end
        occurrence = maintenance_time(utc(2024, 1, 6, 12, 0), 'sun:23:00-mon:01:00')

        assert occurrence.start == utc(2024, 1, 7, 23, 0)
        assert occurrence.end == utc(2024, 1, 8, 1, 0)

    def test_window_crossing_month_boundary(self):
        occurrence = maintenance_time(utc(2024, 1, 29, 9, 0), 'wed:23:00-thu:00:30')

        assert occurrence.start == utc(2024, 1, 31, 23, 0)
        assert occurrence.end == utc(2024, 2, 1, 0, 30)

    def test_reference_exactly_at_window_start(self):
        occurrence = maintenance_time(utc(2024, 1, 1, 2, 0), 'mon:02:00-mon:04:00')

        assert occurrence.start == utc(2024, 1, 1, 2, 0)

    def test_resolving_from_occurrence_start_returns_same_occurrence(self):
        window = parse_maintenance_window('thu:06:15-thu:06:45')
        first = next_maintenance_window(utc(2024, 1, 3, 10, 0), window)
        second = next_maintenance_window(first.start, window)

        assert second == first

    def test_same_hour_earlier_minute_rolls_forward(self):
        # 02:10 window, reference 02:40 the same Monday
        occurrence = maintenance_time(utc(2024, 1, 1, 2, 40), 'mon:02:10-mon:03:00')

        assert occurrence.start == utc(2024, 1, 8, 2, 10)

    def test_earlier_hour_later_minute_rolls_forward(self):
        occurrence = maintenance_time(utc(2024, 1, 1, 3, 10), 'mon:02:20-mon:04:00')

        assert occurrence.start == utc(2024, 1, 8, 2, 20)

    def test_legacy_same_day_check_keeps_past_window(self):
        # Historical comparison needs both hour and minute to be earlier
        occurrence = maintenance_time(utc(2024, 1, 1, 3, 10), 'mon:02:20-mon:04:00',
                                      legacy_same_day_check=True)

        assert occurrence.start == utc(2024, 1, 1, 2, 20)

    def test_legacy_same_day_check_rolls_when_both_earlier(self):
        occurrence = maintenance_time(utc(2024, 1, 1, 5, 45), 'mon:02:00-mon:04:00',
                                      legacy_same_day_check=True)

        assert occurrence.start == utc(2024, 1, 8, 2, 0)

    def test_reference_in_other_timezone_is_normalized_to_utc(self):
        # Tuesday 08:00 in Tokyo is Monday 23:00 UTC
        tokyo = pytz.timezone('Asia/Tokyo')
        reference = tokyo.localize(datetime(2024, 1, 2, 8, 0))

        occurrence = maintenance_time(reference, 'mon:23:30-tue:00:30')

        assert occurrence.start == utc(2024, 1, 1, 23, 30)
        assert occurrence.end == utc(2024, 1, 2, 0, 30)
        assert occurrence.start.tzinfo is not None

    def test_naive_reference_treated_as_utc(self):
        occurrence = maintenance_time(datetime(2024, 1, 3, 10, 0), 'mon:02:00-mon:04:00')

        assert occurrence.start == utc(2024, 1, 8, 2, 0)

    def test_accepts_parsed_window(self):
        window = MaintenanceWindow(4, 1, 0, 4, 2, 0)
        occurrence = maintenance_time(utc(2024, 1, 3, 10, 0), window)

        assert occurrence.start == utc(2024, 1, 5, 1, 0)

    @pytest.mark.parametrize('start_weekday', range(7))
    @pytest.mark.parametrize('crosses_midnight', [False, True])
    def test_occurrence_properties_for_every_weekday(self, start_weekday, crosses_midnight):
        end_weekday = (start_weekday + 1) % 7 if crosses_midnight else start_weekday
        window = MaintenanceWindow(start_weekday, 22, 30, end_weekday, 23 if not crosses_midnight else 1, 0)

        for day_offset in range(7):
            reference = utc(2024, 1, 1, 12, 0) + timedelta(days=day_offset)
            occurrence = next_maintenance_window(reference, window)

            assert occurrence.start <= occurrence.end
            assert occurrence.start.weekday() == start_weekday
            assert occurrence.start >= reference
            assert occurrence.start - reference < timedelta(days=7)
            expected_gap = timedelta(days=1) if crosses_midnight else timedelta(0)
            assert occurrence.end.date() - occurrence.start.date() == expected_gap
