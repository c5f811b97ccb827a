"""Tests for time window evaluation against a site's local clock."""

from datetime import date, datetime, timedelta, timezone

import pytest

from signage_cms.services import time_window
from signage_cms.services.time_window import is_active, local_now, parse_days_of_week, parse_hms

from tests.factories import make_schedule


def at(hour: int, minute: int = 0, second: int = 0, day: int = 6) -> datetime:
    # January 2025: the 6th is a Monday.
    return datetime(2025, 1, day, hour, minute, second)


class TestParsing:
    def test_parse_hms_accepts_both_forms(self):
        assert parse_hms("09:30") == parse_hms("09:30:00")
        assert parse_hms("23:59:59").second == 59

    @pytest.mark.parametrize("value", ["", None, "25:00", "12:60", "aa:bb", "1:2:3:4"])
    def test_parse_hms_rejects_garbage(self, value):
        assert parse_hms(value) is None

    def test_parse_days_of_week(self):
        assert parse_days_of_week("Mon, Wed,Fri") == frozenset({"Mon", "Wed", "Fri"})
        assert parse_days_of_week("") == frozenset()
        assert parse_days_of_week(None) == frozenset()
        assert parse_days_of_week("Mon,Funday") is None


class TestWindow:
    def test_inactive_flag_wins(self):
        assert not is_active(make_schedule(is_active=False), at(10))

    def test_unbounded_schedule_always_active(self):
        assert is_active(make_schedule(), at(0))
        assert is_active(make_schedule(), at(23, 59, 59))

    def test_bounds_are_inclusive(self):
        schedule = make_schedule(start_time="09:00:00", end_time="17:00:00")
        assert is_active(schedule, at(9))
        assert is_active(schedule, at(17))
        assert is_active(schedule, at(12, 30))
        assert not is_active(schedule, at(8, 59, 59))
        assert not is_active(schedule, at(17, 0, 1))

    def test_microseconds_are_ignored(self):
        schedule = make_schedule(start_time="09:00:00", end_time="17:00:00")
        assert is_active(schedule, at(17).replace(microsecond=999_999))

    def test_overnight_window(self):
        schedule = make_schedule(start_time="22:00:00", end_time="02:00:00")
        assert is_active(schedule, at(23, 30))
        assert is_active(schedule, at(1))
        assert is_active(schedule, at(22))
        assert is_active(schedule, at(2))
        assert not is_active(schedule, at(12))
        assert not is_active(schedule, at(2, 0, 1))

    def test_start_only_is_open_ended(self):
        schedule = make_schedule(start_time="08:00:00")
        assert not is_active(schedule, at(7, 59))
        assert is_active(schedule, at(23, 59, 59))

    def test_end_only_is_open_started(self):
        schedule = make_schedule(end_time="08:00:00")
        assert is_active(schedule, at(0))
        assert not is_active(schedule, at(8, 0, 1))

    def test_days_of_week(self):
        schedule = make_schedule(days_of_week="Mon,Wed,Fri", start_time="09:00", end_time="17:00")
        for hour in range(24):
            assert not is_active(schedule, at(hour, day=7))  # Tuesday
        assert is_active(schedule, at(10, day=8))  # Wednesday
        assert not is_active(schedule, at(18, day=8))

    def test_date_bounds_are_inclusive(self):
        schedule = make_schedule(start_date=date(2025, 1, 6), end_date=date(2025, 1, 10))
        assert is_active(schedule, at(0, day=6))
        assert is_active(schedule, at(23, 59, day=10))
        assert not is_active(schedule, at(23, 59, day=5))
        assert not is_active(schedule, at(0, day=11))

    @pytest.mark.parametrize(
        "fields",
        [
            {"days_of_week": "Mon,Funday"},
            {"start_time": "25:00:00"},
            {"end_time": "noon"},
        ],
    )
    def test_malformed_data_fails_closed(self, fields):
        assert is_active(make_schedule(**fields), at(10)) is False


class TestLocalNow:
    def test_converts_to_site_zone(self):
        moment = datetime(2025, 1, 6, 14, 0, tzinfo=timezone.utc)
        local = local_now("America/New_York", moment)
        assert (local.hour, local.minute) == (9, 0)
        assert local.utcoffset() == timedelta(hours=-5)

    def test_naive_input_is_utc(self):
        local = local_now("Asia/Tokyo", datetime(2025, 1, 6, 20, 0))
        assert local.date() == date(2025, 1, 7)
        assert local.hour == 5

    def test_unknown_zone_falls_back(self, caplog):
        moment = datetime(2025, 1, 6, 14, 0, tzinfo=timezone.utc)
        local = local_now("Mars/Olympus_Mons", moment)
        assert local.utcoffset() == timedelta(0)
        assert "Unknown time zone" in caplog.text

    def test_window_follows_local_clock(self):
        schedule = make_schedule(start_time="09:00:00", end_time="17:00:00")
        morning_utc = datetime(2025, 1, 6, 14, 0, tzinfo=timezone.utc)
        evening_utc = datetime(2025, 1, 6, 23, 0, tzinfo=timezone.utc)
        assert is_active(schedule, local_now("America/New_York", morning_utc))
        assert not is_active(schedule, local_now("America/New_York", evening_utc))

    def test_default_zone_setting_is_validated(self, monkeypatch):
        monkeypatch.setenv("SIGNAGE_DEFAULT_TIMEZONE", "Not/A_Zone")
        assert time_window._default_timezone() == "UTC"
        monkeypatch.setenv("SIGNAGE_DEFAULT_TIMEZONE", "Asia/Tokyo")
        assert time_window._default_timezone() == "Asia/Tokyo"


class TestOvernightDays:
    """Day-of-week is matched against the local day the instant falls on."""

    def test_friday_night_window(self):
        schedule = make_schedule(days_of_week="Fri", start_time="22:00:00", end_time="02:00:00")
        # January 2025: the 10th is a Friday.
        assert is_active(schedule, at(23, day=10))
        assert is_active(schedule, at(1, day=10))
        assert not is_active(schedule, at(1, day=11))
