from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from templehub.errors import ValidationError
from templehub.services.dates import day_bounds, to_calendar_date


class TestToCalendarDate:
    def test_plain_date_string(self):
        assert to_calendar_date("2025-03-02") == date(2025, 3, 2)

    def test_naive_datetime_string_keeps_its_day(self):
        assert to_calendar_date("2025-03-02T23:59:59") == date(2025, 3, 2)

    def test_zulu_suffix(self):
        assert to_calendar_date("2025-03-02T10:00:00Z") == date(2025, 3, 2)

    def test_offset_is_converted_to_local_zone(self):
        kolkata = ZoneInfo("Asia/Kolkata")
        # 20:00 UTC is 01:30 next day in Kolkata
        assert to_calendar_date("2025-03-02T20:00:00+00:00", tz=kolkata) == date(2025, 3, 3)
        assert to_calendar_date("2025-03-02T20:00:00+00:00", tz=ZoneInfo("UTC")) == date(2025, 3, 2)

    def test_objects(self):
        assert to_calendar_date(date(2025, 1, 5)) == date(2025, 1, 5)
        aware = datetime(2025, 1, 5, 23, 0, tzinfo=timezone.utc)
        assert to_calendar_date(aware, tz=ZoneInfo("Asia/Tokyo")) == date(2025, 1, 6)

    @pytest.mark.parametrize("bad", [None, "", "   ", "yesterday", "2025-13-01"])
    def test_rejects_bad_input(self, bad):
        with pytest.raises(ValidationError):
            to_calendar_date(bad)


class TestDayBounds:
    def test_utc_day(self):
        start, end = day_bounds(date(2025, 3, 2), tz=ZoneInfo("UTC"))
        assert start == datetime(2025, 3, 2, 0, 0)
        assert end == datetime(2025, 3, 3, 0, 0)

    def test_local_day_is_returned_in_utc(self):
        start, end = day_bounds(date(2025, 3, 2), tz=ZoneInfo("Asia/Kolkata"))
        assert start == datetime(2025, 3, 1, 18, 30)
        assert end == datetime(2025, 3, 2, 18, 30)

    def test_dst_day_is_23_hours(self):
        start, end = day_bounds(date(2025, 3, 9), tz=ZoneInfo("America/New_York"))
        assert start == datetime(2025, 3, 9, 5, 0)
        assert end - start == timedelta(hours=23)
