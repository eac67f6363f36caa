from datetime import datetime, timezone

import pytest

from wabot.services.calendar_service import BusinessHoursCalendar

SUNDAY = datetime(2024, 3, 17, 9, 0, tzinfo=timezone.utc)
MONDAY = datetime(2024, 3, 18, 0, 0, tzinfo=timezone.utc)
WEDNESDAY = datetime(2024, 3, 20, 0, 0, tzinfo=timezone.utc)


def _calendar(now=SUNDAY, **kwargs):
    return BusinessHoursCalendar("UTC", start_hour=10, end_hour=12, slot_minutes=30, now=lambda: now, **kwargs)


class TestBusinessHoursCalendar:
    def test_weekday_slots(self):
        slots = _calendar().get_available_slots(MONDAY, WEDNESDAY)

        assert len(slots) == 8
        first = slots[0]
        assert first.start == datetime(2024, 3, 18, 10, 0, tzinfo=timezone.utc)
        assert first.end == datetime(2024, 3, 18, 10, 30, tzinfo=timezone.utc)
        assert first.duration_minutes == 30
        assert first.display_text == "Mon 18/03 10:00 - 10:30"
        assert slots == sorted(slots, key=lambda slot: slot.start)

    def test_weekend_has_no_slots(self):
        saturday = datetime(2024, 3, 23, 0, 0, tzinfo=timezone.utc)
        monday_after = datetime(2024, 3, 25, 0, 0, tzinfo=timezone.utc)

        assert _calendar().get_available_slots(saturday, monday_after) == []

    def test_past_slots_are_skipped(self):
        now = datetime(2024, 3, 18, 10, 45, tzinfo=timezone.utc)

        slots = _calendar(now=now).get_available_slots(MONDAY, datetime(2024, 3, 19, 0, 0, tzinfo=timezone.utc))

        assert [slot.start.hour * 60 + slot.start.minute for slot in slots] == [11 * 60, 11 * 60 + 30]

    def test_busy_intervals_are_excluded(self):
        busy = [(datetime(2024, 3, 18, 10, 0, tzinfo=timezone.utc), datetime(2024, 3, 18, 11, 0, tzinfo=timezone.utc))]

        slots = _calendar(busy=busy).get_available_slots(MONDAY, datetime(2024, 3, 19, 0, 0, tzinfo=timezone.utc))

        assert [slot.display_text for slot in slots] == ["Mon 18/03 11:00 - 11:30", "Mon 18/03 11:30 - 12:00"]

    @pytest.mark.parametrize("start_hour,end_hour", [(18, 10), (10, 10), (-1, 10), (10, 25)])
    def test_invalid_hours(self, start_hour, end_hour):
        with pytest.raises(ValueError):
            BusinessHoursCalendar("UTC", start_hour=start_hour, end_hour=end_hour)

    def test_invalid_slot_length(self):
        with pytest.raises(ValueError):
            BusinessHoursCalendar("UTC", slot_minutes=0)
