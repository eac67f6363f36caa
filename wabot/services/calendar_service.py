from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from wabot.logging_config import get_logger

logger = get_logger("calendar_service")


@dataclass
class TimeSlot:
    start: datetime
    end: datetime
    duration_minutes: int
    display_text: str


class CalendarService(ABC):
    @abstractmethod
    def get_available_slots(self, start: datetime, end: datetime) -> List[TimeSlot]:
        """Free slots between start and end, earliest first."""
        pass


def format_slot(start: datetime, end: datetime) -> str:
    return f"{start:%a %d/%m} {start:%H:%M} - {end:%H:%M}"


class BusinessHoursCalendar(CalendarService):
    """Weekday slots inside business hours, minus known busy intervals."""

    def __init__(
        self,
        timezone_name: str = "America/Argentina/Buenos_Aires",
        start_hour: int = 10,
        end_hour: int = 18,
        slot_minutes: int = 30,
        busy: Optional[Iterable[Tuple[datetime, datetime]]] = None,
        now=None,
    ):
        if not 0 <= start_hour < end_hour <= 24:
            raise ValueError(f"Invalid business hours: {start_hour}-{end_hour}")
        if slot_minutes <= 0:
            raise ValueError("slot_minutes must be positive")
        self.tz = ZoneInfo(timezone_name)
        self.start_hour = start_hour
        self.end_hour = end_hour
        self.slot_minutes = slot_minutes
        self.busy = list(busy or [])
        self._now = now or (lambda: datetime.now(timezone.utc))

    def _is_busy(self, start: datetime, end: datetime) -> bool:
        return any(start < busy_end and end > busy_start for busy_start, busy_end in self.busy)

    def _day_slots(self, day: date, now: datetime) -> List[TimeSlot]:
        slots = []
        cursor = datetime.combine(day, time(hour=self.start_hour), tzinfo=self.tz)
        if self.end_hour == 24:
            day_end = datetime.combine(day + timedelta(days=1), time(), tzinfo=self.tz)
        else:
            day_end = datetime.combine(day, time(hour=self.end_hour), tzinfo=self.tz)
        step = timedelta(minutes=self.slot_minutes)
        while cursor + step <= day_end:
            slot_end = cursor + step
            if cursor > now and not self._is_busy(cursor, slot_end):
                slots.append(
                    TimeSlot(
                        start=cursor,
                        end=slot_end,
                        duration_minutes=self.slot_minutes,
                        display_text=format_slot(cursor, slot_end),
                    )
                )
            cursor = slot_end
        return slots

    def get_available_slots(self, start: datetime, end: datetime) -> List[TimeSlot]:
        logger.info(f"Getting available time slots from {start} to {end}")
        now = self._now()
        local_start = start.astimezone(self.tz) if start.tzinfo else start.replace(tzinfo=self.tz)
        local_end = end.astimezone(self.tz) if end.tzinfo else end.replace(tzinfo=self.tz)

        slots: List[TimeSlot] = []
        day = local_start.date()
        while day <= local_end.date():
            if day.weekday() < 5:
                slots.extend(
                    slot for slot in self._day_slots(day, now) if slot.start >= local_start and slot.end <= local_end
                )
            day += timedelta(days=1)

        logger.info(f"Found {len(slots)} available time slots")
        return slots
