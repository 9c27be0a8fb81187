"""Planner day layout: fixed 30-minute slots from 08:00 to 17:30"""

from ...shared.validators import minutes_since_midnight

DAY_START_HOUR = 8
DAY_END_HOUR = 18
SLOT_MINUTES = 30
DURATION_STEP = 15
DEFAULT_DURATION = 30


def time_slots() -> list[str]:
    """All planner slots of a day as HH:MM strings"""
    return [
        f"{minutes // 60:02d}:{minutes % 60:02d}"
        for minutes in range(DAY_START_HOUR * 60, DAY_END_HOUR * 60, SLOT_MINUTES)
    ]


SLOTS = time_slots()


def is_valid_slot(slot: str) -> bool:
    return slot in SLOTS


def span(slot: str, duration: int) -> tuple[int, int]:
    """Half-open [start, end) minute range an item occupies"""
    start = minutes_since_midnight(slot)
    return start, start + duration


def overlaps(a: tuple[int, int], b: tuple[int, int]) -> bool:
    return a[0] < b[1] and b[0] < a[1]


def fits_in_day(slot: str, duration: int) -> bool:
    return span(slot, duration)[1] <= DAY_END_HOUR * 60


def end_time(slot: str, duration: int) -> str:
    end = span(slot, duration)[1]
    return f"{end // 60:02d}:{end % 60:02d}"
