from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..domain.repositories import SlotRepository
from ..domain.slots import Slot, block_start_index
from ..utils.time import at_hour

DEFAULT_UPCOMING_COUNT = 4


@dataclass(frozen=True)
class DisplayBoard:
    now: datetime
    current: Optional[Slot]
    remaining: str
    upcoming: list[Slot]


def current_active_session(grid: Sequence[Slot], now: datetime) -> Optional[Slot]:
    """
    Booking block running today whose hours [start, start + duration - 1]
    include now's hour, returned as its first slot. Both ends are inclusive.
    """
    today = now.date()
    for index, slot in enumerate(grid):
        if slot.date != today or not slot.is_booked:
            continue
        if block_start_index(grid, index) != index:
            continue
        if slot.start_hour <= now.hour <= slot.start_hour + slot.duration - 1:
            return slot
    return None


def upcoming_sessions(grid: Sequence[Slot], now: datetime, count: int = DEFAULT_UPCOMING_COUNT) -> list[Slot]:
    today = now.date()
    tomorrow = today + timedelta(days=1)
    upcoming = [
        slot
        for slot in grid
        if slot.is_booked
        and ((slot.date == today and slot.start_hour > now.hour) or slot.date == tomorrow)
    ]
    upcoming.sort(key=lambda slot: (slot.date, slot.start_hour))
    return upcoming[:count]


def remaining_time(slot: Optional[Slot], now: datetime) -> str:
    """Time left until today's end hour of the slot's block as HH:MM, never negative."""
    if slot is None:
        return ""
    end = at_hour(now, slot.start_hour + slot.duration)
    diff = end - now
    if diff <= timedelta(0):
        return "00:00"
    total_minutes = int(diff.total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}:{minutes:02d}"


async def display_board(
    slot_repo: SlotRepository,
    *,
    now: datetime,
    count: int = DEFAULT_UPCOMING_COUNT,
) -> DisplayBoard:
    grid = await slot_repo.snapshot()
    current = current_active_session(grid, now)
    return DisplayBoard(
        now=now,
        current=current,
        remaining=remaining_time(current, now),
        upcoming=upcoming_sessions(grid, now, count),
    )
