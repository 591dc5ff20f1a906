from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import StrEnum
from typing import Sequence, Union

ALLOWED_MEMBERS = (6, 12)
ALLOWED_DURATIONS = (1, 3, 6, 12)


class SlotStatus(StrEnum):
    AVAILABLE = "available"
    BOOKED = "booked"
    HOLIDAY = "holiday"


class SlotFilter(StrEnum):
    ALL = "all"
    AVAILABLE = "available"
    BOOKED = "booked"


@dataclass(frozen=True)
class Available:
    status: SlotStatus = field(default=SlotStatus.AVAILABLE, init=False)


@dataclass(frozen=True)
class Holiday:
    status: SlotStatus = field(default=SlotStatus.HOLIDAY, init=False)


@dataclass(frozen=True)
class Booked:
    booking_name: str
    members: int
    duration: int
    mobile_number: str
    start_hour: int
    status: SlotStatus = field(default=SlotStatus.BOOKED, init=False)


SlotState = Union[Available, Booked, Holiday]


@dataclass(frozen=True)
class Slot:
    date: date
    start_hour: int
    state: SlotState = field(default_factory=Available)

    @property
    def id(self) -> str:
        return slot_id_for(self.date, self.start_hour)

    @property
    def status(self) -> SlotStatus:
        return self.state.status

    @property
    def start_time(self) -> str:
        return f"{self.start_hour}:00"

    @property
    def end_time(self) -> str:
        return f"{self.start_hour + 1}:00"

    @property
    def duration(self) -> int:
        """Size of the booking block this slot belongs to; 1 when not booked."""
        if isinstance(self.state, Booked):
            return self.state.duration
        return 1

    @property
    def is_booked(self) -> bool:
        return isinstance(self.state, Booked)

    def with_state(self, state: SlotState) -> "Slot":
        return Slot(date=self.date, start_hour=self.start_hour, state=state)


def block_start_index(grid: Sequence[Slot], index: int) -> int:
    """
    Index of the first slot of the booking block that contains grid[index].

    The block start is the position of `Booked.start_hour` on the same date,
    whether or not that slot is still booked.
    """
    slot = grid[index]
    if not isinstance(slot.state, Booked):
        return index
    start = index
    while (
        start > 0
        and grid[start - 1].date == slot.date
        and grid[start - 1].start_hour >= slot.state.start_hour
    ):
        start -= 1
    return start


def slot_id_for(day: date, start_hour: int) -> str:
    return f"{day.isoformat()}-{start_hour}"


def generate_slot_grid(
    today: date,
    *,
    days: int = 7,
    open_hour: int = 8,
    close_hour: int = 22,
) -> tuple[Slot, ...]:
    """Build the fixed rolling window: `days` days from `today`, one slot per hour."""
    if open_hour >= close_hour:
        raise ValueError("open_hour must be earlier than close_hour")
    return tuple(
        Slot(date=today + timedelta(days=offset), start_hour=hour)
        for offset in range(days)
        for hour in range(open_hour, close_hour)
    )
