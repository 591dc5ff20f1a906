from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.errors import SlotNotFoundError, SlotUnavailableError
from ..domain.repositories import ProfileRecord, ProfileRepository, SlotRepository
from ..domain.slots import Available, Booked, Holiday, Slot, SlotFilter, SlotStatus, block_start_index
from ..models import CustomerProfile


class InMemorySlotRepository(SlotRepository):
    """
    Slot grid held as an immutable tuple. Every mutation builds a new tuple and
    swaps it in under a lock, so readers only ever see whole committed grids.
    """

    def __init__(self, slots: Iterable[Slot]) -> None:
        self._slots: tuple[Slot, ...] = tuple(slots)
        self._lock = asyncio.Lock()

    async def snapshot(self) -> Sequence[Slot]:
        return self._slots

    async def list(self, day: date, slot_filter: SlotFilter = SlotFilter.ALL) -> list[Slot]:
        slots = [slot for slot in self._slots if slot.date == day and _matches(slot, slot_filter)]
        return sorted(slots, key=lambda slot: slot.start_hour)

    async def get(self, slot_id: str) -> Slot:
        return self._slots[_index_of(self._slots, slot_id)]

    async def reserve(
        self,
        slot_id: str,
        *,
        duration: int,
        booking_name: str,
        members: int,
        mobile_number: str,
    ) -> list[Slot]:
        async with self._lock:
            grid = list(self._slots)
            index = _index_of(grid, slot_id)
            start = grid[index]
            block = grid[index : index + duration]
            if len(block) < duration or duration < 1:
                raise SlotUnavailableError(f"block of {duration} hours from {slot_id} leaves the window")
            for slot in block:
                if slot.date != start.date or slot.status != SlotStatus.AVAILABLE:
                    raise SlotUnavailableError(f"slot {slot.id} is not available")

            booked = Booked(
                booking_name=booking_name,
                members=members,
                duration=duration,
                mobile_number=mobile_number,
                start_hour=start.start_hour,
            )
            for offset in range(duration):
                grid[index + offset] = grid[index + offset].with_state(booked)
            self._slots = tuple(grid)
            return grid[index : index + duration]

    async def release(self, slot_id: str) -> list[Slot]:
        async with self._lock:
            grid = list(self._slots)
            index = _index_of(grid, slot_id)
            if not grid[index].is_booked:
                return []
            booking = grid[index].state
            start = block_start_index(grid, index)
            released: list[Slot] = []
            for position in range(start, min(start + grid[index].duration, len(grid))):
                if grid[position].state != booking:
                    continue
                grid[position] = grid[position].with_state(Available())
                released.append(grid[position])
            self._slots = tuple(grid)
            return released

    async def mark_holiday(self, slot_id: str) -> Slot:
        async with self._lock:
            grid = list(self._slots)
            index = _index_of(grid, slot_id)
            slot = grid[index]
            state = Available() if slot.status == SlotStatus.HOLIDAY else Holiday()
            grid[index] = slot.with_state(state)
            self._slots = tuple(grid)
            return grid[index]


class InMemoryProfileRepository(ProfileRepository):
    def __init__(self) -> None:
        self._profiles: dict[str, ProfileRecord] = {}

    async def get(self, mobile_number: str) -> ProfileRecord | None:
        return self._profiles.get(mobile_number)

    async def upsert(self, mobile_number: str, *, name: str, booking_count: int) -> ProfileRecord:
        record = ProfileRecord(mobile_number=mobile_number, name=name, booking_count=booking_count)
        self._profiles[mobile_number] = record
        return record


class SqlAlchemyProfileRepository(ProfileRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, mobile_number: str) -> ProfileRecord | None:
        result = await self.session.scalar(
            select(CustomerProfile).where(CustomerProfile.mobile_number == mobile_number)
        )
        if not isinstance(result, CustomerProfile):
            return None
        return _to_record(result)

    async def upsert(self, mobile_number: str, *, name: str, booking_count: int) -> ProfileRecord:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        profile = await self.session.scalar(
            select(CustomerProfile).where(CustomerProfile.mobile_number == mobile_number).with_for_update()
        )
        if isinstance(profile, CustomerProfile):
            profile.name = name
            profile.booking_count = booking_count
            profile.updated_at = now
        else:
            profile = CustomerProfile(
                mobile_number=mobile_number,
                name=name,
                booking_count=booking_count,
                created_at=now,
                updated_at=now,
            )
            self.session.add(profile)
        await self.session.flush()
        return _to_record(profile)


def _to_record(profile: CustomerProfile) -> ProfileRecord:
    return ProfileRecord(
        mobile_number=profile.mobile_number,
        name=profile.name,
        booking_count=profile.booking_count,
    )


def _matches(slot: Slot, slot_filter: SlotFilter) -> bool:
    if slot_filter == SlotFilter.AVAILABLE:
        return slot.status == SlotStatus.AVAILABLE
    if slot_filter == SlotFilter.BOOKED:
        return slot.status == SlotStatus.BOOKED
    return True


def _index_of(grid: Sequence[Slot], slot_id: str) -> int:
    for index, slot in enumerate(grid):
        if slot.id == slot_id:
            return index
    raise SlotNotFoundError(f"slot {slot_id} not found")
