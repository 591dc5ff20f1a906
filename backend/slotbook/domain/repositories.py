from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Protocol, Sequence

from .slots import Slot, SlotFilter


@dataclass(frozen=True)
class ProfileRecord:
    mobile_number: str
    name: str
    booking_count: int


class SlotRepository(Protocol):
    async def snapshot(self) -> Sequence[Slot]: ...

    async def list(self, day: date, slot_filter: SlotFilter = SlotFilter.ALL) -> list[Slot]: ...

    async def get(self, slot_id: str) -> Slot: ...

    async def reserve(
        self,
        slot_id: str,
        *,
        duration: int,
        booking_name: str,
        members: int,
        mobile_number: str,
    ) -> list[Slot]: ...

    async def release(self, slot_id: str) -> list[Slot]: ...

    async def mark_holiday(self, slot_id: str) -> Slot: ...


class ProfileRepository(Protocol):
    async def get(self, mobile_number: str) -> ProfileRecord | None: ...

    async def upsert(self, mobile_number: str, *, name: str, booking_count: int) -> ProfileRecord: ...
