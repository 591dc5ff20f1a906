from datetime import date
from typing import List

from ..domain.errors import SlotUnavailableError
from ..domain.repositories import SlotRepository
from ..domain.services import validate_reservation
from ..domain.slots import Slot, SlotFilter, SlotStatus


async def list_slots(
    slot_repo: SlotRepository,
    *,
    day: date,
    slot_filter: SlotFilter = SlotFilter.AVAILABLE,
) -> List[Slot]:
    return await slot_repo.list(day, slot_filter)


async def list_dates(slot_repo: SlotRepository) -> List[date]:
    grid = await slot_repo.snapshot()
    return sorted({slot.date for slot in grid})


async def select_slot(
    slot_repo: SlotRepository,
    *,
    slot_id: str,
    duration: int,
) -> list[Slot]:
    """Customer selection: the slot must start a free block of `duration` hours."""
    slot = await slot_repo.get(slot_id)
    if slot.status != SlotStatus.AVAILABLE:
        raise SlotUnavailableError(f"slot {slot_id} is {slot.status}")
    grid = await slot_repo.snapshot()
    return validate_reservation(grid, slot_id=slot_id, duration=duration)
