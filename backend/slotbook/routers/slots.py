from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ..deps import get_slot_repo
from ..domain.errors import (
    InsufficientContiguousAvailabilityError,
    SlotNotFoundError,
    SlotUnavailableError,
)
from ..domain.repositories import SlotRepository
from ..domain.slots import SlotFilter
from ..schemas import SlotRead, SlotSelect, SlotSelectionRead
from ..usecases import admin as admin_usecase
from ..usecases import slots as slot_usecase

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("", response_model=List[SlotRead])
async def list_slots(
    day: date = Query(..., alias="date", description="Calendar day (YYYY-MM-DD)"),
    slot_filter: SlotFilter = Query(default=SlotFilter.AVAILABLE, alias="filter"),
    slot_repo: SlotRepository = Depends(get_slot_repo),
) -> list[SlotRead]:
    rows = await slot_usecase.list_slots(slot_repo, day=day, slot_filter=slot_filter)
    return [SlotRead.from_domain(slot=slot) for slot in rows]


@router.get("/dates", response_model=List[date])
async def list_dates(slot_repo: SlotRepository = Depends(get_slot_repo)) -> list[date]:
    return await slot_usecase.list_dates(slot_repo)


@router.post("/{slot_id}/select", response_model=SlotSelectionRead)
async def select_slot(
    payload: SlotSelect,
    slot_id: str = Path(..., min_length=1),
    slot_repo: SlotRepository = Depends(get_slot_repo),
) -> SlotSelectionRead:
    try:
        selection = await admin_usecase.select_slot(
            slot_repo,
            slot_id=slot_id,
            duration=payload.duration,
            is_admin=False,
        )
    except SlotNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="slot not found")
    except SlotUnavailableError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="slot not available")
    except InsufficientContiguousAvailabilityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot book for {payload.duration} hours. Some slots are unavailable.",
        )
    return SlotSelectionRead(
        outcome=selection.outcome,
        slots=[SlotRead.from_domain(slot=slot) for slot in selection.slots],
    )
