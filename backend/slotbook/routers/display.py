from fastapi import APIRouter, Depends, Query

from ..deps import get_clock, get_slot_repo
from ..domain.repositories import SlotRepository
from ..schemas import DisplayRead, SlotRead
from ..usecases import live_status
from ..utils.time import Clock

router = APIRouter(prefix="/display", tags=["display"])


@router.get("", response_model=DisplayRead)
async def display_board(
    count: int = Query(default=live_status.DEFAULT_UPCOMING_COUNT, ge=1, le=20),
    slot_repo: SlotRepository = Depends(get_slot_repo),
    clock: Clock = Depends(get_clock),
) -> DisplayRead:
    board = await live_status.display_board(slot_repo, now=clock.now(), count=count)
    return DisplayRead(
        now=board.now,
        current=SlotRead.from_domain(slot=board.current) if board.current else None,
        remaining=board.remaining,
        upcoming=[SlotRead.from_domain(slot=slot) for slot in board.upcoming],
    )
