from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ..config import get_settings
from ..deps import get_current_admin, get_promo_registry, get_slot_repo
from ..domain.errors import (
    DuplicatePromoCodeError,
    InsufficientContiguousAvailabilityError,
    InvalidAdminCredentialsError,
    InvalidPromoDefinitionError,
    SlotNotFoundError,
    SlotUnavailableError,
)
from ..domain.promos import PromoRegistry
from ..domain.repositories import SlotRepository
from ..schemas import (
    AdminLogin,
    PromoCreate,
    PromoRead,
    SlotRead,
    SlotSelect,
    SlotSelectionRead,
    TokenRead,
)
from ..usecases import admin as admin_usecase
from ..utils.audit_log import emit_audit_log

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=TokenRead)
async def login(payload: AdminLogin) -> TokenRead:
    try:
        token = admin_usecase.login(get_settings(), username=payload.username, password=payload.password)
    except InvalidAdminCredentialsError:
        emit_audit_log(action="admin.login_failed", initiator="admin")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenRead(access_token=token)


@router.get("/promos", response_model=List[PromoRead], dependencies=[Depends(get_current_admin)])
async def list_promos(promos: PromoRegistry = Depends(get_promo_registry)) -> list[PromoRead]:
    return [PromoRead.from_domain(promo=promo) for promo in promos.list()]


@router.post(
    "/promos",
    response_model=PromoRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_admin)],
)
async def add_promo(
    payload: PromoCreate,
    promos: PromoRegistry = Depends(get_promo_registry),
) -> PromoRead:
    try:
        promo = promos.add(payload.code, payload.discount_percent)
    except DuplicatePromoCodeError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="promo code already exists")
    except InvalidPromoDefinitionError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please enter a valid promo code and discount percentage.",
        )
    try:
        emit_audit_log(
            action="promo.added",
            initiator="admin",
            extra={"code": promo.code, "discount_percent": promo.discount_percent},
        )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")
    return PromoRead.from_domain(promo=promo)


@router.post("/slots/{slot_id}/holiday", response_model=SlotRead, dependencies=[Depends(get_current_admin)])
async def toggle_holiday(
    slot_id: str = Path(..., min_length=1),
    slot_repo: SlotRepository = Depends(get_slot_repo),
) -> SlotRead:
    try:
        slot, status_from = await admin_usecase.force_mark_holiday(slot_repo, slot_id=slot_id)
    except SlotNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="slot not found")
    try:
        emit_audit_log(
            action="slot.holiday_toggled",
            initiator="admin",
            slot_id=slot.id,
            status_from=status_from,
            status_to=slot.status,
        )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")
    return SlotRead.from_domain(slot=slot)


@router.post("/slots/{slot_id}/cancel", response_model=List[SlotRead], dependencies=[Depends(get_current_admin)])
async def cancel_booking(
    slot_id: str = Path(..., min_length=1),
    slot_repo: SlotRepository = Depends(get_slot_repo),
) -> list[SlotRead]:
    try:
        before, released = await admin_usecase.force_cancel(slot_repo, slot_id=slot_id)
    except SlotNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="slot not found")
    _audit_cancel(slot_id, before.duration, released)
    return [SlotRead.from_domain(slot=slot) for slot in released]


@router.post("/slots/{slot_id}/select", response_model=SlotSelectionRead, dependencies=[Depends(get_current_admin)])
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
            is_admin=True,
        )
    except SlotNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="slot not found")
    except (SlotUnavailableError, InsufficientContiguousAvailabilityError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="slot not available")
    if selection.outcome == "cancelled":
        _audit_cancel(slot_id, len(selection.slots), selection.slots)
    return SlotSelectionRead(
        outcome=selection.outcome,
        slots=[SlotRead.from_domain(slot=slot) for slot in selection.slots],
    )


def _audit_cancel(slot_id: str, duration: int, released: list) -> None:
    if not released:
        return
    try:
        emit_audit_log(
            action="booking.cancelled",
            initiator="admin",
            slot_id=slot_id,
            duration=duration,
            status_from="booked",
            status_to="available",
        )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")
