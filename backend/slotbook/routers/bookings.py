from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..deps import get_profile_repo, get_promo_registry, get_session, get_slot_repo
from ..domain.errors import (
    BookingDomainError,
    InsufficientContiguousAvailabilityError,
    InvalidMobileNumberError,
    MissingNameError,
    SlotNotFoundError,
    SlotUnavailableError,
)
from ..domain.promos import PromoRegistry
from ..domain.repositories import ProfileRepository, SlotRepository
from ..schemas import BookingCreate, BookingRead, PriceRead, QuoteRead, SlotRead
from ..usecases import bookings as booking_usecase
from ..utils.audit_log import emit_audit_log
from ..utils.payment import build_payment_uri

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _to_request(payload: BookingCreate) -> booking_usecase.BookingRequest:
    return booking_usecase.BookingRequest(
        slot_id=payload.slot_id,
        duration=payload.duration,
        members=payload.members,
        name=payload.name,
        mobile_number=payload.mobile_number,
        promo_code=payload.promo_code or None,
    )


def _http_error(exc: BookingDomainError) -> HTTPException:
    if isinstance(exc, SlotNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="slot not found")
    if isinstance(exc, MissingNameError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please enter your name")
    if isinstance(exc, InvalidMobileNumberError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please enter a valid 10-digit mobile number",
        )
    if isinstance(exc, (InsufficientContiguousAvailabilityError, SlotUnavailableError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Some slots are unavailable.")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _payment_uri(amount: int) -> Optional[str]:
    settings = get_settings()
    if not settings.payee_id:
        return None
    return build_payment_uri(
        payee_id=settings.payee_id,
        payee_name=settings.payee_name,
        amount=amount,
        currency=settings.currency,
        note=settings.payment_note,
    )


@router.post("/quote", response_model=QuoteRead)
async def quote_booking(
    payload: BookingCreate,
    slot_repo: SlotRepository = Depends(get_slot_repo),
    profile_repo: ProfileRepository = Depends(get_profile_repo),
    promos: PromoRegistry = Depends(get_promo_registry),
) -> QuoteRead:
    try:
        quote = await booking_usecase.quote_booking(
            slot_repo,
            profile_repo,
            promos,
            request=_to_request(payload),
        )
    except BookingDomainError as exc:
        raise _http_error(exc) from exc

    return QuoteRead(
        slot_id=quote.request.slot_id,
        duration=quote.request.duration,
        members=quote.request.members,
        booking_count=quote.booking_count,
        price=PriceRead.from_domain(price=quote.price),
        promo_notice=quote.promo_notice,
        payment_uri=_payment_uri(quote.price.final_price),
    )


@router.post("/confirm", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def confirm_booking(
    payload: BookingCreate,
    session: AsyncSession = Depends(get_session),
    slot_repo: SlotRepository = Depends(get_slot_repo),
    profile_repo: ProfileRepository = Depends(get_profile_repo),
    promos: PromoRegistry = Depends(get_promo_registry),
) -> BookingRead:
    """Called once the payment confirmation signal has arrived."""
    confirmation = None
    try:
        async with session.begin():
            try:
                confirmation = await booking_usecase.confirm_booking(
                    slot_repo,
                    profile_repo,
                    promos,
                    request=_to_request(payload),
                    settlement_delay=get_settings().settlement_delay_seconds,
                )
            except BookingDomainError as exc:
                raise _http_error(exc) from exc
    except Exception:
        # profile commit failed after the block was reserved
        if confirmation is not None:
            await slot_repo.release(payload.slot_id)
        raise

    try:
        emit_audit_log(
            action="booking.confirmed",
            initiator="customer",
            slot_id=payload.slot_id,
            duration=payload.duration,
            mobile_number=payload.mobile_number,
            status_from="available",
            status_to="booked",
            amount=confirmation.price.final_price,
        )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")

    return BookingRead(
        slots=[SlotRead.from_domain(slot=slot) for slot in confirmation.slots],
        price=PriceRead.from_domain(price=confirmation.price),
        booking_count=confirmation.profile.booking_count,
    )
