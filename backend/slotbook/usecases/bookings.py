import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ..domain.errors import InvalidPromoCodeError, UnsupportedDurationError, UnsupportedMembersError
from ..domain.pricing import PriceBreakdown, calculate_price
from ..domain.promos import PromoRegistry
from ..domain.repositories import ProfileRecord, ProfileRepository, SlotRepository
from ..domain.services import validate_contact, validate_reservation
from ..domain.slots import ALLOWED_DURATIONS, ALLOWED_MEMBERS, Slot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingRequest:
    slot_id: str
    duration: int
    members: int
    name: str
    mobile_number: str
    promo_code: Optional[str] = None


@dataclass(frozen=True)
class BookingQuote:
    request: BookingRequest
    price: PriceBreakdown
    booking_count: int
    promo_notice: Optional[str]


@dataclass(frozen=True)
class BookingConfirmation:
    slots: list[Slot]
    price: PriceBreakdown
    profile: ProfileRecord


def resolve_promo(promos: PromoRegistry, code: Optional[str]) -> tuple[int, Optional[str]]:
    """Unknown codes price at 0% and come back with a notice instead of failing."""
    if not code:
        return 0, None
    try:
        percent = promos.lookup(code)
    except InvalidPromoCodeError:
        return 0, "Invalid promo code."
    return percent, f"Promo code applied! {percent}% discount."


async def quote_booking(
    slot_repo: SlotRepository,
    profile_repo: ProfileRepository,
    promos: PromoRegistry,
    *,
    request: BookingRequest,
) -> BookingQuote:
    """Phase one: validate the request against the current grid and price it."""
    name, mobile_number = validate_contact(name=request.name, mobile_number=request.mobile_number)
    if request.members not in ALLOWED_MEMBERS:
        raise UnsupportedMembersError(f"members must be one of {list(ALLOWED_MEMBERS)}")
    if request.duration not in ALLOWED_DURATIONS:
        raise UnsupportedDurationError(f"duration must be one of {list(ALLOWED_DURATIONS)}")

    grid = await slot_repo.snapshot()
    validate_reservation(grid, slot_id=request.slot_id, duration=request.duration)

    profile = await profile_repo.get(mobile_number)
    booking_count = profile.booking_count if profile else 0
    promo_percent, notice = resolve_promo(promos, request.promo_code)
    price = calculate_price(request.members, request.duration, booking_count, promo_percent)
    return BookingQuote(
        request=BookingRequest(
            slot_id=request.slot_id,
            duration=request.duration,
            members=request.members,
            name=name,
            mobile_number=mobile_number,
            promo_code=request.promo_code,
        ),
        price=price,
        booking_count=booking_count,
        promo_notice=notice,
    )


async def confirm_booking(
    slot_repo: SlotRepository,
    profile_repo: ProfileRepository,
    promos: PromoRegistry,
    *,
    request: BookingRequest,
    settlement_delay: float = 0.0,
) -> BookingConfirmation:
    """
    Phase two, run once payment has been confirmed externally.

    The slots stay available to other callers during the settlement window;
    `reserve` re-checks the block atomically, so an overlapping confirmation that
    lands first makes this one fail with SlotUnavailableError. The profile is
    only updated after the block is committed; if that update fails the block
    is released again.
    """
    quote = await quote_booking(slot_repo, profile_repo, promos, request=request)
    if settlement_delay > 0:
        await asyncio.sleep(settlement_delay)

    committed = quote.request
    slots = await slot_repo.reserve(
        committed.slot_id,
        duration=committed.duration,
        booking_name=committed.name,
        members=committed.members,
        mobile_number=committed.mobile_number,
    )
    try:
        profile = await profile_repo.upsert(
            committed.mobile_number,
            name=committed.name,
            booking_count=quote.booking_count + 1,
        )
    except Exception:
        await slot_repo.release(committed.slot_id)
        raise
    logger.info(
        "booked %s for %sh (%s members), final price %s",
        committed.slot_id,
        committed.duration,
        committed.members,
        quote.price.final_price,
    )
    return BookingConfirmation(slots=slots, price=quote.price, profile=profile)
