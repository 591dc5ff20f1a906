import asyncio
from datetime import date

import pytest
from slotbook.domain.errors import (
    InsufficientContiguousAvailabilityError,
    InvalidMobileNumberError,
    MissingNameError,
    SlotUnavailableError,
    UnsupportedMembersError,
)
from slotbook.domain.promos import PromoRegistry
from slotbook.domain.slots import SlotFilter, SlotStatus, generate_slot_grid
from slotbook.infrastructure.repositories import InMemoryProfileRepository, InMemorySlotRepository
from slotbook.usecases import bookings as uc

DAY = date(2026, 10, 19)


def _request(**overrides: object) -> uc.BookingRequest:
    fields: dict = {
        "slot_id": "2026-10-19-10",
        "duration": 1,
        "members": 6,
        "name": "Asha",
        "mobile_number": "9876543210",
        "promo_code": None,
    }
    fields.update(overrides)
    return uc.BookingRequest(**fields)


def _repos() -> tuple[InMemorySlotRepository, InMemoryProfileRepository, PromoRegistry]:
    return InMemorySlotRepository(generate_slot_grid(DAY)), InMemoryProfileRepository(), PromoRegistry()


@pytest.mark.asyncio
async def test_quote_applies_promo_and_loyalty_from_profile() -> None:
    slots, profiles, promos = _repos()
    await profiles.upsert("9876543210", name="Asha", booking_count=5)
    quote = await uc.quote_booking(slots, profiles, promos, request=_request(promo_code="CRICKET10"))
    assert quote.booking_count == 5
    assert quote.price.final_price == 221
    assert quote.promo_notice == "Promo code applied! 10% discount."


@pytest.mark.asyncio
async def test_quote_with_unknown_promo_prices_at_zero_and_returns_notice() -> None:
    slots, profiles, promos = _repos()
    quote = await uc.quote_booking(slots, profiles, promos, request=_request(promo_code="NOPE"))
    assert quote.price.final_price == 250
    assert quote.price.promo_discount_percent == 0
    assert quote.promo_notice == "Invalid promo code."


@pytest.mark.asyncio
async def test_quote_validates_contact_before_availability() -> None:
    slots, profiles, promos = _repos()
    with pytest.raises(MissingNameError):
        await uc.quote_booking(slots, profiles, promos, request=_request(name=""))
    with pytest.raises(InvalidMobileNumberError):
        await uc.quote_booking(slots, profiles, promos, request=_request(mobile_number="12345"))
    with pytest.raises(UnsupportedMembersError):
        await uc.quote_booking(slots, profiles, promos, request=_request(members=8))


@pytest.mark.asyncio
async def test_quote_rejects_block_at_end_of_day() -> None:
    slots, profiles, promos = _repos()
    with pytest.raises(InsufficientContiguousAvailabilityError):
        await uc.quote_booking(slots, profiles, promos, request=_request(slot_id="2026-10-19-21", duration=3))


@pytest.mark.asyncio
async def test_confirm_reserves_block_and_creates_profile() -> None:
    slots, profiles, promos = _repos()
    confirmation = await uc.confirm_booking(slots, profiles, promos, request=_request(duration=3, members=12))
    assert [slot.start_hour for slot in confirmation.slots] == [10, 11, 12]
    assert confirmation.price.final_price == 1200
    assert confirmation.profile.booking_count == 1
    assert (await profiles.get("9876543210")).name == "Asha"


@pytest.mark.asyncio
async def test_confirm_increments_count_and_overwrites_name() -> None:
    slots, profiles, promos = _repos()
    await profiles.upsert("9876543210", name="Asha", booking_count=4)
    confirmation = await uc.confirm_booking(
        slots, profiles, promos, request=_request(name="Asha Rao", slot_id="2026-10-19-15")
    )
    assert confirmation.price.loyalty_discount_percent == 0
    profile = await profiles.get("9876543210")
    assert profile.name == "Asha Rao"
    assert profile.booking_count == 5


@pytest.mark.asyncio
async def test_slots_stay_available_during_settlement_window() -> None:
    slots, profiles, promos = _repos()
    task = asyncio.create_task(
        uc.confirm_booking(slots, profiles, promos, request=_request(), settlement_delay=0.05)
    )
    await asyncio.sleep(0.01)
    assert (await slots.get("2026-10-19-10")).status == SlotStatus.AVAILABLE
    await task
    assert (await slots.get("2026-10-19-10")).status == SlotStatus.BOOKED


@pytest.mark.asyncio
async def test_overlapping_confirmations_do_not_double_allocate() -> None:
    slots, profiles, promos = _repos()
    first = uc.confirm_booking(slots, profiles, promos, request=_request(duration=3), settlement_delay=0.01)
    second = uc.confirm_booking(
        slots,
        profiles,
        promos,
        request=_request(slot_id="2026-10-19-11", mobile_number="9123456780", name="Ravi"),
        settlement_delay=0.02,
    )
    results = await asyncio.gather(first, second, return_exceptions=True)
    assert not isinstance(results[0], Exception)
    assert isinstance(results[1], SlotUnavailableError)
    assert await profiles.get("9123456780") is None
    booked = await slots.list(DAY, SlotFilter.BOOKED)
    assert [slot.start_hour for slot in booked] == [10, 11, 12]
    assert {slot.state.booking_name for slot in booked} == {"Asha"}


class FailingProfileRepository(InMemoryProfileRepository):
    async def upsert(self, mobile_number: str, *, name: str, booking_count: int):
        raise RuntimeError("db down")


@pytest.mark.asyncio
async def test_failed_profile_write_releases_reserved_block() -> None:
    slots, _, promos = _repos()
    profiles = FailingProfileRepository()
    with pytest.raises(RuntimeError):
        await uc.confirm_booking(slots, profiles, promos, request=_request(duration=3))
    assert await slots.list(DAY, SlotFilter.BOOKED) == []
    assert await profiles.get("9876543210") is None
