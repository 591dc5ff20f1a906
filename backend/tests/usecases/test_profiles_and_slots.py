from datetime import date, timedelta

import pytest
from slotbook.domain.errors import InvalidMobileNumberError, SlotUnavailableError
from slotbook.domain.repositories import ProfileRecord
from slotbook.domain.slots import SlotFilter, generate_slot_grid
from slotbook.infrastructure.repositories import InMemorySlotRepository
from slotbook.usecases import profiles as profile_uc
from slotbook.usecases import slots as slot_uc

DAY = date(2026, 10, 19)


class FakeProfileRepo:
    def __init__(self, record: ProfileRecord | None) -> None:
        self.record = record
        self.calls: list[str] = []

    async def get(self, mobile_number: str) -> ProfileRecord | None:
        self.calls.append(mobile_number)
        return self.record

    async def upsert(self, mobile_number: str, *, name: str, booking_count: int) -> ProfileRecord:  # pragma: no cover
        raise AssertionError("lookup must not write")


@pytest.mark.asyncio
async def test_lookup_returns_known_profile() -> None:
    repo = FakeProfileRepo(ProfileRecord(mobile_number="9876543210", name="Asha", booking_count=3))
    profile = await profile_uc.lookup_profile(repo, mobile_number="9876543210")
    assert profile is not None
    assert profile_uc.welcome_message(profile) == "Welcome back, Asha!"


@pytest.mark.asyncio
async def test_lookup_skips_repository_for_short_numbers() -> None:
    repo = FakeProfileRepo(None)
    with pytest.raises(InvalidMobileNumberError):
        await profile_uc.lookup_profile(repo, mobile_number="98765")
    assert repo.calls == []


@pytest.mark.asyncio
async def test_lookup_treats_nameless_profile_as_new_customer() -> None:
    repo = FakeProfileRepo(ProfileRecord(mobile_number="9876543210", name="", booking_count=0))
    assert await profile_uc.lookup_profile(repo, mobile_number="9876543210") is None


@pytest.mark.asyncio
async def test_list_slots_defaults_to_available() -> None:
    repo = InMemorySlotRepository(generate_slot_grid(DAY))
    await repo.reserve("2026-10-19-8", duration=1, booking_name="Asha", members=6, mobile_number="9876543210")
    available = await slot_uc.list_slots(repo, day=DAY)
    assert len(available) == 13
    booked = await slot_uc.list_slots(repo, day=DAY, slot_filter=SlotFilter.BOOKED)
    assert [slot.id for slot in booked] == ["2026-10-19-8"]


@pytest.mark.asyncio
async def test_list_dates_covers_window() -> None:
    repo = InMemorySlotRepository(generate_slot_grid(DAY))
    assert await slot_uc.list_dates(repo) == [DAY + timedelta(days=offset) for offset in range(7)]


@pytest.mark.asyncio
async def test_select_slot_rejects_booked_start() -> None:
    repo = InMemorySlotRepository(generate_slot_grid(DAY))
    await repo.reserve("2026-10-19-8", duration=1, booking_name="Asha", members=6, mobile_number="9876543210")
    with pytest.raises(SlotUnavailableError):
        await slot_uc.select_slot(repo, slot_id="2026-10-19-8", duration=1)
