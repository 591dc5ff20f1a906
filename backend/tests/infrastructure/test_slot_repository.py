from datetime import date

import pytest
from slotbook.domain.errors import SlotNotFoundError, SlotUnavailableError
from slotbook.domain.slots import Booked, SlotFilter, SlotStatus, generate_slot_grid
from slotbook.infrastructure.repositories import InMemoryProfileRepository, InMemorySlotRepository

DAY = date(2026, 10, 19)


def _repo() -> InMemorySlotRepository:
    return InMemorySlotRepository(generate_slot_grid(DAY))


async def _reserve(repo: InMemorySlotRepository, slot_id: str, duration: int, name: str = "Asha") -> list:
    return await repo.reserve(
        slot_id,
        duration=duration,
        booking_name=name,
        members=6,
        mobile_number="9876543210",
    )


@pytest.mark.asyncio
async def test_reserve_books_whole_block_with_identical_fields() -> None:
    repo = _repo()
    booked = await _reserve(repo, "2026-10-19-10", 3)
    assert [slot.id for slot in booked] == ["2026-10-19-10", "2026-10-19-11", "2026-10-19-12"]
    states = {slot.state for slot in booked}
    assert states == {Booked(booking_name="Asha", members=6, duration=3, mobile_number="9876543210", start_hour=10)}
    assert (await repo.get("2026-10-19-13")).status == SlotStatus.AVAILABLE


@pytest.mark.asyncio
async def test_reserve_is_all_or_nothing() -> None:
    repo = _repo()
    await _reserve(repo, "2026-10-19-12", 1, name="Ravi")
    before = await repo.snapshot()
    with pytest.raises(SlotUnavailableError):
        await _reserve(repo, "2026-10-19-10", 3)
    assert await repo.snapshot() == before


@pytest.mark.asyncio
async def test_reserve_rejects_block_leaving_the_day() -> None:
    repo = _repo()
    with pytest.raises(SlotUnavailableError):
        await _reserve(repo, "2026-10-19-21", 3)
    assert (await repo.get("2026-10-19-21")).status == SlotStatus.AVAILABLE


@pytest.mark.asyncio
async def test_release_restores_six_hour_block() -> None:
    repo = _repo()
    await _reserve(repo, "2026-10-19-8", 6)
    released = await repo.release("2026-10-19-8")
    assert len(released) == 6
    day = await repo.list(DAY, SlotFilter.ALL)
    assert all(slot.status == SlotStatus.AVAILABLE and slot.duration == 1 for slot in day)


@pytest.mark.asyncio
async def test_release_from_middle_of_block_releases_only_that_block() -> None:
    repo = _repo()
    await _reserve(repo, "2026-10-19-8", 3)
    await _reserve(repo, "2026-10-19-11", 3)
    released = await repo.release("2026-10-19-12")
    assert [slot.id for slot in released] == ["2026-10-19-11", "2026-10-19-12", "2026-10-19-13"]
    booked = await repo.list(DAY, SlotFilter.BOOKED)
    assert [slot.start_hour for slot in booked] == [8, 9, 10]


@pytest.mark.asyncio
async def test_release_after_holiday_split_keeps_next_block() -> None:
    repo = _repo()
    await _reserve(repo, "2026-10-19-8", 3)
    await _reserve(repo, "2026-10-19-11", 3)
    await repo.mark_holiday("2026-10-19-9")
    released = await repo.release("2026-10-19-10")
    assert [slot.id for slot in released] == ["2026-10-19-8", "2026-10-19-10"]
    booked = await repo.list(DAY, SlotFilter.BOOKED)
    assert [slot.start_hour for slot in booked] == [11, 12, 13]
    assert (await repo.get("2026-10-19-9")).status == SlotStatus.HOLIDAY


@pytest.mark.asyncio
async def test_release_of_unbooked_slot_is_a_no_op() -> None:
    repo = _repo()
    assert await repo.release("2026-10-19-9") == []


@pytest.mark.asyncio
async def test_mark_holiday_clears_booking_and_toggles_back_to_available() -> None:
    repo = _repo()
    await _reserve(repo, "2026-10-19-15", 1)
    holiday = await repo.mark_holiday("2026-10-19-15")
    assert holiday.status == SlotStatus.HOLIDAY
    assert not holiday.is_booked
    available = await repo.mark_holiday("2026-10-19-15")
    assert available.status == SlotStatus.AVAILABLE
    assert available.duration == 1


@pytest.mark.asyncio
async def test_list_filters_and_orders_by_start_time() -> None:
    repo = _repo()
    await _reserve(repo, "2026-10-19-14", 1)
    await repo.mark_holiday("2026-10-19-9")
    all_slots = await repo.list(DAY, SlotFilter.ALL)
    assert [slot.start_hour for slot in all_slots] == list(range(8, 22))
    available = await repo.list(DAY, SlotFilter.AVAILABLE)
    assert len(available) == 12
    booked = await repo.list(DAY, SlotFilter.BOOKED)
    assert [slot.id for slot in booked] == ["2026-10-19-14"]
    assert await repo.list(date(2026, 11, 1), SlotFilter.ALL) == []


@pytest.mark.asyncio
async def test_get_unknown_slot_raises() -> None:
    with pytest.raises(SlotNotFoundError):
        await _repo().get("2026-10-19-7")


@pytest.mark.asyncio
async def test_profile_repository_upsert_overwrites() -> None:
    repo = InMemoryProfileRepository()
    assert await repo.get("9876543210") is None
    await repo.upsert("9876543210", name="Asha", booking_count=1)
    updated = await repo.upsert("9876543210", name="Asha K", booking_count=2)
    assert updated.name == "Asha K"
    assert (await repo.get("9876543210")).booking_count == 2
