from dataclasses import dataclass
from datetime import timedelta
from typing import Literal

from ..config import Settings
from ..domain.errors import InvalidAdminCredentialsError, SlotUnavailableError
from ..domain.repositories import SlotRepository
from ..domain.slots import Slot, SlotStatus
from ..utils.auth import ADMIN_SUBJECT, create_access_token, verify_admin_credentials
from .slots import select_slot as select_for_booking

SelectionOutcome = Literal["selected", "cancelled"]


@dataclass(frozen=True)
class SlotSelection:
    outcome: SelectionOutcome
    slots: list[Slot]


def login(settings: Settings, *, username: str, password: str) -> str:
    """Check the configured admin pair and issue a bearer token."""
    if not verify_admin_credentials(
        username,
        password,
        expected_username=settings.admin_username,
        expected_password=settings.admin_password,
    ):
        raise InvalidAdminCredentialsError("invalid credentials")
    return create_access_token(
        subject=ADMIN_SUBJECT,
        secret=settings.auth_secret,
        algorithm=settings.auth_algorithm,
        expires_delta=timedelta(minutes=settings.admin_token_minutes),
    )


async def force_mark_holiday(slot_repo: SlotRepository, *, slot_id: str) -> tuple[Slot, SlotStatus]:
    """Toggle Holiday. A booked slot goes straight to Holiday and loses its booking."""
    before = await slot_repo.get(slot_id)
    after = await slot_repo.mark_holiday(slot_id)
    return after, before.status


async def force_cancel(slot_repo: SlotRepository, *, slot_id: str) -> tuple[Slot, list[Slot]]:
    """Release the whole booking block containing `slot_id`. Returns (slot before, released)."""
    before = await slot_repo.get(slot_id)
    released = await slot_repo.release(slot_id)
    return before, released


async def select_slot(
    slot_repo: SlotRepository,
    *,
    slot_id: str,
    duration: int,
    is_admin: bool,
) -> SlotSelection:
    """
    Slot selection with the admin relaxation: an admin picking a booked slot
    cancels that booking instead of starting a new one.
    """
    slot = await slot_repo.get(slot_id)
    if slot.status == SlotStatus.HOLIDAY:
        raise SlotUnavailableError(f"slot {slot_id} is a holiday")
    if slot.status == SlotStatus.BOOKED:
        if not is_admin:
            raise SlotUnavailableError(f"slot {slot_id} is booked")
        _, released = await force_cancel(slot_repo, slot_id=slot_id)
        return SlotSelection(outcome="cancelled", slots=released)
    block = await select_for_booking(slot_repo, slot_id=slot_id, duration=duration)
    return SlotSelection(outcome="selected", slots=block)
