from typing import Sequence

from .errors import (
    InsufficientContiguousAvailabilityError,
    InvalidMobileNumberError,
    MissingNameError,
    SlotNotFoundError,
)
from .slots import Slot, SlotStatus

MOBILE_NUMBER_LENGTH = 10


def validate_reservation(grid: Sequence[Slot], *, slot_id: str, duration: int) -> list[Slot]:
    """
    Pure validation: the starting slot and the next `duration - 1` slots must exist,
    stay on the same date and all be available.
    Returns the slots of the block if OK. Raises domain errors otherwise.
    """
    index = _index_of(grid, slot_id)
    start = grid[index]
    if duration < 1:
        raise InsufficientContiguousAvailabilityError("duration must be positive")

    block = list(grid[index : index + duration])
    if len(block) < duration:
        raise InsufficientContiguousAvailabilityError(f"cannot book {duration} hours: window ends")
    for slot in block:
        if slot.date != start.date:
            raise InsufficientContiguousAvailabilityError(f"cannot book {duration} hours: day ends")
        if slot.status != SlotStatus.AVAILABLE:
            raise InsufficientContiguousAvailabilityError(
                f"cannot book {duration} hours: {slot.id} is {slot.status}"
            )
    return block


def validate_contact(*, name: str, mobile_number: str) -> tuple[str, str]:
    """Return the trimmed (name, mobile_number) pair or raise."""
    cleaned_name = (name or "").strip()
    if not cleaned_name:
        raise MissingNameError("name is required")
    if not is_valid_mobile_number(mobile_number):
        raise InvalidMobileNumberError("mobile number must be exactly 10 digits")
    return cleaned_name, mobile_number


def is_valid_mobile_number(mobile_number: str | None) -> bool:
    return (
        mobile_number is not None
        and len(mobile_number) == MOBILE_NUMBER_LENGTH
        and mobile_number.isascii()
        and mobile_number.isdigit()
    )


def _index_of(grid: Sequence[Slot], slot_id: str) -> int:
    for index, slot in enumerate(grid):
        if slot.id == slot_id:
            return index
    raise SlotNotFoundError(f"slot {slot_id} not found")
