from typing import Optional

from ..domain.errors import InvalidMobileNumberError
from ..domain.repositories import ProfileRecord, ProfileRepository
from ..domain.services import is_valid_mobile_number


async def lookup_profile(profile_repo: ProfileRepository, *, mobile_number: str) -> Optional[ProfileRecord]:
    """Returning-customer lookup, done once the typed number reaches 10 digits."""
    if not is_valid_mobile_number(mobile_number):
        raise InvalidMobileNumberError("mobile number must be exactly 10 digits")
    profile = await profile_repo.get(mobile_number)
    if profile is None or not profile.name:
        return None
    return profile


def welcome_message(profile: ProfileRecord) -> str:
    return f"Welcome back, {profile.name}!"
