from fastapi import APIRouter, Depends, HTTPException, status

from ..deps import get_profile_repo
from ..domain.errors import InvalidMobileNumberError
from ..domain.repositories import ProfileRepository
from ..schemas import ProfileRead
from ..usecases import profiles as profile_usecase

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/{mobile_number}", response_model=ProfileRead)
async def get_profile(
    mobile_number: str,
    profile_repo: ProfileRepository = Depends(get_profile_repo),
) -> ProfileRead:
    try:
        profile = await profile_usecase.lookup_profile(profile_repo, mobile_number=mobile_number)
    except InvalidMobileNumberError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="mobile number must be 10 digits")
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="profile not found")
    return ProfileRead.from_domain(profile=profile, welcome_message=profile_usecase.welcome_message(profile))
