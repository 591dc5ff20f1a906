from functools import lru_cache
from typing import AsyncIterator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .database import async_session
from .domain.promos import PromoRegistry
from .domain.repositories import ProfileRepository, SlotRepository
from .domain.slots import generate_slot_grid
from .infrastructure.repositories import (
    InMemoryProfileRepository,
    InMemorySlotRepository,
    SqlAlchemyProfileRepository,
)
from .utils.auth import ADMIN_SUBJECT, decode_access_token
from .utils.time import Clock, SystemClock


async def get_session() -> AsyncIterator[AsyncSession]:
    async with async_session() as session:
        yield session


@lru_cache
def get_clock() -> Clock:
    return SystemClock(get_settings().timezone)


@lru_cache
def get_slot_repo() -> SlotRepository:
    settings = get_settings()
    grid = generate_slot_grid(
        get_clock().now().date(),
        days=settings.window_days,
        open_hour=settings.open_hour,
        close_hour=settings.close_hour,
    )
    return InMemorySlotRepository(grid)


@lru_cache
def get_promo_registry() -> PromoRegistry:
    return PromoRegistry()


@lru_cache
def _memory_profile_repo() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


async def get_profile_repo(session: AsyncSession = Depends(get_session)) -> ProfileRepository:
    if get_settings().profile_store == "sql":
        return SqlAlchemyProfileRepository(session)
    return _memory_profile_repo()


async def get_current_admin(authorization: str | None = Header(default=None)) -> str:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="admin bearer token required",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if authorization is None:
        raise unauthorized
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise unauthorized
    settings = get_settings()
    try:
        subject = decode_access_token(token, secret=settings.auth_secret, algorithms=[settings.auth_algorithm])
    except ValueError as exc:
        raise unauthorized from exc
    if subject != ADMIN_SUBJECT:
        raise unauthorized
    return subject
