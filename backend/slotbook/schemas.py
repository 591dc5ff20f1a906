from datetime import date as date_type, datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, field_serializer

from .domain.pricing import PriceBreakdown
from .domain.promos import PromoCode
from .domain.repositories import ProfileRecord
from .domain.slots import Booked, Slot, SlotStatus


class SlotRead(BaseModel):
    slot_id: str
    date: date_type
    start_time: str
    end_time: str
    status: SlotStatus
    duration: int
    booking_name: Optional[str] = None
    members: Optional[int] = None

    @classmethod
    def from_domain(cls, *, slot: Slot) -> "SlotRead":
        booking = slot.state if isinstance(slot.state, Booked) else None
        return cls(
            slot_id=slot.id,
            date=slot.date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            status=slot.status,
            duration=slot.duration,
            booking_name=booking.booking_name if booking else None,
            members=booking.members if booking else None,
        )


class SlotSelect(BaseModel):
    duration: int = Field(default=1, ge=1)


class SlotSelectionRead(BaseModel):
    outcome: Literal["selected", "cancelled"]
    slots: list[SlotRead]


class BookingCreate(BaseModel):
    slot_id: str
    duration: int = 1
    members: int = 6
    name: str
    mobile_number: str
    promo_code: Optional[str] = None


class PriceRead(BaseModel):
    base_price_per_hour: int
    subtotal: int
    total_price: int
    final_price: int
    duration_discount_label: str
    promo_discount_percent: int
    loyalty_discount_percent: int

    @classmethod
    def from_domain(cls, *, price: PriceBreakdown) -> "PriceRead":
        return cls(
            base_price_per_hour=price.base_price_per_hour,
            subtotal=price.subtotal,
            total_price=price.total_price,
            final_price=price.final_price,
            duration_discount_label=price.duration_discount_label,
            promo_discount_percent=price.promo_discount_percent,
            loyalty_discount_percent=price.loyalty_discount_percent,
        )


class QuoteRead(BaseModel):
    slot_id: str
    duration: int
    members: int
    booking_count: int
    price: PriceRead
    promo_notice: Optional[str] = None
    payment_uri: Optional[str] = None


class BookingRead(BaseModel):
    slots: list[SlotRead]
    price: PriceRead
    booking_count: int


class ProfileRead(BaseModel):
    mobile_number: str
    name: str
    booking_count: int
    welcome_message: str

    @classmethod
    def from_domain(cls, *, profile: ProfileRecord, welcome_message: str) -> "ProfileRead":
        return cls(
            mobile_number=profile.mobile_number,
            name=profile.name,
            booking_count=profile.booking_count,
            welcome_message=welcome_message,
        )


class AdminLogin(BaseModel):
    username: str
    password: str


class TokenRead(BaseModel):
    access_token: str
    token_type: str = "bearer"


class PromoCreate(BaseModel):
    code: str
    discount_percent: Union[int, str]


class PromoRead(BaseModel):
    code: str
    discount_percent: int

    @classmethod
    def from_domain(cls, *, promo: PromoCode) -> "PromoRead":
        return cls(code=promo.code, discount_percent=promo.discount_percent)


class DisplayRead(BaseModel):
    now: datetime
    current: Optional[SlotRead]
    remaining: str
    upcoming: list[SlotRead]

    @field_serializer("now")
    def _ser_datetime(self, dt: datetime) -> str:
        return dt.isoformat()
