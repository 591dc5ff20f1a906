from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .errors import DuplicatePromoCodeError, InvalidPromoCodeError, InvalidPromoDefinitionError


@dataclass(frozen=True)
class PromoCode:
    code: str
    discount_percent: int


DEFAULT_PROMO_CODES = (
    PromoCode(code="CRICKET10", discount_percent=10),
    PromoCode(code="BUBBY20", discount_percent=20),
)


class PromoRegistry:
    """Maps promo codes to percentage discounts. Codes match exactly (case-sensitive)."""

    def __init__(self, seed: Iterable[PromoCode] = DEFAULT_PROMO_CODES) -> None:
        self._codes: dict[str, PromoCode] = {}
        for promo in seed:
            self._codes[promo.code] = promo

    def lookup(self, code: str) -> int:
        promo = self._codes.get(code)
        if promo is None:
            raise InvalidPromoCodeError(f"invalid promo code: {code}")
        return promo.discount_percent

    def add(self, code: str, discount_percent: int | str) -> PromoCode:
        cleaned = (code or "").strip()
        if not cleaned:
            raise InvalidPromoDefinitionError("promo code is required")
        percent = _parse_percent(discount_percent)
        if cleaned in self._codes:
            raise DuplicatePromoCodeError(f"promo code {cleaned} already exists")
        promo = PromoCode(code=cleaned, discount_percent=percent)
        self._codes[cleaned] = promo
        return promo

    def list(self) -> list[PromoCode]:
        return list(self._codes.values())


def _parse_percent(value: int | str) -> int:
    if isinstance(value, bool):
        raise InvalidPromoDefinitionError("discount percent must be a positive integer")
    if isinstance(value, str):
        value = value.strip()
        if not (value.isascii() and value.isdigit()):
            raise InvalidPromoDefinitionError("discount percent must be a positive integer")
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        raise InvalidPromoDefinitionError("discount percent must be a positive integer")
    return value
