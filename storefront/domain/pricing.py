"""Kalkulator cen.

Czyste funkcje na ``Decimal``, bez stanu i bez I/O. Kwoty zawsze
zaokraglane do dwoch miejsc (ROUND_HALF_UP).
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Tuple

from storefront.domain.errors import InvalidShippingService

CENT = Decimal("0.01")


@dataclass(frozen=True)
class ShippingService:
    code: str
    name: str
    price: Decimal


SHIPPING_SERVICES = {
    "jne": ShippingService("jne", "JNE", Decimal("15000.00")),
    "jnt": ShippingService("jnt", "J&T Express", Decimal("12000.00")),
    "sicepat": ShippingService("sicepat", "SiCepat", Decimal("13000.00")),
    "pos": ShippingService("pos", "Pos Indonesia", Decimal("10000.00")),
}


@dataclass(frozen=True)
class PriceQuote:
    subtotal: Decimal
    shipping_cost: Decimal
    total: Decimal


def to_money(value) -> Decimal:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(quantity: int, unit_price) -> Decimal:
    return to_money(to_money(unit_price) * quantity)


def subtotal(lines: Iterable[Tuple[int, Decimal]]) -> Decimal:
    return sum((line_total(qty, price) for qty, price in lines), Decimal("0.00"))


def resolve_shipping_service(code: str) -> ShippingService:
    service = SHIPPING_SERVICES.get(code)
    if service is None:
        raise InvalidShippingService(code)
    return service


def quote(lines: Iterable[Tuple[int, Decimal]], shipping_code: str) -> PriceQuote:
    """Subtotal, wysylka i total dla linii (ilosc, cena jednostkowa)."""
    shipping = resolve_shipping_service(shipping_code)
    sub = subtotal(lines)
    return PriceQuote(
        subtotal=sub,
        shipping_cost=shipping.price,
        total=to_money(sub + shipping.price),
    )
