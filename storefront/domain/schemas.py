# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, List
from decimal import Decimal
from datetime import datetime


class CartItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(..., gt=0, description="Ilość produktu (musi być > 0)")


class CartLineUpdateIn(BaseModel):
    """Schema dla zmiany ilości w linii koszyka."""

    quantity: int = Field(..., gt=0, description="Nowa ilość (musi być > 0)")


class CartLineOut(BaseModel):
    """Schema dla linii koszyka (response)."""

    id: int
    user_id: int
    product_id: int
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class CartSnapshotLineOut(BaseModel):
    line_id: int
    product_id: int
    product_name: str
    price: Decimal
    stock: int
    quantity: int
    line_total: Decimal


class CartSnapshotOut(BaseModel):
    """Schema dla koszyka z aktualnymi danymi produktów (response)."""

    user_id: int
    items: List[CartSnapshotLineOut]
    subtotal: Decimal
    item_count: int


class ShippingAddress(BaseModel):
    """Adres dostawy, wszystkie pola wymagane."""

    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=20)
    address: str = Field(..., min_length=1, max_length=1000)
    city: str = Field(..., min_length=1, max_length=100)
    province: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=10)

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class CheckoutIn(BaseModel):
    """Schema dla złożenia zamówienia.

    Adres i kody przychodzą surowe, waliduje je CheckoutService
    (pusty koszyk ma pierwszeństwo przed błędami formularza).
    """

    shipping_address: Dict[str, Any] = Field(default_factory=dict)
    shipping_service: str = ""
    payment_method: str = ""
    notes: str | None = None


class ShippingServiceOut(BaseModel):
    code: str
    name: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class CheckoutPreviewOut(BaseModel):
    """Schema dla formularza checkoutu (response)."""

    cart: CartSnapshotOut
    shipping_services: List[ShippingServiceOut]
    payment_methods: List[str]


class CheckoutOut(BaseModel):
    """Schema dla wyniku checkoutu (response)."""

    order_id: int
    order_number: str
    status: str
    payment_status: str
    subtotal: Decimal
    shipping_cost: Decimal
    total: Decimal
    item_count: int


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    price: Decimal
    quantity: int
    total: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia z pozycjami (response)."""

    id: int
    order_number: str
    user_id: int
    subtotal: Decimal
    shipping_cost: Decimal
    total: Decimal
    status: str
    payment_status: str
    payment_method: str
    shipping_address: ShippingAddress
    shipping_service: str
    tracking_number: str | None = None
    notes: str | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    created_at: datetime
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)
