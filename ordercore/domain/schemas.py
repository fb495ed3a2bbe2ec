# ordercore/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ordercore.domain.cart_lines import to_money
from ordercore.domain.status import OrderStatus


class ProductSnapshot(BaseModel):
    """Odczyt produktu z katalogu (kontrakt z product-service)."""

    id: int
    name: str
    price: Decimal
    is_active: bool = True

    @field_validator("price")
    @classmethod
    def round_price(cls, v: Decimal) -> Decimal:
        # ceny trzymamy w groszach, sumy koszyka licza sie z tej samej wartosci co zapis
        return to_money(v)


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(1, description="Ilość produktu (walidowana w serwisie)")


class QuantityIn(BaseModel):
    """Nowa ilosc; <= 0 usuwa pozycje z koszyka."""

    quantity: int


class CartItemOut(BaseModel):
    product_id: int
    quantity: int
    price: Decimal
    line_total: Decimal


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    cart_id: int | None
    user_id: int
    items: List[CartItemOut]
    total_amount: Decimal
    total_items: int
    unique_items_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CheckoutValidationOut(BaseModel):
    user_id: int
    valid: bool
    unique_items_count: int


class OrderCreate(BaseModel):
    """Schema dla tworzenia zamówienia z koszyka."""

    user_id: int = Field(..., gt=0, description="ID użytkownika (musi być > 0)")
    customer_comment: str | None = Field(None, max_length=1000)
    contact_info: Any | None = None


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    order_number: str
    user_id: int
    status: OrderStatus
    total_amount: Decimal
    total_items: int
    customer_comment: str | None = None
    manager_comment: str | None = None
    contact_info: Any | None = None
    items: List[OrderItemOut]
    created_at: datetime | None = None
    updated_at: datetime | None = None
    confirmed_at: datetime | None = None
    completed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TransitionIn(BaseModel):
    status: OrderStatus
    note: str | None = Field(None, max_length=1000)


class NoteIn(BaseModel):
    note: str | None = Field(None, max_length=1000)


class CancelIn(BaseModel):
    reason: str | None = Field(None, max_length=1000)


class OrderStatisticsOut(BaseModel):
    total_orders: int
    status_counts: dict[OrderStatus, int]
