# ordercore/domain/order_snapshot.py
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from ordercore.domain.cart_lines import CartLine, CartTotals
from ordercore.domain.errors import ProductUnavailableError
from ordercore.domain.schemas import ProductSnapshot

ORDER_NUMBER_PREFIX = "ORD"


def generate_order_number(now: datetime | None = None) -> str:
    """ORD-YYYYMMDD-XXXXXXXX, sufiks to 8 znakow z uuid4 (wielkie litery)."""
    now = now or datetime.now(timezone.utc)
    suffix = uuid.uuid4().hex[:8].upper()
    return f"{ORDER_NUMBER_PREFIX}-{now:%Y%m%d}-{suffix}"


@dataclass(frozen=True)
class OrderLineDraft:
    product_id: int
    product_name: str
    quantity: int
    price: Decimal


@dataclass(frozen=True)
class OrderDraft:
    user_id: int
    total_amount: Decimal
    total_items: int
    lines: tuple[OrderLineDraft, ...]
    customer_comment: str | None = None
    contact_info: object | None = None


def build_order(
    user_id: int,
    lines: list[CartLine],
    totals: CartTotals,
    snapshots: dict[int, ProductSnapshot],
    customer_comment: str | None = None,
    contact_info: object | None = None,
) -> OrderDraft:
    """
    Zamrozona kopia koszyka. Sumy przepisujemy z koszyka 1:1,
    nazwa produktu z katalogu, cena z linii koszyka (zablokowana).
    """
    drafts = []
    for line in lines:
        snapshot = snapshots.get(line.product_id)
        if snapshot is None:
            raise ProductUnavailableError(line.product_id)

        drafts.append(
            OrderLineDraft(
                product_id=line.product_id,
                product_name=snapshot.name,
                quantity=line.quantity,
                price=line.price,
            )
        )

    return OrderDraft(
        user_id=user_id,
        total_amount=totals.total_amount,
        total_items=totals.total_items,
        lines=tuple(drafts),
        customer_comment=customer_comment,
        contact_info=contact_info,
    )
