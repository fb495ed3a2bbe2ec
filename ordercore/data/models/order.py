# ordercore/data/models/order.py
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Enum, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ordercore.data.database import Base
from ordercore.domain.status import OrderStatus


def _now():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String(32), nullable=False, unique=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)

    status = Column(
        Enum(OrderStatus, native_enum=False, length=20),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )
    # przepisane z koszyka w chwili checkoutu, nigdy nie przeliczane
    total_amount = Column(Numeric(12, 2), nullable=False)
    total_items = Column(Integer, nullable=False)

    customer_comment = Column(Text, nullable=True)
    manager_comment = Column(Text, nullable=True)
    contact_info = Column(JSON, nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship(
        "OrderItemModel",
        order_by="OrderItemModel.position",
        lazy="selectin",
        cascade="save-update, merge",
    )
