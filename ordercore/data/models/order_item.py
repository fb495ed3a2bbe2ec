# ordercore/data/models/order_item.py
from sqlalchemy import Column, ForeignKey, Integer, Numeric, String

from ordercore.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)

    # snapshot z chwili zamowienia, niezalezny od pozniejszych zmian w katalogu
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    position = Column(Integer, nullable=False, default=0)
