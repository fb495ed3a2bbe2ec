# ordercore/data/models/cart_item.py
from sqlalchemy import Column, ForeignKey, Integer, Numeric, UniqueConstraint

from ordercore.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    __table_args__ = (UniqueConstraint("cart_id", "product_id", name="u_cart_product"),)
