# ordercore/data/models/cart.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, Numeric

from ordercore.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    # jeden koszyk na uzytkownika, unique jest ostatnia linia obrony przy wyscigu
    user_id = Column(Integer, nullable=False, unique=True, index=True)

    # pochodne linii, nadpisywane przy kazdej mutacji
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total_items = Column(Integer, nullable=False, default=0)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
