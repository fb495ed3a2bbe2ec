# ordercore/repos/order_repo.py
from datetime import datetime

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from ordercore.data.models.order import OrderModel
from ordercore.domain.status import OrderStatus


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int, for_update: bool = False) -> OrderModel | None:
        stmt = select(OrderModel).where(OrderModel.id == order_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_order_number(self, order_number: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.order_number == order_number)
        ).scalar_one_or_none()

    def order_number_exists(self, order_number: str) -> bool:
        return (
            self.db.execute(
                select(OrderModel.id).where(OrderModel.order_number == order_number)
            ).first()
            is not None
        )

    def update_order_version(self, order_id: int, old_version: int, new_data: dict) -> int:
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.version == old_version)
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def list_by_user(self, user_id: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def list_by_status(self, status: OrderStatus) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.status == status)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def list_pending_older_than(self, cutoff: datetime) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.status == OrderStatus.PENDING, OrderModel.created_at < cutoff)
                .order_by(OrderModel.created_at)
            ).scalars()
        )

    def search(self, term: str, limit: int = 20, offset: int = 0) -> list[OrderModel]:
        # numer zamowienia albo komentarz klienta, bez rozrozniania wielkosci liter
        pattern = f"%{term.lower()}%"
        return list(
            self.db.execute(
                select(OrderModel)
                .where(
                    or_(
                        func.lower(OrderModel.order_number).like(pattern),
                        func.lower(OrderModel.customer_comment).like(pattern),
                    )
                )
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
                .limit(limit)
                .offset(offset)
            ).scalars()
        )

    def list_created_between(self, start: datetime, end: datetime) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.created_at.between(start, end))
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def count_by_status(self) -> dict[OrderStatus, int]:
        rows = self.db.execute(
            select(OrderModel.status, func.count(OrderModel.id)).group_by(OrderModel.status)
        ).all()
        return {OrderStatus(status): count for status, count in rows}

    def count_by_user(self, user_id: int) -> int:
        return self.db.execute(
            select(func.count(OrderModel.id)).where(OrderModel.user_id == user_id)
        ).scalar_one()

    def refresh(self, order: OrderModel) -> OrderModel:
        self.db.refresh(order)
        return order
