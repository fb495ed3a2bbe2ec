# ordercore/services/order_service.py
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from ordercore.data.database import unit_of_work
from ordercore.data.models.order import OrderModel
from ordercore.data.models.order_item import OrderItemModel
from ordercore.domain.cart_lines import CartTotals
from ordercore.domain.errors import (
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    OrderNumberConflict,
)
from ordercore.domain.order_snapshot import OrderDraft, build_order, generate_order_number
from ordercore.domain.schemas import OrderOut, OrderStatisticsOut
from ordercore.domain.status import OrderStatus
from ordercore.repos.cart_repo import CartRepo
from ordercore.repos.order_repo import OrderRepo
from ordercore.services.cart_service import CartService
from ordercore.services.checkout_service import CheckoutValidator
from ordercore.services.notification_service import NotificationService
from ordercore.services.product_client import CatalogReader
from ordercore.utils.retry import conflict_retry
from ordercore.utils.settings import ORDER_NUMBER_MAX_ATTEMPTS
from ordercore.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.

    create_from_cart to jedyny konstruktor zamowienia:
    walidacja -> snapshot koszyka -> zapis zamowienia -> czyszczenie koszyka,
    wszystko w jednej transakcji; powiadomienie dopiero po commicie.
    """

    def __init__(
        self,
        db: Session,
        product_client: CatalogReader,
        notification_service: NotificationService | None = None,
        number_factory: Callable[[], str] = generate_order_number,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.cart_service = CartService(db, product_client)
        self.validator = CheckoutValidator(db, product_client)
        self.notification_service = notification_service or NotificationService()
        self.number_factory = number_factory

    @conflict_retry()
    def create_from_cart(
        self,
        user_id: int,
        customer_comment: str | None = None,
        contact_info: Any | None = None,
    ) -> OrderOut:
        logger.info(f"Tworzenie zamowienia z koszyka uzytkownika {user_id}")

        with unit_of_work(self.db):
            cart = self.cart_repo.get_cart_by_user(user_id, for_update=True)
            if cart is None:
                raise NotFoundError("Cart not found")

            lines = self.cart_repo.get_lines(cart.id)
            snapshots = self.validator.validate_lines(user_id, lines)

            draft = build_order(
                user_id=user_id,
                lines=lines,
                totals=CartTotals(total_amount=cart.total_amount, total_items=cart.total_items),
                snapshots=snapshots,
                customer_comment=customer_comment,
                contact_info=contact_info,
            )
            order = self._persist(draft)

            # koszyk zostaje, tylko bez linii
            self.cart_service.write_lines(cart, [])

            created = OrderOut.model_validate(order)

        logger.info(
            f"Zamowienie {created.order_number} utworzone na kwote {created.total_amount} "
            f"dla uzytkownika {user_id}"
        )
        self.notification_service.send_order_created_notification(created)
        return created

    # query
    def get_by_id(self, order_id: int) -> OrderOut:
        with unit_of_work(self.db):
            order = self.repo.get_order(order_id)
            if not order:
                raise NotFoundError(f"Order not found: {order_id}")
            return OrderOut.model_validate(order)

    def get_by_order_number(self, order_number: str) -> OrderOut:
        with unit_of_work(self.db):
            order = self.repo.get_by_order_number(order_number)
            if not order:
                raise NotFoundError(f"Order not found: {order_number}")
            return OrderOut.model_validate(order)

    def list_user_orders(self, user_id: int) -> list[OrderOut]:
        with unit_of_work(self.db):
            return [OrderOut.model_validate(o) for o in self.repo.list_by_user(user_id)]

    def list_by_status(self, status: OrderStatus) -> list[OrderOut]:
        with unit_of_work(self.db):
            return [OrderOut.model_validate(o) for o in self.repo.list_by_status(OrderStatus(status))]

    def overdue_orders(self, hours_threshold: int) -> list[OrderOut]:
        """Zamowienia wiszace w PENDING dluzej niz N godzin."""
        cutoff = datetime.now(timezone.utc) - timedelta(hours=hours_threshold)
        with unit_of_work(self.db):
            return [OrderOut.model_validate(o) for o in self.repo.list_pending_older_than(cutoff)]

    def search_orders(self, term: str, limit: int = 20, offset: int = 0) -> list[OrderOut]:
        term = (term or "").strip()
        if not term:
            raise InvalidArgumentError("Search term must not be empty")
        with unit_of_work(self.db):
            return [OrderOut.model_validate(o) for o in self.repo.search(term, limit, offset)]

    def orders_between(self, start: datetime, end: datetime) -> list[OrderOut]:
        """Zamowienia utworzone w przedziale [start, end], najnowsze pierwsze."""
        if start > end:
            raise InvalidArgumentError("Start of the date range is after its end")
        with unit_of_work(self.db):
            return [OrderOut.model_validate(o) for o in self.repo.list_created_between(start, end)]

    def order_statistics(self) -> OrderStatisticsOut:
        with unit_of_work(self.db):
            counts = self.repo.count_by_status()
        return OrderStatisticsOut(total_orders=sum(counts.values()), status_counts=counts)

    def user_order_count(self, user_id: int) -> int:
        with unit_of_work(self.db):
            return self.repo.count_by_user(user_id)

    def is_order_owner(self, order_id: int, user_id: int) -> bool:
        with unit_of_work(self.db):
            order = self.repo.get_order(order_id)
            return order is not None and order.user_id == user_id

    def is_order_owner_by_number(self, order_number: str, user_id: int) -> bool:
        with unit_of_work(self.db):
            order = self.repo.get_by_order_number(order_number)
            return order is not None and order.user_id == user_id

    def _persist(self, draft: OrderDraft) -> OrderModel:
        order_number = self._allocate_order_number()

        order = OrderModel(
            order_number=order_number,
            user_id=draft.user_id,
            status=OrderStatus.PENDING,
            total_amount=draft.total_amount,
            total_items=draft.total_items,
            customer_comment=draft.customer_comment,
            contact_info=draft.contact_info,
            version=1,
            items=[
                OrderItemModel(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    price=line.price,
                    position=position,
                )
                for position, line in enumerate(draft.lines)
            ],
        )

        try:
            return self.repo.create_order(order)
        except IntegrityError as e:
            # ktos zajal numer miedzy sprawdzeniem a insertem - cala transakcja od nowa
            raise OrderNumberConflict(order_number) from e

    def _allocate_order_number(self) -> str:
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(ORDER_NUMBER_MAX_ATTEMPTS),
                retry=retry_if_exception_type(OrderNumberConflict),
                reraise=True,
            ):
                with attempt:
                    candidate = self.number_factory()
                    if self.repo.order_number_exists(candidate):
                        logger.warning(f"Kolizja numeru zamowienia {candidate}, losuje ponownie")
                        raise OrderNumberConflict(candidate)
                    return candidate
        except OrderNumberConflict as e:
            logger.error(f"Brak wolnego numeru zamowienia po {ORDER_NUMBER_MAX_ATTEMPTS} probach")
            raise InternalError("could not allocate a unique order number") from e
