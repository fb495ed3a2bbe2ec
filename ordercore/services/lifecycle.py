# ordercore/services/lifecycle.py
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from ordercore.data.database import unit_of_work
from ordercore.domain.errors import (
    ConflictError,
    InvalidArgumentError,
    InvalidTransitionError,
    NotFoundError,
)
from ordercore.domain.schemas import OrderOut
from ordercore.domain.status import OrderStatus, TransitionResult, evaluate_transition
from ordercore.repos.order_repo import OrderRepo
from ordercore.services.notification_service import NotificationService
from ordercore.utils.retry import conflict_retry
from ordercore.utils.logging import get_logger

logger = get_logger(__name__)

CANCEL_PREFIX = "CANCELLED: "
NO_REASON = "no reason given"


def append_note(existing: str | None, note: str) -> str:
    return note if not existing else f"{existing}\n{note}"


class OrderLifecycle:
    """
    Zmiany statusu zamowienia.

    Odczyt statusu, sprawdzenie w tabeli przejsc i zapis nowego statusu
    ida w jednej transakcji pod blokada wiersza + warunek na version,
    wiec dwa rownolegle przejscia z tego samego stanu nie przejda oba.
    Odrzucone przejscie niczego nie zmienia i nie wysyla powiadomienia.
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.notification_service = notification_service or NotificationService()

    @conflict_retry()
    def transition(self, order_id: int, target: OrderStatus | str, note: str | None = None) -> OrderOut:
        try:
            target = OrderStatus(target)
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown order status: {target}") from e

        logger.info(f"Zmiana statusu zamowienia {order_id} na {target.value}")

        with unit_of_work(self.db):
            order = self.repo.get_order(order_id, for_update=True)
            if not order:
                raise NotFoundError(f"Order not found: {order_id}")

            result = evaluate_transition(order.status, target)
            if not result.allowed:
                logger.info(
                    f"Odrzucone przejscie zamowienia {order.order_number}: "
                    f"{result.source.value} -> {result.target.value}"
                )
                raise InvalidTransitionError(result.source.value, result.target.value)

            now = datetime.now(timezone.utc)
            new_data = {"status": result.target, "version": order.version + 1, "updated_at": now}
            if result.stamp:
                new_data[result.stamp] = now

            entry = self._comment_entry(result, note)
            if entry:
                new_data["manager_comment"] = append_note(order.manager_comment, entry)

            rowcount = self.repo.update_order_version(order.id, order.version, new_data)
            if rowcount == 0:
                raise ConflictError(f"Order {order.order_number} was modified by another operation")

            self.repo.refresh(order)
            updated = OrderOut.model_validate(order)

        logger.info(
            f"Status zamowienia {updated.order_number} zmieniony z "
            f"{result.source.value} na {result.target.value}"
        )

        # dopiero po commicie
        if result.is_cancellation:
            self.notification_service.send_order_cancelled_notification(updated, _clean(note))
        else:
            self.notification_service.send_order_status_update_notification(updated, result.source)

        return updated

    def confirm(self, order_id: int, note: str | None = None) -> OrderOut:
        return self.transition(order_id, OrderStatus.CONFIRMED, note)

    def start_processing(self, order_id: int, note: str | None = None) -> OrderOut:
        return self.transition(order_id, OrderStatus.PROCESSING, note)

    def mark_ready(self, order_id: int, note: str | None = None) -> OrderOut:
        return self.transition(order_id, OrderStatus.READY, note)

    def complete(self, order_id: int, note: str | None = None) -> OrderOut:
        return self.transition(order_id, OrderStatus.COMPLETED, note)

    def cancel(self, order_id: int, reason: str | None = None) -> OrderOut:
        return self.transition(order_id, OrderStatus.CANCELLED, reason)

    @staticmethod
    def _comment_entry(result: TransitionResult, note: str | None) -> str | None:
        note = _clean(note)
        if result.is_cancellation:
            return CANCEL_PREFIX + (note or NO_REASON)
        return note


def _clean(note: str | None) -> str | None:
    if note is None or not note.strip():
        return None
    return note.strip()
