# ordercore/services/notification_service.py
from enum import Enum
from typing import Protocol

from ordercore.celery_worker import celery_app
from ordercore.domain.schemas import OrderOut
from ordercore.domain.status import OrderStatus
from ordercore.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationKind(str, Enum):
    # rodzaje przyjmowane przez sink; ordercore wysyla tylko ORDER_UPDATE
    DISCOUNT = "DISCOUNT"
    ANNOUNCEMENT = "ANNOUNCEMENT"
    ORDER_UPDATE = "ORDER_UPDATE"
    NEW_PRODUCT = "NEW_PRODUCT"
    SYSTEM = "SYSTEM"


class NotificationSink(Protocol):
    def notify(
        self,
        user_id: int,
        kind: NotificationKind,
        title: str,
        body: str,
        metadata: dict,
    ) -> None: ...


class CeleryNotificationSink:
    """
    Domyslny sink - wrzuca powiadomienie na kolejke Celery.
    Dostarczenie (email/SMS/push) to juz nie nasza sprawa.
    """

    def notify(self, user_id, kind, title, body, metadata):
        send_notification_task.delay(user_id, NotificationKind(kind).value, title, body, metadata)


@celery_app.task(name="ordercore.services.notification_service.send_notification_task")
def send_notification_task(user_id: int, kind: str, title: str, body: str, metadata: dict):
    """
    Celery task - w prawdziwym systemie wysłałby email/SMS/push.
    Teraz tylko loguje.
    """
    logger.info(f"[NOTIFICATION] User {user_id} ({kind}): {title} - {body}")
    return {"user_id": user_id, "kind": kind, "status": "sent"}


_STATUS_MESSAGES = {
    OrderStatus.CONFIRMED: "Order {number} has been confirmed and accepted for processing. Expect a call from our manager.",
    OrderStatus.PROCESSING: "Order {number} is being assembled.",
    OrderStatus.READY: "Order {number} is ready for pickup.",
    OrderStatus.COMPLETED: "Order {number} has been completed. Thank you for your purchase!",
    OrderStatus.CANCELLED: "Order {number} has been cancelled.",
}


class NotificationService:
    """
    Buduje tresc powiadomien o zamowieniach i oddaje je do sinka.
    Wolane dopiero PO commicie transakcji.
    """

    def __init__(self, sink: NotificationSink | None = None):
        self.sink = sink or CeleryNotificationSink()

    def send_order_created_notification(self, order: OrderOut):
        self._send(
            order.user_id,
            "Order placed",
            f"Your order {order.order_number} for {order.total_amount:.2f} has been placed. "
            f"Our manager will contact you to confirm the details.",
            {"order_id": order.id, "order_number": order.order_number},
        )

    def send_order_status_update_notification(self, order: OrderOut, old_status: OrderStatus):
        template = _STATUS_MESSAGES.get(order.status, "Status of order {number} has changed.")
        self._send(
            order.user_id,
            "Order status changed",
            template.format(number=order.order_number),
            {
                "order_id": order.id,
                "order_number": order.order_number,
                "old_status": OrderStatus(old_status).value,
                "new_status": order.status.value,
            },
        )

    def send_order_cancelled_notification(self, order: OrderOut, reason: str | None):
        suffix = f"Reason: {reason}" if reason else "Please contact us for details."
        self._send(
            order.user_id,
            "Order cancelled",
            f"Your order {order.order_number} has been cancelled. {suffix}",
            {
                "order_id": order.id,
                "order_number": order.order_number,
                "cancel_reason": reason or "",
            },
        )

    def _send(self, user_id: int, title: str, body: str, metadata: dict):
        try:
            self.sink.notify(user_id, NotificationKind.ORDER_UPDATE, title, body, metadata)
        except Exception:
            # zmiana jest juz zacommitowana, powiadomienie jest best-effort
            logger.exception(f"Nie udalo sie wyslac powiadomienia '{title}' do uzytkownika {user_id}")
