# ordercore/api/dependencies.py
from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from ordercore.data.database import get_db
from ordercore.domain.errors import DomainError
from ordercore.services.cart_service import CartService
from ordercore.services.checkout_service import CheckoutValidator
from ordercore.services.lifecycle import OrderLifecycle
from ordercore.services.notification_service import NotificationService
from ordercore.services.order_service import OrderService
from ordercore.services.product_client import CatalogReader, ProductClient


def get_product_client() -> CatalogReader:
    return ProductClient()


def get_notification_service() -> NotificationService:
    return NotificationService()


def get_cart_service(
    db: Session = Depends(get_db),
    product_client: CatalogReader = Depends(get_product_client),
) -> CartService:
    return CartService(db=db, product_client=product_client)


def get_checkout_validator(
    db: Session = Depends(get_db),
    product_client: CatalogReader = Depends(get_product_client),
) -> CheckoutValidator:
    return CheckoutValidator(db=db, product_client=product_client)


def get_order_service(
    db: Session = Depends(get_db),
    product_client: CatalogReader = Depends(get_product_client),
    notifications: NotificationService = Depends(get_notification_service),
) -> OrderService:
    return OrderService(db, product_client, notifications)


def get_lifecycle(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> OrderLifecycle:
    return OrderLifecycle(db, notifications)


def to_http(e: DomainError) -> HTTPException:
    return HTTPException(status_code=e.http_status, detail=e.message)
