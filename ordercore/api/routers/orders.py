# ordercore/api/routers/orders.py
from datetime import datetime

from fastapi import APIRouter, Depends, Query

from ordercore.api.dependencies import get_lifecycle, get_order_service, to_http
from ordercore.domain.errors import DomainError
from ordercore.domain.schemas import (
    CancelIn,
    NoteIn,
    OrderCreate,
    OrderOut,
    OrderStatisticsOut,
    TransitionIn,
)
from ordercore.domain.status import OrderStatus
from ordercore.services.lifecycle import OrderLifecycle
from ordercore.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])

_STEPS = {
    "confirm": OrderStatus.CONFIRMED,
    "process": OrderStatus.PROCESSING,
    "ready": OrderStatus.READY,
    "complete": OrderStatus.COMPLETED,
}


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(payload: OrderCreate, svc: OrderService = Depends(get_order_service)):
    """
    Tworzy zamówienie z koszyka użytkownika i czyści koszyk.
    Wysyła powiadomienie asynchronicznie.
    """
    try:
        return svc.create_from_cart(payload.user_id, payload.customer_comment, payload.contact_info)
    except DomainError as e:
        raise to_http(e)


@router.get("/", response_model=list[OrderOut])
def list_orders(
    user_id: int | None = Query(None),
    status: OrderStatus | None = Query(None),
    svc: OrderService = Depends(get_order_service),
):
    """
    Filtr: user_id albo status. Bez filtra zwraca kolejke do obslugi,
    czyli zamowienia PENDING (jak lista managera).
    """
    try:
        if user_id is not None:
            return svc.list_user_orders(user_id)
        if status is not None:
            return svc.list_by_status(status)
        return svc.list_by_status(OrderStatus.PENDING)
    except DomainError as e:
        raise to_http(e)


@router.get("/statistics", response_model=OrderStatisticsOut)
def order_statistics(svc: OrderService = Depends(get_order_service)):
    try:
        return svc.order_statistics()
    except DomainError as e:
        raise to_http(e)


@router.get("/overdue", response_model=list[OrderOut])
def overdue_orders(hours: int = Query(24, gt=0), svc: OrderService = Depends(get_order_service)):
    try:
        return svc.overdue_orders(hours)
    except DomainError as e:
        raise to_http(e)


@router.get("/search", response_model=list[OrderOut])
def search_orders(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, gt=0, le=100),
    offset: int = Query(0, ge=0),
    svc: OrderService = Depends(get_order_service),
):
    """Po numerze zamowienia albo komentarzu klienta."""
    try:
        return svc.search_orders(q, limit, offset)
    except DomainError as e:
        raise to_http(e)


@router.get("/date-range", response_model=list[OrderOut])
def orders_by_date_range(
    start: datetime = Query(...),
    end: datetime = Query(...),
    svc: OrderService = Depends(get_order_service),
):
    try:
        return svc.orders_between(start, end)
    except DomainError as e:
        raise to_http(e)


@router.get("/by-number/{order_number}", response_model=OrderOut)
def get_order_by_number(order_number: str, svc: OrderService = Depends(get_order_service)):
    try:
        return svc.get_by_order_number(order_number)
    except DomainError as e:
        raise to_http(e)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, svc: OrderService = Depends(get_order_service)):
    try:
        return svc.get_by_id(order_id)
    except DomainError as e:
        raise to_http(e)


@router.post("/{order_id}/transition", response_model=OrderOut)
def transition(order_id: int, payload: TransitionIn, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    try:
        return lifecycle.transition(order_id, payload.status, payload.note)
    except DomainError as e:
        raise to_http(e)


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel(order_id: int, payload: CancelIn, lifecycle: OrderLifecycle = Depends(get_lifecycle)):
    try:
        return lifecycle.cancel(order_id, payload.reason)
    except DomainError as e:
        raise to_http(e)


@router.post("/{order_id}/{step}", response_model=OrderOut)
def step(
    order_id: int,
    step: str,
    payload: NoteIn | None = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
):
    """confirm / process / ready / complete - skroty na transition."""
    target = _STEPS.get(step)
    if target is None:
        raise to_http(DomainError(f"Unknown step: {step}"))
    try:
        return lifecycle.transition(order_id, target, payload.note if payload else None)
    except DomainError as e:
        raise to_http(e)
