# ordercore/api/routers/carts.py
from fastapi import APIRouter, Depends

from ordercore.api.dependencies import get_cart_service, get_checkout_validator, to_http
from ordercore.domain.errors import DomainError
from ordercore.domain.schemas import CartOut, CheckoutValidationOut, ItemIn, QuantityIn
from ordercore.services.cart_service import CartService
from ordercore.services.checkout_service import CheckoutValidator

router = APIRouter(prefix="/carts", tags=["carts"])


@router.get("/{user_id}", response_model=CartOut)
def get_cart(user_id: int, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.get_cart(user_id)
    except DomainError as e:
        raise to_http(e)


@router.post("/{user_id}/items", response_model=CartOut)
def add_item(user_id: int, payload: ItemIn, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.add_item(user_id, payload.product_id, payload.quantity)
    except DomainError as e:
        raise to_http(e)


@router.put("/{user_id}/items/{product_id}", response_model=CartOut)
def set_quantity(
    user_id: int,
    product_id: int,
    payload: QuantityIn,
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.set_quantity(user_id, product_id, payload.quantity)
    except DomainError as e:
        raise to_http(e)


@router.delete("/{user_id}/items/{product_id}", response_model=CartOut)
def remove_item(user_id: int, product_id: int, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.remove_item(user_id, product_id)
    except DomainError as e:
        raise to_http(e)


@router.post("/{user_id}/items/{product_id}/increment", response_model=CartOut)
def increment_item(user_id: int, product_id: int, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.increment_item(user_id, product_id)
    except DomainError as e:
        raise to_http(e)


@router.post("/{user_id}/items/{product_id}/decrement", response_model=CartOut)
def decrement_item(user_id: int, product_id: int, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.decrement_item(user_id, product_id)
    except DomainError as e:
        raise to_http(e)


@router.delete("/{user_id}/items", response_model=CartOut)
def clear_cart(user_id: int, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.clear(user_id)
    except DomainError as e:
        raise to_http(e)


@router.post("/{user_id}/sync-prices", response_model=CartOut)
def sync_prices(user_id: int, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.sync_prices(user_id)
    except DomainError as e:
        raise to_http(e)


@router.post("/{user_id}/validate", response_model=CheckoutValidationOut)
def validate_for_checkout(user_id: int, validator: CheckoutValidator = Depends(get_checkout_validator)):
    try:
        snapshots = validator.validate_for_checkout(user_id)
    except DomainError as e:
        raise to_http(e)
    return CheckoutValidationOut(user_id=user_id, valid=True, unique_items_count=len(snapshots))
