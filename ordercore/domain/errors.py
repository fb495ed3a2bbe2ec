# ordercore/domain/errors.py
"""
Bledy domenowe.

Walidacje (InvalidArgument, EmptyCart, ProductUnavailable, InvalidTransition)
to oczekiwane wyniki dla klienta, nie awarie - nie logujemy ich jako error.
ConflictError jest ponawiany wewnetrznie, do klienta trafia najwyzej InternalError.
"""


class DomainError(Exception):
    http_status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(DomainError):
    http_status = 400


class InvalidQuantityError(InvalidArgumentError):
    def __init__(self, product_name: str, quantity: int):
        super().__init__(f"Invalid quantity {quantity} for product: {product_name}")
        self.product_name = product_name
        self.quantity = quantity


class NotFoundError(DomainError):
    http_status = 404


class InactiveProductError(DomainError):
    http_status = 409

    def __init__(self, product_id: int, product_name: str):
        super().__init__(f"Product is not available for ordering: {product_name}")
        self.product_id = product_id
        self.product_name = product_name


class ProductUnavailableError(DomainError):
    http_status = 409

    def __init__(self, product_id: int, product_name: str | None = None):
        label = product_name or f"#{product_id}"
        super().__init__(f"Product is no longer available: {label}")
        self.product_id = product_id
        self.product_name = product_name


class EmptyCartError(DomainError):
    http_status = 409

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class InvalidTransitionError(DomainError):
    http_status = 409

    def __init__(self, source: str, target: str):
        super().__init__(f"Invalid status transition from {source} to {target}")
        self.source = source
        self.target = target


class ConflictError(DomainError):
    http_status = 409


class OrderNumberConflict(ConflictError):
    def __init__(self, order_number: str):
        super().__init__(f"Order number already taken: {order_number}")
        self.order_number = order_number


class InternalError(DomainError):
    http_status = 500
