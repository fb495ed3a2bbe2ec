# ordercore/services/checkout_service.py
from sqlalchemy.orm import Session

from ordercore.data.database import unit_of_work
from ordercore.domain.cart_lines import CartLine
from ordercore.domain.errors import (
    EmptyCartError,
    InvalidQuantityError,
    NotFoundError,
    ProductUnavailableError,
)
from ordercore.domain.schemas import ProductSnapshot
from ordercore.repos.cart_repo import CartRepo
from ordercore.services.product_client import CatalogReader
from ordercore.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutValidator:
    """
    Ostatnia kontrola koszyka przed zamowieniem (tylko odczyt).
    Checkout wola validate_lines w SWOJEJ transakcji, zaraz przed utworzeniem zamowienia.
    """

    def __init__(self, db: Session, product_client: CatalogReader):
        self.db = db
        self.repo = CartRepo(db)
        self.product_client = product_client

    def validate_for_checkout(self, user_id: int) -> dict[int, ProductSnapshot]:
        with unit_of_work(self.db):
            cart = self.repo.get_cart_by_user(user_id)
            if cart is None:
                raise NotFoundError("Cart not found")
            return self.validate_lines(user_id, self.repo.get_lines(cart.id))

    def validate_lines(self, user_id: int, lines: list[CartLine]) -> dict[int, ProductSnapshot]:
        """Zwraca odczytane snapshoty produktow - z nich budujemy pozycje zamowienia."""
        if not lines:
            raise EmptyCartError()

        snapshots = {}
        for line in lines:
            product = self.product_client.get_product_snapshot(line.product_id)
            if product is None:
                raise ProductUnavailableError(line.product_id)
            if not product.is_active:
                raise ProductUnavailableError(product.id, product.name)
            # nieosiagalne przy niezmiennikach koszyka, ale checkout jest nieodwracalny
            if line.quantity <= 0:
                raise InvalidQuantityError(product.name, line.quantity)
            snapshots[line.product_id] = product

        logger.info(f"Koszyk uzytkownika {user_id} przeszedl walidacje do zamowienia")
        return snapshots
