# ordercore/services/cart_service.py
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ordercore.data.database import unit_of_work
from ordercore.data.models.cart import CartModel
from ordercore.domain import cart_lines
from ordercore.domain.cart_lines import ZERO, CartLine
from ordercore.domain.errors import (
    ConflictError,
    InactiveProductError,
    InvalidArgumentError,
    NotFoundError,
)
from ordercore.domain.schemas import CartItemOut, CartOut
from ordercore.repos.cart_repo import CartRepo
from ordercore.services.product_client import CatalogReader
from ordercore.utils.retry import conflict_retry
from ordercore.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Koszyk uzytkownika (jeden na usera).

    Kazda mutacja:
    - blokuje wiersz koszyka (FOR UPDATE) w jednej transakcji
    - liczy nowy zbior linii czysta funkcja z domain.cart_lines
    - zapisuje CALY zbior linii i sumy policzone od zera
    - podbija version warunkowym UPDATE (optimistic locking jako druga bariera)
    """

    def __init__(self, db: Session, product_client: CatalogReader):
        self.db = db
        self.repo = CartRepo(db)
        self.product_client = product_client

    # query - odczyt
    def get_cart(self, user_id: int) -> CartOut:
        with unit_of_work(self.db):
            cart = self.repo.get_cart_by_user(user_id)
            if cart is None:
                return self._empty_out(user_id)
            return self._to_out(cart, self.repo.get_lines(cart.id))

    def item_count(self, user_id: int) -> int:
        return self.get_cart(user_id).total_items

    def cart_total(self, user_id: int) -> Decimal:
        return self.get_cart(user_id).total_amount

    def is_empty(self, user_id: int) -> bool:
        return not self.get_cart(user_id).items

    def unique_items_count(self, user_id: int) -> int:
        return self.get_cart(user_id).unique_items_count

    # commands
    @conflict_retry()
    def get_or_create_cart(self, user_id: int) -> CartOut:
        with unit_of_work(self.db):
            cart = self.lock_cart(user_id)
            out = self._to_out(cart, self.repo.get_lines(cart.id))
        return out

    @conflict_retry()
    def add_item(self, user_id: int, product_id: int, quantity: int) -> CartOut:
        if quantity <= 0:
            raise InvalidArgumentError("Quantity must be greater than 0")

        logger.info(f"Dodawanie produktu {product_id} x{quantity} do koszyka uzytkownika {user_id}")

        with unit_of_work(self.db):
            product = self.product_client.get_product_snapshot(product_id)
            if product is None:
                raise NotFoundError(f"Product not found: {product_id}")
            if not product.is_active:
                raise InactiveProductError(product.id, product.name)

            cart = self.lock_cart(user_id)
            lines = self.repo.get_lines(cart.id)
            # cena z katalogu tylko dla nowej linii, istniejaca zachowuje swoja
            out = self.write_lines(
                cart, cart_lines.merge_item(lines, product_id, quantity, product.price)
            )

        logger.info(f"Produkt {product.name} dodany do koszyka uzytkownika {user_id}")
        return out

    @conflict_retry()
    def set_quantity(self, user_id: int, product_id: int, quantity: int) -> CartOut:
        with unit_of_work(self.db):
            cart = self.repo.get_cart_by_user(user_id, for_update=True)
            lines = self.repo.get_lines(cart.id) if cart else []

            if quantity > 0 and cart_lines.find_line(lines, product_id) is None:
                raise NotFoundError(f"Product {product_id} is not in the cart")
            if cart is None:
                # usuwanie z nieistniejacego koszyka - nic do zrobienia
                return self._empty_out(user_id)

            out = self.write_lines(cart, cart_lines.set_quantity(lines, product_id, quantity))

        logger.info(f"Ilosc produktu {product_id} w koszyku uzytkownika {user_id} ustawiona na {quantity}")
        return out

    def remove_item(self, user_id: int, product_id: int) -> CartOut:
        return self.set_quantity(user_id, product_id, 0)

    @conflict_retry()
    def clear(self, user_id: int) -> CartOut:
        with unit_of_work(self.db):
            cart = self.repo.get_cart_by_user(user_id, for_update=True)
            if cart is None:
                return self._empty_out(user_id)
            out = self.write_lines(cart, [])

        logger.info(f"Koszyk uzytkownika {user_id} wyczyszczony")
        return out

    def increment_item(self, user_id: int, product_id: int) -> CartOut:
        return self._step_item(user_id, product_id, 1)

    def decrement_item(self, user_id: int, product_id: int) -> CartOut:
        return self._step_item(user_id, product_id, -1)

    @conflict_retry()
    def sync_prices(self, user_id: int) -> CartOut:
        """Dla dlugo trzymanych koszykow: aktualne ceny, bez nieaktywnych produktow."""
        logger.info(f"Synchronizacja cen w koszyku uzytkownika {user_id}")

        with unit_of_work(self.db):
            cart = self.repo.get_cart_by_user(user_id, for_update=True)
            if cart is None:
                return self._empty_out(user_id)
            lines = self.repo.get_lines(cart.id)

            prices = {}
            for line in lines:
                product = self.product_client.get_product_snapshot(line.product_id)
                if product is None or not product.is_active:
                    logger.warning(f"Produkt {line.product_id} niedostepny, usuwam z koszyka")
                    continue
                if product.price != line.price:
                    logger.info(
                        f"Zmiana ceny produktu {product.name} z {line.price} na {product.price}"
                    )
                prices[line.product_id] = product.price

            synced = cart_lines.reprice(lines, prices)
            if synced == lines:
                out = self._to_out(cart, lines)
            else:
                out = self.write_lines(cart, synced)

        return out

    # tylko add_item i get_or_create_cart tworza koszyk
    def lock_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id, for_update=True)
        if cart is not None:
            return cart

        try:
            cart = self.repo.create_cart(
                CartModel(user_id=user_id, total_amount=ZERO, total_items=0, version=1)
            )
        except IntegrityError as e:
            # ktos inny wlasnie utworzyl koszyk - conflict_retry pobierze go ponownie
            logger.info(f"Koszyk uzytkownika {user_id} utworzony rownolegle, ponawiam")
            raise ConflictError(f"Cart for user {user_id} was created concurrently") from e

        logger.info(f"Utworzono nowy koszyk {cart.id} dla uzytkownika {user_id}")
        return cart

    def write_lines(self, cart: CartModel, lines: list[CartLine]) -> CartOut:
        totals = cart_lines.compute_totals(lines)
        self.repo.replace_cart_items(cart.id, lines)

        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={
                "total_amount": totals.total_amount,
                "total_items": totals.total_items,
                "version": cart.version + 1,
            },
        )

        # Optimistic locking warunek na wersje
        if rowcount == 0:
            raise ConflictError("Cart was modified by another operation")

        self.repo.refresh(cart)
        return self._to_out(cart, lines)

    @conflict_retry()
    def _step_item(self, user_id: int, product_id: int, delta: int) -> CartOut:
        with unit_of_work(self.db):
            cart = self.repo.get_cart_by_user(user_id, for_update=True)
            lines = self.repo.get_lines(cart.id) if cart else []

            line = cart_lines.find_line(lines, product_id)
            if line is None:
                raise NotFoundError(f"Product {product_id} is not in the cart")

            # quantity 0 -> set_quantity usuwa linie
            out = self.write_lines(
                cart, cart_lines.set_quantity(lines, product_id, line.quantity + delta)
            )

        logger.info(f"Ilosc produktu {product_id} w koszyku uzytkownika {user_id} zmieniona o {delta:+d}")
        return out

    def _to_out(self, cart: CartModel, lines: list[CartLine]) -> CartOut:
        return CartOut(
            cart_id=cart.id,
            user_id=cart.user_id,
            items=[
                CartItemOut(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price=line.price,
                    line_total=line.line_total,
                )
                for line in lines
            ],
            total_amount=cart.total_amount,
            total_items=cart.total_items,
            unique_items_count=len(lines),
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )

    @staticmethod
    def _empty_out(user_id: int) -> CartOut:
        return CartOut(
            cart_id=None,
            user_id=user_id,
            items=[],
            total_amount=ZERO,
            total_items=0,
            unique_items_count=0,
        )
