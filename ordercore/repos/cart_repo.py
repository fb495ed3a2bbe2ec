# ordercore/repos/cart_repo.py
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from ordercore.data.models.cart import CartModel
from ordercore.data.models.cart_item import CartItemModel
from ordercore.domain.cart_lines import CartLine


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: int, for_update: bool = False) -> CartModel | None:
        stmt = select(CartModel).where(CartModel.user_id == user_id)
        if for_update:
            # blokada wiersza koszyka na czas mutacji (postgres: SELECT ... FOR UPDATE)
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def get_lines(self, cart_id: int) -> list[CartLine]:
        # same kolumny, bez encji w identity map (linie i tak zastepujemy calym zbiorem)
        rows = self.db.execute(
            select(CartItemModel.product_id, CartItemModel.quantity, CartItemModel.price)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.position, CartItemModel.id)
        ).all()
        return [CartLine(product_id=p, quantity=q, price=price) for p, q, price in rows]

    def replace_cart_items(self, cart_id: int, lines: list[CartLine]) -> None:
        """Zapis calego zbioru linii: usun wszystko, wstaw nowy stan."""
        self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.cart_id == cart_id)
            .execution_options(synchronize_session=False)
        )
        items = [
            CartItemModel(
                cart_id=cart_id,
                product_id=line.product_id,
                quantity=line.quantity,
                price=line.price,
                position=position,
            )
            for position, line in enumerate(lines)
        ]
        self.db.add_all(items)
        self.db.flush()
        # wiersze linii nie zyja w sesji - kolejna wymiana nie trafi na stare encje
        for item in items:
            self.db.expunge(item)

    def update_cart_version(self, cart_id: int, old_version: int, new_data: dict) -> int:
        # UPDATE carts SET ..., version = old + 1 WHERE id = :id AND version = :old
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def refresh(self, cart: CartModel) -> CartModel:
        self.db.refresh(cart)
        return cart
