# ordercore/domain/cart_lines.py
"""
Czyste operacje na zbiorze linii koszyka.

Kazda mutacja zwraca NOWA liste linii; sumy liczymy zawsze od zera
z calego zbioru (compute_totals), nigdy przyrostowo.
"""
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Zaokraglenie do groszy, tak jak zapisuje kolumna Numeric(12, 2)."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CartLine:
    product_id: int
    quantity: int
    price: Decimal  # cena z chwili dodania do koszyka

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class CartTotals:
    total_amount: Decimal
    total_items: int


def compute_totals(lines: list[CartLine]) -> CartTotals:
    return CartTotals(
        total_amount=sum((line.line_total for line in lines), ZERO),
        total_items=sum(line.quantity for line in lines),
    )


def find_line(lines: list[CartLine], product_id: int) -> CartLine | None:
    return next((line for line in lines if line.product_id == product_id), None)


def merge_item(lines: list[CartLine], product_id: int, quantity: int, price: Decimal) -> list[CartLine]:
    """Dodaje produkt; jesli juz jest w koszyku - zwieksza ilosc, cena zostaje zablokowana."""
    existing = find_line(lines, product_id)

    if existing is None:
        return [*lines, CartLine(product_id=product_id, quantity=quantity, price=to_money(price))]

    return [
        replace(line, quantity=line.quantity + quantity) if line.product_id == product_id else line
        for line in lines
    ]


def set_quantity(lines: list[CartLine], product_id: int, quantity: int) -> list[CartLine]:
    # quantity <= 0 oznacza usuniecie linii
    if quantity <= 0:
        return remove_item(lines, product_id)

    return [
        replace(line, quantity=quantity) if line.product_id == product_id else line
        for line in lines
    ]


def remove_item(lines: list[CartLine], product_id: int) -> list[CartLine]:
    return [line for line in lines if line.product_id != product_id]


def reprice(lines: list[CartLine], prices: dict[int, Decimal]) -> list[CartLine]:
    """
    Synchronizacja cen: linie bez wpisu w `prices` (produkt usuniety
    lub nieaktywny) wypadaja, pozostale dostaja aktualna cene.
    """
    return [
        replace(line, price=to_money(prices[line.product_id]))
        for line in lines
        if line.product_id in prices
    ]
