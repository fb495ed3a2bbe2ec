# ordercore/domain/status.py
"""
Maszyna stanow zamowienia.

Cala tabela przejsc jest tutaj, serwisy pytaja tylko evaluate_transition().
"""
from dataclasses import dataclass
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# pole z data "kamienia milowego" ustawiane przy wejsciu w dany status
MILESTONES: dict[OrderStatus, str] = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.COMPLETED: "completed_at",
}

TERMINAL = frozenset(s for s, allowed in TRANSITIONS.items() if not allowed)


@dataclass(frozen=True)
class TransitionResult:
    source: OrderStatus
    target: OrderStatus
    allowed: bool
    stamp: str | None = None

    @property
    def is_cancellation(self) -> bool:
        return self.allowed and self.target is OrderStatus.CANCELLED


def evaluate_transition(source: OrderStatus, target: OrderStatus) -> TransitionResult:
    source = OrderStatus(source)
    target = OrderStatus(target)

    if target not in TRANSITIONS[source]:
        return TransitionResult(source=source, target=target, allowed=False)

    return TransitionResult(
        source=source,
        target=target,
        allowed=True,
        stamp=MILESTONES.get(target),
    )


def allowed_targets(source: OrderStatus) -> list[OrderStatus]:
    return sorted(TRANSITIONS[OrderStatus(source)], key=list(OrderStatus).index)
