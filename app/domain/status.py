# app/domain/status.py
from app.domain.enums import OrderStatus
from app.domain.errors import InvalidStateError

ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def check_transition(current: str, target: str) -> bool:
    """
    True jesli status trzeba zmienic, False jesli juz jest `target`.
    Przejscie spoza tabeli -> InvalidStateError.
    """
    current = OrderStatus(current)
    target = OrderStatus(target)

    if current == target:
        return False

    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStateError(
            f"Cannot change status from {current.value} to {target.value}"
        )
    return True
