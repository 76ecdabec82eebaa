"""Order status workflow.

Orders start in PENDING_PAYMENT and only move along the edges of
``TRANSITIONS``. CANCELLED and REFUNDED are terminal. Every accepted move
appends one entry to the order's status history; entries are never
rewritten or reordered.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, FrozenSet, Iterable, List, Optional

from atelier.domain.enums import OrderStatus, PaymentPlan
from atelier.domain.errors import InvalidStateError, InvalidTransitionError
from atelier.domain.pricing import money

INITIAL_STATUS = OrderStatus.PENDING_PAYMENT

TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING_PAYMENT: frozenset({
        OrderStatus.CONFIRMED,
        OrderStatus.PAYMENT_FAILED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.PAYMENT_FAILED: frozenset({
        OrderStatus.PENDING_PAYMENT,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.CONFIRMED: frozenset({
        OrderStatus.IN_PRODUCTION,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    }),
    OrderStatus.IN_PRODUCTION: frozenset({
        OrderStatus.READY_FOR_SHIPPING,
        OrderStatus.REFUNDED,
    }),
    OrderStatus.READY_FOR_SHIPPING: frozenset({
        OrderStatus.SHIPPED,
        OrderStatus.REFUNDED,
    }),
    OrderStatus.SHIPPED: frozenset({
        OrderStatus.DELIVERED,
        OrderStatus.REFUNDED,
    }),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

CANCELLABLE = frozenset({
    OrderStatus.PENDING_PAYMENT,
    OrderStatus.PAYMENT_FAILED,
    OrderStatus.CONFIRMED,
})

CLOSED = frozenset({OrderStatus.CANCELLED, OrderStatus.REFUNDED})

# share of the total collected by each installment
PAYMENT_SPLITS = {
    PaymentPlan.FULL: ("1",),
    PaymentPlan.SPLIT_70_30: ("0.70", "0.30"),
}


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return OrderStatus(requested) in TRANSITIONS.get(OrderStatus(current), frozenset())


def ensure_transition(current: OrderStatus, requested: OrderStatus) -> None:
    if not can_transition(current, requested):
        raise InvalidTransitionError(OrderStatus(current), OrderStatus(requested))


def ensure_cancellable(current: OrderStatus) -> None:
    if OrderStatus(current) not in CANCELLABLE:
        raise InvalidStateError(
            "Cannot cancel order that is already in production or shipped"
        )


def cancellation_note(by_admin: bool) -> str:
    return "Cancelled by admin" if by_admin else "Cancelled by customer"


def history_entry(status: OrderStatus, note: Optional[str] = None,
                  at: Optional[datetime] = None) -> dict:
    at = at or datetime.now(timezone.utc)
    return {
        "status": OrderStatus(status).value,
        "timestamp": at.isoformat(),
        "note": note,
    }


def append_history(history: Optional[Iterable[dict]], entry: dict) -> List[dict]:
    """New list with ``entry`` at the end; the input is left untouched."""
    return [dict(e) for e in (history or [])] + [entry]


def format_order_number(year: int, sequence: int) -> str:
    return f"ORD-{year}-{sequence:05d}"


def estimate_delivery(now: datetime, lead_times: Iterable[int], buffer_days: int,
                      default_lead_time: int) -> datetime:
    lead = max(lead_times, default=default_lead_time)
    return now + timedelta(days=lead + buffer_days)


def payment_schedule(plan: PaymentPlan, total) -> List:
    """Installment amounts for a plan; the last one absorbs rounding."""
    total = money(total)
    shares = PAYMENT_SPLITS[PaymentPlan(plan)]

    amounts = [money(total * money(share)) for share in shares[:-1]]
    amounts.append(total - sum(amounts, money(0)))
    return amounts
