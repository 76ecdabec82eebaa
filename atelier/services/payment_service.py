# atelier/services/payment_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from atelier.data.models.payment import PaymentModel
from atelier.domain.actor import Actor
from atelier.domain.enums import PaymentMethod, PaymentStatus
from atelier.domain.errors import (
    BadRequestError,
    ConcurrencyConflictError,
    InvalidStateError,
    NotFoundError,
)
from atelier.domain.order_lifecycle import CLOSED, payment_schedule
from atelier.domain.pricing import ZERO, money
from atelier.repos.order_repo import OrderRepo
from atelier.services.order_service import payment_projection
from atelier.utils.logging import get_logger
from atelier.utils.retry import conflict_retry

logger = get_logger(__name__)

PROCESSED_STATUSES = frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED})


class PaymentService:
    """
    Installment ledger. No gateway is called here, admins record what
    the payment provider reported.
    """

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def schedule(self, actor: Actor, order_id: str) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        actor.require_access(order.user_id)

        return {
            "order_id": order.id,
            "payment_plan": order.payment_plan,
            "installments": payment_schedule(order.payment_plan, order.total),
        }

    @conflict_retry()
    def record_payment(
        self,
        actor: Actor,
        order_id: str,
        amount: Decimal,
        method: PaymentMethod,
        provider: Optional[str] = None,
        provider_ref: Optional[str] = None,
    ) -> Dict[str, Any]:
        actor.require_admin()

        amount = money(amount)
        if amount <= ZERO:
            raise BadRequestError("Payment amount must be positive")
        try:
            method = PaymentMethod(method)
        except ValueError as e:
            raise BadRequestError(f"Unknown payment method '{method}'") from e

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        if order.status in CLOSED:
            raise InvalidStateError(f"Order {order.order_number} is {order.status.value}")

        installments = payment_schedule(order.payment_plan, order.total)
        taken = self.repo.count_payments(order.id)
        if taken >= len(installments):
            raise BadRequestError(
                f"All {len(installments)} installment(s) of order {order.order_number} are recorded"
            )

        try:
            payment = self.repo.add_payment(
                PaymentModel(
                    order_id=order.id,
                    amount=amount,
                    currency=order.currency,
                    method=method,
                    status=PaymentStatus.PENDING,
                    sequence=taken + 1,
                    provider=provider,
                    provider_ref=provider_ref,
                )
            )
            self.repo.commit()
        except IntegrityError as e:
            # (order_id, sequence) unique, a parallel request took the slot
            self.repo.rollback()
            raise ConcurrencyConflictError("Installment recorded concurrently") from e

        logger.info(
            f"Payment {payment.sequence}/{len(installments)} of {amount} recorded for order {order.order_number}"
        )
        return payment_projection(payment)

    def update_payment_status(
        self,
        actor: Actor,
        payment_id: str,
        status: PaymentStatus,
        failure_reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        actor.require_admin()

        try:
            status = PaymentStatus(status)
        except ValueError as e:
            raise BadRequestError(f"Unknown payment status '{status}'") from e

        payment = self.repo.get_payment(payment_id)
        if not payment:
            raise NotFoundError(f"Payment {payment_id} not found")

        payment.status = status
        if failure_reason is not None:
            payment.failure_reason = failure_reason
        if status in PROCESSED_STATUSES:
            payment.processed_at = datetime.now(timezone.utc)

        self.repo.commit()

        logger.info(f"Payment {payment_id} is now {status.value}")
        return payment_projection(payment)
