# atelier/services/order_service.py
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from atelier.data.models.address import AddressModel
from atelier.data.models.order import OrderItemModel, OrderModel
from atelier.domain.actor import Actor
from atelier.domain.enums import OrderStatus, PaymentPlan
from atelier.domain.errors import BadRequestError, ConcurrencyConflictError, NotFoundError
from atelier.domain.order_lifecycle import (
    INITIAL_STATUS,
    append_history,
    cancellation_note,
    ensure_cancellable,
    ensure_transition,
    estimate_delivery,
    format_order_number,
    history_entry,
)
from atelier.domain.pricing import ZERO, calculate_shipping, calculate_tax, describe_configuration, money
from atelier.repos.cart_repo import CartRepo
from atelier.repos.order_repo import OrderRepo
from atelier.repos.user_repo import UserRepo
from atelier.services.cart_service import CartService
from atelier.services.notification_service import NotificationService
from atelier.utils.logging import get_logger
from atelier.utils.retry import conflict_retry
from atelier.utils.settings import (
    DEFAULT_CURRENCY,
    DEFAULT_LEAD_TIME_DAYS,
    FLAT_SHIPPING_FEE,
    FREE_SHIPPING_THRESHOLD,
    SHIPPING_BUFFER_DAYS,
    TAX_RATE,
)

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderService:
    """
    Order lifecycle: checkout from the cart, status workflow, reads.
    Kept apart from CartService, checkout only borrows the cart for one transaction.
    """

    def __init__(
        self,
        db: Session,
        notifier: Optional[NotificationService] = None,
        tax_rate: Decimal = TAX_RATE,
        free_shipping_threshold: Decimal = FREE_SHIPPING_THRESHOLD,
        flat_shipping_fee: Decimal = FLAT_SHIPPING_FEE,
        currency: str = DEFAULT_CURRENCY,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repo = OrderRepo(db)
        self.users = UserRepo(db)
        self.cart_repo = CartRepo(db)
        self.carts = CartService(db)
        self.notifier = notifier or NotificationService()
        self.tax_rate = tax_rate
        self.free_shipping_threshold = free_shipping_threshold
        self.flat_shipping_fee = flat_shipping_fee
        self.currency = currency
        self.clock = clock

    # =====================================================
    # COMMANDS
    # =====================================================
    @conflict_retry()
    def create_order(
        self,
        actor: Actor,
        shipping_address_id: str,
        billing_address_id: Optional[str] = None,
        payment_plan: PaymentPlan = PaymentPlan.FULL,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Use case: checkout.

        1. cart must have items
        2. addresses must belong to the caller
        3. number, totals and delivery estimate
        4. items are copied, later catalog edits never reach the order
        5. order insert + cart clear commit together
        """
        user_id = actor.user_id
        cart = self.carts.get_or_create(user_id)

        if not cart.items:
            raise BadRequestError("Cart is empty")

        try:
            payment_plan = PaymentPlan(payment_plan)
        except ValueError as e:
            raise BadRequestError(f"Unknown payment plan '{payment_plan}'") from e

        shipping_address = self.users.get_address(user_id, shipping_address_id)
        if not shipping_address:
            raise NotFoundError(f"Shipping address {shipping_address_id} not found")

        if billing_address_id and not self.users.get_address(user_id, billing_address_id):
            raise NotFoundError(f"Billing address {billing_address_id} not found")

        now = self.clock()
        order_number = None

        try:
            order_number = format_order_number(now.year, self.repo.next_sequence(now.year))

            items = []
            lead_times = []
            for cart_item in cart.items:
                unit_price = money(cart_item.unit_price)
                items.append(
                    OrderItemModel(
                        product_id=cart_item.product_id,
                        product_name=cart_item.product.name,
                        product_sku=cart_item.product.sku,
                        configuration=describe_configuration(cart_item.product, cart_item.configuration),
                        quantity=cart_item.quantity,
                        unit_price=unit_price,
                        total_price=money(unit_price * cart_item.quantity),
                    )
                )
                lead_times.append(cart_item.product.lead_time_days)

            subtotal = money(sum((i.total_price for i in items), ZERO))
            shipping_cost = calculate_shipping(subtotal, self.free_shipping_threshold, self.flat_shipping_fee)
            tax = calculate_tax(subtotal, self.tax_rate)

            order = OrderModel(
                order_number=order_number,
                user_id=user_id,
                shipping_address_id=shipping_address.id,
                billing_address_id=billing_address_id or shipping_address.id,
                subtotal=subtotal,
                shipping_cost=shipping_cost,
                tax=tax,
                total=subtotal + shipping_cost + tax,
                currency=self.currency,
                payment_plan=payment_plan,
                status=INITIAL_STATUS,
                status_history=[history_entry(INITIAL_STATUS, "Order created", now)],
                estimated_delivery=estimate_delivery(
                    now, lead_times, SHIPPING_BUFFER_DAYS, DEFAULT_LEAD_TIME_DAYS
                ),
                notes=notes,
                items=items,
            )
            self.repo.create_order(order)
            self.cart_repo.clear_cart(cart)
            self.repo.commit()
        except IntegrityError as e:
            # order number (or the year's sequence row) taken by a concurrent checkout
            self.repo.rollback()
            logger.warning(f"Order number collision on {order_number}, retrying")
            raise ConcurrencyConflictError(f"Order number {order_number} already taken") from e

        logger.info(f"Order {order.order_number} created for user {user_id}, total {order.total}")
        self.notifier.order_placed(user_id, order.order_number, str(order.total))

        return self.to_projection(self._load(order.id))

    def update_status(
        self,
        actor: Actor,
        order_id: str,
        status: OrderStatus,
        note: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Use case: admin moves an order along the workflow."""
        actor.require_admin()
        try:
            requested = OrderStatus(status)
        except ValueError as e:
            raise BadRequestError(f"Unknown order status '{status}'") from e
        return self._transition(self._load(order_id), requested, note)

    def cancel_order(self, actor: Actor, order_id: str) -> Dict[str, Any]:
        order = self._load(order_id)
        actor.require_access(order.user_id)

        # only before production starts
        ensure_cancellable(order.status)

        return self._transition(order, OrderStatus.CANCELLED, cancellation_note(actor.is_admin))

    # =====================================================
    # QUERY
    # =====================================================
    def get_order(self, actor: Actor, order_id: str) -> Dict[str, Any]:
        order = self._load(order_id)
        actor.require_access(order.user_id)
        return self.to_projection(order)

    def get_order_by_number(self, actor: Actor, order_number: str) -> Dict[str, Any]:
        order = self.repo.get_order_by_number(order_number)
        if not order:
            raise NotFoundError(f"Order {order_number} not found")
        actor.require_access(order.user_id)
        return self.to_projection(order)

    def list_user_orders(
        self,
        actor: Actor,
        status: Optional[OrderStatus] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        return self._list(actor.user_id, status, page, limit)

    def list_all_orders(
        self,
        actor: Actor,
        status: Optional[OrderStatus] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        actor.require_admin()
        return self._list(None, status, page, limit)

    # =====================================================
    # HELPERS
    # =====================================================
    def _load(self, order_id: str) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    def _transition(self, order: OrderModel, requested: OrderStatus, note: Optional[str]) -> Dict[str, Any]:
        current = order.status
        ensure_transition(current, requested)

        history = append_history(order.status_history, history_entry(requested, note, self.clock()))

        rowcount = self.repo.update_order_status(
            order_id=order.id,
            old_status=current,
            new_data={"status": requested, "status_history": history},
        )

        if rowcount == 0:
            self.repo.rollback()
            raise ConcurrencyConflictError(
                f"Order {order.order_number} was modified concurrently, reload and retry"
            )

        self.repo.commit()

        logger.info(f"Order {order.order_number}: {current.value} -> {requested.value}")
        self.notifier.status_changed(order.user_id, order.order_number, requested.value, note)

        return self.to_projection(self._load(order.id))

    def _list(self, user_id: Optional[str], status: Optional[OrderStatus], page: int, limit: int) -> Dict[str, Any]:
        if page < 1:
            raise BadRequestError("page must be >= 1")
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise BadRequestError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

        total, orders = self.repo.list_orders(user_id=user_id, status=status, page=page, limit=limit)
        return {
            "orders": [self.to_projection(o) for o in orders],
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }

    @staticmethod
    def _address(address: Optional[AddressModel]) -> Optional[Dict[str, Any]]:
        if address is None:
            return None
        return {
            "id": address.id,
            "full_name": address.full_name,
            "phone": address.phone,
            "address_line_1": address.address_line_1,
            "address_line_2": address.address_line_2,
            "city": address.city,
            "region": address.region,
            "country": address.country,
        }

    @classmethod
    def to_projection(cls, order: OrderModel) -> Dict[str, Any]:
        return {
            "id": order.id,
            "order_number": order.order_number,
            "user_id": order.user_id,
            "status": order.status,
            "payment_plan": order.payment_plan,
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "product_sku": item.product_sku,
                    "configuration": item.configuration,
                    "quantity": item.quantity,
                    "unit_price": money(item.unit_price),
                    "total_price": money(item.total_price),
                }
                for item in order.items
            ],
            "shipping_address": cls._address(order.shipping_address),
            "billing_address": cls._address(order.billing_address),
            "payments": [payment_projection(p) for p in order.payments],
            "subtotal": money(order.subtotal),
            "shipping_cost": money(order.shipping_cost),
            "tax": money(order.tax),
            "total": money(order.total),
            "currency": order.currency,
            "estimated_delivery": order.estimated_delivery,
            "notes": order.notes,
            "status_history": [dict(e) for e in order.status_history or []],
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }


def payment_projection(payment) -> Dict[str, Any]:
    return {
        "id": payment.id,
        "order_id": payment.order_id,
        "amount": money(payment.amount),
        "currency": payment.currency,
        "method": payment.method,
        "status": payment.status,
        "sequence": payment.sequence,
        "provider": payment.provider,
        "provider_ref": payment.provider_ref,
        "failure_reason": payment.failure_reason,
        "processed_at": payment.processed_at,
    }
