# atelier/repos/order_repo.py
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from atelier.data.models.order import OrderModel, OrderSequenceModel
from atelier.data.models.payment import PaymentModel
from atelier.domain.enums import OrderStatus

_FULL_ORDER = (
    selectinload(OrderModel.items),
    selectinload(OrderModel.payments),
    selectinload(OrderModel.shipping_address),
    selectinload(OrderModel.billing_address),
)


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .options(*_FULL_ORDER)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_order_by_number(self, order_number: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.order_number == order_number)
            .options(*_FULL_ORDER)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def list_orders(
        self,
        user_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[int, List[OrderModel]]:
        filters = []
        if user_id is not None:
            filters.append(OrderModel.user_id == user_id)
        if status is not None:
            filters.append(OrderModel.status == status)

        total = self.db.execute(select(func.count(OrderModel.id)).where(*filters)).scalar_one()
        orders = self.db.execute(
            select(OrderModel)
            .where(*filters)
            .options(*_FULL_ORDER)
            .order_by(OrderModel.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars()
        return total, list(orders)

    def next_sequence(self, year: int) -> int:
        """
        Bump the per-year counter and return the new value.
        The row is locked (FOR UPDATE where the dialect supports it) until commit.
        Never returns a number at or below the highest stored order number.
        """
        seq = self.db.execute(
            select(OrderSequenceModel)
            .where(OrderSequenceModel.year == year)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        if seq is None:
            # first order of the year, or the table was never seeded
            seq = OrderSequenceModel(year=year, last_value=0)
            self.db.add(seq)

        seq.last_value = max(seq.last_value, self._highest_sequence_for_year(year)) + 1
        self.db.flush()
        return seq.last_value

    def _highest_sequence_for_year(self, year: int) -> int:
        prefix = f"ORD-{year}-"
        # zero padded, so the longest then greatest number is the highest
        highest = self.db.execute(
            select(OrderModel.order_number)
            .where(OrderModel.order_number.like(f"{prefix}%"))
            .order_by(func.length(OrderModel.order_number).desc(), OrderModel.order_number.desc())
            .limit(1)
        ).scalar_one_or_none()
        suffix = highest[len(prefix):] if highest else ""
        return int(suffix) if suffix.isdigit() else 0

    def update_order_status(self, order_id: str, old_status: OrderStatus, new_data: dict) -> int:
        """
        Compare-and-swap on status, same idea as the cart version check:
        UPDATE orders SET ... WHERE id = :id AND status = :old_status
        0 rows means someone else moved the order first.
        """
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == old_status)
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def get_payment(self, payment_id: str) -> PaymentModel | None:
        return self.db.get(PaymentModel, payment_id)

    def count_payments(self, order_id: str) -> int:
        return self.db.execute(
            select(func.count(PaymentModel.id)).where(PaymentModel.order_id == order_id)
        ).scalar_one()

    def add_payment(self, payment: PaymentModel) -> PaymentModel:
        self.db.add(payment)
        self.db.flush()
        return payment

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
