"""Tests for the installment ledger."""

from decimal import Decimal

import pytest

from atelier.domain.enums import PaymentMethod, PaymentPlan, PaymentStatus
from atelier.domain.errors import BadRequestError, ForbiddenError, InvalidStateError, NotFoundError
from atelier.services.cart_service import CartService
from atelier.services.order_service import OrderService
from atelier.services.payment_service import PaymentService
from tests.fakes import make_address, make_product


def _order(db, notifier, customer, plan=PaymentPlan.FULL):
    """Single 1000.00 item: free shipping, total 1000.00."""
    product = make_product(db, base_price="1000.00")
    CartService(db).add_item(customer.user_id, product.id, {}, 1)
    address = make_address(db, customer.user_id)
    return OrderService(db, notifier=notifier).create_order(customer, address.id, payment_plan=plan)


class TestSchedule:

    def test_split_plan(self, db, notifier, customer):
        order = _order(db, notifier, customer, PaymentPlan.SPLIT_70_30)
        schedule = PaymentService(db).schedule(customer, order["id"])
        assert schedule["installments"] == [Decimal("700.00"), Decimal("300.00")]


class TestRecordPayment:

    def test_full_plan_takes_one_payment(self, db, notifier, customer, admin):
        order = _order(db, notifier, customer)
        svc = PaymentService(db)

        payment = svc.record_payment(admin, order["id"], Decimal("1000"), PaymentMethod.BANK_TRANSFER)

        assert payment["sequence"] == 1
        assert payment["status"] == PaymentStatus.PENDING
        assert payment["amount"] == Decimal("1000.00")
        with pytest.raises(BadRequestError):
            svc.record_payment(admin, order["id"], Decimal("1"), PaymentMethod.BANK_TRANSFER)

    def test_split_plan_takes_two(self, db, notifier, customer, admin):
        order = _order(db, notifier, customer, PaymentPlan.SPLIT_70_30)
        svc = PaymentService(db)

        svc.record_payment(admin, order["id"], Decimal("700"), PaymentMethod.CREDIT_CARD)
        second = svc.record_payment(admin, order["id"], Decimal("300"), PaymentMethod.CREDIT_CARD)

        assert second["sequence"] == 2
        payments = OrderService(db, notifier=notifier).get_order(customer, order["id"])["payments"]
        assert [p["sequence"] for p in payments] == [1, 2]

    def test_non_positive_amount(self, db, notifier, customer, admin):
        order = _order(db, notifier, customer)
        with pytest.raises(BadRequestError):
            PaymentService(db).record_payment(admin, order["id"], Decimal("0"), PaymentMethod.CRYPTO)

    def test_unknown_method(self, db, notifier, customer, admin):
        order = _order(db, notifier, customer)
        with pytest.raises(BadRequestError, match="payment method"):
            PaymentService(db).record_payment(admin, order["id"], Decimal("10"), "CHEQUE")

    def test_closed_order(self, db, notifier, customer, admin):
        order = _order(db, notifier, customer)
        OrderService(db, notifier=notifier).cancel_order(customer, order["id"])

        with pytest.raises(InvalidStateError):
            PaymentService(db).record_payment(admin, order["id"], Decimal("1000"), PaymentMethod.CRYPTO)

    def test_admin_only(self, db, notifier, customer):
        order = _order(db, notifier, customer)
        with pytest.raises(ForbiddenError):
            PaymentService(db).record_payment(customer, order["id"], Decimal("1000"), PaymentMethod.CRYPTO)

    def test_unknown_order(self, db, admin):
        with pytest.raises(NotFoundError):
            PaymentService(db).record_payment(admin, "missing", Decimal("1"), PaymentMethod.CRYPTO)


class TestUpdatePaymentStatus:

    def test_completed_sets_processed_at(self, db, notifier, customer, admin):
        order = _order(db, notifier, customer)
        svc = PaymentService(db)
        payment = svc.record_payment(admin, order["id"], Decimal("1000"), PaymentMethod.CREDIT_CARD)

        updated = svc.update_payment_status(admin, payment["id"], PaymentStatus.COMPLETED)

        assert updated["status"] == PaymentStatus.COMPLETED
        assert updated["processed_at"] is not None

    def test_failure_reason(self, db, notifier, customer, admin):
        order = _order(db, notifier, customer)
        svc = PaymentService(db)
        payment = svc.record_payment(admin, order["id"], Decimal("1000"), PaymentMethod.CREDIT_CARD)

        updated = svc.update_payment_status(admin, payment["id"], PaymentStatus.FAILED, "Card declined")

        assert updated["failure_reason"] == "Card declined"
        assert updated["processed_at"] is not None

    def test_processing_has_no_processed_at(self, db, notifier, customer, admin):
        order = _order(db, notifier, customer)
        svc = PaymentService(db)
        payment = svc.record_payment(admin, order["id"], Decimal("1000"), PaymentMethod.CREDIT_CARD)

        updated = svc.update_payment_status(admin, payment["id"], PaymentStatus.PROCESSING)

        assert updated["processed_at"] is None

    def test_unknown_payment(self, db, admin):
        with pytest.raises(NotFoundError):
            PaymentService(db).update_payment_status(admin, "missing", PaymentStatus.COMPLETED)

    def test_unknown_status(self, db, admin):
        with pytest.raises(BadRequestError, match="payment status"):
            PaymentService(db).update_payment_status(admin, "missing", "SETTLED")
