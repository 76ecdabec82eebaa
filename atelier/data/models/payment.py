from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from atelier.data.database import Base
from atelier.data.models.base import created_at_column, id_column, updated_at_column
from atelier.domain.enums import PaymentMethod, PaymentStatus
from atelier.utils.settings import DEFAULT_CURRENCY


class PaymentModel(Base):
    __tablename__ = "payments"

    id = id_column()
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="RESTRICT"), nullable=False, index=True)

    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default=DEFAULT_CURRENCY)
    method = Column(Enum(PaymentMethod, name="payment_method"), nullable=False)
    status = Column(Enum(PaymentStatus, name="payment_status"), nullable=False, default=PaymentStatus.PENDING, index=True)
    # installment number within the order's payment plan, starting at 1
    sequence = Column(Integer, nullable=False, default=1)

    provider = Column(String(100), nullable=True)
    provider_ref = Column(String(255), nullable=True)
    failure_reason = Column(Text, nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = created_at_column()
    updated_at = updated_at_column()

    order = relationship("OrderModel", back_populates="payments")

    __table_args__ = (
        UniqueConstraint("order_id", "sequence", name="uq_payments_order_sequence"),
    )
