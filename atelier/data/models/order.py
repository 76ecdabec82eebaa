from sqlalchemy import JSON, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from atelier.data.database import Base
from atelier.data.models.base import created_at_column, id_column, updated_at_column
from atelier.domain.enums import OrderStatus, PaymentPlan
from atelier.utils.settings import DEFAULT_CURRENCY


class OrderModel(Base):
    __tablename__ = "orders"

    id = id_column()
    order_number = Column(String(32), nullable=False, unique=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    # referenced, not copied: edits to the address show up on the order
    shipping_address_id = Column(String(36), ForeignKey("addresses.id", ondelete="RESTRICT"), nullable=False)
    billing_address_id = Column(String(36), ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True)

    subtotal = Column(Numeric(10, 2), nullable=False)
    shipping_cost = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default=DEFAULT_CURRENCY)
    payment_plan = Column(Enum(PaymentPlan, name="payment_plan"), nullable=False, default=PaymentPlan.FULL)

    status = Column(
        Enum(OrderStatus, name="order_status"),
        nullable=False,
        default=OrderStatus.PENDING_PAYMENT,
        index=True,
    )
    # append-only list of {status, timestamp, note}
    status_history = Column(JSON, nullable=False, default=list)

    estimated_delivery = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = created_at_column()
    updated_at = updated_at_column()

    items = relationship("OrderItemModel", back_populates="order", cascade="all, delete-orphan")
    payments = relationship("PaymentModel", back_populates="order", order_by="PaymentModel.sequence")
    shipping_address = relationship("AddressModel", foreign_keys=[shipping_address_id])
    billing_address = relationship("AddressModel", foreign_keys=[billing_address_id])


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = id_column()
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)

    # frozen at order time, catalog edits never reach these
    product_name = Column(String(255), nullable=False)
    product_sku = Column(String(64), nullable=False)
    configuration = Column(JSON, nullable=False, default=dict)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)

    created_at = created_at_column()

    order = relationship("OrderModel", back_populates="items")


class OrderSequenceModel(Base):
    """Per-year counter behind ORD-{year}-{seq} numbers."""

    __tablename__ = "order_sequences"

    year = Column(Integer, primary_key=True, autoincrement=False)
    last_value = Column(Integer, nullable=False, default=0)
