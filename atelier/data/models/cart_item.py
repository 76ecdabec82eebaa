from sqlalchemy import JSON, CheckConstraint, Column, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from atelier.data.database import Base
from atelier.data.models.base import created_at_column, id_column, updated_at_column


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = id_column()
    cart_id = Column(String(36), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    configuration = Column(JSON, nullable=False, default=dict)
    # canonical (sorted, compact) json of configuration, the line identity
    configuration_key = Column(String(1024), nullable=False)

    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False)

    created_at = created_at_column()
    updated_at = updated_at_column()

    cart = relationship("CartModel", back_populates="items")
    product = relationship("ProductModel", back_populates="cart_items")

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", "configuration_key", name="uq_cart_items_line"),
        CheckConstraint("quantity >= 1", name="ck_cart_items_quantity"),
    )
