#atelier/data/models/cart.py
from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from atelier.data.database import Base
from atelier.data.models.base import created_at_column, id_column, updated_at_column


class CartModel(Base):
    __tablename__ = "carts"

    id = id_column()
    # unique: one cart per user, duplicate lazy-creates collide here
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    created_at = created_at_column()
    updated_at = updated_at_column()

    user = relationship("UserModel", back_populates="cart")
    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemModel.created_at",
    )
