from sqlalchemy import Boolean, Column, Enum, String
from sqlalchemy.orm import relationship

from atelier.data.database import Base
from atelier.data.models.base import created_at_column, id_column, updated_at_column
from atelier.domain.enums import UserRole


class UserModel(Base):
    __tablename__ = "users"

    id = id_column()
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=True)
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.CUSTOMER)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = created_at_column()
    updated_at = updated_at_column()

    # orders are not listed here: orders.user_id is RESTRICT, users with orders stay
    addresses = relationship(
        "AddressModel",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    cart = relationship(
        "CartModel",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
