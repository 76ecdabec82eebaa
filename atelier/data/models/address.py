from sqlalchemy import Boolean, Column, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship

from atelier.data.database import Base
from atelier.data.models.base import created_at_column, id_column, updated_at_column
from atelier.utils.settings import DEFAULT_COUNTRY


class AddressModel(Base):
    __tablename__ = "addresses"

    id = id_column()
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    label = Column(String(100), nullable=True)
    full_name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=False)
    address_line_1 = Column(String(255), nullable=False)
    address_line_2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False)
    region = Column(String(100), nullable=False)
    postal_code = Column(String(20), nullable=True)
    country = Column(String(100), nullable=False, default=DEFAULT_COUNTRY)
    is_default = Column(Boolean, nullable=False, default=False)

    created_at = created_at_column()
    updated_at = updated_at_column()

    user = relationship("UserModel", back_populates="addresses")

    # at most one default address per user
    __table_args__ = (
        Index(
            "uq_addresses_one_default_per_user",
            "user_id",
            unique=True,
            sqlite_where=text("is_default = 1"),
            postgresql_where=text("is_default"),
        ),
    )
