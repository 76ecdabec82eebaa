from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from atelier.data.models.address import AddressModel
from atelier.data.models.order import OrderModel
from atelier.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_user_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.lower())
        ).scalar_one_or_none()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user

    # addresses

    def list_addresses(self, user_id: str) -> List[AddressModel]:
        return list(
            self.db.execute(
                select(AddressModel)
                .where(AddressModel.user_id == user_id)
                .order_by(AddressModel.is_default.desc(), AddressModel.created_at.desc())
            ).scalars()
        )

    def get_address(self, user_id: str, address_id: str) -> AddressModel | None:
        """Address only if it belongs to ``user_id``."""
        return self.db.execute(
            select(AddressModel).where(
                AddressModel.id == address_id,
                AddressModel.user_id == user_id,
            )
        ).scalar_one_or_none()

    def count_addresses(self, user_id: str) -> int:
        return self.db.execute(
            select(func.count(AddressModel.id)).where(AddressModel.user_id == user_id)
        ).scalar_one()

    def newest_address(self, user_id: str) -> AddressModel | None:
        return self.db.execute(
            select(AddressModel)
            .where(AddressModel.user_id == user_id)
            .order_by(AddressModel.created_at.desc())
            .limit(1)
        ).scalar_one_or_none()

    def unset_default_addresses(self, user_id: str, except_id: Optional[str] = None) -> int:
        stmt = update(AddressModel).where(
            AddressModel.user_id == user_id,
            AddressModel.is_default.is_(True),
        )
        if except_id:
            stmt = stmt.where(AddressModel.id != except_id)
        result = self.db.execute(
            stmt.values(is_default=False).execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def address_in_use(self, address_id: str) -> bool:
        count = self.db.execute(
            select(func.count(OrderModel.id)).where(OrderModel.shipping_address_id == address_id)
        ).scalar_one()
        return count > 0

    def add(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj

    def delete(self, obj) -> None:
        self.db.delete(obj)
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
