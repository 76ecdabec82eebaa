# atelier/services/user_service.py
from typing import Any, Dict, List, Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from atelier.data.models.address import AddressModel
from atelier.data.models.user import UserModel
from atelier.domain.actor import Actor
from atelier.domain.enums import UserRole
from atelier.domain.errors import ConflictError, ForbiddenError, NotFoundError
from atelier.repos.user_repo import UserRepo
from atelier.utils.logging import get_logger
from atelier.utils.settings import DEFAULT_COUNTRY

logger = get_logger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "phone")
ADDRESS_FIELDS = (
    "label",
    "full_name",
    "phone",
    "address_line_1",
    "address_line_2",
    "city",
    "region",
    "postal_code",
    "country",
)


class UserService:
    """
    Profiles and the address book.

    Default address rule: a user has at most one default. Every command
    that hands out the default unsets the previous one first, inside the
    same transaction, so the partial unique index never sees two.
    """

    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    # =====================================================
    # PROFILE
    # =====================================================
    def create_user(self, actor: Actor, data: Mapping[str, Any]) -> Dict[str, Any]:
        # identity layer provisions its own user; anything else is admin work
        if not actor.is_admin and data.get("id") != actor.user_id:
            raise ForbiddenError("Cannot create another user")
        if not actor.is_admin and data.get("role", UserRole.CUSTOMER) != UserRole.CUSTOMER:
            raise ForbiddenError("Admin privileges required")

        email = data["email"].strip().lower()
        if self.repo.get_user_by_email(email):
            raise ConflictError(f"Email {email} is already registered")

        user = UserModel(
            email=email,
            first_name=data["first_name"],
            last_name=data["last_name"],
            phone=data.get("phone"),
            role=UserRole(data.get("role") or UserRole.CUSTOMER),
        )
        if data.get("id"):
            user.id = data["id"]

        try:
            self.repo.create_user(user)
            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            raise ConflictError("User already exists") from e

        logger.info(f"Created user {user.id} ({user.role.value})")
        return self.get_profile(Actor(user.id, user.role), user.id)

    def get_profile(self, actor: Actor, user_id: str) -> Dict[str, Any]:
        actor.require_access(user_id)
        user = self._load(user_id)

        return {
            "id": user.id,
            "email": user.email,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "phone": user.phone,
            "role": user.role,
            "addresses": [self._address(a) for a in self.repo.list_addresses(user.id)],
            "created_at": user.created_at,
        }

    def update_profile(self, actor: Actor, user_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
        actor.require_access(user_id)
        user = self._load(user_id)

        for field in PROFILE_FIELDS:
            if field in changes and changes[field] is not None:
                setattr(user, field, changes[field])

        self.repo.commit()
        logger.info(f"Updated profile of user {user_id}")
        return self.get_profile(actor, user_id)

    # =====================================================
    # ADDRESSES
    # =====================================================
    def list_addresses(self, user_id: str) -> List[Dict[str, Any]]:
        return [self._address(a) for a in self.repo.list_addresses(user_id)]

    def create_address(self, user_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        self._load(user_id)

        first = self.repo.count_addresses(user_id) == 0
        make_default = first or bool(data.get("is_default"))

        try:
            if make_default and not first:
                self.repo.unset_default_addresses(user_id)

            address = AddressModel(user_id=user_id, is_default=make_default)
            for field in ADDRESS_FIELDS:
                setattr(address, field, data.get(field))
            address.country = address.country or DEFAULT_COUNTRY

            self.repo.add(address)
            self.repo.commit()
        except IntegrityError as e:
            # a concurrent request handed out the default in between
            self.repo.rollback()
            raise ConflictError("Default address changed concurrently, retry") from e

        logger.info(f"Address {address.id} added for user {user_id} (default={make_default})")
        return self._address(address)

    def update_address(self, user_id: str, address_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
        address = self._load_address(user_id, address_id)

        try:
            if changes.get("is_default") and not address.is_default:
                self.repo.unset_default_addresses(user_id, except_id=address.id)
                address.is_default = True
            elif changes.get("is_default") is False:
                address.is_default = False

            for field in ADDRESS_FIELDS:
                if field in changes and changes[field] is not None:
                    setattr(address, field, changes[field])

            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            raise ConflictError("Default address changed concurrently, retry") from e

        return self._address(address)

    def delete_address(self, user_id: str, address_id: str) -> None:
        address = self._load_address(user_id, address_id)

        if self.repo.address_in_use(address.id):
            raise ConflictError("Address is used as the shipping address of an order")

        was_default = address.is_default
        self.repo.delete(address)

        if was_default:
            replacement = self.repo.newest_address(user_id)
            if replacement:
                replacement.is_default = True
                logger.info(f"Address {replacement.id} promoted to default for user {user_id}")

        self.repo.commit()
        logger.info(f"Address {address_id} deleted for user {user_id}")

    def set_default_address(self, user_id: str, address_id: str) -> Dict[str, Any]:
        address = self._load_address(user_id, address_id)

        if not address.is_default:
            self.repo.unset_default_addresses(user_id, except_id=address.id)
            address.is_default = True
            self.repo.commit()

        return self._address(address)

    # =====================================================
    # HELPERS
    # =====================================================
    def _load(self, user_id: str) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def _load_address(self, user_id: str, address_id: str) -> AddressModel:
        address = self.repo.get_address(user_id, address_id)
        if not address:
            raise NotFoundError(f"Address {address_id} not found")
        return address

    @staticmethod
    def _address(address: AddressModel) -> Dict[str, Any]:
        return {
            "id": address.id,
            "label": address.label,
            "full_name": address.full_name,
            "phone": address.phone,
            "address_line_1": address.address_line_1,
            "address_line_2": address.address_line_2,
            "city": address.city,
            "region": address.region,
            "postal_code": address.postal_code,
            "country": address.country,
            "is_default": address.is_default,
            "created_at": address.created_at,
        }
