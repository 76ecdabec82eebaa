"""Tests for profiles and the address book."""

import pytest

from atelier.domain.actor import Actor
from atelier.domain.enums import UserRole
from atelier.domain.errors import ConflictError, ForbiddenError, NotFoundError
from atelier.services.order_service import OrderService
from atelier.services.cart_service import CartService
from atelier.services.user_service import UserService
from tests.fakes import make_product


def _address(city="Beirut", **extra):
    data = {
        "full_name": "Ana Haddad",
        "phone": "+961 1 000000",
        "address_line_1": "Rue 1",
        "city": city,
        "region": "Beirut",
    }
    data.update(extra)
    return data


def _defaults(svc, user_id):
    return [a["city"] for a in svc.list_addresses(user_id) if a["is_default"]]


class TestProfile:

    def test_self_provisioning(self, db):
        actor = Actor("u-new")
        profile = UserService(db).create_user(
            actor, {"id": "u-new", "email": "New@Example.com", "first_name": "New", "last_name": "User"}
        )
        assert profile["id"] == "u-new"
        assert profile["email"] == "new@example.com"
        assert profile["role"] == UserRole.CUSTOMER
        assert profile["addresses"] == []

    def test_duplicate_email(self, db, customer):
        with pytest.raises(ConflictError):
            UserService(db).create_user(
                Actor("u-2"), {"id": "u-2", "email": "ANA@example.com", "first_name": "A", "last_name": "B"}
            )

    def test_customer_cannot_create_someone_else(self, db, customer):
        with pytest.raises(ForbiddenError):
            UserService(db).create_user(
                customer, {"id": "u-3", "email": "x@example.com", "first_name": "A", "last_name": "B"}
            )

    def test_customer_cannot_self_promote(self, db):
        with pytest.raises(ForbiddenError):
            UserService(db).create_user(
                Actor("u-4"),
                {"id": "u-4", "email": "y@example.com", "first_name": "A", "last_name": "B", "role": "ADMIN"},
            )

    def test_admin_creates_users(self, db, admin):
        profile = UserService(db).create_user(
            admin, {"email": "staff@example.com", "first_name": "S", "last_name": "T", "role": UserRole.ADMIN}
        )
        assert profile["role"] == UserRole.ADMIN

    def test_update_profile(self, db, customer):
        profile = UserService(db).update_profile(customer, customer.user_id, {"phone": "+961 3 123456"})
        assert profile["phone"] == "+961 3 123456"

    def test_profile_access(self, db, customer, admin):
        svc = UserService(db)
        assert svc.get_profile(admin, customer.user_id)["id"] == customer.user_id
        with pytest.raises(ForbiddenError):
            svc.get_profile(customer, admin.user_id)

    def test_missing_user(self, db, admin):
        with pytest.raises(NotFoundError):
            UserService(db).get_profile(admin, "nobody")


class TestAddresses:

    def test_first_address_becomes_default(self, db, customer):
        address = UserService(db).create_address(customer.user_id, _address())
        assert address["is_default"] is True
        assert address["country"] == "Lebanon"

    def test_second_address_is_not_default(self, db, customer):
        svc = UserService(db)
        svc.create_address(customer.user_id, _address("Beirut"))
        second = svc.create_address(customer.user_id, _address("Tripoli"))

        assert second["is_default"] is False
        assert _defaults(svc, customer.user_id) == ["Beirut"]

    def test_new_default_replaces_old(self, db, customer):
        svc = UserService(db)
        svc.create_address(customer.user_id, _address("Beirut"))
        svc.create_address(customer.user_id, _address("Tripoli", is_default=True))

        assert _defaults(svc, customer.user_id) == ["Tripoli"]

    def test_list_default_first(self, db, customer):
        svc = UserService(db)
        svc.create_address(customer.user_id, _address("Beirut"))
        svc.create_address(customer.user_id, _address("Tripoli"))

        assert svc.list_addresses(customer.user_id)[0]["city"] == "Beirut"

    def test_set_default(self, db, customer):
        svc = UserService(db)
        svc.create_address(customer.user_id, _address("Beirut"))
        tripoli = svc.create_address(customer.user_id, _address("Tripoli"))

        svc.set_default_address(customer.user_id, tripoli["id"])

        assert _defaults(svc, customer.user_id) == ["Tripoli"]

    def test_update_with_default_flag(self, db, customer):
        svc = UserService(db)
        svc.create_address(customer.user_id, _address("Beirut"))
        tripoli = svc.create_address(customer.user_id, _address("Tripoli"))

        updated = svc.update_address(customer.user_id, tripoli["id"], {"is_default": True, "city": "Byblos"})

        assert updated["city"] == "Byblos"
        assert _defaults(svc, customer.user_id) == ["Byblos"]

    def test_deleting_default_promotes_newest(self, db, customer):
        svc = UserService(db)
        beirut = svc.create_address(customer.user_id, _address("Beirut"))
        svc.create_address(customer.user_id, _address("Tripoli"))
        svc.create_address(customer.user_id, _address("Sidon"))

        svc.delete_address(customer.user_id, beirut["id"])

        assert _defaults(svc, customer.user_id) == ["Sidon"]
        assert len(svc.list_addresses(customer.user_id)) == 2

    def test_deleting_last_address(self, db, customer):
        svc = UserService(db)
        only = svc.create_address(customer.user_id, _address())
        svc.delete_address(customer.user_id, only["id"])
        assert svc.list_addresses(customer.user_id) == []

    def test_address_used_by_order_cannot_be_deleted(self, db, notifier, customer):
        svc = UserService(db)
        address = svc.create_address(customer.user_id, _address())
        CartService(db).add_item(customer.user_id, make_product(db).id, {}, 1)
        OrderService(db, notifier=notifier).create_order(customer, address["id"])

        with pytest.raises(ConflictError):
            svc.delete_address(customer.user_id, address["id"])

    def test_other_users_address_is_not_found(self, db, customer, admin):
        svc = UserService(db)
        address = svc.create_address(customer.user_id, _address())

        with pytest.raises(NotFoundError):
            svc.set_default_address(admin.user_id, address["id"])
        with pytest.raises(NotFoundError):
            svc.delete_address(admin.user_id, address["id"])
