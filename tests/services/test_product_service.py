"""Tests for catalog administration and browsing."""

from decimal import Decimal

import pytest

from atelier.domain.enums import FurnitureCategory
from atelier.domain.errors import BadRequestError, ConflictError, ForbiddenError, InvalidStateError, NotFoundError
from atelier.services.cart_service import CartService
from atelier.services.order_service import OrderService
from atelier.services.product_service import ProductService, generate_slug
from tests.fakes import make_address, make_product


def _payload(**overrides):
    data = {
        "sku": "TBL-OAK-01",
        "name": "Oak Dining Table",
        "description": "Solid oak, seats six",
        "category": FurnitureCategory.TABLES,
        "base_price": Decimal("1200.00"),
        "material_options": [],
        "color_options": [],
    }
    data.update(overrides)
    return data


class TestGenerateSlug:

    def test_basic(self):
        assert generate_slug("Oak Dining Table") == "oak-dining-table"

    def test_punctuation_and_runs(self):
        assert generate_slug("  Lounge Chair (Velvet) -- v2_ ") == "lounge-chair-velvet-v2"

    def test_only_symbols(self):
        assert generate_slug("!!!") == ""


class TestCreateProduct:

    def test_create_with_options(self, db, admin):
        product = ProductService(db).create_product(
            admin,
            _payload(
                material_options=[
                    {"name": "Oak", "type": "wood", "price_modifier": Decimal("0"), "is_default": True},
                    {"name": "Walnut", "type": "wood", "price_modifier": Decimal("300"), "is_default": True},
                ],
                color_options=[{"name": "Natural", "hex_code": "#C8A165"}],
            ),
        )

        assert product["slug"] == "oak-dining-table"
        assert product["lead_time_days"] == 21
        assert len(product["material_options"]) == 2
        assert [m["name"] for m in product["material_options"] if m["is_default"]] == ["Oak"]
        assert product["color_options"][0]["hex_code"] == "#C8A165"

    def test_duplicate_sku(self, db, admin):
        svc = ProductService(db)
        svc.create_product(admin, _payload())
        with pytest.raises(ConflictError, match="SKU"):
            svc.create_product(admin, _payload(name="Another Table"))

    def test_duplicate_slug(self, db, admin):
        svc = ProductService(db)
        svc.create_product(admin, _payload())
        with pytest.raises(ConflictError, match="slug"):
            svc.create_product(admin, _payload(sku="TBL-OAK-02"))

    def test_admin_only(self, db, customer):
        with pytest.raises(ForbiddenError):
            ProductService(db).create_product(customer, _payload())


class TestUpdateProduct:

    def test_rename_regenerates_slug(self, db, admin):
        svc = ProductService(db)
        product = svc.create_product(admin, _payload())

        updated = svc.update_product(admin, product["id"], {"name": "Walnut Dining Table"})

        assert updated["slug"] == "walnut-dining-table"

    def test_rename_onto_taken_slug_gets_suffix(self, db, admin):
        svc = ProductService(db)
        svc.create_product(admin, _payload(sku="A", name="Walnut Table"))
        product = svc.create_product(admin, _payload(sku="B", name="Oak Table"))

        updated = svc.update_product(admin, product["id"], {"name": "Walnut Table!"})

        assert updated["slug"].startswith("walnut-table-")
        assert updated["slug"] != "walnut-table"

    def test_sku_taken(self, db, admin):
        svc = ProductService(db)
        svc.create_product(admin, _payload(sku="A", name="First"))
        second = svc.create_product(admin, _payload(sku="B", name="Second"))

        with pytest.raises(ConflictError):
            svc.update_product(admin, second["id"], {"sku": "A"})

    def test_missing(self, db, admin):
        with pytest.raises(NotFoundError):
            ProductService(db).update_product(admin, "missing", {"name": "x"})


class TestOptionGroups:

    def test_new_default_material_clears_old(self, db, admin):
        svc = ProductService(db)
        product = svc.create_product(
            admin, _payload(material_options=[{"name": "Oak", "type": "wood", "is_default": True}])
        )

        updated = svc.add_material_option(
            admin, product["id"], {"name": "Walnut", "type": "wood", "price_modifier": Decimal("300"), "is_default": True}
        )

        assert [m["name"] for m in updated["material_options"] if m["is_default"]] == ["Walnut"]

    def test_sizes_and_fabrics(self, db, admin):
        svc = ProductService(db)
        product = svc.create_product(admin, _payload())
        svc.add_size(
            admin,
            product["id"],
            {"label": "Large", "price": Decimal("1500"), "width": 220, "height": 75, "depth": 100},
        )
        with_category = svc.add_fabric_category(admin, product["id"], {"name": "Linen"})
        category_id = with_category["fabric_categories"][0]["id"]

        updated = svc.add_fabric(
            admin,
            product["id"],
            {"fabric_category_id": category_id, "name": "Sand", "hex_color": "#d8c8a8", "price": Decimal("80")},
        )

        assert updated["sizes"][0]["label"] == "Large"
        assert updated["fabric_categories"][0]["fabrics"][0]["name"] == "Sand"

    def test_fabric_in_unknown_category(self, db, admin):
        svc = ProductService(db)
        product = svc.create_product(admin, _payload())
        with pytest.raises(NotFoundError):
            svc.add_fabric(admin, product["id"], {"fabric_category_id": "nope", "name": "x", "hex_color": "#000000"})

    def test_added_options_are_priced_in_cart(self, db, admin, customer):
        svc = ProductService(db)
        product = svc.create_product(admin, _payload(base_price=Decimal("1000")))
        updated = svc.add_color_option(
            admin, product["id"], {"name": "Black", "hex_code": "#000000", "price_modifier": Decimal("50")}
        )
        color_id = updated["color_options"][0]["id"]

        cart = CartService(db).add_item(customer.user_id, product["id"], {"colorId": color_id}, 1)

        assert cart["items"][0]["unit_price"] == Decimal("1050.00")


class TestImages:

    def test_new_primary_replaces_old(self, db, admin):
        svc = ProductService(db)
        product = svc.create_product(admin, _payload())
        svc.add_image(admin, product["id"], {"url": "https://cdn.example.com/front.jpg", "is_primary": True})

        updated = svc.add_image(
            admin, product["id"], {"url": "https://cdn.example.com/side.jpg", "sort_order": 1, "is_primary": True}
        )

        assert [i["url"] for i in updated["images"] if i["is_primary"]] == ["https://cdn.example.com/side.jpg"]
        assert len(updated["images"]) == 2

    def test_primary_image_shows_in_cart(self, db, admin, customer):
        svc = ProductService(db)
        product = svc.create_product(admin, _payload())
        svc.add_image(admin, product["id"], {"url": "https://cdn.example.com/front.jpg", "is_primary": True})

        cart = CartService(db).add_item(customer.user_id, product["id"], {}, 1)

        assert cart["items"][0]["product_image"] == "https://cdn.example.com/front.jpg"

    def test_remove_image(self, db, admin):
        svc = ProductService(db)
        product = svc.create_product(admin, _payload())
        image_id = svc.add_image(admin, product["id"], {"url": "https://cdn.example.com/a.jpg"})["images"][0]["id"]

        updated = svc.remove_image(admin, product["id"], image_id)

        assert updated["images"] == []

    def test_remove_image_of_other_product(self, db, admin):
        svc = ProductService(db)
        first = svc.create_product(admin, _payload())
        second = svc.create_product(admin, _payload(sku="TBL-2", name="Walnut Table"))
        image_id = svc.add_image(admin, first["id"], {"url": "https://cdn.example.com/a.jpg"})["images"][0]["id"]

        with pytest.raises(NotFoundError):
            svc.remove_image(admin, second["id"], image_id)

    def test_admin_only(self, db, admin, customer):
        svc = ProductService(db)
        product = svc.create_product(admin, _payload())
        with pytest.raises(ForbiddenError):
            svc.add_image(customer, product["id"], {"url": "https://cdn.example.com/a.jpg"})


class TestBrowse:

    def test_get_by_id_or_slug(self, db, admin):
        svc = ProductService(db)
        product = svc.create_product(admin, _payload())
        assert svc.get_product(product["slug"])["id"] == product["id"]
        assert svc.get_product(product["id"])["slug"] == product["slug"]

    def test_list_filters_and_sorts(self, db):
        make_product(db, base_price="300.00", name="Cheap chair", category=FurnitureCategory.CHAIRS)
        make_product(db, base_price="900.00", name="Big table")
        make_product(db, base_price="500.00", name="Small table")
        make_product(db, base_price="100.00", name="Hidden table", is_active=False)
        svc = ProductService(db)

        tables = svc.list_products(category=FurnitureCategory.TABLES, sort="price_asc")
        assert [p["name"] for p in tables["products"]] == ["Small table", "Big table"]

        searched = svc.list_products(search="TABLE", max_price=Decimal("600"))
        assert [p["name"] for p in searched["products"]] == ["Small table"]

        paged = svc.list_products(sort="price_desc", page=2, limit=2)
        assert paged["total"] == 3
        assert paged["total_pages"] == 2
        assert [p["name"] for p in paged["products"]] == ["Cheap chair"]

    def test_unknown_sort(self, db):
        with pytest.raises(BadRequestError):
            ProductService(db).list_products(sort="random")


class TestDeleteProduct:

    def test_delete_removes_cart_lines(self, db, admin, customer):
        product = make_product(db)
        CartService(db).add_item(customer.user_id, product.id, {}, 1)

        ProductService(db).delete_product(admin, product.id)

        assert CartService(db).get_cart(customer.user_id)["items"] == []
        with pytest.raises(NotFoundError):
            ProductService(db).get_product(product.id)

    def test_ordered_product_cannot_be_deleted(self, db, admin, customer, notifier):
        product = make_product(db)
        CartService(db).add_item(customer.user_id, product.id, {}, 1)
        address = make_address(db, customer.user_id)
        OrderService(db, notifier=notifier).create_order(customer, address.id)

        with pytest.raises(InvalidStateError):
            ProductService(db).delete_product(admin, product.id)
