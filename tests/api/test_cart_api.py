"""Router tests for /cart."""

from decimal import Decimal

from tests.fakes import make_product


def _headers(actor):
    return {"X-User-Id": actor.user_id, "X-User-Role": actor.role.value}


class TestCartApi:

    def test_identity_header_required(self, client):
        assert client.get("/cart").status_code == 401

    def test_add_merge_and_remove(self, client, db, customer):
        product = make_product(db, base_price="100.00", materials=[("Oak", "20.00")])
        oak_id = product.material_options[0].id
        body = {"product_id": product.id, "configuration": {"materialId": oak_id}, "quantity": 1}

        client.post("/cart/items", json=body, headers=_headers(customer))
        resp = client.post("/cart/items", json=body, headers=_headers(customer))

        assert resp.status_code == 200
        cart = resp.json()
        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 2
        assert Decimal(cart["subtotal"]) == Decimal("240.00")

        item_id = cart["items"][0]["id"]
        resp = client.patch(f"/cart/items/{item_id}", json={"quantity": 0}, headers=_headers(customer))
        assert resp.json()["items"] == []

    def test_unknown_product_is_404(self, client, customer):
        resp = client.post("/cart/items", json={"product_id": "missing"}, headers=_headers(customer))
        assert resp.status_code == 404

    def test_inactive_product_is_409(self, client, db, customer):
        product = make_product(db, is_active=False)
        resp = client.post("/cart/items", json={"product_id": product.id}, headers=_headers(customer))
        assert resp.status_code == 409

    def test_zero_quantity_add_is_rejected(self, client, db, customer):
        product = make_product(db)
        resp = client.post(
            "/cart/items", json={"product_id": product.id, "quantity": 0}, headers=_headers(customer)
        )
        assert resp.status_code == 422

    def test_clear(self, client, db, customer):
        product = make_product(db)
        client.post("/cart/items", json={"product_id": product.id}, headers=_headers(customer))

        resp = client.delete("/cart", headers=_headers(customer))

        assert resp.status_code == 200
        assert resp.json()["item_count"] == 0
