"""Router tests for checkout, /orders and /payments."""

from decimal import Decimal

from tests.fakes import make_product

ADDRESS = {
    "full_name": "Ana Haddad",
    "phone": "+961 1 000000",
    "address_line_1": "Rue 1",
    "city": "Beirut",
    "region": "Beirut",
}


def _headers(actor):
    return {"X-User-Id": actor.user_id, "X-User-Role": actor.role.value}


def _checkout(client, db, customer):
    table = make_product(db, base_price="100.00")
    lamp = make_product(db, base_price="50.00")
    h = _headers(customer)
    address = client.post("/users/me/addresses", json=ADDRESS, headers=h).json()
    client.post("/cart/items", json={"product_id": table.id, "quantity": 2}, headers=h)
    client.post("/cart/items", json={"product_id": lamp.id, "quantity": 1}, headers=h)
    return client.post("/orders", json={"shipping_address_id": address["id"]}, headers=h)


class TestCheckoutApi:

    def test_checkout(self, client, db, customer):
        resp = _checkout(client, db, customer)

        assert resp.status_code == 201
        order = resp.json()
        assert order["status"] == "PENDING_PAYMENT"
        assert order["order_number"].startswith("ORD-")
        assert Decimal(order["subtotal"]) == Decimal("250.00")
        assert Decimal(order["shipping_cost"]) == Decimal("25.00")
        assert Decimal(order["total"]) == Decimal("275.00")
        assert client.get("/cart", headers=_headers(customer)).json()["items"] == []

    def test_empty_cart_is_400(self, client, customer):
        h = _headers(customer)
        address = client.post("/users/me/addresses", json=ADDRESS, headers=h).json()
        resp = client.post("/orders", json={"shipping_address_id": address["id"]}, headers=h)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Cart is empty"


class TestStatusApi:

    def test_workflow(self, client, db, customer, admin):
        order_id = _checkout(client, db, customer).json()["id"]

        forbidden = client.patch(
            f"/orders/{order_id}/status", json={"status": "CONFIRMED"}, headers=_headers(customer)
        )
        assert forbidden.status_code == 403

        for status in ("CONFIRMED", "IN_PRODUCTION", "READY_FOR_SHIPPING", "SHIPPED", "DELIVERED"):
            resp = client.patch(f"/orders/{order_id}/status", json={"status": status}, headers=_headers(admin))
            assert resp.status_code == 200, resp.text

        resp = client.patch(f"/orders/{order_id}/status", json={"status": "CONFIRMED"}, headers=_headers(admin))
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Cannot transition from DELIVERED to CONFIRMED"

    def test_cancel(self, client, db, customer):
        order_id = _checkout(client, db, customer).json()["id"]

        resp = client.post(f"/orders/{order_id}/cancel", headers=_headers(customer))

        assert resp.status_code == 200
        assert resp.json()["status"] == "CANCELLED"
        assert resp.json()["status_history"][-1]["note"] == "Cancelled by customer"

    def test_listing(self, client, db, customer, admin):
        _checkout(client, db, customer)

        mine = client.get("/orders", headers=_headers(customer)).json()
        assert mine["total"] == 1
        assert client.get("/orders/admin/all", headers=_headers(customer)).status_code == 403
        assert client.get("/orders/admin/all", headers=_headers(admin)).json()["total"] == 1

    def test_missing_order_is_404(self, client, admin):
        assert client.get("/orders/missing", headers=_headers(admin)).status_code == 404


class TestPaymentsApi:

    def test_record_and_complete(self, client, db, customer, admin):
        order_id = _checkout(client, db, customer).json()["id"]

        schedule = client.get(f"/payments/orders/{order_id}/schedule", headers=_headers(customer)).json()
        assert [Decimal(a) for a in schedule["installments"]] == [Decimal("275.00")]

        resp = client.post(
            f"/payments/orders/{order_id}",
            json={"amount": "275.00", "method": "BANK_TRANSFER"},
            headers=_headers(admin),
        )
        assert resp.status_code == 201
        payment_id = resp.json()["id"]

        resp = client.patch(f"/payments/{payment_id}/status", json={"status": "COMPLETED"}, headers=_headers(admin))
        assert resp.json()["status"] == "COMPLETED"
        assert resp.json()["processed_at"] is not None
