"""Integration tests for Order and admin API endpoints via TestClient."""

from datetime import UTC, datetime

import pytest
from protean import current_domain
from storefront.order.order import Order


@pytest.fixture()
def place_order(client, user_headers, create_product, shipping_address):
    def _place(quantity=2, headers=None, **body):
        headers = headers or user_headers
        product_id = create_product()
        client.post("/cart/items", json={"product_id": product_id, "quantity": quantity}, headers=headers)
        response = client.post("/orders", json={"shipping_address": shipping_address, **body}, headers=headers)
        assert response.status_code == 201
        return response.json()["order_number"], product_id

    return _place


class TestPlaceOrder:
    def test_place_order(self, client, user_headers, place_order):
        order_number, product_id = place_order(quantity=2)

        assert order_number.startswith(datetime.now(UTC).strftime("%y%m%d"))
        assert order_number.endswith("0001")

        body = client.get(f"/orders/{order_number}", headers=user_headers).json()
        assert body["status"] == "pending"
        assert body["total"] == pytest.approx(9.98)
        assert body["billing_address"] == body["shipping_address"]
        assert body["can_cancel"] is True
        assert len(body["status_history"]) == 1

        assert client.get(f"/products/{product_id}").json()["stock"] == 8
        assert client.get("/cart", headers=user_headers).json()["items"] == []

    def test_request_context_is_recorded(self, client, user_headers, place_order):
        headers = {**user_headers, "User-Agent": "FreshCart/2.1", "X-Forwarded-For": "203.0.113.7, 10.0.0.1"}
        order_number, _ = place_order(headers=headers, is_gift=True, gift_message="Enjoy")
        body = client.get(f"/orders/{order_number}", headers=user_headers).json()
        assert body["is_gift"] is True
        assert body["gift_message"] == "Enjoy"

        order = current_domain.repository_for(Order).get(order_number)
        assert order.ip_address == "203.0.113.7"
        assert order.user_agent == "FreshCart/2.1"

    def test_empty_cart(self, client, user_headers, shipping_address):
        client.get("/cart", headers=user_headers)
        response = client.post("/orders", json={"shipping_address": shipping_address}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "EMPTY_CART"

    def test_insufficient_stock(self, client, user_headers, create_product, shipping_address):
        product_id = create_product(stock=3)
        client.post("/cart/items", json={"product_id": product_id, "quantity": 3}, headers=user_headers)
        other = {"X-User-Id": "user-002"}
        client.post("/cart/items", json={"product_id": product_id, "quantity": 2}, headers=other)
        assert client.post("/orders", json={"shipping_address": shipping_address}, headers=other).status_code == 201

        response = client.post("/orders", json={"shipping_address": shipping_address}, headers=user_headers)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INSUFFICIENT_STOCK"
        assert error["details"]["requested"] == 3
        assert error["details"]["available"] == 1
        assert client.get("/cart", headers=user_headers).json()["item_count"] == 3

    def test_missing_user_header(self, client, shipping_address):
        response = client.post("/orders", json={"shipping_address": shipping_address})
        assert response.status_code == 422


class TestCustomerOrderViews:
    def test_other_customers_order_is_not_found(self, client, place_order):
        order_number, _ = place_order()
        response = client.get(f"/orders/{order_number}", headers={"X-User-Id": "user-999"})
        assert response.status_code == 404

    def test_list_recent_and_stats(self, client, user_headers, place_order):
        place_order(quantity=1)
        place_order(quantity=3)

        listing = client.get("/orders", headers=user_headers).json()
        assert listing["pagination"]["total_orders"] == 2
        assert listing["pagination"]["has_next_page"] is False

        assert len(client.get("/orders/recent", headers=user_headers).json()["orders"]) == 2

        stats = client.get("/orders/stats", headers=user_headers).json()
        assert stats["total_orders"] == 2
        assert stats["total_spent"] == pytest.approx(4.99 * 4)
        assert stats["average_order_value"] == pytest.approx(4.99 * 2)

    def test_pagination(self, client, user_headers, place_order):
        for _ in range(3):
            place_order(quantity=1)
        page = client.get("/orders?page=2&limit=2", headers=user_headers).json()
        assert len(page["orders"]) == 1
        assert page["pagination"]["total_pages"] == 2
        assert page["pagination"]["has_prev_page"] is True

    def test_tracking_view(self, client, user_headers, place_order):
        order_number, _ = place_order()
        client.put(f"/orders/admin/{order_number}/tracking", json={"tracking_number": "1Z999", "carrier": "UPS"})

        body = client.get(f"/orders/{order_number}/tracking", headers=user_headers).json()
        assert body["status"] == "shipped"
        assert body["tracking_number"] == "1Z999"
        assert body["status_history"][-1]["note"] == "Tracking number: 1Z999"


class TestCancelOrder:
    def test_customer_cancel_restores_stock(self, client, user_headers, place_order):
        order_number, product_id = place_order(quantity=2)

        response = client.put(f"/orders/{order_number}/cancel", json={"reason": "Too slow"}, headers=user_headers)

        assert response.status_code == 200
        assert client.get(f"/orders/{order_number}", headers=user_headers).json()["status"] == "cancelled"
        assert client.get(f"/products/{product_id}").json()["stock"] == 10

    def test_cancel_after_shipping_conflicts(self, client, user_headers, place_order):
        order_number, _ = place_order()
        client.put(f"/orders/admin/{order_number}/status", json={"status": "shipped"})

        response = client.put(f"/orders/{order_number}/cancel", json={}, headers=user_headers)

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "INVALID_TRANSITION"
        assert error["details"]["current"] == "shipped"


class TestAdminOrders:
    def test_status_update(self, client, place_order, user_headers):
        order_number, _ = place_order()
        response = client.put(
            f"/orders/admin/{order_number}/status",
            json={"status": "confirmed", "note": "Checked"},
            headers={"X-User-Id": "admin-1"},
        )
        assert response.status_code == 200
        history = client.get(f"/orders/{order_number}", headers=user_headers).json()["status_history"]
        assert history[-1]["status"] == "confirmed"
        assert history[-1]["note"] == "Checked"
        assert history[-1]["updated_by"] == "admin-1"

    def test_unknown_status(self, client, place_order):
        order_number, _ = place_order()
        response = client.put(f"/orders/admin/{order_number}/status", json={"status": "lost"})
        assert response.status_code == 422

    def test_unknown_order(self, client):
        response = client.put("/orders/admin/2501010099/status", json={"status": "confirmed"})
        assert response.status_code == 404

    def test_delivery_refund_and_payment(self, client, user_headers, place_order):
        order_number, _ = place_order()
        client.put(f"/orders/admin/{order_number}/delivered")
        assert client.get(f"/orders/{order_number}", headers=user_headers).json()["can_return"] is True

        client.put(
            f"/orders/admin/{order_number}/payment",
            json={"payment_status": "completed", "transaction_id": "txn-42"},
        )
        client.post(f"/orders/admin/{order_number}/refund", json={"amount": 9.98, "reason": "Wilted"})

        body = client.get(f"/orders/{order_number}", headers=user_headers).json()
        assert body["status"] == "refunded"
        assert body["payment_status"] == "completed"
        assert body["transaction_id"] == "txn-42"
        assert body["status_history"][-1]["note"] == "Refund processed: $9.98 - Wilted"

    @pytest.mark.parametrize(
        "body",
        [{"amount": -5, "reason": "Wilted"}, {"amount": 5}, {"amount": 5, "reason": ""}],
    )
    def test_refund_needs_non_negative_amount_and_reason(self, client, user_headers, place_order, body):
        order_number, _ = place_order()
        response = client.post(f"/orders/admin/{order_number}/refund", json=body)

        assert response.status_code == 422
        assert client.get(f"/orders/{order_number}", headers=user_headers).json()["status"] == "pending"

    def test_admin_cancel(self, client, user_headers, place_order):
        order_number, _ = place_order()
        client.put(
            f"/orders/admin/{order_number}/cancel",
            json={"reason": "Fraud check"},
            headers={"X-User-Id": "admin-1"},
        )
        history = client.get(f"/orders/{order_number}", headers=user_headers).json()["status_history"]
        assert history[-1]["status"] == "cancelled"
        assert history[-1]["updated_by"] == "admin-1"

    def test_list_all_filters(self, client, place_order):
        place_order()
        place_order(headers={"X-User-Id": "user-002"})

        everything = client.get("/orders/admin/all").json()
        assert everything["pagination"]["total_orders"] == 2

        mine = client.get("/orders/admin/all?user=user-002").json()
        assert [o["customer_id"] for o in mine["orders"]] == ["user-002"]

        assert client.get("/orders/admin/all?status=shipped").json()["orders"] == []

    def test_stats(self, client, place_order):
        order_number, _ = place_order(quantity=2)
        place_order(quantity=1)
        client.put(f"/orders/admin/{order_number}/cancel", json={})

        stats = client.get("/orders/admin/stats?period=7").json()
        assert stats["period_days"] == 7
        assert stats["overview"]["total_orders"] == 2
        assert stats["overview"]["total_revenue"] == pytest.approx(4.99 * 3)
        assert stats["overview"]["by_status"]["cancelled"] == 1
        assert stats["overview"]["by_status"]["pending"] == 1
        assert stats["daily"][0]["orders"] == 2


class TestProductApi:
    def test_register_and_get(self, client, create_product):
        product_id = create_product(price=10.0, discount=10.0)
        body = client.get(f"/products/{product_id}").json()
        assert body["discounted_price"] == pytest.approx(9.0)
        assert body["status"] == "active"

    def test_restock(self, client, create_product):
        product_id = create_product(stock=1)
        client.put(f"/products/{product_id}/restock", json={"quantity": 4})
        assert client.get(f"/products/{product_id}").json()["stock"] == 5

    def test_unknown_product(self, client):
        assert client.get("/products/missing").status_code == 404
