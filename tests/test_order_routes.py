from __future__ import annotations

import pytest

from helpers.factories import seed_qr, seed_user

MENU = {
    "restaurantName": "Pizzeria",
    "orderable": True,
    "categories": [
        {
            "name": "Pizza",
            "items": [
                {
                    "name": "Margherita",
                    "price": 500,
                    "variants": [{"name": "Size", "options": [{"name": "Large", "price": 100}]}],
                }
            ],
        }
    ],
}

CUSTOMER = {"name": "Amina", "phone": "0555 00 00 00", "address": "Rue 1, Oran"}


@pytest.fixture
def shop(api_env):
    client, session_local = api_env
    owner_id = seed_user(session_local, "pizza@example.com")
    seed_qr(session_local, owner_id, "pizza00001", type="menu", menu=MENU)
    return client, session_local, owner_id


def _place(client, **overrides):
    payload = {
        "qrCodeId": "pizza00001",
        "customerInfo": CUSTOMER,
        "items": [{"itemName": "Margherita", "categoryName": "Pizza", "quantity": 3, "selectedVariants": {"Size": "Large"}}],
    }
    payload.update(overrides)
    return client.post("/api/orders", json=payload)


def test_create_order_is_public_and_prices_server_side(shop):
    client, _, owner_id = shop

    response = _place(client, totalAmount=1)

    assert response.status_code == 201
    data = response.json()
    assert data["totalAmount"] == 1800.0
    assert data["status"] == "pending"
    assert data["qrCodeId"] == "pizza00001"
    assert data["qrCodeOwnerId"] == owner_id
    assert data["orderNumber"].startswith("ORD-")


def test_create_order_reports_fields(shop):
    client, _, _ = shop

    response = client.post("/api/orders", json={"qrCodeId": "pizza00001", "items": []})

    assert response.status_code == 400
    fields = {f["field"] for f in response.json()["fields"]}
    assert {"customerInfo", "items"} <= fields


def test_card_order_via_api(shop):
    client, _, _ = shop
    response = client.post(
        "/api/orders",
        json={"type": "card_order", "customerInfo": CUSTOMER, "cardType": "business", "quantity": 100},
    )
    assert response.status_code == 201
    assert response.json()["totalAmount"] == 50.0
    assert response.json()["qrCodeId"] is None


def test_unknown_qr_code_is_404(shop):
    client, _, _ = shop
    assert _place(client, qrCodeId="missing000").status_code == 404


def test_owner_manages_orders(shop, login_as):
    client, _, owner_id = shop
    order_id = _place(client).json()["id"]
    _place(client)
    login_as(owner_id)

    listing = client.get("/api/orders", params={"limit": 1})
    assert listing.status_code == 200
    assert listing.json()["total"] == 2
    assert listing.json()["totalPages"] == 2

    confirmed = client.patch(f"/api/orders/{order_id}/status", json={"status": "confirmed"})
    assert confirmed.status_code == 200
    assert confirmed.json()["confirmedAt"] is not None

    cancelled = client.patch(f"/api/orders/{order_id}/status", json={"status": "cancelled"})
    assert cancelled.status_code == 200

    again = client.patch(f"/api/orders/{order_id}/status", json={"status": "confirmed"})
    assert again.status_code == 409
    assert again.json()["code"] == "illegal_transition"

    notes = client.patch(f"/api/orders/{order_id}/notes", json={"adminNotes": "customer called"})
    assert notes.json()["adminNotes"] == "customer called"

    stats = client.get("/api/orders/stats").json()
    assert stats["totalOrders"] == 2
    assert stats["totalRevenue"] == 0.0

    assert client.get("/api/orders", params={"status": "shipped"}).status_code == 400

    assert client.delete(f"/api/orders/{order_id}").status_code == 204
    assert client.get(f"/api/orders/{order_id}").status_code == 404


def test_foreign_orders_are_invisible(shop, login_as):
    client, session_local, _ = shop
    order_id = _place(client).json()["id"]
    login_as(seed_user(session_local, "stranger@example.com"))

    assert client.get(f"/api/orders/{order_id}").status_code == 404
    assert client.patch(f"/api/orders/{order_id}/status", json={"status": "confirmed"}).status_code == 404
    assert client.get("/api/orders").json()["total"] == 0


def test_admin_sees_card_orders(shop, login_as):
    client, session_local, owner_id = shop
    client.post("/api/orders", json={"type": "card_order", "customerInfo": CUSTOMER, "cardType": "nfc", "cardQuantity": 1})

    login_as(owner_id)
    assert client.get("/api/orders", params={"orderType": "card_order"}).json()["total"] == 0

    login_as(seed_user(session_local, "admin@example.com", role="admin"))
    assert client.get("/api/orders", params={"orderType": "card_order"}).json()["total"] == 1


def test_order_routes_need_login(shop):
    client, _, _ = shop
    assert client.get("/api/orders").status_code == 401
    assert client.get("/api/orders/stats").status_code == 401
