"""Testy end-to-end przez TestClient, baza sqlite z conftest."""

from decimal import Decimal
from unittest.mock import patch


def _user(client, user_id, username, role="CUSTOMER"):
    r = client.post(
        "/users",
        json={"id": user_id, "username": username, "email": f"{username}@example.com", "role": role},
    )
    assert r.status_code == 200, r.text
    return r.json()


def _product(client, seller_id, name, price, stock, category="Electronics"):
    r = client.post(
        "/products",
        params={"seller_id": seller_id},
        json={"name": name, "category": category, "price": price, "stock": stock},
    )
    assert r.status_code == 201, r.text
    return r.json()


def _add(client, user_id, product_id, quantity):
    return client.post(
        "/cart/items",
        params={"user_id": user_id},
        json={"product_id": product_id, "quantity": quantity},
    )


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_users(client):
    created = _user(client, 1, "alice", "SELLER")
    assert created == {"id": 1, "username": "alice", "email": "alice@example.com", "role": "SELLER"}

    # ten sam id drugi raz zwraca istniejacego uzytkownika
    assert _user(client, 1, "alice", "SELLER") == created

    taken = client.post("/users", json={"id": 2, "username": "alice", "email": "x@example.com"})
    assert taken.status_code == 400

    assert client.get("/users/1").json()["username"] == "alice"
    assert client.get("/users/99").status_code == 404


def test_checkout_flow(client, notifier, lock_service):
    _user(client, 1, "seller", "SELLER")
    _user(client, 2, "buyer")
    a = _product(client, 1, "Product A", "1000.00", 5)
    b = _product(client, 1, "Product B", "500.00", 1)

    assert _add(client, 2, a["id"], 2).status_code == 200
    cart = _add(client, 2, b["id"], 1).json()
    assert Decimal(cart["total"]) == Decimal("2500.00")

    r = client.post("/orders", params={"user_id": 2}, json={"shipping_address": "Jl. Sudirman 1"})
    assert r.status_code == 201, r.text
    order = r.json()
    assert order["status"] == "PENDING"
    assert Decimal(order["total_amount"]) == Decimal("2500.00")
    assert {i["product_name"]: i["quantity"] for i in order["items"]} == {"Product A": 2, "Product B": 1}

    assert client.get("/cart", params={"user_id": 2}).json()["items"] == []
    assert client.get(f"/products/{a['id']}").json()["stock"] == 3
    assert client.get(f"/products/{b['id']}").json()["is_available"] is False
    lock_service.acquire_checkout_lock.assert_called_once()
    notifier.notify_order_confirmation.assert_called_once()
    notifier.notify_out_of_stock.assert_called_once_with("seller@example.com", "Product B")

    mine = client.get("/orders/my-orders", params={"user_id": 2}).json()
    assert mine["pagination"]["total"] == 1
    assert client.get(f"/orders/my-orders/{order['id']}", params={"user_id": 2}).status_code == 200
    assert client.get(f"/orders/my-orders/{order['id']}", params={"user_id": 1}).status_code == 404

    cancelled = client.delete(f"/orders/my-orders/{order['id']}", params={"user_id": 2})
    assert cancelled.json() == {"message": "Order cancelled successfully"}
    assert client.get(f"/products/{a['id']}").json()["stock"] == 5
    assert client.get(f"/products/{b['id']}").json()["is_available"] is True


def test_checkout_errors(client, lock_service):
    _user(client, 1, "seller", "SELLER")
    _user(client, 2, "buyer")
    a = _product(client, 1, "Product A", "10.00", 1)

    empty = client.post("/orders", params={"user_id": 2}, json={"shipping_address": "x"})
    assert empty.status_code == 400
    assert empty.json()["detail"] == "Cart is empty"

    too_many = _add(client, 2, a["id"], 2)
    assert too_many.status_code == 409
    assert "Only 1 available" in too_many.json()["detail"]

    assert _add(client, 2, a["id"], 0).status_code == 422
    assert _add(client, 2, 999, 1).status_code == 404

    _add(client, 2, a["id"], 1)
    lock_service.acquire_checkout_lock.return_value = False
    busy = client.post("/orders", params={"user_id": 2}, json={"shipping_address": "x"})
    assert busy.status_code == 409


def test_seller_order_flow(client, notifier):
    _user(client, 1, "seller", "SELLER")
    _user(client, 2, "buyer")
    _user(client, 3, "other", "SELLER")
    a = _product(client, 1, "Product A", "50.00", 10)
    _add(client, 2, a["id"], 4)
    order = client.post("/orders", params={"user_id": 2}, json={"shipping_address": "x"}).json()

    listing = client.get("/orders/seller", params={"seller_id": 1}).json()
    assert [o["id"] for o in listing["orders"]] == [order["id"]]
    assert client.get("/orders/seller", params={"seller_id": 3}).json()["orders"] == []

    url = f"/orders/seller/{order['id']}/status"
    assert client.patch(url, params={"seller_id": 3}, json={"status": "PROCESSING"}).status_code == 404
    assert client.patch(url, params={"seller_id": 1}, json={"status": "DELIVERED"}).status_code == 409
    assert client.patch(url, params={"seller_id": 1}, json={"status": "BOGUS"}).status_code == 422

    r = client.patch(url, params={"seller_id": 1}, json={"status": "PROCESSING"})
    assert r.json()["status"] == "PROCESSING"
    notifier.notify_order_status_changed.assert_called_once_with(
        "buyer@example.com", order["order_number"], "PENDING", "PROCESSING"
    )

    # kupujacy nie anuluje juz przetwarzanego zamowienia
    assert client.delete(f"/orders/my-orders/{order['id']}", params={"user_id": 2}).status_code == 409

    r = client.patch(url, params={"seller_id": 1}, json={"status": "CANCELLED"})
    assert r.json()["status"] == "CANCELLED"
    assert client.get(f"/products/{a['id']}").json()["stock"] == 10


def test_catalog_endpoints(client):
    _user(client, 1, "seller", "SELLER")
    _user(client, 2, "rival", "SELLER")
    laptop = _product(client, 1, "Laptop", "1500.00", 20)
    _product(client, 1, "Mouse", "25.00", 3)
    _product(client, 2, "Novel", "10.00", 7, category="Books")

    page = client.get("/products", params={"sort_by": "price_asc", "limit": 2}).json()
    assert [p["name"] for p in page["data"]] == ["Novel", "Mouse"]
    assert page["total_pages"] == 2

    assert client.get("/products/categories").json() == ["Books", "Electronics"]
    low = client.get("/products/low-stock", params={"seller_id": 1}).json()
    assert [p["name"] for p in low] == ["Mouse"]

    forbidden = client.patch(f"/products/{laptop['id']}", params={"seller_id": 2}, json={"price": "1.00"})
    assert forbidden.status_code == 403

    stock = client.patch(f"/products/{laptop['id']}/stock", params={"seller_id": 1}, json={"stock": 0})
    assert stock.json()["is_available"] is False

    assert client.delete(f"/products/{laptop['id']}", params={"seller_id": 1}).status_code == 204
    assert client.get(f"/products/{laptop['id']}").status_code == 404


def test_comments(client):
    _user(client, 1, "seller", "SELLER")
    _user(client, 2, "buyer")
    _user(client, 3, "troll")
    product = _product(client, 1, "Laptop", "1500.00", 20)

    r = client.post(f"/products/{product['id']}/comments", params={"user_id": 2}, json={"text": "Great!"})
    assert r.status_code == 201
    comment = r.json()
    assert comment["username"] == "buyer"

    assert client.post("/products/999/comments", params={"user_id": 2}, json={"text": "?"}).status_code == 404

    edit = client.patch(f"/comments/{comment['id']}", params={"user_id": 3}, json={"text": "Bad"})
    assert edit.status_code == 403
    edit = client.patch(f"/comments/{comment['id']}", params={"user_id": 2}, json={"text": "Great laptop"})
    assert edit.json()["text"] == "Great laptop"

    listed = client.get(f"/products/{product['id']}/comments").json()
    assert [c["text"] for c in listed] == ["Great laptop"]

    assert client.delete(f"/comments/{comment['id']}", params={"user_id": 2}).status_code == 204
    assert client.get(f"/products/{product['id']}/comments").json() == []


def test_dashboard_endpoints(client):
    _user(client, 1, "seller", "SELLER")
    _user(client, 2, "buyer")
    a = _product(client, 1, "Product A", "100.00", 12)
    _add(client, 2, a["id"], 3)
    client.post("/orders", params={"user_id": 2}, json={"shipping_address": "x"})

    dashboard = client.get("/dashboard/seller", params={"seller_id": 1, "period": "weekly"}).json()
    assert Decimal(dashboard["summary"]["total_revenue"]) == Decimal("300.00")
    assert dashboard["low_stock_products"][0]["stock"] == 9

    inventory = client.get("/dashboard/inventory", params={"seller_id": 1}).json()
    assert inventory["low_stock"] == 1
    assert inventory["products"][0]["status"] == "low_stock"

    with patch("app.api.routers.dashboard.weekly_sales_summary_task") as task:
        r = client.post("/email/trigger-weekly-summary", params={"user_id": 1})
        assert client.post("/email/trigger-weekly-summary", params={"user_id": 42}).status_code == 404

    assert r.status_code == 202
    task.delay.assert_called_once_with("seller")


def test_product_update_with_null_is_rejected(client):
    _user(client, 1, "seller", "SELLER")
    laptop = _product(client, 1, "Laptop", "1500.00", 20)
    url = f"/products/{laptop['id']}"

    for field in ("name", "category", "price", "is_available"):
        r = client.patch(url, params={"seller_id": 1}, json={field: None})
        assert r.status_code == 422, field

    assert client.get(url).json()["name"] == "Laptop"

    cleared = client.patch(url, params={"seller_id": 1}, json={"image_url": None, "name": "Laptop Pro"})
    assert cleared.status_code == 200
    assert cleared.json()["name"] == "Laptop Pro"
    assert cleared.json()["image_url"] is None


def test_product_created_without_stock_is_unavailable(client):
    _user(client, 1, "seller", "SELLER")

    r = client.post(
        "/products",
        params={"seller_id": 1},
        json={"name": "Box", "category": "Misc", "price": "5.00", "stock": 0, "is_available": True},
    )

    assert r.status_code == 201
    assert r.json()["stock"] == 0
    assert r.json()["is_available"] is False
