from decimal import Decimal

import pytest

from app.repos.user_repo import UserRepo
from app.utils.settings import CATALOG_PAGE_LIMIT, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from conftest import ADDRESS, checkout_data


def auth(user_id):
    return {"X-User-Id": str(user_id)}


@pytest.fixture
def users(client):
    ids = {}
    for name in ("seller", "buyer", "other"):
        resp = client.post("/users/", json={"username": name, "email": f"{name}@example.com"})
        assert resp.status_code == 201
        ids[name] = resp.json()["id"]
    return ids


def list_product(client, seller_id, title, price, category="Other"):
    resp = client.post(
        "/products/",
        json={"title": title, "description": f"{title} for sale", "category": category, "price": price},
        headers=auth(seller_id),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_requests_without_identity_are_rejected(client, users):
    assert client.get("/cart/").status_code == 401
    assert client.get("/cart/", headers=auth(999)).status_code == 401


def test_duplicate_username_is_invalid_input(client, users):
    resp = client.post("/users/", json={"username": "buyer", "email": "x@example.com"})
    assert resp.status_code == 400


def test_username_taken_between_check_and_insert_is_invalid_input(client, users, monkeypatch):
    # rownolegla rejestracja: sprawdzenie nic nie widzi, insert trafia w unique
    monkeypatch.setattr(UserRepo, "get_by_username", lambda self, username: None)

    resp = client.post("/users/", json={"username": "buyer", "email": "late@example.com"})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Username already taken"}

    # sesja po rollbacku nadal dziala
    resp = client.post("/users/", json={"username": "newcomer", "email": "new@example.com"})
    assert resp.status_code == 201


def test_page_limit_defaults_come_from_settings(client):
    paths = client.get("/openapi.json").json()["paths"]

    def limit_param(path):
        params = paths[path]["get"]["parameters"]
        return next(p["schema"] for p in params if p["name"] == "limit")

    for path in ("/orders/", "/purchases/history", "/purchases/sales"):
        assert limit_param(path)["default"] == DEFAULT_PAGE_LIMIT
        assert limit_param(path)["maximum"] == MAX_PAGE_LIMIT
    for path in ("/products/", "/products/user/{user_id}"):
        assert limit_param(path)["default"] == CATALOG_PAGE_LIMIT
        assert limit_param(path)["maximum"] == MAX_PAGE_LIMIT


def test_cart_to_order_end_to_end(client, users):
    a = list_product(client, users["seller"], "Lamp", "10.00")
    b = list_product(client, users["seller"], "Chair", "5.00")

    client.post("/cart/add", json={"product_id": a, "quantity": 2}, headers=auth(users["buyer"]))
    cart = client.post("/cart/add", json={"product_id": b}, headers=auth(users["buyer"])).json()
    assert Decimal(cart["total_price"]) == Decimal("25.00")
    assert cart["total_items"] == 3

    resp = client.post("/orders/checkout", json=checkout_data(), headers=auth(users["buyer"]))
    assert resp.status_code == 201, resp.text
    order = resp.json()
    assert Decimal(order["total_amount"]) == Decimal("25.00")
    assert order["address"] == ADDRESS
    assert order["payment_method"] == "Cash on Delivery"

    assert client.get("/cart/", headers=auth(users["buyer"])).json()["items"] == []
    for pid in (a, b):
        assert client.get(f"/products/{pid}").json()["is_available"] is False

    listed = client.get("/orders/", headers=auth(users["buyer"])).json()
    assert [o["id"] for o in listed["orders"]] == [order["id"]]
    assert client.get(f"/orders/{order['id']}", headers=auth(users["other"])).status_code == 403


def test_add_own_product_is_forbidden(client, users):
    pid = list_product(client, users["seller"], "Bike", "100.00")

    resp = client.post("/cart/add", json={"product_id": pid}, headers=auth(users["seller"]))

    assert resp.status_code == 403
    assert client.get("/cart/", headers=auth(users["seller"])).json()["items"] == []


def test_cart_item_errors(client, users):
    pid = list_product(client, users["seller"], "Bike", "100.00")
    headers = auth(users["buyer"])

    assert client.post("/cart/add", json={"product_id": 999}, headers=headers).status_code == 404
    item_id = client.post("/cart/add", json={"product_id": pid}, headers=headers).json()["items"][0]["id"]

    assert client.put(f"/cart/update/{item_id}", json={"quantity": 0}, headers=headers).status_code == 400
    assert client.put("/cart/update/999", json={"quantity": 2}, headers=headers).status_code == 404

    updated = client.put(f"/cart/update/{item_id}", json={"quantity": 3}, headers=headers).json()
    assert updated["items"][0]["quantity"] == 3

    assert client.delete(f"/cart/remove/{item_id}", headers=headers).json()["items"] == []
    assert client.delete(f"/cart/remove/{item_id}", headers=headers).status_code == 404
    assert client.delete("/cart/clear", headers=headers).status_code == 200


def test_empty_cart_checkout_is_rejected(client, users):
    resp = client.post("/orders/checkout", json=checkout_data(), headers=auth(users["buyer"]))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cart is empty"


@pytest.mark.parametrize(
    "override",
    [
        {"address": {"street": "1 Main", "city": "Pune", "state": "MH"}},
        {"location": ""},
        {"payment_method": "Bitcoin"},
    ],
)
def test_incomplete_checkout_request_is_invalid_input(client, users, override):
    resp = client.post("/orders/checkout", json=checkout_data(**override), headers=auth(users["buyer"]))
    assert resp.status_code == 400


def test_buy_now_and_second_buyer_gets_rejected(client, users):
    pid = list_product(client, users["seller"], "Watch", "49.99")
    client.post("/cart/add", json={"product_id": pid}, headers=auth(users["other"]))

    resp = client.post(
        "/orders/checkout",
        json=checkout_data(products=[{"product_id": pid, "quantity": 1}], total_amount=49.99),
        headers=auth(users["buyer"]),
    )
    assert resp.status_code == 201
    assert Decimal(resp.json()["total_amount"]) == Decimal("49.99")

    late = client.post("/orders/checkout", json=checkout_data(), headers=auth(users["other"]))
    assert late.status_code == 400
    assert "not available" in late.json()["detail"]


def test_checkout_in_progress_is_a_conflict(client, users, lock_service):
    pid = list_product(client, users["seller"], "Watch", "49.99")
    client.post("/cart/add", json={"product_id": pid}, headers=auth(users["buyer"]))
    lock_service.held[users["buyer"]] = "busy"

    resp = client.post("/orders/checkout", json=checkout_data(), headers=auth(users["buyer"]))

    assert resp.status_code == 409


def test_purchase_checkout_and_status_flow(client, users):
    other_seller = users["other"]
    a = list_product(client, users["seller"], "Book", "12.00")
    b = list_product(client, other_seller, "Shoes", "30.00")
    headers = auth(users["buyer"])
    client.post("/cart/add", json={"product_id": a}, headers=headers)
    client.post("/cart/add", json={"product_id": b}, headers=headers)

    resp = client.post("/purchases/checkout", json=checkout_data(payment_method="UPI / Net Banking"), headers=headers)
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert len(body["purchases"]) == 2
    assert Decimal(body["total_amount"]) == Decimal("42.00")

    history = client.get("/purchases/history", headers=headers).json()
    assert history["pagination"]["total"] == 2

    sale = client.get("/purchases/sales", headers=auth(users["seller"])).json()["purchases"][0]
    assert sale["items"][0]["product_id"] == a

    status_url = f"/purchases/{sale['id']}/status"
    assert client.put(status_url, json={"status": "Confirmed"}, headers=headers).status_code == 403
    assert client.put(status_url, json={"status": "Delivered"}, headers=auth(users["seller"])).status_code == 400
    confirmed = client.put(status_url, json={"status": "Confirmed"}, headers=auth(users["seller"]))
    assert confirmed.json()["status"] == "Confirmed"
    assert client.get(f"/purchases/{sale['id']}", headers=headers).status_code == 200


def test_catalog_listing_and_owner_crud(client, users):
    seller = auth(users["seller"])
    cheap = list_product(client, users["seller"], "Cheap phone", "50.00", category="Electronics")
    list_product(client, users["seller"], "Good phone", "150.00", category="Electronics")

    listed = client.get("/products/", params={"category": "Electronics", "sort_by": "price", "sort_order": "asc"}).json()
    assert [p["title"] for p in listed["products"]] == ["Cheap phone", "Good phone"]

    assert client.put(f"/products/{cheap}", json={"price": "45.00"}, headers=auth(users["buyer"])).status_code == 403
    assert client.put(f"/products/{cheap}", json={"is_available": False}, headers=seller).json()["is_available"] is False
    assert client.get("/products/", params={"search": "phone"}).json()["pagination"]["total"] == 1
    assert client.get(f"/products/user/{users['seller']}").json()["pagination"]["total"] == 2

    assert client.delete(f"/products/{cheap}", headers=seller).status_code == 204
    assert client.get(f"/products/{cheap}").status_code == 404
    assert "Books" in client.get("/products/categories").json()
