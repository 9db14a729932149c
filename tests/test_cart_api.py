import uuid
from decimal import Decimal
from types import SimpleNamespace

from app.models.user import User

API = "/api/v1"


def test_cart_requires_token(client):
    assert client.get(f"{API}/cart").status_code == 401


def test_sellers_cannot_use_cart(client, make_user, auth_headers):
    seller = make_user(role="seller")

    resp = client.get(f"{API}/cart", headers=auth_headers(seller))

    assert resp.status_code == 403


def test_first_request_provisions_customer_profile(client, session, auth_headers):
    stranger = SimpleNamespace(id=uuid.uuid4(), email="mita@gamchha.in")

    resp = client.get(f"{API}/users/me", headers=auth_headers(stranger))

    assert resp.status_code == 200
    assert resp.json()["role"] == "customer"
    assert resp.json()["name"] == "mita"
    assert session.get(User, stranger.id) is not None


def test_add_update_remove_cart_lines(client, make_user, make_product, auth_headers):
    customer = make_user()
    seller = make_user(role="seller")
    product = make_product(seller, price="150")
    headers = auth_headers(customer)

    client.post(f"{API}/cart", json={"product_id": str(product.id)}, headers=headers)
    resp = client.post(f"{API}/cart", json={"product_id": str(product.id)}, headers=headers)
    body = resp.json()

    assert resp.status_code == 200
    assert len(body["items"]) == 1
    assert body["items"][0]["quantity"] == 2
    assert body["items"][0]["seller_id"] == str(seller.id)
    assert Decimal(body["total_price"]) == Decimal("300")

    resp = client.patch(f"{API}/cart/{product.id}", json={"quantity": 5}, headers=headers)
    assert resp.json()["total_quantity"] == 5

    resp = client.patch(f"{API}/cart/{product.id}", json={"quantity": 0}, headers=headers)
    assert resp.json()["items"] == []


def test_cart_is_persisted_between_requests(client, make_user, make_product, auth_headers):
    customer = make_user()
    product = make_product(None, price="80")
    headers = auth_headers(customer)

    client.post(f"{API}/cart", json={"product_id": str(product.id)}, headers=headers)
    resp = client.get(f"{API}/cart", headers=headers)

    assert [it["id"] for it in resp.json()["items"]] == [str(product.id)]


def test_unknown_and_inactive_products_are_rejected(client, make_user, make_product, auth_headers):
    customer = make_user()
    inactive = make_product(None, is_active=False)
    headers = auth_headers(customer)

    missing = client.post(f"{API}/cart", json={"product_id": str(uuid.uuid4())}, headers=headers)
    hidden = client.post(f"{API}/cart", json={"product_id": str(inactive.id)}, headers=headers)

    assert missing.status_code == 404
    assert hidden.status_code == 400


def test_clear_cart_keeps_wishlist(client, make_user, make_product, auth_headers):
    customer = make_user()
    product = make_product(None)
    headers = auth_headers(customer)

    client.post(f"{API}/cart", json={"product_id": str(product.id)}, headers=headers)
    client.post(f"{API}/wishlist/{product.id}", headers=headers)
    client.post(f"{API}/wishlist/{product.id}", headers=headers)

    cleared = client.delete(f"{API}/cart", headers=headers).json()
    wishlist = client.get(f"{API}/wishlist", headers=headers).json()

    assert cleared["items"] == []
    assert [it["id"] for it in wishlist] == [str(product.id)]

    resp = client.delete(f"{API}/wishlist/{product.id}", headers=headers)
    assert resp.json() == []
