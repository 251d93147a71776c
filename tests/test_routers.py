from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.core.exceptions import LookupFailure
from app.dependencies.auth import get_current_user
from app.dependencies.services import (
    get_category_store,
    get_history,
    get_product_store,
    get_settings_provider,
    get_web_lookup,
)
from app.models.user import UserRole
from app.schemas.scan import WebProduct
from main import app

from conftest import DAIRY_ID, FakeWebLookup, InMemorySettingsProvider, make_product


@pytest.fixture
def web():
    return FakeWebLookup(WebProduct(name="Milk 1L", price="12,50", category="Dairy", isInStock=True))


@pytest.fixture
def operator():
    return SimpleNamespace(email="op@shop.test", role=UserRole.OPERATOR, is_active=True)


@pytest.fixture
def client(product_store, categories, history, defaults, web, operator):
    provider = InMemorySettingsProvider(defaults)
    app.dependency_overrides.update({
        get_product_store: lambda: product_store,
        get_category_store: lambda: categories,
        get_settings_provider: lambda: provider,
        get_web_lookup: lambda: web,
        get_history: lambda: history,
        get_current_user: lambda: operator,
    })
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_requires_token():
    assert TestClient(app).get("/scan/123").status_code == 401


def test_scan_found(client, product_store, web):
    stored = make_product(barcode="6111245591063")
    product_store.products[stored.id] = stored

    body = client.get("/scan/6111245591063").json()

    assert body["kind"] == "found"
    assert body["product"]["id"] == str(stored.id)
    assert body["product"]["is_low_stock"] is False
    assert web.calls == []


def test_scan_web_draft(client):
    body = client.get("/scan/6111248001234").json()

    assert body["kind"] == "draft"
    assert body["source"] == "web"
    assert body["product"]["name"] == "Milk 1L"
    assert body["product"]["price"] == "15.00"
    assert body["product"]["category_id"] == str(DAIRY_ID)
    assert body["web_product"]["price"] == "12.50"


def test_scan_error_draft(client, web):
    web.error = LookupFailure("Web lookup unreachable")

    body = client.get("/scan/6111248001234").json()

    assert body["kind"] == "draft"
    assert body["source"] == "error"
    assert body["not_available"] is False
    assert body["product"]["name"] == ""
    assert body["diagnostic"]


def test_scan_blank_barcode(client):
    assert client.get("/scan/%20").status_code == 400


def test_batch(client):
    response = client.post("/scan/batch", json={"barcodes": ["1", "2"]})
    body = response.json()
    assert response.status_code == 200
    assert body["total"] == 2
    assert body["found"] == 2


def test_submit_then_history(client, product_store):
    response = client.post("/products/", json={"name": "Milk 1L", "barcode": "6111", "stock": 2, "min_stock": 5})

    assert response.status_code == 201
    saved = response.json()
    assert saved["is_low_stock"] is True
    assert saved["created_by"] == "op@shop.test"

    history = client.get("/history/").json()
    assert [e["product"]["id"] for e in history] == [saved["id"]]


def test_submit_without_name(client):
    assert client.post("/products/", json={"name": "", "barcode": "6111"}).status_code == 422


def test_adjust_stock(client, product_store):
    product = make_product(stock=2, min_stock=5)
    product_store.products[product.id] = product

    body = client.post(f"/products/{product.id}/stock", json={"action": "remove", "quantity": 5}).json()

    assert body["stock"] == 0
    assert body["is_low_stock"] is True


def test_adjust_stock_store_failure(client, product_store):
    product = make_product(stock=2)
    product_store.products[product.id] = product
    product_store.fail_writes = True

    response = client.post(f"/products/{product.id}/stock", json={"action": "add", "quantity": 1})

    assert response.status_code == 502
    assert product_store.products[product.id].stock == 2


def test_adjust_unknown_product(client):
    response = client.post(f"/products/{make_product().id}/stock", json={"action": "add", "quantity": 1})
    assert response.status_code == 404


def test_history_clear(client):
    client.post("/products/", json={"name": "Milk 1L", "barcode": "6111"})
    assert client.delete("/history/").status_code == 200
    assert client.get("/history/").json() == []


def test_categories_sorted(client):
    names = [c["name"] for c in client.get("/categories/").json()]
    assert names == sorted(names)


def test_create_category_needs_admin(client, operator):
    assert client.post("/categories/", json={"name": "Frozen"}).status_code == 403

    operator.role = UserRole.ADMIN
    response = client.post("/categories/", json={"name": "Frozen"})
    assert response.status_code == 201
    assert client.post("/categories/", json={"name": "frozen"}).status_code == 400


def test_settings_round_trip(client, operator):
    assert client.get("/settings/inventory").json()["default_selling_price"] == "15.00"

    operator.role = UserRole.ADMIN
    payload = {"default_selling_price": "19.90", "default_stock": 3}
    assert client.put("/settings/inventory", json=payload).status_code == 200
    assert client.get("/settings/inventory").json()["default_selling_price"] == "19.90"


def test_edit_with_null_price_is_rejected(client, product_store):
    product = make_product(price="12.99")
    product_store.products[product.id] = product

    response = client.put(f"/products/{product.id}", json={"price": None})

    assert response.status_code == 400
    assert product_store.products[product.id].price == "12.99"
