"""Integration tests for the Storefront FastAPI endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean.utils.globals import current_domain
from storefront.api import (
    cart_router,
    favorites_router,
    install_error_handlers,
    order_router,
    product_router,
    promotion_router,
)
from storefront.catalogue.product import Product
from storefront.order.order import Order


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(product_router)
    app.include_router(promotion_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(favorites_router)
    install_error_handlers(app)
    return TestClient(app)


def _register(client, product_id="p1", inventory=None, variants=None):
    response = client.post(
        "/products",
        json={
            "id": product_id,
            "name": "Vestido Lino",
            "price": 100.0,
            "images": ["vestido.jpg"],
            "inventory": inventory if inventory is not None else {"L": 2},
            "variants": variants or [],
        },
    )
    assert response.status_code == 201
    return response.json()["product_id"]


def _item(size="p1__L", quantity=1, product_id="p1"):
    return {"productId": product_id, "name": "Vestido Lino", "price": 100.0, "size": size, "quantity": quantity}


class TestProductEndpoints:
    def test_register_and_read_stock(self, client):
        product_id = _register(client, variants=[{"id": "v1", "color": "Azul", "inventory": {"M": 4}}])
        assert product_id == "p1"

        flat = client.get("/products/p1/stock", params={"size_key": "p1__L"})
        variant = client.get("/products/p1/stock", params={"size_key": "p1__v1__M"})
        assert flat.json()["available"] == 2
        assert variant.json()["available"] == 4

    def test_reserve_and_release(self, client):
        _register(client)
        reserved = client.post("/products/p1/reservations", json={"size_key": "p1__L", "quantity": 2})
        assert reserved.status_code == 200
        assert reserved.json()["available"] == 0

        released = client.post("/products/p1/releases", json={"size_key": "p1__L", "quantity": 1})
        assert released.json()["available"] == 1

    def test_over_reservation_is_a_conflict(self, client):
        _register(client)
        response = client.post("/products/p1/reservations", json={"size_key": "p1__L", "quantity": 3})
        assert response.status_code == 409
        assert response.json()["remaining"] == 2
        assert response.json()["error"] == "InsufficientStockError"

    def test_unknown_product_is_404(self, client):
        response = client.get("/products/nope/stock", params={"size_key": "nope__L"})
        assert response.status_code == 404

    def test_release_to_unknown_variant_is_404(self, client):
        _register(client)
        response = client.post("/products/p1/releases", json={"size_key": "p1__v9__M", "quantity": 5})
        assert response.status_code == 404
        assert client.get("/products/p1/stock", params={"size_key": "p1__v9__M"}).json()["available"] == 0

    def test_malformed_key_is_422(self, client):
        _register(client)
        response = client.get("/products/p1/stock", params={"size_key": "p1L"})
        assert response.status_code == 422

    def test_restock_and_feature(self, client):
        _register(client)
        assert client.put("/products/p1/stock", json={"size_key": "p1__L", "quantity": 9}).status_code == 200
        assert current_domain.repository_for(Product).get("p1").stock_for("p1__L") == 9

        featured = client.post("/products/p1/featured")
        assert featured.json()["featured"] is True


class TestPromotionEndpoints:
    def test_apply_code(self, client):
        assert client.post("/promotions", json={"code": "summer10", "discount_percentage": 10}).status_code == 201

        response = client.post("/promotions/apply", json={"code": " Summer10 "})
        assert response.status_code == 200
        assert response.json()["code"] == "SUMMER10"
        assert response.json()["discount_percentage"] == 10.0

    def test_unknown_code(self, client):
        response = client.post("/promotions/apply", json={"code": "NOPE"})
        assert response.status_code == 422
        assert response.json()["error"] == "InvalidPromoError"

    def test_duplicate_code_is_rejected(self, client):
        client.post("/promotions", json={"code": "SUMMER10", "discount_percentage": 10})
        response = client.post("/promotions", json={"code": "summer10", "discount_percentage": 15})
        assert response.status_code == 422


class TestCartEndpoints:
    def test_save_read_and_delete(self, client):
        saved = client.put("/carts/user-1", json={"items": [_item(quantity=2)]})
        assert saved.status_code == 200
        assert saved.json()["total_item_count"] == 2

        fetched = client.get("/carts/user-1").json()
        assert [item["size"] for item in fetched["items"]] == ["p1__L"]
        assert fetched["subtotal"] == 200.0

        assert client.delete("/carts/user-1").status_code == 200
        assert client.get("/carts/user-1").json()["items"] == []

    def test_missing_cart_is_empty(self, client):
        assert client.get("/carts/nobody").json()["items"] == []


class TestOrderEndpoints:
    def test_place_order(self, client):
        _register(client)
        client.post("/products/p1/reservations", json={"size_key": "p1__L", "quantity": 2})
        client.put("/carts/user-1", json={"items": [_item(quantity=2)]})

        response = client.post(
            "/orders",
            json={
                "customer_id": "user-1",
                "items": [_item(quantity=2)],
                "shipping": {"customer_name": "Ana", "shipping_method": "domicilio", "distance_meters": 3500},
                "payment_method": "efectivo",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == "user-1__orden1"
        assert data["status"] == "Pendiente"
        assert data["confirmed"] is False
        assert data["shippingCost"] == 60.0
        assert data["totalAmount"] == 260.0
        assert client.get("/carts/user-1").json()["items"] == []

    def test_unknown_shipping_method_is_422(self, client):
        _register(client)
        client.post("/products/p1/reservations", json={"size_key": "p1__L", "quantity": 1})

        response = client.post(
            "/orders",
            json={
                "customer_id": "user-1",
                "items": [_item()],
                "shipping": {"customer_name": "Ana", "shipping_method": "dron"},
                "payment_method": "efectivo",
            },
        )

        assert response.status_code == 422
        assert current_domain.repository_for(Order)._dao.query.all().items == []

    def test_malformed_item_is_rejected_without_writes(self, client):
        _register(client)
        response = client.post(
            "/orders",
            json={"customer_id": "user-1", "items": [_item(size="p1L")], "payment_method": "efectivo"},
        )
        assert response.status_code == 422
        assert response.json()["item"] == "Vestido Lino"
        assert current_domain.repository_for(Order)._dao.query.all().items == []

    def test_short_stock_aborts(self, client):
        _register(client)
        response = client.post(
            "/orders",
            json={"customer_id": "user-1", "items": [_item(quantity=5)], "payment_method": "efectivo"},
        )
        assert response.status_code == 409
        assert response.json()["step"] == "consume stock for Vestido Lino"


class TestFavoriteEndpoints:
    def test_add_list_and_remove(self, client):
        _register(client, variants=[{"id": "v1", "color": "Azul", "inventory": {"M": 1}}])

        added = client.post("/favorites/user-1", json={"product_id": "p1", "variant_id": "v1"})
        assert added.status_code == 200
        assert added.json()["applied"] is True
        assert client.post("/favorites/user-1", json={"product_id": "p1", "variant_id": "v1"}).json()["applied"] is False

        listed = client.get("/favorites/user-1").json()
        assert [(item["productId"], item["variantId"]) for item in listed["items"]] == [("p1", "v1")]

        removed = client.delete("/favorites/user-1/p1", params={"variant_id": "v1"})
        assert removed.json() == {"applied": True, "items": []}

    def test_unknown_product_is_404(self, client):
        assert client.post("/favorites/user-1", json={"product_id": "nope"}).status_code == 404


class TestApplicationFactory:
    def test_health_and_error_mapping(self):
        from storefront.api.app import create_app

        client = TestClient(create_app(init_domain=False))
        assert client.get("/health").json() == {"status": "ok", "domain": "storefront"}
        assert client.get("/products/nope/stock", params={"size_key": "nope__L"}).status_code == 404
