import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api import (
    admin_router,
    cart_router,
    maintenance_router,
    order_router,
    product_router,
    register_all_exceptions,
)


@pytest.fixture()
def client():
    app = FastAPI()
    register_all_exceptions(app)
    app.include_router(cart_router)
    app.include_router(admin_router)
    app.include_router(order_router)
    app.include_router(product_router)
    app.include_router(maintenance_router)
    return TestClient(app)


@pytest.fixture()
def user_headers():
    return {"X-User-Id": "user-001"}


@pytest.fixture()
def create_product(client):
    def _create(**overrides):
        payload = {"name": "Baby Spinach", "price": 4.99, "stock": 10, "image_url": "https://cdn.freshcart.test/s.jpg"}
        payload.update(overrides)
        response = client.post("/products", json=payload)
        assert response.status_code == 201
        return response.json()["product_id"]

    return _create
