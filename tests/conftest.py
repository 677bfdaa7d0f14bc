import os

os.environ.setdefault("STOREFRONT_LOG_FILE", "")
os.environ.setdefault("STOREFRONT_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient

from storefront_service.auth import AccessGate
from storefront_service.catalog import CatalogService
from storefront_service.main import create_app
from storefront_service.models import CreateProductCommand
from storefront_service.storage import MemStorage
from storefront_service.workflow import OrderService


@pytest.fixture
def storage():
    return MemStorage()


@pytest.fixture
def catalog(storage):
    return CatalogService(storage)


@pytest.fixture
def orders(storage):
    return OrderService(storage, stock_policy="allow_negative", status_policy="permissive")


@pytest.fixture
def gate(storage):
    return AccessGate(storage, secret_key="test-secret")


def _product_command(**overrides):
    fields = dict(
        name="Memory Cards",
        description="Matching game",
        price="18500",
        imageUrl="https://img.example.com/cards.jpg",
        type="physical",
        ageRange="3-8",
        category="Cognitive",
        stock=10,
    )
    fields.update(overrides)
    return CreateProductCommand(**fields)


def _order_payload(items, **overrides):
    payload = dict(
        customerName="Ana Pérez",
        customerEmail="ana@mail.com",
        customerPhone="+56 9 1234 5678",
        shippingAddress="Av. Siempre Viva 742",
        total="0",
        items=items,
    )
    payload.update(overrides)
    return payload


@pytest.fixture
def product_command():
    return _product_command


@pytest.fixture
def order_payload():
    return _order_payload


@pytest.fixture
def physical(catalog):
    return catalog.create(_product_command())


@pytest.fixture
def digital(catalog):
    return catalog.create(_product_command(name="Math App", type="digital", price="9800", stock=None))


@pytest.fixture
def app():
    return create_app(storage=MemStorage(), seed=True)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_headers(client):
    response = client.post("/api/auth/login", json={"email": "admin@test.com", "password": "admin123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
