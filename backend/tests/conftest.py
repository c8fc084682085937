import os
import tempfile
from types import SimpleNamespace

# must be set before storefront.config is imported
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.gettempdir(), "storefront_test.db")
os.environ["ADMIN_TOKEN"] = "test-admin-token"

import pytest
from fastapi.testclient import TestClient

from storefront.db import SessionLocal, init_db
from storefront.main import app
from storefront.models.product import Product


class FakeCatalog:
    """In-memory catalog recording every lookup."""

    def __init__(self):
        self.products = {}
        self.calls = []

    def add(self, product_id, name="Item", price_cents=1000, category="serif", image="/img.png"):
        self.products[product_id] = SimpleNamespace(
            id=product_id, name=name, price_cents=price_cents, category=category, image=image
        )
        return self.products[product_id]

    def remove(self, product_id):
        self.products.pop(product_id, None)

    def get_by_id(self, product_id):
        self.calls.append(product_id)
        return self.products.get(product_id)


@pytest.fixture(autouse=True, scope="session")
def setup_db():
    init_db(reset=True)
    yield


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client():
    # fresh cookie jar per test, so every test gets its own session
    return TestClient(app)


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": "test-admin-token"}


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def make_product(db):
    def _make(name="Garamond Print", price_cents=1000, category="serif", **extra):
        p = Product(name=name, price_cents=price_cents, category=category, **extra)
        db.add(p)
        db.commit()
        db.refresh(p)
        return p

    return _make


@pytest.fixture
def checkout_form():
    return {
        "name": "Ada Lovelace",
        "email": "Ada@Example.com",
        "phone": "+1 (555) 123-4567",
        "address": "12 Analytical St",
        "city": "London",
        "state": "Greater London",
        "zip": "N1 9GU",
        "country": "UK",
        "card_number": "4111 1111 1111 1111",
        "card_expiry": "09/29",
        "card_cvv": "123",
        "cardholder_name": "Ada Lovelace",
    }
