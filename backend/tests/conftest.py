"""
Pytest configuration: in-memory Firestore and role switching for API tests.
"""
import os

os.environ.setdefault("FIREBASE_PROJECT_ID", "restaurant-test")
os.environ.setdefault("CURRENCY", "USD")

import pytest
from fastapi.testclient import TestClient

from fakes import FakeFirestore
from restaurant.config import get_db
from restaurant.core.auth import get_principal
from restaurant.main import app
from restaurant.schemas.principal import Principal


@pytest.fixture
def db() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def customer() -> Principal:
    return Principal(uid="cust-1", role="customer", email="ada@example.com", display_name="Ada")


@pytest.fixture
def staff() -> Principal:
    return Principal(uid="staff-1", role="staff", email="chef@example.com")


@pytest.fixture
def admin() -> Principal:
    return Principal(uid="admin-1", role="admin", email="owner@example.com")


class Session:
    """Switches the authenticated principal seen by the app."""

    def __init__(self):
        self.principal = None

    def login(self, principal: Principal):
        self.principal = principal

    def logout(self):
        self.principal = None


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def client(db, session):
    from fastapi import HTTPException

    def _principal():
        if session.principal is None:
            raise HTTPException(status_code=401, detail="Missing Authorization header.")
        return session.principal

    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_principal] = _principal
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def menu(db):
    """Two categories and three items; the dessert is unavailable."""
    cats = db.collection("menu_categories")
    items = db.collection("menu_items")
    cats.document("mains").set({"name": "Mains", "description": None})
    cats.document("starters").set({"name": "Starters", "description": "Small plates"})
    items.document("a").set({
        "name": "Garlic Bread", "description": "Toasted with herbs", "price": 8.99,
        "category_id": "starters", "is_available": True,
    })
    items.document("b").set({
        "name": "Ribeye Steak", "description": "Grilled, 300g", "price": 32.99,
        "category_id": "mains", "is_available": True,
    })
    items.document("c").set({
        "name": "Lava Cake", "description": "Chocolate", "price": 9.5,
        "category_id": "mains", "is_available": False,
    })
    return db
