import json
from datetime import datetime, timedelta, timezone
from typing import List

import httpx
import pytest
from fastapi.testclient import TestClient

from technova.core.errors import TransientIOError
from technova.core.http_client import CatalogClient
from technova.core.security import get_current_user, get_optional_user
from technova.dependencies import get_catalog, get_event_store
from technova.main import app
from technova.models import InteractionEvent, UserInDB
from technova.services.store import EventStore, InMemoryEventStore

NOW = datetime(2024, 5, 20, 15, 30, tzinfo=timezone.utc)

PRODUCTS = [
    {"id": 1, "title": "Backpack", "price": 109.95, "category": "men's clothing",
     "image": "https://img/1.jpg", "rating": {"rate": 3.9, "count": 120}},
    {"id": 2, "title": "Slim Fit T-Shirt", "price": 22.3, "category": "men's clothing",
     "image": "https://img/2.jpg", "rating": {"rate": 4.1, "count": 259}},
    {"id": 3, "title": "Cotton Jacket", "price": 55.99, "category": "men's clothing",
     "image": "https://img/3.jpg", "rating": {"rate": 4.7, "count": 500}},
    {"id": 5, "title": "Dragon Bracelet", "price": 695, "category": "jewelery",
     "image": "https://img/5.jpg", "rating": {"rate": 4.6, "count": 400}},
    {"id": 9, "title": "Portable Drive 2TB", "price": 64, "category": "electronics",
     "image": "https://img/9.jpg", "rating": {"rate": 3.3, "count": 203}},
    {"id": 10, "title": "SSD 1TB", "price": 109, "category": "electronics",
     "image": "https://img/10.jpg", "rating": {"rate": 2.9, "count": 470}},
    {"id": 11, "title": "SSD 256GB", "price": 109, "category": "electronics",
     "image": "https://img/11.jpg", "rating": {"rate": 4.8, "count": 319}},
]


def catalog_transport(products: List[dict]) -> httpx.MockTransport:
    by_id = {str(p["id"]): p for p in products}

    def handler(request: httpx.Request) -> httpx.Response:
        parts = [p for p in request.url.path.split("/") if p]
        if parts == ["products"]:
            return httpx.Response(200, json=products)
        if parts == ["products", "categories"]:
            return httpx.Response(200, json=sorted({p["category"] for p in products}))
        if len(parts) == 3 and parts[:2] == ["products", "category"]:
            return httpx.Response(200, json=[p for p in products if p["category"] == parts[2]])
        if len(parts) == 2 and parts[0] == "products":
            if parts[1] in by_id:
                return httpx.Response(200, content=json.dumps(by_id[parts[1]]).encode())
            return httpx.Response(200, content=b"")
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def down_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


def make_catalog(products: List[dict] = PRODUCTS) -> CatalogClient:
    return CatalogClient(base_url="https://catalog.test", transport=catalog_transport(products), cache_ttl=0)


def event(user_id, product_id, interaction_type, category=None, at=NOW, **delta) -> InteractionEvent:
    return InteractionEvent(
        user_id=user_id,
        product_id=product_id,
        interaction_type=interaction_type,
        category=category,
        created_at=at - timedelta(**delta) if delta else at,
    )


class FailingEventStore(EventStore):
    async def insert_many(self, events):
        raise TransientIOError("store down")

    async def query(self, user_id=None, since=None, until=None, descending=False, limit=None):
        raise TransientIOError("store down")


@pytest.fixture
def catalog():
    return make_catalog()


@pytest.fixture
def down_catalog():
    return CatalogClient(base_url="https://catalog.test", transport=down_transport(), cache_ttl=0)


@pytest.fixture
def store():
    return InMemoryEventStore()


@pytest.fixture
def shopper():
    return UserInDB(id="u1", username="shopper", password="x")


@pytest.fixture
def admin_user():
    return UserInDB(id="a1", username="admin", password="x")


@pytest.fixture
def api(store, catalog):
    app.dependency_overrides[get_event_store] = lambda: store
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_optional_user] = lambda: None
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def login():
    def _login(user):
        app.dependency_overrides[get_optional_user] = lambda: user
        app.dependency_overrides[get_current_user] = lambda: user

    return _login
