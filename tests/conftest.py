import pytest
from fastapi.testclient import TestClient

import main
from schemas import Category, Product, User
from seed import seed_products, seed_reviews, seed_users
from settings import Settings
from store import Store


@pytest.fixture
def settings():
    return Settings(auth_delay=0, google_auth_delay=0, payment_delay=0, review_delay=0)


@pytest.fixture
def stethoscope():
    return Product(
        id="steth",
        name="Stethoscope",
        description="Digital stethoscope with noise cancellation",
        price=300,
        category=Category.EQUIPMENT,
        rating=4.8,
        reviews=124,
        in_stock=True,
        brand="MediTech",
        features=["Digital", "Bluetooth"],
    )


@pytest.fixture
def gel():
    return Product(
        id="gel",
        name="Gel",
        description="Topical analgesic for muscle pain",
        price=13,
        category=Category.PHARMACEUTICALS,
        rating=4.3,
        reviews=150,
        in_stock=True,
        brand="Khemixall Pharma",
        features=["Fast-Acting", "Topical"],
    )


@pytest.fixture
def customer():
    return User(id="u42", name="Jordan Lee", email="jordan@khemixall.com")


@pytest.fixture
def store(settings):
    return Store(settings, products=seed_products(), users=seed_users(), reviews=seed_reviews())


@pytest.fixture
def client(store, monkeypatch):
    monkeypatch.setattr(main.app.state, "store", store)
    with TestClient(main.app) as c:
        yield c


@pytest.fixture
def session_headers(client):
    session_id = client.post("/session").json()["session_id"]
    return {"X-Session-Id": session_id}
