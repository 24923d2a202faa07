import pytest
from fastapi.testclient import TestClient

from dependencies import get_cart_repository, get_product_repository
from main import app
from schemas import Product
from tests.fakes import FakeCartRepository, FakeProductRepository

SHIRT_ID = "65a000000000000000000001"
BOOTS_ID = "65a000000000000000000002"
MUG_ID = "65a000000000000000000003"


def make_product(id, title, price, category="Clothing", status=True, **extra):
    fields = {
        "description": f"{title} description",
        "code": f"CODE-{id[-4:]}",
        "stock": 10,
        "thumbnails": [],
    }
    fields.update(extra)
    return Product(id=id, title=title, price=price, category=category, status=status, **fields)


@pytest.fixture
def products():
    return [
        make_product(SHIRT_ID, "Cotton Tee", 20.0, description="Plain Shirt in white", thumbnails=["/img/tee.jpg", "/img/tee-back.jpg"]),
        make_product(BOOTS_ID, "Leather Boots", 120.0, category="Footwear", status=False),
        make_product(MUG_ID, "Ceramic Mug", 12.5, category="Home"),
    ]


@pytest.fixture
def product_repo(products):
    return FakeProductRepository(products)


@pytest.fixture
def cart_repo():
    return FakeCartRepository()


@pytest.fixture
def test_client(product_repo, cart_repo):
    app.dependency_overrides[get_product_repository] = lambda: product_repo
    app.dependency_overrides[get_cart_repository] = lambda: cart_repo
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
