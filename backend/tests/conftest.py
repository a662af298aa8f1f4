"""
Pytest fixtures for the storefront backend.

Every test gets a fresh SQLite file database, the FastAPI app started through
its lifespan (so the storage handle is opened and disposed like in production)
and a SQLAlchemy session on the same database.
"""
import pytest
from fastapi.testclient import TestClient

from config import settings
from main import create_app
from models.brand import Brand
from models.category import Category
from models.product import Product
from models.users import User
from utils.hashing import get_password_hash


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    # Minimum bcrypt cost keeps the suite fast
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    monkeypatch.setattr(settings, "CLOUDINARY_CLOUD_NAME", None)
    return path


@pytest.fixture
def app(tmp_path, upload_dir):
    return create_app(database_url=f"sqlite:///{tmp_path / 'test.db'}")


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(client):
    session = client.app.state.db.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def category(db_session):
    category = Category(name="Bebidas", order=1)
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture
def brand(db_session, category):
    brand = Brand(name="Skol", category_id=category.id)
    db_session.add(brand)
    db_session.commit()
    return brand


@pytest.fixture
def make_product(db_session, category, brand):
    def _make(name="Cerveja Lata", price=10.00, stock_quantity=5, **kwargs):
        product = Product(
            name=name,
            description=kwargs.pop("description", ""),
            price=price,
            category_id=kwargs.pop("category_id", category.id),
            brand_id=kwargs.pop("brand_id", brand.id),
            stock_quantity=stock_quantity,
            is_available=True,
            **kwargs,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture
def admin_user(db_session):
    user = User(username="admin", password_hash=get_password_hash("secret123"), role="admin")
    db_session.add(user)
    db_session.commit()
    return user


def stock_of(db_session, product_id: int) -> int:
    """Read the committed stock value, bypassing the session identity map."""
    db_session.expire_all()
    return db_session.get(Product, product_id).stock_quantity


def order_payload(items, **overrides) -> dict:
    payload = {
        "customer_name": "Maria Silva",
        "customer_address": "Rua das Flores, 10",
        "customer_phone": "5511999990000",
        "payment_method": "pix",
        "payment_status": "pending",
        "items": items,
    }
    payload.update(overrides)
    return payload
