import pytest
from flask_jwt_extended import create_access_token
from werkzeug.security import generate_password_hash

from storefront import create_app
from storefront.config import TestingConfig
from storefront.extensions import db as _db
from storefront.model import Category, Product, ProductImage, User
from storefront.utils.money import D

SHIPPING = {
    "first_name": "Asha",
    "last_name": "Rao",
    "address_line1": "12 MG Road",
    "city": "Bengaluru",
    "state": "KA",
    "postal_code": "560001",
    "country": "India",
}


@pytest.fixture
def app(tmp_path):
    class _Config(TestingConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")

    app = create_app(_Config)
    with app.app_context():
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(autouse=True)
def _app_context(app):
    """Every test runs inside the application context, service-level ones included."""
    yield


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="user", email=None, password="secret123", blocked=False, name="Test User"):
        counter["n"] += 1
        u = User(
            name=name,
            email=email or f"user{counter['n']}@example.com",
            password_hash=generate_password_hash(password),
            role=role,
            blocked=blocked,
        )
        db.session.add(u)
        db.session.commit()
        return u

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(role="admin", email="admin@example.com", name="Admin")


@pytest.fixture
def make_category(db):
    def _make(name="Gadgets", slug="gadgets", **kw):
        c = Category(name=name, slug=slug, **kw)
        db.session.add(c)
        db.session.commit()
        return c

    return _make


@pytest.fixture
def make_product(db):
    counter = {"n": 0}

    def _make(price="100.00", stock=10, active=True, track_quantity=True, original_price=None, **kw):
        counter["n"] += 1
        n = counter["n"]
        kw.setdefault("name", f"Product {n}")
        kw.setdefault("slug", f"product-{n}")
        kw.setdefault("sku", f"SKU-{n}")
        p = Product(
            price=D(price),
            original_price=D(original_price) if original_price is not None else None,
            stock=stock,
            active=active,
            track_quantity=track_quantity,
            **kw,
        )
        p.images.append(ProductImage(url=f"/uploads/{kw['slug']}.jpg", is_primary=True))
        db.session.add(p)
        db.session.commit()
        return p

    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(u):
        return {"Authorization": f"Bearer {create_access_token(identity=str(u.id))}"}

    return _headers


@pytest.fixture
def shipping_address():
    return dict(SHIPPING)
