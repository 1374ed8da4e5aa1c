import io

import pytest
from PIL import Image as PILImage

from catalog_admin import create_app
from catalog_admin.extensions import MemoryExpiringStore, db as _db, limiter
from catalog_admin.models import Category, ProductVariationOption
from catalog_admin.services import auth_service, product_service
from catalog_admin.services.image_service import UploadedImage


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app("testing")
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def db(app, tmp_path):
    """Fresh schema, upload folder and OTP store per test.

    Services commit, so a savepoint rollback cannot isolate tests.
    """
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")
    app.config["CATEGORY_LINKAGE"] = "single"
    app.extensions["otp_store"] = MemoryExpiringStore()
    limiter.reset()
    _db.create_all()
    yield _db
    _db.session.remove()
    _db.drop_all()


@pytest.fixture
def admin(db):
    user, _ = auth_service.register("Admin", "admin@example.com", "secret123")
    return user


@pytest.fixture
def auth_headers(admin):
    return {"Authorization": f"Bearer {auth_service.issue_token(admin)}"}


def make_png(color="red", size=(8, 8)):
    buffer = io.BytesIO()
    PILImage.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def image():
    return UploadedImage(data=make_png(), content_type="image/png", filename="a.png")


@pytest.fixture
def category(db):
    cat = Category(category_name="Apparel", status=1)
    db.session.add(cat)
    db.session.commit()
    return cat


@pytest.fixture
def make_product(category):
    """Factory: product with the given axes, e.g. [("Color", ["Red", "Blue"])]."""

    def _make(name="Tee", variations=None, **fields):
        data = {"product_name": name, "category_id": category.id, **fields}
        if variations is not None:
            data["variations"] = [
                {"variation_name": axis, "options": options}
                for axis, options in variations
            ]
        return product_service.create_product(data)

    return _make


def option_id(product, name):
    """Id of the option called `name` on `product`."""
    return (
        ProductVariationOption.query.filter_by(product_id=product.id, name=name)
        .one()
        .id
    )


def sku_fields(code="SKU-1", **overrides):
    fields = {
        "sku": code,
        "product_sku_name": f"Item {code}",
        "mrp": "100",
        "price": "90",
        "quantity": "5",
    }
    fields.update(overrides)
    return fields
