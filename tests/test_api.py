"""Tests for the HTTP API through the Flask test client."""
import io
import json

import catalog_admin.extensions as ext
from catalog_admin.extensions import db as _db
from catalog_admin.models import Product, ProductSku, ProductVariationConfiguration
from conftest import make_png, option_id


def _png_file(name="image.png"):
    return (io.BytesIO(make_png()), name, "image/png")


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["db"] == "ok"
    assert data["redis"] == "not configured"


def test_health_does_not_leak_internal_errors(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("database password leaked")

    monkeypatch.setattr(ext.db.session, "execute", boom)

    resp = client.get("/health")
    assert resp.status_code == 503
    data = resp.get_json()
    assert data["db"] == "error"
    assert "password" not in str(data).lower()


def test_writes_require_token(client):
    resp = client.post("/api/categories", json={"category_name": "Apparel"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Authorization token missing"

    resp = client.post(
        "/api/categories",
        json={"category_name": "Apparel"},
        headers={"Authorization": "Bearer garbage"},
    )
    assert resp.status_code == 401


def test_login_and_verify_token(client, admin):
    resp = client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": "secret123"}
    )
    assert resp.status_code == 200
    token = resp.get_json()["token"]

    resp = client.post("/api/auth/verify-token", headers={"Authorization": f"Bearer {token}"})
    assert resp.get_json()["user"]["email"] == "admin@example.com"

    resp = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert resp.status_code == 401


def test_otp_endpoints(client, app, admin, monkeypatch):
    sent = []
    monkeypatch.setattr(ext.task_queue, "enqueue", lambda *args: sent.append(args))

    resp = client.post("/api/auth/mail-verify", json={"email": "admin@example.com"})
    assert resp.status_code == 200
    otp = sent[0][3]

    resp = client.post(
        "/api/auth/otp-verify", json={"email": "admin@example.com", "otp": otp}
    )
    assert resp.status_code == 200
    resp = client.post(
        "/api/auth/reset-password",
        json={"email": "admin@example.com", "password": "brandnew1"},
    )
    assert resp.status_code == 200
    resp = client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": "brandnew1"}
    )
    assert resp.status_code == 200


def test_category_crud(client, auth_headers):
    resp = client.post(
        "/api/categories",
        data={"category_name": "Apparel", "is_listing": "true", "category_image": _png_file()},
        headers=auth_headers,
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    category = resp.get_json()["data"]
    assert category["category_image"].startswith("/uploads/category/")

    resp = client.get("/api/categories?search=app&limit=5")
    body = resp.get_json()
    assert body["meta"] == {"total": 1, "page": 1, "limit": 5, "pages": 1}
    assert body["data"][0]["is_listing"] is True

    resp = client.put(
        f"/api/categories/{category['id']}", json={"status": 0}, headers=auth_headers
    )
    assert resp.get_json()["data"]["status"] == 0

    resp = client.post("/api/categories", json={"category_name": "APPAREL"}, headers=auth_headers)
    assert resp.status_code == 409

    resp = client.delete(f"/api/categories/{category['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert client.get(f"/api/categories/{category['id']}").status_code == 404


def test_invalid_id_is_a_validation_error(client):
    resp = client.get("/api/products/not-a-number")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid product_id"


def test_product_and_sku_flow(client, auth_headers, category):
    resp = client.post(
        "/api/products/with-variation",
        data={
            "product_name": "Tee",
            "category_id": str(category.id),
            "variations": json.dumps(
                [
                    {"variation_name": "Color", "options": ["Red", "Blue"]},
                    {"variation_name": "Size", "options": ["S", "L"]},
                ]
            ),
            "features": json.dumps([{"option": "Fabric", "value": "Cotton"}]),
            "product_image": _png_file(),
        },
        headers=auth_headers,
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    product = resp.get_json()["data"]
    assert [v["name"] for v in product["variations"]] == ["Color", "Size"]

    stored = _db.session.get(Product, product["id"])
    red, large = option_id(stored, "Red"), option_id(stored, "L")

    resp = client.post(
        "/api/product-sku/with-variation",
        data={
            "product_id": str(product["id"]),
            "sku": "TEE-RED-L",
            "product_sku_name": "Tee Red L",
            "mrp": "500",
            "price": "450",
            "quantity": "3",
            "variation_option_id[0]": str(red),
            "variation_option_id[1]": str(large),
            "thumbnail_image": _png_file(),
            "sku_image": [_png_file("a.png"), _png_file("b.png")],
        },
        headers=auth_headers,
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    sku = resp.get_json()["data"]
    assert len(sku["sku_images"]) == 2
    assert {c["option_name"] for c in sku["variation_configuration"]} == {"Red", "L"}

    resp = client.post(
        "/api/product-sku/with-variation",
        json={
            "product_id": product["id"],
            "sku": "TEE-RED-L-2",
            "product_sku_name": "Duplicate",
            "mrp": 500,
            "price": 450,
            "quantity": 1,
            "variation_option_id": f"{large},{red}",
        },
        headers=auth_headers,
    )
    assert resp.status_code == 409
    assert resp.get_json()["message"] == "Same variation configuration already exists"

    resp = client.get(f"/api/product-sku/variations/{product['id']}")
    assert len(resp.get_json()["data"]) == 2

    resp = client.put(
        "/api/product-sku/singleEdit/is-new",
        json={"items": [{"id": sku["id"], "is_new": True}]},
        headers=auth_headers,
    )
    assert resp.get_json()["data"] == [{"id": sku["id"], "is_new": True}]

    resp = client.put(
        f"/api/product-sku/with-variation/{sku['id']}",
        json={"retained_images": [sku["sku_images"][1]]},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["sku_images"] == [sku["sku_images"][1]]

    resp = client.delete(f"/api/products/{product['id']}", headers=auth_headers)
    assert resp.get_json()["deleted_product_id"] == product["id"]
    assert ProductSku.query.count() == 0
    assert ProductVariationConfiguration.query.count() == 0


def test_similar_products_endpoint(client, auth_headers, make_product):
    from catalog_admin.services import sku_service
    from conftest import sku_fields

    base = make_product("Base")
    other = make_product("Other")
    sku_service.create_sku_with_variation(other.id, sku_fields("O-1"), [])

    resp = client.get(f"/api/products/{base.id}/similar?limit=5")
    body = resp.get_json()
    assert body["count"] == 1
    assert body["data"][0]["product_name"] == "Other"
    assert body["data"][0]["skus"][0]["sku"] == "O-1"


def test_brand_bulk_endpoints(client, auth_headers):
    ids = []
    for name in ("Acme", "Globex"):
        resp = client.post(
            "/api/brands",
            data={"brand_name": name, "brand_image": _png_file()},
            headers=auth_headers,
            content_type="multipart/form-data",
        )
        assert resp.status_code == 201
        ids.append(resp.get_json()["data"]["id"])

    resp = client.post(
        "/api/brands/bulk-status", json={"ids": ids, "status": 0}, headers=auth_headers
    )
    assert resp.get_json()["updated"] == 2
    assert client.get("/api/brands?status=0").get_json()["meta"]["total"] == 2

    resp = client.post("/api/brands/delete-multiple", json={"ids": ids}, headers=auth_headers)
    assert resp.get_json()["deleted_ids"] == ids
    assert client.get("/api/brands").get_json()["meta"]["total"] == 0


def test_brand_requires_image(client, auth_headers):
    resp = client.post("/api/brands", json={"brand_name": "Acme"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "brand_image is required"


def test_banner_blog_carousel(client, auth_headers, category):
    resp = client.post(
        "/api/banners",
        data={
            "banner_title": "Sale",
            "connected_category_id": str(category.id),
            "banner_image": _png_file(),
        },
        headers=auth_headers,
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    assert resp.get_json()["data"]["connected_category"]["category_name"] == "Apparel"

    resp = client.post(
        "/api/banners",
        data={"banner_title": "Sale", "connected_category_id": "999", "banner_image": _png_file()},
        headers=auth_headers,
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400

    resp = client.post(
        "/api/blogs",
        data={
            "blog_title": "Launch",
            "date": "2026-01-15",
            "blog_thumbnail": _png_file(),
            "other_images": [_png_file("1.png")],
        },
        headers=auth_headers,
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    blog = resp.get_json()["data"]
    resp = client.put(
        f"/api/blogs/{blog['id']}",
        data={"place": "Pune", "other_images": [_png_file("2.png")]},
        headers=auth_headers,
        content_type="multipart/form-data",
    )
    assert len(resp.get_json()["data"]["other_images"]) == 2

    resp = client.post(
        "/api/carousel",
        data={"title": "Hero", "desktop_file": _png_file()},
        headers=auth_headers,
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    assert client.get("/api/carousel").get_json()["meta"]["total"] == 1


def test_unexpected_errors_are_generic(client, monkeypatch):
    from catalog_admin.services import category_service

    def boom(*args, **kwargs):
        raise RuntimeError("secret detail")

    monkeypatch.setattr(category_service, "list_categories", boom)

    resp = client.get("/api/categories")
    assert resp.status_code == 500
    assert resp.get_json() == {"message": "An unexpected error occurred"}


def test_internal_catalog_errors_are_generic(client, monkeypatch, caplog):
    from catalog_admin.errors import CatalogError
    from catalog_admin.services import category_service

    def boom(*args, **kwargs):
        raise CatalogError("row 17 in table categories is corrupt")

    monkeypatch.setattr(category_service, "list_categories", boom)

    resp = client.get("/api/categories")
    assert resp.status_code == 500
    assert resp.get_json() == {"message": "An unexpected error occurred"}
    assert "row 17" in caplog.text


def test_login_is_rate_limited_per_ip(client, app, admin):
    app.config["LOGIN_LIMIT_PER_IP"] = "3 per minute"
    try:
        for _ in range(3):
            resp = client.post(
                "/api/auth/login", json={"email": "admin@example.com", "password": "nope"}
            )
            assert resp.status_code == 401
        resp = client.post(
            "/api/auth/login", json={"email": "admin@example.com", "password": "secret123"}
        )
        assert resp.status_code == 429
        assert "Too many login attempts" in resp.get_json()["message"]
    finally:
        app.config["LOGIN_LIMIT_PER_IP"] = "10 per 30 minutes"


def test_otp_verify_is_rate_limited_per_ip(client, app, admin):
    app.config["OTP_VERIFY_LIMIT_PER_IP"] = "2 per minute"
    try:
        for _ in range(2):
            resp = client.post(
                "/api/auth/otp-verify", json={"email": "admin@example.com", "otp": "abcdef"}
            )
            assert resp.status_code == 400
        resp = client.post(
            "/api/auth/otp-verify", json={"email": "admin@example.com", "otp": "abcdef"}
        )
        assert resp.status_code == 429
        assert "Too many OTP attempts" in resp.get_json()["message"]
    finally:
        app.config["OTP_VERIFY_LIMIT_PER_IP"] = "10 per 15 minutes"


def test_mail_verify_is_rate_limited_per_email(client, app, admin, monkeypatch):
    monkeypatch.setattr(ext.task_queue, "enqueue", lambda *args: None)
    for _ in range(3):
        resp = client.post("/api/auth/mail-verify", json={"email": "admin@example.com"})
        assert resp.status_code == 200

    resp = client.post("/api/auth/mail-verify", json={"email": "Admin@Example.com"})
    assert resp.status_code == 429
    assert "for this email" in resp.get_json()["message"]


def test_create_category_rejects_truncated_jpeg(client, auth_headers):
    from PIL import Image as PILImage

    buffer = io.BytesIO()
    PILImage.effect_noise((64, 64), 64).convert("RGB").save(buffer, format="JPEG")
    data = buffer.getvalue()

    resp = client.post(
        "/api/categories",
        data={
            "category_name": "Apparel",
            "category_image": (io.BytesIO(data[: len(data) // 2]), "a.jpg", "image/jpeg"),
        },
        headers=auth_headers,
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid image file"
