"""Tests for the SKU configuration engine."""
from unittest.mock import MagicMock, patch

import pytest

from catalog_admin.errors import ConflictError, NotFoundError, ValidationError
from catalog_admin.extensions import db
from catalog_admin.models import ProductSku, ProductVariationConfiguration
from catalog_admin.services import sku_service, storage_service
from conftest import option_id, sku_fields

AXES = [("Color", ["Red", "Blue"]), ("Size", ["Small", "Large"])]


def _config_options(sku_id):
    return {
        row.product_variation_option_id
        for row in ProductVariationConfiguration.query.filter_by(product_sku_id=sku_id)
    }


def test_simple_product_allows_one_sku(make_product):
    product = make_product("Mug")
    sku = sku_service.create_sku_with_variation(product.id, sku_fields("MUG-1"), [])

    assert sku.id is not None
    assert sku.variation_signature == ""
    assert _config_options(sku.id) == set()


def test_simple_product_rejects_second_sku(make_product):
    product = make_product("Mug")
    sku_service.create_sku_with_variation(product.id, sku_fields("MUG-1"), [])

    with pytest.raises(ConflictError):
        sku_service.create_sku_with_variation(product.id, sku_fields("MUG-2"), [])
    assert ProductSku.query.filter_by(product_id=product.id).count() == 1


def test_simple_product_rejects_option_ids(make_product):
    simple = make_product("Mug")
    other = make_product("Tee", variations=AXES)

    with pytest.raises(ValidationError):
        sku_service.create_sku_with_variation(
            simple.id, sku_fields(), [option_id(other, "Red")]
        )


def test_variation_product_requires_options(make_product):
    product = make_product(variations=AXES)

    with pytest.raises(ValidationError, match="required"):
        sku_service.create_sku_with_variation(product.id, sku_fields(), [])


def test_two_options_on_same_axis_rejected(make_product):
    product = make_product(variations=AXES)
    ids = [option_id(product, "Red"), option_id(product, "Blue")]

    with pytest.raises(ValidationError, match="one option per variation"):
        sku_service.create_sku_with_variation(product.id, sku_fields(), ids)
    assert ProductSku.query.count() == 0


def test_option_from_other_product_rejected(make_product):
    product = make_product("Tee", variations=AXES)
    other = make_product("Hoodie", variations=[("Color", ["Red"])])

    with pytest.raises(ValidationError, match="does not belong"):
        sku_service.create_sku_with_variation(
            product.id, sku_fields(), [option_id(other, "Red")]
        )


def test_unknown_option_rejected(make_product):
    product = make_product(variations=AXES)

    with pytest.raises(ValidationError):
        sku_service.create_sku_with_variation(product.id, sku_fields(), [99999])


def test_missing_product(db):
    with pytest.raises(NotFoundError):
        sku_service.create_sku_with_variation(12345, sku_fields(), [])


def test_duplicate_configuration_conflicts(make_product):
    product = make_product(variations=AXES)
    red_large = [option_id(product, "Red"), option_id(product, "Large")]
    sku_service.create_sku_with_variation(product.id, sku_fields("A"), red_large)

    with pytest.raises(ConflictError, match="already exists"):
        sku_service.create_sku_with_variation(
            product.id, sku_fields("B"), list(reversed(red_large))
        )

    blue_large = [option_id(product, "Blue"), option_id(product, "Large")]
    sku = sku_service.create_sku_with_variation(product.id, sku_fields("B"), blue_large)
    assert _config_options(sku.id) == set(blue_large)


def test_partial_selection_is_distinct_from_full_selection(make_product):
    product = make_product(variations=AXES)
    red = option_id(product, "Red")
    large = option_id(product, "Large")
    sku_service.create_sku_with_variation(product.id, sku_fields("A"), [red, large])

    sku = sku_service.create_sku_with_variation(product.id, sku_fields("B"), [red])
    assert _config_options(sku.id) == {red}


def test_duplicate_sku_code_conflicts(make_product):
    product = make_product(variations=AXES)
    sku_service.create_sku_with_variation(
        product.id, sku_fields("SAME"), [option_id(product, "Red")]
    )

    with pytest.raises(ConflictError, match="SKU already exists"):
        sku_service.create_sku_with_variation(
            product.id, sku_fields("SAME"), [option_id(product, "Blue")]
        )


def test_sku_code_is_scoped_per_product(make_product):
    first = make_product("Mug")
    second = make_product("Cup")
    sku_service.create_sku_with_variation(first.id, sku_fields("CODE"), [])
    sku = sku_service.create_sku_with_variation(second.id, sku_fields("CODE"), [])
    assert sku.product_id == second.id


@pytest.mark.parametrize(
    "override, message",
    [
        ({"sku": "  "}, "sku is required"),
        ({"mrp": "-1"}, "mrp must be at least"),
        ({"price": "abc"}, "price must be a number"),
        ({"quantity": "-3"}, "quantity must be at least"),
        ({"single_order_limit": "0"}, "single_order_limit must be at least"),
        ({"status": "7"}, "status must be 0 or 1"),
    ],
)
def test_sku_field_validation(make_product, override, message):
    product = make_product("Mug")
    with pytest.raises(ValidationError, match=message):
        sku_service.create_sku_with_variation(product.id, sku_fields(**override), [])


def test_update_replaces_configuration(make_product):
    product = make_product(variations=AXES)
    red_large = [option_id(product, "Red"), option_id(product, "Large")]
    blue_small = [option_id(product, "Blue"), option_id(product, "Small")]
    sku = sku_service.create_sku_with_variation(product.id, sku_fields("A"), red_large)

    updated = sku_service.update_sku_with_variation(sku.id, {}, option_ids=blue_small)

    assert _config_options(updated.id) == set(blue_small)
    assert ProductVariationConfiguration.query.count() == 2
    assert updated.variation_signature == ",".join(str(i) for i in sorted(blue_small))


def test_update_keeps_selection_when_options_not_sent(make_product):
    product = make_product(variations=AXES)
    ids = [option_id(product, "Red"), option_id(product, "Large")]
    sku = sku_service.create_sku_with_variation(product.id, sku_fields("A"), ids)

    updated = sku_service.update_sku_with_variation(sku.id, {"price": "80"})

    assert float(updated.price) == 80.0
    assert _config_options(updated.id) == set(ids)


def test_update_to_own_selection_is_not_a_conflict(make_product):
    product = make_product(variations=AXES)
    ids = [option_id(product, "Red"), option_id(product, "Large")]
    sku = sku_service.create_sku_with_variation(product.id, sku_fields("A"), ids)

    updated = sku_service.update_sku_with_variation(sku.id, {"sku": "A"}, option_ids=ids)
    assert _config_options(updated.id) == set(ids)


def test_update_into_existing_configuration_conflicts(make_product):
    product = make_product(variations=AXES)
    red = [option_id(product, "Red")]
    blue = [option_id(product, "Blue")]
    sku_service.create_sku_with_variation(product.id, sku_fields("A"), red)
    other = sku_service.create_sku_with_variation(product.id, sku_fields("B"), blue)

    with pytest.raises(ConflictError):
        sku_service.update_sku_with_variation(other.id, {}, option_ids=red)
    assert _config_options(other.id) == set(blue)


def test_update_rejects_code_of_sibling(make_product):
    product = make_product(variations=AXES)
    sku_service.create_sku_with_variation(
        product.id, sku_fields("A"), [option_id(product, "Red")]
    )
    other = sku_service.create_sku_with_variation(
        product.id, sku_fields("B"), [option_id(product, "Blue")]
    )

    with pytest.raises(ConflictError):
        sku_service.update_sku_with_variation(other.id, {"sku": "A"})


def test_update_moves_sku_to_simple_product(make_product):
    source = make_product("Tee", variations=AXES)
    target = make_product("Mug")
    sku = sku_service.create_sku_with_variation(
        source.id, sku_fields("A"), [option_id(source, "Red")]
    )

    moved = sku_service.update_sku_with_variation(sku.id, {"product_id": target.id})

    assert moved.product_id == target.id
    assert _config_options(moved.id) == set()


def test_delete_sku_removes_configuration(make_product):
    product = make_product(variations=AXES)
    sku = sku_service.create_sku_with_variation(
        product.id, sku_fields("A"), [option_id(product, "Red"), option_id(product, "Small")]
    )
    sku_id = sku.id

    assert sku_service.delete_sku(sku_id) == sku_id
    assert ProductSku.query.count() == 0
    assert ProductVariationConfiguration.query.count() == 0


def test_set_is_new_bulk(make_product):
    product = make_product(variations=AXES)
    a = sku_service.create_sku_with_variation(
        product.id, sku_fields("A"), [option_id(product, "Red")]
    )
    b = sku_service.create_sku_with_variation(
        product.id, sku_fields("B"), [option_id(product, "Blue")]
    )

    sku_service.set_is_new(items=[{"id": a.id, "is_new": True}, {"id": b.id, "is_new": "false"}])
    assert sku_service.get_sku(a.id).is_new is True
    assert sku_service.get_sku(b.id).is_new is False

    sku_service.set_is_new(ids=[a.id, b.id], is_new="true")
    assert all(s.is_new for s in ProductSku.query.all())


def test_set_is_new_unknown_id(make_product):
    with pytest.raises(NotFoundError):
        sku_service.set_is_new(items='[{"id": 42, "is_new": true}]')


def test_update_accepts_retained_images_as_public_urls(app, make_product, monkeypatch):
    monkeypatch.setitem(app.config, "STORAGE_BACKEND", "s3")
    monkeypatch.setitem(app.config, "S3_PUBLIC_URL", "https://cdn.example.com")
    product = make_product("Mug")
    sku = sku_service.create_sku_with_variation(product.id, sku_fields("MUG-1"), [])
    sku.sku_images = ["skus/a.jpg", "skus/b.jpg"]
    db.session.commit()

    client = MagicMock()
    with patch.object(storage_service, "_get_client", return_value=client):
        updated = sku_service.update_sku_with_variation(
            sku.id, {}, retained_images=["https://cdn.example.com/skus/b.jpg"]
        )

    assert updated.sku_images == ["skus/b.jpg"]
    assert updated.to_dict()["sku_images"] == ["https://cdn.example.com/skus/b.jpg"]
    client.delete_objects.assert_called_once_with(
        Bucket=app.config["S3_BUCKET_NAME"], Delete={"Objects": [{"Key": "skus/a.jpg"}]}
    )
