"""SKU configuration engine.

A product with variation axes sells SKUs that each pick at most one option
per axis; no two SKUs of a product may pick the same set of options. A
product without axes is a simple product and sells exactly one SKU with an
empty configuration.

All checks and writes of one call run inside a single transaction that
first locks the owning product row, so concurrent requests for the same
product are serialized. The (product_id, variation_signature) and
(product_id, sku) unique constraints back the checks at the database level.
"""
import logging
from collections import defaultdict

from flask import current_app

from catalog_admin.errors import ConflictError, NotFoundError, ValidationError
from catalog_admin.extensions import db
from catalog_admin.forms import (
    clean_str,
    escape_like,
    parse_bool,
    parse_decimal,
    parse_id,
    parse_int,
    parse_json_list,
    parse_status,
    required_str,
)
from catalog_admin.models.product import Product
from catalog_admin.models.sku import (
    ProductSku,
    ProductVariationConfiguration,
    variation_signature,
)
from catalog_admin.models.variation import ProductVariationOption
from catalog_admin.services import storage_service, variation_service
from catalog_admin.services.transactions import atomic

logger = logging.getLogger(__name__)

SKU_IMAGE_FOLDER = "sku"


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------

def parse_sku_fields(fields, partial=False):
    """Validate SKU scalar fields. With partial=True only sent fields are returned."""
    values = {}

    def sent(name):
        return name in fields and not (partial and fields.get(name) in (None, ""))

    if not partial or sent("sku"):
        values["sku"] = required_str(fields.get("sku"), "sku")
    if not partial or sent("product_sku_name"):
        values["product_sku_name"] = required_str(
            fields.get("product_sku_name"), "product_sku_name"
        )
    if not partial or "description" in fields:
        values["description"] = clean_str(fields.get("description"))
    if not partial or sent("mrp"):
        values["mrp"] = parse_decimal(fields.get("mrp"), "mrp")
    if not partial or sent("price"):
        values["price"] = parse_decimal(fields.get("price"), "price")
    if not partial or sent("quantity"):
        values["quantity"] = parse_int(fields.get("quantity"), "quantity", minimum=0)
    if not partial or sent("single_order_limit"):
        values["single_order_limit"] = parse_int(
            fields.get("single_order_limit"), "single_order_limit", minimum=1, default=1
        )
    if not partial or sent("is_new"):
        values["is_new"] = parse_bool(fields.get("is_new"), field="is_new")
    if not partial or sent("is_out_of_stock"):
        values["is_out_of_stock"] = parse_bool(
            fields.get("is_out_of_stock"), field="is_out_of_stock"
        )
    if not partial or sent("status"):
        values["status"] = parse_status(fields.get("status"))
    return values


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def _lock_product(product_id):
    """Load the product with a row lock held until the transaction ends."""
    product = db.session.execute(
        db.select(Product).where(Product.id == product_id).with_for_update()
    ).scalar_one_or_none()
    if product is None:
        raise NotFoundError("Product not found")
    return product


def resolve_selection(product, option_ids):
    """Gate on the product's axes and resolve each option back to the product.

    Returns the ProductVariationOption rows in submission order.
    """
    axis_count = variation_service.count_axes(product.id)
    if axis_count > 0 and not option_ids:
        raise ValidationError(
            "variation_option_id is required for a product with variations"
        )
    if axis_count == 0:
        if option_ids:
            raise ValidationError(
                "Product has no variations; variation_option_id must be empty"
            )
        return []

    found = {
        o.id: o
        for o in ProductVariationOption.query.filter(
            ProductVariationOption.id.in_(option_ids)
        ).all()
    }
    selected = []
    seen_axes = {}
    for option_id in option_ids:
        option = found.get(option_id)
        variation = option.variation if option else None
        if variation is None or variation.product_id != product.id:
            raise ValidationError(
                f"Variation option {option_id} does not belong to product {product.id}"
            )
        if variation.id in seen_axes:
            raise ValidationError(
                f"Options {seen_axes[variation.id]} and {option_id} both belong "
                f"to variation {variation.name}; pick one option per variation"
            )
        seen_axes[variation.id] = option_id
        selected.append(option)
    return selected


def check_configuration_unique(product, option_ids, exclude_sku_id=None):
    """Reject a selection that another SKU of the product already uses."""
    other_skus = ProductSku.query.filter(ProductSku.product_id == product.id)
    if exclude_sku_id is not None:
        other_skus = other_skus.filter(ProductSku.id != exclude_sku_id)

    if not option_ids:
        if db.session.query(other_skus.exists()).scalar():
            raise ConflictError(
                "A product without variations can only have one SKU"
            )
        return

    rows = db.session.query(
        ProductVariationConfiguration.product_sku_id,
        ProductVariationConfiguration.product_variation_option_id,
    ).filter(ProductVariationConfiguration.product_id == product.id)
    if exclude_sku_id is not None:
        rows = rows.filter(ProductVariationConfiguration.product_sku_id != exclude_sku_id)

    by_sku = defaultdict(set)
    for sku_id, option_id in rows.all():
        by_sku[sku_id].add(option_id)

    wanted = set(option_ids)
    for sku_id, selection in by_sku.items():
        if selection == wanted:
            logger.info(
                "Duplicate configuration %s on product %d (sku %d)",
                sorted(wanted),
                product.id,
                sku_id,
            )
            raise ConflictError("Same variation configuration already exists")


def check_sku_code(product_id, code, exclude_sku_id=None):
    query = ProductSku.query.filter(
        ProductSku.product_id == product_id, ProductSku.sku == code
    )
    if exclude_sku_id is not None:
        query = query.filter(ProductSku.id != exclude_sku_id)
    if db.session.query(query.exists()).scalar():
        raise ConflictError("SKU already exists")


def _check_image_count(count):
    limit = current_app.config.get("MAX_SKU_IMAGES", 5)
    if count > limit:
        raise ValidationError(f"At most {limit} sku images are allowed")


def _write_configuration(sku, options):
    for option in options:
        db.session.add(
            ProductVariationConfiguration(
                product_id=sku.product_id,
                product_sku_id=sku.id,
                product_variation_id=option.product_variation_id,
                product_variation_option_id=option.id,
                status=1,
            )
        )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def get_sku(sku_id):
    sku = db.session.get(ProductSku, parse_id(sku_id, "sku_id"))
    if not sku:
        raise NotFoundError("Product SKU not found")
    return sku


def create_sku_with_variation(product_id, fields, option_ids, thumbnail=None, images=()):
    """Create a SKU and its configuration rows atomically."""
    product_id = parse_id(product_id, "product_id")
    option_ids = list(option_ids or [])
    values = parse_sku_fields(fields)
    images = list(images or [])
    _check_image_count(len(images))

    with storage_service.staged_uploads() as uploads:
        with atomic():
            product = _lock_product(product_id)
            options = resolve_selection(product, option_ids)
            check_configuration_unique(product, option_ids)
            check_sku_code(product.id, values["sku"])

            sku = ProductSku(
                product_id=product.id,
                variation_signature=variation_signature(option_ids),
                **values,
            )
            if thumbnail:
                sku.thumbnail_image = uploads.add(thumbnail, SKU_IMAGE_FOLDER)
            sku.sku_images = uploads.add_many(images, SKU_IMAGE_FOLDER)
            db.session.add(sku)
            db.session.flush()
            _write_configuration(sku, options)

    logger.info(
        "Created SKU %s (id %d) for product %d with options %s",
        sku.sku,
        sku.id,
        product_id,
        option_ids,
    )
    return sku


def update_sku_with_variation(
    sku_id, fields, option_ids=None, thumbnail=None, images=(), retained_images=None
):
    """Update a SKU, replacing its configuration rows.

    `option_ids` of None keeps the current selection (only allowed while the
    SKU stays on the same product). `retained_images` lists the existing
    gallery references to keep; None keeps all of them. New uploads are
    appended after the retained ones.
    """
    values = parse_sku_fields(fields, partial=True)
    new_product_id = None
    if fields.get("product_id") not in (None, ""):
        new_product_id = parse_id(fields.get("product_id"), "product_id")
    retained = parse_json_list(retained_images, "retained_images")
    if retained is not None:
        retained = [storage_service.reference_for(r) for r in retained]
    images = list(images or [])

    with storage_service.staged_uploads() as uploads:
        with atomic():
            sku = get_sku(sku_id)
            product_id = new_product_id or sku.product_id
            product = _lock_product(product_id)

            if option_ids is None:
                if product_id != sku.product_id:
                    option_ids = []
                else:
                    option_ids = sorted(sku.option_ids)
            option_ids = list(option_ids)

            options = resolve_selection(product, option_ids)
            check_configuration_unique(product, option_ids, exclude_sku_id=sku.id)
            code = values.get("sku", sku.sku)
            if code != sku.sku or product_id != sku.product_id:
                check_sku_code(product_id, code, exclude_sku_id=sku.id)

            current_images = list(sku.sku_images or [])
            if retained is None:
                kept = current_images
            else:
                unknown = [r for r in retained if r not in current_images]
                if unknown:
                    raise ValidationError(f"Unknown retained image(s): {unknown}")
                kept = [r for r in current_images if r in retained]
            _check_image_count(len(kept) + len(images))

            for key, value in values.items():
                setattr(sku, key, value)
            sku.product_id = product_id
            sku.variation_signature = variation_signature(option_ids)

            uploads.remove_later(*[r for r in current_images if r not in kept])
            sku.sku_images = kept + uploads.add_many(images, SKU_IMAGE_FOLDER)
            if thumbnail:
                sku.thumbnail_image = uploads.replace(
                    sku.thumbnail_image, thumbnail, SKU_IMAGE_FOLDER
                )

            ProductVariationConfiguration.query.filter_by(
                product_sku_id=sku.id
            ).delete(synchronize_session=False)
            db.session.expire(sku, ["configurations"])
            db.session.flush()
            _write_configuration(sku, options)

    logger.info("Updated SKU %d with options %s", sku.id, option_ids)
    return sku


def delete_sku(sku_id):
    with storage_service.staged_uploads() as uploads:
        with atomic():
            sku = get_sku(sku_id)
            _lock_product(sku.product_id)
            uploads.remove_later(sku.thumbnail_image, *(sku.sku_images or []))
            ProductVariationConfiguration.query.filter_by(
                product_sku_id=sku.id
            ).delete(synchronize_session=False)
            db.session.expire(sku, ["configurations"])
            db.session.delete(sku)
    logger.info("Deleted SKU %d", sku.id)
    return sku.id


def list_skus(page=1, limit=10, search=None, status=None, product_id=None):
    query = ProductSku.query
    if search:
        pattern = f"%{escape_like(search)}%"
        query = query.filter(
            db.or_(
                ProductSku.product_sku_name.ilike(pattern, escape="\\"),
                ProductSku.sku.ilike(pattern, escape="\\"),
            )
        )
    if status is not None:
        query = query.filter(ProductSku.status == parse_status(status, field="status filter"))
    if product_id:
        query = query.filter(ProductSku.product_id == parse_id(product_id, "product_id"))
    return query.order_by(ProductSku.created_at.desc(), ProductSku.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )


def set_is_new(items=None, ids=None, is_new=None):
    """Bulk toggle `is_new`.

    Accepts either per-SKU entries `[{"id": .., "is_new": ..}, ...]` or a
    list of `ids` that all get the same `is_new` value.
    """
    entries = parse_json_list(items, "items")
    if entries is None and ids:
        if is_new in (None, ""):
            raise ValidationError("is_new is required")
        entries = [{"id": i, "is_new": is_new} for i in ids]
    if not entries:
        raise ValidationError("items must be a non-empty list")
    updates = {}
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValidationError("Each item must be an object with id and is_new")
        if "is_new" not in entry:
            raise ValidationError("is_new is required for every item")
        updates[parse_id(entry.get("id"), "id")] = parse_bool(
            entry.get("is_new"), field="is_new"
        )

    with atomic():
        skus = ProductSku.query.filter(ProductSku.id.in_(list(updates))).all()
        missing = set(updates) - {s.id for s in skus}
        if missing:
            raise NotFoundError(f"Product SKU not found: {sorted(missing)}")
        for sku in skus:
            sku.is_new = updates[sku.id]
    return skus
