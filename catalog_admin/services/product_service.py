import logging

from flask import current_app

from catalog_admin.errors import NotFoundError, ValidationError
from catalog_admin.extensions import db
from catalog_admin.forms import (
    clean_str,
    escape_like,
    parse_id,
    parse_json_list,
    parse_optional_id,
    parse_status,
    required_str,
)
from catalog_admin.models.brand import Brand
from catalog_admin.models.product import Product, product_categories
from catalog_admin.models.sku import ProductSku, ProductVariationConfiguration
from catalog_admin.models.variation import ProductVariation, ProductVariationOption
from catalog_admin.services import storage_service, variation_service
from catalog_admin.services.category_linkage import (
    apply_linkage,
    parse_linkage,
    validate_linkage,
)
from catalog_admin.services.transactions import atomic

logger = logging.getLogger(__name__)


def parse_features(raw):
    """Parse `[{option, value}, ...]`; both keys must be non-empty."""
    entries = parse_json_list(raw, "features")
    if entries is None:
        return None
    features = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValidationError("Each feature must be an object with option and value")
        option = clean_str(entry.get("option"))
        value = clean_str(entry.get("value"))
        if not option or not value:
            raise ValidationError("Each feature requires both option and value")
        features.append({"option": option, "value": value})
    return features


def parse_advantages(raw):
    entries = parse_json_list(raw, "advantages")
    if entries is None:
        return None
    advantages = []
    for entry in entries:
        if not isinstance(entry, str):
            raise ValidationError("advantages must be a list of strings")
        if entry.strip():
            advantages.append(entry.strip())
    return advantages


def _brand_id(fields):
    brand_id = parse_optional_id(fields.get("brand_id"), "brand_id")
    if brand_id is not None and not db.session.get(Brand, brand_id):
        raise NotFoundError("Brand not found")
    return brand_id


def get_product(product_id):
    product = db.session.get(Product, parse_id(product_id, "product_id"))
    if not product:
        raise NotFoundError("Product not found")
    return product


def create_product(fields, image=None):
    """Create a product, optionally with its variation axes, in one transaction."""
    name = required_str(fields.get("product_name"), "product_name")
    linkage = parse_linkage(current_app.config["CATEGORY_LINKAGE"], fields)
    status = parse_status(fields.get("status"))
    features = parse_features(fields.get("features")) or []
    advantages = parse_advantages(fields.get("advantages")) or []
    variations = variation_service.parse_variations(fields.get("variations"))

    with storage_service.staged_uploads() as uploads:
        with atomic():
            validate_linkage(linkage)
            product = Product(
                product_name=name,
                brand_id=_brand_id(fields),
                features=features,
                advantages=advantages,
                status=status,
            )
            apply_linkage(product, linkage)
            if image:
                product.product_image = uploads.add(image, "product")
            db.session.add(product)
            db.session.flush()
            variation_service.add_variations(product, variations)

    logger.info(
        "Created product %d (%s) with %d variation(s)",
        product.id,
        name,
        len(variations or []),
    )
    return product


def update_product(product_id, fields, image=None):
    """Partial update: only fields present in the request are validated and changed."""
    with storage_service.staged_uploads() as uploads:
        with atomic():
            product = get_product(product_id)

            if "product_name" in fields:
                product.product_name = required_str(
                    fields.get("product_name"), "product_name"
                )

            linkage = parse_linkage(
                current_app.config["CATEGORY_LINKAGE"], fields, current=product
            )
            if linkage is not None:
                validate_linkage(linkage)
                apply_linkage(product, linkage)

            if "brand_id" in fields:
                product.brand_id = _brand_id(fields)

            if fields.get("status") not in (None, ""):
                product.status = parse_status(fields.get("status"))

            features = parse_features(fields.get("features"))
            if features is not None:
                product.features = features
            advantages = parse_advantages(fields.get("advantages"))
            if advantages is not None:
                product.advantages = advantages

            variations = variation_service.parse_variations(fields.get("variations"))
            if variations:
                variation_service.merge_variations(product, variations)

            if image:
                product.product_image = uploads.replace(
                    product.product_image, image, "product"
                )
    return product


def delete_product(product_id):
    """Delete a product and everything it owns.

    Order: configurations, SKUs, options, variations, category links, product.
    Image files are removed once the transaction has committed.
    """
    with storage_service.staged_uploads() as uploads:
        with atomic():
            product = get_product(product_id)
            db.session.execute(
                db.select(Product).where(Product.id == product.id).with_for_update()
            )
            pid = product.id

            skus = ProductSku.query.filter_by(product_id=pid).all()
            for sku in skus:
                uploads.remove_later(sku.thumbnail_image, *(sku.sku_images or []))
            uploads.remove_later(product.product_image)

            ProductVariationConfiguration.query.filter_by(product_id=pid).delete(
                synchronize_session=False
            )
            ProductSku.query.filter_by(product_id=pid).delete(synchronize_session=False)
            ProductVariationOption.query.filter_by(product_id=pid).delete(
                synchronize_session=False
            )
            ProductVariation.query.filter_by(product_id=pid).delete(
                synchronize_session=False
            )
            db.session.execute(
                product_categories.delete().where(product_categories.c.product_id == pid)
            )
            Product.query.filter_by(id=pid).delete(synchronize_session=False)
            db.session.expunge(product)

    logger.info("Deleted product %d with %d SKU(s)", pid, len(skus))
    return {"deleted_product_id": pid}


def list_products(
    page=1, limit=10, search=None, status=None, category_id=None, brand_id=None
):
    query = Product.query
    if search:
        query = query.filter(
            Product.product_name.ilike(f"%{escape_like(search)}%", escape="\\")
        )
    if status is not None:
        query = query.filter(Product.status == parse_status(status, field="status filter"))
    if category_id:
        cid = parse_id(category_id, "category_id")
        query = query.filter(
            db.or_(
                Product.category_id == cid,
                Product.id.in_(
                    db.select(product_categories.c.product_id).where(
                        product_categories.c.category_id == cid
                    )
                ),
            )
        )
    if brand_id:
        query = query.filter(Product.brand_id == parse_id(brand_id, "brand_id"))
    return query.order_by(Product.created_at.desc(), Product.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )


def get_stats():
    """Row counts per catalog table, shown by `flask stats`."""
    return {
        "products": db.session.query(db.func.count(Product.id)).scalar(),
        "variations": db.session.query(db.func.count(ProductVariation.id)).scalar(),
        "options": db.session.query(db.func.count(ProductVariationOption.id)).scalar(),
        "skus": db.session.query(db.func.count(ProductSku.id)).scalar(),
        "configurations": db.session.query(
            db.func.count(ProductVariationConfiguration.id)
        ).scalar(),
    }
