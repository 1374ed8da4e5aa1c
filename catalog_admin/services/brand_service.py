import logging

from catalog_admin.errors import ConflictError, NotFoundError, ValidationError
from catalog_admin.extensions import db
from catalog_admin.forms import (
    escape_like,
    parse_bool,
    parse_id,
    parse_status,
    required_str,
)
from catalog_admin.models.brand import Brand
from catalog_admin.models.product import Product
from catalog_admin.services import storage_service
from catalog_admin.services.transactions import atomic

logger = logging.getLogger(__name__)


def get_brand(brand_id):
    brand = db.session.get(Brand, parse_id(brand_id, "brand_id"))
    if not brand:
        raise NotFoundError("Brand not found")
    return brand


def create_brand(fields, image=None):
    if not image:
        raise ValidationError("brand_image is required")
    name = required_str(fields.get("brand_name"), "brand_name")
    is_popular = parse_bool(fields.get("is_popular"), field="is_popular")
    status = parse_status(fields.get("status"))

    with storage_service.staged_uploads() as uploads:
        with atomic():
            brand = Brand(brand_name=name, is_popular=is_popular, status=status)
            brand.brand_image = uploads.add(image, "brands")
            db.session.add(brand)
    logger.info("Created brand %d (%s)", brand.id, name)
    return brand


def list_brands(page=1, limit=10, search=None, status=None, is_popular=None):
    query = Brand.query
    if search:
        query = query.filter(
            Brand.brand_name.ilike(f"%{escape_like(search)}%", escape="\\")
        )
    if status is not None:
        query = query.filter(Brand.status == parse_status(status, field="status filter"))
    if is_popular is not None:
        query = query.filter(Brand.is_popular.is_(parse_bool(is_popular)))
    return query.order_by(Brand.created_at.desc(), Brand.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )


def update_brand(brand_id, fields, image=None):
    with storage_service.staged_uploads() as uploads:
        with atomic():
            brand = get_brand(brand_id)
            if "brand_name" in fields:
                brand.brand_name = required_str(fields.get("brand_name"), "brand_name")
            if "is_popular" in fields:
                brand.is_popular = parse_bool(fields.get("is_popular"), field="is_popular")
            if fields.get("status") not in (None, ""):
                brand.status = parse_status(fields.get("status"))
            if image:
                brand.brand_image = uploads.replace(brand.brand_image, image, "brands")
    return brand


def _ensure_unused(brand_ids):
    in_use = (
        db.session.query(Product.brand_id)
        .filter(Product.brand_id.in_(brand_ids))
        .distinct()
        .all()
    )
    if in_use:
        ids = ", ".join(str(row[0]) for row in in_use)
        raise ConflictError(f"Brand(s) {ids} still referenced by products")


def delete_brand(brand_id):
    with storage_service.staged_uploads() as uploads:
        with atomic():
            brand = get_brand(brand_id)
            _ensure_unused([brand.id])
            uploads.remove_later(brand.brand_image)
            db.session.delete(brand)
    return brand.id


def delete_brands(brand_ids):
    """Delete several brands at once; all must exist and be unused."""
    ids = [parse_id(i, "brand_id") for i in brand_ids or []]
    if not ids:
        raise ValidationError("ids must be a non-empty list")
    with storage_service.staged_uploads() as uploads:
        with atomic():
            brands = Brand.query.filter(Brand.id.in_(ids)).all()
            missing = set(ids) - {b.id for b in brands}
            if missing:
                raise NotFoundError(f"Brand not found: {sorted(missing)}")
            _ensure_unused(ids)
            for brand in brands:
                uploads.remove_later(brand.brand_image)
                db.session.delete(brand)
    return ids


def bulk_update_status(brand_ids, status):
    ids = [parse_id(i, "brand_id") for i in brand_ids or []]
    if not ids:
        raise ValidationError("ids must be a non-empty list")
    if status in (None, ""):
        raise ValidationError("status is required")
    status = parse_status(status)
    with atomic():
        updated = Brand.query.filter(Brand.id.in_(ids)).update(
            {Brand.status: status}, synchronize_session=False
        )
    return updated
