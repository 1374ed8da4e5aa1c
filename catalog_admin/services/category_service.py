"""Category → SubCategory → InnerCategory store."""
import logging

from flask import current_app
from sqlalchemy import func, or_

from catalog_admin.errors import ConflictError, NotFoundError, ValidationError
from catalog_admin.extensions import db
from catalog_admin.forms import (
    escape_like,
    parse_bool,
    parse_id,
    parse_status,
    required_str,
)
from catalog_admin.models.category import Category, InnerCategory, SubCategory
from catalog_admin.models.product import Product, product_categories
from catalog_admin.services import storage_service
from catalog_admin.services.transactions import advisory_lock, atomic

logger = logging.getLogger(__name__)

LISTING_LOCK = "catalog:category-listing"


def _name_taken(column, name, exclude_id=None, **scope):
    query = column.class_.query.filter(func.lower(column) == name.lower())
    for key, value in scope.items():
        query = query.filter(getattr(column.class_, key) == value)
    if exclude_id is not None:
        query = query.filter(column.class_.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def _used_by_products(column, value):
    return db.session.query(Product.query.filter(column == value).exists()).scalar()


def _check_listing_limit(exclude_id=None):
    """Must run inside atomic(); holds the listing lock until commit."""
    advisory_lock(LISTING_LOCK)
    limit = current_app.config.get("MAX_LISTING_CATEGORIES", 2)
    query = Category.query.filter(Category.is_listing.is_(True))
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.count() >= limit:
        raise ValidationError(f"Only {limit} categories can be marked as listing")


def get_category(category_id):
    category = db.session.get(Category, parse_id(category_id, "category_id"))
    if not category:
        raise NotFoundError("Category not found")
    return category


def get_sub_category(sub_category_id):
    sub = db.session.get(SubCategory, parse_id(sub_category_id, "sub_category_id"))
    if not sub:
        raise NotFoundError("Sub category not found")
    return sub


def get_inner_category(inner_category_id):
    inner = db.session.get(
        InnerCategory, parse_id(inner_category_id, "inner_category_id")
    )
    if not inner:
        raise NotFoundError("Inner category not found")
    return inner


# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------

def create_category(fields, image=None):
    name = required_str(fields.get("category_name"), "category_name")
    status = parse_status(fields.get("status"))
    is_listing = parse_bool(fields.get("is_listing"), field="is_listing")

    with storage_service.staged_uploads() as uploads:
        with atomic():
            if _name_taken(Category.category_name, name):
                raise ConflictError("category_name already exists")
            if is_listing:
                _check_listing_limit()

            category = Category(
                category_name=name, status=status, is_listing=is_listing
            )
            if image:
                category.category_image = uploads.add(image, "category")
            db.session.add(category)

    logger.info("Created category %d (%s)", category.id, name)
    return category


def list_categories(page=1, limit=10, search=None, status=None, is_listing=None):
    query = Category.query
    if search:
        query = query.filter(
            Category.category_name.ilike(f"%{escape_like(search)}%", escape="\\")
        )
    if status is not None:
        query = query.filter(Category.status == parse_status(status, field="status filter"))
    if is_listing is not None:
        query = query.filter(Category.is_listing.is_(parse_bool(is_listing)))
    return query.order_by(Category.created_at.desc(), Category.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )


def update_category(category_id, fields, image=None):
    with storage_service.staged_uploads() as uploads:
        with atomic():
            category = get_category(category_id)

            if "category_name" in fields:
                name = required_str(fields.get("category_name"), "category_name")
                if _name_taken(Category.category_name, name, exclude_id=category.id):
                    raise ConflictError("category_name already exists")
                category.category_name = name

            if fields.get("status") not in (None, ""):
                category.status = parse_status(fields.get("status"))

            if "is_listing" in fields:
                is_listing = parse_bool(fields.get("is_listing"), field="is_listing")
                if is_listing:
                    _check_listing_limit(exclude_id=category.id)
                category.is_listing = is_listing

            if image:
                category.category_image = uploads.replace(
                    category.category_image, image, "category"
                )
    return category


def delete_category(category_id):
    """Delete a category that has no sub-categories and no products."""
    with storage_service.staged_uploads() as uploads:
        with atomic():
            category = get_category(category_id)
            has_children = db.session.query(
                SubCategory.query.filter_by(category_id=category.id).exists()
            ).scalar()
            in_use = db.session.query(
                Product.query.filter(
                    or_(
                        Product.category_id == category.id,
                        Product.id.in_(
                            db.select(product_categories.c.product_id).where(
                                product_categories.c.category_id == category.id
                            )
                        ),
                    )
                ).exists()
            ).scalar()
            if has_children or in_use:
                raise ConflictError(
                    "Category still has sub categories or products; remove them first"
                )
            uploads.remove_later(category.category_image)
            db.session.delete(category)
    logger.info("Deleted category %d", category.id)
    return category.id


# ---------------------------------------------------------------------------
# SubCategory
# ---------------------------------------------------------------------------

def create_sub_category(fields, image=None):
    name = required_str(fields.get("sub_category_name"), "sub_category_name")
    category_id = parse_id(fields.get("category_id"), "category_id")
    status = parse_status(fields.get("status"))

    with storage_service.staged_uploads() as uploads:
        with atomic():
            get_category(category_id)
            if _name_taken(
                SubCategory.sub_category_name, name, category_id=category_id
            ):
                raise ConflictError("Sub category already exists in this category")

            sub = SubCategory(
                sub_category_name=name, category_id=category_id, status=status
            )
            if image:
                sub.sub_category_image = uploads.add(image, "sub-category")
            db.session.add(sub)
    return sub


def list_sub_categories(page=1, limit=10, search=None, status=None, category_id=None):
    query = SubCategory.query
    if search:
        query = query.filter(
            SubCategory.sub_category_name.ilike(
                f"%{escape_like(search)}%", escape="\\"
            )
        )
    if status is not None:
        query = query.filter(SubCategory.status == parse_status(status, field="status filter"))
    if category_id:
        query = query.filter(
            SubCategory.category_id == parse_id(category_id, "category_id")
        )
    return query.order_by(
        SubCategory.created_at.desc(), SubCategory.id.desc()
    ).paginate(page=page, per_page=limit, error_out=False)


def update_sub_category(sub_category_id, fields, image=None):
    with storage_service.staged_uploads() as uploads:
        with atomic():
            sub = get_sub_category(sub_category_id)

            category_id = sub.category_id
            if fields.get("category_id") not in (None, ""):
                category_id = parse_id(fields.get("category_id"), "category_id")
                get_category(category_id)

            name = sub.sub_category_name
            if "sub_category_name" in fields:
                name = required_str(fields.get("sub_category_name"), "sub_category_name")

            if _name_taken(
                SubCategory.sub_category_name,
                name,
                exclude_id=sub.id,
                category_id=category_id,
            ):
                raise ConflictError("Sub category already exists in this category")

            if category_id != sub.category_id:
                has_inner = db.session.query(
                    InnerCategory.query.filter_by(sub_category_id=sub.id).exists()
                ).scalar()
                if has_inner:
                    raise ConflictError(
                        "Cannot move a sub category that has inner categories"
                    )
                if _used_by_products(Product.sub_category_id, sub.id):
                    raise ConflictError(
                        "Cannot move a sub category that is used by products"
                    )

            sub.sub_category_name = name
            sub.category_id = category_id
            if fields.get("status") not in (None, ""):
                sub.status = parse_status(fields.get("status"))
            if image:
                sub.sub_category_image = uploads.replace(
                    sub.sub_category_image, image, "sub-category"
                )
    return sub


def delete_sub_category(sub_category_id):
    with storage_service.staged_uploads() as uploads:
        with atomic():
            sub = get_sub_category(sub_category_id)
            has_children = db.session.query(
                InnerCategory.query.filter_by(sub_category_id=sub.id).exists()
            ).scalar()
            in_use = db.session.query(
                Product.query.filter_by(sub_category_id=sub.id).exists()
            ).scalar()
            if has_children or in_use:
                raise ConflictError(
                    "Sub category still has inner categories or products"
                )
            uploads.remove_later(sub.sub_category_image)
            db.session.delete(sub)
    return sub.id


# ---------------------------------------------------------------------------
# InnerCategory
# ---------------------------------------------------------------------------

def check_chain(category_id, sub_category_id):
    get_category(category_id)
    sub = get_sub_category(sub_category_id)
    if sub.category_id != category_id:
        raise ValidationError("Sub category does not belong to the given category")
    return sub


def create_inner_category(fields):
    name = required_str(fields.get("inner_category_name"), "inner_category_name")
    category_id = parse_id(fields.get("category_id"), "category_id")
    sub_category_id = parse_id(fields.get("sub_category_id"), "sub_category_id")
    status = parse_status(fields.get("status"))

    with atomic():
        check_chain(category_id, sub_category_id)
        if _name_taken(
            InnerCategory.inner_category_name,
            name,
            category_id=category_id,
            sub_category_id=sub_category_id,
        ):
            raise ConflictError("Inner category already exists")

        moved = (category_id, sub_category_id) != (inner.category_id, inner.sub_category_id)
        if moved and _used_by_products(Product.inner_category_id, inner.id):
            raise ConflictError("Cannot move an inner category that is used by products")

        inner = InnerCategory(
            inner_category_name=name,
            category_id=category_id,
            sub_category_id=sub_category_id,
            status=status,
        )
        db.session.add(inner)
    return inner


def list_inner_categories(
    page=1, limit=10, search=None, status=None, category_id=None, sub_category_id=None
):
    query = InnerCategory.query
    if search:
        query = query.filter(
            InnerCategory.inner_category_name.ilike(
                f"%{escape_like(search)}%", escape="\\"
            )
        )
    if status is not None:
        query = query.filter(InnerCategory.status == parse_status(status, field="status filter"))
    if category_id:
        query = query.filter(
            InnerCategory.category_id == parse_id(category_id, "category_id")
        )
    if sub_category_id:
        query = query.filter(
            InnerCategory.sub_category_id
            == parse_id(sub_category_id, "sub_category_id")
        )
    return query.order_by(
        InnerCategory.created_at.desc(), InnerCategory.id.desc()
    ).paginate(page=page, per_page=limit, error_out=False)


def update_inner_category(inner_category_id, fields):
    with atomic():
        inner = get_inner_category(inner_category_id)

        category_id = inner.category_id
        if fields.get("category_id") not in (None, ""):
            category_id = parse_id(fields.get("category_id"), "category_id")
        sub_category_id = inner.sub_category_id
        if fields.get("sub_category_id") not in (None, ""):
            sub_category_id = parse_id(fields.get("sub_category_id"), "sub_category_id")
        check_chain(category_id, sub_category_id)

        name = inner.inner_category_name
        if "inner_category_name" in fields:
            name = required_str(fields.get("inner_category_name"), "inner_category_name")

        if _name_taken(
            InnerCategory.inner_category_name,
            name,
            exclude_id=inner.id,
            category_id=category_id,
            sub_category_id=sub_category_id,
        ):
            raise ConflictError("Inner category already exists")

        inner.inner_category_name = name
        inner.category_id = category_id
        inner.sub_category_id = sub_category_id
        if fields.get("status") not in (None, ""):
            inner.status = parse_status(fields.get("status"))
    return inner


def delete_inner_category(inner_category_id):
    with atomic():
        inner = get_inner_category(inner_category_id)
        in_use = db.session.query(
            Product.query.filter_by(inner_category_id=inner.id).exists()
        ).scalar()
        if in_use:
            raise ConflictError("Inner category is still used by products")
        db.session.delete(inner)
    return inner.id
