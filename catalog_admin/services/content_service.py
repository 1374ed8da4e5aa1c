"""Storefront content: banners, blogs and the home carousel."""
import logging
from datetime import date

from catalog_admin.errors import NotFoundError, ValidationError
from catalog_admin.extensions import db
from catalog_admin.forms import (
    clean_str,
    escape_like,
    parse_id,
    parse_optional_id,
    parse_status,
    required_str,
)
from catalog_admin.models.category import Category
from catalog_admin.models.content import Banner, Blog, Carousel
from catalog_admin.services import storage_service
from catalog_admin.services.transactions import atomic

logger = logging.getLogger(__name__)


def _get(model, object_id, label):
    obj = db.session.get(model, parse_id(object_id, "id"))
    if not obj:
        raise NotFoundError(f"{label} not found")
    return obj


def _paginate(query, model, order_column, page, limit):
    return query.order_by(order_column.desc(), model.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )


def _parse_date(value):
    text = required_str(value, "date")
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValidationError("date must be an ISO date (YYYY-MM-DD)")


def _optional_text(fields, name, target):
    if name in fields:
        setattr(target, name, clean_str(fields.get(name)))


# ---------------------------------------------------------------------------
# Banners
# ---------------------------------------------------------------------------

def _connected_category(fields):
    category_id = parse_optional_id(
        fields.get("connected_category_id"), "connected_category_id"
    )
    if category_id is not None and not db.session.get(Category, category_id):
        raise ValidationError("Invalid connected_category_id")
    return category_id


def create_banner(fields, image=None):
    if not image:
        raise ValidationError("banner_image is required")
    title = required_str(fields.get("banner_title"), "banner_title")
    status = parse_status(fields.get("status"))

    with storage_service.staged_uploads() as uploads:
        with atomic():
            banner = Banner(
                banner_title=title,
                banner_sub_title=clean_str(fields.get("banner_sub_title")),
                connected_category_id=_connected_category(fields),
                status=status,
            )
            banner.banner_image = uploads.add(image, "banners")
            db.session.add(banner)
    logger.info("Created banner %d (%s)", banner.id, banner.banner_title)
    return banner


def get_banner(banner_id):
    return _get(Banner, banner_id, "Banner")


def list_banners(page=1, limit=10, search=None, status=None):
    query = Banner.query
    if search:
        pattern = f"%{escape_like(search)}%"
        query = query.filter(
            db.or_(
                Banner.banner_title.ilike(pattern, escape="\\"),
                Banner.banner_sub_title.ilike(pattern, escape="\\"),
            )
        )
    if status is not None:
        query = query.filter(Banner.status == parse_status(status, field="status filter"))
    return _paginate(query, Banner, Banner.created_at, page, limit)


def update_banner(banner_id, fields, image=None):
    with storage_service.staged_uploads() as uploads:
        with atomic():
            banner = get_banner(banner_id)
            if "banner_title" in fields:
                banner.banner_title = required_str(fields.get("banner_title"), "banner_title")
            _optional_text(fields, "banner_sub_title", banner)
            if "connected_category_id" in fields:
                banner.connected_category_id = _connected_category(fields)
            if fields.get("status") not in (None, ""):
                banner.status = parse_status(fields.get("status"))
            if image:
                banner.banner_image = uploads.replace(banner.banner_image, image, "banners")
    return banner


def delete_banner(banner_id):
    with storage_service.staged_uploads() as uploads:
        with atomic():
            banner = get_banner(banner_id)
            uploads.remove_later(banner.banner_image)
            db.session.delete(banner)
    logger.info("Deleted banner %d", banner.id)
    return banner.id


# ---------------------------------------------------------------------------
# Blogs
# ---------------------------------------------------------------------------

def create_blog(fields, thumbnail=None, other_images=()):
    if not thumbnail:
        raise ValidationError("blog_thumbnail is required")
    title = required_str(fields.get("blog_title"), "blog_title")
    blog_date = _parse_date(fields.get("date"))
    status = parse_status(fields.get("status"))

    with storage_service.staged_uploads() as uploads:
        with atomic():
            blog = Blog(
                blog_title=title,
                blog_sec_title=clean_str(fields.get("blog_sec_title")),
                description=clean_str(fields.get("description")),
                sec_description=clean_str(fields.get("sec_description")),
                date=blog_date,
                place=clean_str(fields.get("place")),
                status=status,
            )
            blog.blog_thumbnail = uploads.add(thumbnail, "blogs")
            blog.other_images = uploads.add_many(other_images or [], "blogs")
            db.session.add(blog)
    logger.info("Created blog %d (%s)", blog.id, blog.blog_title)
    return blog


def get_blog(blog_id):
    return _get(Blog, blog_id, "Blog")


def list_blogs(page=1, limit=10, search=None, status=None):
    query = Blog.query
    if search:
        pattern = f"%{escape_like(search)}%"
        query = query.filter(
            db.or_(
                Blog.blog_title.ilike(pattern, escape="\\"),
                Blog.place.ilike(pattern, escape="\\"),
            )
        )
    if status is not None:
        query = query.filter(Blog.status == parse_status(status, field="status filter"))
    return _paginate(query, Blog, Blog.date, page, limit)


def update_blog(blog_id, fields, thumbnail=None, other_images=()):
    """Partial update; new other_images are appended to the existing ones."""
    with storage_service.staged_uploads() as uploads:
        with atomic():
            blog = get_blog(blog_id)
            if "blog_title" in fields:
                blog.blog_title = required_str(fields.get("blog_title"), "blog_title")
            for name in ("blog_sec_title", "description", "sec_description", "place"):
                _optional_text(fields, name, blog)
            if "date" in fields:
                blog.date = _parse_date(fields.get("date"))
            if fields.get("status") not in (None, ""):
                blog.status = parse_status(fields.get("status"))
            if thumbnail:
                blog.blog_thumbnail = uploads.replace(blog.blog_thumbnail, thumbnail, "blogs")
            if other_images:
                blog.other_images = list(blog.other_images or []) + uploads.add_many(
                    other_images, "blogs"
                )
    return blog


def delete_blog(blog_id):
    with storage_service.staged_uploads() as uploads:
        with atomic():
            blog = get_blog(blog_id)
            uploads.remove_later(blog.blog_thumbnail, *(blog.other_images or []))
            db.session.delete(blog)
    logger.info("Deleted blog %d", blog.id)
    return blog.id


# ---------------------------------------------------------------------------
# Carousel
# ---------------------------------------------------------------------------

def create_carousel(fields, desktop_file=None, mobile_file=None):
    if not desktop_file:
        raise ValidationError("desktop_file is required")
    status = parse_status(fields.get("status"))

    with storage_service.staged_uploads() as uploads:
        with atomic():
            slide = Carousel(
                title=clean_str(fields.get("title")),
                sub_title=clean_str(fields.get("sub_title")),
                description=clean_str(fields.get("description")),
                status=status,
            )
            slide.desktop_file = uploads.add(desktop_file, "carousel")
            if mobile_file:
                slide.mobile_file = uploads.add(mobile_file, "carousel")
            db.session.add(slide)
    return slide


def get_carousel(carousel_id):
    return _get(Carousel, carousel_id, "Carousel")


def list_carousel(page=1, limit=10, search=None, status=None):
    query = Carousel.query
    if search:
        query = query.filter(
            Carousel.title.ilike(f"%{escape_like(search)}%", escape="\\")
        )
    if status is not None:
        query = query.filter(Carousel.status == parse_status(status, field="status filter"))
    return _paginate(query, Carousel, Carousel.created_at, page, limit)


def update_carousel(carousel_id, fields, desktop_file=None, mobile_file=None):
    with storage_service.staged_uploads() as uploads:
        with atomic():
            slide = get_carousel(carousel_id)
            for name in ("title", "sub_title", "description"):
                _optional_text(fields, name, slide)
            if fields.get("status") not in (None, ""):
                slide.status = parse_status(fields.get("status"))
            if desktop_file:
                slide.desktop_file = uploads.replace(slide.desktop_file, desktop_file, "carousel")
            if mobile_file:
                slide.mobile_file = uploads.replace(slide.mobile_file, mobile_file, "carousel")
    return slide


def delete_carousel(carousel_id):
    with storage_service.staged_uploads() as uploads:
        with atomic():
            slide = get_carousel(carousel_id)
            uploads.remove_later(slide.desktop_file, slide.mobile_file)
            db.session.delete(slide)
    logger.info("Deleted carousel slide %d", slide.id)
    return slide.id
