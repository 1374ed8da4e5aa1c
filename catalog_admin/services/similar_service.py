"""Similar products: staged fallback from strict to loose matching."""
import logging
from collections import defaultdict

from catalog_admin.extensions import db
from catalog_admin.forms import parse_id
from catalog_admin.models.product import Product, product_categories
from catalog_admin.models.sku import ProductSku
from catalog_admin.services.product_service import get_product

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 50


def clamp_limit(limit):
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return min(max(limit, 1), MAX_LIMIT)


def _in_categories(category_ids):
    return db.or_(
        Product.category_id.in_(category_ids),
        Product.id.in_(
            db.select(product_categories.c.product_id).where(
                product_categories.c.category_id.in_(category_ids)
            )
        ),
    )


def _stages(product):
    """Filters from strictest to loosest; stages that cannot match are skipped."""
    category_ids = product.category_ids
    stages = []
    if category_ids and product.brand_id:
        stages.append(
            ("category+brand", [_in_categories(category_ids), Product.brand_id == product.brand_id])
        )
    if category_ids:
        stages.append(("category", [_in_categories(category_ids)]))
    if product.brand_id:
        stages.append(("brand", [Product.brand_id == product.brand_id]))
    stages.append(("any", []))
    return stages


def list_similar_products(product_id, limit=DEFAULT_LIMIT):
    """Return up to `limit` (product, active_skus) pairs similar to `product_id`.

    Candidates are other active products with at least one active SKU. Each
    stage only adds products not picked by an earlier stage, in creation
    order, and retrieval stops as soon as `limit` is reached.
    """
    product = get_product(parse_id(product_id, "product_id"))
    limit = clamp_limit(limit)

    has_active_sku = (
        db.select(ProductSku.id)
        .where(ProductSku.product_id == Product.id, ProductSku.status == 1)
        .exists()
    )

    picked = []
    for name, filters in _stages(product):
        remaining = limit - len(picked)
        if remaining <= 0:
            break
        query = Product.query.filter(
            Product.status == 1,
            Product.id != product.id,
            has_active_sku,
            *filters,
        )
        if picked:
            query = query.filter(Product.id.notin_([p.id for p in picked]))
        found = query.order_by(Product.id).limit(remaining).all()
        logger.debug("Similar products for %d, stage %s: %d", product.id, name, len(found))
        picked.extend(found)

    skus_by_product = defaultdict(list)
    if picked:
        for sku in (
            ProductSku.query.filter(
                ProductSku.product_id.in_([p.id for p in picked]),
                ProductSku.status == 1,
            )
            .order_by(ProductSku.id)
            .all()
        ):
            skus_by_product[sku.product_id].append(sku)

    return [(p, skus_by_product[p.id]) for p in picked]
