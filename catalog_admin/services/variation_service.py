"""Per-product variation axes (ProductVariation) and their options."""
import logging

from sqlalchemy import func

from catalog_admin.errors import ConflictError, ValidationError
from catalog_admin.extensions import db
from catalog_admin.forms import clean_str, parse_json_list
from catalog_admin.models.sku import ProductSku
from catalog_admin.models.variation import ProductVariation, ProductVariationOption

logger = logging.getLogger(__name__)


def parse_variations(raw):
    """Parse `[{variation_name, options: [...]}, ...]` into (name, [option]) pairs.

    Blank option names are skipped. Returns None when nothing was sent.
    """
    entries = parse_json_list(raw, "variations")
    if entries is None:
        return None

    specs = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValidationError("Each variation must be an object")
        name = clean_str(entry.get("variation_name") or entry.get("name"))
        if not name:
            raise ValidationError("variation_name is required")
        options = entry.get("options") or []
        if not isinstance(options, list):
            raise ValidationError(f"options for {name} must be a list")
        option_names = [
            clean_str(o) for o in options if isinstance(o, (str, int)) and clean_str(o)
        ]
        if not option_names:
            raise ValidationError(f"Variation {name} needs at least one option")
        specs.append((name, option_names))
    return specs


def count_axes(product_id):
    return (
        db.session.query(func.count(ProductVariation.id))
        .filter(ProductVariation.product_id == product_id)
        .scalar()
    )


def add_variations(product, specs):
    """Create one axis per (name, option names) pair, in the current transaction."""
    created = []
    for name, option_names in specs or []:
        variation = ProductVariation(name=name, product_id=product.id, status=1)
        db.session.add(variation)
        db.session.flush()
        for option_name in option_names:
            db.session.add(
                ProductVariationOption(
                    name=option_name,
                    product_id=product.id,
                    product_variation_id=variation.id,
                    status=1,
                )
            )
        created.append(variation)
    db.session.flush()
    return created


def merge_variations(product, specs):
    """Update path: extend matching axes with new options, add new axes.

    A brand-new axis would leave existing SKUs without a selection on it,
    so new axes are only accepted while the product has no SKUs.
    """
    existing = {v.name.lower(): v for v in product.variations}
    has_skus = db.session.query(
        ProductSku.query.filter_by(product_id=product.id).exists()
    ).scalar()

    new_specs = []
    for name, option_names in specs or []:
        variation = existing.get(name.lower())
        if variation is None:
            if has_skus:
                raise ConflictError(
                    f"Cannot add variation {name}: product already has SKUs"
                )
            new_specs.append((name, option_names))
            continue
        known = {o.name.lower() for o in variation.options}
        for option_name in option_names:
            if option_name.lower() in known:
                continue
            known.add(option_name.lower())
            db.session.add(
                ProductVariationOption(
                    name=option_name,
                    product_id=product.id,
                    product_variation_id=variation.id,
                    status=1,
                )
            )
    if new_specs:
        logger.info(
            "Adding variation(s) %s to product %d", [n for n, _ in new_specs], product.id
        )
    add_variations(product, new_specs)


def variations_for_product(product_id):
    return (
        ProductVariation.query.filter_by(product_id=product_id)
        .order_by(ProductVariation.id)
        .all()
    )
