"""How a product points into the category hierarchy.

Deployments pick one shape with CATEGORY_LINKAGE:

- ``single``: exactly one category
- ``multi``: one or more categories
- ``hierarchical``: category, sub category and inner category
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from catalog_admin.errors import ValidationError
from catalog_admin.extensions import db
from catalog_admin.forms import parse_id, parse_id_list
from catalog_admin.models.category import Category
from catalog_admin.services import category_service

LINKAGE_MODES = ("single", "multi", "hierarchical")


@dataclass(frozen=True)
class SingleCategory:
    category_id: int

    @property
    def category_ids(self) -> Tuple[int, ...]:
        return (self.category_id,)


@dataclass(frozen=True)
class MultiCategory:
    category_ids: Tuple[int, ...]


@dataclass(frozen=True)
class HierarchicalCategory:
    category_id: int
    sub_category_id: int
    inner_category_id: int

    @property
    def category_ids(self) -> Tuple[int, ...]:
        return (self.category_id,)


def _supplied(fields, name):
    return fields.get(name) not in (None, "")


def parse_linkage(mode, fields, current=None) -> Optional[object]:
    """Build the linkage for `mode` from request fields.

    With `current` (a Product being updated) missing parts fall back to the
    stored values and None is returned when no category field was sent.
    """
    if mode not in LINKAGE_MODES:
        raise ValueError(f"Unknown CATEGORY_LINKAGE {mode!r}")

    if mode == "single":
        if not _supplied(fields, "category_id"):
            if current is not None:
                return None
            raise ValidationError("category_id is required")
        return SingleCategory(parse_id(fields.get("category_id"), "category_id"))

    if mode == "multi":
        ids = parse_id_list(fields, "category_ids")
        if ids is None and _supplied(fields, "category_id"):
            ids = parse_id_list(fields, "category_id")
        if ids is None:
            if current is not None:
                return None
            raise ValidationError("category_ids is required")
        if not ids:
            raise ValidationError("At least one category is required")
        return MultiCategory(tuple(ids))

    names = ("category_id", "sub_category_id", "inner_category_id")
    if current is not None and not any(_supplied(fields, n) for n in names):
        return None
    values = {}
    for name in names:
        if _supplied(fields, name):
            values[name] = parse_id(fields.get(name), name)
        elif current is not None and getattr(current, name):
            values[name] = getattr(current, name)
        else:
            raise ValidationError(f"{name} is required")
    return HierarchicalCategory(**values)


def validate_linkage(linkage):
    """Check that every referenced category exists and the chain is consistent."""
    if isinstance(linkage, HierarchicalCategory):
        inner = category_service.get_inner_category(linkage.inner_category_id)
        sub = category_service.check_chain(
            linkage.category_id, linkage.sub_category_id
        )
        if inner.sub_category_id != sub.id or inner.category_id != linkage.category_id:
            raise ValidationError(
                "Inner category does not belong to the given sub category"
            )
        return
    for category_id in linkage.category_ids:
        category_service.get_category(category_id)


def apply_linkage(product, linkage):
    categories = [db.session.get(Category, i) for i in linkage.category_ids]
    product.categories = categories
    product.category_id = linkage.category_ids[0]
    if isinstance(linkage, HierarchicalCategory):
        product.sub_category_id = linkage.sub_category_id
        product.inner_category_id = linkage.inner_category_id
