"""Product SKU endpoints.

Option ids arrive as ``variation_option_id`` in any of the encodings that
forms.normalize_option_ids understands. Gallery files are sent as
``sku_image`` (repeatable), the cover as ``thumbnail_image``.
"""
from flask import jsonify

from catalog_admin.blueprints.api import api_bp
from catalog_admin.blueprints.api.common import (
    auth_required,
    list_args,
    optional_arg,
    page_payload,
    request_fields,
    upload,
    uploads,
)
from catalog_admin.forms import normalize_option_ids, parse_id_list
from catalog_admin.services import product_service, sku_service, variation_service


def _sku_detail(sku):
    return sku.to_dict(with_configuration=True)


def _create():
    data = request_fields()
    sku = sku_service.create_sku_with_variation(
        data.get("product_id"),
        data,
        normalize_option_ids(data) or [],
        thumbnail=upload("thumbnail_image"),
        images=uploads("sku_image"),
    )
    return jsonify({"message": "Product SKU created", "data": _sku_detail(sku)}), 201


def _update(sku_id):
    data = request_fields()
    sku = sku_service.update_sku_with_variation(
        sku_id,
        data,
        option_ids=normalize_option_ids(data),
        thumbnail=upload("thumbnail_image"),
        images=uploads("sku_image"),
        retained_images=data.get("retained_images"),
    )
    return jsonify({"message": "Product SKU updated", "data": _sku_detail(sku)})


@api_bp.route("/product-sku", methods=["POST"])
@auth_required
def create_sku():
    return _create()


@api_bp.route("/product-sku/with-variation", methods=["POST"])
@auth_required
def create_sku_with_variation():
    return _create()


@api_bp.route("/product-sku", methods=["GET"])
def list_skus():
    page, limit, search, status = list_args()
    pagination = sku_service.list_skus(
        page, limit, search, status, product_id=optional_arg("product_id")
    )
    return page_payload(pagination)


@api_bp.route("/product-sku/variations/<product_id>", methods=["GET"])
def variations_by_product(product_id):
    product = product_service.get_product(product_id)
    variations = variation_service.variations_for_product(product.id)
    return jsonify({"data": [v.to_dict() for v in variations]})


@api_bp.route("/product-sku/singleEdit/is-new", methods=["PUT"])
@auth_required
def update_multiple_is_new():
    data = request_fields()
    skus = sku_service.set_is_new(
        items=data.get("items"),
        ids=parse_id_list(data, "ids"),
        is_new=data.get("is_new"),
    )
    return jsonify(
        {
            "message": "Product SKUs updated",
            "data": [{"id": s.id, "is_new": s.is_new} for s in skus],
        }
    )


@api_bp.route("/product-sku/<sku_id>", methods=["GET"])
def get_sku(sku_id):
    return jsonify({"data": _sku_detail(sku_service.get_sku(sku_id))})


@api_bp.route("/product-sku/<sku_id>", methods=["PUT"])
@auth_required
def update_sku(sku_id):
    return _update(sku_id)


@api_bp.route("/product-sku/with-variation/<sku_id>", methods=["PUT"])
@auth_required
def update_sku_with_variation(sku_id):
    return _update(sku_id)


@api_bp.route("/product-sku/<sku_id>", methods=["DELETE"])
@auth_required
def delete_sku(sku_id):
    deleted_id = sku_service.delete_sku(sku_id)
    return jsonify({"message": "Product SKU deleted", "deleted_sku_id": deleted_id})
