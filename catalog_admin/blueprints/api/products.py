from flask import jsonify, request

from catalog_admin.blueprints.api import api_bp
from catalog_admin.blueprints.api.common import (
    auth_required,
    list_args,
    optional_arg,
    page_payload,
    request_fields,
    upload,
)
from catalog_admin.services import product_service, similar_service, variation_service


def _product_detail(product):
    data = product.to_dict()
    data["variations"] = [
        v.to_dict() for v in variation_service.variations_for_product(product.id)
    ]
    return data


def _create():
    product = product_service.create_product(
        request_fields(), image=upload("product_image")
    )
    return jsonify({"message": "Product created", "data": _product_detail(product)}), 201


@api_bp.route("/products", methods=["POST"])
@auth_required
def create_product():
    return _create()


@api_bp.route("/products/with-variation", methods=["POST"])
@auth_required
def create_product_with_variations():
    return _create()


@api_bp.route("/products", methods=["GET"])
def list_products():
    page, limit, search, status = list_args()
    pagination = product_service.list_products(
        page,
        limit,
        search,
        status,
        category_id=optional_arg("category_id"),
        brand_id=optional_arg("brand_id"),
    )
    return page_payload(pagination)


@api_bp.route("/products/<product_id>", methods=["GET"])
def get_product(product_id):
    return jsonify({"data": _product_detail(product_service.get_product(product_id))})


@api_bp.route("/products/<product_id>", methods=["PUT"])
@auth_required
def update_product(product_id):
    product = product_service.update_product(
        product_id, request_fields(), image=upload("product_image")
    )
    return jsonify({"message": "Product updated", "data": _product_detail(product)})


@api_bp.route("/products/<product_id>", methods=["DELETE"])
@auth_required
def delete_product(product_id):
    result = product_service.delete_product(product_id)
    return jsonify({"message": "Product deleted", **result})


@api_bp.route("/products/<product_id>/similar", methods=["GET"])
def similar_products(product_id):
    pairs = similar_service.list_similar_products(
        product_id, request.args.get("limit", similar_service.DEFAULT_LIMIT)
    )
    data = []
    for product, skus in pairs:
        item = product.to_dict()
        item["skus"] = [s.to_dict() for s in skus]
        data.append(item)
    return jsonify({"data": data, "count": len(data)})
