from flask import jsonify

from catalog_admin.blueprints.api import api_bp
from catalog_admin.blueprints.api.common import (
    auth_required,
    list_args,
    optional_arg,
    page_payload,
    request_fields,
    upload,
)
from catalog_admin.forms import parse_id_list
from catalog_admin.services import brand_service


@api_bp.route("/brands", methods=["POST"])
@auth_required
def create_brand():
    brand = brand_service.create_brand(request_fields(), image=upload("brand_image"))
    return jsonify({"message": "Brand created", "data": brand.to_dict()}), 201


@api_bp.route("/brands", methods=["GET"])
def list_brands():
    page, limit, search, status = list_args()
    pagination = brand_service.list_brands(
        page, limit, search, status, is_popular=optional_arg("is_popular")
    )
    return page_payload(pagination)


@api_bp.route("/brands/<brand_id>", methods=["GET"])
def get_brand(brand_id):
    return jsonify({"data": brand_service.get_brand(brand_id).to_dict()})


@api_bp.route("/brands/<brand_id>", methods=["PUT"])
@auth_required
def update_brand(brand_id):
    brand = brand_service.update_brand(
        brand_id, request_fields(), image=upload("brand_image")
    )
    return jsonify({"message": "Brand updated", "data": brand.to_dict()})


@api_bp.route("/brands/<brand_id>", methods=["DELETE"])
@auth_required
def delete_brand(brand_id):
    brand_service.delete_brand(brand_id)
    return jsonify({"message": "Brand deleted"})


@api_bp.route("/brands/bulk-status", methods=["POST"])
@auth_required
def bulk_update_brand_status():
    data = request_fields()
    updated = brand_service.bulk_update_status(
        parse_id_list(data, "ids"), data.get("status")
    )
    return jsonify({"message": "Brand status updated", "updated": updated})


@api_bp.route("/brands/delete-multiple", methods=["POST"])
@auth_required
def delete_multiple_brands():
    ids = brand_service.delete_brands(parse_id_list(request_fields(), "ids"))
    return jsonify({"message": "Brands deleted", "deleted_ids": ids})
