"""Category, sub-category and inner-category endpoints."""
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
from catalog_admin.services import category_service


@api_bp.route("/categories", methods=["POST"])
@auth_required
def create_category():
    category = category_service.create_category(
        request_fields(), image=upload("category_image")
    )
    return jsonify({"message": "Category created", "data": category.to_dict()}), 201


@api_bp.route("/categories", methods=["GET"])
def list_categories():
    page, limit, search, status = list_args()
    pagination = category_service.list_categories(
        page, limit, search, status, is_listing=optional_arg("is_listing")
    )
    return page_payload(pagination)


@api_bp.route("/categories/<category_id>", methods=["GET"])
def get_category(category_id):
    return jsonify({"data": category_service.get_category(category_id).to_dict()})


@api_bp.route("/categories/<category_id>", methods=["PUT"])
@auth_required
def update_category(category_id):
    category = category_service.update_category(
        category_id, request_fields(), image=upload("category_image")
    )
    return jsonify({"message": "Category updated", "data": category.to_dict()})


@api_bp.route("/categories/<category_id>", methods=["DELETE"])
@auth_required
def delete_category(category_id):
    category_service.delete_category(category_id)
    return jsonify({"message": "Category deleted"})


@api_bp.route("/sub-categories", methods=["POST"])
@auth_required
def create_sub_category():
    sub = category_service.create_sub_category(
        request_fields(), image=upload("sub_category_image")
    )
    return jsonify({"message": "Sub category created", "data": sub.to_dict()}), 201


@api_bp.route("/sub-categories", methods=["GET"])
def list_sub_categories():
    page, limit, search, status = list_args()
    pagination = category_service.list_sub_categories(
        page, limit, search, status, category_id=optional_arg("category_id")
    )
    return page_payload(pagination)


@api_bp.route("/sub-categories/<sub_category_id>", methods=["GET"])
def get_sub_category(sub_category_id):
    return jsonify(
        {"data": category_service.get_sub_category(sub_category_id).to_dict()}
    )


@api_bp.route("/sub-categories/<sub_category_id>", methods=["PUT"])
@auth_required
def update_sub_category(sub_category_id):
    sub = category_service.update_sub_category(
        sub_category_id, request_fields(), image=upload("sub_category_image")
    )
    return jsonify({"message": "Sub category updated", "data": sub.to_dict()})


@api_bp.route("/sub-categories/<sub_category_id>", methods=["DELETE"])
@auth_required
def delete_sub_category(sub_category_id):
    category_service.delete_sub_category(sub_category_id)
    return jsonify({"message": "Sub category deleted"})


@api_bp.route("/inner-categories", methods=["POST"])
@auth_required
def create_inner_category():
    inner = category_service.create_inner_category(request_fields())
    return jsonify({"message": "Inner category created", "data": inner.to_dict()}), 201


@api_bp.route("/inner-categories", methods=["GET"])
def list_inner_categories():
    page, limit, search, status = list_args()
    pagination = category_service.list_inner_categories(
        page,
        limit,
        search,
        status,
        category_id=optional_arg("category_id"),
        sub_category_id=optional_arg("sub_category_id"),
    )
    return page_payload(pagination)


@api_bp.route("/inner-categories/<inner_category_id>", methods=["GET"])
def get_inner_category(inner_category_id):
    return jsonify(
        {"data": category_service.get_inner_category(inner_category_id).to_dict()}
    )


@api_bp.route("/inner-categories/<inner_category_id>", methods=["PUT"])
@auth_required
def update_inner_category(inner_category_id):
    inner = category_service.update_inner_category(inner_category_id, request_fields())
    return jsonify({"message": "Inner category updated", "data": inner.to_dict()})


@api_bp.route("/inner-categories/<inner_category_id>", methods=["DELETE"])
@auth_required
def delete_inner_category(inner_category_id):
    category_service.delete_inner_category(inner_category_id)
    return jsonify({"message": "Inner category deleted"})
