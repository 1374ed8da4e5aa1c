"""Banner, blog and carousel endpoints."""
from flask import jsonify

from catalog_admin.blueprints.api import api_bp
from catalog_admin.blueprints.api.common import (
    auth_required,
    list_args,
    page_payload,
    request_fields,
    upload,
    uploads,
)
from catalog_admin.extensions import db
from catalog_admin.models.category import Category
from catalog_admin.services import content_service


def _banner_detail(banner):
    data = banner.to_dict()
    category = (
        db.session.get(Category, banner.connected_category_id)
        if banner.connected_category_id
        else None
    )
    data["connected_category"] = (
        {"id": category.id, "category_name": category.category_name} if category else None
    )
    return data


@api_bp.route("/banners", methods=["POST"])
@auth_required
def create_banner():
    banner = content_service.create_banner(request_fields(), image=upload("banner_image"))
    return jsonify({"message": "Banner created", "data": _banner_detail(banner)}), 201


@api_bp.route("/banners", methods=["GET"])
def list_banners():
    return page_payload(content_service.list_banners(*list_args()), _banner_detail)


@api_bp.route("/banners/<banner_id>", methods=["GET"])
def get_banner(banner_id):
    return jsonify({"data": _banner_detail(content_service.get_banner(banner_id))})


@api_bp.route("/banners/<banner_id>", methods=["PUT"])
@auth_required
def update_banner(banner_id):
    banner = content_service.update_banner(
        banner_id, request_fields(), image=upload("banner_image")
    )
    return jsonify({"message": "Banner updated", "data": _banner_detail(banner)})


@api_bp.route("/banners/<banner_id>", methods=["DELETE"])
@auth_required
def delete_banner(banner_id):
    content_service.delete_banner(banner_id)
    return jsonify({"message": "Banner deleted"})


@api_bp.route("/blogs", methods=["POST"])
@auth_required
def create_blog():
    blog = content_service.create_blog(
        request_fields(),
        thumbnail=upload("blog_thumbnail"),
        other_images=uploads("other_images"),
    )
    return jsonify({"message": "Blog created", "data": blog.to_dict()}), 201


@api_bp.route("/blogs", methods=["GET"])
def list_blogs():
    return page_payload(content_service.list_blogs(*list_args()))


@api_bp.route("/blogs/<blog_id>", methods=["GET"])
def get_blog(blog_id):
    return jsonify({"data": content_service.get_blog(blog_id).to_dict()})


@api_bp.route("/blogs/<blog_id>", methods=["PUT"])
@auth_required
def update_blog(blog_id):
    blog = content_service.update_blog(
        blog_id,
        request_fields(),
        thumbnail=upload("blog_thumbnail"),
        other_images=uploads("other_images"),
    )
    return jsonify({"message": "Blog updated", "data": blog.to_dict()})


@api_bp.route("/blogs/<blog_id>", methods=["DELETE"])
@auth_required
def delete_blog(blog_id):
    content_service.delete_blog(blog_id)
    return jsonify({"message": "Blog deleted"})


@api_bp.route("/carousel", methods=["POST"])
@auth_required
def create_carousel():
    slide = content_service.create_carousel(
        request_fields(),
        desktop_file=upload("desktop_file"),
        mobile_file=upload("mobile_file"),
    )
    return jsonify({"message": "Carousel created", "data": slide.to_dict()}), 201


@api_bp.route("/carousel", methods=["GET"])
def list_carousel():
    return page_payload(content_service.list_carousel(*list_args()))


@api_bp.route("/carousel/<carousel_id>", methods=["GET"])
def get_carousel(carousel_id):
    return jsonify({"data": content_service.get_carousel(carousel_id).to_dict()})


@api_bp.route("/carousel/<carousel_id>", methods=["PUT"])
@auth_required
def update_carousel(carousel_id):
    slide = content_service.update_carousel(
        carousel_id,
        request_fields(),
        desktop_file=upload("desktop_file"),
        mobile_file=upload("mobile_file"),
    )
    return jsonify({"message": "Carousel updated", "data": slide.to_dict()})


@api_bp.route("/carousel/<carousel_id>", methods=["DELETE"])
@auth_required
def delete_carousel(carousel_id):
    content_service.delete_carousel(carousel_id)
    return jsonify({"message": "Carousel deleted"})
