"""Request helpers shared by the API views."""
from functools import wraps

from flask import current_app, g, jsonify, request

from catalog_admin.forms import paginate_args
from catalog_admin.services import auth_service
from catalog_admin.services.image_service import UploadedImage


def auth_required(func):
    """Require `Authorization: Bearer <token>`; the user lands on g.user."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        header = request.headers.get("Authorization", "")
        token = header.split(" ", 1)[1].strip() if header.startswith("Bearer ") else ""
        g.user = auth_service.verify_token(token)
        return func(*args, **kwargs)

    return wrapper


def request_fields():
    """Body fields from either a JSON payload or a multipart/urlencoded form."""
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form


def upload(name):
    return UploadedImage.from_storage(request.files.get(name))


def uploads(name):
    files = request.files.getlist(name) + request.files.getlist(f"{name}[]")
    return [u for u in (UploadedImage.from_storage(f) for f in files) if u is not None]


def list_args():
    """(page, limit, search, status) from the query string; blank filters are None."""
    page, limit = paginate_args(request.args)
    search = (request.args.get("search") or "").strip() or None
    status = request.args.get("status")
    if status is not None and not status.strip():
        status = None
    return page, limit, search, status


def optional_arg(name):
    value = request.args.get(name)
    if value is None or not value.strip():
        return None
    return value


def page_payload(pagination, serialize=None):
    serialize = serialize or (lambda obj: obj.to_dict())
    return jsonify(
        {
            "data": [serialize(item) for item in pagination.items],
            "meta": {
                "total": pagination.total,
                "page": pagination.page,
                "limit": pagination.per_page,
                "pages": pagination.pages or 1,
            },
        }
    )


def otp_store():
    return current_app.extensions["otp_store"]
