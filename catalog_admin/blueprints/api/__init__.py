from flask import Blueprint

api_bp = Blueprint("api", __name__)

from catalog_admin.blueprints.api import (  # noqa: F401, E402
    auth,
    brands,
    categories,
    content,
    products,
    skus,
)
