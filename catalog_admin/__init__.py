import os

from dotenv import load_dotenv
from flask import Flask

load_dotenv()


def _config_name():
    name = os.environ.get("FLASK_ENV")
    if name:
        return name
    # Managed platforms set PORT; never fall back to debug defaults there.
    return "production" if os.environ.get("PORT") else "development"


def create_app(config_name=None):
    flask_app = Flask(__name__)

    from catalog_admin.config import config_map

    config_cls = config_map.get(config_name or _config_name(), config_map["development"])
    flask_app.config.from_object(config_cls)
    if hasattr(config_cls, "init_app"):
        config_cls.init_app(flask_app)

    from catalog_admin.extensions import db, init_redis, limiter, migrate

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    limiter.init_app(flask_app)
    init_redis(flask_app)

    # Models must be imported before Alembic autogenerate inspects the metadata
    from catalog_admin import models  # noqa: F401
    from catalog_admin.blueprints.api import api_bp
    from catalog_admin.cli import register_cli
    from catalog_admin.errors import errors_bp

    flask_app.register_blueprint(errors_bp)
    flask_app.register_blueprint(api_bp, url_prefix="/api")
    register_cli(flask_app)
    _register_health(flask_app)

    return flask_app


def _register_health(flask_app):
    from catalog_admin import extensions

    def probe_db():
        extensions.db.session.execute(extensions.db.text("SELECT 1"))
        return "ok"

    def probe_redis():
        if not extensions.redis_client:
            return "not configured"
        extensions.redis_client.ping()
        return "ok"

    @flask_app.route("/health")
    def health():
        checks = {"status": "ok"}
        for name, probe in (("db", probe_db), ("redis", probe_redis)):
            try:
                checks[name] = probe()
            except Exception:
                # Details stay in the log; the probe response is public.
                flask_app.logger.exception("Health check %s probe failed", name)
                checks[name] = "error"
                checks["status"] = "degraded"
        return checks, 200 if checks["status"] == "ok" else 503
