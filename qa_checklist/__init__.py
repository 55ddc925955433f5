"""
QA Checklist Tracker
Flask Application Factory.

Usage:
    from qa_checklist import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate

from qa_checklist.config import config
from qa_checklist.models import db
from qa_checklist.middleware.logging_config import configure_logging
from qa_checklist.middleware.rate_limiter import init_rate_limits
from qa_checklist.middleware.timing import init_request_timing
from qa_checklist.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# ── SQLite FK enforcement (global engine event) ─────────────────────────
from sqlalchemy import event as _sa_event, engine as _sa_engine


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # per-blueprint limits only
    storage_uri=os.getenv("REDIS_URL", "memory://"),
)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    # Instantiated so ProductionConfig can refuse to start without its env vars
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()],
             supports_credentials=True)
    else:
        CORS(app)

    # ── Request timing middleware ────────────────────────────────────────
    init_request_timing(app)

    # ── Request guards (input length + Content-Type) ─────────────────────
    @app.before_request
    def _guard_request():
        from flask import abort
        max_len = app.config.get("MAX_CONTENT_LENGTH")
        if max_len and request.content_length and request.content_length > max_len:
            abort(413, description="Request body too large")
        if request.method in ("POST", "PUT", "PATCH") and request.path.startswith("/api/"):
            ct = request.content_type or ""
            if "json" in ct or "multipart/form-data" in ct:
                return None
            if request.get_data(cache=True):
                abort(415, description="Content-Type must be application/json")
        return None

    # ── Import all models so Alembic can detect them ─────────────────────
    from qa_checklist.models import project as _project_models        # noqa: F401
    from qa_checklist.models import module as _module_models          # noqa: F401
    from qa_checklist.models import checklist as _checklist_models    # noqa: F401
    from qa_checklist.models import tester as _tester_models          # noqa: F401
    from qa_checklist.models import attachment as _attachment_models  # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) ────────────────────────
    if config_name != "testing":
        if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///"):
            os.makedirs(app.instance_path, exist_ok=True)
        with app.app_context():
            try:
                db.create_all()
                app.logger.info("db.create_all() completed successfully")
            except Exception as e:
                app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from qa_checklist.blueprints.attachment_bp import attachment_bp
    from qa_checklist.blueprints.auth_bp import auth_bp
    from qa_checklist.blueprints.checklist_bp import checklist_bp
    from qa_checklist.blueprints.health_bp import health_bp
    from qa_checklist.blueprints.module_bp import module_bp
    from qa_checklist.blueprints.project_bp import project_bp
    from qa_checklist.blueprints.tester_bp import tester_bp

    app.register_blueprint(project_bp)
    app.register_blueprint(module_bp)
    app.register_blueprint(checklist_bp)
    app.register_blueprint(tester_bp)
    app.register_blueprint(attachment_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(health_bp)

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("init-storage")
    def init_storage_cmd():
        """Create the object-store buckets for attachments, thumbnails and images."""
        from qa_checklist.services.attachment_service import initialize_storage
        status, err = initialize_storage()
        if err:
            logger.error("Storage initialization failed: %s", err.details or err.message)
            raise SystemExit(1)
        logger.info("Storage buckets ready: %s", ", ".join(sorted(status)))

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        return api_error(E.NOT_FOUND, "Not found", details={"path": request.path})

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_error(E.METHOD_NOT_ALLOWED, "Method not allowed")

    @app.errorhandler(413)
    def payload_too_large(e):
        return api_error(E.PAYLOAD_TOO_LARGE, "Request body too large")

    @app.errorhandler(415)
    def unsupported_media_type(e):
        return api_error(E.UNSUPPORTED_MEDIA_TYPE, "Content-Type must be application/json")

    @app.errorhandler(429)
    def rate_limited(e):
        return api_error(E.RATE_LIMITED, "Too many requests",
                         details={"retry_after": str(e.description)})

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error")

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    return app
