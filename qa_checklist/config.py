"""
QA Checklist Tracker
Configuration classes for Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name]())
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

# Default SQLite path for local dev when PostgreSQL is not running
_SQLITE_DEV = f"sqlite:///{os.path.join(basedir, 'instance', 'qa_checklist_dev.db')}"
_SQLITE_TEST = "sqlite:///:memory:"

# Generate a random key for development; production MUST use a stable env var
_DEV_SECRET = secrets.token_hex(32)


class Config:
    """Base configuration shared across all environments."""

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    DEBUG = False
    TESTING = False

    # SQLAlchemy
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 300,   # recycle connections every 5 min
        "pool_timeout": 20,    # wait max 20s for a connection from pool
    }

    # Uploads are capped at 5 MB; leave room for the multipart envelope
    MAX_CONTENT_LENGTH = 6 * 1024 * 1024

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Object storage (attachments, thumbnails, test case images)
    STORAGE_URL = os.getenv("STORAGE_URL", "http://localhost:54321/storage/v1")
    STORAGE_API_KEY = os.getenv("STORAGE_API_KEY", "")
    STORAGE_TIMEOUT = int(os.getenv("STORAGE_TIMEOUT", "30"))
    ATTACHMENT_BUCKET = "test-attachments"
    THUMBNAIL_BUCKET = "module-thumbnails"
    TESTCASE_IMAGE_BUCKET = "testcase-images"
    ATTACHMENT_MAX_BYTES = 5 * 1024 * 1024
    THUMBNAIL_MAX_BYTES = 2 * 1024 * 1024
    TESTCASE_IMAGE_MAX_BYTES = 5 * 1024 * 1024

    # Identity provider (OAuth code exchange on /auth/callback)
    IDP_TOKEN_URL = os.getenv("IDP_TOKEN_URL", "http://localhost:54321/auth/v1/token")
    IDP_CLIENT_ID = os.getenv("IDP_CLIENT_ID", "")
    IDP_CLIENT_SECRET = os.getenv("IDP_CLIENT_SECRET", "")
    IDP_TIMEOUT = int(os.getenv("IDP_TIMEOUT", "10"))
    AUTH_REDIRECT_DEFAULT = os.getenv("AUTH_REDIRECT_DEFAULT", "/projects")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    _raw_db_url = os.getenv("DATABASE_URL", "")
    SQLALCHEMY_DATABASE_URI = (
        _raw_db_url.replace("postgres://", "postgresql://", 1) if _raw_db_url else _SQLITE_DEV
    )
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True} if not _raw_db_url else Config.SQLALCHEMY_ENGINE_OPTIONS


class TestingConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", _SQLITE_TEST)
    # In-memory SQLite runs on a static pool; sizing options do not apply
    SQLALCHEMY_ENGINE_OPTIONS = {}
    RATELIMIT_ENABLED = False
    STORAGE_URL = "http://storage.test/storage/v1"
    STORAGE_API_KEY = "test-key"
    IDP_TOKEN_URL = "http://idp.test/auth/v1/token"


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    # Railway/Heroku use postgres:// but SQLAlchemy 2.0 requires postgresql://
    _raw_db_url = os.getenv("DATABASE_URL", "")
    SQLALCHEMY_DATABASE_URI = _raw_db_url.replace("postgres://", "postgresql://", 1) if _raw_db_url else None
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")  # Must be set explicitly in production

    # Override engine options with PostgreSQL statement timeout
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 300,
        "pool_timeout": 20,
        "connect_args": {
            "options": "-c statement_timeout=30000",  # 30s query timeout
        },
    }

    def __init__(self):
        if not self.SQLALCHEMY_DATABASE_URI:
            raise RuntimeError("DATABASE_URL environment variable is required in production")
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY environment variable must be set in production")


# Configuration mapping: environment name -> config class
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
