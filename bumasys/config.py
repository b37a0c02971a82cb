"""
Bumasys
Configuration classes for Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name])
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

# Generate a random key for development; production MUST use a stable env var
_DEV_SECRET = secrets.token_hex(32)

JWT_SECRET_MIN_LENGTH = 10


class Config:
    """Base configuration shared across all environments."""

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    DEBUG = False
    TESTING = False

    # JWT
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    JWT_ACCESS_EXPIRES = int(os.getenv("JWT_ACCESS_EXPIRES", "3600"))      # 60 minutes
    JWT_REFRESH_EXPIRES = int(os.getenv("JWT_REFRESH_EXPIRES", "604800"))  # 7 days
    BCRYPT_ROUNDS = 12

    # JSON datastore
    STORE_BACKEND = os.getenv("STORE_BACKEND", "json")
    DATA_DIR = os.getenv("DATA_DIR", os.path.join(basedir, "data"))
    AUTH_DB_FILE = os.getenv("AUTH_DB_FILE", "auth.json")
    DATA_DB_TAG = os.getenv("DATA_DB_TAG", "default")

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True


class TestingConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    STORE_BACKEND = "memory"
    JWT_SECRET_KEY = "testing-jwt-secret-0123456789abcdef"
    # bcrypt's minimum cost keeps the auth tests fast
    BCRYPT_ROUNDS = 4


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")  # Must be set explicitly in production

    def __init__(self):
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY environment variable must be set in production")
        if not os.getenv("JWT_SECRET_KEY"):
            raise RuntimeError("JWT_SECRET_KEY environment variable must be set in production")


def validate_config(app_config) -> None:
    """Fail fast on settings the services cannot work with."""
    secret = app_config.get("JWT_SECRET_KEY") or ""
    if len(secret) < JWT_SECRET_MIN_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET_KEY must be at least {JWT_SECRET_MIN_LENGTH} characters long"
        )
    if app_config.get("STORE_BACKEND") not in ("json", "memory"):
        raise RuntimeError("STORE_BACKEND must be 'json' or 'memory'")


# Configuration mapping: environment name -> config class
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
