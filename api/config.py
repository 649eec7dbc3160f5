"""
Environment-aware configuration.
Secrets come from the environment (or .env); they are never baked in.
"""
import os
import secrets
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()  # Read .env if present


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///itineraries.db")
    SQLALCHEMY_ECHO = _env_flag("SQLALCHEMY_ECHO")

    # Access and refresh tokens are signed with different secrets
    JWT_SECRET = os.getenv("JWT_SECRET")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "itinerary-api")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "3600")))
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", "604800")))
    # When true a refresh token is deleted on redemption (exactly-once)
    REFRESH_TOKEN_SINGLE_USE = _env_flag("REFRESH_TOKEN_SINGLE_USE")

    LISTING_FANOUT_WORKERS = int(os.getenv("LISTING_FANOUT_WORKERS", "8"))

    # Unset secrets: None means refuse to start, a callable supplies a fallback
    SECRET_FALLBACK = None


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # Tokens will not survive a restart, which is fine for local work
    SECRET_FALLBACK = staticmethod(lambda: secrets.token_urlsafe(32))


class TestingConfig(BaseConfig):
    TESTING = True
    # File-backed: listing reads run on worker threads with their own connections
    DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///test-itineraries.db")
    JWT_SECRET = os.getenv("JWT_SECRET", "test-access-secret")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "test-refresh-secret")


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
