"""
Environment-aware configuration.
Config classes are loaded into app.config; AuthSettings is the explicit
struct handed to the token and auth services at startup.
"""
import os
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()  # Read .env if present


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///video-platform.db")
    SQL_ECHO = False

    # Two token classes, two secrets, two lifetimes
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "dev-access-secret-change-me-0123456789")
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "dev-refresh-secret-change-me-0123456789")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "900")))
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", "864000")))
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "video-platform-api")

    # Attributes applied to the accessToken / refreshToken cookie pair
    COOKIE_SECURE = os.getenv("COOKIE_SECURE", "true").lower() in ("1", "true", "yes")
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Strict")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True
    SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    ACCESS_TOKEN_SECRET = "test-access-secret-for-automation-only-0001"
    REFRESH_TOKEN_SECRET = "test-refresh-secret-for-automation-only-0002"
    ACCESS_TOKEN_EXPIRES = timedelta(minutes=15)
    REFRESH_TOKEN_EXPIRES = timedelta(days=1)
    COOKIE_SECURE = False


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


@dataclass(frozen=True)
class AuthSettings:
    access_token_secret: str
    refresh_token_secret: str
    access_token_ttl: timedelta
    refresh_token_ttl: timedelta
    algorithm: str = "HS256"
    issuer: str = "video-platform-api"

    def __post_init__(self):
        if not self.access_token_secret or not self.refresh_token_secret:
            raise ValueError("Both ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be set")
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError("Access and refresh tokens must be signed with different secrets")

    @classmethod
    def from_config(cls, config) -> "AuthSettings":
        """Build from a Flask config mapping."""
        return cls(
            access_token_secret=config["ACCESS_TOKEN_SECRET"],
            refresh_token_secret=config["REFRESH_TOKEN_SECRET"],
            access_token_ttl=config["ACCESS_TOKEN_EXPIRES"],
            refresh_token_ttl=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "video-platform-api"),
        )
