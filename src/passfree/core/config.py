from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", case_sensitive=True, extra="ignore"
    )

    # Application
    APP_NAME: str = "PassFree"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Passwordless magic-link authentication"
    DEBUG: bool = False
    APP_URL: str = "http://localhost:8000"

    # Token protection
    SECRET_KEY: str = Field(..., min_length=32)
    RETIRED_SECRET_KEYS: str | list[str] = []
    LOGIN_LINK_TTL_MINUTES: int = Field(default=15, gt=0)

    # Routes (mirrors the PassFree options of the hosting app)
    LOGIN_PATH: str = "/passfree/login"
    LOGOUT_PATH: str = "/passfree/logout"
    DEFAULT_REDIRECT_PATH: str = "/login"
    SUCCESS_REDIRECT_PATH: str = "/"
    PAGE_TITLE: str = "PassFree Login"
    CUSTOM_CSS_CLASS: str | None = None

    # Cookies
    CORRELATION_COOKIE_NAME: str = "passfree.correlation"
    SESSION_COOKIE_NAME: str = "passfree.session"
    SESSION_EXPIRE_MINUTES: int = 60 * 8
    COOKIE_SECURE: bool = True

    # Session JWT
    JWT_SECRET_KEY: str = Field(..., min_length=32)
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "passfree"
    JWT_AUDIENCE: str = "passfree-app"

    # Login authorization
    ALLOWED_EMAIL_DOMAINS: str | list[str] = []

    # Single-use links (needs Redis)
    SINGLE_USE_LINKS: bool = False
    REDIS_URL: str | None = None
    REDIS_MAX_CONNECTIONS: int = 10

    # Email delivery
    EMAIL_PROVIDER: str = "console"
    EMAIL_PROVIDER_API_KEY: str = ""
    EMAIL_SENDER: str = "no-reply@passfree.local"

    @field_validator("RETIRED_SECRET_KEYS", "ALLOWED_EMAIL_DOMAINS", mode="before")
    @classmethod
    def parse_lists(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def protection_keys(self) -> list[str]:
        """Current key first, then retired keys still accepted for unprotect."""
        retired = self.RETIRED_SECRET_KEYS
        if isinstance(retired, str):
            retired = [retired]
        return [self.SECRET_KEY, *retired]


# Global settings instance
try:
    settings = Settings()
except Exception as e:
    print(f"Error loading settings: {e}")
    raise e
