"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for ReqRes Bridge happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  Explicit threading: the API lifespan stores the Settings instance on
      app.state.settings and route handlers pass it into the login and import
      flows as an argument. Nothing below api/ reaches for process-wide state.

  @model_validator(mode="after"): normalizes the identity provider base URL
      and warns at startup when it is missing. A missing REQRES_URL is not a
      startup failure: health, stats and local CRUD keep working, while login
      and import fail fast with Misconfigured.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
identity/, users/, or posts/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("reqresbridge.config")

DEFAULT_DATABASE_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'reqresbridge.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.

    Environment variable name mapping: field names are uppercased automatically.
    E.g. `reqres_url` reads from REQRES_URL, `database_url` from DATABASE_URL.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"  # nosec B104 -- container entry point binds all interfaces
    port: int = 8080

    # ------------------------------------------------------------------
    # Identity provider (ReqRes)
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured". Login and import
    # raise Misconfigured when they see it.
    reqres_url: str = ""
    reqres_api_key: str = ""
    # Seconds. Applies to the authentication call.
    reqres_timeout: float = Field(default=5.0, gt=0)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    database_url: str = DEFAULT_DATABASE_URL

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["*"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def normalize_reqres_url(self) -> "Settings":
        """Strip whitespace and any trailing slash so paths can be appended with f"{base}/login"."""
        self.reqres_url = self.reqres_url.strip().rstrip("/")
        if not self.reqres_url:
            logger.warning("REQRES_URL is not set -- login and user import will fail until it is configured.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables, or construct Settings(...)
    directly and place it on app.state.settings.
    """
    return Settings()
