"""Application settings loaded from environment with safe fallbacks.

Environment precedence:
- Loads `.env` from the repo root before reading process env vars.
- Booleans go through `_env_flag` so `"0"/"false"` work.
- CORS is normalized from `CORS_ORIGINS` (comma-separated).

Key expectations (defaults in parentheses):
- `APP_ENV` controls settings class selection (`production` default).
- Database: `DATABASE_URL`, or `TEST_DATABASE_URL` when running tests; falls back to local SQLite.
- Auth: `SECRET_KEY` / `ALGORITHM` (`HS256`) sign the bearer tokens resolved by `app.oauth2`.
- Celery: `CELERY_BROKER_URL` / `CELERY_BACKEND_URL` back the side-effect replay worker.
- Contribution policy knobs: `NOTIFY_OWNER_ON_CONTRIBUTION_REQUEST` (false),
  `CONTRIBUTION_MESSAGE_MAX_LENGTH` (2000), `CONTRIBUTION_SERIALIZE_CREATES` (true).
- Matching: `MATCH_DEFAULT_LIMIT` (10), `MATCH_MAX_LIMIT` (50).
- Side effects: `SIDE_EFFECT_RETRY_ENABLED` (true), `SIDE_EFFECT_MAX_ATTEMPTS` (5),
  `SIDE_EFFECT_RETRY_DELAY_SECONDS` (30).
"""

import logging
import os
from pathlib import Path
from typing import ClassVar, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# (__file__ is app/core/config/settings.py, so the repo root is three levels up)
BASE_DIR = Path(__file__).resolve().parents[3]


load_dotenv(BASE_DIR / ".env")

logger = logging.getLogger(__name__)


def _env_flag(name: str, *, default: Optional[bool] = False) -> Optional[bool]:
    """
    Helper to parse boolean-like environment variables.
    """
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Behavior highlights:
    - Loads `.env` at repo root, then lets process env override.
    - Refuses non-test database URLs when asked for the test database.
    - Feature toggles parsed via `_env_flag` to accept common truthy/falsey strings.
    """

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: Optional[str] = os.getenv("DATABASE_URL")
    test_database_url: Optional[str] = os.getenv("TEST_DATABASE_URL")
    environment: str = os.getenv("APP_ENV", "production")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir: Optional[str] = os.getenv("LOG_DIR")
    use_json_logs: bool = bool(_env_flag("USE_JSON_LOGS", default=False))
    cors_allow_origins: list[str] = []

    secret_key: str = os.getenv("SECRET_KEY", "insecure-development-key")
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 30))

    CELERY_BROKER_URL: str = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    CELERY_BACKEND_URL: str = os.getenv(
        "CELERY_BACKEND_URL", "redis://localhost:6379/0"
    )

    # Candidate-filed requests only write an activity unless this is switched on.
    NOTIFY_OWNER_ON_CONTRIBUTION_REQUEST: bool = bool(
        _env_flag("NOTIFY_OWNER_ON_CONTRIBUTION_REQUEST", default=False)
    )
    CONTRIBUTION_MESSAGE_MAX_LENGTH: int = int(
        os.getenv("CONTRIBUTION_MESSAGE_MAX_LENGTH", 2000)
    )
    CONTRIBUTION_SERIALIZE_CREATES: bool = bool(
        _env_flag("CONTRIBUTION_SERIALIZE_CREATES", default=True)
    )

    MATCH_DEFAULT_LIMIT: int = int(os.getenv("MATCH_DEFAULT_LIMIT", 10))
    MATCH_MAX_LIMIT: int = int(os.getenv("MATCH_MAX_LIMIT", 50))

    SIDE_EFFECT_RETRY_ENABLED: bool = bool(
        _env_flag("SIDE_EFFECT_RETRY_ENABLED", default=True)
    )
    SIDE_EFFECT_MAX_ATTEMPTS: int = int(os.getenv("SIDE_EFFECT_MAX_ATTEMPTS", 5))
    SIDE_EFFECT_RETRY_DELAY_SECONDS: int = int(
        os.getenv("SIDE_EFFECT_RETRY_DELAY_SECONDS", 30)
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        env_override = os.getenv("APP_ENV")
        if env_override:
            object.__setattr__(self, "environment", env_override)

        cors_env = os.getenv("CORS_ORIGINS")
        if cors_env:
            origins = [
                origin.strip() for origin in cors_env.split(",") if origin.strip()
            ]
        elif self.cors_allow_origins:
            origins = self.cors_allow_origins
        else:
            origins = ["http://localhost:3000"]
        object.__setattr__(self, "cors_allow_origins", origins)

        if (
            self.environment.lower() == "production"
            and self.secret_key == "insecure-development-key"
        ):
            logger.warning("SECRET_KEY is not set; using the development signing key.")

    def get_database_url(self, *, use_test: bool = False) -> str:
        """Resolve the SQLAlchemy database URL for runtime or tests.

        Priority: `TEST_DATABASE_URL` when tests are requested, then `DATABASE_URL`,
        finally a local SQLite file. Test URLs for server databases must name a
        dedicated `_test` database to avoid destructive writes to real data.
        """
        if use_test:
            test_url = self.test_database_url or self.database_url
            if test_url:
                if test_url.startswith("sqlite"):
                    return test_url
                if "_test" not in test_url:
                    raise ValueError(
                        "Test database URL must point to a dedicated test database (contains '_test')."
                    )
                return test_url
            return "sqlite:///./tests/test.db"

        if self.database_url:
            return self.database_url
        return "sqlite:///./ideahub.db"


__all__ = ["Settings", "BASE_DIR"]
