"""Environment-aware settings loader."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Dict, Type

from .settings import Settings, _env_flag


class DevelopmentSettings(Settings):
    """Settings tuned for local development (verbose logging, local SQLite)."""

    environment: str = "development"
    log_level: str = os.getenv("LOG_LEVEL", "DEBUG")


class ProductionSettings(Settings):
    """Settings tuned for production (JSON logs by default)."""

    environment: str = "production"
    use_json_logs: bool = bool(_env_flag("USE_JSON_LOGS", default=True))


class TestSettings(Settings):
    """Settings tuned for automated tests (test DB, no retry scheduling)."""

    environment: str = "test"
    SIDE_EFFECT_RETRY_ENABLED: bool = bool(
        _env_flag("SIDE_EFFECT_RETRY_ENABLED", default=False)
    )

    def model_post_init(self, __context) -> None:
        super().model_post_init(__context)
        if not self.database_url:
            object.__setattr__(self, "database_url", self.test_database_url)


ENVIRONMENTS: Dict[str, Type[Settings]] = {
    "development": DevelopmentSettings,
    "dev": DevelopmentSettings,
    "production": ProductionSettings,
    "prod": ProductionSettings,
    "test": TestSettings,
    "testing": TestSettings,
}


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance keyed by APP_ENV to avoid repeated disk/env reads."""
    env = os.getenv("APP_ENV", "production").lower()
    settings_cls = ENVIRONMENTS.get(env, ProductionSettings)
    return settings_cls()
