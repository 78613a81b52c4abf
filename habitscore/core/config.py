import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional

class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    CONFIG_STRICT: bool = False

    # Database
    DATABASE_URL: Optional[str] = None
    TEST_DATABASE_URL: Optional[str] = None

    # HTTP
    CORS_ALLOW_ORIGINS: str = "http://localhost:3000"  # comma-separated

    # Scoring
    RECALCULATE_MAX_DAYS: Optional[int] = None  # opt-in cap on backfill windows; unset means no cap

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
settings = Settings()


def cors_origins(settings_obj: Optional[Settings] = None) -> list[str]:
    cfg = settings_obj or settings
    return [origin.strip() for origin in cfg.CORS_ALLOW_ORIGINS.split(",") if origin.strip()]


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate required configuration.

    In strict mode raise RuntimeError; otherwise emit warnings only.
    Secrets are not logged, only missing keys.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("habitscore")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    required_keys = [
        "DATABASE_URL",
    ]

    missing = [key for key in required_keys if not getattr(cfg, key, None)]
    if missing:
        message = f"Missing required configuration: {', '.join(missing)}"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    max_days = getattr(cfg, "RECALCULATE_MAX_DAYS", None)
    if max_days is not None and max_days < 1:
        message = "RECALCULATE_MAX_DAYS must be at least 1"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    return True
