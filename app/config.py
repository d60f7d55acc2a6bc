# app/config.py
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class Settings:
    database_url: str
    default_per_page: int
    log_level: str
    cors_origins: List[str]


@lru_cache()
def get_settings() -> Settings:
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        database_url=os.getenv("DATABASE_URL") or "sqlite:///./storefront.db",
        default_per_page=_int_env("DEFAULT_PER_PAGE", 12),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )
