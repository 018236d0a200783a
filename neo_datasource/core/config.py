"""
Centralised application settings loaded from environment / .env file.
"""
from __future__ import annotations

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ── Backend ──────────────────────────────────────────
    neo_address: str = "http://127.0.0.1:5654"
    neo_timeout_seconds: float = 10.0

    # ── Catalog cache ────────────────────────────────────
    catalog_cache_ttl_seconds: float = 300
    catalog_cache_max_size: int = 256

    # ── App ──────────────────────────────────────────────
    api_port: int = 8000
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
