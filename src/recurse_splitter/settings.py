"""
Конфигурация Recurse Splitter.

Все настройки берутся из переменных окружения (или .env).
Порог длины сегмента сюда НЕ выносится - он фиксирован в segmenter.
"""

import json
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Настройки сервиса из ENV."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "recurse-splitter"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Agent identity
    AGENT_ID: str = ""
    AGENT_VERSION: str = "0.1.0"
    ARKE_AGENT_KEY: str = ""

    # Endpoint verification
    VERIFICATION_TOKEN: str = ""
    ARKE_VERIFY_AGENT_ID: str = ""

    # Record store
    STORE_BACKEND: str = "arke"  # "arke" | "memory"
    ARKE_API_BASE: str = "https://arke-v1.arke.institute"
    ARKE_NETWORK: str = "test"  # "test" | "main"
    # Хосты, кроме ARKE_API_BASE, которым можно отправлять ARKE_AGENT_KEY
    ARKE_TRUSTED_HOSTS: List[str] = []
    REQUEST_TIMEOUT: float = 30.0

    # Driver / job log
    DRIVER_MAX_ROUNDS: int = 20
    JOB_LOG_RETENTION: int = 1000

    @field_validator("ARKE_API_BASE", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Базовый URL без завершающего слэша."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("ARKE_TRUSTED_HOSTS", mode="before")
    @classmethod
    def parse_host_list(cls, v):
        """Парсинг JSON строки или comma-separated в список."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [x.strip() for x in v.split(",") if x.strip()]
        return v

    @field_validator("ARKE_NETWORK")
    @classmethod
    def check_network(cls, v):
        if v not in ("test", "main"):
            raise ValueError(f"ARKE_NETWORK must be 'test' or 'main', got {v!r}")
        return v


def get_settings() -> Settings:
    """Получить настройки из ENV."""
    return Settings()


settings = get_settings()
