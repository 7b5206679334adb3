import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from stock_checker.integrations.quote_proxy import DEFAULT_BASE_URL


class Settings(BaseModel):
    QUOTE_PROXY_BASE_URL: str = DEFAULT_BASE_URL
    QUOTE_PROXY_TIMEOUT_SEC: float = Field(default=5.0, gt=0)
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    API_HOST: str = "127.0.0.1"
    API_PORT: int = Field(default=8000, ge=1, le=65535)

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return str(value).strip().upper()

    @classmethod
    def from_env(cls) -> "Settings":
        raw = {
            "QUOTE_PROXY_BASE_URL": os.getenv("QUOTE_PROXY_BASE_URL"),
            "QUOTE_PROXY_TIMEOUT_SEC": os.getenv("QUOTE_PROXY_TIMEOUT_SEC"),
            "LOG_LEVEL": os.getenv("LOG_LEVEL"),
            "API_HOST": os.getenv("API_HOST"),
            "API_PORT": os.getenv("API_PORT"),
        }
        return cls.model_validate({k: v for k, v in raw.items() if v not in (None, "")})


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
