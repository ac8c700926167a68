"""Settings for the core server FastAPI application."""

from __future__ import annotations

import os
from typing import List, Literal

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

# Search for the nearest .env so running from subdirectories still loads root config.
load_dotenv(find_dotenv(usecwd=True))


def _default_cors_origins() -> List[str]:
    raw = os.getenv("CORE_CORS_ALLOW_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class CoreSettings(BaseModel):
    """API metadata and runtime switches for the FastAPI app."""

    api_title: str = "Kollabs API"
    api_version: str = "0.1.0"
    app_env: Literal["development", "test", "production"] = Field(
        default_factory=lambda: os.getenv("APP_ENV", "development")
    )
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "3000")))
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL") or os.getenv("LOGURU_LEVEL") or "INFO"
    )
    cors_allow_origins: List[str] = Field(default_factory=_default_cors_origins)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


settings = CoreSettings()
