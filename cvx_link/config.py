"""Application configuration using Pydantic Settings."""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .protocol.constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT_MS

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Settings loaded from CVX_* environment variables and the .env file."""

    # Controller endpoint (Network Settings >> Non-Procedural on the CV-X)
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)

    # Check sequence targets
    target_sdcard: int = Field(default=1, ge=1, le=2)
    target_program: int = Field(default=0, ge=0, le=999)
    target_exec_no: int = Field(default=0, ge=0, le=99)

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    model_config = {"env_prefix": "CVX_", "env_file": str(_ENV_FILE)}


settings = Settings()
