"""
Configuration.

Values come from environment variables (prefixed with PEER_CHESS_), falling back to the defaults below.
"""

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "PEER_CHESS_"


class Settings(BaseModel):
    port: int = Field(default=5000, ge=1, le=65535)
    database_url: str = "sqlite:///peer_chess.db"
    log_level: str = "WARNING"
    save_extension: str = ".jcg"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @field_validator("save_extension")
    @classmethod
    def validate_save_extension(cls, value: str) -> str:
        return value if value.startswith(".") else f".{value}"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build the settings from (a copy of) the process environment"""
        environ = dict(os.environ) if environ is None else environ
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            env_name = f"{ENV_PREFIX}{name.upper()}"
            if env_name in environ:
                values[name] = environ[env_name]
        return cls(**values)


def get_settings() -> Settings:
    return Settings.from_env()
