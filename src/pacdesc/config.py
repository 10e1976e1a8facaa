"""
Runtime settings, read from the environment (and a `.env` file if present).
"""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "PACDESC_"


class Settings(BaseModel):
    log_level: str = Field(default="WARNING", description="Logging level name for the CLI")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    encoding: str = Field(default="utf-8", description="Text encoding of archive members")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


def load_settings() -> Settings:
    """Build settings from `PACDESC_*` environment variables."""
    load_dotenv()
    values = {}
    for name in Settings.model_fields:
        env_value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if env_value is not None:
            values[name] = env_value
    return Settings(**values)
