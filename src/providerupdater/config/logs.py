from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LoggingSettings(BaseModel):
    """Settings for the log output."""

    level: str = Field("INFO", description="Log level name.")
    log_file: Optional[Path] = Field(None, description="Optional file receiving a copy of the logs.")
    mask_sensitive: bool = Field(True, description="Mask credentials embedded in URLs.")

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level
