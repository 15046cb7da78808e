from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..constants import DEFAULT_ZIP_URL


class UpdaterSettings(BaseModel):
    """Settings for a single provider update run."""

    zip_url: str = Field(DEFAULT_ZIP_URL, description="URL of the zip archive holding the OpenVPN profiles.")
    min_servers: int = Field(1, description="Minimum number of servers an update must produce.")
    timeout: Optional[float] = Field(
        120.0, description="Overall timeout of an update in seconds. None to disable."
    )

    @field_validator("min_servers")
    @classmethod
    def _check_min_servers(cls, value: int) -> int:
        if value < 0:
            raise ValueError("min_servers cannot be negative")
        return value
