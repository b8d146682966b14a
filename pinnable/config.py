# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ("PinnableSettings", "settings")


class PinnableSettings(BaseSettings, frozen=True):
    """Package settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    PINNABLE_LOG_LEVEL: Literal[
        "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
    ] = Field("WARNING", description="Level of the package logger")

    PINNABLE_LOG_EVENTS: bool = Field(
        False, description="Log every emitted event at DEBUG level"
    )

    PINNABLE_CHANGE_PATH_PREFIX: str = Field(
        "items",
        min_length=1,
        description="Prefix of bubbled item change paths",
    )

    @field_validator("PINNABLE_LOG_LEVEL", mode="before")
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    def change_path(self, index: int, name: str) -> str:
        """Serialize an item change location, e.g. ``items.3.name``."""
        return f"{self.PINNABLE_CHANGE_PATH_PREFIX}.{index}.{name}"


settings = PinnableSettings()
