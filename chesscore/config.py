"""Centralized application configuration.

Settings are read from ``CHESSCORE_``-prefixed environment variables or a
``.env.chesscore`` file; every field has a default so nothing is required.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHESSCORE_",
        env_file=".env.chesscore",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Search
    search_depth: int = Field(default=3, ge=1)
    max_depth: int = Field(default=5, ge=1)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # HTTP server
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)
    max_games: int = Field(default=256, ge=1)

    @property
    def default_depth(self) -> int:
        """Configured search depth, capped at ``max_depth``."""
        return min(self.search_depth, self.max_depth)


@lru_cache
def get_settings() -> Settings:
    return Settings()
