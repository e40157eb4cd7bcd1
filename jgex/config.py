"""
Configuration management using Pydantic Settings.
Loads from environment variables and .env file.

The graph connection itself is described by a separate YAML file, see
``jgex.core.graph_config``.
"""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="JGEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    debug: bool = Field(default=False)

    # =========================================================================
    # INDEX CONFIGURATION
    # =========================================================================
    mixed_index_name: str = Field(
        default="search",
        description="Name of the index backend used for mixed indexes (index.<name>.backend)",
    )
    mixed_index_refresh_wait: float = Field(
        default=10.0,
        ge=0.0,
        description="Seconds to wait after loading data so mixed indexes can refresh",
    )

    # =========================================================================
    # RUN SEQUENCE
    # =========================================================================
    update_iterations: int = Field(default=3, ge=0)
    update_delay_min: float = Field(default=0.5, ge=0.0)
    update_delay_max: float = Field(default=1.0, ge=0.0)

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> "Settings":
        if self.update_delay_max < self.update_delay_min:
            raise ValueError("update_delay_max must not be lower than update_delay_min")
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses LRU cache to avoid re-reading .env file on every call.
    """
    return Settings()
