"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from ``DICELANG_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DICELANG_",
        case_sensitive=False,
        extra="ignore",
    )

    # Evaluation limits
    explode_limit: int = Field(default=100, ge=1)  # Explosions per dice term
    reroll_limit: int = Field(default=100, ge=1)  # Continuous-reroll draws per dice term
    max_dice: int = Field(default=1000, ge=1)
    max_sides: int = Field(default=10000, ge=1)
    max_depth: int = Field(default=50, ge=1, le=100)  # Nested parentheses

    # Raise on unrecognized characters instead of skipping them
    strict_lexing: bool = False

    # Debug
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience alias
settings = get_settings()
