"""Configuration Management."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="UIGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Version history
    version_capacity: int = Field(default=50, gt=0, description="Max stored versions (FIFO)")
    default_history_limit: int = Field(default=10, gt=0, description="Default version list size")

    # Request validation
    min_create_length: int = Field(default=10, ge=0, description="Min message length for create")
    max_message_length: int = Field(default=10_000, gt=0, description="Max message length")
    sanitize_max_length: int = Field(default=5_000, gt=0, description="Sanitized input length")

    # Plan validation
    max_plan_depth: int = Field(default=20, gt=0, le=32, description="Max component nesting depth")

    # Diffing
    diff_preview_limit: int = Field(default=10, gt=0, description="Lines kept per diff list")

    # Markup manifest
    ui_library_module: str = Field(default="my-ui-library", description="Component import source")
    allowed_imports: list[str] = Field(
        default_factory=lambda: ["react", "my-ui-library"],
        description="Module sources generated markup may import",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
