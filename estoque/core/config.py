"""Configuration management with pydantic-settings.

Provides type-safe configuration with environment variable validation.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    app_version: str = Field("0.3.0", description="Version reported by /metrics and OpenAPI")
    app_environment: str = Field("production", description="Deployment environment label")

    # === Logging ===
    log_level: str = Field("INFO", description="Root log level")
    log_json: bool = Field(True, description="Emit structured JSON log lines")
    log_file_path: str | None = Field(None, description="Rotating JSON log file (None = stdout only)")

    # === Replenishment defaults (used when a product has no stored config) ===
    replenishment_window_days: int = Field(90, gt=0, description="Sales analysis window (days)")
    replenishment_supplier_lead_days: int = Field(
        7, ge=0, description="Average supplier delivery time (days)"
    )
    replenishment_full_release_days: int = Field(
        3, ge=0, description="Time for a transfer to be released in Full (days)"
    )
    replenishment_safety_stock: int = Field(10, ge=0, description="Safety stock (units)")
    replenishment_min_coverage_days: int = Field(
        30, ge=1, description="Minimum coverage target (days)"
    )

    # === Snapshot source (exported by the marketplace sync process) ===
    replenishment_snapshot_path: str | None = Field(
        None, description="JSON or CSV export with stock and sales per product"
    )
    replenishment_snapshot_window_days: int = Field(
        90, gt=0, description="Window the exported sales totals were aggregated over"
    )
    replenishment_config_path: str | None = Field(
        None, description="JSON file for saved per-product configs (default: next to the export)"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        RuntimeError: If environment variables fail validation.

    """
    try:
        return Settings()
    except ValidationError as e:
        bad_fields = [str(error["loc"][0]).upper() for error in e.errors() if error["loc"]]

        error_msg = (
            f"Configuration error: invalid environment variables: "
            f"{', '.join(bad_fields)}\n"
            f"Please fix them in .env file or the process environment.\n"
            f"See .env.example for reference."
        )
        raise RuntimeError(error_msg) from e


__all__ = ["Settings", "get_settings"]
